from django.http import HttpResponseRedirect
from django.shortcuts import get_object_or_404
from django.utils import timezone
from django.views.decorators.http import require_GET, require_POST

from members.decorators import login_required_json
from utils.api import get_pagination, paginate, success_response
from utils.security import get_safe_redirect_url

from .helpers import DEFAULT_LINK, resolve_notification_link, serialize_notification
from .models import Notification


def _visible(request):
    return Notification.objects.filter(user=request.user, dismissed=False)


@require_GET
@login_required_json
def notifications_list(request):
    notifications = _visible(request)
    if request.GET.get("unread") in ("1", "true"):
        notifications = notifications.filter(read=False)
    page, limit = get_pagination(request)
    items, pagination = paginate(notifications, page, limit)
    return success_response(
        data=[serialize_notification(n) for n in items],
        pagination=pagination,
        unreadCount=_visible(request).filter(read=False).count(),
    )


@require_GET
@login_required_json
def unread_count(request):
    return success_response(count=_visible(request).filter(read=False).count())


@require_POST
@login_required_json
def mark_read(request, pk):
    notification = get_object_or_404(Notification, pk=pk, user=request.user)
    notification.mark_read()
    return success_response(notification=serialize_notification(notification))


@require_POST
@login_required_json
def mark_all_read(request):
    updated = _visible(request).filter(read=False).update(read=True, read_at=timezone.now())
    return success_response(updated=updated)


@require_POST
@login_required_json
def dismiss_notification(request, pk):
    notification = get_object_or_404(Notification, pk=pk, user=request.user)
    notification.dismissed = True
    notification.save(update_fields=["dismissed"])
    return success_response(message="ลบการแจ้งเตือนเรียบร้อยแล้ว")


@require_GET
@login_required_json
def open_notification(request, pk):
    """Mark the notification read and redirect to its target inside the portal."""
    notification = get_object_or_404(Notification, pk=pk, user=request.user)
    notification.mark_read()
    target = get_safe_redirect_url(
        resolve_notification_link(notification), default=DEFAULT_LINK, request=request
    )
    return HttpResponseRedirect(target)
