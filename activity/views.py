from datetime import datetime

from django.utils import timezone
from django.views.decorators.http import require_GET

from members.decorators import admin_required_json, login_required_json
from utils.api import api_view, get_pagination, paginate, success_response
from utils.exceptions import ValidationFailed

from .models import AdminActionLog
from .operations import operation_status as collect_operations
from .services import summarize_description


def _parse_date(value, field):
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError as exc:
        raise ValidationFailed(f"รูปแบบวันที่ {field} ไม่ถูกต้อง (YYYY-MM-DD)") from exc


@require_GET
@admin_required_json
@api_view
def recent_activities(request):
    logs = AdminActionLog.objects.select_related("admin")

    action_type = request.GET.get("actionType")
    if action_type:
        logs = logs.filter(action_type=action_type)
    if request.GET.get("dateFrom"):
        logs = logs.filter(created_at__date__gte=_parse_date(request.GET["dateFrom"], "dateFrom"))
    if request.GET.get("dateTo"):
        logs = logs.filter(created_at__date__lte=_parse_date(request.GET["dateTo"], "dateTo"))

    page, limit = get_pagination(request)
    items, pagination = paginate(logs, page, limit)
    data = [
        {
            "id": log.pk,
            "actionType": log.action_type,
            "actionLabel": log.get_action_type_display(),
            "targetId": log.target_id,
            "summary": summarize_description(log.description),
            "adminName": log.admin.display_name if log.admin else None,
            "ipAddress": log.ip_address,
            "createdAt": timezone.localtime(log.created_at).isoformat(),
        }
        for log in items
    ]
    return success_response(data=data, pagination=pagination)


@require_GET
@login_required_json
@api_view
def operation_status(request):
    return success_response(operations=collect_operations(request.user))
