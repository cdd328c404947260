"""
Rejected applications: conversation between member and admin, resubmission
and cancellation.
"""

import logging

from django.db import transaction
from django.db.models import F
from django.utils import timezone

from activity.models import AdminActionLog
from activity.services import log_admin_action, log_user_action
from notifications.models import Notification
from notifications.services import create_notification
from utils.exceptions import NotFound, ValidationFailed

from .models import (
    ApplicationSnapshot,
    ApplicationStatus,
    ApplicationStatusLog,
    AuthorizedSignatory,
    Rejection,
    RejectionConversation,
)
from .serializers import application_detail, conversation_message, rejection_summary
from .submission import (
    ensure_identifier_available,
    main_fields,
    resolve_identifier,
    validate_signatory,
    write_sections,
)

logger = logging.getLogger(__name__)

RESUBMITTED_STATUS_NOTE = "ส่งใบสมัครใหม่หลังแก้ไข"


def list_rejections(user, status=None):
    rejections = Rejection.objects.filter(user=user).select_related("application")
    if status:
        rejections = rejections.filter(status=status)
    return [rejection_summary(r) for r in rejections]


def _get_rejection(pk, user=None, for_update=False):
    rejections = Rejection.objects.select_related("application", "application__user")
    if for_update:
        rejections = rejections.select_for_update()
    if user is not None:
        rejections = rejections.filter(user=user)
    rejection = rejections.filter(pk=pk).first()
    if rejection is None:
        raise NotFound("ไม่พบข้อมูลการปฏิเสธ")
    return rejection


def rejection_detail(user, pk, as_admin=False):
    """Full rejection view. Opening it marks the other side's messages read."""
    with transaction.atomic():
        rejection = _get_rejection(pk, user=None if as_admin else user, for_update=True)
        if as_admin:
            rejection.conversations.filter(
                sender_type=RejectionConversation.SENDER_MEMBER, is_read=False
            ).update(is_read=True)
            rejection.unread_admin_count = 0
            rejection.save(update_fields=["unread_admin_count"])
        else:
            rejection.conversations.filter(
                sender_type=RejectionConversation.SENDER_ADMIN, is_read=False
            ).update(is_read=True)
            rejection.unread_member_count = 0
            rejection.save(update_fields=["unread_member_count"])

    return {
        **rejection_summary(rejection),
        "application": application_detail(rejection.application),
        "snapshot": rejection.snapshot.data if rejection.snapshot else None,
        "conversations": [
            conversation_message(m) for m in rejection.conversations.select_related("sender")
        ],
    }


def add_conversation_message(request, sender, pk, message, as_admin=False):
    message = (message or "").strip()
    if not message:
        raise ValidationFailed("กรุณาระบุข้อความ")

    with transaction.atomic():
        rejection = _get_rejection(pk, user=None if as_admin else sender, for_update=True)
        now = timezone.now()
        entry = RejectionConversation.objects.create(
            rejection=rejection,
            sender_type=(
                RejectionConversation.SENDER_ADMIN if as_admin else RejectionConversation.SENDER_MEMBER
            ),
            sender=sender,
            message=message,
            created_at=now,
        )
        counter = "unread_member_count" if as_admin else "unread_admin_count"
        Rejection.objects.filter(pk=rejection.pk).update(
            **{counter: F(counter) + 1, "last_conversation_at": now}
        )
        if as_admin:
            log_admin_action(
                request,
                sender,
                AdminActionLog.ACTION_REJECTION_MESSAGE,
                rejection.application_id,
                {"rejectionId": rejection.pk, "message": message},
            )

    if as_admin:
        application = rejection.application
        create_notification(
            rejection.user,
            Notification.TYPE_MEMBERSHIP_APPLICATION,
            f"มีข้อความใหม่จากเจ้าหน้าที่เกี่ยวกับใบสมัครของ {application.display_name}",
            link=f"/dashboard?tab=status&rejectionId={rejection.pk}",
        )
    return conversation_message(entry)


def _clear_sections(application):
    application.addresses.all().delete()
    application.contact_persons.all().delete()
    application.representatives.all().delete()
    application.business_types.all().delete()
    application.products.all().delete()
    application.industry_groups.all().delete()
    application.province_chapters.all().delete()
    AuthorizedSignatory.objects.filter(application=application).delete()


def _apply_corrections(application, data):
    validate_signatory(data)
    identifier = resolve_identifier(application.membership_type, data)
    ensure_identifier_available(application.membership_type, identifier, exclude_pk=application.pk)

    fields = main_fields(application.membership_type, data)
    if application.is_individual:
        fields["id_card_number"] = identifier
    else:
        fields["tax_id"] = identifier
    for name, value in fields.items():
        setattr(application, name, value)
    application.save()

    _clear_sections(application)
    write_sections(application, data)


def resubmit(request, user, pk, comment="", data=None):
    """
    Send a rejected application back for review.

    ``data`` holds the corrected form when the member edited it; the
    application's sections are rebuilt from it. The rejection is resolved
    and the application moves to status 3.
    """
    comment = (comment or "").strip()
    with transaction.atomic():
        rejection = _get_rejection(pk, user=user, for_update=True)
        if not rejection.is_open:
            raise ValidationFailed("รายการนี้ได้รับการดำเนินการแล้ว")
        application = rejection.application
        if application.status != ApplicationStatus.REJECTED:
            raise ValidationFailed("ใบสมัครนี้ไม่อยู่ในสถานะที่สามารถส่งใหม่ได้")

        if data:
            _apply_corrections(application, data)

        ApplicationSnapshot.objects.create(
            application=application,
            snapshot_type=ApplicationSnapshot.TYPE_RESUBMISSION,
            data=application_detail(application),
            created_by=user,
        )
        now = timezone.now()
        if comment:
            RejectionConversation.objects.create(
                rejection=rejection,
                sender_type=RejectionConversation.SENDER_MEMBER,
                sender=user,
                message=comment,
                created_at=now,
            )
            rejection.unread_admin_count += 1
            rejection.last_conversation_at = now

        application.mark_resubmitted()
        rejection.status = Rejection.STATUS_RESOLVED
        rejection.resolved_at = now
        rejection.save()
        ApplicationStatusLog.objects.create(
            application=application,
            status=ApplicationStatus.RESUBMITTED,
            note=comment or RESUBMITTED_STATUS_NOTE,
            created_by=user,
        )

    log_user_action(
        request,
        user,
        f"{application.membership_type.upper()}_membership_resubmit",
        f"{application.identifier} - {application.display_name} (ครั้งที่ {application.resubmission_count})",
    )
    logger.info("User %s resubmitted application %s", user.pk, application.pk)
    return application


def cancel_rejection(request, user, pk):
    with transaction.atomic():
        rejection = _get_rejection(pk, user=user, for_update=True)
        if not rejection.is_open:
            raise ValidationFailed("รายการนี้ได้รับการดำเนินการแล้ว")
        rejection.status = Rejection.STATUS_CANCELLED
        rejection.resolved_at = timezone.now()
        rejection.save(update_fields=["status", "resolved_at"])

    log_user_action(
        request,
        user,
        "membership_rejection_cancel",
        f"{rejection.application.identifier} - {rejection.application.display_name}",
    )
    return rejection
