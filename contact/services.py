"""Contact form messages, member follow-ups and admin replies."""

import logging

from django.core.exceptions import ValidationError
from django.core.validators import validate_email
from django.db import transaction
from django.db.models import Count, Q
from django.utils import timezone

from activity.models import AdminActionLog
from activity.services import log_admin_action, log_user_action
from notifications.models import Notification
from notifications.services import create_notification
from utils.exceptions import NotFound, ValidationFailed
from utils.security import get_client_ip

from . import emails
from .models import ContactMessage, ContactMessageReply, ContactMessageResponse

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("name", "email", "subject", "message")


def _dt(value):
    return value.isoformat() if value else None


def serialize_message(message):
    return {
        "id": message.pk,
        "userId": message.user_id,
        "isGuest": message.is_guest,
        "name": message.name,
        "email": message.email,
        "phone": message.phone,
        "subject": message.subject,
        "message": message.message,
        "status": message.status,
        "statusLabel": message.get_status_display(),
        "adminResponse": message.admin_response,
        "readAt": _dt(message.read_at),
        "repliedAt": _dt(message.replied_at),
        "createdAt": _dt(message.created_at),
    }


def conversation_thread(message):
    """Original message, admin responses and replies ordered by time."""
    thread = [
        {
            "type": "original",
            "text": message.message,
            "author": message.name,
            "createdAt": message.created_at,
        }
    ]
    for response in message.responses.select_related("admin"):
        thread.append(
            {
                "type": "admin_response",
                "text": response.response_text,
                "author": response.admin.display_name if response.admin else "ผู้ดูแลระบบ",
                "createdAt": response.created_at,
            }
        )
    for reply in message.replies.select_related("user"):
        from_member = message.user_id is not None and reply.user_id == message.user_id
        thread.append(
            {
                "type": "user_reply" if from_member else "admin_reply",
                "text": reply.reply_text,
                "author": reply.user.display_name if reply.user else message.name,
                "createdAt": reply.created_at,
            }
        )
    thread.sort(key=lambda item: item["createdAt"])
    for item in thread:
        item["createdAt"] = _dt(item["createdAt"])
    return thread


def submit_message(request, user, data):
    values = {field: (data.get(field) or "").strip() for field in REQUIRED_FIELDS}
    if user is not None:
        values["name"] = values["name"] or user.display_name
        values["email"] = values["email"] or user.email
    missing = [field for field in REQUIRED_FIELDS if not values[field]]
    if missing:
        raise ValidationFailed("กรุณากรอกข้อมูลให้ครบถ้วน", missingFields=missing)
    try:
        validate_email(values["email"])
    except ValidationError as exc:
        raise ValidationFailed("รูปแบบอีเมลไม่ถูกต้อง") from exc

    message = ContactMessage.objects.create(
        user=user,
        phone=(data.get("phone") or "").strip(),
        ip_address=get_client_ip(request),
        **values,
    )
    log_user_action(request, user, "contact_message_submit", f"ส่งข้อความติดต่อเรื่อง: {message.subject}")
    logger.info("Contact message %s received from %s", message.pk, message.email)
    return message


def list_my_messages(user):
    return ContactMessage.objects.filter(user=user).prefetch_related("responses", "replies")


def member_reply(request, user, pk, text):
    text = (text or "").strip()
    if not text:
        raise ValidationFailed("กรุณาระบุข้อความตอบกลับ")
    with transaction.atomic():
        message = ContactMessage.objects.select_for_update().filter(pk=pk, user=user).first()
        if message is None:
            raise NotFound("ไม่พบข้อความติดต่อ")
        if message.status == ContactMessage.STATUS_CLOSED:
            raise ValidationFailed("ข้อความนี้ถูกปิดแล้ว ไม่สามารถตอบกลับได้")
        reply = ContactMessageReply.objects.create(message=message, user=user, reply_text=text)
        message.status = ContactMessage.STATUS_UNREAD
        message.save(update_fields=["status", "updated_at"])
    log_user_action(request, user, "contact_message_reply", f"ตอบกลับข้อความติดต่อเรื่อง: {message.subject}")
    return reply


#########################
# Admin side


def list_messages(status=None, search=""):
    messages = ContactMessage.objects.select_related("user")
    if status:
        messages = messages.filter(status=status)
    if search:
        messages = messages.filter(
            Q(name__icontains=search)
            | Q(email__icontains=search)
            | Q(subject__icontains=search)
            | Q(message__icontains=search)
        )
    return messages


def message_stats():
    counts = ContactMessage.objects.aggregate(
        total=Count("id"),
        guest=Count("id", filter=Q(user__isnull=True)),
        member=Count("id", filter=Q(user__isnull=False)),
        **{status: Count("id", filter=Q(status=status)) for status in ContactMessage.STATUSES},
    )
    return counts


def _get_message(pk, for_update=False):
    messages = ContactMessage.objects.select_related("user")
    if for_update:
        messages = messages.select_for_update()
    message = messages.filter(pk=pk).first()
    if message is None:
        raise NotFound("ไม่พบข้อความติดต่อ")
    return message


def message_detail(request, admin, pk):
    """Return the message and its thread; an unread message becomes read."""
    with transaction.atomic():
        message = _get_message(pk, for_update=True)
        if message.status == ContactMessage.STATUS_UNREAD:
            message.status = ContactMessage.STATUS_READ
            message.read_by = admin
            message.read_at = timezone.now()
            message.save(update_fields=["status", "read_by", "read_at", "updated_at"])
            log_admin_action(
                request,
                admin,
                AdminActionLog.ACTION_CONTACT_READ,
                message.pk,
                {"subject": message.subject, "email": message.email},
            )
    return {**serialize_message(message), "thread": conversation_thread(message)}


def reply(request, admin, pk, text, direct=False, admin_response=""):
    """
    Answer a contact message.

    A normal reply is stored as an admin response and emailed to the sender.
    A ``direct`` reply is posted into the member's own thread instead and
    only announced by notification.
    """
    text = (text or "").strip()
    if not text:
        raise ValidationFailed("กรุณาระบุข้อความตอบกลับ")

    with transaction.atomic():
        message = _get_message(pk, for_update=True)
        if direct:
            ContactMessageReply.objects.create(message=message, user=admin, reply_text=text)
            summary = text if len(text) <= 50 else f"{text[:50]}..."
            ContactMessageResponse.objects.create(
                message=message,
                admin=admin,
                response_text=admin_response or f"ตอบกลับโดยตรงถึงผู้ใช้: {summary}",
            )
        else:
            ContactMessageResponse.objects.create(message=message, admin=admin, response_text=text)

        message.status = ContactMessage.STATUS_REPLIED
        message.admin_response = True
        message.replied_by = admin
        message.replied_at = timezone.now()
        message.save(
            update_fields=["status", "admin_response", "replied_by", "replied_at", "updated_at"]
        )
        log_admin_action(
            request,
            admin,
            AdminActionLog.ACTION_CONTACT_DIRECT_REPLY if direct else AdminActionLog.ACTION_CONTACT_REPLY,
            message.pk,
            {
                "subject": message.subject,
                "reply": text if len(text) <= 100 else f"{text[:100]}...",
                "email": message.email,
                "userId": message.user_id,
            },
        )

    email_sent = False
    if message.user is not None:
        if direct:
            create_notification(
                message.user,
                Notification.TYPE_CONTACT_DIRECT_REPLY,
                f'ข้อความติดต่อของคุณเรื่อง "{message.subject}" ได้รับการตอบกลับโดยตรงแล้ว',
                link=f"/dashboard?tab=contact&messageId={message.pk}&reply=true",
            )
        else:
            create_notification(
                message.user,
                Notification.TYPE_CONTACT_REPLY,
                f'ข้อความติดต่อของคุณเรื่อง "{message.subject}" ได้รับการตอบกลับแล้ว',
                link=f"/dashboard?tab=contact&messageId={message.pk}",
            )
    if not direct:
        email_sent = emails.send_contact_reply(message, text)

    logger.info("Admin %s replied to contact message %s (direct=%s)", admin.pk, message.pk, direct)
    return message, email_sent


def update_status(request, admin, pk, status):
    if status not in ContactMessage.STATUSES:
        raise ValidationFailed("สถานะไม่ถูกต้อง")
    with transaction.atomic():
        message = _get_message(pk, for_update=True)
        previous = message.status
        message.status = status
        message.save(update_fields=["status", "updated_at"])
        log_admin_action(
            request,
            admin,
            AdminActionLog.ACTION_CONTACT_STATUS,
            message.pk,
            {"subject": message.subject, "from": previous, "status": status},
        )
    return message
