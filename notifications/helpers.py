"""
Formatting helpers for the notification feed.

Messages are plain Thai text. Approval and rejection are recognised by
fixed phrases inside the message, which is also how the feed decides the
status badge and where an address-update notification should lead.
"""

import re

from django.utils import timezone

APPROVED_PHRASE = "ได้รับการอนุมัติแล้ว"
REJECTED_PHRASE = "ถูกปฏิเสธ"

STATUS_APPROVED = "approved"
STATUS_REJECTED = "rejected"

STATUS_LABELS = {
    STATUS_APPROVED: "อนุมัติ",
    STATUS_REJECTED: "ปฏิเสธ",
}

TYPE_LABELS = {
    "member_verification": "การยืนยันสมาชิก",
    "contact_reply": "การตอบกลับข้อความ",
    "address_update": "การอัปเดตที่อยู่",
    "profile_update": "การอัปเดตโปรไฟล์",
    "member_connection": "การเชื่อมต่อสมาชิก",
}
DEFAULT_TYPE_LABEL = "การแจ้งเตือน"

THAI_MONTHS = (
    "มกราคม",
    "กุมภาพันธ์",
    "มีนาคม",
    "เมษายน",
    "พฤษภาคม",
    "มิถุนายน",
    "กรกฎาคม",
    "สิงหาคม",
    "กันยายน",
    "ตุลาคม",
    "พฤศจิกายน",
    "ธันวาคม",
)
BUDDHIST_ERA_OFFSET = 543

DEFAULT_LINK = "/dashboard"
REJECTED_ADDRESS_LINK = "/dashboard?tab=status"

MEMBER_CODE_PATTERN = re.compile(r"\[รหัสสมาชิก: ([^\]]+)\]")
ADDR_CODE_PATTERN = re.compile(r"[0-9]{3}")


def format_thai_datetime(value):
    """Format a datetime as e.g. ``5 มีนาคม 2567 09:30`` in local time."""
    if not value:
        return ""
    if timezone.is_aware(value):
        value = timezone.localtime(value)
    month = THAI_MONTHS[value.month - 1]
    return f"{value.day} {month} {value.year + BUDDHIST_ERA_OFFSET} {value:%H:%M}"


def notification_status(message):
    if not message:
        return None
    if APPROVED_PHRASE in message:
        return STATUS_APPROVED
    if REJECTED_PHRASE in message:
        return STATUS_REJECTED
    return None


def split_status_message(message):
    """
    Split a message around its status phrase for highlighting.

    Returns ``(prefix, phrase)``; ``phrase`` is empty when the message has no
    status. Text after the phrase is dropped, as the feed only highlights
    the phrase itself.
    """
    if not message:
        return "", ""
    for phrase in (APPROVED_PHRASE, REJECTED_PHRASE):
        if phrase in message:
            return message.split(phrase)[0], phrase
    return message, ""


def notification_type_label(notification_type):
    return TYPE_LABELS.get(notification_type, DEFAULT_TYPE_LABEL)


def _address_update_link(notification):
    message = notification.message or ""

    addr_code = notification.addr_code
    if not addr_code:
        match = ADDR_CODE_PATTERN.search(message)
        addr_code = match.group(0) if match else ""

    member_code = notification.member_code
    if not member_code or member_code == "000":
        match = MEMBER_CODE_PATTERN.search(message)
        if match:
            member_code = match.group(1)

    addr_code = addr_code or "001"
    member_type = notification.member_type or "000"
    member_group_code = notification.member_group_code or "000"
    addr_lang = (notification.addr_lang or "TH").upper()

    if REJECTED_PHRASE in message:
        return REJECTED_ADDRESS_LINK
    if member_code:
        return (
            f"/MemberDetail?memberCode={member_code}&memberType={member_type}"
            f"&member_group_code={member_group_code}&typeCode=000"
            f"&tab=addresses&address={addr_code}&lang={addr_lang}"
        )
    return notification.link or DEFAULT_LINK


def resolve_notification_link(notification):
    """Where clicking a notification should take the member."""
    if notification.type == "address_update":
        link = _address_update_link(notification)
    else:
        link = notification.link
    return link or DEFAULT_LINK


def serialize_notification(notification):
    status = notification_status(notification.message)
    prefix, phrase = split_status_message(notification.message)
    return {
        "id": notification.pk,
        "type": notification.type,
        "typeLabel": notification_type_label(notification.type),
        "message": notification.message,
        "messagePrefix": prefix,
        "statusPhrase": phrase,
        "status": status,
        "statusLabel": STATUS_LABELS.get(status),
        "link": notification.link,
        "targetLink": resolve_notification_link(notification),
        "read": notification.read,
        "readAt": notification.read_at.isoformat() if notification.read_at else None,
        "createdAt": notification.created_at.isoformat(),
        "createdAtDisplay": format_thai_datetime(notification.created_at),
    }
