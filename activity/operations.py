"""
The member dashboard's operation status feed.

Collects the requests a member has made (existing-member claims, contact
messages and address changes) into one list, newest first. A source that
fails to load is logged and left out, so the rest of the feed still shows.
"""

import logging

from django.db import DatabaseError, transaction
from django.utils import timezone

from address_updates.models import PendingAddressUpdate
from companies.models import CompanyMember
from contact.models import ContactMessage

logger = logging.getLogger(__name__)

DESCRIPTION_PREVIEW = 100

STATUS_PENDING = "pending"
STATUS_APPROVED = "approved"
STATUS_REJECTED = "rejected"


def _claim_status(admin_submit):
    if admin_submit == CompanyMember.SUBMIT_PENDING:
        return STATUS_PENDING
    if admin_submit == CompanyMember.SUBMIT_APPROVED:
        return STATUS_APPROVED
    return STATUS_REJECTED


def _contact_status(status):
    if status == ContactMessage.STATUS_REPLIED:
        return STATUS_APPROVED
    if status in (ContactMessage.STATUS_UNREAD, ContactMessage.STATUS_READ):
        return STATUS_PENDING
    return STATUS_REJECTED


def _preview(message):
    message = message or ""
    if len(message) > DESCRIPTION_PREVIEW:
        return message[:DESCRIPTION_PREVIEW] + "..."
    return message


def member_claims(user):
    return [
        {
            "id": f"member-{claim.pk}",
            "type": "member_verification",
            "title": f"ยืนยันสมาชิกเดิม: {claim.company_name} ({claim.member_code})",
            "description": f"ประเภทบริษัท: {claim.company_type}",
            "status": _claim_status(claim.admin_submit),
            "reason": claim.reject_reason or None,
            "createdAt": claim.created_at,
        }
        for claim in CompanyMember.objects.filter(user=user)
    ]


def contact_messages(user):
    return [
        {
            "id": f"contact-{message.pk}",
            "type": "contact_message",
            "title": f"ข้อความติดต่อ: {message.subject or 'ไม่มีหัวข้อ'}",
            "description": _preview(message.message),
            "status": _contact_status(message.status),
            "reason": None,
            "createdAt": message.created_at,
        }
        for message in ContactMessage.objects.filter(user=user)
    ]


def address_updates(user):
    return [
        {
            "id": f"address-{update.pk}",
            "type": "address_update",
            "title": f"แก้ไขที่อยู่ ({update.member_code or 'N/A'})",
            "description": "คำขอแก้ไขที่อยู่",
            "status": update.status or STATUS_PENDING,
            "reason": update.admin_comment or None,
            "createdAt": update.request_date,
        }
        for update in PendingAddressUpdate.objects.filter(user=user)
    ]


OPERATION_SOURCES = (member_claims, contact_messages, address_updates)


def operation_status(user):
    operations = []
    for source in OPERATION_SOURCES:
        try:
            with transaction.atomic():
                operations.extend(source(user))
        except DatabaseError:
            logger.exception("Could not load %s for user %s", source.__name__, user.pk)
    operations.sort(key=lambda operation: operation["createdAt"], reverse=True)
    for operation in operations:
        operation["createdAt"] = timezone.localtime(operation["createdAt"]).isoformat()
    return operations
