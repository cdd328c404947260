"""
Address change requests and their review.

An approved request is written into the registry first; only when that
succeeds is the request marked approved. A registry failure therefore
leaves the request pending so the admin can retry.
"""

import logging

from django.db import transaction
from django.db.models import Q
from django.utils import timezone

from activity.models import AdminActionLog
from activity.services import log_admin_action, log_user_action
from companies.models import CompanyMember
from legacy.services import ADDRESS_CONTACT_FIELDS, get_member_address, sync_address
from notifications.models import Notification
from notifications.services import create_notification
from utils.exceptions import NotFound, ValidationFailed

from . import emails
from .models import PendingAddressUpdate

logger = logging.getLogger(__name__)

DEFAULT_MEMBER_CODE = "UNKNOWN"
DEFAULT_CODE = "000"

INVALID_ADDR_CODE_MESSAGE = (
    "สามารถแก้ไขได้เฉพาะที่อยู่สำหรับติดต่อ (001), ที่อยู่สำหรับจัดส่งเอกสาร (002) "
    "และที่อยู่สำหรับออกใบกำกับภาษี (003) เท่านั้น"
)
DUPLICATE_REQUEST_MESSAGE = (
    "คุณมีคำขอแก้ไขที่อยู่นี้ที่กำลังรอการอนุมัติอยู่แล้ว "
    "กรุณารอให้คำขอปัจจุบันได้รับการพิจารณาก่อน"
)


def filter_address_for_language(address, lang):
    """
    Keep only the fields of ``address`` that belong to ``lang``.

    English keeps the ``_EN`` fields (renamed without the suffix) plus the
    shared contact fields; Thai keeps everything without the suffix.
    """
    if not address:
        return {}
    if lang == PendingAddressUpdate.LANG_EN:
        filtered = {}
        for key, value in address.items():
            if key.endswith("_EN"):
                filtered[key[: -len("_EN")]] = value
            elif key in ADDRESS_CONTACT_FIELDS:
                filtered[key] = value
        return filtered
    return {key: value for key, value in address.items() if not key.endswith("_EN")}


def serialize_request(update):
    return {
        "id": update.pk,
        "userId": update.user_id,
        "userEmail": update.user.email,
        "userName": update.user.display_name,
        "memberCode": update.member_code,
        "compPersonCode": update.comp_person_code,
        "registCode": update.regist_code,
        "memberType": update.member_type,
        "memberGroupCode": update.member_group_code,
        "typeCode": update.type_code,
        "addrCode": update.addr_code,
        "addrLang": update.addr_lang,
        "oldAddress": update.old_address,
        "newAddress": update.new_address,
        "documentUrl": update.document_url,
        "status": update.status,
        "requestDate": update.request_date.isoformat(),
        "processedDate": update.processed_date.isoformat() if update.processed_date else None,
        "adminComment": update.admin_comment,
        "adminNotes": update.admin_notes,
    }


def _company_name(update):
    company = CompanyMember.objects.filter(user=update.user, member_code=update.member_code).first()
    return company.company_name if company else ""


def request_address_update(request, user, payload):
    member_code = (payload.get("memberCode") or DEFAULT_MEMBER_CODE).strip()
    addr_code = (payload.get("addrCode") or PendingAddressUpdate.ADDR_CONTACT).strip()
    addr_lang = (payload.get("addrLang") or PendingAddressUpdate.LANG_TH).strip().lower()
    new_address = payload.get("newAddress")

    if addr_code not in PendingAddressUpdate.EDITABLE_ADDR_CODES:
        raise ValidationFailed(INVALID_ADDR_CODE_MESSAGE)
    if addr_lang not in (PendingAddressUpdate.LANG_TH, PendingAddressUpdate.LANG_EN):
        addr_lang = PendingAddressUpdate.LANG_TH
    if not isinstance(new_address, dict) or not new_address:
        raise ValidationFailed("กรุณาระบุที่อยู่ใหม่")

    comp_person_code = (payload.get("compPersonCode") or "").strip()
    regist_code = (payload.get("registCode") or "").strip()
    company = CompanyMember.objects.filter(
        user=user, member_code=member_code, admin_submit=CompanyMember.SUBMIT_APPROVED
    ).first()
    if company:
        comp_person_code = company.comp_person_code or comp_person_code
        regist_code = company.regist_code or regist_code

    fields = {
        "user": user,
        "member_code": member_code,
        "comp_person_code": comp_person_code,
        "regist_code": regist_code,
        "member_type": (payload.get("memberType") or DEFAULT_CODE).strip(),
        "member_group_code": (payload.get("memberGroupCode") or "").strip(),
        "type_code": (payload.get("typeCode") or DEFAULT_CODE).strip(),
        "addr_code": addr_code,
    }

    original = payload.get("originalAddress") or payload.get("oldAddress")
    if not isinstance(original, dict) and comp_person_code and regist_code:
        original = get_member_address(comp_person_code, regist_code, addr_code)

    with transaction.atomic():
        if PendingAddressUpdate.objects.filter(
            status=PendingAddressUpdate.STATUS_PENDING, **fields
        ).exists():
            raise ValidationFailed(DUPLICATE_REQUEST_MESSAGE)
        update = PendingAddressUpdate.objects.create(
            addr_lang=addr_lang,
            old_address=filter_address_for_language(original, addr_lang),
            new_address=new_address,
            document_url=(payload.get("documentUrl") or "").strip(),
            **fields,
        )

    log_user_action(
        request,
        user,
        "address_update_request",
        {
            "requestId": update.pk,
            "memberCode": update.member_code,
            "compPersonCode": update.comp_person_code,
            "addrCode": update.addr_code,
            "addrLang": update.addr_lang,
            "memberType": update.member_type,
            "memberGroupCode": update.member_group_code,
            "typeCode": update.type_code,
        },
    )
    create_notification(
        user,
        Notification.TYPE_ADDRESS_UPDATE,
        f"คำขอแก้ไขที่อยู่{update.address_type_text}{update.language_text}"
        "ของคุณถูกส่งเรียบร้อยแล้ว กรุณารอการอนุมัติจากผู้ดูแลระบบ",
        link="/dashboard/member-detail",
    )
    emails.send_request_received(update, company.company_name if company else "")
    logger.info("User %s requested address update %s for %s", user.pk, update.pk, member_code)
    return update


def list_requests(status=None, search=""):
    updates = PendingAddressUpdate.objects.select_related("user")
    if status:
        updates = updates.filter(status=status)
    if search:
        updates = updates.filter(
            Q(member_code__icontains=search)
            | Q(user__email__icontains=search)
            | Q(user__first_name__icontains=search)
            | Q(user__last_name__icontains=search)
        )
    return updates


def _get_pending(pk):
    update = (
        PendingAddressUpdate.objects.select_for_update()
        .select_related("user")
        .filter(pk=pk, status=PendingAddressUpdate.STATUS_PENDING)
        .first()
    )
    if update is None:
        raise NotFound("ไม่พบคำขอแก้ไขที่อยู่ หรือคำขอนี้ได้รับการดำเนินการแล้ว")
    return update


def approve_address_update(request, admin, pk, admin_notes=""):
    """
    Write the requested address into the registry, then approve the request.

    Raises ``ExternalServiceError`` (500) when the registry write fails; the
    request stays pending in that case.
    """
    with transaction.atomic():
        update = _get_pending(pk)
        sync_address(
            update.comp_person_code,
            update.regist_code,
            update.addr_code,
            update.addr_lang,
            update.new_address,
            member_code=update.member_code,
            updated_by=admin.username,
        )
        update.status = PendingAddressUpdate.STATUS_APPROVED
        update.processed_date = timezone.now()
        update.processed_by = admin
        update.admin_notes = (admin_notes or "").strip()
        update.save()

        company_name = _company_name(update)
        log_admin_action(
            request,
            admin,
            AdminActionLog.ACTION_APPROVE_ADDRESS,
            update.pk,
            {
                "message": (
                    f"Address update approved - Member Code: {update.member_code}, "
                    f"Address: {update.addr_code}, Language: {update.addr_lang}"
                ),
                "memberCode": update.member_code,
                "companyName": company_name,
                "oldAddress": update.old_address,
                "newAddress": update.new_address,
            },
        )

    create_notification(
        update.user,
        Notification.TYPE_ADDRESS_UPDATE,
        f"คำขอแก้ไขที่อยู่{update.address_type_text}{update.language_text}ของท่าน "
        f"[รหัสสมาชิก: {update.member_code}] [บริษัท: {company_name or 'บริษัทของท่าน'}] "
        "ได้รับการอนุมัติแล้ว",
        link="/dashboard?tab=address",
        member_code=update.member_code,
        company_name=company_name,
        member_type=update.member_type,
        member_group_code=update.member_group_code,
        type_code=DEFAULT_CODE,
        addr_code=update.addr_code,
        addr_lang=update.addr_lang,
    )
    emails.send_request_approved(update, company_name)
    logger.info("Admin %s approved address update %s", admin.pk, update.pk)
    return update


def reject_address_update(request, admin, pk, reason, admin_notes=""):
    reason = (reason or "").strip()
    if not reason:
        raise ValidationFailed("กรุณาระบุเหตุผลในการปฏิเสธ")

    with transaction.atomic():
        update = _get_pending(pk)
        update.status = PendingAddressUpdate.STATUS_REJECTED
        update.processed_date = timezone.now()
        update.processed_by = admin
        update.admin_comment = reason
        update.admin_notes = (admin_notes or "").strip()
        update.save()

        company_name = _company_name(update)
        log_admin_action(
            request,
            admin,
            AdminActionLog.ACTION_REJECT_ADDRESS,
            update.pk,
            {
                "message": (
                    f"Address update rejected - Member Code: {update.member_code}, "
                    f"Address: {update.addr_code}, Language: {update.addr_lang}"
                ),
                "memberCode": update.member_code,
                "companyName": company_name,
                "reason": reason,
                "oldAddress": update.old_address,
                "newAddress": update.new_address,
            },
        )
        log_user_action(
            request,
            update.user,
            "reject_address_update",
            f"ปฏิเสธคำขอแก้ไขที่อยู่{update.address_type_text}{update.language_text} - "
            f"รหัสสมาชิก: {update.member_code}, บริษัท: {company_name}, เหตุผล: {reason}",
        )

    emails.send_request_rejected(update, company_name, reason)
    create_notification(
        update.user,
        Notification.TYPE_ADDRESS_UPDATE,
        f"คำขอแก้ไขที่อยู่{update.address_type_text}{update.language_text}ของท่าน "
        f"[รหัสสมาชิก: {update.member_code}] [บริษัท: {company_name or 'บริษัทของท่าน'}] "
        f"ถูกปฏิเสธ: {reason}",
        link="/dashboard?tab=address",
        member_code=update.member_code,
        company_name=company_name,
        member_type=update.member_type,
        member_group_code=update.member_group_code,
        type_code=DEFAULT_CODE,
        addr_code=update.addr_code,
        addr_lang=update.addr_lang,
    )
    logger.info("Admin %s rejected address update %s", admin.pk, update.pk)
    return update
