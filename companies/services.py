"""
Existing-member verification.

A user who already belongs to the federation claims the membership by
giving the registry member code, the matching tax id and a supporting
document. Administrators then approve, reject or delete the claim; an
approved claim links the account to the company and promotes the user to
the ``member`` role.
"""

import logging

from django.db import transaction
from django.db.models import Q

from activity.models import AdminActionLog
from activity.services import log_admin_action, log_user_action
from legacy.services import find_member_by_code, normalize_tax_id
from notifications.models import Notification
from notifications.services import create_notification
from utils.exceptions import Conflict, ExternalServiceError, NotFound, ValidationFailed
from utils.uploads import compress_file, upload_file

from . import emails
from .models import CompanyMember, VerificationDocument

logger = logging.getLogger(__name__)

VERIFICATION_FOLDER = "verification_documents"

ACTION_SUBMITS = {
    "approve": CompanyMember.SUBMIT_APPROVED,
    "reject": CompanyMember.SUBMIT_REJECTED,
    "delete": CompanyMember.SUBMIT_DELETED,
}
ACTION_LOG_TYPES = {
    "approve": AdminActionLog.ACTION_APPROVE_MEMBER,
    "reject": AdminActionLog.ACTION_REJECT_MEMBER,
    "delete": AdminActionLog.ACTION_DELETE_MEMBER,
}


def serialize_company(company):
    return {
        "id": company.pk,
        "memberCode": company.member_code,
        "compPersonCode": company.comp_person_code,
        "registCode": company.regist_code,
        "memberDate": company.member_date.isoformat() if company.member_date else None,
        "companyName": company.company_name,
        "companyType": company.company_type,
        "taxId": company.tax_id,
        "adminSubmit": company.admin_submit,
        "rejectReason": company.reject_reason,
        "adminComment": company.admin_comment,
        "createdAt": company.created_at.isoformat(),
        "documents": [
            {
                "id": doc.pk,
                "fileName": doc.file_name,
                "fileUrl": doc.file_url,
                "status": doc.status,
                "documentType": doc.document_type,
            }
            for doc in company.documents.all()
        ],
    }


def submit_verification(request, user, member_code, tax_id, document, company_type=""):
    member_code = (member_code or "").strip()
    tax_id = normalize_tax_id(tax_id)
    if not member_code or not tax_id:
        raise ValidationFailed("กรุณาระบุรหัสสมาชิกและเลขประจำตัวผู้เสียภาษี")
    if document is None:
        raise ValidationFailed("กรุณาแนบเอกสารยืนยันการเป็นสมาชิก")

    registry = find_member_by_code(member_code)
    if registry is None or normalize_tax_id(registry.tax_id) != tax_id:
        raise NotFound("ไม่พบข้อมูลสมาชิกที่ตรงกับรหัสสมาชิกและเลขประจำตัวผู้เสียภาษี")

    if CompanyMember.objects.filter(
        user=user, member_code=member_code, admin_submit__in=CompanyMember.LIVE_SUBMITS
    ).exists():
        raise Conflict("ท่านได้ส่งคำขอยืนยันสมาชิกนี้แล้ว")

    result = upload_file(compress_file(document), VERIFICATION_FOLDER)
    if not result["success"]:
        raise ExternalServiceError("อัปโหลดเอกสารไม่สำเร็จ กรุณาลองใหม่อีกครั้ง")

    with transaction.atomic():
        company = CompanyMember.objects.create(
            user=user,
            member_code=member_code,
            comp_person_code=registry.comp_person_code,
            regist_code=registry.regist_code,
            member_date=registry.member_date,
            company_name=registry.company_name,
            company_type=company_type or registry.member_type_code,
            tax_id=tax_id,
            admin_submit=CompanyMember.SUBMIT_PENDING,
        )
        VerificationDocument.objects.create(
            company_member=company,
            user=user,
            member_code=member_code,
            file_name=result["fileName"],
            file_url=result["url"],
            public_id=result["public_id"],
            file_size=result.get("fileSize"),
            mime_type=result.get("fileType") or "",
        )

    log_user_action(
        request,
        user,
        "member_verification_submit",
        f"MEMBER_CODE: {member_code} - {registry.company_name}",
    )
    logger.info("User %s claimed member code %s", user.pk, member_code)
    return company


def list_verifications(status=None, search=""):
    companies = CompanyMember.objects.select_related("user").prefetch_related("documents")
    if status not in (None, ""):
        try:
            companies = companies.filter(admin_submit=int(status))
        except (TypeError, ValueError) as exc:
            raise ValidationFailed("สถานะไม่ถูกต้อง") from exc
    if search:
        companies = companies.filter(
            Q(member_code__icontains=search)
            | Q(company_name__icontains=search)
            | Q(tax_id__icontains=search)
            | Q(user__email__icontains=search)
        )
    return companies


def review_verification(
    request, admin, company_member_id, action, document_id=None, reason="", comment=""
):
    """
    Approve, reject or delete an existing-member claim.

    Sets ``admin_submit`` to 1, 2 or 3 and the document to ``approved`` or
    ``rejected`` (delete also stores ``rejected``).
    """
    if action not in ACTION_SUBMITS:
        raise ValidationFailed("การดำเนินการไม่ถูกต้อง")
    reason = (reason or "").strip()
    if action == "reject" and not reason:
        raise ValidationFailed("กรุณาระบุเหตุผลในการปฏิเสธ")

    with transaction.atomic():
        company = (
            CompanyMember.objects.select_for_update()
            .select_related("user")
            .filter(pk=company_member_id)
            .first()
        )
        if company is None:
            raise NotFound("ไม่พบข้อมูลการยืนยันสมาชิก")

        documents = company.documents.all()
        if document_id:
            documents = documents.filter(pk=document_id)
            if not documents.exists():
                raise NotFound("ไม่พบเอกสารที่ระบุ")

        company.admin_submit = ACTION_SUBMITS[action]
        company.reject_reason = reason if action == "reject" else ""
        company.admin_comment = (comment or "").strip()
        company.admin = admin
        company.admin_name = admin.display_name
        company.save()

        documents.update(
            status=(
                VerificationDocument.STATUS_APPROVED
                if action == "approve"
                else VerificationDocument.STATUS_REJECTED
            ),
            reject_reason=reason if action == "reject" else "",
        )

        if action == "approve":
            company.user.promote_to_member()

        log_admin_action(
            request,
            admin,
            ACTION_LOG_TYPES[action],
            company.pk,
            {
                "memberCode": company.member_code,
                "companyName": company.company_name,
                "reason": company.reject_reason,
                "comment": company.admin_comment,
            },
        )
        log_user_action(
            request,
            company.user,
            f"member_verification_{action}",
            f"MEMBER_CODE: {company.member_code} - {company.company_name}",
        )

    if action == "approve":
        create_notification(
            company.user,
            Notification.TYPE_MEMBER_VERIFICATION,
            f"การยืนยันสมาชิกเดิมของท่าน [รหัสสมาชิก: {company.member_code}] "
            f"[บริษัท: {company.company_name}] ได้รับการอนุมัติแล้ว",
            link="/dashboard?tab=member",
            member_code=company.member_code,
            company_name=company.company_name,
        )
        emails.send_verification_approved(company)
    elif action == "reject":
        create_notification(
            company.user,
            Notification.TYPE_MEMBER_VERIFICATION,
            f"การยืนยันสมาชิกเดิมของท่าน [รหัสสมาชิก: {company.member_code}] "
            f"[บริษัท: {company.company_name}] ถูกปฏิเสธ: {company.reject_reason}",
            link="/dashboard?tab=status",
            member_code=company.member_code,
            company_name=company.company_name,
        )
        emails.send_verification_rejected(company)

    logger.info(
        "Admin %s %sd member claim %s (%s)", admin.pk, action, company.pk, company.member_code
    )
    return company


def list_approved_companies(user):
    return CompanyMember.objects.filter(
        user=user, admin_submit=CompanyMember.SUBMIT_APPROVED
    ).prefetch_related("documents")


def link_registry_member(user, registry, company_type, admin):
    """
    Record an admin-made link between ``user`` and a registry member (approved).

    Rejected claims stay on file, so a user can hold several rows for one
    member code; the newest row is the one that gets approved.
    """
    values = {
        "comp_person_code": registry.comp_person_code,
        "regist_code": registry.regist_code,
        "member_date": registry.member_date,
        "company_name": registry.company_name,
        "company_type": company_type,
        "tax_id": registry.tax_id,
        "admin_submit": CompanyMember.SUBMIT_APPROVED,
        "admin": admin,
        "admin_name": admin.display_name,
    }
    company = (
        CompanyMember.objects.filter(user=user, member_code=registry.member_code)
        .order_by("-pk")
        .first()
    )
    if company is None:
        return CompanyMember.objects.create(user=user, member_code=registry.member_code, **values)
    for field, value in values.items():
        setattr(company, field, value)
    company.save()
    return company
