"""
Availability checks for tax ids (company types) and id card numbers (IC).

An identifier is taken while any application with it is pending or
approved. Tax ids are additionally checked against the legacy registry:
an existing federation member must use the existing-member verification
flow rather than apply again.
"""

from legacy.services import tax_id_is_registered
from utils.exceptions import Conflict, ValidationFailed

from .models import (
    COMPANY_TYPES,
    LIVE_STATUSES,
    ApplicationStatus,
    MembershipApplication,
    MembershipType,
)
from .validators import is_valid_identifier, normalize_identifier

EXISTING_MEMBER_MESSAGE = (
    "เลขทะเบียนนิติบุคคลนี้เป็นสมาชิก ส.อ.ท. แล้ว โปรดใช้เมนู 'ยืนยันสมาชิกเดิม'"
)
TAX_ID_MESSAGES = {
    ApplicationStatus.PENDING: "เลขประจำตัวผู้เสียภาษีนี้อยู่ระหว่างพิจารณาสมัครสมาชิก กรุณาใช้เลขประจำตัวผู้เสียภาษีอื่น",
    ApplicationStatus.APPROVED: "เลขประจำตัวผู้เสียภาษีนี้เป็นสมาชิกสภาอุตสาหกรรมแห่งประเทศไทยแล้ว กรุณาใช้เลขประจำตัวผู้เสียภาษีอื่น",
}
TAX_ID_AVAILABLE_MESSAGE = "เลขประจำตัวผู้เสียภาษีนี้สามารถใช้ได้"

ID_CARD_MESSAGES = {
    ApplicationStatus.PENDING: "เลขบัตรประชาชนนี้อยู่ระหว่างพิจารณาสมัครสมาชิก",
    ApplicationStatus.APPROVED: "เลขบัตรประชาชนนี้เป็นสมาชิกสภาอุตสาหกรรมแห่งประเทศไทยแล้ว",
}
ID_CARD_AVAILABLE_MESSAGE = "เลขบัตรประชาชนนี้สามารถใช้ได้"


def live_applications_for_tax_id(tax_id, membership_types=COMPANY_TYPES, exclude_pk=None):
    applications = MembershipApplication.objects.filter(
        tax_id=tax_id, membership_type__in=membership_types, status__in=LIVE_STATUSES
    )
    if exclude_pk is not None:
        applications = applications.exclude(pk=exclude_pk)
    return applications


def live_applications_for_id_card(id_card_number, exclude_pk=None):
    applications = MembershipApplication.objects.filter(
        id_card_number=id_card_number,
        membership_type=MembershipType.IC,
        status__in=LIVE_STATUSES,
    )
    if exclude_pk is not None:
        applications = applications.exclude(pk=exclude_pk)
    return applications


def duplicate_tax_id_message(tax_id, statuses):
    """Submission-time wording: pending wins over approved."""
    if ApplicationStatus.PENDING in statuses:
        return f"คำขอสมัครสมาชิกของท่านสำหรับเลขประจำตัวผู้เสียภาษี {tax_id} อยู่ระหว่างการพิจารณา"
    return f"เลขประจำตัวผู้เสียภาษี {tax_id} นี้ได้เป็นสมาชิกแล้ว"


def check_tax_id(raw_tax_id):
    """
    Report whether a tax id may be used for a new company application.

    Returns the availability payload, or raises ``Conflict`` (409) carrying
    ``exists``, ``isExistingMember`` and ``status`` for the client.
    """
    if not raw_tax_id:
        raise ValidationFailed("กรุณาระบุเลขประจำตัวผู้เสียภาษี", valid=False)
    tax_id = normalize_identifier(raw_tax_id)
    if not is_valid_identifier(tax_id):
        raise ValidationFailed(
            "เลขประจำตัวผู้เสียภาษีไม่ถูกต้อง กรุณาตรวจสอบและลองใหม่อีกครั้ง", valid=False
        )

    if tax_id_is_registered(tax_id):
        raise Conflict(
            EXISTING_MEMBER_MESSAGE,
            valid=False,
            exists=True,
            isExistingMember=True,
            status="existing_member",
        )

    existing = live_applications_for_tax_id(tax_id).order_by("status").first()
    if existing:
        raise Conflict(
            TAX_ID_MESSAGES[existing.status],
            valid=False,
            exists=True,
            isExistingMember=False,
            status=existing.status,
            memberType=existing.membership_type.upper(),
        )

    return {
        "valid": True,
        "exists": False,
        "isExistingMember": False,
        "message": TAX_ID_AVAILABLE_MESSAGE,
    }


def check_id_card(raw_id_card):
    if not raw_id_card:
        raise ValidationFailed("กรุณาระบุเลขบัตรประชาชน", valid=False)
    id_card = normalize_identifier(raw_id_card)
    if not is_valid_identifier(id_card):
        raise ValidationFailed("เลขบัตรประชาชนต้องเป็นตัวเลข 13 หลัก", valid=False)

    existing = live_applications_for_id_card(id_card).order_by("status").first()
    if existing:
        raise Conflict(
            ID_CARD_MESSAGES[existing.status],
            valid=False,
            exists=True,
            status=existing.status,
        )
    return {"valid": True, "exists": False, "message": ID_CARD_AVAILABLE_MESSAGE}
