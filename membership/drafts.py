"""Saved, unfinished membership forms. One draft per user, type and identifier."""

from utils.exceptions import NotFound, ValidationFailed

from .models import ApplicationDraft, MembershipType
from .validators import normalize_identifier

# Uploaded files are never stored in a draft; the member re-attaches them.
FILE_FIELDS = (
    "companyRegistration",
    "vatRegistration",
    "idCard",
    "authorityLetter",
    "companyStamp",
    "authorizedSignature",
    "productionImages",
    "factoryLicense",
    "industrialEstateLicense",
    "associationCertificate",
    "memberList",
    "documents",
)


def _strip_files(data):
    return {key: value for key, value in data.items() if key not in FILE_FIELDS}


def serialize_draft(draft, include_data=False):
    item = {
        "id": draft.pk,
        "type": draft.membership_type,
        "identifier": draft.identifier,
        "currentStep": draft.current_step,
        "companyName": draft.data.get("companyName") or draft.data.get("associationName") or "",
        "createdAt": draft.created_at.isoformat(),
        "updatedAt": draft.updated_at.isoformat() if draft.updated_at else None,
    }
    if include_data:
        item["data"] = draft.data
    return item


def save_draft(user, membership_type, data, current_step=1):
    if membership_type not in MembershipType.values:
        raise ValidationFailed("ประเภทสมาชิกไม่ถูกต้อง")
    if not isinstance(data, dict):
        raise ValidationFailed("ข้อมูลร่างไม่ถูกต้อง")

    if membership_type == MembershipType.IC:
        identifier = normalize_identifier(data.get("idCardNumber"))
        if not identifier:
            raise ValidationFailed("กรุณาระบุเลขบัตรประชาชนก่อนบันทึกร่าง")
    else:
        identifier = normalize_identifier(data.get("taxId"))
        if not identifier:
            raise ValidationFailed("กรุณาระบุเลขประจำตัวผู้เสียภาษีก่อนบันทึกร่าง")

    try:
        step = max(int(current_step or 1), 1)
    except (TypeError, ValueError):
        step = 1

    draft, _ = ApplicationDraft.objects.update_or_create(
        user=user,
        membership_type=membership_type,
        identifier=identifier[:13],
        defaults={"data": _strip_files(data), "current_step": step},
    )
    return draft


def list_drafts(user, membership_type=None):
    drafts = ApplicationDraft.objects.filter(user=user)
    if membership_type:
        drafts = drafts.filter(membership_type=membership_type)
    return drafts


def get_draft(user, pk):
    draft = ApplicationDraft.objects.filter(user=user, pk=pk).first()
    if draft is None:
        raise NotFound("ไม่พบร่างใบสมัคร")
    return draft


def delete_draft(user, pk):
    deleted, _ = ApplicationDraft.objects.filter(user=user, pk=pk).delete()
    if not deleted:
        raise NotFound("ไม่พบร่างใบสมัคร")
    return deleted
