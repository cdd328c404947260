"""Plain-dict renderings of applications for the JSON API."""

from django.forms.models import model_to_dict

PERSON_FIELDS = (
    "prename_th",
    "prename_en",
    "prename_other",
    "prename_other_en",
    "first_name_th",
    "last_name_th",
    "first_name_en",
    "last_name_en",
    "position",
    "email",
    "phone",
    "phone_extension",
)


def _decimal(value):
    return str(value) if value is not None else None


def _dt(value):
    return value.isoformat() if value else None


def application_summary(application):
    return {
        "id": application.pk,
        "applicationId": str(application.application_id),
        "type": application.membership_type,
        "typeLabel": application.type_label,
        "status": application.status,
        "statusLabel": application.get_status_display(),
        "displayName": application.display_name,
        "taxId": application.tax_id,
        "idCardNumber": application.id_card_number,
        "memberCode": application.member_code,
        "resubmissionCount": application.resubmission_count,
        "createdAt": _dt(application.created_at),
        "updatedAt": _dt(application.updated_at),
    }


def application_main(application):
    data = model_to_dict(
        application,
        exclude=["id", "user", "admin_note_by", "approved_by", "rejected_by"],
    )
    for key, value in list(data.items()):
        if hasattr(value, "quantize"):
            data[key] = _decimal(value)
    data["application_id"] = str(application.application_id)
    data["created_at"] = _dt(application.created_at)
    data["updated_at"] = _dt(application.updated_at)
    data["approved_at"] = _dt(application.approved_at)
    data["rejected_at"] = _dt(application.rejected_at)
    data["admin_note_at"] = _dt(application.admin_note_at)
    return data


def application_detail(application):
    """Everything an admin (or the owner) sees on the application page."""
    signatory = getattr(application, "authorized_signatory", None)
    return {
        **application_summary(application),
        "main": application_main(application),
        "addresses": [
            model_to_dict(address, exclude=["id", "application"])
            for address in application.addresses.all()
        ],
        "contactPersons": [
            {
                **model_to_dict(contact, fields=PERSON_FIELDS),
                "type_contact_id": contact.type_contact_id,
                "type_contact_name": contact.type_contact_name,
                "type_contact_other_detail": contact.type_contact_other_detail,
            }
            for contact in application.contact_persons.all()
        ],
        "representatives": [
            {
                **model_to_dict(rep, fields=PERSON_FIELDS),
                "is_primary": rep.is_primary,
                "rep_order": rep.rep_order,
            }
            for rep in application.representatives.all()
        ],
        "businessTypes": [bt.business_type for bt in application.business_types.all()],
        "businessTypeOther": application.business_type_other_detail,
        "products": [
            {"id": p.pk, "name_th": p.name_th, "name_en": p.name_en}
            for p in application.products.all()
        ],
        "industryGroups": [
            {"id": g.industry_group_id, "name": g.industry_group_name}
            for g in application.industry_groups.all()
        ],
        "provinceChapters": [
            {"id": c.province_chapter_id, "name": c.province_chapter_name}
            for c in application.province_chapters.all()
        ],
        "authorizedSignatory": (
            model_to_dict(signatory, exclude=["id", "application"]) if signatory else None
        ),
        "documents": [
            {
                "id": doc.pk,
                "documentType": doc.document_type,
                "fileName": doc.file_name,
                "fileUrl": doc.file_url,
                "fileSize": doc.file_size,
                "mimeType": doc.mime_type,
                "uploadedAt": _dt(doc.uploaded_at),
            }
            for doc in application.documents.all()
        ],
        "statusLogs": [
            {"status": log.status, "note": log.note, "createdAt": _dt(log.created_at)}
            for log in application.status_logs.all()
        ],
        "adminNote": application.admin_note,
        "rejectionReason": application.rejection_reason,
    }


def rejection_summary(rejection):
    application = rejection.application
    return {
        "id": rejection.pk,
        "status": rejection.status,
        "statusLabel": rejection.get_status_display(),
        "reason": rejection.reason,
        "rejectedAt": _dt(rejection.rejected_at),
        "unreadCount": rejection.unread_member_count,
        "lastConversationAt": _dt(rejection.last_conversation_at),
        "application": application_summary(application),
    }


def conversation_message(message):
    return {
        "id": message.pk,
        "senderType": message.sender_type,
        "senderName": message.sender.display_name if message.sender else None,
        "message": message.message,
        "isRead": message.is_read,
        "createdAt": _dt(message.created_at),
    }
