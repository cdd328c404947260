"""
Membership application submission (OC, AC, AM and IC).

The application row and all of its section rows are written in one
transaction; a validation failure or a duplicate identifier anywhere
rolls the whole submission back. Documents are compressed and uploaded
after the commit with the bounded-concurrency uploader, so a slow upload
never holds a database transaction open. The user log, confirmation email,
notification and draft cleanup follow, each tolerated on failure.
"""

import logging

from django.conf import settings
from django.db import transaction

from activity.services import log_user_action
from notifications.models import Notification
from notifications.services import create_notification
from utils.exceptions import Conflict, ExternalServiceError, Forbidden, ValidationFailed
from utils.uploads import upload_files_with_concurrency_limit

from . import emails
from .checks import (
    ID_CARD_MESSAGES,
    duplicate_tax_id_message,
    live_applications_for_id_card,
    live_applications_for_tax_id,
)
from .models import (
    ApplicationAddress,
    ApplicationDocument,
    ApplicationDraft,
    ApplicationStatus,
    ApplicationStatusLog,
    AuthorizedSignatory,
    BusinessType,
    ContactPerson,
    IndustryGroup,
    MembershipApplication,
    MembershipType,
    Product,
    ProvinceChapter,
    Representative,
    UNSPECIFIED_CODE,
    UNSPECIFIED_NAME,
)
from .validators import (
    ensure_list,
    is_valid_identifier,
    normalize_identifier,
    parse_int,
    parse_json_value,
    sanitize_numbers,
    text,
)

logger = logging.getLogger(__name__)

MONEY_FIELDS = (
    "registeredCapital",
    "productionCapacityValue",
    "salesDomestic",
    "salesExport",
    "revenueLastYear",
    "revenuePreviousYear",
)
PERCENT_FIELDS = ("shareholderThaiPercent", "shareholderForeignPercent")

ADDRESS_TYPES = (
    ApplicationAddress.TYPE_OFFICE,
    ApplicationAddress.TYPE_DOCUMENT_DELIVERY,
    ApplicationAddress.TYPE_TAX_INVOICE,
)

SIGNATORY_POSITION_MESSAGE = "กรุณาระบุตำแหน่งผู้มีอำนาจลงนาม (ภาษาไทยหรือภาษาอังกฤษ)"
SUBMITTED_STATUS_NOTE = "สมัครสมาชิกใหม่"

# Multi-file fields arrive as "productionImages[0]", "productionImages[1]", ...
MULTI_FILE_FIELDS = ("productionImages", "authorizedSignatures")


def document_folder(membership_type):
    return f"FTI_PORTAL_{membership_type.upper()}_member_DOC"


#########################
# Section helpers


def _signatory_value(data, suffix):
    return text(
        data.get(f"authorizedSignatory{suffix}") or data.get(f"authorizedSignature{suffix}")
    )


def validate_signatory(data):
    """Names without a position (Thai or English) are rejected."""
    names = "".join(
        _signatory_value(data, suffix)
        for suffix in ("FirstNameTh", "LastNameTh", "FirstNameEn", "LastNameEn")
    )
    has_position = _signatory_value(data, "PositionTh") or _signatory_value(data, "PositionEn")
    if names and not has_position:
        raise ValidationFailed(SIGNATORY_POSITION_MESSAGE)


def _address_value(address, address_type, key):
    return text(address.get(f"{key}-{address_type}") or address.get(key))


def _company_contact(data, addresses):
    """Company email and phone come from the document delivery address when present."""
    email = text(data.get("companyEmail"))
    phone = text(data.get("companyPhone"))
    extension = text(data.get("companyPhoneExtension"))
    delivery = addresses.get(ApplicationAddress.TYPE_DOCUMENT_DELIVERY) if addresses else None
    if delivery:
        email = _address_value(delivery, "2", "email") or email
        phone = _address_value(delivery, "2", "phone") or phone
        extension = _address_value(delivery, "2", "phoneExtension") or extension
    return email, phone, extension


def create_addresses(application, data, addresses):
    if addresses:
        rows = []
        for address_type in ADDRESS_TYPES:
            address = addresses.get(address_type)
            if not address:
                continue
            rows.append(
                ApplicationAddress(
                    application=application,
                    address_type=address_type,
                    address_number=text(address.get("addressNumber")),
                    building=text(address.get("building")),
                    moo=text(address.get("moo")),
                    soi=text(address.get("soi")),
                    street=text(address.get("street") or address.get("road")),
                    sub_district=text(address.get("subDistrict")),
                    district=text(address.get("district")),
                    province=text(address.get("province")),
                    postal_code=text(address.get("postalCode")),
                    phone=_address_value(address, address_type, "phone"),
                    phone_extension=_address_value(address, address_type, "phoneExtension"),
                    email=_address_value(address, address_type, "email"),
                    website=_address_value(address, address_type, "website"),
                )
            )
        ApplicationAddress.objects.bulk_create(rows)
        return rows

    # Single-address form: stored as the document delivery address
    return [
        ApplicationAddress.objects.create(
            application=application,
            address_type=ApplicationAddress.TYPE_DOCUMENT_DELIVERY,
            address_number=text(data.get("addressNumber")),
            building=text(data.get("building")),
            moo=text(data.get("moo")),
            soi=text(data.get("soi")),
            street=text(data.get("street")),
            sub_district=text(data.get("subDistrict")),
            district=text(data.get("district")),
            province=text(data.get("province")),
            postal_code=text(data.get("postalCode")),
            phone=text(data.get("companyPhone") or data.get("phone")),
            phone_extension=text(data.get("companyPhoneExtension") or data.get("phoneExtension")),
            email=text(data.get("companyEmail") or data.get("email")),
            website=text(data.get("companyWebsite") or data.get("website")),
        )
    ]


def _person_kwargs(person, first_th, last_th, first_en, last_en):
    return {
        "prename_th": text(person.get("prenameTh")),
        "prename_en": text(person.get("prenameEn")),
        "prename_other": text(person.get("prenameOther")),
        "prename_other_en": text(person.get("prenameOtherEn")),
        "first_name_th": first_th,
        "last_name_th": last_th,
        "first_name_en": first_en,
        "last_name_en": last_en,
        "position": text(person.get("position")),
        "email": text(person.get("email")),
        "phone": text(person.get("phone")),
        "phone_extension": text(person.get("phoneExtension")),
    }


def create_contact_persons(application, data):
    contacts = ensure_list(data.get("contactPersons"))
    if not contacts and data.get("contactPersonFirstName"):
        contacts = [
            {
                "firstNameTh": data.get("contactPersonFirstName"),
                "lastNameTh": data.get("contactPersonLastName"),
                "firstNameEn": data.get("contactPersonFirstNameEng"),
                "lastNameEn": data.get("contactPersonLastNameEng"),
                "position": data.get("contactPersonPosition"),
                "email": data.get("contactPersonEmail"),
                "phone": data.get("contactPersonPhone"),
                "phoneExtension": data.get("contactPersonPhoneExtension"),
            }
        ]

    for index, contact in enumerate(contacts):
        contact = contact or {}
        if not text(contact.get("firstNameEn")) or not text(contact.get("lastNameEn")):
            raise ValidationFailed(f"กรุณากรอกชื่อ-นามสกุลภาษาอังกฤษของผู้ติดต่อคนที่ {index + 1}")

    rows = [
        ContactPerson(
            application=application,
            type_contact_id=text(contact.get("typeContactId")) or ContactPerson.DEFAULT_TYPE_ID,
            type_contact_name=text(contact.get("typeContactName")) or ContactPerson.DEFAULT_TYPE_NAME,
            type_contact_other_detail=text(contact.get("typeContactOtherDetail")),
            **_person_kwargs(
                contact,
                text(contact.get("firstNameTh")),
                text(contact.get("lastNameTh")),
                text(contact.get("firstNameEn")),
                text(contact.get("lastNameEn")),
            ),
        )
        for contact in contacts
    ]
    ContactPerson.objects.bulk_create(rows)
    return rows


def create_representatives(application, data):
    representatives = ensure_list(data.get("representatives"))
    rows = []
    for index, rep in enumerate(representatives):
        rep = rep or {}
        first_en = text(rep.get("firstNameEnglish") or rep.get("firstNameEn"))
        last_en = text(rep.get("lastNameEnglish") or rep.get("lastNameEn"))
        if not first_en or not last_en:
            raise ValidationFailed(f"กรุณากรอกชื่อ-นามสกุลภาษาอังกฤษของผู้แทนคนที่ {index + 1}")
        rows.append(
            Representative(
                application=application,
                is_primary=bool(rep.get("isPrimary")),
                rep_order=index + 1,
                **_person_kwargs(
                    rep,
                    text(rep.get("firstNameThai") or rep.get("firstNameTh")),
                    text(rep.get("lastNameThai") or rep.get("lastNameTh")),
                    first_en,
                    last_en,
                ),
            )
        )
    Representative.objects.bulk_create(rows)
    return rows


def selected_business_types(raw):
    """Accept ``{"manufacturer": true, ...}`` or a list of codes; keep known codes only."""
    value = parse_json_value(raw, default={})
    if isinstance(value, dict):
        codes = [key for key, selected in value.items() if selected is True]
    elif isinstance(value, list):
        codes = [str(code) for code in value]
    else:
        codes = []
    return [code for code in dict.fromkeys(codes) if code in BusinessType.ALLOWED]


def create_business_types(application, data):
    rows = [
        BusinessType(application=application, business_type=code)
        for code in selected_business_types(data.get("businessTypes"))
    ]
    BusinessType.objects.bulk_create(rows)
    return rows


def create_products(application, products):
    rows = [
        Product(
            application=application,
            name_th=text(product.get("nameTh") or product.get("name_th")),
            name_en=text(product.get("nameEn") or product.get("name_en")),
        )
        for product in products
        if isinstance(product, dict)
    ]
    if not rows:
        rows = [
            Product(
                application=application,
                name_th=Product.DEFAULT_NAME_TH,
                name_en=Product.DEFAULT_NAME_EN,
            )
        ]
    Product.objects.bulk_create(rows)
    return rows


def create_industry_groups(application, ids, names):
    pairs = [(text(group_id), text(names[i]) if i < len(names) else "") for i, group_id in enumerate(ids)]
    rows = [
        IndustryGroup(
            application=application,
            industry_group_id=group_id or UNSPECIFIED_CODE,
            industry_group_name=name or UNSPECIFIED_NAME,
        )
        for group_id, name in pairs
    ] or [IndustryGroup(application=application)]
    IndustryGroup.objects.bulk_create(rows)
    return rows


def create_province_chapters(application, ids, names):
    pairs = [(text(chapter_id), text(names[i]) if i < len(names) else "") for i, chapter_id in enumerate(ids)]
    rows = [
        ProvinceChapter(
            application=application,
            province_chapter_id=chapter_id or UNSPECIFIED_CODE,
            province_chapter_name=name or UNSPECIFIED_NAME,
        )
        for chapter_id, name in pairs
    ] or [ProvinceChapter(application=application)]
    ProvinceChapter.objects.bulk_create(rows)
    return rows


def create_signatory(application, data):
    first_th = _signatory_value(data, "FirstNameTh")
    last_th = _signatory_value(data, "LastNameTh")
    first_en = _signatory_value(data, "FirstNameEn")
    last_en = _signatory_value(data, "LastNameEn")
    if not (first_th and last_th and first_en and last_en):
        return None
    return AuthorizedSignatory.objects.create(
        application=application,
        prename_th=_signatory_value(data, "PrenameTh"),
        prename_en=_signatory_value(data, "PrenameEn"),
        prename_other=_signatory_value(data, "PrenameOther"),
        prename_other_en=_signatory_value(data, "PrenameOtherEn"),
        first_name_th=first_th,
        last_name_th=last_th,
        first_name_en=first_en,
        last_name_en=last_en,
        position_th=_signatory_value(data, "PositionTh"),
        position_en=_signatory_value(data, "PositionEn"),
    )


#########################
# Main row


def _company_fields(data, addresses, numbers):
    email, phone, extension = _company_contact(data, addresses)
    return {
        "company_name_th": text(data.get("companyName") or data.get("associationName")),
        "company_name_en": text(
            data.get("companyNameEng") or data.get("companyNameEn") or data.get("associationNameEng")
        ),
        "company_email": email,
        "company_phone": phone,
        "company_phone_extension": extension,
        "company_website": text(data.get("companyWebsite")),
        "factory_type": text(data.get("factoryType")),
        "number_of_employees": parse_int(data.get("numberOfEmployees")),
        "number_of_member": parse_int(data.get("numberOfMember")),
        "production_capacity_unit": text(data.get("productionCapacityUnit")),
        "registered_capital": numbers["registeredCapital"],
        "production_capacity_value": numbers["productionCapacityValue"],
        "sales_domestic": numbers["salesDomestic"],
        "sales_export": numbers["salesExport"],
        "revenue_last_year": numbers["revenueLastYear"],
        "revenue_previous_year": numbers["revenuePreviousYear"],
        "shareholder_thai_percent": numbers["shareholderThaiPercent"],
        "shareholder_foreign_percent": numbers["shareholderForeignPercent"],
        "business_type_other_detail": text(data.get("otherBusinessTypeDetail")),
    }


def _individual_fields(data):
    return {
        "prename_th": text(data.get("prenameTh")),
        "prename_en": text(data.get("prenameEn")),
        "first_name_th": text(data.get("firstNameTh") or data.get("firstNameThai")),
        "last_name_th": text(data.get("lastNameTh") or data.get("lastNameThai")),
        "first_name_en": text(data.get("firstNameEn") or data.get("firstNameEng")),
        "last_name_en": text(data.get("lastNameEn") or data.get("lastNameEng")),
        "phone": text(data.get("phone")),
        "phone_extension": text(data.get("phoneExtension")),
        "email": text(data.get("email")),
        "website": text(data.get("website")),
        "business_type_other_detail": text(data.get("otherBusinessTypeDetail")),
    }


def resolve_identifier(membership_type, data):
    """Return the normalised tax id or id card number, or raise 400."""
    if membership_type == MembershipType.IC:
        identifier = normalize_identifier(data.get("idCardNumber"))
        if not is_valid_identifier(identifier):
            raise ValidationFailed("เลขบัตรประชาชนต้องเป็นตัวเลข 13 หลัก")
    else:
        identifier = normalize_identifier(data.get("taxId"))
        if not is_valid_identifier(identifier):
            raise ValidationFailed("เลขประจำตัวผู้เสียภาษีไม่ถูกต้อง กรุณาตรวจสอบและลองใหม่อีกครั้ง")
    return identifier


def ensure_identifier_available(membership_type, identifier, exclude_pk=None):
    if membership_type == MembershipType.IC:
        existing = live_applications_for_id_card(identifier, exclude_pk=exclude_pk)
        statuses = set(existing.values_list("status", flat=True))
        if statuses:
            key = ApplicationStatus.PENDING if ApplicationStatus.PENDING in statuses else ApplicationStatus.APPROVED
            raise Conflict(ID_CARD_MESSAGES[key])
        return
    existing = live_applications_for_tax_id(identifier, exclude_pk=exclude_pk)
    statuses = set(existing.values_list("status", flat=True))
    if statuses:
        raise Conflict(duplicate_tax_id_message(identifier, statuses))


def write_sections(application, data):
    """(Re)create every child section from form data. Used by submit and resubmit."""
    addresses = parse_json_value(data.get("addresses"), default=None)
    if not isinstance(addresses, dict):
        addresses = None
    create_addresses(application, data, addresses)
    create_contact_persons(application, data)
    create_representatives(application, data)
    create_business_types(application, data)
    create_products(application, ensure_list(data.get("products")))
    create_industry_groups(
        application,
        ensure_list(data.get("industrialGroupIds")),
        ensure_list(data.get("industrialGroupNames")),
    )
    create_province_chapters(
        application,
        ensure_list(data.get("provincialChapterIds")),
        ensure_list(data.get("provincialChapterNames")),
    )
    create_signatory(application, data)
    return addresses


def main_fields(membership_type, data):
    if membership_type == MembershipType.IC:
        return _individual_fields(data)
    addresses = parse_json_value(data.get("addresses"), default=None)
    if not isinstance(addresses, dict):
        addresses = None
    numbers = sanitize_numbers(data, MONEY_FIELDS, PERCENT_FIELDS)
    fields = _company_fields(data, addresses, numbers)
    if not fields["company_name_th"]:
        raise ValidationFailed("กรุณาระบุชื่อบริษัท")
    return fields


#########################
# Documents


def iter_uploaded_files(files):
    """Yield ``(document_type, file)`` from a ``request.FILES``-like mapping."""
    if not files:
        return
    items = files.lists() if hasattr(files, "lists") else files.items()
    for field_name, values in items:
        if not isinstance(values, (list, tuple)):
            values = [values]
        document_type = field_name
        for multi in MULTI_FILE_FIELDS:
            if field_name.startswith(f"{multi}["):
                document_type = multi
        for file in values:
            if file is not None and getattr(file, "size", 0):
                yield document_type, file


def upload_documents(application, pairs, on_progress=None):
    """Upload ``(document_type, file)`` pairs. Returns unsaved ``(documents, failed)``."""
    results = upload_files_with_concurrency_limit(
        [file for _, file in pairs],
        folder=document_folder(application.membership_type),
        max_concurrent=getattr(settings, "UPLOAD_MAX_CONCURRENT", 2),
        on_progress=on_progress,
    )

    documents, failed = [], []
    for (document_type, file), result in zip(pairs, results):
        if not result["success"]:
            logger.error(
                "Document %s (%s) for application %s failed to upload: %s",
                document_type,
                result.get("fileName"),
                application.pk,
                result.get("error"),
            )
            failed.append(result)
            continue
        documents.append(
            ApplicationDocument(
                application=application,
                document_type=document_type,
                file_name=result["fileName"],
                file_url=result["url"],
                public_id=result["public_id"],
                file_size=result.get("fileSize"),
                mime_type=result.get("fileType") or "",
            )
        )
    return documents, failed


def store_documents(application, files, on_progress=None):
    """Upload files and record the successful ones. Returns ``(documents, failed)``."""
    pairs = list(iter_uploaded_files(files))
    if not pairs:
        return [], []
    documents, failed = upload_documents(application, pairs, on_progress=on_progress)
    ApplicationDocument.objects.bulk_create(documents)
    return documents, failed


def replace_documents(user, pk, files, request=None):
    """
    Replace an application's attachments with newly uploaded files.

    Only document types with at least one successful upload are replaced;
    their previous rows are removed in the same transaction that records the
    new ones. Returns ``{"replaced", "documentsUploaded", "documentsFailed"}``.
    Raises ``Forbidden`` for someone else's application and
    ``ExternalServiceError`` when every upload fails.
    """
    application = MembershipApplication.objects.filter(pk=pk, user=user).first()
    if application is None:
        raise Forbidden("ไม่พบใบสมัครนี้หรือคุณไม่มีสิทธิ์แก้ไข")

    pairs = list(iter_uploaded_files(files))
    if not pairs:
        return {"replaced": [], "documentsUploaded": 0, "documentsFailed": 0}

    documents, failed = upload_documents(application, pairs)
    if not documents:
        raise ExternalServiceError("ไม่สามารถอัปเดตเอกสารแนบได้ กรุณาลองใหม่อีกครั้ง")
    replaced = sorted({document.document_type for document in documents})
    with transaction.atomic():
        application.documents.filter(document_type__in=replaced).delete()
        ApplicationDocument.objects.bulk_create(documents)

    log_user_action(
        request,
        user,
        f"{application.membership_type.upper()}_membership_update_documents",
        f"APPLICATION: {application.pk} - {', '.join(replaced)}",
    )
    logger.info(
        "User %s replaced %s on application %s (%s failed)",
        user.pk,
        replaced,
        application.pk,
        len(failed),
    )
    return {
        "replaced": replaced,
        "documentsUploaded": len(documents),
        "documentsFailed": len(failed),
    }


#########################
# Entry point


def submit_application(user, membership_type, data, files=None, request=None):
    """
    Create a membership application of ``membership_type`` for ``user``.

    Returns ``(application, summary)`` where ``summary`` reports uploaded and
    failed documents. Raises ``ValidationFailed`` (400) or ``Conflict`` (409).
    """
    if membership_type not in MembershipType.values:
        raise ValidationFailed("ประเภทสมาชิกไม่ถูกต้อง")

    validate_signatory(data)
    identifier = resolve_identifier(membership_type, data)
    fields = main_fields(membership_type, data)

    with transaction.atomic():
        ensure_identifier_available(membership_type, identifier)
        if membership_type == MembershipType.IC:
            fields["id_card_number"] = identifier
        else:
            fields["tax_id"] = identifier

        application = MembershipApplication.objects.create(
            user=user,
            membership_type=membership_type,
            status=ApplicationStatus.PENDING,
            **fields,
        )
        write_sections(application, data)
        ApplicationStatusLog.objects.create(
            application=application,
            status=ApplicationStatus.PENDING,
            note=SUBMITTED_STATUS_NOTE,
            created_by=user,
        )

    logger.info(
        "User %s submitted %s application %s for %s",
        user.pk,
        membership_type.upper(),
        application.pk,
        identifier,
    )

    documents, failed = store_documents(application, files)

    log_user_action(
        request,
        user,
        f"{membership_type.upper()}_membership_submit",
        f"{'ID_CARD' if membership_type == MembershipType.IC else 'TAX_ID'}: {identifier} - {application.display_name}",
    )
    ApplicationDraft.objects.filter(
        user=user, membership_type=membership_type, identifier=identifier
    ).delete()
    emails.send_submission_confirmation(application)
    create_notification(
        user,
        Notification.TYPE_MEMBERSHIP_APPLICATION,
        f"ใบสมัครสมาชิก {application.type_label} ของ {application.display_name} "
        "ถูกส่งเรียบร้อยแล้ว อยู่ระหว่างการพิจารณา",
        link="/dashboard?tab=status",
    )

    return application, {"documentsUploaded": len(documents), "documentsFailed": len(failed)}
