"""
Administrative review of membership applications.

Every state change happens in one transaction together with its status log
and admin log entry. Emails and notifications go out after the commit and
are tolerated on failure, so the admin's action never depends on them.
"""

import logging

from django.db import transaction
from django.db.models import Count, Q
from django.utils import timezone

from activity.models import AdminActionLog
from activity.services import log_admin_action
from companies.services import link_registry_member
from legacy.services import find_member_by_tax_id
from notifications.models import Notification
from notifications.services import create_notification
from utils.exceptions import Conflict, NotFound, ValidationFailed

from . import emails
from .checks import live_applications_for_tax_id
from .models import (
    MEMBER_TYPE_ABBREVIATIONS,
    ApplicationAddress,
    ApplicationSnapshot,
    ApplicationStatus,
    ApplicationStatusLog,
    BusinessType,
    MembershipApplication,
    MembershipType,
    Rejection,
    RejectionConversation,
)
from .serializers import application_detail
from .submission import (
    MONEY_FIELDS,
    PERCENT_FIELDS,
    create_addresses,
    create_industry_groups,
    create_products,
    create_province_chapters,
)
from .validators import ensure_list, parse_int, parse_json_value, sanitize_numbers, text

logger = logging.getLogger(__name__)

SWITCHABLE_TYPES = (MembershipType.OC, MembershipType.AC)

FINANCIAL_FIELDS = {
    "registeredCapital": "registered_capital",
    "productionCapacityValue": "production_capacity_value",
    "salesDomestic": "sales_domestic",
    "salesExport": "sales_export",
    "revenueLastYear": "revenue_last_year",
    "revenuePreviousYear": "revenue_previous_year",
    "shareholderThaiPercent": "shareholder_thai_percent",
    "shareholderForeignPercent": "shareholder_foreign_percent",
}


def get_application(pk, for_update=False):
    applications = MembershipApplication.objects.select_related("user")
    if for_update:
        applications = applications.select_for_update()
    application = applications.filter(pk=pk).first()
    if application is None:
        raise NotFound("ไม่พบข้อมูลใบสมัคร")
    return application


def list_applications(membership_type=None, status=None, search=""):
    applications = MembershipApplication.objects.select_related("user")
    if membership_type:
        applications = applications.filter(membership_type=membership_type.lower())
    if status not in (None, ""):
        try:
            applications = applications.filter(status=int(status))
        except (TypeError, ValueError) as exc:
            raise ValidationFailed("สถานะไม่ถูกต้อง") from exc
    if search:
        applications = applications.filter(
            Q(company_name_th__icontains=search)
            | Q(company_name_en__icontains=search)
            | Q(tax_id__icontains=search)
            | Q(id_card_number__icontains=search)
            | Q(first_name_th__icontains=search)
            | Q(last_name_th__icontains=search)
            | Q(first_name_en__icontains=search)
            | Q(last_name_en__icontains=search)
        )
    return applications


def load_detail(pk):
    application = get_application(pk)
    return application_detail(application)


def approve_application(request, admin, pk, note=""):
    with transaction.atomic():
        application = get_application(pk, for_update=True)
        try:
            application.approve(admin, note=(note or "").strip())
        except ValueError as exc:
            raise ValidationFailed("ใบสมัครนี้ไม่อยู่ในสถานะที่สามารถอนุมัติได้") from exc
        ApplicationStatusLog.objects.create(
            application=application,
            status=ApplicationStatus.APPROVED,
            note=note or "อนุมัติใบสมัคร",
            created_by=admin,
        )
        log_admin_action(
            request,
            admin,
            AdminActionLog.ACTION_APPROVE,
            application.pk,
            {
                "type": application.membership_type,
                "companyName": application.display_name,
                "taxId": application.identifier,
                "note": note,
            },
        )

    create_notification(
        application.user,
        Notification.TYPE_MEMBERSHIP_APPLICATION,
        f"ใบสมัครสมาชิก {application.type_label} ของ {application.display_name} ได้รับการอนุมัติแล้ว",
        link="/dashboard?tab=status",
    )
    emails.send_approval_email(application, comment=note)
    logger.info("Admin %s approved application %s", admin.pk, application.pk)
    return application


def reject_application(request, admin, pk, reason, admin_note=""):
    """
    Reject an application and open a rejection conversation.

    A snapshot of the application is stored before anything changes. The
    reason becomes the first conversation message; an optional admin note
    follows as the second.
    """
    reason = (reason or "").strip()
    if not reason:
        raise ValidationFailed("กรุณาระบุเหตุผลในการปฏิเสธ")
    admin_note = (admin_note or "").strip()

    with transaction.atomic():
        application = get_application(pk, for_update=True)
        if application.status not in (ApplicationStatus.PENDING, ApplicationStatus.RESUBMITTED):
            raise ValidationFailed("ใบสมัครนี้ไม่อยู่ในสถานะที่สามารถปฏิเสธได้")

        snapshot = ApplicationSnapshot.objects.create(
            application=application,
            snapshot_type=ApplicationSnapshot.TYPE_REJECTION,
            data=application_detail(application),
            created_by=admin,
        )
        application.reject(admin, reason)
        now = timezone.now()
        rejection = Rejection.objects.create(
            application=application,
            user=application.user,
            snapshot=snapshot,
            reason=reason,
            rejected_by=admin,
            rejected_at=now,
            unread_member_count=1,
            last_conversation_at=now,
        )
        RejectionConversation.objects.create(
            rejection=rejection,
            sender_type=RejectionConversation.SENDER_ADMIN,
            sender=admin,
            message=reason,
            created_at=now,
        )
        if admin_note:
            RejectionConversation.objects.create(
                rejection=rejection,
                sender_type=RejectionConversation.SENDER_ADMIN,
                sender=admin,
                message=admin_note,
            )
        ApplicationStatusLog.objects.create(
            application=application,
            status=ApplicationStatus.REJECTED,
            note=reason,
            created_by=admin,
        )
        log_admin_action(
            request,
            admin,
            AdminActionLog.ACTION_REJECT,
            application.pk,
            {
                "type": application.membership_type,
                "reason": reason,
                "companyName": application.display_name,
                "taxId": application.identifier,
                "rejectionId": rejection.pk,
            },
        )

    email_sent = emails.send_rejection_email(application, reason)
    create_notification(
        application.user,
        Notification.TYPE_MEMBERSHIP_APPLICATION,
        f"ใบสมัครสมาชิก {application.type_label} ของ {application.display_name} "
        f"ถูกปฏิเสธ: {reason}",
        link="/dashboard?tab=status",
    )
    logger.info("Admin %s rejected application %s", admin.pk, application.pk)

    return {
        "rejectionId": rejection.pk,
        "emailSent": email_sent,
        "recipientEmail": application.user.email,
        "recipientName": application.user.display_name,
        "companyName": application.display_name,
        "taxId": application.identifier,
    }


def save_admin_note(request, admin, pk, note):
    with transaction.atomic():
        application = get_application(pk, for_update=True)
        application.admin_note = note or ""
        application.admin_note_by = admin
        application.admin_note_at = timezone.now()
        application.save(update_fields=["admin_note", "admin_note_by", "admin_note_at", "updated_at"])
        log_admin_action(request, admin, AdminActionLog.ACTION_SAVE_NOTE, application.pk, note)
    return application


#########################
# Section edits


def _update_financial(application, data):
    present = [key for key in FINANCIAL_FIELDS if key in data]
    numbers = sanitize_numbers(
        data,
        [key for key in present if key in MONEY_FIELDS],
        [key for key in present if key in PERCENT_FIELDS],
    )
    for key, value in numbers.items():
        setattr(application, FINANCIAL_FIELDS[key], value)
    if "productionCapacityUnit" in data:
        application.production_capacity_unit = text(data["productionCapacityUnit"])
    if "numberOfEmployees" in data:
        application.number_of_employees = parse_int(data["numberOfEmployees"])
    application.save()


def _update_business_types(application, data):
    raw = parse_json_value(data.get("businessTypes"), default={})
    if isinstance(raw, dict):
        requested = [key for key, selected in raw.items() if selected is True]
    elif isinstance(raw, list):
        requested = [str(code) for code in raw]
    else:
        raise ValidationFailed("ประเภทธุรกิจไม่ถูกต้อง")
    unknown = [code for code in requested if code not in BusinessType.ALLOWED]
    if unknown:
        raise ValidationFailed("ประเภทธุรกิจไม่ถูกต้อง", details=", ".join(unknown))

    application.business_types.all().delete()
    BusinessType.objects.bulk_create(
        BusinessType(application=application, business_type=code)
        for code in dict.fromkeys(requested)
    )
    if "otherBusinessTypeDetail" in data:
        application.business_type_other_detail = text(data["otherBusinessTypeDetail"])
        application.save(update_fields=["business_type_other_detail", "updated_at"])


def _update_products(application, data):
    application.products.all().delete()
    create_products(application, ensure_list(data.get("products")))


def _update_addresses(application, data):
    addresses = parse_json_value(data.get("addresses"), default=None)
    if not isinstance(addresses, dict) or not addresses:
        raise ValidationFailed("ข้อมูลที่อยู่ไม่ถูกต้อง")
    application.addresses.filter(address_type__in=list(addresses)).delete()
    create_addresses(application, data, addresses)


def _update_industry_groups(application, data):
    application.industry_groups.all().delete()
    create_industry_groups(
        application,
        ensure_list(data.get("industrialGroupIds")),
        ensure_list(data.get("industrialGroupNames")),
    )


def _update_province_chapters(application, data):
    application.province_chapters.all().delete()
    create_province_chapters(
        application,
        ensure_list(data.get("provincialChapterIds")),
        ensure_list(data.get("provincialChapterNames")),
    )


SECTION_UPDATERS = {
    "financial": _update_financial,
    "businessTypes": _update_business_types,
    "products": _update_products,
    "addresses": _update_addresses,
    "industrialGroups": _update_industry_groups,
    "provinceChapters": _update_province_chapters,
}


def update_section(request, admin, pk, section, data):
    updater = SECTION_UPDATERS.get(section)
    if updater is None:
        raise ValidationFailed("ไม่รองรับการแก้ไขข้อมูลส่วนนี้")

    with transaction.atomic():
        application = get_application(pk, for_update=True)
        updater(application, data)
        log_admin_action(
            request,
            admin,
            AdminActionLog.ACTION_UPDATE_APPLICATION,
            application.pk,
            {"type": application.membership_type, "section": section, "changes": data},
        )
    logger.info("Admin %s updated %s of application %s", admin.pk, section, application.pk)
    return application


def switch_type(request, admin, pk, new_type):
    """Move an application between OC and AC, keeping its tax id unique per type."""
    new_type = (new_type or "").lower()
    with transaction.atomic():
        application = get_application(pk, for_update=True)
        old_type = application.membership_type
        if old_type == new_type:
            raise ValidationFailed("ประเภทสมาชิกใหม่ต้องไม่ซ้ำกับประเภทเดิม")
        if old_type not in SWITCHABLE_TYPES or new_type not in SWITCHABLE_TYPES:
            raise ValidationFailed("สามารถเปลี่ยนประเภทได้เฉพาะระหว่าง OC และ AC เท่านั้น")

        if live_applications_for_tax_id(
            application.tax_id, membership_types=[new_type], exclude_pk=application.pk
        ).exists():
            raise Conflict(
                f"เลขประจำตัวผู้เสียภาษี {application.tax_id} มีใบสมัครประเภท "
                f"{new_type.upper()} อยู่แล้ว"
            )

        application.membership_type = new_type
        fields = ["membership_type", "updated_at"]
        if new_type == MembershipType.AC:
            application.factory_type = ""
            fields.append("factory_type")
        application.save(update_fields=fields)

        log_admin_action(
            request,
            admin,
            AdminActionLog.ACTION_SWITCH_TYPE,
            application.pk,
            {"from": old_type, "to": new_type, "taxId": application.tax_id},
        )
    logger.info(
        "Admin %s switched application %s from %s to %s", admin.pk, application.pk, old_type, new_type
    )
    return application


def connect_member_code(request, admin, pk):
    """
    Link an approved application to its registry member code.

    The registry is searched by tax id (id card number for IC). The user's
    ``CompanyMember`` link is created or refreshed and the user is promoted.
    """
    application = get_application(pk)
    if application.status != ApplicationStatus.APPROVED:
        raise ValidationFailed("ใบสมัครต้องได้รับการอนุมัติก่อนเชื่อมต่อหมายเลขสมาชิก")

    registry = find_member_by_tax_id(application.identifier)
    if registry is None:
        raise NotFound("ไม่พบข้อมูลสมาชิกในระบบทะเบียนสมาชิก")

    with transaction.atomic():
        application = get_application(pk, for_update=True)
        application.member_code = registry.member_code
        application.save(update_fields=["member_code", "updated_at"])
        link_registry_member(
            application.user,
            registry,
            MEMBER_TYPE_ABBREVIATIONS[application.membership_type],
            admin,
        )
        application.user.promote_to_member()
        log_admin_action(
            request,
            admin,
            AdminActionLog.ACTION_CONNECT_MEMBER_CODE,
            application.pk,
            {
                "memberCode": registry.member_code,
                "companyName": application.display_name,
                "taxId": application.identifier,
            },
        )

    create_notification(
        application.user,
        Notification.TYPE_MEMBER_CONNECTION,
        f"หมายเลขสมาชิก {registry.member_code} {application.display_name} "
        "เป็นสมาชิกสภาอุตสาหกรรมแห่งประเทศไทยเรียบร้อยแล้ว",
        link="/dashboard?tab=member",
        member_code=registry.member_code,
        company_name=application.display_name,
        member_type=MEMBER_TYPE_ABBREVIATIONS[application.membership_type],
    )
    emails.send_member_connection_email(application, registry.member_code)
    logger.info(
        "Admin %s connected application %s to member %s", admin.pk, application.pk, registry.member_code
    )
    return {"memberCode": registry.member_code, "companyName": application.display_name}


def application_counts():
    """Counts per type and status, plus office-address provinces."""
    by_type = {
        value: {"total": 0, **{str(status): 0 for status in ApplicationStatus.values}}
        for value in MembershipType.values
    }
    rows = MembershipApplication.objects.values("membership_type", "status").annotate(
        count=Count("id")
    )
    for row in rows:
        bucket = by_type.setdefault(row["membership_type"], {"total": 0})
        bucket[str(row["status"])] = row["count"]
        bucket["total"] += row["count"]

    provinces = (
        ApplicationAddress.objects.filter(address_type=ApplicationAddress.TYPE_OFFICE)
        .exclude(province="")
        .values("province")
        .annotate(count=Count("application", distinct=True))
        .order_by("-count", "province")
    )
    return {
        "byType": by_type,
        "total": sum(bucket["total"] for bucket in by_type.values()),
        "byProvince": [{"province": p["province"], "count": p["count"]} for p in provinces],
    }
