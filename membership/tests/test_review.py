import json
from decimal import Decimal
from unittest.mock import patch

import pytest

from activity.models import AdminActionLog
from companies.models import CompanyMember
from legacy.models import RegistryMember
from membership import review
from membership.models import (
    ApplicationAddress,
    ApplicationSnapshot,
    ApplicationStatus,
    BusinessType,
    IndustryGroup,
    MembershipType,
    Product,
    Rejection,
)
from notifications.models import Notification
from utils.exceptions import Conflict, NotFound, ValidationFailed


@pytest.mark.django_db
def test_approve_pending_application(portal_admin, make_application, mailoutbox):
    application = make_application()

    review.approve_application(None, portal_admin, application.pk, note="เอกสารครบ")

    application.refresh_from_db()
    assert application.status == ApplicationStatus.APPROVED
    assert application.approved_by == portal_admin
    assert application.admin_note == "เอกสารครบ"
    assert application.status_logs.get().status == ApplicationStatus.APPROVED
    assert AdminActionLog.objects.get().action_type == AdminActionLog.ACTION_APPROVE
    notification = Notification.objects.get(user=application.user)
    assert notification.message.endswith("ได้รับการอนุมัติแล้ว")
    assert len(mailoutbox) == 1


@pytest.mark.django_db
def test_cannot_approve_rejected_application(portal_admin, make_application):
    application = make_application(status=ApplicationStatus.REJECTED)
    with pytest.raises(ValidationFailed):
        review.approve_application(None, portal_admin, application.pk)
    assert not AdminActionLog.objects.exists()


@pytest.mark.django_db
def test_missing_application_is_not_found(portal_admin):
    with pytest.raises(NotFound):
        review.approve_application(None, portal_admin, 999)


@pytest.mark.django_db
def test_reject_opens_a_conversation(portal_admin, make_application, mailoutbox):
    application = make_application()

    result = review.reject_application(
        None, portal_admin, application.pk, "หนังสือรับรองหมดอายุ", admin_note="กรุณาแนบฉบับใหม่"
    )

    application.refresh_from_db()
    assert application.status == ApplicationStatus.REJECTED
    assert application.rejection_reason == "หนังสือรับรองหมดอายุ"

    rejection = Rejection.objects.get(pk=result["rejectionId"])
    assert rejection.status == Rejection.STATUS_PENDING_FIX
    assert rejection.unread_member_count == 1
    assert [c.message for c in rejection.conversations.all()] == [
        "หนังสือรับรองหมดอายุ",
        "กรุณาแนบฉบับใหม่",
    ]
    assert rejection.snapshot.snapshot_type == ApplicationSnapshot.TYPE_REJECTION
    assert rejection.snapshot.data["main"]["tax_id"] == "0105551234567"
    assert rejection.snapshot.data["status"] == ApplicationStatus.PENDING

    assert result["emailSent"] is True
    assert result["recipientEmail"] == "somchai@example.com"
    assert result["taxId"] == "0105551234567"
    assert "ถูกปฏิเสธ: หนังสือรับรองหมดอายุ" in Notification.objects.get().message


@pytest.mark.django_db
def test_reject_requires_reason(portal_admin, make_application):
    application = make_application()
    with pytest.raises(ValidationFailed):
        review.reject_application(None, portal_admin, application.pk, "   ")
    application.refresh_from_db()
    assert application.status == ApplicationStatus.PENDING


@pytest.mark.django_db
def test_save_admin_note(portal_admin, make_application):
    application = make_application()
    review.save_admin_note(None, portal_admin, application.pk, "<p>โทรติดตามแล้ว</p>")
    application.refresh_from_db()
    assert application.admin_note == "<p>โทรติดตามแล้ว</p>"
    assert application.admin_note_by == portal_admin
    assert AdminActionLog.objects.get().action_type == AdminActionLog.ACTION_SAVE_NOTE


#########################
# Section edits


@pytest.mark.django_db
def test_update_business_types(portal_admin, make_application):
    application = make_application()
    BusinessType.objects.create(application=application, business_type="service")

    review.update_section(
        None,
        portal_admin,
        application.pk,
        "businessTypes",
        {"businessTypes": {"manufacturer": True, "importer": True}},
    )

    assert set(application.business_types.values_list("business_type", flat=True)) == {
        "manufacturer",
        "importer",
    }
    log = AdminActionLog.objects.get()
    assert log.action_type == AdminActionLog.ACTION_UPDATE_APPLICATION


@pytest.mark.django_db
def test_update_business_types_rejects_unknown_code(portal_admin, make_application):
    application = make_application()
    with pytest.raises(ValidationFailed):
        review.update_section(
            None, portal_admin, application.pk, "businessTypes", {"businessTypes": ["mining"]}
        )


@pytest.mark.django_db
def test_update_unknown_section(portal_admin, make_application):
    application = make_application()
    with pytest.raises(ValidationFailed):
        review.update_section(None, portal_admin, application.pk, "password", {})


@pytest.mark.django_db
def test_update_addresses_replaces_rows(portal_admin, make_application):
    application = make_application()
    ApplicationAddress.objects.create(application=application, address_type="1", province="ระยอง")

    review.update_section(
        None,
        portal_admin,
        application.pk,
        "addresses",
        {"addresses": {"1": {"province": "ชลบุรี"}, "3": {"province": "ชลบุรี"}}},
    )

    assert sorted(application.addresses.values_list("address_type", "province")) == [
        ("1", "ชลบุรี"),
        ("3", "ชลบุรี"),
    ]


@pytest.mark.django_db
def test_update_financial_sanitises_numbers(portal_admin, make_application):
    application = make_application()

    review.update_section(
        None,
        portal_admin,
        application.pk,
        "financial",
        {
            "registeredCapital": "฿ 2,500,000.555",
            "shareholderThaiPercent": "100",
            "numberOfEmployees": "1,250",
            "productionCapacityUnit": " ตัน/ปี ",
        },
    )

    application.refresh_from_db()
    assert application.registered_capital == Decimal("2500000.56")
    assert application.shareholder_thai_percent == Decimal("100.00")
    assert application.number_of_employees == 1250
    assert application.production_capacity_unit == "ตัน/ปี"


@pytest.mark.django_db
@pytest.mark.parametrize(
    "data",
    [
        {"shareholderForeignPercent": "100.5"},
        {"registeredCapital": "-10"},
        {"salesExport": "1e30"},
    ],
)
def test_update_financial_rejects_out_of_range_values(portal_admin, make_application, data):
    application = make_application()
    with pytest.raises(ValidationFailed) as excinfo:
        review.update_section(None, portal_admin, application.pk, "financial", data)
    assert excinfo.value.status_code == 400
    assert not AdminActionLog.objects.exists()


@pytest.mark.django_db
def test_update_financial_endpoint_returns_400(portal_admin_client, make_application):
    application = make_application()
    response = portal_admin_client.post(
        f"/api/membership/admin/applications/{application.pk}/update",
        {"section": "financial", "data": {"shareholderThaiPercent": "250"}},
        content_type="application/json",
    )
    assert response.status_code == 400
    assert response.json()["success"] is False


@pytest.mark.django_db
def test_update_products_falls_back_to_placeholder(portal_admin, make_application):
    application = make_application()
    Product.objects.create(application=application, name_th="เหล็กเส้น", name_en="Rebar")

    review.update_section(
        None,
        portal_admin,
        application.pk,
        "products",
        {"products": json.dumps([{"nameTh": "ท่อเหล็ก", "nameEn": "Steel pipe"}])},
    )
    assert list(application.products.values_list("name_th", "name_en")) == [
        ("ท่อเหล็ก", "Steel pipe")
    ]

    review.update_section(None, portal_admin, application.pk, "products", {"products": []})
    assert list(application.products.values_list("name_th", "name_en")) == [
        (Product.DEFAULT_NAME_TH, Product.DEFAULT_NAME_EN)
    ]


@pytest.mark.django_db
def test_update_industry_groups(portal_admin, make_application):
    application = make_application()
    IndustryGroup.objects.create(application=application, industry_group_id="010")

    review.update_section(
        None,
        portal_admin,
        application.pk,
        "industrialGroups",
        {"industrialGroupIds": ["020", "030"], "industrialGroupNames": ["ยานยนต์"]},
    )
    assert sorted(application.industry_groups.values_list("industry_group_id", "industry_group_name")) == [
        ("020", "ยานยนต์"),
        ("030", "ไม่ระบุ"),
    ]

    review.update_section(None, portal_admin, application.pk, "industrialGroups", {})
    assert list(application.industry_groups.values_list("industry_group_id", "industry_group_name")) == [
        ("000", "ไม่ระบุ")
    ]


@pytest.mark.django_db
def test_update_province_chapters(portal_admin, make_application):
    application = make_application()

    review.update_section(
        None,
        portal_admin,
        application.pk,
        "provinceChapters",
        {"provincialChapterIds": '["21"]', "provincialChapterNames": '["ระยอง"]'},
    )
    assert list(application.province_chapters.values_list("province_chapter_id", "province_chapter_name")) == [
        ("21", "ระยอง")
    ]

    review.update_section(
        None, portal_admin, application.pk, "provinceChapters", {"provincialChapterIds": []}
    )
    assert list(application.province_chapters.values_list("province_chapter_id", "province_chapter_name")) == [
        ("000", "ไม่ระบุ")
    ]


#########################
# Switching type


@pytest.mark.django_db
def test_switch_oc_to_ac_clears_factory_type(portal_admin, make_application):
    application = make_application(factory_type="type1")

    review.switch_type(None, portal_admin, application.pk, "AC")

    application.refresh_from_db()
    assert application.membership_type == MembershipType.AC
    assert application.factory_type == ""
    description = json.loads(AdminActionLog.objects.get().description)
    assert description == {"from": "oc", "to": "ac", "taxId": "0105551234567"}


@pytest.mark.django_db
def test_switch_to_same_type_is_rejected(portal_admin, make_application):
    application = make_application()
    with pytest.raises(ValidationFailed):
        review.switch_type(None, portal_admin, application.pk, "oc")


@pytest.mark.django_db
def test_switch_only_between_oc_and_ac(portal_admin, make_application):
    application = make_application(membership_type=MembershipType.AM)
    with pytest.raises(ValidationFailed):
        review.switch_type(None, portal_admin, application.pk, "oc")


@pytest.mark.django_db
def test_switch_conflicts_with_live_application_of_target_type(
    portal_admin, make_application
):
    application = make_application(status=ApplicationStatus.REJECTED)
    make_application(membership_type=MembershipType.AC)
    with pytest.raises(Conflict):
        review.switch_type(None, portal_admin, application.pk, "ac")


#########################
# Registry link


@pytest.mark.django_db(databases=["default", "legacy"])
def test_connect_member_code(portal_admin, make_application, mailoutbox):
    application = make_application(status=ApplicationStatus.APPROVED)
    RegistryMember.objects.create(
        member_code="สน99001",
        regist_code="R9",
        comp_person_code="C9",
        tax_id="0105551234567",
        company_name="บริษัท ทดสอบอุตสาหกรรม จำกัด",
    )

    result = review.connect_member_code(None, portal_admin, application.pk)

    assert result["memberCode"] == "สน99001"
    application.refresh_from_db()
    assert application.member_code == "สน99001"
    company = CompanyMember.objects.get(user=application.user)
    assert company.admin_submit == CompanyMember.SUBMIT_APPROVED
    assert company.company_type == "สน"
    application.user.refresh_from_db()
    assert application.user.role == "member"
    assert Notification.objects.get().type == Notification.TYPE_MEMBER_CONNECTION
    assert len(mailoutbox) == 1


@pytest.mark.django_db(databases=["default", "legacy"])
def test_connect_member_code_not_in_registry(portal_admin, make_application):
    application = make_application(status=ApplicationStatus.APPROVED)
    with pytest.raises(NotFound):
        review.connect_member_code(None, portal_admin, application.pk)
    assert not CompanyMember.objects.exists()


@pytest.mark.django_db
def test_connect_member_code_requires_approval(portal_admin, make_application):
    application = make_application()
    with pytest.raises(ValidationFailed):
        review.connect_member_code(None, portal_admin, application.pk)


#########################
# Analytics and HTTP


@pytest.mark.django_db
def test_application_counts(make_application):
    first = make_application()
    make_application(
        membership_type=MembershipType.IC, tax_id="", id_card_number="1103700123456",
        status=ApplicationStatus.APPROVED,
    )
    ApplicationAddress.objects.create(application=first, address_type="1", province="ระยอง")

    counts = review.application_counts()

    assert counts["total"] == 2
    assert counts["byType"]["oc"]["0"] == 1
    assert counts["byType"]["ic"]["1"] == 1
    assert counts["byType"]["am"]["total"] == 0
    assert counts["byProvince"] == [{"province": "ระยอง", "count": 1}]


@pytest.mark.django_db
def test_admin_endpoints_require_admin(member_client, make_application):
    application = make_application()
    response = member_client.post(f"/api/membership/admin/applications/{application.pk}/approve")
    assert response.status_code == 403


@pytest.mark.django_db
def test_admin_list_and_reject_endpoints(portal_admin_client, make_application):
    application = make_application()

    response = portal_admin_client.get("/api/membership/admin/applications", {"type": "oc"})
    assert response.status_code == 200
    assert [item["id"] for item in response.json()["data"]] == [application.pk]

    response = portal_admin_client.post(
        f"/api/membership/admin/applications/{application.pk}/reject",
        {"reason": "ข้อมูลไม่ครบ"},
        content_type="application/json",
    )
    assert response.status_code == 200
    assert response.json()["rejectionId"] == Rejection.objects.get().pk


@pytest.mark.django_db(transaction=True)
def test_approval_survives_a_failed_audit_log(portal_admin, make_application, mailoutbox):
    application = make_application()

    with patch.object(AdminActionLog._meta, "db_table", "activity_adminactionlog_missing"):
        review.approve_application(None, portal_admin, application.pk, note="ok")

    application.refresh_from_db()
    assert application.status == ApplicationStatus.APPROVED
    assert application.status_logs.get().status == ApplicationStatus.APPROVED
    assert Notification.objects.filter(user=application.user).exists()
    assert len(mailoutbox) == 1
