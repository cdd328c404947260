import json
from unittest.mock import patch

import pytest
from django.db import DatabaseError
from django.db.models import QuerySet

from activity.models import AdminActionLog, UserLog
from address_updates import services
from address_updates.models import PendingAddressUpdate
from companies.models import CompanyMember
from legacy.models import RegistryMemberAddress
from notifications.models import Notification
from utils.exceptions import ExternalServiceError, NotFound, ValidationFailed

both_databases = pytest.mark.django_db(databases=["default", "legacy"])


@pytest.fixture
def company(member):
    return CompanyMember.objects.create(
        user=member,
        member_code="สน10001",
        comp_person_code="C100",
        regist_code="R100",
        company_name="บริษัท สมาชิกเดิม จำกัด",
        company_type="สน",
        admin_submit=CompanyMember.SUBMIT_APPROVED,
    )


@pytest.fixture
def registry_address(db):
    return RegistryMemberAddress.objects.create(
        comp_person_code="C100",
        regist_code="R100",
        addr_code="001",
        member_code="สน10001",
        addr_no="1",
        addr_province_name="กรุงเทพมหานคร",
        addr_no_en="1",
        addr_province_name_en="Bangkok",
        addr_telephone="021111111",
    )


def _payload(**overrides):
    payload = {
        "memberCode": "สน10001",
        "memberType": "11",
        "memberGroupCode": "110",
        "addrCode": "001",
        "addrLang": "th",
        "newAddress": {"ADDR_NO": "88", "ADDR_PROVINCE_NAME": "นนทบุรี", "ADDR_TELEPHONE": "022222222"},
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def pending_update(member, company, registry_address):
    return services.request_address_update(None, member, _payload())


def test_filter_address_for_english_keeps_en_and_contact_fields():
    address = {
        "ADDR_NO": "1",
        "ADDR_NO_EN": "1A",
        "ADDR_PROVINCE_NAME": "กรุงเทพมหานคร",
        "ADDR_PROVINCE_NAME_EN": "Bangkok",
        "ADDR_TELEPHONE": "021111111",
    }
    assert services.filter_address_for_language(address, "en") == {
        "ADDR_NO": "1A",
        "ADDR_PROVINCE_NAME": "Bangkok",
        "ADDR_TELEPHONE": "021111111",
    }
    assert services.filter_address_for_language(address, "th") == {
        "ADDR_NO": "1",
        "ADDR_PROVINCE_NAME": "กรุงเทพมหานคร",
        "ADDR_TELEPHONE": "021111111",
    }
    assert services.filter_address_for_language(None, "th") == {}


@both_databases
def test_request_uses_company_codes_and_registry_address(member, pending_update):
    assert pending_update.status == PendingAddressUpdate.STATUS_PENDING
    assert pending_update.comp_person_code == "C100"
    assert pending_update.regist_code == "R100"
    assert pending_update.old_address["ADDR_PROVINCE_NAME"] == "กรุงเทพมหานคร"
    assert "ADDR_PROVINCE_NAME_EN" not in pending_update.old_address
    assert UserLog.objects.get(user=member).action == "address_update_request"
    notification = Notification.objects.get(user=member)
    assert notification.link == "/dashboard/member-detail"
    assert "ที่อยู่หลักภาษาไทย" in notification.message


@both_databases
def test_english_request_keeps_english_old_address(member, company, registry_address):
    update = services.request_address_update(None, member, _payload(addrLang="EN"))
    assert update.addr_lang == "en"
    assert update.old_address["ADDR_PROVINCE_NAME"] == "Bangkok"


@pytest.mark.django_db
def test_defaults_for_missing_codes(member):
    update = services.request_address_update(
        None, member, {"newAddress": {"ADDR_NO": "5"}, "originalAddress": {"ADDR_NO": "4"}}
    )
    assert update.member_code == "UNKNOWN"
    assert update.member_type == "000"
    assert update.type_code == "000"
    assert update.addr_code == "001"
    assert update.addr_lang == "th"
    assert update.old_address == {"ADDR_NO": "4"}


@pytest.mark.django_db
def test_only_editable_address_codes(member):
    with pytest.raises(ValidationFailed) as excinfo:
        services.request_address_update(None, member, _payload(addrCode="004"))
    assert excinfo.value.message == services.INVALID_ADDR_CODE_MESSAGE


@pytest.mark.django_db
def test_new_address_is_required(member):
    with pytest.raises(ValidationFailed):
        services.request_address_update(None, member, _payload(newAddress={}))


@both_databases
def test_duplicate_pending_request(member, pending_update):
    with pytest.raises(ValidationFailed) as excinfo:
        services.request_address_update(None, member, _payload())
    assert excinfo.value.message == services.DUPLICATE_REQUEST_MESSAGE
    # the pending request blocks the same address in either language
    with pytest.raises(ValidationFailed):
        services.request_address_update(None, member, _payload(addrLang="en"))
    assert PendingAddressUpdate.objects.count() == 1


@both_databases
def test_approve_writes_registry_then_request(member, portal_admin, pending_update, mailoutbox):
    services.approve_address_update(None, portal_admin, pending_update.pk, admin_notes="ตรวจแล้ว")

    row = RegistryMemberAddress.objects.get(comp_person_code="C100", regist_code="R100", addr_code="001")
    assert row.addr_no == "88"
    assert row.addr_province_name == "นนทบุรี"
    assert row.addr_province_name_en == "Bangkok"
    assert row.addr_telephone == "022222222"
    assert row.updated_by == "fti_admin"

    pending_update.refresh_from_db()
    assert pending_update.status == PendingAddressUpdate.STATUS_APPROVED
    assert pending_update.processed_by == portal_admin
    assert pending_update.admin_notes == "ตรวจแล้ว"

    log = AdminActionLog.objects.get()
    assert log.action_type == AdminActionLog.ACTION_APPROVE_ADDRESS
    assert json.loads(log.description)["companyName"] == "บริษัท สมาชิกเดิม จำกัด"

    notification = Notification.objects.filter(user=member).order_by("-id").first()
    assert notification.message.endswith("ได้รับการอนุมัติแล้ว")
    assert notification.addr_code == "001"
    assert notification.type_code == "000"
    assert len(mailoutbox) == 2


@both_databases
def test_english_approval_only_touches_en_columns(member, portal_admin, company, registry_address):
    update = services.request_address_update(
        None, member, _payload(addrLang="en", newAddress={"ADDR_PROVINCE_NAME": "Nonthaburi"})
    )
    services.approve_address_update(None, portal_admin, update.pk)

    row = RegistryMemberAddress.objects.get(comp_person_code="C100", regist_code="R100", addr_code="001")
    assert row.addr_province_name_en == "Nonthaburi"
    assert row.addr_province_name == "กรุงเทพมหานคร"


@both_databases
def test_approve_creates_missing_registry_row(member, portal_admin, company):
    update = services.request_address_update(None, member, _payload(addrCode="003"))
    services.approve_address_update(None, portal_admin, update.pk)
    row = RegistryMemberAddress.objects.get(comp_person_code="C100", regist_code="R100", addr_code="003")
    assert row.member_code == "สน10001"


@both_databases
def test_registry_failure_keeps_request_pending(portal_admin, pending_update):
    with patch.object(QuerySet, "update", side_effect=DatabaseError("connection reset")):
        with pytest.raises(ExternalServiceError):
            services.approve_address_update(None, portal_admin, pending_update.pk)

    pending_update.refresh_from_db()
    assert pending_update.status == PendingAddressUpdate.STATUS_PENDING
    assert not AdminActionLog.objects.exists()


@both_databases
def test_reject_request(member, portal_admin, pending_update, mailoutbox):
    services.reject_address_update(None, portal_admin, pending_update.pk, "เอกสารไม่ชัดเจน")

    pending_update.refresh_from_db()
    assert pending_update.status == PendingAddressUpdate.STATUS_REJECTED
    assert pending_update.admin_comment == "เอกสารไม่ชัดเจน"
    assert UserLog.objects.filter(user=member, action="reject_address_update").exists()
    notification = Notification.objects.filter(user=member).order_by("-id").first()
    assert "ถูกปฏิเสธ: เอกสารไม่ชัดเจน" in notification.message
    assert notification.link == "/dashboard?tab=address"
    assert RegistryMemberAddress.objects.get(addr_code="001").addr_no == "1"


@both_databases
def test_processed_request_cannot_be_reviewed_again(portal_admin, pending_update):
    services.reject_address_update(None, portal_admin, pending_update.pk, "ซ้ำ")
    with pytest.raises(NotFound):
        services.approve_address_update(None, portal_admin, pending_update.pk)


@both_databases
def test_reject_requires_reason(portal_admin, pending_update):
    with pytest.raises(ValidationFailed):
        services.reject_address_update(None, portal_admin, pending_update.pk, "")


@both_databases
def test_admin_endpoints(portal_admin_client, pending_update):
    response = portal_admin_client.get("/api/address-updates/admin", {"status": "pending"})
    assert [item["id"] for item in response.json()["data"]] == [pending_update.pk]

    response = portal_admin_client.post(
        "/api/address-updates/admin/approve",
        {"id": pending_update.pk, "admin_notes": ""},
        content_type="application/json",
    )
    assert response.status_code == 200
    assert response.json()["success"] is True
