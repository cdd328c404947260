from unittest.mock import patch

import pytest
from django.db import DatabaseError
from django.db.models import QuerySet

from legacy import services
from legacy.models import RegistryMember, RegistryMemberAddress
from utils.exceptions import ExternalServiceError

legacy_db = pytest.mark.django_db(databases=["legacy"])


@pytest.fixture
def registry_member(db):
    return RegistryMember.objects.create(
        member_code="สน10001",
        regist_code="R100",
        comp_person_code="C100",
        tax_id="0105551234567",
        company_name="บริษัท สมาชิกเดิม จำกัด",
    )


@pytest.fixture
def address(db):
    return RegistryMemberAddress.objects.create(
        comp_person_code="C100",
        regist_code="R100",
        addr_code="001",
        addr_no="1",
        addr_road="สุขุมวิท",
        addr_road_en="Sukhumvit",
        addr_email="office@example.com",
    )


def test_normalize_tax_id():
    assert services.normalize_tax_id("0-1055-51234-56-7") == "0105551234567"
    assert services.normalize_tax_id(None) == ""


@legacy_db
def test_tax_id_lookup(registry_member):
    assert services.tax_id_is_registered("0105551234567")
    assert not services.tax_id_is_registered("0105559999999")
    assert services.find_member_by_tax_id("0105551234567") == registry_member
    assert services.find_member_by_code("สน10001") == registry_member


@legacy_db
def test_tax_id_check_tolerates_outage():
    with patch.object(QuerySet, "exists", side_effect=DatabaseError("timeout")):
        assert services.tax_id_is_registered("0105551234567") is False


@legacy_db
def test_member_lookup_raises_on_outage():
    with patch.object(QuerySet, "first", side_effect=DatabaseError("timeout")):
        with pytest.raises(ExternalServiceError):
            services.find_member_by_code("สน10001")


@legacy_db
def test_get_member_address_uses_registry_column_names(address):
    data = services.get_member_address("C100", "R100", "001")
    assert data["ADDR_CODE"] == "001"
    assert data["ADDR_ROAD"] == "สุขุมวิท"
    assert data["ADDR_ROAD_EN"] == "Sukhumvit"
    assert data["ADDR_EMAIL"] == "office@example.com"
    assert "ADDR_EMAIL_EN" not in data
    assert services.get_member_address("C100", "R100", "002") is None


@legacy_db
def test_sync_thai_address_updates_plain_columns(address):
    services.sync_address(
        "C100", "R100", "001", "th", {"ADDR_ROAD": " พระราม 4 ", "ADDR_FAX": "020000000"}, updated_by="admin"
    )
    address = RegistryMemberAddress.objects.get(addr_code="001")
    assert address.addr_road == "พระราม 4"
    assert address.addr_road_en == "Sukhumvit"
    assert address.addr_fax == "020000000"
    assert address.addr_no == "1"
    assert address.updated_by == "admin"


@legacy_db
def test_sync_english_address_accepts_en_suffixed_keys(address):
    services.sync_address("C100", "R100", "001", "en", {"ADDR_ROAD_EN": "Rama 4"})
    address = RegistryMemberAddress.objects.get(addr_code="001")
    assert address.addr_road_en == "Rama 4"
    assert address.addr_road == "สุขุมวิท"


@legacy_db
def test_sync_creates_missing_row():
    services.sync_address("C100", "R100", "002", "th", {"ADDR_NO": "9"}, member_code="สน10001")
    address = RegistryMemberAddress.objects.get(addr_code="002")
    assert address.addr_no == "9"
    assert address.member_code == "สน10001"
