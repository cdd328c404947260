from datetime import timedelta
from unittest.mock import patch

import pytest
from django.db import DatabaseError
from django.utils import timezone

from activity import operations
from address_updates.models import PendingAddressUpdate
from companies.models import CompanyMember
from contact.models import ContactMessage


@pytest.fixture
def member_requests(member, other_member):
    now = timezone.now()
    CompanyMember.objects.create(
        user=member,
        member_code="สน10001",
        company_name="บริษัท ทดสอบ จำกัด",
        company_type="สน",
        admin_submit=CompanyMember.SUBMIT_REJECTED,
        reject_reason="เอกสารไม่ชัด",
        created_at=now - timedelta(days=3),
    )
    ContactMessage.objects.create(
        user=member,
        name="สมชาย ใจดี",
        email=member.email,
        subject="",
        message="ก" * 150,
        status=ContactMessage.STATUS_REPLIED,
        created_at=now - timedelta(days=1),
    )
    PendingAddressUpdate.objects.create(
        user=member,
        member_code="สน10001",
        addr_code="001",
        addr_lang="th",
        new_address={"province": "ระยอง"},
        request_date=now - timedelta(days=2),
    )
    ContactMessage.objects.create(
        user=other_member, name="สมศรี", email=other_member.email, subject="อื่น", message="x"
    )


@pytest.mark.django_db
def test_operations_are_merged_newest_first(member, member_requests):
    feed = operations.operation_status(member)

    assert [item["type"] for item in feed] == [
        "contact_message",
        "address_update",
        "member_verification",
    ]
    contact, address, claim = feed
    assert contact["title"] == "ข้อความติดต่อ: ไม่มีหัวข้อ"
    assert contact["status"] == "approved"
    assert contact["description"] == "ก" * 100 + "..."
    assert address["title"] == "แก้ไขที่อยู่ (สน10001)"
    assert address["status"] == "pending"
    assert claim["id"].startswith("member-")
    assert claim["status"] == "rejected"
    assert claim["reason"] == "เอกสารไม่ชัด"


@pytest.mark.parametrize(
    "status, expected",
    [
        (ContactMessage.STATUS_UNREAD, "pending"),
        (ContactMessage.STATUS_READ, "pending"),
        (ContactMessage.STATUS_REPLIED, "approved"),
        (ContactMessage.STATUS_CLOSED, "rejected"),
    ],
)
def test_contact_status_mapping(status, expected):
    assert operations._contact_status(status) == expected


@pytest.mark.django_db
def test_failed_source_is_left_out(member, member_requests):
    def broken(user):
        raise DatabaseError("timeout")

    with patch.object(
        operations,
        "OPERATION_SOURCES",
        (operations.member_claims, broken, operations.address_updates),
    ):
        feed = operations.operation_status(member)

    assert [item["type"] for item in feed] == ["address_update", "member_verification"]


@pytest.mark.django_db
def test_operation_status_endpoint(member_client, member_requests):
    response = member_client.get("/api/dashboard/operation-status")
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert len(body["operations"]) == 3


@pytest.mark.django_db
def test_operation_status_requires_login(client):
    assert client.get("/api/dashboard/operation-status").status_code == 401
