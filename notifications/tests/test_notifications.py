from datetime import timedelta
from io import StringIO
from unittest.mock import patch

import pytest
from django.core.management import call_command
from django.db import transaction
from django.test import TestCase
from django.utils import timezone

from members.models import Member
from notifications.models import Notification
from notifications.services import create_notification


@pytest.fixture
def notification(member):
    return create_notification(
        member,
        Notification.TYPE_MEMBER_VERIFICATION,
        "การยืนยันสมาชิกของคุณได้รับการอนุมัติแล้ว",
        link="/dashboard?tab=member",
    )


@pytest.mark.django_db
def test_identical_undismissed_notification_is_reused(member, notification):
    again = create_notification(
        member, Notification.TYPE_MEMBER_VERIFICATION, notification.message
    )
    assert again.pk == notification.pk

    notification.dismissed = True
    notification.save()
    fresh = create_notification(member, Notification.TYPE_MEMBER_VERIFICATION, notification.message)
    assert fresh.pk != notification.pk


@pytest.mark.django_db
def test_create_notification_for_anonymous_is_noop():
    assert create_notification(None, Notification.TYPE_GENERAL, "สวัสดี") is None


@pytest.mark.django_db
def test_unknown_context_field(member):
    with pytest.raises(TypeError):
        create_notification(member, Notification.TYPE_GENERAL, "สวัสดี", colour="red")


@pytest.mark.django_db
def test_list_and_unread_count(member_client, member, other_member, notification):
    create_notification(other_member, Notification.TYPE_GENERAL, "ไม่ใช่ของคุณ")

    body = member_client.get("/api/notifications/").json()
    assert [n["id"] for n in body["data"]] == [notification.pk]
    assert body["unreadCount"] == 1
    assert body["data"][0]["status"] == "approved"
    assert body["data"][0]["statusPhrase"] == "ได้รับการอนุมัติแล้ว"

    assert member_client.get("/api/notifications/unread-count").json()["count"] == 1


@pytest.mark.django_db
def test_mark_read_and_mark_all(member_client, member, notification):
    create_notification(member, Notification.TYPE_GENERAL, "ประกาศจากสภาอุตสาหกรรม")

    response = member_client.post(f"/api/notifications/{notification.pk}/read")
    assert response.json()["notification"]["read"] is True

    response = member_client.post("/api/notifications/mark-all-read")
    assert response.json()["updated"] == 1
    assert not Notification.objects.filter(read=False).exists()


@pytest.mark.django_db
def test_dismissed_notifications_are_hidden(member_client, notification):
    member_client.post(f"/api/notifications/{notification.pk}/dismiss")
    assert member_client.get("/api/notifications/").json()["data"] == []


@pytest.mark.django_db
def test_open_redirects_and_marks_read(member_client, notification):
    response = member_client.get(f"/api/notifications/{notification.pk}/open")
    assert response.status_code == 302
    assert response["Location"] == "/dashboard?tab=member"
    notification.refresh_from_db()
    assert notification.read


@pytest.mark.django_db
def test_open_refuses_offsite_links(member_client, member):
    notification = Notification.objects.create(
        user=member, message="ลิงก์ภายนอก", link="https://evil.example/phish"
    )
    response = member_client.get(f"/api/notifications/{notification.pk}/open")
    assert response["Location"] == "/dashboard"


@pytest.mark.django_db
def test_other_members_notification_is_404(client, other_member, notification):
    client.force_login(other_member)
    assert client.post(f"/api/notifications/{notification.pk}/read").status_code == 404


@pytest.mark.django_db
def test_feed_requires_login(client):
    assert client.get("/api/notifications/").status_code == 401


class TestCleanupOldNotifications(TestCase):
    def setUp(self):
        self.member = Member.objects.create(username="wichai", email="wichai@example.com")
        self.old = Notification.objects.create(
            user=self.member,
            message="เก่า",
            created_at=timezone.now() - timedelta(days=120),
        )
        self.recent = Notification.objects.create(user=self.member, message="ใหม่")

    def test_purges_only_old_notifications(self):
        out = StringIO()
        call_command("cleanup_old_notifications", stdout=out)

        assert list(Notification.objects.all()) == [self.recent]
        assert "Purged 1 notification(s)" in out.getvalue()

    def test_dry_run_keeps_everything(self):
        out = StringIO()
        call_command("cleanup_old_notifications", "--dry-run", stdout=out)

        assert Notification.objects.count() == 2
        assert "Would purge 1 notification(s)" in out.getvalue()

    def test_custom_age(self):
        call_command("cleanup_old_notifications", "--days", "200", stdout=StringIO())
        assert Notification.objects.count() == 2


@pytest.mark.django_db(transaction=True)
def test_failed_notification_inside_a_transaction_keeps_the_outer_work(member):
    with transaction.atomic():
        member.phone = "0812345678"
        member.save(update_fields=["phone"])
        with patch.object(Notification._meta, "db_table", "notifications_missing"):
            assert create_notification(member, Notification.TYPE_CONTACT_REPLY, "ตอบกลับแล้ว") is None
        create_notification(member, Notification.TYPE_CONTACT_REPLY, "ตอบกลับแล้ว")

    member.refresh_from_db()
    assert member.phone == "0812345678"
    assert Notification.objects.get(user=member).message == "ตอบกลับแล้ว"
