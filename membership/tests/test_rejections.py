import pytest

from activity.models import AdminActionLog, UserLog
from membership import rejections, review
from membership.models import (
    ApplicationSnapshot,
    ApplicationStatus,
    MembershipApplication,
    Rejection,
    RejectionConversation,
)
from notifications.models import Notification
from utils.exceptions import NotFound, ValidationFailed


@pytest.fixture
def rejection(portal_admin, make_application):
    application = make_application()
    result = review.reject_application(None, portal_admin, application.pk, "เอกสารไม่ครบ")
    return Rejection.objects.get(pk=result["rejectionId"])


@pytest.mark.django_db
def test_member_sees_only_own_rejections(member, other_member, rejection):
    assert [r["id"] for r in rejections.list_rejections(member)] == [rejection.pk]
    assert rejections.list_rejections(other_member) == []
    with pytest.raises(NotFound):
        rejections.rejection_detail(other_member, rejection.pk)


@pytest.mark.django_db
def test_opening_rejection_marks_admin_messages_read(member, rejection):
    detail = rejections.rejection_detail(member, rejection.pk)

    rejection.refresh_from_db()
    assert rejection.unread_member_count == 0
    assert not rejection.conversations.filter(is_read=False).exists()
    assert detail["conversations"][0]["message"] == "เอกสารไม่ครบ"
    assert detail["snapshot"]["main"]["tax_id"] == "0105551234567"


@pytest.mark.django_db
def test_member_message_bumps_admin_counter(member, rejection):
    message = rejections.add_conversation_message(None, member, rejection.pk, "แนบเอกสารเพิ่มแล้ว")

    rejection.refresh_from_db()
    assert message["senderType"] == RejectionConversation.SENDER_MEMBER
    assert rejection.unread_admin_count == 1
    assert rejection.unread_member_count == 1


@pytest.mark.django_db
def test_admin_message_notifies_member(portal_admin, rejection):
    rejections.add_conversation_message(
        None, portal_admin, rejection.pk, "กรุณาแนบหนังสือรับรอง", as_admin=True
    )

    rejection.refresh_from_db()
    assert rejection.unread_member_count == 2
    assert AdminActionLog.objects.filter(
        action_type=AdminActionLog.ACTION_REJECTION_MESSAGE
    ).exists()
    assert Notification.objects.filter(
        link=f"/dashboard?tab=status&rejectionId={rejection.pk}"
    ).exists()


@pytest.mark.django_db
def test_admin_detail_resets_admin_counter(member, portal_admin, rejection):
    rejections.add_conversation_message(None, member, rejection.pk, "สอบถามเพิ่มเติม")
    rejections.rejection_detail(portal_admin, rejection.pk, as_admin=True)
    rejection.refresh_from_db()
    assert rejection.unread_admin_count == 0


@pytest.mark.django_db
def test_empty_message_is_rejected(member, rejection):
    with pytest.raises(ValidationFailed):
        rejections.add_conversation_message(None, member, rejection.pk, "  ")


@pytest.mark.django_db
def test_resubmit_without_changes(member, rejection):
    application = rejections.resubmit(None, member, rejection.pk, comment="แก้ไขแล้ว")

    assert application.status == ApplicationStatus.RESUBMITTED
    assert application.resubmission_count == 1
    rejection.refresh_from_db()
    assert rejection.status == Rejection.STATUS_RESOLVED
    assert rejection.unread_admin_count == 1
    assert application.snapshots.filter(
        snapshot_type=ApplicationSnapshot.TYPE_RESUBMISSION
    ).exists()
    assert UserLog.objects.get(user=member).action == "OC_membership_resubmit"


@pytest.mark.django_db
def test_resubmit_with_corrected_form(member, rejection, oc_payload):
    oc_payload["companyName"] = "บริษัท ทดสอบอุตสาหกรรม (ประเทศไทย) จำกัด"

    application = rejections.resubmit(None, member, rejection.pk, data=oc_payload)

    application = MembershipApplication.objects.get(pk=application.pk)
    assert application.company_name_th == "บริษัท ทดสอบอุตสาหกรรม (ประเทศไทย) จำกัด"
    assert application.addresses.count() == 2
    assert application.products.get().name_en == "Auto parts"
    assert application.status == ApplicationStatus.RESUBMITTED


@pytest.mark.django_db
def test_resubmitted_application_can_be_rejected_again(member, portal_admin, rejection):
    application = rejections.resubmit(None, member, rejection.pk)
    result = review.reject_application(None, portal_admin, application.pk, "ยังไม่ครบ")
    assert Rejection.objects.count() == 2
    assert Rejection.objects.get(pk=result["rejectionId"]).is_open


@pytest.mark.django_db
def test_cannot_resubmit_twice(member, rejection):
    rejections.resubmit(None, member, rejection.pk)
    with pytest.raises(ValidationFailed):
        rejections.resubmit(None, member, rejection.pk)


@pytest.mark.django_db
def test_cancel_rejection(member, rejection):
    rejections.cancel_rejection(None, member, rejection.pk)
    rejection.refresh_from_db()
    assert rejection.status == Rejection.STATUS_CANCELLED
    with pytest.raises(ValidationFailed):
        rejections.cancel_rejection(None, member, rejection.pk)


@pytest.mark.django_db
def test_resubmit_endpoint(member_client, rejection):
    response = member_client.post(
        f"/api/membership/rejections/{rejection.pk}/resubmit",
        {"userComment": "อัปเดตเอกสารแล้ว"},
        content_type="application/json",
    )
    assert response.status_code == 200
    assert response.json()["application"]["status"] == ApplicationStatus.RESUBMITTED
