from decimal import Decimal

import pytest
from django.core.files.uploadedfile import SimpleUploadedFile

from activity.models import UserLog
from membership.models import (
    ApplicationDocument,
    ApplicationDraft,
    ApplicationStatus,
    MembershipApplication,
    MembershipType,
)
from membership.submission import document_folder, submit_application
from notifications.models import Notification
from utils.exceptions import Conflict, ValidationFailed


@pytest.mark.django_db
def test_submit_oc_application_writes_every_section(member, oc_payload, no_uploads, mailoutbox):
    application, summary = submit_application(member, MembershipType.OC, oc_payload)

    assert application.status == ApplicationStatus.PENDING
    assert application.tax_id == "0105551234567"
    assert application.registered_capital == Decimal("5000000.00")
    assert application.sales_domestic == Decimal("12500000.50")
    assert application.number_of_employees == 120
    assert application.addresses.count() == 2
    assert application.contact_persons.get().first_name_en == "Somying"
    assert application.representatives.get().is_primary is True
    assert set(application.business_types.values_list("business_type", flat=True)) == {
        "manufacturer",
        "exporter",
    }
    assert application.products.get().name_en == "Auto parts"
    assert application.industry_groups.get().industry_group_id == "010"
    assert application.authorized_signatory.position_th == "กรรมการผู้จัดการ"
    assert application.status_logs.get().note == "สมัครสมาชิกใหม่"
    assert summary == {"documentsUploaded": 0, "documentsFailed": 0}


@pytest.mark.django_db
def test_company_contact_comes_from_document_delivery_address(member, oc_payload, no_uploads):
    application, _ = submit_application(member, MembershipType.OC, oc_payload)
    assert application.company_email == "delivery@test-industry.example"
    assert application.company_phone == "029999999"


@pytest.mark.django_db
def test_submission_side_effects(member, oc_payload, no_uploads, mailoutbox):
    application, _ = submit_application(member, MembershipType.OC, oc_payload)

    log = UserLog.objects.get(user=member)
    assert log.action == "OC_membership_submit"
    assert log.details.startswith("TAX_ID: 0105551234567 - ")

    notification = Notification.objects.get(user=member)
    assert notification.type == Notification.TYPE_MEMBERSHIP_APPLICATION
    assert notification.link == "/dashboard?tab=status"

    assert len(mailoutbox) == 1
    assert mailoutbox[0].to == ["somchai@example.com"]
    assert application.display_name in mailoutbox[0].body


@pytest.mark.django_db
def test_empty_optional_sections_get_placeholders(member, oc_payload, no_uploads):
    for key in ("products", "industrialGroupIds", "industrialGroupNames"):
        oc_payload.pop(key)
    application, _ = submit_application(member, MembershipType.OC, oc_payload)

    product = application.products.get()
    assert (product.name_th, product.name_en) == ("ไม่ระบุ", "Not specified")
    group = application.industry_groups.get()
    assert (group.industry_group_id, group.industry_group_name) == ("000", "ไม่ระบุ")
    assert application.province_chapters.get().province_chapter_id == "000"


@pytest.mark.django_db
def test_pending_tax_id_blocks_a_second_application(member, oc_payload, no_uploads):
    submit_application(member, MembershipType.OC, oc_payload)

    with pytest.raises(Conflict) as excinfo:
        submit_application(member, MembershipType.AC, oc_payload)

    assert "อยู่ระหว่างการพิจารณา" in excinfo.value.message
    assert MembershipApplication.objects.count() == 1


@pytest.mark.django_db
def test_approved_tax_id_message(member, oc_payload, no_uploads, make_application):
    make_application(status=ApplicationStatus.APPROVED)
    with pytest.raises(Conflict) as excinfo:
        submit_application(member, MembershipType.OC, oc_payload)
    assert excinfo.value.message == "เลขประจำตัวผู้เสียภาษี 0105551234567 นี้ได้เป็นสมาชิกแล้ว"


@pytest.mark.django_db
def test_rejected_application_does_not_block(member, oc_payload, no_uploads, make_application):
    make_application(status=ApplicationStatus.REJECTED)
    application, _ = submit_application(member, MembershipType.OC, oc_payload)
    assert application.status == ApplicationStatus.PENDING


@pytest.mark.django_db
def test_signatory_without_position_is_rejected(member, oc_payload, no_uploads):
    oc_payload.pop("authorizedSignatoryPositionTh")
    with pytest.raises(ValidationFailed):
        submit_application(member, MembershipType.OC, oc_payload)
    assert not MembershipApplication.objects.exists()


@pytest.mark.django_db
def test_invalid_money_value_is_rejected(member, oc_payload, no_uploads):
    oc_payload["registeredCapital"] = "ห้าล้าน"
    with pytest.raises(ValidationFailed):
        submit_application(member, MembershipType.OC, oc_payload)
    assert not MembershipApplication.objects.exists()


@pytest.mark.django_db
def test_section_failure_rolls_back_the_application(member, oc_payload, no_uploads):
    oc_payload["contactPersons"][0]["lastNameEn"] = ""
    with pytest.raises(ValidationFailed) as excinfo:
        submit_application(member, MembershipType.OC, oc_payload)
    assert "ผู้ติดต่อคนที่ 1" in excinfo.value.message
    assert not MembershipApplication.objects.exists()
    assert not UserLog.objects.exists()


@pytest.mark.django_db
def test_invalid_tax_id(member, oc_payload, no_uploads):
    oc_payload["taxId"] = "12345"
    with pytest.raises(ValidationFailed):
        submit_application(member, MembershipType.OC, oc_payload)


@pytest.mark.django_db
def test_submit_ic_application(member, no_uploads):
    data = {
        "idCardNumber": "1-1037-00123-45-6",
        "firstNameTh": "สมชาย",
        "lastNameTh": "ใจดี",
        "firstNameEn": "Somchai",
        "lastNameEn": "Jaidee",
        "email": "somchai@example.com",
        "addressNumber": "12",
        "province": "เชียงใหม่",
    }
    application, _ = submit_application(member, MembershipType.IC, data)

    assert application.id_card_number == "1103700123456"
    assert application.tax_id == ""
    assert application.display_name == "สมชาย ใจดี"
    assert application.addresses.get().address_type == "2"
    assert UserLog.objects.get(user=member).details.startswith("ID_CARD: 1103700123456")


@pytest.mark.django_db
def test_ic_duplicate_uses_id_card_wording(member, no_uploads, make_application):
    make_application(
        membership_type=MembershipType.IC, tax_id="", id_card_number="1103700123456"
    )
    with pytest.raises(Conflict) as excinfo:
        submit_application(
            member,
            MembershipType.IC,
            {"idCardNumber": "1103700123456", "firstNameTh": "ก", "lastNameTh": "ข"},
        )
    assert excinfo.value.message == "เลขบัตรประชาชนนี้อยู่ระหว่างพิจารณาสมัครสมาชิก"


@pytest.mark.django_db
def test_matching_draft_is_deleted_after_submit(member, oc_payload, no_uploads):
    ApplicationDraft.objects.create(
        user=member, membership_type="oc", identifier="0105551234567", data={"taxId": "0105551234567"}
    )
    ApplicationDraft.objects.create(
        user=member, membership_type="ac", identifier="0105551234567", data={}
    )
    submit_application(member, MembershipType.OC, oc_payload)
    assert list(ApplicationDraft.objects.values_list("membership_type", flat=True)) == ["ac"]


@pytest.mark.django_db
def test_documents_are_uploaded_after_commit(member, oc_payload, no_uploads):
    files = {
        "companyRegistration": SimpleUploadedFile(
            "registration.pdf", b"%PDF-1.4 test", content_type="application/pdf"
        ),
        "productionImages[0]": SimpleUploadedFile("line1.jpg", b"jpeg", content_type="image/jpeg"),
        "productionImages[1]": SimpleUploadedFile("line2.jpg", b"jpeg", content_type="image/jpeg"),
    }
    application, summary = submit_application(member, MembershipType.OC, oc_payload, files=files)

    assert summary == {"documentsUploaded": 3, "documentsFailed": 0}
    assert no_uploads[0]["folder"] == document_folder("oc") == "FTI_PORTAL_OC_member_DOC"
    types = list(
        ApplicationDocument.objects.filter(application=application).values_list(
            "document_type", flat=True
        )
    )
    assert sorted(types) == ["companyRegistration", "productionImages", "productionImages"]


@pytest.mark.django_db
def test_failed_upload_keeps_the_application(member, oc_payload, monkeypatch):
    def failing_upload(files, folder=None, max_concurrent=2, on_progress=None):
        return [{"success": False, "error": "timeout", "fileName": f.name} for f in files]

    monkeypatch.setattr("membership.submission.upload_files_with_concurrency_limit", failing_upload)
    files = {"companyRegistration": SimpleUploadedFile("reg.pdf", b"data")}

    application, summary = submit_application(member, MembershipType.OC, oc_payload, files=files)

    assert summary == {"documentsUploaded": 0, "documentsFailed": 1}
    assert MembershipApplication.objects.filter(pk=application.pk).exists()
    assert not ApplicationDocument.objects.exists()


#########################
# HTTP


@pytest.mark.django_db
def test_submit_endpoint_returns_201(member_client, oc_payload, no_uploads):
    response = member_client.post(
        "/api/membership/submit/oc", oc_payload, content_type="application/json"
    )
    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    assert body["message"] == "การสมัครสมาชิก OC สำเร็จ"
    assert MembershipApplication.objects.filter(pk=body["registrationId"]).exists()


@pytest.mark.django_db
def test_submit_endpoint_conflict(member_client, oc_payload, no_uploads, make_application):
    make_application()
    response = member_client.post(
        "/api/membership/submit/oc", oc_payload, content_type="application/json"
    )
    assert response.status_code == 409
    assert response.json()["success"] is False


@pytest.mark.django_db
def test_submit_endpoint_unknown_type(member_client, oc_payload):
    response = member_client.post(
        "/api/membership/submit/xx", oc_payload, content_type="application/json"
    )
    assert response.status_code == 404


@pytest.mark.django_db
@pytest.mark.parametrize("capital", ["1e30", "1" * 29])
def test_submit_endpoint_rejects_oversized_money_values(
    member_client, oc_payload, no_uploads, capital
):
    oc_payload["registeredCapital"] = capital
    response = member_client.post(
        "/api/membership/submit/oc", oc_payload, content_type="application/json"
    )
    assert response.status_code == 400
    assert "registeredCapital" in response.json()["details"]
    assert not MembershipApplication.objects.exists()


@pytest.mark.django_db
def test_submit_requires_login(client, oc_payload):
    response = client.post("/api/membership/submit/oc", oc_payload, content_type="application/json")
    assert response.status_code == 401


@pytest.mark.django_db
def test_member_lists_only_own_applications(member_client, other_member, make_application):
    mine = make_application()
    make_application(user=other_member, tax_id="0105559999999")
    make_application(membership_type="ic", tax_id="", id_card_number="1103700123456")

    body = member_client.get("/api/membership/applications", {"type": "OC"}).json()
    assert [a["id"] for a in body["applications"]] == [mine.pk]

    response = member_client.get(f"/api/membership/applications/{mine.pk + 1}")
    assert response.status_code == 404
