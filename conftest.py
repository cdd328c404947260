import pytest
from django.contrib.auth import get_user_model

from membership.models import ApplicationStatus, MembershipApplication, MembershipType

User = get_user_model()


@pytest.fixture
def member(db):
    return User.objects.create_user(
        username="somchai",
        email="somchai@example.com",
        password="testpass123",
        first_name="สมชาย",
        last_name="ใจดี",
    )


@pytest.fixture
def other_member(db):
    return User.objects.create_user(
        username="somsri", email="somsri@example.com", password="testpass123"
    )


@pytest.fixture
def portal_admin(db):
    return User.objects.create_user(
        username="fti_admin",
        email="admin@fti.example",
        password="testpass123",
        first_name="Admin",
        last_name="FTI",
        admin_level=2,
    )


@pytest.fixture
def member_client(client, member):
    client.force_login(member)
    return client


@pytest.fixture
def portal_admin_client(client, portal_admin):
    client.force_login(portal_admin)
    return client


@pytest.fixture
def oc_payload():
    """A complete OC form as the browser sends it."""
    return {
        "taxId": "0105551234567",
        "companyName": "บริษัท ทดสอบอุตสาหกรรม จำกัด",
        "companyNameEng": "Test Industry Co., Ltd.",
        "companyEmail": "info@test-industry.example",
        "companyPhone": "021234567",
        "factoryType": "type1",
        "numberOfEmployees": "120",
        "registeredCapital": "5,000,000",
        "salesDomestic": "12,500,000.50",
        "shareholderThaiPercent": "80",
        "shareholderForeignPercent": "20",
        "addresses": {
            "1": {"addressNumber": "99/1", "province": "กรุงเทพมหานคร", "postalCode": "10110"},
            "2": {
                "addressNumber": "99/1",
                "province": "กรุงเทพมหานคร",
                "email-2": "delivery@test-industry.example",
                "phone-2": "029999999",
            },
        },
        "contactPersons": [
            {
                "firstNameTh": "สมหญิง",
                "lastNameTh": "รักงาน",
                "firstNameEn": "Somying",
                "lastNameEn": "Rakngan",
                "position": "ผู้จัดการ",
                "email": "somying@test-industry.example",
            }
        ],
        "representatives": [
            {"firstNameThai": "สมศักดิ์", "lastNameThai": "ตั้งใจ", "firstNameEnglish": "Somsak", "lastNameEnglish": "Tangjai", "isPrimary": True}
        ],
        "businessTypes": {"manufacturer": True, "exporter": True, "unknown": True},
        "products": [{"nameTh": "ชิ้นส่วนยานยนต์", "nameEn": "Auto parts"}],
        "industrialGroupIds": ["010"],
        "industrialGroupNames": ["กลุ่มอุตสาหกรรมยานยนต์"],
        "authorizedSignatoryFirstNameTh": "สมศักดิ์",
        "authorizedSignatoryLastNameTh": "ตั้งใจ",
        "authorizedSignatoryFirstNameEn": "Somsak",
        "authorizedSignatoryLastNameEn": "Tangjai",
        "authorizedSignatoryPositionTh": "กรรมการผู้จัดการ",
    }


@pytest.fixture
def make_application(db, member):
    """Create a bare application; keyword arguments override the defaults."""

    def factory(**kwargs):
        fields = {
            "user": member,
            "membership_type": MembershipType.OC,
            "status": ApplicationStatus.PENDING,
            "tax_id": "0105551234567",
            "company_name_th": "บริษัท ทดสอบอุตสาหกรรม จำกัด",
        }
        fields.update(kwargs)
        return MembershipApplication.objects.create(**fields)

    return factory


@pytest.fixture
def no_uploads(monkeypatch):
    """Replace the document uploader with one that succeeds without network access."""
    calls = []

    def fake_upload(files, folder=None, max_concurrent=2, on_progress=None):
        calls.append({"files": list(files), "folder": folder})
        return [
            {
                "success": True,
                "url": f"https://files.example/{folder}/{getattr(f, 'name', 'file')}",
                "public_id": f"{folder}/{getattr(f, 'name', 'file')}",
                "fileName": getattr(f, "name", "file"),
                "fileSize": getattr(f, "size", 0),
                "fileType": getattr(f, "content_type", ""),
            }
            for f in files
        ]

    monkeypatch.setattr("membership.submission.upload_files_with_concurrency_limit", fake_upload)
    return calls
