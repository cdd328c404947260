import uuid

from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator, RegexValidator
from django.db import models
from django.utils import timezone
from tinymce.models import HTMLField

thirteen_digits = RegexValidator(
    regex=r"^\d{13}$", message="ต้องเป็นตัวเลข 13 หลัก"
)

MONEY_MAX = 9999999999999.99


class MembershipType(models.TextChoices):
    OC = "oc", "สน (สามัญ-โรงงาน)"
    AM = "am", "สส (สามัญ-สมาคมการค้า)"
    AC = "ac", "ทน (สมทบ-นิติบุคคล)"
    IC = "ic", "ทบ (สมทบ-บุคคลธรรมดา)"


# Registry abbreviations stored on CompanyMember.company_type
MEMBER_TYPE_ABBREVIATIONS = {
    MembershipType.OC: "สน",
    MembershipType.AM: "สส",
    MembershipType.AC: "ทน",
    MembershipType.IC: "ทบ",
}

# Types whose identifier is a juristic tax id (IC uses the personal id card)
COMPANY_TYPES = (MembershipType.OC, MembershipType.AC, MembershipType.AM)


class ApplicationStatus(models.IntegerChoices):
    PENDING = 0, "รอพิจารณา"
    APPROVED = 1, "อนุมัติ"
    REJECTED = 2, "ปฏิเสธ"
    RESUBMITTED = 3, "ส่งใหม่"


# Applications in these states block another application with the same identifier
LIVE_STATUSES = (ApplicationStatus.PENDING, ApplicationStatus.APPROVED)


#########################
# MembershipApplication Model

# One row per submitted OC/AC/AM/IC application. Company types fill the
# company block; IC fills the individual block. Child tables hang off the
# application with related names matching the form sections.


class MembershipApplication(models.Model):
    application_id = models.UUIDField(
        default=uuid.uuid4,
        editable=False,
        unique=True,
        help_text="Public identifier for this application",
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="membership_applications",
    )
    membership_type = models.CharField(max_length=2, choices=MembershipType.choices)
    status = models.PositiveSmallIntegerField(
        choices=ApplicationStatus.choices, default=ApplicationStatus.PENDING
    )

    # Company block (OC, AC, AM)
    company_name_th = models.CharField(max_length=255, blank=True)
    company_name_en = models.CharField(max_length=255, blank=True)
    tax_id = models.CharField(
        max_length=13, blank=True, db_index=True, validators=[thirteen_digits]
    )
    company_email = models.EmailField(blank=True)
    company_phone = models.CharField(max_length=50, blank=True)
    company_phone_extension = models.CharField(max_length=20, blank=True)
    company_website = models.CharField(max_length=255, blank=True)
    factory_type = models.CharField(
        max_length=20, blank=True, help_text="OC only: type of factory licence"
    )
    number_of_employees = models.PositiveIntegerField(null=True, blank=True)
    number_of_member = models.PositiveIntegerField(
        null=True, blank=True, help_text="AM only: members of the trade association"
    )
    registered_capital = models.DecimalField(
        max_digits=15, decimal_places=2, null=True, blank=True
    )
    production_capacity_value = models.DecimalField(
        max_digits=15, decimal_places=2, null=True, blank=True
    )
    production_capacity_unit = models.CharField(max_length=50, blank=True)
    sales_domestic = models.DecimalField(max_digits=15, decimal_places=2, null=True, blank=True)
    sales_export = models.DecimalField(max_digits=15, decimal_places=2, null=True, blank=True)
    revenue_last_year = models.DecimalField(
        max_digits=15, decimal_places=2, null=True, blank=True
    )
    revenue_previous_year = models.DecimalField(
        max_digits=15, decimal_places=2, null=True, blank=True
    )
    shareholder_thai_percent = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(0), MaxValueValidator(100)],
    )
    shareholder_foreign_percent = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(0), MaxValueValidator(100)],
    )
    business_type_other_detail = models.CharField(max_length=255, blank=True)

    # Individual block (IC)
    id_card_number = models.CharField(
        max_length=13, blank=True, db_index=True, validators=[thirteen_digits]
    )
    prename_th = models.CharField(max_length=50, blank=True)
    prename_en = models.CharField(max_length=50, blank=True)
    first_name_th = models.CharField(max_length=100, blank=True)
    last_name_th = models.CharField(max_length=100, blank=True)
    first_name_en = models.CharField(max_length=100, blank=True)
    last_name_en = models.CharField(max_length=100, blank=True)
    phone = models.CharField(max_length=50, blank=True)
    phone_extension = models.CharField(max_length=20, blank=True)
    email = models.EmailField(blank=True)
    website = models.CharField(max_length=255, blank=True)

    # Registry link, set by "connect member code" after approval
    member_code = models.CharField(max_length=20, blank=True, db_index=True)

    # Review
    admin_note = HTMLField(blank=True, help_text="Internal note visible to administrators")
    admin_note_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    admin_note_at = models.DateTimeField(null=True, blank=True)
    approved_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    approved_at = models.DateTimeField(null=True, blank=True)
    rejection_reason = models.TextField(blank=True)
    rejected_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    rejected_at = models.DateTimeField(null=True, blank=True)
    resubmission_count = models.PositiveIntegerField(default=0)

    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "membership_applications"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["membership_type", "status"], name="application_type_status_idx"),
            models.Index(fields=["tax_id", "status"], name="application_tax_status_idx"),
        ]

    def __str__(self):
        return f"{self.membership_type.upper()} {self.display_name} ({self.get_status_display()})"

    @property
    def is_individual(self):
        return self.membership_type == MembershipType.IC

    @property
    def identifier(self):
        return self.id_card_number if self.is_individual else self.tax_id

    @property
    def display_name(self):
        if self.is_individual:
            name = f"{self.first_name_th} {self.last_name_th}".strip()
            return name or f"{self.first_name_en} {self.last_name_en}".strip()
        return self.company_name_th or self.company_name_en

    @property
    def type_label(self):
        return MembershipType(self.membership_type).label

    def approve(self, admin, note=""):
        if self.status not in (ApplicationStatus.PENDING, ApplicationStatus.RESUBMITTED):
            raise ValueError("Only pending or resubmitted applications can be approved")
        self.status = ApplicationStatus.APPROVED
        self.approved_by = admin
        self.approved_at = timezone.now()
        fields = ["status", "approved_by", "approved_at", "updated_at"]
        if note:
            self.admin_note = note
            self.admin_note_by = admin
            self.admin_note_at = self.approved_at
            fields += ["admin_note", "admin_note_by", "admin_note_at"]
        self.save(update_fields=fields)

    def reject(self, admin, reason):
        if not reason or not reason.strip():
            raise ValueError("A rejection reason is required")
        self.status = ApplicationStatus.REJECTED
        self.rejection_reason = reason.strip()
        self.rejected_by = admin
        self.rejected_at = timezone.now()
        self.save(
            update_fields=[
                "status",
                "rejection_reason",
                "rejected_by",
                "rejected_at",
                "updated_at",
            ]
        )

    def mark_resubmitted(self):
        self.status = ApplicationStatus.RESUBMITTED
        self.resubmission_count += 1
        self.rejection_reason = ""
        self.save(
            update_fields=["status", "resubmission_count", "rejection_reason", "updated_at"]
        )


class ApplicationAddress(models.Model):
    TYPE_OFFICE = "1"
    TYPE_DOCUMENT_DELIVERY = "2"
    TYPE_TAX_INVOICE = "3"
    ADDRESS_TYPE_CHOICES = [
        (TYPE_OFFICE, "ที่อยู่สำนักงาน"),
        (TYPE_DOCUMENT_DELIVERY, "ที่อยู่จัดส่งเอกสาร"),
        (TYPE_TAX_INVOICE, "ที่อยู่ใบกำกับภาษี"),
    ]

    application = models.ForeignKey(
        MembershipApplication, on_delete=models.CASCADE, related_name="addresses"
    )
    address_type = models.CharField(max_length=1, choices=ADDRESS_TYPE_CHOICES)
    address_number = models.CharField(max_length=100, blank=True)
    building = models.CharField(max_length=255, blank=True)
    moo = models.CharField(max_length=50, blank=True)
    soi = models.CharField(max_length=100, blank=True)
    street = models.CharField(max_length=100, blank=True)
    sub_district = models.CharField(max_length=100, blank=True)
    district = models.CharField(max_length=100, blank=True)
    province = models.CharField(max_length=100, blank=True)
    postal_code = models.CharField(max_length=10, blank=True)
    phone = models.CharField(max_length=50, blank=True)
    phone_extension = models.CharField(max_length=20, blank=True)
    email = models.CharField(max_length=255, blank=True)
    website = models.CharField(max_length=255, blank=True)

    class Meta:
        ordering = ["address_type"]

    def __str__(self):
        return f"{self.get_address_type_display()}: {self.address_number} {self.province}"


class PersonFields(models.Model):
    prename_th = models.CharField(max_length=50, blank=True)
    prename_en = models.CharField(max_length=50, blank=True)
    prename_other = models.CharField(max_length=50, blank=True)
    prename_other_en = models.CharField(max_length=50, blank=True)
    first_name_th = models.CharField(max_length=100, blank=True)
    last_name_th = models.CharField(max_length=100, blank=True)
    first_name_en = models.CharField(max_length=100)
    last_name_en = models.CharField(max_length=100)
    position = models.CharField(max_length=255, blank=True)
    email = models.CharField(max_length=255, blank=True)
    phone = models.CharField(max_length=50, blank=True)
    phone_extension = models.CharField(max_length=20, blank=True)

    class Meta:
        abstract = True

    def __str__(self):
        return f"{self.first_name_th} {self.last_name_th}".strip() or (
            f"{self.first_name_en} {self.last_name_en}"
        )


class ContactPerson(PersonFields):
    DEFAULT_TYPE_ID = "MAIN"
    DEFAULT_TYPE_NAME = "ผู้ประสานงานหลัก"

    application = models.ForeignKey(
        MembershipApplication, on_delete=models.CASCADE, related_name="contact_persons"
    )
    type_contact_id = models.CharField(max_length=20, default=DEFAULT_TYPE_ID)
    type_contact_name = models.CharField(max_length=100, default=DEFAULT_TYPE_NAME)
    type_contact_other_detail = models.CharField(max_length=255, blank=True)

    class Meta:
        ordering = ["id"]


class Representative(PersonFields):
    application = models.ForeignKey(
        MembershipApplication, on_delete=models.CASCADE, related_name="representatives"
    )
    is_primary = models.BooleanField(default=False)
    rep_order = models.PositiveSmallIntegerField(default=1)

    class Meta:
        ordering = ["rep_order"]


class BusinessType(models.Model):
    CHOICES = [
        ("manufacturer", "ผู้ผลิต"),
        ("distributor", "ผู้จัดจำหน่าย"),
        ("importer", "ผู้นำเข้า"),
        ("exporter", "ผู้ส่งออก"),
        ("service", "ผู้ให้บริการ"),
        ("other", "อื่นๆ"),
    ]
    ALLOWED = tuple(code for code, _ in CHOICES)

    application = models.ForeignKey(
        MembershipApplication, on_delete=models.CASCADE, related_name="business_types"
    )
    business_type = models.CharField(max_length=20, choices=CHOICES)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["application", "business_type"], name="unique_business_type_per_application"
            )
        ]

    def __str__(self):
        return self.get_business_type_display()


class Product(models.Model):
    DEFAULT_NAME_TH = "ไม่ระบุ"
    DEFAULT_NAME_EN = "Not specified"

    application = models.ForeignKey(
        MembershipApplication, on_delete=models.CASCADE, related_name="products"
    )
    name_th = models.CharField(max_length=255, blank=True)
    name_en = models.CharField(max_length=255, blank=True)

    class Meta:
        ordering = ["id"]

    def __str__(self):
        return self.name_th or self.name_en


UNSPECIFIED_CODE = "000"
UNSPECIFIED_NAME = "ไม่ระบุ"


class IndustryGroup(models.Model):
    application = models.ForeignKey(
        MembershipApplication, on_delete=models.CASCADE, related_name="industry_groups"
    )
    industry_group_id = models.CharField(max_length=20, default=UNSPECIFIED_CODE)
    industry_group_name = models.CharField(max_length=255, default=UNSPECIFIED_NAME)

    class Meta:
        ordering = ["id"]

    def __str__(self):
        return f"{self.industry_group_id} {self.industry_group_name}"


class ProvinceChapter(models.Model):
    application = models.ForeignKey(
        MembershipApplication, on_delete=models.CASCADE, related_name="province_chapters"
    )
    province_chapter_id = models.CharField(max_length=20, default=UNSPECIFIED_CODE)
    province_chapter_name = models.CharField(max_length=255, default=UNSPECIFIED_NAME)

    class Meta:
        ordering = ["id"]

    def __str__(self):
        return f"{self.province_chapter_id} {self.province_chapter_name}"


class AuthorizedSignatory(models.Model):
    application = models.OneToOneField(
        MembershipApplication, on_delete=models.CASCADE, related_name="authorized_signatory"
    )
    prename_th = models.CharField(max_length=50, blank=True)
    prename_en = models.CharField(max_length=50, blank=True)
    prename_other = models.CharField(max_length=50, blank=True)
    prename_other_en = models.CharField(max_length=50, blank=True)
    first_name_th = models.CharField(max_length=100)
    last_name_th = models.CharField(max_length=100)
    first_name_en = models.CharField(max_length=100)
    last_name_en = models.CharField(max_length=100)
    position_th = models.CharField(max_length=255, blank=True)
    position_en = models.CharField(max_length=255, blank=True)

    def __str__(self):
        return f"{self.first_name_th} {self.last_name_th} ({self.position_th or self.position_en})"


class ApplicationDocument(models.Model):
    application = models.ForeignKey(
        MembershipApplication, on_delete=models.CASCADE, related_name="documents"
    )
    document_type = models.CharField(max_length=100)
    file_name = models.CharField(max_length=255)
    file_url = models.URLField(max_length=1000)
    public_id = models.CharField(max_length=500, blank=True)
    file_size = models.PositiveBigIntegerField(null=True, blank=True)
    mime_type = models.CharField(max_length=100, blank=True)
    uploaded_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["document_type", "id"]

    def __str__(self):
        return f"{self.document_type}: {self.file_name}"


class ApplicationStatusLog(models.Model):
    application = models.ForeignKey(
        MembershipApplication, on_delete=models.CASCADE, related_name="status_logs"
    )
    status = models.PositiveSmallIntegerField(choices=ApplicationStatus.choices)
    note = models.TextField(blank=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, related_name="+"
    )
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["created_at"]


class ApplicationSnapshot(models.Model):
    """Frozen copy of an application taken before a rejection or resubmission."""

    TYPE_REJECTION = "rejection"
    TYPE_RESUBMISSION = "resubmission"
    TYPE_CHOICES = [(TYPE_REJECTION, "Rejection"), (TYPE_RESUBMISSION, "Resubmission")]

    application = models.ForeignKey(
        MembershipApplication, on_delete=models.CASCADE, related_name="snapshots"
    )
    snapshot_type = models.CharField(max_length=20, choices=TYPE_CHOICES)
    data = models.JSONField()
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, related_name="+"
    )
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["-created_at"]


class Rejection(models.Model):
    STATUS_PENDING_FIX = "pending_fix"
    STATUS_PENDING_REVIEW = "pending_review"
    STATUS_RESOLVED = "resolved"
    STATUS_CANCELLED = "cancelled"
    STATUS_CHOICES = [
        (STATUS_PENDING_FIX, "รอแก้ไข"),
        (STATUS_PENDING_REVIEW, "รอตรวจสอบ"),
        (STATUS_RESOLVED, "แก้ไขแล้ว"),
        (STATUS_CANCELLED, "ยกเลิก"),
    ]
    OPEN_STATUSES = (STATUS_PENDING_FIX, STATUS_PENDING_REVIEW)

    application = models.ForeignKey(
        MembershipApplication, on_delete=models.CASCADE, related_name="rejections"
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="rejections"
    )
    snapshot = models.ForeignKey(
        ApplicationSnapshot, on_delete=models.SET_NULL, null=True, blank=True, related_name="+"
    )
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_PENDING_FIX)
    reason = models.TextField()
    rejected_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, related_name="+"
    )
    rejected_at = models.DateTimeField(default=timezone.now)
    unread_member_count = models.PositiveIntegerField(default=0)
    unread_admin_count = models.PositiveIntegerField(default=0)
    last_conversation_at = models.DateTimeField(null=True, blank=True)
    resolved_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-rejected_at"]

    def __str__(self):
        return f"Rejection of {self.application} ({self.status})"

    @property
    def is_open(self):
        return self.status in self.OPEN_STATUSES


class RejectionConversation(models.Model):
    SENDER_ADMIN = "admin"
    SENDER_MEMBER = "member"
    SENDER_CHOICES = [(SENDER_ADMIN, "Admin"), (SENDER_MEMBER, "Member")]

    rejection = models.ForeignKey(
        Rejection, on_delete=models.CASCADE, related_name="conversations"
    )
    sender_type = models.CharField(max_length=10, choices=SENDER_CHOICES)
    sender = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, related_name="+"
    )
    message = models.TextField()
    is_read = models.BooleanField(default=False)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["created_at", "id"]


class ApplicationDraft(models.Model):
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="application_drafts"
    )
    membership_type = models.CharField(max_length=2, choices=MembershipType.choices)
    identifier = models.CharField(
        max_length=13, help_text="Tax id for company types, id card number for IC"
    )
    data = models.JSONField(default=dict)
    current_step = models.PositiveSmallIntegerField(default=1)
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-updated_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["user", "membership_type", "identifier"], name="unique_draft_per_identifier"
            )
        ]

    def __str__(self):
        return f"{self.membership_type.upper()} draft {self.identifier} ({self.user})"
