from django.conf import settings
from django.db import models
from django.utils import timezone


#########################
# CompanyMember Model

# Links a portal account to a company (or person) in the member registry.
# Rows come from two places: an admin connecting a member code to an
# approved application (admin_submit starts at 1), and a user claiming an
# existing membership through verification (admin_submit starts at 0 and
# waits for review).


class CompanyMember(models.Model):
    SUBMIT_PENDING = 0
    SUBMIT_APPROVED = 1
    SUBMIT_REJECTED = 2
    SUBMIT_DELETED = 3
    SUBMIT_CHOICES = [
        (SUBMIT_PENDING, "รอพิจารณา"),
        (SUBMIT_APPROVED, "อนุมัติ"),
        (SUBMIT_REJECTED, "ปฏิเสธ"),
        (SUBMIT_DELETED, "ลบ"),
    ]
    LIVE_SUBMITS = (SUBMIT_PENDING, SUBMIT_APPROVED)

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="companies"
    )
    member_code = models.CharField(max_length=20, db_index=True)
    comp_person_code = models.CharField(max_length=20, blank=True)
    regist_code = models.CharField(max_length=20, blank=True)
    member_date = models.DateField(null=True, blank=True)
    company_name = models.CharField(max_length=255, blank=True)
    company_type = models.CharField(
        max_length=10, blank=True, help_text="Registry abbreviation: สน, สส, ทน or ทบ"
    )
    tax_id = models.CharField(max_length=20, blank=True)
    admin_submit = models.PositiveSmallIntegerField(choices=SUBMIT_CHOICES, default=SUBMIT_PENDING)
    reject_reason = models.TextField(blank=True)
    admin_comment = models.TextField(blank=True)
    admin = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    admin_name = models.CharField(max_length=255, blank=True)
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "companies_Member"
        ordering = ["-created_at"]
        indexes = [models.Index(fields=["user", "admin_submit"], name="company_user_submit_idx")]

    def __str__(self):
        return f"{self.member_code} {self.company_name} ({self.get_admin_submit_display()})"

    @property
    def is_approved(self):
        return self.admin_submit == self.SUBMIT_APPROVED


class VerificationDocument(models.Model):
    STATUS_PENDING = "pending"
    STATUS_APPROVED = "approved"
    STATUS_REJECTED = "rejected"
    STATUS_CHOICES = [
        (STATUS_PENDING, "รอพิจารณา"),
        (STATUS_APPROVED, "อนุมัติ"),
        (STATUS_REJECTED, "ปฏิเสธ"),
    ]

    company_member = models.ForeignKey(
        CompanyMember, on_delete=models.CASCADE, related_name="documents"
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="verification_documents"
    )
    member_code = models.CharField(max_length=20)
    document_type = models.CharField(max_length=50, default="other")
    file_name = models.CharField(max_length=255)
    file_url = models.URLField(max_length=1000)
    public_id = models.CharField(max_length=500, blank=True)
    file_size = models.PositiveBigIntegerField(null=True, blank=True)
    mime_type = models.CharField(max_length=100, blank=True)
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=STATUS_PENDING)
    reject_reason = models.TextField(blank=True)
    uploaded_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = "verification_documents"
        ordering = ["-uploaded_at"]

    def __str__(self):
        return f"{self.member_code}: {self.file_name} ({self.status})"
