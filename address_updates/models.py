from django.conf import settings
from django.db import models
from django.utils import timezone


#########################
# PendingAddressUpdate Model

# A member's request to change one registry address. The address is kept in
# the registry's own ADDR_* shape so an approval can be written straight
# into MB_MEMBER_ADDRESS.

# Fields:
# - addr_code: 001 contact, 002 document delivery, 003 tax invoice
# - addr_lang: th or en; selects which registry columns the request edits
# - old_address / new_address: ADDR_* dictionaries; old_address holds only
#   the chosen language (English keys with their _EN suffix removed)


class PendingAddressUpdate(models.Model):
    STATUS_PENDING = "pending"
    STATUS_APPROVED = "approved"
    STATUS_REJECTED = "rejected"
    STATUS_CHOICES = [
        (STATUS_PENDING, "รอการอนุมัติ"),
        (STATUS_APPROVED, "อนุมัติแล้ว"),
        (STATUS_REJECTED, "ปฏิเสธแล้ว"),
    ]

    ADDR_CONTACT = "001"
    ADDR_DOCUMENT_DELIVERY = "002"
    ADDR_TAX_INVOICE = "003"
    ADDR_CODE_CHOICES = [
        (ADDR_CONTACT, "ที่อยู่สำหรับติดต่อ"),
        (ADDR_DOCUMENT_DELIVERY, "ที่อยู่สำหรับจัดส่งเอกสาร"),
        (ADDR_TAX_INVOICE, "ที่อยู่สำหรับออกใบกำกับภาษี"),
    ]
    EDITABLE_ADDR_CODES = (ADDR_CONTACT, ADDR_DOCUMENT_DELIVERY, ADDR_TAX_INVOICE)

    LANG_TH = "th"
    LANG_EN = "en"
    LANG_CHOICES = [(LANG_TH, "ภาษาไทย"), (LANG_EN, "ภาษาอังกฤษ")]

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="address_updates"
    )
    member_code = models.CharField(max_length=20, db_index=True)
    comp_person_code = models.CharField(max_length=20, blank=True)
    regist_code = models.CharField(max_length=20, blank=True)
    member_type = models.CharField(max_length=10, blank=True)
    member_group_code = models.CharField(max_length=10, blank=True)
    type_code = models.CharField(max_length=10, blank=True)
    addr_code = models.CharField(max_length=3, choices=ADDR_CODE_CHOICES, default=ADDR_CONTACT)
    addr_lang = models.CharField(max_length=2, choices=LANG_CHOICES, default=LANG_TH)
    old_address = models.JSONField(default=dict, blank=True)
    new_address = models.JSONField(default=dict)
    document_url = models.URLField(max_length=1000, blank=True)
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=STATUS_PENDING)
    request_date = models.DateTimeField(default=timezone.now)
    processed_date = models.DateTimeField(null=True, blank=True)
    processed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    admin_comment = models.TextField(blank=True)
    admin_notes = models.TextField(blank=True)

    class Meta:
        db_table = "pending_address_updates"
        ordering = ["-request_date"]
        indexes = [models.Index(fields=["status", "request_date"], name="address_update_status_idx")]

    def __str__(self):
        return f"{self.member_code} {self.addr_code}/{self.addr_lang} ({self.status})"

    @property
    def address_type_text(self):
        return "หลัก" if self.addr_code == self.ADDR_CONTACT else "โรงงาน"

    @property
    def language_text(self):
        return "ภาษาอังกฤษ" if self.addr_lang == self.LANG_EN else "ภาษาไทย"
