import uuid

import django.core.validators
import django.db.models.deletion
import django.utils.timezone
import tinymce.models
from django.conf import settings
from django.db import migrations, models

THIRTEEN_DIGITS = django.core.validators.RegexValidator(
    message="ต้องเป็นตัวเลข 13 หลัก", regex="^\\d{13}$"
)
MEMBERSHIP_TYPES = [
    ("oc", "สน (สามัญ-โรงงาน)"),
    ("am", "สส (สามัญ-สมาคมการค้า)"),
    ("ac", "ทน (สมทบ-นิติบุคคล)"),
    ("ic", "ทบ (สมทบ-บุคคลธรรมดา)"),
]
APPLICATION_STATUSES = [(0, "รอพิจารณา"), (1, "อนุมัติ"), (2, "ปฏิเสธ"), (3, "ส่งใหม่")]


def person_fields():
    return [
        ("prename_th", models.CharField(blank=True, max_length=50)),
        ("prename_en", models.CharField(blank=True, max_length=50)),
        ("prename_other", models.CharField(blank=True, max_length=50)),
        ("prename_other_en", models.CharField(blank=True, max_length=50)),
        ("first_name_th", models.CharField(blank=True, max_length=100)),
        ("last_name_th", models.CharField(blank=True, max_length=100)),
        ("first_name_en", models.CharField(max_length=100)),
        ("last_name_en", models.CharField(max_length=100)),
        ("position", models.CharField(blank=True, max_length=255)),
        ("email", models.CharField(blank=True, max_length=255)),
        ("phone", models.CharField(blank=True, max_length=50)),
        ("phone_extension", models.CharField(blank=True, max_length=20)),
    ]


def money_field():
    return models.DecimalField(blank=True, decimal_places=2, max_digits=15, null=True)


def percent_field():
    return models.DecimalField(
        blank=True,
        decimal_places=2,
        max_digits=5,
        null=True,
        validators=[
            django.core.validators.MinValueValidator(0),
            django.core.validators.MaxValueValidator(100),
        ],
    )


def application_fk(related_name):
    return models.ForeignKey(
        on_delete=django.db.models.deletion.CASCADE,
        related_name=related_name,
        to="membership.membershipapplication",
    )


def auto_id():
    return models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="MembershipApplication",
            fields=[
                ("id", auto_id()),
                ("application_id", models.UUIDField(default=uuid.uuid4, editable=False, help_text="Public identifier for this application", unique=True)),
                ("membership_type", models.CharField(choices=MEMBERSHIP_TYPES, max_length=2)),
                ("status", models.PositiveSmallIntegerField(choices=APPLICATION_STATUSES, default=0)),
                ("company_name_th", models.CharField(blank=True, max_length=255)),
                ("company_name_en", models.CharField(blank=True, max_length=255)),
                ("tax_id", models.CharField(blank=True, db_index=True, max_length=13, validators=[THIRTEEN_DIGITS])),
                ("company_email", models.EmailField(blank=True, max_length=254)),
                ("company_phone", models.CharField(blank=True, max_length=50)),
                ("company_phone_extension", models.CharField(blank=True, max_length=20)),
                ("company_website", models.CharField(blank=True, max_length=255)),
                ("factory_type", models.CharField(blank=True, help_text="OC only: type of factory licence", max_length=20)),
                ("number_of_employees", models.PositiveIntegerField(blank=True, null=True)),
                ("number_of_member", models.PositiveIntegerField(blank=True, help_text="AM only: members of the trade association", null=True)),
                ("registered_capital", money_field()),
                ("production_capacity_value", money_field()),
                ("production_capacity_unit", models.CharField(blank=True, max_length=50)),
                ("sales_domestic", money_field()),
                ("sales_export", money_field()),
                ("revenue_last_year", money_field()),
                ("revenue_previous_year", money_field()),
                ("shareholder_thai_percent", percent_field()),
                ("shareholder_foreign_percent", percent_field()),
                ("business_type_other_detail", models.CharField(blank=True, max_length=255)),
                ("id_card_number", models.CharField(blank=True, db_index=True, max_length=13, validators=[THIRTEEN_DIGITS])),
                ("prename_th", models.CharField(blank=True, max_length=50)),
                ("prename_en", models.CharField(blank=True, max_length=50)),
                ("first_name_th", models.CharField(blank=True, max_length=100)),
                ("last_name_th", models.CharField(blank=True, max_length=100)),
                ("first_name_en", models.CharField(blank=True, max_length=100)),
                ("last_name_en", models.CharField(blank=True, max_length=100)),
                ("phone", models.CharField(blank=True, max_length=50)),
                ("phone_extension", models.CharField(blank=True, max_length=20)),
                ("email", models.EmailField(blank=True, max_length=254)),
                ("website", models.CharField(blank=True, max_length=255)),
                ("member_code", models.CharField(blank=True, db_index=True, max_length=20)),
                ("admin_note", tinymce.models.HTMLField(blank=True, help_text="Internal note visible to administrators")),
                ("admin_note_at", models.DateTimeField(blank=True, null=True)),
                ("approved_at", models.DateTimeField(blank=True, null=True)),
                ("rejection_reason", models.TextField(blank=True)),
                ("rejected_at", models.DateTimeField(blank=True, null=True)),
                ("resubmission_count", models.PositiveIntegerField(default=0)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("admin_note_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to=settings.AUTH_USER_MODEL)),
                ("approved_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to=settings.AUTH_USER_MODEL)),
                ("rejected_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to=settings.AUTH_USER_MODEL)),
                ("user", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="membership_applications", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "db_table": "membership_applications",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["membership_type", "status"], name="application_type_status_idx"),
                    models.Index(fields=["tax_id", "status"], name="application_tax_status_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="ApplicationAddress",
            fields=[
                ("id", auto_id()),
                ("address_type", models.CharField(choices=[("1", "ที่อยู่สำนักงาน"), ("2", "ที่อยู่จัดส่งเอกสาร"), ("3", "ที่อยู่ใบกำกับภาษี")], max_length=1)),
                ("address_number", models.CharField(blank=True, max_length=100)),
                ("building", models.CharField(blank=True, max_length=255)),
                ("moo", models.CharField(blank=True, max_length=50)),
                ("soi", models.CharField(blank=True, max_length=100)),
                ("street", models.CharField(blank=True, max_length=100)),
                ("sub_district", models.CharField(blank=True, max_length=100)),
                ("district", models.CharField(blank=True, max_length=100)),
                ("province", models.CharField(blank=True, max_length=100)),
                ("postal_code", models.CharField(blank=True, max_length=10)),
                ("phone", models.CharField(blank=True, max_length=50)),
                ("phone_extension", models.CharField(blank=True, max_length=20)),
                ("email", models.CharField(blank=True, max_length=255)),
                ("website", models.CharField(blank=True, max_length=255)),
                ("application", application_fk("addresses")),
            ],
            options={"ordering": ["address_type"]},
        ),
        migrations.CreateModel(
            name="ContactPerson",
            fields=[
                ("id", auto_id()),
                *person_fields(),
                ("type_contact_id", models.CharField(default="MAIN", max_length=20)),
                ("type_contact_name", models.CharField(default="ผู้ประสานงานหลัก", max_length=100)),
                ("type_contact_other_detail", models.CharField(blank=True, max_length=255)),
                ("application", application_fk("contact_persons")),
            ],
            options={"ordering": ["id"]},
        ),
        migrations.CreateModel(
            name="Representative",
            fields=[
                ("id", auto_id()),
                *person_fields(),
                ("is_primary", models.BooleanField(default=False)),
                ("rep_order", models.PositiveSmallIntegerField(default=1)),
                ("application", application_fk("representatives")),
            ],
            options={"ordering": ["rep_order"]},
        ),
        migrations.CreateModel(
            name="BusinessType",
            fields=[
                ("id", auto_id()),
                ("business_type", models.CharField(choices=[("manufacturer", "ผู้ผลิต"), ("distributor", "ผู้จัดจำหน่าย"), ("importer", "ผู้นำเข้า"), ("exporter", "ผู้ส่งออก"), ("service", "ผู้ให้บริการ"), ("other", "อื่นๆ")], max_length=20)),
                ("application", application_fk("business_types")),
            ],
            options={
                "constraints": [
                    models.UniqueConstraint(fields=("application", "business_type"), name="unique_business_type_per_application"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Product",
            fields=[
                ("id", auto_id()),
                ("name_th", models.CharField(blank=True, max_length=255)),
                ("name_en", models.CharField(blank=True, max_length=255)),
                ("application", application_fk("products")),
            ],
            options={"ordering": ["id"]},
        ),
        migrations.CreateModel(
            name="IndustryGroup",
            fields=[
                ("id", auto_id()),
                ("industry_group_id", models.CharField(default="000", max_length=20)),
                ("industry_group_name", models.CharField(default="ไม่ระบุ", max_length=255)),
                ("application", application_fk("industry_groups")),
            ],
            options={"ordering": ["id"]},
        ),
        migrations.CreateModel(
            name="ProvinceChapter",
            fields=[
                ("id", auto_id()),
                ("province_chapter_id", models.CharField(default="000", max_length=20)),
                ("province_chapter_name", models.CharField(default="ไม่ระบุ", max_length=255)),
                ("application", application_fk("province_chapters")),
            ],
            options={"ordering": ["id"]},
        ),
        migrations.CreateModel(
            name="AuthorizedSignatory",
            fields=[
                ("id", auto_id()),
                ("prename_th", models.CharField(blank=True, max_length=50)),
                ("prename_en", models.CharField(blank=True, max_length=50)),
                ("prename_other", models.CharField(blank=True, max_length=50)),
                ("prename_other_en", models.CharField(blank=True, max_length=50)),
                ("first_name_th", models.CharField(max_length=100)),
                ("last_name_th", models.CharField(max_length=100)),
                ("first_name_en", models.CharField(max_length=100)),
                ("last_name_en", models.CharField(max_length=100)),
                ("position_th", models.CharField(blank=True, max_length=255)),
                ("position_en", models.CharField(blank=True, max_length=255)),
                ("application", models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name="authorized_signatory", to="membership.membershipapplication")),
            ],
        ),
        migrations.CreateModel(
            name="ApplicationDocument",
            fields=[
                ("id", auto_id()),
                ("document_type", models.CharField(max_length=100)),
                ("file_name", models.CharField(max_length=255)),
                ("file_url", models.URLField(max_length=1000)),
                ("public_id", models.CharField(blank=True, max_length=500)),
                ("file_size", models.PositiveBigIntegerField(blank=True, null=True)),
                ("mime_type", models.CharField(blank=True, max_length=100)),
                ("uploaded_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("application", application_fk("documents")),
            ],
            options={"ordering": ["document_type", "id"]},
        ),
        migrations.CreateModel(
            name="ApplicationStatusLog",
            fields=[
                ("id", auto_id()),
                ("status", models.PositiveSmallIntegerField(choices=APPLICATION_STATUSES)),
                ("note", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("application", application_fk("status_logs")),
                ("created_by", models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to=settings.AUTH_USER_MODEL)),
            ],
            options={"ordering": ["created_at"]},
        ),
        migrations.CreateModel(
            name="ApplicationSnapshot",
            fields=[
                ("id", auto_id()),
                ("snapshot_type", models.CharField(choices=[("rejection", "Rejection"), ("resubmission", "Resubmission")], max_length=20)),
                ("data", models.JSONField()),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("application", application_fk("snapshots")),
                ("created_by", models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to=settings.AUTH_USER_MODEL)),
            ],
            options={"ordering": ["-created_at"]},
        ),
        migrations.CreateModel(
            name="Rejection",
            fields=[
                ("id", auto_id()),
                ("status", models.CharField(choices=[("pending_fix", "รอแก้ไข"), ("pending_review", "รอตรวจสอบ"), ("resolved", "แก้ไขแล้ว"), ("cancelled", "ยกเลิก")], default="pending_fix", max_length=20)),
                ("reason", models.TextField()),
                ("rejected_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("unread_member_count", models.PositiveIntegerField(default=0)),
                ("unread_admin_count", models.PositiveIntegerField(default=0)),
                ("last_conversation_at", models.DateTimeField(blank=True, null=True)),
                ("resolved_at", models.DateTimeField(blank=True, null=True)),
                ("application", application_fk("rejections")),
                ("rejected_by", models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to=settings.AUTH_USER_MODEL)),
                ("snapshot", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to="membership.applicationsnapshot")),
                ("user", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="rejections", to=settings.AUTH_USER_MODEL)),
            ],
            options={"ordering": ["-rejected_at"]},
        ),
        migrations.CreateModel(
            name="RejectionConversation",
            fields=[
                ("id", auto_id()),
                ("sender_type", models.CharField(choices=[("admin", "Admin"), ("member", "Member")], max_length=10)),
                ("message", models.TextField()),
                ("is_read", models.BooleanField(default=False)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("rejection", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="conversations", to="membership.rejection")),
                ("sender", models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to=settings.AUTH_USER_MODEL)),
            ],
            options={"ordering": ["created_at", "id"]},
        ),
        migrations.CreateModel(
            name="ApplicationDraft",
            fields=[
                ("id", auto_id()),
                ("membership_type", models.CharField(choices=MEMBERSHIP_TYPES, max_length=2)),
                ("identifier", models.CharField(help_text="Tax id for company types, id card number for IC", max_length=13)),
                ("data", models.JSONField(default=dict)),
                ("current_step", models.PositiveSmallIntegerField(default=1)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("user", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="application_drafts", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["-updated_at"],
                "constraints": [
                    models.UniqueConstraint(fields=("user", "membership_type", "identifier"), name="unique_draft_per_identifier"),
                ],
            },
        ),
    ]
