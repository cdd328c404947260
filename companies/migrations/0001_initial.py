import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="CompanyMember",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("member_code", models.CharField(db_index=True, max_length=20)),
                ("comp_person_code", models.CharField(blank=True, max_length=20)),
                ("regist_code", models.CharField(blank=True, max_length=20)),
                ("member_date", models.DateField(blank=True, null=True)),
                ("company_name", models.CharField(blank=True, max_length=255)),
                ("company_type", models.CharField(blank=True, help_text="Registry abbreviation: สน, สส, ทน or ทบ", max_length=10)),
                ("tax_id", models.CharField(blank=True, max_length=20)),
                ("admin_submit", models.PositiveSmallIntegerField(choices=[(0, "รอพิจารณา"), (1, "อนุมัติ"), (2, "ปฏิเสธ"), (3, "ลบ")], default=0)),
                ("reject_reason", models.TextField(blank=True)),
                ("admin_comment", models.TextField(blank=True)),
                ("admin_name", models.CharField(blank=True, max_length=255)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("admin", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to=settings.AUTH_USER_MODEL)),
                ("user", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="companies", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "db_table": "companies_Member",
                "ordering": ["-created_at"],
                "indexes": [models.Index(fields=["user", "admin_submit"], name="company_user_submit_idx")],
            },
        ),
        migrations.CreateModel(
            name="VerificationDocument",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("member_code", models.CharField(max_length=20)),
                ("document_type", models.CharField(default="other", max_length=50)),
                ("file_name", models.CharField(max_length=255)),
                ("file_url", models.URLField(max_length=1000)),
                ("public_id", models.CharField(blank=True, max_length=500)),
                ("file_size", models.PositiveBigIntegerField(blank=True, null=True)),
                ("mime_type", models.CharField(blank=True, max_length=100)),
                ("status", models.CharField(choices=[("pending", "รอพิจารณา"), ("approved", "อนุมัติ"), ("rejected", "ปฏิเสธ")], default="pending", max_length=10)),
                ("reject_reason", models.TextField(blank=True)),
                ("uploaded_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("company_member", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="documents", to="companies.companymember")),
                ("user", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="verification_documents", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "db_table": "verification_documents",
                "ordering": ["-uploaded_at"],
            },
        ),
    ]
