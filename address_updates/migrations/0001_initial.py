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
            name="PendingAddressUpdate",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("member_code", models.CharField(db_index=True, max_length=20)),
                ("comp_person_code", models.CharField(blank=True, max_length=20)),
                ("regist_code", models.CharField(blank=True, max_length=20)),
                ("member_type", models.CharField(blank=True, max_length=10)),
                ("member_group_code", models.CharField(blank=True, max_length=10)),
                ("type_code", models.CharField(blank=True, max_length=10)),
                ("addr_code", models.CharField(choices=[("001", "ที่อยู่สำหรับติดต่อ"), ("002", "ที่อยู่สำหรับจัดส่งเอกสาร"), ("003", "ที่อยู่สำหรับออกใบกำกับภาษี")], default="001", max_length=3)),
                ("addr_lang", models.CharField(choices=[("th", "ภาษาไทย"), ("en", "ภาษาอังกฤษ")], default="th", max_length=2)),
                ("old_address", models.JSONField(blank=True, default=dict)),
                ("new_address", models.JSONField(default=dict)),
                ("document_url", models.URLField(blank=True, max_length=1000)),
                ("status", models.CharField(choices=[("pending", "รอการอนุมัติ"), ("approved", "อนุมัติแล้ว"), ("rejected", "ปฏิเสธแล้ว")], default="pending", max_length=10)),
                ("request_date", models.DateTimeField(default=django.utils.timezone.now)),
                ("processed_date", models.DateTimeField(blank=True, null=True)),
                ("admin_comment", models.TextField(blank=True)),
                ("admin_notes", models.TextField(blank=True)),
                ("processed_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to=settings.AUTH_USER_MODEL)),
                ("user", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="address_updates", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "db_table": "pending_address_updates",
                "ordering": ["-request_date"],
                "indexes": [models.Index(fields=["status", "request_date"], name="address_update_status_idx")],
            },
        ),
    ]
