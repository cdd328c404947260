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
            name="AdminActionLog",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("action_type", models.CharField(choices=[("approve", "Approve application"), ("reject", "Reject application"), ("save_note", "Save admin note"), ("Admin_Update_MemberRegist", "Update application data"), ("switch_membership_type", "Switch membership type"), ("connect_member_code", "Connect member code"), ("approve_member", "Approve existing member"), ("reject_member", "Reject existing member"), ("delete_member", "Delete existing member claim"), ("approve_address_update", "Approve address update"), ("reject_address_update", "Reject address update"), ("contact_message_read", "Read contact message"), ("contact_message_reply", "Reply to contact message"), ("contact_message_direct_reply", "Direct reply to contact message"), ("contact_message_status", "Change contact message status"), ("rejection_conversation", "Message on rejected application")], max_length=50)),
                ("target_id", models.CharField(blank=True, max_length=64)),
                ("description", models.TextField(blank=True, help_text="Plain text or a JSON document describing the change")),
                ("ip_address", models.GenericIPAddressField(blank=True, null=True)),
                ("user_agent", models.CharField(blank=True, max_length=500)),
                ("created_at", models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                ("admin", models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="admin_actions", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [models.Index(fields=["action_type", "created_at"], name="admin_log_action_idx")],
            },
        ),
        migrations.CreateModel(
            name="UserLog",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("action", models.CharField(max_length=50)),
                ("details", models.TextField(blank=True)),
                ("ip_address", models.GenericIPAddressField(blank=True, null=True)),
                ("user_agent", models.CharField(blank=True, max_length=500)),
                ("created_at", models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                ("user", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="activity_logs", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["-created_at"],
            },
        ),
    ]
