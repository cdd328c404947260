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
            name="Notification",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("type", models.CharField(choices=[("member_verification", "Member verification"), ("contact_reply", "Contact reply"), ("contact_direct_reply", "Contact direct reply"), ("address_update", "Address update"), ("profile_update", "Profile update"), ("member_connection", "Member connection"), ("membership_application", "Membership application"), ("general", "General")], default="general", max_length=40)),
                ("message", models.TextField()),
                ("link", models.CharField(blank=True, max_length=500)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("read", models.BooleanField(default=False)),
                ("read_at", models.DateTimeField(blank=True, null=True)),
                ("dismissed", models.BooleanField(default=False)),
                ("member_code", models.CharField(blank=True, max_length=20)),
                ("company_name", models.CharField(blank=True, max_length=255)),
                ("member_type", models.CharField(blank=True, max_length=10)),
                ("member_group_code", models.CharField(blank=True, max_length=10)),
                ("type_code", models.CharField(blank=True, max_length=10)),
                ("addr_code", models.CharField(blank=True, max_length=3)),
                ("addr_lang", models.CharField(blank=True, max_length=2)),
                ("user", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="notifications", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "db_table": "notifications",
                "ordering": ["-created_at"],
                "indexes": [models.Index(fields=["user", "read", "dismissed"], name="notification_feed_idx")],
            },
        ),
    ]
