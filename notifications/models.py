from django.conf import settings
from django.db import models
from django.utils import timezone


class Notification(models.Model):
    TYPE_MEMBER_VERIFICATION = "member_verification"
    TYPE_CONTACT_REPLY = "contact_reply"
    TYPE_CONTACT_DIRECT_REPLY = "contact_direct_reply"
    TYPE_ADDRESS_UPDATE = "address_update"
    TYPE_PROFILE_UPDATE = "profile_update"
    TYPE_MEMBER_CONNECTION = "member_connection"
    TYPE_MEMBERSHIP_APPLICATION = "membership_application"
    TYPE_GENERAL = "general"

    TYPE_CHOICES = [
        (TYPE_MEMBER_VERIFICATION, "Member verification"),
        (TYPE_CONTACT_REPLY, "Contact reply"),
        (TYPE_CONTACT_DIRECT_REPLY, "Contact direct reply"),
        (TYPE_ADDRESS_UPDATE, "Address update"),
        (TYPE_PROFILE_UPDATE, "Profile update"),
        (TYPE_MEMBER_CONNECTION, "Member connection"),
        (TYPE_MEMBERSHIP_APPLICATION, "Membership application"),
        (TYPE_GENERAL, "General"),
    ]

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="notifications"
    )
    type = models.CharField(max_length=40, choices=TYPE_CHOICES, default=TYPE_GENERAL)
    message = models.TextField()
    # Portal-relative path, e.g. "/dashboard?tab=status"
    link = models.CharField(max_length=500, blank=True)
    created_at = models.DateTimeField(default=timezone.now)
    read = models.BooleanField(default=False)
    read_at = models.DateTimeField(null=True, blank=True)
    dismissed = models.BooleanField(default=False)

    # Address-update context used to build the member detail link
    member_code = models.CharField(max_length=20, blank=True)
    company_name = models.CharField(max_length=255, blank=True)
    member_type = models.CharField(max_length=10, blank=True)
    member_group_code = models.CharField(max_length=10, blank=True)
    type_code = models.CharField(max_length=10, blank=True)
    addr_code = models.CharField(max_length=3, blank=True)
    addr_lang = models.CharField(max_length=2, blank=True)

    class Meta:
        db_table = "notifications"
        ordering = ["-created_at"]
        indexes = [models.Index(fields=["user", "read", "dismissed"], name="notification_feed_idx")]

    def __str__(self):
        return f"Notification for {self.user}: {self.message[:50]}"

    def mark_read(self):
        if self.read:
            return False
        self.read = True
        self.read_at = timezone.now()
        self.save(update_fields=["read", "read_at"])
        return True
