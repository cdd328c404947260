from django.conf import settings
from django.db import models
from django.utils import timezone


class AdminActionLog(models.Model):
    """Audit trail of every administrative action taken through the portal."""

    ACTION_APPROVE = "approve"
    ACTION_REJECT = "reject"
    ACTION_SAVE_NOTE = "save_note"
    ACTION_UPDATE_APPLICATION = "Admin_Update_MemberRegist"
    ACTION_SWITCH_TYPE = "switch_membership_type"
    ACTION_CONNECT_MEMBER_CODE = "connect_member_code"
    ACTION_APPROVE_MEMBER = "approve_member"
    ACTION_REJECT_MEMBER = "reject_member"
    ACTION_DELETE_MEMBER = "delete_member"
    ACTION_APPROVE_ADDRESS = "approve_address_update"
    ACTION_REJECT_ADDRESS = "reject_address_update"
    ACTION_CONTACT_READ = "contact_message_read"
    ACTION_CONTACT_REPLY = "contact_message_reply"
    ACTION_CONTACT_DIRECT_REPLY = "contact_message_direct_reply"
    ACTION_CONTACT_STATUS = "contact_message_status"
    ACTION_REJECTION_MESSAGE = "rejection_conversation"

    ACTION_CHOICES = [
        (ACTION_APPROVE, "Approve application"),
        (ACTION_REJECT, "Reject application"),
        (ACTION_SAVE_NOTE, "Save admin note"),
        (ACTION_UPDATE_APPLICATION, "Update application data"),
        (ACTION_SWITCH_TYPE, "Switch membership type"),
        (ACTION_CONNECT_MEMBER_CODE, "Connect member code"),
        (ACTION_APPROVE_MEMBER, "Approve existing member"),
        (ACTION_REJECT_MEMBER, "Reject existing member"),
        (ACTION_DELETE_MEMBER, "Delete existing member claim"),
        (ACTION_APPROVE_ADDRESS, "Approve address update"),
        (ACTION_REJECT_ADDRESS, "Reject address update"),
        (ACTION_CONTACT_READ, "Read contact message"),
        (ACTION_CONTACT_REPLY, "Reply to contact message"),
        (ACTION_CONTACT_DIRECT_REPLY, "Direct reply to contact message"),
        (ACTION_CONTACT_STATUS, "Change contact message status"),
        (ACTION_REJECTION_MESSAGE, "Message on rejected application"),
    ]

    admin = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        related_name="admin_actions",
    )
    action_type = models.CharField(max_length=50, choices=ACTION_CHOICES)
    target_id = models.CharField(max_length=64, blank=True)
    description = models.TextField(
        blank=True, help_text="Plain text or a JSON document describing the change"
    )
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    user_agent = models.CharField(max_length=500, blank=True)
    created_at = models.DateTimeField(default=timezone.now, db_index=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [models.Index(fields=["action_type", "created_at"], name="admin_log_action_idx")]

    def __str__(self):
        return f"{self.get_action_type_display()} #{self.target_id} by {self.admin}"


class UserLog(models.Model):
    """What a member did on the portal (submissions, resubmissions, requests)."""

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="activity_logs",
    )
    action = models.CharField(max_length=50)
    details = models.TextField(blank=True)
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    user_agent = models.CharField(max_length=500, blank=True)
    created_at = models.DateTimeField(default=timezone.now, db_index=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return f"{self.user}: {self.action}"
