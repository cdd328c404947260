from django.conf import settings
from django.db import models
from django.utils import timezone


#########################
# ContactMessage Model

# A message sent through the portal's contact form, by a logged-in member
# or a guest. Admin answers are stored as ContactMessageResponse rows; the
# member's follow-ups (and admin "direct" replies shown inside the member's
# thread) are ContactMessageReply rows.


class ContactMessage(models.Model):
    STATUS_UNREAD = "unread"
    STATUS_READ = "read"
    STATUS_REPLIED = "replied"
    STATUS_CLOSED = "closed"
    STATUS_CHOICES = [
        (STATUS_UNREAD, "ยังไม่อ่าน"),
        (STATUS_READ, "อ่านแล้ว"),
        (STATUS_REPLIED, "ตอบกลับแล้ว"),
        (STATUS_CLOSED, "ปิดแล้ว"),
    ]
    STATUSES = tuple(code for code, _ in STATUS_CHOICES)

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="contact_messages",
    )
    name = models.CharField(max_length=255)
    email = models.EmailField()
    phone = models.CharField(max_length=50, blank=True)
    subject = models.CharField(max_length=255)
    message = models.TextField()
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=STATUS_UNREAD)
    admin_response = models.BooleanField(default=False)
    read_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    read_at = models.DateTimeField(null=True, blank=True)
    replied_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    replied_at = models.DateTimeField(null=True, blank=True)
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "contact_messages"
        ordering = ["-created_at"]
        indexes = [models.Index(fields=["status", "created_at"], name="contact_status_idx")]

    def __str__(self):
        return f"{self.subject} ({self.email}, {self.status})"

    @property
    def is_guest(self):
        return self.user_id is None


class ContactMessageResponse(models.Model):
    message = models.ForeignKey(
        ContactMessage, on_delete=models.CASCADE, related_name="responses"
    )
    admin = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, related_name="+"
    )
    response_text = models.TextField()
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = "contact_message_responses"
        ordering = ["created_at", "id"]


class ContactMessageReply(models.Model):
    message = models.ForeignKey(ContactMessage, on_delete=models.CASCADE, related_name="replies")
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, related_name="+"
    )
    reply_text = models.TextField()
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = "contact_message_replies"
        ordering = ["created_at", "id"]
