from django.contrib import admin
from import_export.admin import ImportExportModelAdmin
from reversion.admin import VersionAdmin

from utils.admin_helpers import AdminHelperMixin

from .models import ContactMessage, ContactMessageReply, ContactMessageResponse


class ContactMessageResponseInline(admin.TabularInline):
    model = ContactMessageResponse
    extra = 0
    readonly_fields = ("admin", "created_at")


class ContactMessageReplyInline(admin.TabularInline):
    model = ContactMessageReply
    extra = 0
    readonly_fields = ("user", "created_at")


#########################
# ContactMessageAdmin

# Replies typed here are not emailed; use the portal's contact inbox for that.


@admin.register(ContactMessage)
class ContactMessageAdmin(AdminHelperMixin, ImportExportModelAdmin, VersionAdmin):
    list_display = ("subject", "name", "email", "status", "user", "created_at")
    list_filter = ("status",)
    search_fields = ("subject", "name", "email", "message")
    list_select_related = ("user",)
    readonly_fields = ("ip_address", "read_by", "read_at", "replied_by", "replied_at", "created_at")
    inlines = [ContactMessageResponseInline, ContactMessageReplyInline]
    admin_helper_message = (
        "Replies added here are stored without emailing or notifying the sender."
    )
