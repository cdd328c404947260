from django.contrib import admin

from utils.admin_helpers import AdminHelperMixin

from .models import Notification


@admin.register(Notification)
class NotificationAdmin(AdminHelperMixin, admin.ModelAdmin):
    list_display = ("user", "type", "message_short", "created_at", "read", "dismissed")
    list_filter = ("type", "read", "dismissed")
    search_fields = ("user__username", "message", "member_code")
    list_select_related = ("user",)
    list_per_page = 50
    date_hierarchy = "created_at"

    @admin.display(description="Message")
    def message_short(self, obj):
        if obj.message and len(obj.message) > 100:
            return obj.message[:100] + "..."
        return obj.message

    admin_helper_message = (
        "Notifications are created by approval, rejection, address-update and "
        "contact-reply workflows. Members see undismissed items in their dashboard."
    )
