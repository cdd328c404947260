from django.contrib import admin

from .models import AdminActionLog, UserLog


@admin.register(AdminActionLog)
class AdminActionLogAdmin(admin.ModelAdmin):
    list_display = ("created_at", "action_type", "target_id", "admin", "ip_address")
    list_filter = ("action_type",)
    search_fields = ("target_id", "description", "admin__username")
    readonly_fields = [f.name for f in AdminActionLog._meta.fields]

    def has_add_permission(self, request):
        return False


@admin.register(UserLog)
class UserLogAdmin(admin.ModelAdmin):
    list_display = ("created_at", "user", "action", "ip_address")
    list_filter = ("action",)
    search_fields = ("user__username", "details")
    readonly_fields = [f.name for f in UserLog._meta.fields]

    def has_add_permission(self, request):
        return False
