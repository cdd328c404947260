from django.contrib import admin
from django.contrib.auth.admin import UserAdmin
from import_export.admin import ImportExportModelAdmin
from reversion.admin import VersionAdmin

from utils.admin_helpers import AdminHelperMixin

from .models import Member

#########################
# MemberAdmin Class

# Portal accounts with version history (django-reversion) and CSV
# import/export (django-import-export) on top of Django's UserAdmin.

# fieldsets: UserAdmin's sections plus a "Portal" section for role, phone
#   and admin level


@admin.register(Member)
class MemberAdmin(AdminHelperMixin, ImportExportModelAdmin, VersionAdmin, UserAdmin):
    list_display = ("username", "email", "first_name", "last_name", "role", "admin_level", "is_active")
    list_filter = ("role", "admin_level", "is_staff", "is_active")
    search_fields = ("username", "email", "first_name", "last_name", "phone")
    fieldsets = UserAdmin.fieldsets + (
        ("Portal", {"fields": ("role", "phone", "admin_level")}),
    )
    admin_helper_message = (
        "Role changes to 'member' normally happen automatically when an application "
        "is connected to a member code or an existing-member claim is approved."
    )
