from django.contrib import admin
from import_export.admin import ImportExportModelAdmin
from reversion.admin import VersionAdmin

from utils.admin_helpers import AdminHelperMixin

from .models import CompanyMember, VerificationDocument


class VerificationDocumentInline(admin.TabularInline):
    model = VerificationDocument
    extra = 0
    fields = ("file_name", "file_url", "status", "reject_reason", "uploaded_at")
    readonly_fields = ("file_name", "file_url", "uploaded_at")


@admin.register(CompanyMember)
class CompanyMemberAdmin(AdminHelperMixin, ImportExportModelAdmin, VersionAdmin):
    list_display = ("member_code", "company_name", "company_type", "user", "admin_submit", "created_at")
    list_filter = ("admin_submit", "company_type")
    search_fields = ("member_code", "company_name", "tax_id", "user__email")
    list_select_related = ("user",)
    inlines = [VerificationDocumentInline]
    admin_helper_message = (
        "Claims with admin_submit 0 are waiting for review. Approve or reject them from the "
        "portal's admin screens so the member receives the email and notification."
    )
