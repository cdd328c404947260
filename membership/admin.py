from django.contrib import admin
from import_export.admin import ImportExportModelAdmin
from reversion.admin import VersionAdmin

from utils.admin_helpers import AdminHelperMixin

from .models import (
    ApplicationAddress,
    ApplicationDocument,
    ApplicationDraft,
    ApplicationStatusLog,
    AuthorizedSignatory,
    ContactPerson,
    MembershipApplication,
    Rejection,
    RejectionConversation,
    Representative,
)


class ApplicationAddressInline(admin.StackedInline):
    model = ApplicationAddress
    extra = 0


class ContactPersonInline(admin.TabularInline):
    model = ContactPerson
    extra = 0
    fields = ("type_contact_name", "first_name_th", "last_name_th", "first_name_en", "last_name_en", "email", "phone")


class RepresentativeInline(admin.TabularInline):
    model = Representative
    extra = 0
    fields = ("rep_order", "is_primary", "first_name_th", "last_name_th", "first_name_en", "last_name_en", "position")


class AuthorizedSignatoryInline(admin.StackedInline):
    model = AuthorizedSignatory
    extra = 0


class ApplicationDocumentInline(admin.TabularInline):
    model = ApplicationDocument
    extra = 0
    fields = ("document_type", "file_name", "file_url", "uploaded_at")
    readonly_fields = ("uploaded_at",)


class ApplicationStatusLogInline(admin.TabularInline):
    model = ApplicationStatusLog
    extra = 0
    fields = ("status", "note", "created_by", "created_at")
    readonly_fields = fields
    can_delete = False


#########################
# MembershipApplicationAdmin Class

# Read-mostly view of submitted applications with version history and CSV
# export. Approve, reject and connect-member-code go through the portal's
# admin API so that notifications, emails and admin logs are produced.


@admin.register(MembershipApplication)
class MembershipApplicationAdmin(AdminHelperMixin, ImportExportModelAdmin, VersionAdmin):
    list_display = (
        "id",
        "membership_type",
        "display_name",
        "tax_id",
        "id_card_number",
        "status",
        "member_code",
        "created_at",
    )
    list_filter = ("membership_type", "status")
    search_fields = (
        "company_name_th",
        "company_name_en",
        "tax_id",
        "id_card_number",
        "first_name_th",
        "last_name_th",
        "user__email",
    )
    list_select_related = ("user",)
    date_hierarchy = "created_at"
    readonly_fields = ("application_id", "approved_by", "approved_at", "rejected_by", "rejected_at")
    inlines = [
        ApplicationAddressInline,
        ContactPersonInline,
        RepresentativeInline,
        AuthorizedSignatoryInline,
        ApplicationDocumentInline,
        ApplicationStatusLogInline,
    ]
    admin_helper_message = (
        "Status changes made here skip the member's email and notification. "
        "Use the review screens to approve or reject applications."
    )


class RejectionConversationInline(admin.TabularInline):
    model = RejectionConversation
    extra = 0
    fields = ("sender_type", "sender", "message", "is_read", "created_at")
    readonly_fields = fields


@admin.register(Rejection)
class RejectionAdmin(AdminHelperMixin, VersionAdmin):
    list_display = ("application", "status", "rejected_at", "unread_member_count", "unread_admin_count")
    list_filter = ("status",)
    search_fields = ("application__company_name_th", "application__tax_id", "reason")
    list_select_related = ("application",)
    inlines = [RejectionConversationInline]


@admin.register(ApplicationDraft)
class ApplicationDraftAdmin(admin.ModelAdmin):
    list_display = ("user", "membership_type", "identifier", "current_step", "updated_at")
    list_filter = ("membership_type",)
    search_fields = ("identifier", "user__email")
