from django.contrib import admin
from reversion.admin import VersionAdmin

from utils.admin_helpers import AdminHelperMixin

from .models import PendingAddressUpdate


@admin.register(PendingAddressUpdate)
class PendingAddressUpdateAdmin(AdminHelperMixin, VersionAdmin):
    list_display = ("member_code", "user", "addr_code", "addr_lang", "status", "request_date", "processed_date")
    list_filter = ("status", "addr_code", "addr_lang")
    search_fields = ("member_code", "user__email", "comp_person_code")
    list_select_related = ("user",)
    readonly_fields = ("old_address", "request_date", "processed_date", "processed_by")
    admin_helper_message = (
        "Approving here does not write to the member registry. Use the portal's "
        "address update review so the registry row is updated first."
    )
