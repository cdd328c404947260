from typing import Optional


class AdminHelperMixin:
    """Show a short workflow hint above the admin changelist and change form.

    Set ``admin_helper_message`` on the ModelAdmin; the default admin
    templates pick it up from ``extra_context``.
    """

    admin_helper_message: Optional[str] = None

    def _with_helper(self, extra_context):
        extra_context = extra_context or {}
        if self.admin_helper_message:
            extra_context.setdefault("admin_helper_message", self.admin_helper_message)
        return extra_context

    def changelist_view(self, request, extra_context=None):
        return super().changelist_view(request, extra_context=self._with_helper(extra_context))

    def change_view(self, request, object_id, form_url="", extra_context=None):
        return super().change_view(
            request, object_id, form_url, extra_context=self._with_helper(extra_context)
        )
