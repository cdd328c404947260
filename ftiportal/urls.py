###################################################################################
# URL configuration for the FTI member portal.
#
# Every portal endpoint lives under /api/ and answers with the JSON envelope
# from utils.api. The Django admin and TinyMCE are mounted alongside.
###################################################################################


from django.contrib import admin
from django.urls import include, path

from activity import views as activity_views
from utils import health
from utils import views as utils_views

urlpatterns = [
    path("admin/", admin.site.urls),
    path("tinymce/", include("tinymce.urls")),
    path("api/ready", health.readiness_check, name="readiness_check"),
    path("api/auth/", include("members.urls")),
    path("api/membership/", include("membership.urls")),
    path("api/companies/", include("companies.urls")),
    path("api/address-updates/", include("address_updates.urls")),
    path("api/contact/", include("contact.urls")),
    path("api/notifications/", include("notifications.urls")),
    path("api/activity/", include("activity.urls")),
    path(
        "api/dashboard/operation-status",
        activity_views.operation_status,
        name="operation_status",
    ),
    path("api/uploads", utils_views.upload_documents, name="upload_documents"),
]
