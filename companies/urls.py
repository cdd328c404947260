from django.urls import path

from . import views

app_name = "companies"

urlpatterns = [
    path("verify", views.submit_verification, name="submit_verification"),
    path("mine", views.my_companies, name="my_companies"),
    path("approved", views.approved_companies, name="approved_companies"),
    path("admin/verifications", views.admin_verifications, name="admin_verifications"),
    path(
        "admin/verifications/<int:pk>/review",
        views.admin_review_verification,
        name="admin_review_verification",
    ),
]
