from django.urls import path

from . import views, views_admin

app_name = "membership"

urlpatterns = [
    path("check-tax-id", views.check_tax_id, name="check_tax_id"),
    path("check-id-card", views.check_id_card, name="check_id_card"),
    path("submit/<str:membership_type>", views.submit, name="submit"),
    path("applications", views.my_applications, name="my_applications"),
    path("applications/<int:pk>", views.my_application_detail, name="my_application_detail"),
    path(
        "applications/<int:pk>/documents",
        views.update_documents,
        name="update_documents",
    ),
    path("drafts", views.draft_list, name="draft_list"),
    path("drafts/<int:pk>", views.draft_detail, name="draft_detail"),
    path("rejections", views.rejection_list, name="rejection_list"),
    path("rejections/<int:pk>", views.rejection_detail, name="rejection_detail"),
    path("rejections/<int:pk>/messages", views.rejection_message, name="rejection_message"),
    path("rejections/<int:pk>/resubmit", views.rejection_resubmit, name="rejection_resubmit"),
    path("rejections/<int:pk>/cancel", views.rejection_cancel, name="rejection_cancel"),
    # Administrators
    path("admin/applications", views_admin.application_list, name="admin_application_list"),
    path(
        "admin/applications/<int:pk>",
        views_admin.application_detail,
        name="admin_application_detail",
    ),
    path("admin/applications/<int:pk>/approve", views_admin.approve, name="admin_approve"),
    path("admin/applications/<int:pk>/reject", views_admin.reject, name="admin_reject"),
    path("admin/applications/<int:pk>/note", views_admin.save_note, name="admin_save_note"),
    path(
        "admin/applications/<int:pk>/update",
        views_admin.update_section,
        name="admin_update_section",
    ),
    path(
        "admin/applications/<int:pk>/switch-type",
        views_admin.switch_type,
        name="admin_switch_type",
    ),
    path(
        "admin/applications/<int:pk>/connect-member-code",
        views_admin.connect_member_code,
        name="admin_connect_member_code",
    ),
    path("admin/analytics", views_admin.analytics, name="admin_analytics"),
    path(
        "admin/rejections/<int:pk>",
        views_admin.rejection_detail,
        name="admin_rejection_detail",
    ),
    path(
        "admin/rejections/<int:pk>/messages",
        views_admin.rejection_message,
        name="admin_rejection_message",
    ),
]
