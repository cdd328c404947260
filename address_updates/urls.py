from django.urls import path

from . import views

app_name = "address_updates"

urlpatterns = [
    path("request", views.request_update, name="request"),
    path("mine", views.my_requests, name="my_requests"),
    path("admin", views.admin_list, name="admin_list"),
    path("admin/approve", views.admin_approve, name="admin_approve"),
    path("admin/reject", views.admin_reject, name="admin_reject"),
]
