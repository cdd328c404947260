from django.urls import path

from . import views

app_name = "contact"

urlpatterns = [
    path("", views.submit, name="submit"),
    path("mine", views.my_messages, name="my_messages"),
    path("<int:pk>/reply", views.reply, name="reply"),
    path("admin", views.admin_list, name="admin_list"),
    path("admin/<int:pk>", views.admin_detail, name="admin_detail"),
    path("admin/<int:pk>/reply", views.admin_reply, name="admin_reply"),
    path("admin/<int:pk>/direct-reply", views.admin_direct_reply, name="admin_direct_reply"),
    path("admin/<int:pk>/status", views.admin_status, name="admin_status"),
]
