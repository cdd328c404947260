from django.urls import path

from . import views

app_name = "notifications"

urlpatterns = [
    path("", views.notifications_list, name="notifications_list"),
    path("unread-count", views.unread_count, name="unread_count"),
    path("mark-all-read", views.mark_all_read, name="mark_all_read"),
    path("<int:pk>/read", views.mark_read, name="mark_read"),
    path("<int:pk>/dismiss", views.dismiss_notification, name="dismiss_notification"),
    path("<int:pk>/open", views.open_notification, name="open_notification"),
]
