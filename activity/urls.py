from django.urls import path

from . import views

app_name = "activity"

urlpatterns = [
    path("recent", views.recent_activities, name="recent_activities"),
]
