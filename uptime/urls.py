"""
URL configuration for the uptime app.
"""
from django.urls import path

from . import views

app_name = "uptime"

urlpatterns = [
    path("", views.service_info, name="info"),
    path("stats", views.stats, name="stats"),
    path("trigger-check", views.trigger_check, name="trigger_check"),
]
