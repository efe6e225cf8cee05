"""
URL configuration for the gracewatch project.
"""
from django.contrib import admin
from django.urls import include, path

urlpatterns = [
    path("admin/", admin.site.urls),
    path("", include("uptime.urls")),
]
