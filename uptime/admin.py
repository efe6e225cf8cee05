"""
Django Admin configuration for uptime models.
"""
from django.contrib import admin

from .models import ProbeRecord


@admin.register(ProbeRecord)
class ProbeRecordAdmin(admin.ModelAdmin):
    """Admin for probe records (read-only)."""

    list_display = [
        "timestamp",
        "up",
        "response_time_ms",
        "status_code",
        "consecutive_failures",
    ]
    list_filter = ["up"]
    search_fields = ["error_message"]
    date_hierarchy = "timestamp"
    ordering = ["-timestamp", "-id"]

    # History is append-only
    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
