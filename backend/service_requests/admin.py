"""Tells what to show in the Django admin interface for service requests"""

from django.contrib import admin, messages

from services.matching import advance
from .models import Match, ServiceRequest


class MatchInline(admin.TabularInline):
    model = Match
    extra = 0
    can_delete = False
    fields = ('professional', 'status', 'distance_km', 'expires_at', 'responded_at', 'email_sent', 'line_sent')
    readonly_fields = fields


@admin.register(ServiceRequest)
class ServiceRequestAdmin(admin.ModelAdmin):
    """Service request admin"""
    list_display = ['id', 'client_name', 'client_email', 'status', 'plan_title', 'created_at', 'matched_at']
    list_filter = ['status', 'created_at']
    search_fields = ['client_name', 'client_email', 'address']
    readonly_fields = ['created_at', 'matched_at', 'latitude', 'longitude']
    date_hierarchy = 'created_at'
    inlines = [MatchInline]
    actions = ['restart_matching']

    @admin.action(description="Restart matching for selected pending requests")
    def restart_matching(self, request, queryset):
        offered = 0
        for service_request in queryset.filter(status=ServiceRequest.STATUS_PENDING):
            result = advance(service_request.id)
            if result.offered:
                offered += 1
        self.message_user(request, f"Offered {offered} request(s) to a new professional.", messages.SUCCESS)


@admin.register(Match)
class MatchAdmin(admin.ModelAdmin):
    list_display = ("request", "professional", "status", "distance_km", "expires_at", "responded_at")
    list_filter = ("status",)
    search_fields = ("request__id", "professional__name", "professional__email")
