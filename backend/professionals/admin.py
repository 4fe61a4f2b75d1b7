from django.contrib import admin
from professionals.models import Professional, PlanRequirement


@admin.register(Professional)
class ProfessionalAdmin(admin.ModelAdmin):
    """Admin panel for managing the professional directory"""

    list_display = [
        "name",
        "email",
        "is_active",
        "latitude",
        "longitude",
        "line_user_id",
        "updated_at",
    ]

    list_filter = [
        "is_active",
        "created_at",
    ]

    search_fields = [
        "name",
        "email",
        "phone",
    ]

    readonly_fields = [
        "created_at",
        "updated_at",
    ]

    ordering = ("name",)


@admin.register(PlanRequirement)
class PlanRequirementAdmin(admin.ModelAdmin):
    list_display = ("service", "plan_key", "required_labels")
    list_filter = ("service",)
