"""Admin configuration for the carbon registry.

State-bearing fields are read-only here: transitions go through the
services so that statistics and the activity log stay consistent.
"""

from django.contrib import admin

from .models import (
    ActivityLog,
    CarbonCredit,
    CorrespondingAdjustment,
    Methodology,
    Project,
    ProjectCategory,
    ProjectVerification,
    RegistryStatistics,
    VerificationStage,
)


@admin.register(ProjectCategory)
class ProjectCategoryAdmin(admin.ModelAdmin):
    list_display = ["name", "color"]
    search_fields = ["name"]


@admin.register(Methodology)
class MethodologyAdmin(admin.ModelAdmin):
    list_display = ["name", "category"]
    list_filter = ["category"]
    search_fields = ["name", "description"]


@admin.register(Project)
class ProjectAdmin(admin.ModelAdmin):
    list_display = ["project_id", "name", "developer", "category", "status", "created_at"]
    list_filter = ["status", "category"]
    search_fields = ["project_id", "name", "developer", "location"]
    readonly_fields = ["project_id", "status", "version", "created_at", "updated_at"]
    raw_id_fields = ["created_by"]


@admin.register(VerificationStage)
class VerificationStageAdmin(admin.ModelAdmin):
    list_display = ["order", "name", "icon"]
    ordering = ["order"]


@admin.register(ProjectVerification)
class ProjectVerificationAdmin(admin.ModelAdmin):
    list_display = ["project", "current_stage", "status", "third_party_verifier", "submitted_date"]
    list_filter = ["status", "current_stage"]
    search_fields = ["project__project_id", "third_party_verifier", "verifier"]
    readonly_fields = ["status", "completed_date", "version", "submitted_date"]
    raw_id_fields = ["project", "requested_by"]


@admin.register(CarbonCredit)
class CarbonCreditAdmin(admin.ModelAdmin):
    list_display = ["serial_number", "project", "vintage", "quantity", "owner", "status"]
    list_filter = ["status", "vintage", "paris_agreement_eligible"]
    search_fields = ["serial_number", "owner", "transfer_recipient"]
    readonly_fields = [
        "serial_number",
        "quantity",
        "status",
        "retirement_date",
        "transfer_date",
        "version",
        "issuance_date",
    ]
    raw_id_fields = ["project", "issued_by"]


@admin.register(CorrespondingAdjustment)
class CorrespondingAdjustmentAdmin(admin.ModelAdmin):
    list_display = [
        "credit_serial_number",
        "adjustment_type",
        "host_country",
        "recipient_country",
        "adjustment_quantity",
        "status",
    ]
    list_filter = ["status", "adjustment_type", "host_country"]
    readonly_fields = ["credit_serial_number", "status", "version"]
    raw_id_fields = ["credit", "created_by"]


@admin.register(ActivityLog)
class ActivityLogAdmin(admin.ModelAdmin):
    list_display = ["timestamp", "action", "entity_type", "entity_id", "actor_display"]
    list_filter = ["action", "entity_type"]
    search_fields = ["entity_id", "description", "actor_display"]
    date_hierarchy = "timestamp"

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(RegistryStatistics)
class RegistryStatisticsAdmin(admin.ModelAdmin):
    list_display = ["total_projects", "verified_projects", "pending_verification", "total_credits", "last_updated"]

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
