from typing import override

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin
from import_export.admin import ImportExportModelAdmin

from core.admin_resources import CandidateResource, PollingUnitResource
from core.models import (
    AuditLog,
    Candidate,
    LiveTally,
    PollingUnit,
    SystemConfig,
    UnitSubmission,
    User,
    VoteResult,
)


class _ReadOnlyAdmin(admin.ModelAdmin):
    @override
    def has_add_permission(self, request) -> bool:
        return False

    @override
    def has_change_permission(self, request, obj=None) -> bool:
        return False

    @override
    def has_delete_permission(self, request, obj=None) -> bool:
        return False


@admin.register(Candidate)
class CandidateAdmin(ImportExportModelAdmin):
    resource_classes = [CandidateResource]
    list_display = ("number", "name", "party_name", "theme_color")
    search_fields = ("name", "party_name")
    ordering = ("number",)


@admin.register(PollingUnit)
class PollingUnitAdmin(ImportExportModelAdmin):
    resource_classes = [PollingUnitResource]
    list_display = ("name", "grade", "total_eligible", "ballots_issued")
    list_filter = ("grade",)
    search_fields = ("name",)


@admin.register(User)
class TallyUserAdmin(UserAdmin):
    list_display = ("username", "display_name", "role", "polling_unit", "last_seen", "is_active")
    list_filter = ("role", "is_active")
    fieldsets = (
        *UserAdmin.fieldsets,
        ("Election", {"fields": ("role", "display_name", "polling_unit", "last_seen")}),
    )
    add_fieldsets = (
        *UserAdmin.add_fieldsets,
        ("Election", {"fields": ("role", "display_name", "polling_unit")}),
    )
    readonly_fields = ("last_seen",)


@admin.register(SystemConfig)
class SystemConfigAdmin(admin.ModelAdmin):
    list_display = ("election_title", "school_name", "public_view_enabled", "updated_at")

    @override
    def has_add_permission(self, request) -> bool:
        return not SystemConfig.objects.exists()

    @override
    def has_delete_permission(self, request, obj=None) -> bool:
        return False


@admin.register(LiveTally)
class LiveTallyAdmin(_ReadOnlyAdmin):
    list_display = ("polling_unit", "tally_type", "candidate", "count", "updated_at")
    list_filter = ("tally_type", "polling_unit__grade")


@admin.register(UnitSubmission)
class UnitSubmissionAdmin(_ReadOnlyAdmin):
    list_display = ("polling_unit", "round", "total_signatures", "total_no_vote", "total_void_ballots", "submitted_by", "created_at")
    list_filter = ("polling_unit__grade",)


@admin.register(VoteResult)
class VoteResultAdmin(_ReadOnlyAdmin):
    list_display = ("polling_unit", "round", "candidate", "vote_count", "submitted_by")
    list_filter = ("round",)


@admin.register(AuditLog)
class AuditLogAdmin(_ReadOnlyAdmin):
    list_display = ("created_at", "action", "polling_unit", "round", "performed_by")
    list_filter = ("action",)
    search_fields = ("polling_unit", "details", "reason")
