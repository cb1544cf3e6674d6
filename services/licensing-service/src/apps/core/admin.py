from django.contrib import admin, messages

from .models import (
    Airport,
    ExamCheckpoint,
    ExamLanding,
    ExamManeuver,
    ExamViolation,
    LicenseExam,
    LicenseType,
    PlayerWorld,
    UserLicense,
    World,
)
from .services import LicenseService


@admin.register(World)
class WorldAdmin(admin.ModelAdmin):
    list_display = ['name', 'slug', 'difficulty', 'license_cost_multiplier', 'is_active']
    list_filter = ['difficulty', 'is_active']
    search_fields = ['name', 'slug']


@admin.register(PlayerWorld)
class PlayerWorldAdmin(admin.ModelAdmin):
    list_display = ['user_id', 'world', 'balance', 'is_active', 'joined_at']
    list_filter = ['world', 'is_active']
    search_fields = ['user_id']


@admin.register(Airport)
class AirportAdmin(admin.ModelAdmin):
    list_display = ['ident', 'name', 'type', 'latitude', 'longitude', 'country']
    list_filter = ['type', 'country']
    search_fields = ['ident', 'name']


@admin.register(LicenseType)
class LicenseTypeAdmin(admin.ModelAdmin):
    list_display = ['code', 'name', 'category', 'base_exam_cost', 'passing_score', 'validity_game_days', 'is_active']
    list_filter = ['category', 'is_active']
    search_fields = ['code', 'name']
    ordering = ['display_order', 'name']


@admin.register(UserLicense)
class UserLicenseAdmin(admin.ModelAdmin):
    list_display = ['license_type', 'player_world', 'earned_at', 'expires_at', 'is_valid', 'is_revoked']
    list_filter = ['license_type', 'is_valid', 'is_revoked']
    search_fields = ['player_world__user_id', 'license_type__code']
    ordering = ['-earned_at']
    actions = ['revoke_licenses']

    @admin.action(description="Revoke selected licenses")
    def revoke_licenses(self, request, queryset):
        service = LicenseService()
        for user_license in queryset:
            service.revoke_license(user_license.id, f"Revoked by {request.user}")
        self.message_user(request, f"Revoked {queryset.count()} licenses", messages.SUCCESS)


class ExamManeuverInline(admin.TabularInline):
    model = ExamManeuver
    extra = 0


class ExamCheckpointInline(admin.TabularInline):
    model = ExamCheckpoint
    extra = 0


class ExamLandingInline(admin.TabularInline):
    model = ExamLanding
    extra = 0


class ExamViolationInline(admin.TabularInline):
    model = ExamViolation
    extra = 0


@admin.register(LicenseExam)
class LicenseExamAdmin(admin.ModelAdmin):
    list_display = ['license_type', 'player_world', 'attempt_number', 'status', 'score', 'scheduled_at']
    list_filter = ['status', 'license_type']
    search_fields = ['player_world__user_id', 'departure_icao']
    ordering = ['-scheduled_at']
    inlines = [ExamManeuverInline, ExamCheckpointInline, ExamLandingInline, ExamViolationInline]
