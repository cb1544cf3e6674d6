# services/licensing-service/src/apps/core/api/serializers/license_serializers.py
"""
License Serializers

Catalog, ledger and license shop representations.
"""

from django.utils import timezone
from rest_framework import serializers

from apps.core.models import LicenseType, UserLicense


class LicenseTypeSerializer(serializers.ModelSerializer):
    """Catalog entry."""

    category_display = serializers.CharField(source='get_category_display', read_only=True)
    is_permanent = serializers.BooleanField(read_only=True)
    prerequisites = serializers.ListField(child=serializers.CharField(), read_only=True)

    class Meta:
        model = LicenseType
        fields = [
            'id',
            'code',
            'name',
            'description',
            'category',
            'category_display',
            'base_exam_cost',
            'exam_duration_minutes',
            'passing_score',
            'required_aircraft_category',
            'required_aircraft_type',
            'validity_game_days',
            'base_renewal_cost',
            'is_permanent',
            'prerequisites',
            'display_order',
        ]
        read_only_fields = fields


class UserLicenseSerializer(serializers.ModelSerializer):
    """Ledger entry with its license type summary."""

    license_code = serializers.CharField(source='license_type.code', read_only=True)
    license_name = serializers.CharField(source='license_type.name', read_only=True)
    is_currently_valid = serializers.SerializerMethodField()

    class Meta:
        model = UserLicense
        fields = [
            'id',
            'license_type',
            'license_code',
            'license_name',
            'earned_at',
            'expires_at',
            'last_renewed_at',
            'renewal_count',
            'is_valid',
            'is_currently_valid',
            'is_revoked',
            'revocation_reason',
            'revoked_at',
            'exam_score',
            'exam_attempts',
            'total_paid',
            'passed_exam',
        ]
        read_only_fields = fields

    def get_is_currently_valid(self, obj) -> bool:
        return obj.is_currently_valid(self.context.get('now') or timezone.now())


class LicenseShopItemSerializer(serializers.Serializer):
    """One catalog row of the license shop."""

    license_type = LicenseTypeSerializer(read_only=True)
    is_owned = serializers.BooleanField()
    expires_at = serializers.DateTimeField(allow_null=True)
    can_take_exam = serializers.BooleanField()
    has_prerequisites = serializers.BooleanField()
    missing_prerequisites = serializers.ListField(child=serializers.CharField())
    is_on_cooldown = serializers.BooleanField()
    cooldown_ends_at = serializers.DateTimeField(allow_null=True)
    exam_cost = serializers.DecimalField(max_digits=14, decimal_places=2)
    renewal_cost = serializers.DecimalField(max_digits=14, decimal_places=2, allow_null=True)
    can_renew = serializers.BooleanField()


class LicenseRenewalSerializer(serializers.Serializer):
    """Result of a paid renewal."""

    license = UserLicenseSerializer(read_only=True)
    cost = serializers.DecimalField(max_digits=14, decimal_places=2)


class LicenseCheckSerializer(serializers.Serializer):
    license_code = serializers.CharField()
    has_license = serializers.BooleanField()
