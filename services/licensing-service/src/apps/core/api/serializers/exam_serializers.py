# services/licensing-service/src/apps/core/api/serializers/exam_serializers.py
"""
Exam Serializers

Exam representations, scheduling and telemetry input validation.
"""

from rest_framework import serializers

from apps.core.models import (
    ExamCheckpoint,
    ExamLanding,
    ExamManeuver,
    ExamViolation,
    LandingType,
    LicenseExam,
    ManeuverResult,
    ViolationType,
)


# =============================================================================
# OUTPUT
# =============================================================================

class ExamManeuverSerializer(serializers.ModelSerializer):
    class Meta:
        model = ExamManeuver
        exclude = ['exam']


class ExamCheckpointSerializer(serializers.ModelSerializer):
    class Meta:
        model = ExamCheckpoint
        exclude = ['exam']


class ExamLandingSerializer(serializers.ModelSerializer):
    class Meta:
        model = ExamLanding
        exclude = ['exam', 'idempotency_key']


class ExamViolationSerializer(serializers.ModelSerializer):
    violation_type_display = serializers.CharField(
        source='get_violation_type_display', read_only=True
    )

    class Meta:
        model = ExamViolation
        exclude = ['exam', 'idempotency_key']


class ExamListSerializer(serializers.ModelSerializer):
    """Serializer for exam history (minimal fields)."""

    license_code = serializers.CharField(source='license_type.code', read_only=True)
    status_display = serializers.CharField(source='get_status_display', read_only=True)

    class Meta:
        model = LicenseExam
        fields = [
            'id',
            'license_code',
            'status',
            'status_display',
            'attempt_number',
            'scheduled_at',
            'started_at',
            'completed_at',
            'departure_icao',
            'score',
            'passing_score',
            'fee_paid',
            'eligible_for_retake_at',
        ]
        read_only_fields = fields


class ExamDetailSerializer(serializers.ModelSerializer):
    """Serializer for exam detail view (all fields and children)."""

    license_code = serializers.CharField(source='license_type.code', read_only=True)
    license_name = serializers.CharField(source='license_type.name', read_only=True)
    status_display = serializers.CharField(source='get_status_display', read_only=True)

    maneuvers = ExamManeuverSerializer(many=True, read_only=True)
    checkpoints = ExamCheckpointSerializer(many=True, read_only=True)
    landings = ExamLandingSerializer(many=True, read_only=True)
    violations = ExamViolationSerializer(many=True, read_only=True)

    class Meta:
        model = LicenseExam
        fields = '__all__'
        read_only_fields = [
            'id',
            'player_world',
            'license_type',
            'status',
            'scheduled_at',
            'started_at',
            'completed_at',
            'score',
            'failure_reason',
            'examiner_notes',
            'attempt_number',
            'fee_paid',
            'eligible_for_retake_at',
        ]


class ExamResultSerializer(serializers.Serializer):
    """Outcome of completing an exam."""

    exam = ExamDetailSerializer(read_only=True)
    score = serializers.IntegerField()
    passed = serializers.BooleanField()
    license_id = serializers.UUIDField(source='license.id', allow_null=True, default=None)


# =============================================================================
# INPUT
# =============================================================================

class ExamScheduleSerializer(serializers.Serializer):
    world_id = serializers.UUIDField()
    license_code = serializers.CharField(max_length=30)
    departure_icao = serializers.CharField(max_length=10)

    def validate_license_code(self, value):
        return value.strip().upper()

    def validate_departure_icao(self, value):
        return value.strip().upper()


class ExamStartSerializer(serializers.Serializer):
    aircraft_used = serializers.CharField(max_length=100)


class ViolationInputSerializer(serializers.Serializer):
    violation_type = serializers.ChoiceField(choices=ViolationType.choices)
    value = serializers.FloatField()
    threshold = serializers.FloatField()
    latitude = serializers.FloatField(required=False, default=0.0)
    longitude = serializers.FloatField(required=False, default=0.0)
    altitude_ft = serializers.IntegerField(required=False, allow_null=True, default=None)
    idempotency_key = serializers.CharField(max_length=64, required=False, allow_null=True, default=None)


class LandingInputSerializer(serializers.Serializer):
    airport_icao = serializers.CharField(max_length=10)
    vertical_speed_fpm = serializers.FloatField()
    centerline_deviation_ft = serializers.FloatField()
    touchdown_zone_distance_ft = serializers.FloatField(min_value=0)
    gear_down = serializers.BooleanField(default=True)
    landing_type = serializers.ChoiceField(choices=LandingType.choices, default=LandingType.FULL_STOP)
    ground_speed_kts = serializers.FloatField(required=False, allow_null=True, default=None)
    pitch_deg = serializers.FloatField(required=False, allow_null=True, default=None)
    bank_deg = serializers.FloatField(required=False, allow_null=True, default=None)
    runway_used = serializers.CharField(max_length=10, required=False, allow_null=True, default=None)
    latitude = serializers.FloatField(required=False, default=0.0)
    longitude = serializers.FloatField(required=False, default=0.0)
    altitude_ft = serializers.IntegerField(required=False, allow_null=True, default=None)
    idempotency_key = serializers.CharField(max_length=64, required=False, allow_null=True, default=None)


class CheckpointReachSerializer(serializers.Serializer):
    altitude_ft = serializers.IntegerField()
    speed_kts = serializers.IntegerField(min_value=0)


class ManeuverResultInputSerializer(serializers.Serializer):
    result = serializers.ChoiceField(choices=[ManeuverResult.PASS, ManeuverResult.FAIL])
    points_awarded = serializers.IntegerField(min_value=0)
    altitude_deviation_ft = serializers.IntegerField(required=False, allow_null=True, default=None)
    heading_deviation_deg = serializers.IntegerField(required=False, allow_null=True, default=None)
    speed_deviation_kts = serializers.IntegerField(required=False, allow_null=True, default=None)
    notes = serializers.CharField(required=False, allow_null=True, allow_blank=True, default=None)


class ExamHistoryQuerySerializer(serializers.Serializer):
    limit = serializers.IntegerField(required=False, min_value=1, max_value=100)
