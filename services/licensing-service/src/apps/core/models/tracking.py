# services/licensing-service/src/apps/core/models/tracking.py
"""
Exam Tracking Models

Child records owned by a LicenseExam: the scripted maneuvers, route
checkpoints, landings and the violation audit log.
"""

import uuid

from django.db import models
from django.db.models import Q


class ManeuverType(models.TextChoices):
    TAKEOFF = 'takeoff', 'Takeoff'
    CLIMB = 'climb', 'Climb'
    CRUISE = 'cruise', 'Cruise'
    STEEP_TURN = 'steep_turn', 'Steep Turn'
    APPROACH = 'approach', 'Approach'
    LANDING = 'landing', 'Landing'


class ManeuverResult(models.TextChoices):
    NOT_ATTEMPTED = 'not_attempted', 'Not Attempted'
    PASS = 'pass', 'Pass'
    FAIL = 'fail', 'Fail'


class LandingType(models.TextChoices):
    TOUCH_AND_GO = 'touch_and_go', 'Touch and Go'
    FULL_STOP = 'full_stop', 'Full Stop'


class ViolationType(models.TextChoices):
    SPEED_EXCESS = 'speed_excess', 'Speed Excess'
    ALTITUDE_DEVIATION = 'altitude_deviation', 'Altitude Deviation'
    HEADING_DEVIATION = 'heading_deviation', 'Heading Deviation'
    GFORCE_EXCESS = 'gforce_excess', 'G-Force Excess'
    HARD_LANDING = 'hard_landing', 'Hard Landing'
    CENTERLINE_DEVIATION = 'centerline_deviation', 'Centerline Deviation'
    MISSED_CHECKPOINT = 'missed_checkpoint', 'Missed Checkpoint'
    TIME_EXCEEDED = 'time_exceeded', 'Time Exceeded'
    CRASH = 'crash', 'Crash'
    GEAR_UP_LANDING = 'gear_up_landing', 'Gear Up Landing'
    STALL = 'stall', 'Stall'
    SPIN = 'spin', 'Spin'


class ExamManeuver(models.Model):
    """
    Scripted flight task, graded by the telemetry connector.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    exam = models.ForeignKey(
        'core.LicenseExam',
        on_delete=models.CASCADE,
        related_name='maneuvers'
    )
    maneuver_type = models.CharField(max_length=20, choices=ManeuverType.choices)
    order = models.PositiveSmallIntegerField()
    is_required = models.BooleanField(default=True)

    max_points = models.PositiveSmallIntegerField()
    points_awarded = models.PositiveSmallIntegerField(default=0)
    result = models.CharField(
        max_length=20,
        choices=ManeuverResult.choices,
        default=ManeuverResult.NOT_ATTEMPTED
    )

    # Tolerances
    altitude_tolerance_ft = models.IntegerField(blank=True, null=True)
    heading_tolerance_deg = models.IntegerField(blank=True, null=True)
    speed_tolerance_kts = models.IntegerField(blank=True, null=True)

    # Actual deviations reported by the grader
    altitude_deviation_ft = models.IntegerField(blank=True, null=True)
    heading_deviation_deg = models.IntegerField(blank=True, null=True)
    speed_deviation_kts = models.IntegerField(blank=True, null=True)

    started_at = models.DateTimeField(blank=True, null=True)
    completed_at = models.DateTimeField(blank=True, null=True)
    notes = models.TextField(blank=True, null=True)

    class Meta:
        db_table = 'exam_maneuvers'
        ordering = ['order']
        constraints = [
            models.UniqueConstraint(fields=['exam', 'order'], name='unique_maneuver_order'),
        ]

    def __str__(self):
        return f"{self.order}. {self.get_maneuver_type_display()}"


class ExamCheckpoint(models.Model):
    """
    Route waypoint scored once on arrival.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    exam = models.ForeignKey(
        'core.LicenseExam',
        on_delete=models.CASCADE,
        related_name='checkpoints'
    )
    order = models.PositiveSmallIntegerField()
    name = models.CharField(max_length=255)
    latitude = models.FloatField()
    longitude = models.FloatField()
    required_altitude_ft = models.IntegerField(blank=True, null=True)
    radius_nm = models.FloatField(default=1.0)

    was_reached = models.BooleanField(default=False)
    reached_at = models.DateTimeField(blank=True, null=True)
    altitude_at_reach = models.IntegerField(blank=True, null=True)
    speed_at_reach_kts = models.IntegerField(blank=True, null=True)

    points_awarded = models.PositiveSmallIntegerField(default=0)
    max_points = models.PositiveSmallIntegerField(default=10)

    class Meta:
        db_table = 'exam_checkpoints'
        ordering = ['order']
        constraints = [
            models.UniqueConstraint(fields=['exam', 'order'], name='unique_checkpoint_order'),
        ]

    def __str__(self):
        return f"{self.order}. {self.name}"


class ExamLanding(models.Model):
    """
    Touchdown recorded during an exam. Immutable once written.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    exam = models.ForeignKey(
        'core.LicenseExam',
        on_delete=models.CASCADE,
        related_name='landings'
    )
    order = models.PositiveSmallIntegerField()
    airport_icao = models.CharField(max_length=10)
    landing_type = models.CharField(
        max_length=20,
        choices=LandingType.choices,
        default=LandingType.FULL_STOP
    )

    vertical_speed_fpm = models.FloatField()
    centerline_deviation_ft = models.FloatField()
    touchdown_zone_distance_ft = models.FloatField()
    ground_speed_kts = models.FloatField(blank=True, null=True)
    pitch_deg = models.FloatField(blank=True, null=True)
    bank_deg = models.FloatField(blank=True, null=True)
    gear_down = models.BooleanField(default=True)
    runway_used = models.CharField(max_length=10, blank=True, null=True)
    latitude = models.FloatField(default=0.0)
    longitude = models.FloatField(default=0.0)
    altitude_ft = models.IntegerField(blank=True, null=True)

    points_awarded = models.PositiveSmallIntegerField(default=0)
    max_points = models.PositiveSmallIntegerField(default=25)
    landed_at = models.DateTimeField()
    notes = models.TextField(blank=True, null=True)

    idempotency_key = models.CharField(max_length=64, blank=True, null=True)

    class Meta:
        db_table = 'exam_landings'
        ordering = ['order']
        constraints = [
            models.UniqueConstraint(
                fields=['exam', 'idempotency_key'],
                condition=Q(idempotency_key__isnull=False),
                name='unique_landing_submission'
            ),
        ]

    def __str__(self):
        return f"Landing {self.order} at {self.airport_icao}"


class ExamViolation(models.Model):
    """
    Penalised deviation from exam limits. Append-only.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    exam = models.ForeignKey(
        'core.LicenseExam',
        on_delete=models.CASCADE,
        related_name='violations'
    )
    occurred_at = models.DateTimeField()
    violation_type = models.CharField(max_length=30, choices=ViolationType.choices)
    value = models.FloatField()
    threshold = models.FloatField()
    points_deducted = models.PositiveSmallIntegerField()
    caused_failure = models.BooleanField(default=False)

    latitude = models.FloatField(default=0.0)
    longitude = models.FloatField(default=0.0)
    altitude_ft = models.IntegerField(blank=True, null=True)
    description = models.CharField(max_length=255, blank=True, null=True)

    idempotency_key = models.CharField(max_length=64, blank=True, null=True)

    class Meta:
        db_table = 'exam_violations'
        ordering = ['occurred_at']
        constraints = [
            models.UniqueConstraint(
                fields=['exam', 'idempotency_key'],
                condition=Q(idempotency_key__isnull=False),
                name='unique_violation_submission'
            ),
        ]

    def __str__(self):
        return f"{self.get_violation_type_display()} (-{self.points_deducted})"
