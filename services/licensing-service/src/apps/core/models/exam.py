# services/licensing-service/src/apps/core/models/exam.py
"""
License Exam Model

One attempt at earning a license type: scheduled with a fee and a
generated route, flown while telemetry is recorded, then scored.
"""

import uuid
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Optional

from django.db import models
from django.db.models import Q

from .license import AircraftCategory


class ExamStatus(models.TextChoices):
    """Exam lifecycle states."""
    SCHEDULED = 'scheduled', 'Scheduled'
    IN_PROGRESS = 'in_progress', 'In Progress'
    PASSED = 'passed', 'Passed'
    FAILED = 'failed', 'Failed'
    ABANDONED = 'abandoned', 'Abandoned'
    EXPIRED = 'expired', 'Expired'


ACTIVE_EXAM_STATUSES = (ExamStatus.SCHEDULED, ExamStatus.IN_PROGRESS)

# Legal status moves; anything missing here is a conflict
EXAM_TRANSITIONS = {
    ExamStatus.SCHEDULED: {ExamStatus.IN_PROGRESS, ExamStatus.ABANDONED, ExamStatus.EXPIRED},
    ExamStatus.IN_PROGRESS: {ExamStatus.PASSED, ExamStatus.FAILED, ExamStatus.ABANDONED},
}


class LicenseExamQuerySet(models.QuerySet):
    """Exam history queries."""

    def for_license(self, player_world, license_type):
        return self.filter(player_world=player_world, license_type=license_type)

    def active(self):
        return self.filter(status__in=ACTIVE_EXAM_STATUSES)

    def last_failed(self) -> Optional['LicenseExam']:
        """Most recently completed Failed exam."""
        return self.filter(status=ExamStatus.FAILED).order_by('-completed_at').first()

    def latest_attempt(self) -> Optional['LicenseExam']:
        return self.order_by('-attempt_number').first()


class LicenseExam(models.Model):
    """
    License exam attempt.

    Owns its maneuvers, checkpoints, landings and violations. Exams are
    kept as history and never deleted in normal operation.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    player_world = models.ForeignKey(
        'core.PlayerWorld',
        on_delete=models.CASCADE,
        related_name='exams'
    )
    license_type = models.ForeignKey(
        'core.LicenseType',
        on_delete=models.PROTECT,
        related_name='+'
    )

    status = models.CharField(
        max_length=20,
        choices=ExamStatus.choices,
        default=ExamStatus.SCHEDULED,
        db_index=True
    )

    # Timing
    scheduled_at = models.DateTimeField()
    started_at = models.DateTimeField(blank=True, null=True)
    completed_at = models.DateTimeField(blank=True, null=True)
    time_limit_minutes = models.PositiveIntegerField()

    # Requirements
    required_aircraft_category = models.CharField(
        max_length=20,
        choices=AircraftCategory.choices,
        blank=True,
        null=True
    )
    required_aircraft_type = models.CharField(max_length=50, blank=True, null=True)

    # Route: ordered [{name, latitude, longitude, isAirport}]
    departure_icao = models.CharField(max_length=10)
    route = models.JSONField(default=list, blank=True)
    assigned_altitude_ft = models.IntegerField(blank=True, null=True)

    # Result
    score = models.PositiveSmallIntegerField(default=0)
    passing_score = models.PositiveSmallIntegerField(default=70)
    failure_reason = models.CharField(max_length=500, blank=True, null=True)
    examiner_notes = models.TextField(blank=True, null=True)

    # Attempt and fees
    attempt_number = models.PositiveIntegerField(default=1)
    fee_paid = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    eligible_for_retake_at = models.DateTimeField(blank=True, null=True)

    # Flight
    flight_time_minutes = models.IntegerField(blank=True, null=True)
    distance_flown_nm = models.FloatField(blank=True, null=True)
    aircraft_used = models.CharField(max_length=100, blank=True, null=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = LicenseExamQuerySet.as_manager()

    class Meta:
        db_table = 'license_exams'
        ordering = ['-scheduled_at']
        indexes = [
            models.Index(fields=['player_world', 'license_type', 'status']),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=['player_world', 'license_type'],
                condition=Q(status__in=ACTIVE_EXAM_STATUSES),
                name='one_active_exam_per_license'
            ),
            models.UniqueConstraint(
                fields=['player_world', 'license_type', 'attempt_number'],
                name='unique_exam_attempt_number'
            ),
        ]

    def __str__(self):
        return f"{self.license_type_id} attempt {self.attempt_number} ({self.status})"

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_EXAM_STATUSES

    @property
    def is_in_progress(self) -> bool:
        return self.status == ExamStatus.IN_PROGRESS

    def can_transition_to(self, target: str) -> bool:
        return target in EXAM_TRANSITIONS.get(self.status, set())

    def start_deadline(self, timeout_hours: int) -> datetime:
        return self.scheduled_at + timedelta(hours=timeout_hours)

    def start(self, aircraft_used: str, now: datetime) -> None:
        self.status = ExamStatus.IN_PROGRESS
        self.started_at = now
        self.aircraft_used = aircraft_used

    def expire(self, now: datetime) -> None:
        self.status = ExamStatus.EXPIRED
        self.completed_at = now

    def abandon(self, now: datetime) -> None:
        self.status = ExamStatus.ABANDONED
        self.completed_at = now
        self.failure_reason = 'Abandoned by player'

    def fail(self, reason: str, cooldown: timedelta, now: datetime, score: int = 0) -> None:
        self.status = ExamStatus.FAILED
        self.score = score
        self.failure_reason = reason
        self.completed_at = now
        self.eligible_for_retake_at = now + cooldown

    def mark_passed(self, score: int, now: datetime) -> None:
        self.status = ExamStatus.PASSED
        self.score = score
        self.completed_at = now
        self.eligible_for_retake_at = None
