# services/licensing-service/src/apps/core/services/tracking_service.py
"""
Exam Tracking Service

Records in-flight telemetry against an exam: violations, landings,
checkpoint arrivals and maneuver grades.

Telemetry can arrive just before or after the exam changes state, so
calls against an exam that is not InProgress are ignored rather than
treated as errors. Every call returns a TrackingResult saying which.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional, Tuple
from uuid import UUID

from django.db import transaction
from django.utils import timezone

from apps.core.events import EventPublisher, event_publisher
from apps.core.models import (
    ExamLanding,
    ExamViolation,
    LandingType,
    LicenseExam,
    ManeuverResult,
    ViolationType,
)
from .exam_service import ExamService
from .scoring import (
    LANDING_MAX_POINTS,
    checkpoint_points,
    describe_violation,
    is_critical_violation,
    landing_notes,
    landing_points,
    violation_points,
)

logger = logging.getLogger(__name__)


class TrackingStatus:
    RECORDED = 'recorded'
    IGNORED = 'ignored'
    DUPLICATE = 'duplicate'


@dataclass
class TrackingResult:
    """Outcome of a telemetry call."""
    status: str
    record: Optional[Any] = None
    reason: Optional[str] = None
    exam_failed: bool = False

    @property
    def is_recorded(self) -> bool:
        return self.status == TrackingStatus.RECORDED

    @classmethod
    def ignored(cls, reason: str) -> 'TrackingResult':
        return cls(status=TrackingStatus.IGNORED, reason=reason)

    @classmethod
    def duplicate(cls, record: Any) -> 'TrackingResult':
        return cls(status=TrackingStatus.DUPLICATE, record=record)


NOT_IN_PROGRESS = "Exam is not in progress"


class ExamTrackingService:
    """
    Service for telemetry recorded during an exam.
    """

    def __init__(
        self,
        exam_service: Optional[ExamService] = None,
        publisher: Optional[EventPublisher] = None
    ):
        self.events = publisher or event_publisher
        self.exam_service = exam_service or ExamService(publisher=self.events)

    def record_violation(
        self,
        exam_id: UUID,
        violation_type: str,
        value: float,
        threshold: float,
        latitude: float = 0.0,
        longitude: float = 0.0,
        altitude_ft: Optional[int] = None,
        idempotency_key: Optional[str] = None,
        now: Optional[datetime] = None
    ) -> TrackingResult:
        """
        Record a violation and deduct its points.

        A critical violation fails the exam; the Failed status is saved
        before the violation row in the same transaction.

        Args:
            exam_id: Exam being flown
            violation_type: ViolationType value
            value: Measured value
            threshold: Limit that was exceeded
            latitude, longitude, altitude_ft: Position at the time
            idempotency_key: Optional client token; a repeat is reported as duplicate
            now: Current time
        """
        now = now or timezone.now()

        with transaction.atomic():
            exam = self.exam_service.lock_exam(exam_id)
            if not exam.is_in_progress:
                return TrackingResult.ignored(NOT_IN_PROGRESS)

            if idempotency_key:
                existing = exam.violations.filter(idempotency_key=idempotency_key).first()
                if existing is not None:
                    return TrackingResult.duplicate(existing)

            violation, failed = self._add_violation(
                exam, violation_type, value, threshold,
                latitude, longitude, altitude_ft, idempotency_key, now
            )

        if failed:
            self.events.exam_finished(exam)
        return TrackingResult(status=TrackingStatus.RECORDED, record=violation, exam_failed=failed)

    def record_landing(
        self,
        exam_id: UUID,
        airport_icao: str,
        vertical_speed_fpm: float,
        centerline_deviation_ft: float,
        touchdown_zone_distance_ft: float,
        gear_down: bool = True,
        landing_type: str = LandingType.FULL_STOP,
        ground_speed_kts: Optional[float] = None,
        pitch_deg: Optional[float] = None,
        bank_deg: Optional[float] = None,
        runway_used: Optional[str] = None,
        latitude: float = 0.0,
        longitude: float = 0.0,
        altitude_ft: Optional[int] = None,
        idempotency_key: Optional[str] = None,
        now: Optional[datetime] = None
    ) -> TrackingResult:
        """
        Score and store a touchdown.

        A gear-up touchdown also records a GearUpLanding violation at the
        touchdown position, which fails the exam.
        """
        now = now or timezone.now()
        failed = False

        with transaction.atomic():
            exam = self.exam_service.lock_exam(exam_id)
            if not exam.is_in_progress:
                return TrackingResult.ignored(NOT_IN_PROGRESS)

            if idempotency_key:
                existing = exam.landings.filter(idempotency_key=idempotency_key).first()
                if existing is not None:
                    return TrackingResult.duplicate(existing)

            landing = ExamLanding.objects.create(
                exam=exam,
                order=exam.landings.count() + 1,
                airport_icao=airport_icao.upper(),
                landing_type=landing_type,
                vertical_speed_fpm=vertical_speed_fpm,
                centerline_deviation_ft=centerline_deviation_ft,
                touchdown_zone_distance_ft=touchdown_zone_distance_ft,
                ground_speed_kts=ground_speed_kts,
                pitch_deg=pitch_deg,
                bank_deg=bank_deg,
                gear_down=gear_down,
                runway_used=runway_used,
                latitude=latitude,
                longitude=longitude,
                altitude_ft=altitude_ft,
                points_awarded=landing_points(
                    vertical_speed_fpm, centerline_deviation_ft, touchdown_zone_distance_ft
                ),
                max_points=LANDING_MAX_POINTS,
                landed_at=now,
                notes=landing_notes(vertical_speed_fpm, centerline_deviation_ft, gear_down),
                idempotency_key=idempotency_key,
            )

            if not gear_down:
                _, failed = self._add_violation(
                    exam, ViolationType.GEAR_UP_LANDING, 0.0, 0.0,
                    latitude, longitude, altitude_ft, None, now
                )

        logger.info(
            f"Landing {landing.order} at {landing.airport_icao} recorded for exam {exam_id}: "
            f"{vertical_speed_fpm:.0f} fpm, {landing.points_awarded} points",
            extra={'exam_id': str(exam_id)}
        )
        if failed:
            self.events.exam_finished(exam)
        return TrackingResult(status=TrackingStatus.RECORDED, record=landing, exam_failed=failed)

    def reach_checkpoint(
        self,
        exam_id: UUID,
        order: int,
        altitude_ft: int,
        speed_kts: int,
        now: Optional[datetime] = None
    ) -> TrackingResult:
        """Award a checkpoint once; later arrivals change nothing."""
        now = now or timezone.now()

        with transaction.atomic():
            exam = self.exam_service.lock_exam(exam_id)
            if not exam.is_in_progress:
                return TrackingResult.ignored(NOT_IN_PROGRESS)

            checkpoint = exam.checkpoints.select_for_update().filter(order=order).first()
            if checkpoint is None:
                return TrackingResult.ignored(f"Unknown checkpoint {order}")
            if checkpoint.was_reached:
                return TrackingResult.duplicate(checkpoint)

            checkpoint.was_reached = True
            checkpoint.reached_at = now
            checkpoint.altitude_at_reach = altitude_ft
            checkpoint.speed_at_reach_kts = speed_kts
            checkpoint.points_awarded = checkpoint_points(
                checkpoint.max_points, checkpoint.required_altitude_ft, altitude_ft
            )
            checkpoint.save()

        logger.debug(f"Checkpoint {order} reached on exam {exam_id}: {checkpoint.points_awarded} points")
        return TrackingResult(status=TrackingStatus.RECORDED, record=checkpoint)

    def record_maneuver_result(
        self,
        exam_id: UUID,
        order: int,
        result: str,
        points_awarded: int,
        altitude_deviation_ft: Optional[int] = None,
        heading_deviation_deg: Optional[int] = None,
        speed_deviation_kts: Optional[int] = None,
        notes: Optional[str] = None,
        now: Optional[datetime] = None
    ) -> TrackingResult:
        """
        Store the grade for a maneuver.

        Points are capped at the maneuver's maximum. A maneuver is graded
        once; repeats are reported as duplicates.
        """
        now = now or timezone.now()

        with transaction.atomic():
            exam = self.exam_service.lock_exam(exam_id)
            if not exam.is_in_progress:
                return TrackingResult.ignored(NOT_IN_PROGRESS)

            maneuver = exam.maneuvers.select_for_update().filter(order=order).first()
            if maneuver is None:
                return TrackingResult.ignored(f"Unknown maneuver {order}")
            if maneuver.result != ManeuverResult.NOT_ATTEMPTED:
                return TrackingResult.duplicate(maneuver)

            maneuver.result = result
            maneuver.points_awarded = max(0, min(points_awarded, maneuver.max_points))
            maneuver.altitude_deviation_ft = altitude_deviation_ft
            maneuver.heading_deviation_deg = heading_deviation_deg
            maneuver.speed_deviation_kts = speed_deviation_kts
            maneuver.notes = notes
            maneuver.started_at = maneuver.started_at or now
            maneuver.completed_at = now
            maneuver.save()

        return TrackingResult(status=TrackingStatus.RECORDED, record=maneuver)

    def _add_violation(
        self,
        exam: LicenseExam,
        violation_type: str,
        value: float,
        threshold: float,
        latitude: float,
        longitude: float,
        altitude_ft: Optional[int],
        idempotency_key: Optional[str],
        now: datetime
    ) -> Tuple[ExamViolation, bool]:
        critical = is_critical_violation(violation_type, value)

        if critical:
            self.exam_service.apply_failure(
                exam, f"Critical violation: {violation_type}", now
            )

        violation = ExamViolation.objects.create(
            exam=exam,
            occurred_at=now,
            violation_type=violation_type,
            value=value,
            threshold=threshold,
            points_deducted=violation_points(violation_type, value),
            caused_failure=critical,
            latitude=latitude,
            longitude=longitude,
            altitude_ft=altitude_ft,
            description=describe_violation(violation_type, value, threshold),
            idempotency_key=idempotency_key,
        )

        logger.info(
            f"Violation {violation_type} on exam {exam.id}: -{violation.points_deducted} points",
            extra={'exam_id': str(exam.id), 'critical': critical}
        )
        return violation, critical
