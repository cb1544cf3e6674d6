# services/licensing-service/src/apps/core/services/exam_service.py
"""
Exam Service

Schedules license exams behind the eligibility gate and drives the
exam state machine: start, fail, abandon and complete.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import List, Optional
from uuid import UUID

from django.db import IntegrityError, transaction
from django.db.models import Sum
from django.utils import timezone

from apps.core.conf import licensing_setting
from apps.core.events import EventPublisher, event_publisher
from apps.core.models import (
    ExamCheckpoint,
    ExamManeuver,
    ExamStatus,
    LicenseExam,
    PlayerWorld,
    UserLicense,
)
from .exam_templates import build_checkpoints, build_maneuvers, cruise_altitude_for
from .exceptions import (
    ActiveExamExistsError,
    AirportNotFoundError,
    ExamCooldownError,
    ExamExpiredError,
    ExamNotFoundError,
    ExamStateError,
    InsufficientFundsError,
    LicenseAlreadyHeldError,
    LicenseTypeNotFoundError,
    PlayerWorldNotFoundError,
    PrerequisitesNotMetError,
)
from .license_service import LicenseService
from .policy import exam_fee, failure_cooldown
from .route_generator import AirportDirectory, RouteGenerator, serialize_route
from .scoring import examiner_notes, final_score

logger = logging.getLogger(__name__)


@dataclass
class ExamResult:
    exam: LicenseExam
    score: int
    passed: bool
    license: Optional[UserLicense] = None


class ExamService:
    """
    Service for the exam lifecycle.
    """

    def __init__(
        self,
        license_service: Optional[LicenseService] = None,
        route_generator: Optional[RouteGenerator] = None,
        directory: Optional[AirportDirectory] = None,
        publisher: Optional[EventPublisher] = None
    ):
        self.events = publisher or event_publisher
        self.directory = directory or AirportDirectory()
        self.route_generator = route_generator or RouteGenerator(self.directory)
        self.license_service = license_service or LicenseService(self.events)

    # ==========================================================================
    # Scheduling
    # ==========================================================================

    def schedule_exam(
        self,
        player_world_id: UUID,
        license_code: str,
        departure_icao: str,
        now: Optional[datetime] = None
    ) -> LicenseExam:
        """
        Schedule an exam after running the eligibility gate.

        Checks run in a fixed order and the first failure is raised.
        Nothing is written until every check has passed; the fee
        deduction and the exam rows then commit together.

        Args:
            player_world_id: Player career taking the exam
            license_code: License type code, case-insensitive
            departure_icao: Departure airport ident
            now: Current time

        Returns:
            The Scheduled exam with its maneuvers and checkpoints

        Raises:
            LicenseTypeNotFoundError, PlayerWorldNotFoundError,
            LicenseAlreadyHeldError, PrerequisitesNotMetError,
            ExamCooldownError, ActiveExamExistsError,
            InsufficientFundsError, AirportNotFoundError
        """
        now = now or timezone.now()

        with transaction.atomic():
            license_type = self.license_service.get_license_type_by_code(license_code)
            if license_type is None or not license_type.is_active:
                raise LicenseTypeNotFoundError(license_code)

            player_world = (
                PlayerWorld.objects
                .select_for_update()
                .select_related('world')
                .filter(id=player_world_id)
                .first()
            )
            if player_world is None:
                raise PlayerWorldNotFoundError(player_world_id)

            if self.license_service.has_valid_license(player_world.id, license_type.code, now):
                raise LicenseAlreadyHeldError(license_type.code)

            prerequisites = self.license_service.check_prerequisites(player_world.id, license_type, now)
            if not prerequisites.satisfied:
                raise PrerequisitesNotMetError(prerequisites.missing)

            history = LicenseExam.objects.for_license(player_world, license_type)

            last_failed = history.last_failed()
            if last_failed and last_failed.eligible_for_retake_at and last_failed.eligible_for_retake_at > now:
                raise ExamCooldownError(last_failed.eligible_for_retake_at)

            active = history.active().first()
            if active is not None:
                raise ActiveExamExistsError(license_type.code, active.id)

            attempt_number = history.count() + 1
            fee = exam_fee(
                license_type.base_exam_cost,
                player_world.world.license_cost_multiplier,
                attempt_number,
                history.latest_attempt()
            )
            if player_world.balance < fee:
                raise InsufficientFundsError(fee, player_world.balance)

            departure = self.directory.find_by_code(departure_icao)
            if departure is None:
                raise AirportNotFoundError(departure_icao)

            player_world.balance -= fee
            player_world.save(update_fields=['balance'])

            waypoints = self.route_generator.generate(license_type, departure)

            try:
                with transaction.atomic():
                    exam = LicenseExam.objects.create(
                        player_world=player_world,
                        license_type=license_type,
                        status=ExamStatus.SCHEDULED,
                        scheduled_at=now,
                        time_limit_minutes=license_type.exam_duration_minutes,
                        required_aircraft_category=license_type.required_aircraft_category,
                        required_aircraft_type=license_type.required_aircraft_type,
                        departure_icao=departure.ident,
                        route=serialize_route(waypoints),
                        assigned_altitude_ft=cruise_altitude_for(license_type.required_aircraft_category),
                        passing_score=license_type.passing_score,
                        attempt_number=attempt_number,
                        fee_paid=fee,
                    )
            except IntegrityError:
                raise ActiveExamExistsError(license_type.code)

            ExamManeuver.objects.bulk_create(build_maneuvers(exam, license_type))
            ExamCheckpoint.objects.bulk_create(build_checkpoints(exam, waypoints))

        logger.info(
            f"Scheduled {license_type.code} exam {exam.id} (attempt {attempt_number}) "
            f"for player {player_world_id}, fee: ${fee}",
            extra={'player_world_id': str(player_world_id), 'exam_id': str(exam.id)}
        )
        self.events.exam_scheduled(exam)
        return exam

    # ==========================================================================
    # State machine
    # ==========================================================================

    def start_exam(
        self,
        exam_id: UUID,
        aircraft_used: str,
        now: Optional[datetime] = None
    ) -> LicenseExam:
        """
        Move a Scheduled exam to InProgress.

        An exam not started within the scheduled timeout is marked
        Expired instead and ExamExpiredError is raised.
        """
        now = now or timezone.now()
        timeout_hours = licensing_setting('SCHEDULED_EXAM_TIMEOUT_HOURS')

        with transaction.atomic():
            exam = self.lock_exam(exam_id)

            if exam.status != ExamStatus.SCHEDULED:
                raise ExamStateError(exam.status, ExamStatus.IN_PROGRESS)

            expired = exam.start_deadline(timeout_hours) < now
            if expired:
                exam.expire(now)
            else:
                exam.start(aircraft_used, now)
            exam.save()

        if expired:
            logger.info(f"Exam {exam_id} expired before start", extra={'exam_id': str(exam_id)})
            self.events.exam_finished(exam)
            raise ExamExpiredError(exam_id)

        logger.info(
            f"Started exam {exam_id} in {aircraft_used}",
            extra={'exam_id': str(exam_id)}
        )
        self.events.exam_started(exam)
        return exam

    def fail_exam(
        self,
        exam_id: UUID,
        reason: str,
        now: Optional[datetime] = None
    ) -> LicenseExam:
        """Fail an InProgress exam outright with a zero score."""
        now = now or timezone.now()

        with transaction.atomic():
            exam = self.lock_exam(exam_id)
            self.apply_failure(exam, reason, now)

        self.events.exam_finished(exam)
        return exam

    def apply_failure(self, exam: LicenseExam, reason: str, now: datetime) -> None:
        """
        Fail a locked exam and save it. Caller holds the transaction.
        """
        if exam.status != ExamStatus.IN_PROGRESS:
            raise ExamStateError(exam.status, ExamStatus.FAILED)

        cooldown = timedelta(hours=licensing_setting('CRITICAL_FAILURE_COOLDOWN_HOURS'))
        exam.fail(reason, cooldown, now, score=0)
        exam.flight_time_minutes = self._flight_minutes(exam, now)
        exam.save()

        logger.warning(
            f"Exam {exam.id} failed: {reason}",
            extra={'exam_id': str(exam.id), 'player_world_id': str(exam.player_world_id)}
        )

    def abandon_exam(self, exam_id: UUID, now: Optional[datetime] = None) -> LicenseExam:
        now = now or timezone.now()

        with transaction.atomic():
            exam = self.lock_exam(exam_id)
            if not exam.can_transition_to(ExamStatus.ABANDONED):
                raise ExamStateError(exam.status, ExamStatus.ABANDONED)
            exam.abandon(now)
            exam.save()

        logger.info(f"Exam {exam_id} abandoned", extra={'exam_id': str(exam_id)})
        self.events.exam_finished(exam)
        return exam

    def complete_exam(self, exam_id: UUID, now: Optional[datetime] = None) -> ExamResult:
        """
        Score an InProgress exam and settle it as Passed or Failed.

        The score is the share of available points across maneuvers,
        checkpoints and landings after violation deductions. A pass
        grants the license; a fail sets the retake cooldown.

        Returns:
            ExamResult with the settled exam and the granted license, if any
        """
        now = now or timezone.now()
        granted = None

        with transaction.atomic():
            exam = self.lock_exam(exam_id)

            if exam.status != ExamStatus.IN_PROGRESS:
                raise ExamStateError(exam.status, 'completed')

            awarded = 0
            available = 0
            for children in (exam.maneuvers, exam.checkpoints, exam.landings):
                totals = children.aggregate(awarded=Sum('points_awarded'), available=Sum('max_points'))
                awarded += totals['awarded'] or 0
                available += totals['available'] or 0
            deducted = exam.violations.aggregate(total=Sum('points_deducted'))['total'] or 0

            score = final_score(awarded, available, deducted)
            passed = score >= exam.passing_score

            exam.flight_time_minutes = self._flight_minutes(exam, now)
            exam.examiner_notes = examiner_notes(
                score,
                passed,
                exam.landings.values_list('vertical_speed_fpm', flat=True),
                exam.violations.values_list('violation_type', flat=True)
            )

            if passed:
                exam.mark_passed(score, now)
                exam.save()
                granted = self.license_service.grant_license(
                    exam.player_world_id, exam.license_type, exam, now
                )
            else:
                exam.fail(
                    f"Score {score}/100 below passing threshold of {exam.passing_score}",
                    failure_cooldown(score, exam.attempt_number),
                    now,
                    score=score
                )
                exam.save()

        logger.info(
            f"Exam {exam_id} completed with score {score} ({'passed' if passed else 'failed'})",
            extra={'exam_id': str(exam_id), 'player_world_id': str(exam.player_world_id)}
        )
        self.events.exam_finished(exam)
        return ExamResult(exam=exam, score=score, passed=passed, license=granted)

    # ==========================================================================
    # Queries
    # ==========================================================================

    def get_exam(self, exam_id: UUID, player_world_id: Optional[UUID] = None) -> LicenseExam:
        queryset = (
            LicenseExam.objects
            .select_related('license_type')
            .prefetch_related('maneuvers', 'checkpoints', 'landings', 'violations')
        )
        if player_world_id is not None:
            queryset = queryset.filter(player_world_id=player_world_id)

        exam = queryset.filter(id=exam_id).first()
        if exam is None:
            raise ExamNotFoundError(exam_id)
        return exam

    def get_player_exams(self, player_world_id: UUID, limit: Optional[int] = None) -> List[LicenseExam]:
        """Most recent exams first."""
        limit = limit or licensing_setting('EXAM_HISTORY_LIMIT')
        return list(
            LicenseExam.objects
            .filter(player_world_id=player_world_id)
            .select_related('license_type')
            .order_by('-scheduled_at')[:limit]
        )

    def get_active_exam(
        self,
        player_world_id: UUID,
        license_code: Optional[str] = None
    ) -> Optional[LicenseExam]:
        queryset = LicenseExam.objects.filter(player_world_id=player_world_id).active()
        if license_code:
            queryset = queryset.filter(license_type__code__iexact=license_code)
        return queryset.select_related('license_type').order_by('-scheduled_at').first()

    # ==========================================================================
    # Helpers
    # ==========================================================================

    def lock_exam(self, exam_id: UUID) -> LicenseExam:
        """Fetch an exam row for update. Must run inside a transaction."""
        exam = (
            LicenseExam.objects
            .select_for_update()
            .select_related('license_type')
            .filter(id=exam_id)
            .first()
        )
        if exam is None:
            raise ExamNotFoundError(exam_id)
        return exam

    @staticmethod
    def _flight_minutes(exam: LicenseExam, now: datetime) -> Optional[int]:
        if exam.started_at is None:
            return None
        return int((now - exam.started_at).total_seconds() // 60)
