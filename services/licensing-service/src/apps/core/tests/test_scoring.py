# services/licensing-service/src/apps/core/tests/test_scoring.py
"""
Scoring and Policy Tests

Tests for the pure scoring rules, retry fees and cooldowns.
"""

import pytest
from datetime import timedelta
from decimal import Decimal

from apps.core.models import ExamStatus, LicenseExam, ViolationType
from apps.core.services.policy import exam_fee, failure_cooldown, retry_fee_multiplier
from apps.core.services.scoring import (
    checkpoint_points,
    describe_violation,
    examiner_notes,
    final_score,
    is_critical_violation,
    landing_notes,
    landing_points,
    violation_points,
)


class TestViolationRules:
    """Violation deductions and critical thresholds."""

    @pytest.mark.parametrize('violation_type,value,expected', [
        (ViolationType.SPEED_EXCESS, 180, 5),
        (ViolationType.ALTITUDE_DEVIATION, 3400, 3),
        (ViolationType.HEADING_DEVIATION, 20, 2),
        (ViolationType.GFORCE_EXCESS, 2.8, 5),
        (ViolationType.GFORCE_EXCESS, 3.2, 10),
        (ViolationType.HARD_LANDING, -700, 10),
        (ViolationType.HARD_LANDING, -1000, 5),
        (ViolationType.HARD_LANDING, -900, 5),
        (ViolationType.MISSED_CHECKPOINT, 1, 10),
        (ViolationType.TIME_EXCEEDED, 4, 1),
        (ViolationType.CRASH, 0, 100),
        (ViolationType.GEAR_UP_LANDING, 0, 100),
        (ViolationType.SPIN, 1, 15),
    ])
    def test_violation_points(self, violation_type, value, expected):
        assert violation_points(violation_type, value) == expected

    def test_unknown_violation_type_uses_default(self):
        assert violation_points('bird_strike', 1) == 5

    def test_critical_violations(self):
        assert is_critical_violation(ViolationType.CRASH, 0) is True
        assert is_critical_violation(ViolationType.GEAR_UP_LANDING, 0) is True
        assert is_critical_violation(ViolationType.GFORCE_EXCESS, 3.01) is True
        assert is_critical_violation(ViolationType.GFORCE_EXCESS, 3.0) is False
        assert is_critical_violation(ViolationType.SPIN, 1) is False

    def test_describe_violation(self):
        assert describe_violation(ViolationType.ALTITUDE_DEVIATION, 3350, 3000) == (
            'Altitude deviated 350 ft from assigned'
        )
        assert describe_violation(ViolationType.GFORCE_EXCESS, 3.46, 3.0) == (
            'G-force exceeded 3G (actual: 3.5G)'
        )
        assert describe_violation(ViolationType.CRASH, 0, 0) == 'Aircraft crashed'


class TestLandingRules:
    """Landing points and notes."""

    @pytest.mark.parametrize('vertical_speed,centerline,touchdown,expected', [
        (-80, 2, 300, 25),
        (-150, 5, 300, 25),
        (-300, 20, 700, 21),
        (-500, 40, 700, 15),
        (-700, 60, 1200, 5),
        (-1200, 80, 1500, 0),
    ])
    def test_landing_points(self, vertical_speed, centerline, touchdown, expected):
        assert landing_points(vertical_speed, centerline, touchdown) == expected

    def test_centerline_uses_absolute_deviation(self):
        assert landing_points(-300, -20, 700) == landing_points(-300, 20, 700)

    def test_landing_notes(self):
        assert landing_notes(-80, 4, True) == 'Excellent smooth touchdown. Perfect centerline'
        assert landing_notes(-300, 30, True) == ''
        assert landing_notes(-300, 30, False) == 'GEAR UP LANDING'


class TestCheckpointRules:

    @pytest.mark.parametrize('altitude,expected', [
        (3000, 10),
        (3100, 10),
        (2850, 8),
        (3300, 6),
        (3500, 4),
    ])
    def test_checkpoint_points(self, altitude, expected):
        assert checkpoint_points(10, 3000, altitude) == expected

    def test_checkpoint_without_required_altitude(self):
        assert checkpoint_points(10, None, 12000) == 10


class TestFinalScore:
    """Final score and examiner notes."""

    def test_percentage_is_rounded(self):
        assert final_score(90, 140, 0) == 64
        assert final_score(122, 140, 0) == 87

    def test_deductions_and_clamping(self):
        assert final_score(140, 140, 18) == 87
        assert final_score(15, 140, 25) == 0
        assert final_score(200, 140, 0) == 100

    def test_no_available_points(self):
        assert final_score(0, 0, 0) == 0

    @pytest.mark.parametrize('score,expected', [
        (95, 'Excellent performance. Well above standards.'),
        (90, 'Excellent performance. Well above standards.'),
        (85, 'Good performance. Meets all requirements.'),
        (72, 'Satisfactory performance. Requirements met.'),
    ])
    def test_pass_notes(self, score, expected):
        assert examiner_notes(score, True, [], []) == expected

    def test_fail_notes_with_feedback(self):
        notes = examiner_notes(
            40,
            False,
            [-650, -700],
            [ViolationType.HEADING_DEVIATION, ViolationType.GFORCE_EXCESS, ViolationType.HEADING_DEVIATION]
        )

        assert notes == (
            'Performance below acceptable standards. '
            'Practice flare timing to improve landing quality. '
            'Improve heading awareness and correction. '
            'Avoid abrupt control inputs.'
        )

    def test_average_landing_at_limit_gets_no_feedback(self):
        assert examiner_notes(75, True, [-600], []) == 'Satisfactory performance. Requirements met.'


def previous_attempt(status=ExamStatus.FAILED, score=0):
    return LicenseExam(status=status, score=score)


class TestRetryFees:
    """Retry fee multipliers and the resulting fee."""

    def test_first_attempt(self):
        assert retry_fee_multiplier(1, None) == Decimal('1')

    @pytest.mark.parametrize('attempt,score,expected', [
        (2, 60, Decimal('0.5')),
        (2, 59, Decimal('0.75')),
        (3, 90, Decimal('1.0')),
        (3, 10, Decimal('1.0')),
        (4, 65, Decimal('1.5')),
        (7, 0, Decimal('1.5')),
    ])
    def test_multiplier_after_failure(self, attempt, score, expected):
        assert retry_fee_multiplier(attempt, previous_attempt(score=score)) == expected

    @pytest.mark.parametrize('status', [ExamStatus.ABANDONED, ExamStatus.EXPIRED, ExamStatus.PASSED])
    def test_no_multiplier_unless_previous_failed(self, status):
        assert retry_fee_multiplier(2, previous_attempt(status=status, score=80)) == Decimal('1')

    def test_fee_applies_world_multiplier(self):
        assert exam_fee(Decimal('500.00'), Decimal('1.20'), 1, None) == Decimal('600.00')

    def test_fee_rounds_to_cents(self):
        fee = exam_fee(Decimal('333.33'), Decimal('1.5'), 1, None)

        assert fee == Decimal('500.00')


class TestFailureCooldown:

    @pytest.mark.parametrize('score,attempt,hours', [
        (65, 1, 6),
        (60, 2, 6),
        (59, 1, 12),
        (0, 2, 12),
        (65, 3, 12),
        (10, 3, 24),
        (10, 5, 24),
    ])
    def test_cooldown(self, score, attempt, hours):
        assert failure_cooldown(score, attempt) == timedelta(hours=hours)
