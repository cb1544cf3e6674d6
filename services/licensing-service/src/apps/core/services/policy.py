# services/licensing-service/src/apps/core/services/policy.py
"""
Retry fee and cooldown policy.

Both rules key off the attempt number and the score of the failed
attempt, so they live side by side.
"""

from datetime import timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from apps.core.models import LicenseExam, ExamStatus

# Prior score at or above which a first retake gets the cheaper rate
RETAKE_SCORE_THRESHOLD = 60

# attempt number -> (multiplier if prior score >= threshold, multiplier otherwise)
RETRY_FEE_MULTIPLIERS = {
    2: (Decimal('0.5'), Decimal('0.75')),
    3: (Decimal('1.0'), Decimal('1.0')),
}
LATE_RETRY_FEE_MULTIPLIER = Decimal('1.5')

# Cooldown after a scored failure, in hours
NEAR_MISS_COOLDOWN_HOURS = 6
FAILURE_COOLDOWN_HOURS = 12
REPEATED_FAILURE_ATTEMPT = 3
REPEATED_FAILURE_FACTOR = 2

CENT = Decimal('0.01')


def retry_fee_multiplier(attempt_number: int, previous_exam: Optional[LicenseExam]) -> Decimal:
    """
    Fee multiplier for a retake.

    Applies only when this is not the first attempt and the attempt
    immediately before it ended in Failed.
    """
    if attempt_number < 2 or previous_exam is None:
        return Decimal('1')
    if previous_exam.status != ExamStatus.FAILED:
        return Decimal('1')

    if attempt_number not in RETRY_FEE_MULTIPLIERS:
        return LATE_RETRY_FEE_MULTIPLIER

    good_score_rate, poor_score_rate = RETRY_FEE_MULTIPLIERS[attempt_number]
    if previous_exam.score >= RETAKE_SCORE_THRESHOLD:
        return good_score_rate
    return poor_score_rate


def exam_fee(
    base_cost: Decimal,
    world_multiplier: Decimal,
    attempt_number: int,
    previous_exam: Optional[LicenseExam]
) -> Decimal:
    fee = base_cost * world_multiplier * retry_fee_multiplier(attempt_number, previous_exam)
    return fee.quantize(CENT, rounding=ROUND_HALF_UP)


def failure_cooldown(score: int, attempt_number: int) -> timedelta:
    """Wait before a failed exam may be retaken."""
    hours = NEAR_MISS_COOLDOWN_HOURS if score >= RETAKE_SCORE_THRESHOLD else FAILURE_COOLDOWN_HOURS
    if attempt_number >= REPEATED_FAILURE_ATTEMPT:
        hours *= REPEATED_FAILURE_FACTOR
    return timedelta(hours=hours)
