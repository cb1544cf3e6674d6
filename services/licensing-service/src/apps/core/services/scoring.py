# services/licensing-service/src/apps/core/services/scoring.py
"""
Exam scoring rules.

Violation deductions, landing and checkpoint grading, the final score
and examiner feedback. Every rule is a lookup table plus a small pure
function so the numbers can be read and tested in one place.
"""

from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from apps.core.models import ViolationType

# =============================================================================
# VIOLATIONS
# =============================================================================

VIOLATION_POINTS: Dict[str, int] = {
    ViolationType.SPEED_EXCESS: 5,
    ViolationType.ALTITUDE_DEVIATION: 3,
    ViolationType.HEADING_DEVIATION: 2,
    ViolationType.GFORCE_EXCESS: 5,
    ViolationType.HARD_LANDING: 5,
    ViolationType.CENTERLINE_DEVIATION: 3,
    ViolationType.MISSED_CHECKPOINT: 10,
    ViolationType.TIME_EXCEEDED: 1,
    ViolationType.CRASH: 100,
    ViolationType.GEAR_UP_LANDING: 100,
    ViolationType.STALL: 5,
    ViolationType.SPIN: 15,
}
DEFAULT_VIOLATION_POINTS = 5

# type -> (value must exceed, points when it does); otherwise VIOLATION_POINTS applies
VALUE_BANDED_VIOLATION_POINTS: Dict[str, Tuple[float, int]] = {
    ViolationType.GFORCE_EXCESS: (3.0, 10),
    ViolationType.HARD_LANDING: (-900.0, 10),
}

# type -> value that must be exceeded to be critical, None means always critical
CRITICAL_VIOLATIONS: Dict[str, Optional[float]] = {
    ViolationType.GFORCE_EXCESS: 3.0,
    ViolationType.CRASH: None,
    ViolationType.GEAR_UP_LANDING: None,
}

VIOLATION_DESCRIPTIONS: Dict[str, str] = {
    ViolationType.SPEED_EXCESS: "Speed exceeded {threshold:g} kts (actual: {value:g} kts)",
    ViolationType.ALTITUDE_DEVIATION: "Altitude deviated {delta:.0f} ft from assigned",
    ViolationType.HEADING_DEVIATION: "Heading deviated {delta:.0f}° from assigned",
    ViolationType.GFORCE_EXCESS: "G-force exceeded {threshold:g}G (actual: {value:.1f}G)",
    ViolationType.HARD_LANDING: "Hard landing: {value:.0f} fpm",
    ViolationType.CENTERLINE_DEVIATION: "Centerline deviation: {value:.0f} ft",
    ViolationType.MISSED_CHECKPOINT: "Missed required checkpoint",
    ViolationType.TIME_EXCEEDED: "Time limit exceeded by {value:.0f} minutes",
    ViolationType.CRASH: "Aircraft crashed",
    ViolationType.GEAR_UP_LANDING: "Landed with gear up",
    ViolationType.STALL: "Stall warning activated",
    ViolationType.SPIN: "Entered spin",
}


def violation_points(violation_type: str, value: float) -> int:
    banded = VALUE_BANDED_VIOLATION_POINTS.get(violation_type)
    if banded is not None and value > banded[0]:
        return banded[1]
    return VIOLATION_POINTS.get(violation_type, DEFAULT_VIOLATION_POINTS)


def is_critical_violation(violation_type: str, value: float) -> bool:
    if violation_type not in CRITICAL_VIOLATIONS:
        return False
    limit = CRITICAL_VIOLATIONS[violation_type]
    return limit is None or value > limit


def describe_violation(violation_type: str, value: float, threshold: float) -> str:
    template = VIOLATION_DESCRIPTIONS.get(violation_type)
    if template is None:
        return f"{violation_type}: {value}"
    return template.format(value=value, threshold=threshold, delta=abs(value - threshold))


# =============================================================================
# LANDINGS
# =============================================================================

LANDING_BASE_POINTS = 20
LANDING_MAX_POINTS = 25

# (vertical speed must be above, adjustment); anything lower gets the fallback
VERTICAL_SPEED_BANDS: Sequence[Tuple[float, int]] = (
    (-100, 5),
    (-200, 3),
    (-400, 0),
    (-600, -5),
    (-900, -10),
)
VERTICAL_SPEED_FALLBACK = -20

# (absolute centerline deviation must be below, adjustment)
CENTERLINE_BANDS: Sequence[Tuple[float, int]] = (
    (10, 3),
    (25, 1),
    (50, 0),
)
CENTERLINE_FALLBACK = -3

# (touchdown distance must be below, adjustment)
TOUCHDOWN_ZONE_BANDS: Sequence[Tuple[float, int]] = (
    (500, 2),
    (1000, 0),
)
TOUCHDOWN_ZONE_FALLBACK = -2

SMOOTH_TOUCHDOWN_FPM = -100
HARD_TOUCHDOWN_FPM = -600
PERFECT_CENTERLINE_FT = 10
OFF_CENTERLINE_FT = 50


def _band_above(value: float, bands: Sequence[Tuple[float, int]], fallback: int) -> int:
    for limit, adjustment in bands:
        if value > limit:
            return adjustment
    return fallback


def _band_below(value: float, bands: Sequence[Tuple[float, int]], fallback: int) -> int:
    for limit, adjustment in bands:
        if value < limit:
            return adjustment
    return fallback


def landing_points(vertical_speed_fpm: float, centerline_deviation_ft: float, touchdown_zone_distance_ft: float) -> int:
    score = LANDING_BASE_POINTS
    score += _band_above(vertical_speed_fpm, VERTICAL_SPEED_BANDS, VERTICAL_SPEED_FALLBACK)
    score += _band_below(abs(centerline_deviation_ft), CENTERLINE_BANDS, CENTERLINE_FALLBACK)
    score += _band_below(touchdown_zone_distance_ft, TOUCHDOWN_ZONE_BANDS, TOUCHDOWN_ZONE_FALLBACK)
    return max(0, min(LANDING_MAX_POINTS, score))


def landing_notes(vertical_speed_fpm: float, centerline_deviation_ft: float, gear_down: bool) -> str:
    notes = []

    if vertical_speed_fpm > SMOOTH_TOUCHDOWN_FPM:
        notes.append("Excellent smooth touchdown")
    elif vertical_speed_fpm < HARD_TOUCHDOWN_FPM:
        notes.append(f"Hard landing ({vertical_speed_fpm:.0f} fpm)")

    if abs(centerline_deviation_ft) < PERFECT_CENTERLINE_FT:
        notes.append("Perfect centerline")
    elif abs(centerline_deviation_ft) > OFF_CENTERLINE_FT:
        notes.append(f"Off centerline by {centerline_deviation_ft:.0f} ft")

    if not gear_down:
        notes.append("GEAR UP LANDING")

    return ". ".join(notes)


# =============================================================================
# CHECKPOINTS
# =============================================================================

# (altitude deviation at most, share of max points)
CHECKPOINT_ALTITUDE_BANDS: Sequence[Tuple[int, float]] = (
    (100, 1.0),
    (200, 0.8),
    (300, 0.6),
)
CHECKPOINT_FALLBACK_SHARE = 0.4


def checkpoint_points(max_points: int, required_altitude_ft: Optional[int], altitude_ft: int) -> int:
    deviation = abs(altitude_ft - required_altitude_ft) if required_altitude_ft is not None else 0
    for limit, share in CHECKPOINT_ALTITUDE_BANDS:
        if deviation <= limit:
            return int(max_points * share)
    return int(max_points * CHECKPOINT_FALLBACK_SHARE)


# =============================================================================
# FINAL SCORE
# =============================================================================

def final_score(points_awarded: int, max_points: int, points_deducted: int) -> int:
    """Percentage of available points after deductions, clamped to 0..100."""
    if max_points == 0:
        return 0
    score = round((points_awarded - points_deducted) / max_points * 100)
    return max(0, min(100, score))


PASS_NOTE_BANDS: Sequence[Tuple[int, str]] = (
    (90, "Excellent performance. Well above standards."),
    (80, "Good performance. Meets all requirements."),
)
PASS_NOTE_FALLBACK = "Satisfactory performance. Requirements met."
FAIL_NOTE = "Performance below acceptable standards."
HARD_LANDING_AVERAGE_FPM = -600
LANDING_FEEDBACK = "Practice flare timing to improve landing quality."

VIOLATION_FEEDBACK: Dict[str, str] = {
    ViolationType.ALTITUDE_DEVIATION: "Work on altitude discipline during cruise.",
    ViolationType.HEADING_DEVIATION: "Improve heading awareness and correction.",
    ViolationType.GFORCE_EXCESS: "Avoid abrupt control inputs.",
}


def examiner_notes(
    score: int,
    passed: bool,
    landing_vertical_speeds: Iterable[float],
    violation_types: Iterable[str]
) -> str:
    notes: List[str] = []

    if passed:
        notes.append(next(
            (note for minimum, note in PASS_NOTE_BANDS if score >= minimum),
            PASS_NOTE_FALLBACK
        ))
    else:
        notes.append(FAIL_NOTE)

    speeds = list(landing_vertical_speeds)
    if speeds and sum(speeds) / len(speeds) < HARD_LANDING_AVERAGE_FPM:
        notes.append(LANDING_FEEDBACK)

    observed = set(violation_types)
    for violation_type, feedback in VIOLATION_FEEDBACK.items():
        if violation_type in observed:
            notes.append(feedback)

    return " ".join(notes)
