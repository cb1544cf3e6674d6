# services/licensing-service/src/apps/core/services/exam_templates.py
"""
Templates used when an exam is created: cruise altitude per aircraft
category, the maneuver list per license, and checkpoint seeding from
a generated route.
"""

from dataclasses import dataclass, replace
from typing import List, Optional

from apps.core.models import (
    AircraftCategory,
    ExamCheckpoint,
    ExamManeuver,
    LicenseExam,
    LicenseType,
    ManeuverType,
)
from .route_generator import Waypoint

CRUISE_ALTITUDES_FT = {
    AircraftCategory.SEP: 3000,
    AircraftCategory.MEP: 4000,
    AircraftCategory.TURBOPROP: 5000,
    AircraftCategory.REGIONAL_JET: 6000,
    AircraftCategory.NARROW_BODY: 8000,
    AircraftCategory.WIDE_BODY: 10000,
}
DEFAULT_CRUISE_ALTITUDE_FT = 3000


def cruise_altitude_for(category: Optional[str]) -> int:
    return CRUISE_ALTITUDES_FT.get(category, DEFAULT_CRUISE_ALTITUDE_FT)


@dataclass(frozen=True)
class ManeuverSpec:
    maneuver_type: str
    max_points: int
    altitude_tolerance_ft: Optional[int] = None
    heading_tolerance_deg: Optional[int] = None
    is_required: bool = True


OPENING_MANEUVERS = (
    ManeuverSpec(ManeuverType.TAKEOFF, 15, altitude_tolerance_ft=200),
    ManeuverSpec(ManeuverType.CLIMB, 10, altitude_tolerance_ft=200),
    ManeuverSpec(ManeuverType.CRUISE, 20, altitude_tolerance_ft=200, heading_tolerance_deg=10),
)

STEEP_TURN = ManeuverSpec(ManeuverType.STEEP_TURN, 15, altitude_tolerance_ft=100, heading_tolerance_deg=5)

# License codes whose exam includes a steep turn, and whether it is mandatory
STEEP_TURN_LICENSES = {
    'PPL': False,
    'CPL': True,
    'ATPL': True,
}

CLOSING_MANEUVERS = (
    ManeuverSpec(ManeuverType.APPROACH, 10, altitude_tolerance_ft=100),
    ManeuverSpec(ManeuverType.LANDING, 30),
)


def maneuver_plan(license_type: LicenseType) -> List[ManeuverSpec]:
    """Ordered maneuvers for an exam of this license type."""
    plan = list(OPENING_MANEUVERS)

    code = license_type.code.upper()
    if code in STEEP_TURN_LICENSES:
        plan.append(replace(STEEP_TURN, is_required=STEEP_TURN_LICENSES[code]))

    plan.extend(CLOSING_MANEUVERS)
    return plan


def build_maneuvers(exam: LicenseExam, license_type: LicenseType) -> List[ExamManeuver]:
    return [
        ExamManeuver(
            exam=exam,
            maneuver_type=spec.maneuver_type,
            order=order,
            is_required=spec.is_required,
            max_points=spec.max_points,
            altitude_tolerance_ft=spec.altitude_tolerance_ft,
            heading_tolerance_deg=spec.heading_tolerance_deg,
        )
        for order, spec in enumerate(maneuver_plan(license_type), start=1)
    ]


AIRPORT_CAPTURE_RADIUS_NM = 2.0
WAYPOINT_CAPTURE_RADIUS_NM = 1.0
CHECKPOINT_MAX_POINTS = 10


def build_checkpoints(exam: LicenseExam, waypoints: List[Waypoint]) -> List[ExamCheckpoint]:
    """One checkpoint per waypoint, in route order."""
    return [
        ExamCheckpoint(
            exam=exam,
            order=order,
            name=waypoint.name,
            latitude=waypoint.latitude,
            longitude=waypoint.longitude,
            required_altitude_ft=exam.assigned_altitude_ft,
            radius_nm=AIRPORT_CAPTURE_RADIUS_NM if waypoint.is_airport else WAYPOINT_CAPTURE_RADIUS_NM,
            max_points=CHECKPOINT_MAX_POINTS,
        )
        for order, waypoint in enumerate(waypoints, start=1)
    ]
