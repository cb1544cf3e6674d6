# services/licensing-service/src/apps/core/models/__init__.py
"""
Licensing Service Models

License catalog and ledger, license exams with their tracking records,
and the world/player/airport data the licensing rules depend on.
"""

from .world import (
    World,
    WorldDifficulty,
    DIFFICULTY_LICENSE_MULTIPLIERS,
    PlayerWorld,
    Airport,
    AirportType,
)
from .license import (
    LicenseType,
    LicenseCategory,
    AircraftCategory,
    UserLicense,
)
from .exam import (
    LicenseExam,
    LicenseExamQuerySet,
    ExamStatus,
    ACTIVE_EXAM_STATUSES,
    EXAM_TRANSITIONS,
)
from .tracking import (
    ExamManeuver,
    ManeuverType,
    ManeuverResult,
    ExamCheckpoint,
    ExamLanding,
    LandingType,
    ExamViolation,
    ViolationType,
)

__all__ = [
    # World
    'World',
    'WorldDifficulty',
    'DIFFICULTY_LICENSE_MULTIPLIERS',
    'PlayerWorld',
    'Airport',
    'AirportType',
    # Licenses
    'LicenseType',
    'LicenseCategory',
    'AircraftCategory',
    'UserLicense',
    # Exams
    'LicenseExam',
    'LicenseExamQuerySet',
    'ExamStatus',
    'ACTIVE_EXAM_STATUSES',
    'EXAM_TRANSITIONS',
    # Tracking
    'ExamManeuver',
    'ManeuverType',
    'ManeuverResult',
    'ExamCheckpoint',
    'ExamLanding',
    'LandingType',
    'ExamViolation',
    'ViolationType',
]
