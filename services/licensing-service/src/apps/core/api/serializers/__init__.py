# services/licensing-service/src/apps/core/api/serializers/__init__.py
"""
Licensing Service API Serializers
"""

from .license_serializers import (
    LicenseTypeSerializer,
    UserLicenseSerializer,
    LicenseShopItemSerializer,
    LicenseRenewalSerializer,
    LicenseCheckSerializer,
)
from .exam_serializers import (
    ExamManeuverSerializer,
    ExamCheckpointSerializer,
    ExamLandingSerializer,
    ExamViolationSerializer,
    ExamListSerializer,
    ExamDetailSerializer,
    ExamResultSerializer,
    ExamScheduleSerializer,
    ExamStartSerializer,
    ViolationInputSerializer,
    LandingInputSerializer,
    CheckpointReachSerializer,
    ManeuverResultInputSerializer,
    ExamHistoryQuerySerializer,
)

__all__ = [
    # License
    'LicenseTypeSerializer',
    'UserLicenseSerializer',
    'LicenseShopItemSerializer',
    'LicenseRenewalSerializer',
    'LicenseCheckSerializer',
    # Exam
    'ExamManeuverSerializer',
    'ExamCheckpointSerializer',
    'ExamLandingSerializer',
    'ExamViolationSerializer',
    'ExamListSerializer',
    'ExamDetailSerializer',
    'ExamResultSerializer',
    'ExamScheduleSerializer',
    'ExamStartSerializer',
    'ViolationInputSerializer',
    'LandingInputSerializer',
    'CheckpointReachSerializer',
    'ManeuverResultInputSerializer',
    'ExamHistoryQuerySerializer',
]
