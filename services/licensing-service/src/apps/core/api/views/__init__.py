# services/licensing-service/src/apps/core/api/views/__init__.py
"""
Licensing Service API Views
"""

from .license_views import LicenseTypeViewSet, PlayerLicenseViewSet, LicenseShopViewSet
from .exam_views import ExamViewSet, PlayerExamViewSet

__all__ = [
    'LicenseTypeViewSet',
    'PlayerLicenseViewSet',
    'LicenseShopViewSet',
    'ExamViewSet',
    'PlayerExamViewSet',
]
