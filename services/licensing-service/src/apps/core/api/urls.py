# services/licensing-service/src/apps/core/api/urls.py
"""
Licensing Service API URLs

URL routing for the license catalog, player licenses, the license shop
and exams.
"""

from django.urls import path, include
from rest_framework.routers import DefaultRouter

from .views import (
    LicenseTypeViewSet,
    PlayerLicenseViewSet,
    LicenseShopViewSet,
    ExamViewSet,
    PlayerExamViewSet,
)

WORLD = r'worlds/(?P<world_id>[0-9a-fA-F-]+)'

# Create router
router = DefaultRouter()

# Register viewsets - Catalog
router.register(r'license-types', LicenseTypeViewSet, basename='license-type')

# Register viewsets - Player in a world
router.register(rf'{WORLD}/licenses', PlayerLicenseViewSet, basename='player-license')
router.register(rf'{WORLD}/shop', LicenseShopViewSet, basename='license-shop')
router.register(rf'{WORLD}/exams', PlayerExamViewSet, basename='player-exam')

# Register viewsets - Exams
router.register(r'exams', ExamViewSet, basename='exam')

app_name = 'licensing'

urlpatterns = [
    path('', include(router.urls)),
]
