# services/licensing-service/src/apps/core/services/__init__.py
"""
Licensing Service Business Logic

Service layer for the license catalog and ledger, exam scheduling and
the exam state machine, and in-flight exam tracking.
"""

from .license_service import LicenseService, LicenseShopItem, RenewalResult
from .exam_service import ExamService, ExamResult
from .tracking_service import ExamTrackingService, TrackingResult, TrackingStatus
from .route_generator import (
    AirportDirectory,
    BoundingBox,
    RouteBand,
    RouteGenerator,
    Waypoint,
    serialize_route,
    deserialize_route,
)
from .prerequisites import PrerequisiteCheck, resolve_prerequisites

__all__ = [
    'LicenseService',
    'LicenseShopItem',
    'RenewalResult',
    'ExamService',
    'ExamResult',
    'ExamTrackingService',
    'TrackingResult',
    'TrackingStatus',
    'AirportDirectory',
    'BoundingBox',
    'RouteBand',
    'RouteGenerator',
    'Waypoint',
    'serialize_route',
    'deserialize_route',
    'PrerequisiteCheck',
    'resolve_prerequisites',
]
