# services/licensing-service/src/apps/core/tests/conftest.py
"""
Pytest Configuration and Fixtures

Shared fixtures for licensing service tests.
"""

import pytest
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from uuid import uuid4


@pytest.fixture(autouse=True)
def clear_events():
    """Start every test with an empty in-memory event log."""
    from apps.core.events import event_publisher

    event_publisher.clear()
    yield event_publisher
    event_publisher.clear()


@pytest.fixture
def now():
    """Fixed current time."""
    return datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def user_id():
    """Generate a random user ID."""
    return uuid4()


@pytest.fixture
def world(db):
    """World with a 1.2 license cost multiplier."""
    from apps.core.models import World

    return World.objects.create(
        name='Test World',
        slug='test-world',
        license_cost_multiplier=Decimal('1.20'),
    )


@pytest.fixture
def player_world(world, user_id):
    """Player career with a comfortable balance."""
    from apps.core.models import PlayerWorld

    return PlayerWorld.objects.create(
        user_id=user_id,
        world=world,
        balance=Decimal('10000.00'),
    )


@pytest.fixture
def airports(db):
    """
    Home airport with neighbours at increasing squared distances.

    KAAA 0.01, KBBB 0.04, KCCC 0.18; the heliport is closest but never
    a route stop and KFAR is outside every route band.
    """
    from apps.core.models import Airport, AirportType

    rows = [
        ('KHOM', 'Home Field', AirportType.LARGE, 40.0, -75.0),
        ('KAAA', 'Alpha Strip', AirportType.SMALL, 40.1, -75.0),
        ('KBBB', 'Bravo Regional', AirportType.MEDIUM, 40.0, -75.2),
        ('KCCC', 'Charlie County', AirportType.SMALL, 40.3, -75.3),
        ('KHEL', 'City Heliport', AirportType.HELIPORT, 40.05, -75.0),
        ('KFAR', 'Far Away', AirportType.LARGE, 45.0, -75.0),
    ]
    return {
        ident: Airport.objects.create(
            ident=ident,
            name=name,
            type=airport_type,
            latitude=latitude,
            longitude=longitude,
        )
        for ident, name, airport_type, latitude, longitude in rows
    }


@pytest.fixture
def license_types(db):
    """A small catalog: PPL, NIGHT, IR, CPL and a type rating."""
    from apps.core.models import AircraftCategory, LicenseCategory, LicenseType

    catalog = [
        dict(code='PPL', name='Private Pilot License', category=LicenseCategory.CORE,
             base_exam_cost=Decimal('500.00'), exam_duration_minutes=60, passing_score=70,
             required_aircraft_category=AircraftCategory.SEP, display_order=1),
        dict(code='NIGHT', name='Night Rating', category=LicenseCategory.ENDORSEMENT,
             base_exam_cost=Decimal('300.00'), exam_duration_minutes=45, passing_score=70,
             required_aircraft_category=AircraftCategory.SEP, validity_game_days=90,
             base_renewal_cost=Decimal('150.00'), prerequisite_codes=['PPL'], display_order=2),
        dict(code='IR', name='Instrument Rating', category=LicenseCategory.ENDORSEMENT,
             base_exam_cost=Decimal('1500.00'), exam_duration_minutes=90, passing_score=75,
             required_aircraft_category=AircraftCategory.SEP, validity_game_days=180,
             base_renewal_cost=Decimal('500.00'), prerequisite_codes=['PPL'], display_order=3),
        dict(code='CPL', name='Commercial Pilot License', category=LicenseCategory.CORE,
             base_exam_cost=Decimal('2500.00'), exam_duration_minutes=90, passing_score=75,
             required_aircraft_category=AircraftCategory.SEP, validity_game_days=365,
             base_renewal_cost=Decimal('800.00'), prerequisite_codes=['ppl'], display_order=4),
        dict(code='TYPE_B738', name='Boeing 737-800 Type Rating', category=LicenseCategory.TYPE_RATING,
             base_exam_cost=Decimal('15000.00'), exam_duration_minutes=120, passing_score=80,
             required_aircraft_category=AircraftCategory.NARROW_BODY, required_aircraft_type='B738',
             prerequisite_codes=['CPL', 'IR'], display_order=5),
    ]
    return {entry['code']: LicenseType.objects.create(**entry) for entry in catalog}


@pytest.fixture
def grant(now):
    """Create a ledger row directly."""
    from apps.core.models import UserLicense

    def _grant(player_world, license_type, expires_at=None, **kwargs):
        return UserLicense.objects.create(
            player_world=player_world,
            license_type=license_type,
            earned_at=kwargs.pop('earned_at', now - timedelta(days=1)),
            expires_at=expires_at,
            **kwargs
        )

    return _grant


@pytest.fixture
def past_exam(now):
    """Create a finished exam directly, for attempt history."""
    from apps.core.models import ExamStatus, LicenseExam

    def _past_exam(player_world, license_type, attempt_number, status=ExamStatus.FAILED,
                   score=0, eligible_for_retake_at=None):
        completed_at = now - timedelta(days=10 - attempt_number)
        if status == ExamStatus.FAILED and eligible_for_retake_at is None:
            eligible_for_retake_at = completed_at + timedelta(hours=12)
        return LicenseExam.objects.create(
            player_world=player_world,
            license_type=license_type,
            status=status,
            scheduled_at=completed_at - timedelta(hours=2),
            started_at=completed_at - timedelta(hours=1),
            completed_at=completed_at,
            time_limit_minutes=license_type.exam_duration_minutes,
            departure_icao='KHOM',
            score=score,
            passing_score=license_type.passing_score,
            attempt_number=attempt_number,
            fee_paid=Decimal('100.00'),
            eligible_for_retake_at=eligible_for_retake_at,
        )

    return _past_exam


@pytest.fixture
def exam_service():
    from apps.core.services import ExamService

    return ExamService()


@pytest.fixture
def license_service():
    from apps.core.services import LicenseService

    return LicenseService()


@pytest.fixture
def tracking_service(exam_service):
    from apps.core.services import ExamTrackingService

    return ExamTrackingService(exam_service=exam_service)


@pytest.fixture
def scheduled_exam(exam_service, player_world, license_types, airports, now):
    """PPL exam scheduled from KHOM at `now`."""
    return exam_service.schedule_exam(player_world.id, 'PPL', 'KHOM', now=now)


@pytest.fixture
def started_exam(exam_service, scheduled_exam, now):
    """PPL exam started five minutes after scheduling."""
    return exam_service.start_exam(scheduled_exam.id, 'C172', now=now + timedelta(minutes=5))
