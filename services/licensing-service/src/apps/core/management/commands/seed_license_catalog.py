"""
Django management command to load the standard license catalog and
the world difficulty presets.

Usage:
    python manage.py seed_license_catalog
"""

from decimal import Decimal

from django.core.management.base import BaseCommand
from django.db import transaction

from apps.core.models import (
    AircraftCategory,
    DIFFICULTY_LICENSE_MULTIPLIERS,
    LicenseCategory,
    LicenseType,
    World,
    WorldDifficulty,
)

LICENSE_CATALOG = [
    {
        'code': 'DISCOVERY',
        'name': 'Discovery Flight',
        'description': 'Introductory flight with an examiner around the home airport.',
        'category': LicenseCategory.CERTIFICATION,
        'base_exam_cost': Decimal('250.00'),
        'exam_duration_minutes': 30,
        'passing_score': 60,
        'required_aircraft_category': AircraftCategory.SEP,
        'prerequisite_codes': [],
    },
    {
        'code': 'PPL',
        'name': 'Private Pilot License',
        'description': 'Fly single engine aircraft for private purposes.',
        'category': LicenseCategory.CORE,
        'base_exam_cost': Decimal('500.00'),
        'exam_duration_minutes': 60,
        'passing_score': 70,
        'required_aircraft_category': AircraftCategory.SEP,
        'prerequisite_codes': [],
    },
    {
        'code': 'NIGHT',
        'name': 'Night Rating',
        'description': 'Fly under visual rules at night.',
        'category': LicenseCategory.ENDORSEMENT,
        'base_exam_cost': Decimal('300.00'),
        'exam_duration_minutes': 45,
        'passing_score': 70,
        'required_aircraft_category': AircraftCategory.SEP,
        'validity_game_days': 90,
        'base_renewal_cost': Decimal('150.00'),
        'prerequisite_codes': ['PPL'],
    },
    {
        'code': 'IR',
        'name': 'Instrument Rating',
        'description': 'Fly under instrument flight rules.',
        'category': LicenseCategory.ENDORSEMENT,
        'base_exam_cost': Decimal('1500.00'),
        'exam_duration_minutes': 90,
        'passing_score': 75,
        'required_aircraft_category': AircraftCategory.SEP,
        'validity_game_days': 180,
        'base_renewal_cost': Decimal('500.00'),
        'prerequisite_codes': ['PPL'],
    },
    {
        'code': 'CPL',
        'name': 'Commercial Pilot License',
        'description': 'Fly for hire and take paid jobs.',
        'category': LicenseCategory.CORE,
        'base_exam_cost': Decimal('2500.00'),
        'exam_duration_minutes': 90,
        'passing_score': 75,
        'required_aircraft_category': AircraftCategory.SEP,
        'validity_game_days': 365,
        'base_renewal_cost': Decimal('800.00'),
        'prerequisite_codes': ['PPL'],
    },
    {
        'code': 'MEP',
        'name': 'Multi-Engine Piston Rating',
        'description': 'Fly multi engine piston aircraft.',
        'category': LicenseCategory.ENDORSEMENT,
        'base_exam_cost': Decimal('2000.00'),
        'exam_duration_minutes': 60,
        'passing_score': 75,
        'required_aircraft_category': AircraftCategory.MEP,
        'validity_game_days': 365,
        'base_renewal_cost': Decimal('600.00'),
        'prerequisite_codes': ['PPL'],
    },
    {
        'code': 'ATPL',
        'name': 'Airline Transport Pilot License',
        'description': 'Command airline aircraft.',
        'category': LicenseCategory.CORE,
        'base_exam_cost': Decimal('10000.00'),
        'exam_duration_minutes': 120,
        'passing_score': 80,
        'required_aircraft_category': AircraftCategory.MEP,
        'validity_game_days': 365,
        'base_renewal_cost': Decimal('2500.00'),
        'prerequisite_codes': ['CPL', 'IR', 'MEP'],
    },
]


class Command(BaseCommand):
    help = "Create or update the standard license catalog and world presets"

    @transaction.atomic
    def handle(self, *args, **options):
        created_count = 0
        for display_order, entry in enumerate(LICENSE_CATALOG, start=1):
            defaults = dict(entry, display_order=display_order, is_active=True)
            defaults.setdefault('validity_game_days', None)
            defaults.setdefault('base_renewal_cost', None)
            code = defaults.pop('code')

            _, created = LicenseType.objects.update_or_create(code=code, defaults=defaults)
            created_count += created

        self.stdout.write(
            self.style.SUCCESS(
                f"License catalog: {created_count} created, "
                f"{len(LICENSE_CATALOG) - created_count} updated"
            )
        )

        for difficulty in WorldDifficulty:
            preset = World.from_preset(difficulty)
            World.objects.update_or_create(
                slug=preset.slug,
                defaults={
                    'name': preset.name,
                    'difficulty': difficulty,
                    'license_cost_multiplier': DIFFICULTY_LICENSE_MULTIPLIERS[difficulty],
                },
            )

        self.stdout.write(self.style.SUCCESS(f"World presets: {len(WorldDifficulty)} ready"))
