"""
Django management command to import the airport directory from the
OurAirports airports.csv export (https://ourairports.com/data/).

Usage:
    python manage.py load_airports path/to/airports.csv
"""

import csv

from django.core.management.base import BaseCommand, CommandError

from apps.core.models import Airport, AirportType

IMPORTED_TYPES = {AirportType.LARGE, AirportType.MEDIUM, AirportType.SMALL}
BATCH_SIZE = 1000


class Command(BaseCommand):
    help = "Load airports.csv from OurAirports into the airport directory"

    def add_arguments(self, parser):
        parser.add_argument('file', help="Path to airports.csv")
        parser.add_argument(
            '--large-only',
            action='store_true',
            help="Only import large airports, for quick development setups",
        )

    def handle(self, *args, **options):
        if Airport.objects.exists():
            self.stdout.write(self.style.WARNING("Airports already loaded, skipping import"))
            return

        types = {AirportType.LARGE} if options['large_only'] else IMPORTED_TYPES
        airports = []
        skipped = 0

        try:
            with open(options['file'], newline='', encoding='utf-8') as csv_file:
                for row in csv.DictReader(csv_file):
                    airport = self._parse_row(row, types)
                    if airport is None:
                        skipped += 1
                        continue
                    airports.append(airport)
        except FileNotFoundError:
            raise CommandError(f"{options['file']} not found")

        Airport.objects.bulk_create(airports, batch_size=BATCH_SIZE, ignore_conflicts=True)

        self.stdout.write(self.style.WARNING(f"Skipped {skipped} airport records"))
        self.stdout.write(self.style.SUCCESS(f"Imported {len(airports)} airport records"))

    def _parse_row(self, row, types):
        """
        Build an Airport from a csv row.

        :returns: Airport, or None when the row should be skipped
        """
        if row.get('type') not in types:
            return None

        ident = (row.get('ident') or '').strip()
        name = (row.get('name') or '').strip()
        if not ident or not name or len(ident) > 10:
            return None

        try:
            latitude = float(row['latitude_deg'])
            longitude = float(row['longitude_deg'])
        except (KeyError, TypeError, ValueError):
            return None

        try:
            elevation_ft = int(row['elevation_ft'])
        except (KeyError, TypeError, ValueError):
            elevation_ft = None

        return Airport(
            ident=ident.upper(),
            name=name,
            type=row['type'],
            latitude=latitude,
            longitude=longitude,
            elevation_ft=elevation_ft,
            country=(row.get('iso_country') or None),
        )
