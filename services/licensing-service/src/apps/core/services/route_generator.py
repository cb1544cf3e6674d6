# services/licensing-service/src/apps/core/services/route_generator.py
"""
Exam Route Generator

Builds a closed-loop exam route from a departure airport: nearby
airports are picked inside a bounding box sized by the license's route
band, ranked by proximity, and flown in order before returning home.
"""

import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

from django.db.models import F, FloatField, ExpressionWrapper

from apps.core.models import Airport, AirportType, LicenseCategory, LicenseType

logger = logging.getLogger(__name__)


# =============================================================================
# ROUTE BANDS
# =============================================================================

@dataclass(frozen=True)
class RouteBand:
    min_distance_nm: int
    max_distance_nm: int
    waypoint_count: int


ROUTE_BANDS = {
    'DISCOVERY': RouteBand(5, 15, 1),
    'PPL': RouteBand(10, 30, 2),
    'CPL': RouteBand(15, 40, 3),
    'NIGHT': RouteBand(10, 25, 2),
    'IR': RouteBand(20, 50, 3),
    'MEP': RouteBand(15, 35, 2),
    'ATPL': RouteBand(30, 80, 4),
}
TYPE_RATING_ROUTE_BAND = RouteBand(15, 50, 3)
DEFAULT_ROUTE_BAND = RouteBand(10, 30, 2)

ROUTE_AIRPORT_TYPES = (AirportType.LARGE, AirportType.MEDIUM, AirportType.SMALL)

# Candidates fetched per waypoint needed
CANDIDATE_FACTOR = 2


def route_band_for(license_type: LicenseType) -> RouteBand:
    band = ROUTE_BANDS.get(license_type.code.upper())
    if band is not None:
        return band
    if license_type.category == LicenseCategory.TYPE_RATING:
        return TYPE_RATING_ROUTE_BAND
    return DEFAULT_ROUTE_BAND


# =============================================================================
# WAYPOINTS AND SERIALIZATION
# =============================================================================

@dataclass(frozen=True)
class Waypoint:
    name: str
    latitude: float
    longitude: float
    is_airport: bool = True

    @classmethod
    def for_airport(cls, airport: Airport) -> 'Waypoint':
        return cls(
            name=airport.ident,
            latitude=airport.latitude,
            longitude=airport.longitude,
            is_airport=True,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'latitude': self.latitude,
            'longitude': self.longitude,
            'isAirport': self.is_airport,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Waypoint':
        return cls(
            name=data['name'],
            latitude=float(data['latitude']),
            longitude=float(data['longitude']),
            is_airport=bool(data.get('isAirport', False)),
        )


def serialize_route(waypoints: Iterable[Waypoint]) -> List[Dict[str, Any]]:
    """Route as stored on the exam: an ordered array of waypoint records."""
    return [waypoint.to_dict() for waypoint in waypoints]


def deserialize_route(data: Optional[List[Dict[str, Any]]]) -> List[Waypoint]:
    return [Waypoint.from_dict(item) for item in (data or [])]


# =============================================================================
# AIRPORT DIRECTORY
# =============================================================================

@dataclass(frozen=True)
class BoundingBox:
    min_latitude: float
    max_latitude: float
    min_longitude: float
    max_longitude: float

    @classmethod
    def around(cls, latitude: float, longitude: float, distance_nm: float) -> 'BoundingBox':
        """Approximate box: one degree of latitude is 60 nm."""
        lat_range = distance_nm / 60.0
        lon_range = distance_nm / (60.0 * math.cos(math.radians(latitude)))
        return cls(
            min_latitude=latitude - lat_range,
            max_latitude=latitude + lat_range,
            min_longitude=longitude - lon_range,
            max_longitude=longitude + lon_range,
        )


class AirportDirectory:
    """
    Airport lookups used by scheduling and route generation.
    """

    def find_by_code(self, code: str) -> Optional[Airport]:
        return Airport.objects.filter(ident=code.upper()).first()

    def find_near(
        self,
        latitude: float,
        longitude: float,
        box: BoundingBox,
        types: Iterable[str],
        limit: int,
        exclude_id: Optional[int] = None
    ) -> List[Airport]:
        """
        Airports inside the box, nearest first by squared lat/lon distance.
        """
        queryset = Airport.objects.filter(
            latitude__gte=box.min_latitude,
            latitude__lte=box.max_latitude,
            longitude__gte=box.min_longitude,
            longitude__lte=box.max_longitude,
            type__in=list(types),
        )
        if exclude_id is not None:
            queryset = queryset.exclude(id=exclude_id)

        distance = ExpressionWrapper(
            (F('latitude') - latitude) * (F('latitude') - latitude)
            + (F('longitude') - longitude) * (F('longitude') - longitude),
            output_field=FloatField()
        )
        return list(
            queryset.annotate(distance_sq=distance).order_by('distance_sq', 'ident')[:limit]
        )


# =============================================================================
# GENERATOR
# =============================================================================

class RouteGenerator:
    """Generates exam routes from the airport directory."""

    def __init__(self, directory: Optional[AirportDirectory] = None):
        self.directory = directory or AirportDirectory()

    def generate(self, license_type: LicenseType, departure: Airport) -> List[Waypoint]:
        """
        Build the route departure -> nearby airports -> departure.

        Args:
            license_type: License being examined, selects the route band
            departure: Departure airport

        Returns:
            Ordered waypoints; also the checkpoint order
        """
        band = route_band_for(license_type)
        box = BoundingBox.around(departure.latitude, departure.longitude, band.max_distance_nm)

        candidates = self.directory.find_near(
            departure.latitude,
            departure.longitude,
            box,
            ROUTE_AIRPORT_TYPES,
            limit=band.waypoint_count * CANDIDATE_FACTOR,
            exclude_id=departure.id,
        )
        stops = candidates[:band.waypoint_count]

        if len(stops) < band.waypoint_count:
            logger.warning(
                f"Only {len(stops)} of {band.waypoint_count} route stops found near {departure.ident}",
                extra={'license_code': license_type.code, 'departure_icao': departure.ident}
            )

        home = Waypoint.for_airport(departure)
        return [home] + [Waypoint.for_airport(airport) for airport in stops] + [home]
