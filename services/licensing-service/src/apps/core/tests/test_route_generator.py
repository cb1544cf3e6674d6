# services/licensing-service/src/apps/core/tests/test_route_generator.py
"""
Route Generator Tests
"""

import math

import pytest

from apps.core.models import AirportType, LicenseCategory, LicenseType
from apps.core.services.route_generator import (
    AirportDirectory,
    BoundingBox,
    RouteBand,
    RouteGenerator,
    Waypoint,
    deserialize_route,
    route_band_for,
    serialize_route,
)


class TestRouteBands:

    @pytest.mark.parametrize('code,band', [
        ('PPL', RouteBand(10, 30, 2)),
        ('ppl', RouteBand(10, 30, 2)),
        ('CPL', RouteBand(15, 40, 3)),
        ('ATPL', RouteBand(30, 80, 4)),
        ('DISCOVERY', RouteBand(5, 15, 1)),
    ])
    def test_band_by_code(self, code, band):
        assert route_band_for(LicenseType(code=code)) == band

    def test_type_rating_band(self):
        license_type = LicenseType(code='TYPE_A320', category=LicenseCategory.TYPE_RATING)

        assert route_band_for(license_type) == RouteBand(15, 50, 3)

    def test_unknown_code_uses_default_band(self):
        assert route_band_for(LicenseType(code='SEAPLANE', category=LicenseCategory.ENDORSEMENT)) == (
            RouteBand(10, 30, 2)
        )


class TestBoundingBox:

    def test_box_at_equator(self):
        box = BoundingBox.around(0.0, 10.0, 30)

        assert box.min_latitude == pytest.approx(-0.5)
        assert box.max_latitude == pytest.approx(0.5)
        assert box.min_longitude == pytest.approx(9.5)
        assert box.max_longitude == pytest.approx(10.5)

    def test_longitude_range_widens_with_latitude(self):
        box = BoundingBox.around(60.0, 0.0, 30)

        assert box.max_latitude - box.min_latitude == pytest.approx(1.0)
        assert box.max_longitude == pytest.approx(30 / (60.0 * math.cos(math.radians(60.0))))
        assert box.max_longitude == pytest.approx(1.0)


@pytest.mark.django_db
class TestAirportDirectory:

    def test_find_by_code_is_case_insensitive(self, airports):
        assert AirportDirectory().find_by_code('kaaa') == airports['KAAA']
        assert AirportDirectory().find_by_code('XXXX') is None

    def test_find_near_ranks_by_distance(self, airports):
        home = airports['KHOM']
        box = BoundingBox.around(home.latitude, home.longitude, 40)

        nearby = AirportDirectory().find_near(
            home.latitude,
            home.longitude,
            box,
            [AirportType.LARGE, AirportType.MEDIUM, AirportType.SMALL],
            limit=10,
            exclude_id=home.id,
        )

        assert [airport.ident for airport in nearby] == ['KAAA', 'KBBB', 'KCCC']

    def test_find_near_ties_broken_by_ident(self, airports):
        from apps.core.models import Airport

        Airport.objects.create(ident='KAAB', name='Alpha Two', type=AirportType.SMALL, latitude=39.9, longitude=-75.0)
        home = airports['KHOM']
        box = BoundingBox.around(home.latitude, home.longitude, 30)

        nearby = AirportDirectory().find_near(
            home.latitude, home.longitude, box, [AirportType.SMALL], limit=2, exclude_id=home.id
        )

        assert [airport.ident for airport in nearby] == ['KAAA', 'KAAB']


@pytest.mark.django_db
class TestRouteGenerator:

    def test_closed_loop_route(self, airports, license_types):
        route = RouteGenerator().generate(license_types['PPL'], airports['KHOM'])

        assert [waypoint.name for waypoint in route] == ['KHOM', 'KAAA', 'KBBB', 'KHOM']
        assert route[0] == route[-1]
        assert all(waypoint.is_airport for waypoint in route)

    def test_heliports_are_never_stops(self, airports, license_types):
        route = RouteGenerator().generate(license_types['CPL'], airports['KHOM'])

        assert 'KHEL' not in [waypoint.name for waypoint in route]

    def test_isolated_departure_returns_home(self, airports, license_types):
        route = RouteGenerator().generate(license_types['PPL'], airports['KFAR'])

        assert [waypoint.name for waypoint in route] == ['KFAR', 'KFAR']

    def test_discovery_route_has_one_stop(self, airports):
        discovery = LicenseType.objects.create(code='DISCOVERY', name='Discovery Flight', base_exam_cost=100)

        route = RouteGenerator().generate(discovery, airports['KHOM'])

        assert [waypoint.name for waypoint in route] == ['KHOM', 'KAAA', 'KHOM']


class TestRouteSerialization:

    def test_waypoint_record_shape(self):
        waypoint = Waypoint(name='KHOM', latitude=40.0, longitude=-75.0)

        assert serialize_route([waypoint]) == [
            {'name': 'KHOM', 'latitude': 40.0, 'longitude': -75.0, 'isAirport': True}
        ]

    def test_round_trip_preserves_order(self):
        route = [
            Waypoint('KHOM', 40.0, -75.0),
            Waypoint('VOR1', 40.2, -75.1, is_airport=False),
            Waypoint('KHOM', 40.0, -75.0),
        ]

        assert deserialize_route(serialize_route(route)) == route

    def test_missing_route(self):
        assert deserialize_route(None) == []
