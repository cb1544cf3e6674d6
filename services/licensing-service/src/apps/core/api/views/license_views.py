# services/licensing-service/src/apps/core/api/views/license_views.py
"""
License Views

REST API views for the license catalog, the player's licenses and the
license shop.
"""

import logging

from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import mixins, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from shared.common.exceptions import NotFoundException
from shared.common.pagination import StandardPagination
from apps.core.models import LicenseType
from apps.core.api.serializers import (
    LicenseCheckSerializer,
    LicenseRenewalSerializer,
    LicenseShopItemSerializer,
    LicenseTypeSerializer,
    UserLicenseSerializer,
)
from .base import BaseLicensingViewSet, ExceptionHandlerMixin, parse_uuid

logger = logging.getLogger(__name__)


class LicenseTypeViewSet(
    ExceptionHandlerMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet
):
    """
    Read-only license catalog.

    GET /api/v1/licensing/license-types/
    GET /api/v1/licensing/license-types/{code}/
    """

    queryset = LicenseType.objects.filter(is_active=True).order_by('display_order', 'name')
    serializer_class = LicenseTypeSerializer
    pagination_class = StandardPagination
    filter_backends = [DjangoFilterBackend]
    filterset_fields = ['category', 'required_aircraft_category']
    lookup_field = 'code'


class PlayerLicenseViewSet(BaseLicensingViewSet):
    """
    ViewSet for the licenses a player holds in a world.
    """

    def list(self, request, world_id=None):
        """
        List all licenses, including expired and revoked ones.

        GET /api/v1/licensing/worlds/{world_id}/licenses/
        """
        player_world = self.get_player_world()
        licenses = self.license_service.get_player_licenses(player_world.id)
        return Response(UserLicenseSerializer(licenses, many=True).data)

    @action(detail=False, methods=['get'], url_path=r'check/(?P<code>[^/.]+)')
    def check(self, request, world_id=None, code=None):
        """
        Whether the player holds a currently valid license of a type.

        GET /api/v1/licensing/worlds/{world_id}/licenses/check/{code}/
        """
        player_world = self.get_player_world()

        license_type = self.license_service.get_license_type_by_code(code)
        if license_type is None:
            raise NotFoundException(
                detail=f"License type '{code}' not found",
                error_code='LICENSE_TYPE_NOT_FOUND'
            )

        serializer = LicenseCheckSerializer({
            'license_code': license_type.code,
            'has_license': self.license_service.has_valid_license(player_world.id, license_type.code),
        })
        return Response(serializer.data)

    @action(detail=True, methods=['post'])
    def renew(self, request, world_id=None, pk=None):
        """
        Pay to renew a license.

        POST /api/v1/licensing/worlds/{world_id}/licenses/{id}/renew/
        """
        player_world = self.get_player_world()
        license_id = parse_uuid(pk, 'license_id')

        result = self.license_service.renew_license(player_world.id, license_id)

        return Response(LicenseRenewalSerializer(result).data)


class LicenseShopViewSet(BaseLicensingViewSet):
    """
    License shop: every active license type with the player's
    eligibility, cooldown and costs.
    """

    def list(self, request, world_id=None):
        """
        GET /api/v1/licensing/worlds/{world_id}/shop/
        """
        player_world = self.get_player_world()
        items = self.license_service.get_license_shop(player_world.id)
        return Response(LicenseShopItemSerializer(items, many=True).data)
