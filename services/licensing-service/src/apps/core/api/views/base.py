# services/licensing-service/src/apps/core/api/views/base.py
"""
Base Views and Mixins

Common functionality for Licensing Service API views.
"""

import logging
from uuid import UUID

from django.utils.functional import cached_property
from rest_framework import status
from rest_framework.response import Response
from rest_framework.viewsets import ViewSet

from shared.common.exceptions import BadRequestException, error_payload
from apps.core.models import LicenseExam, PlayerWorld
from apps.core.services import ExamService, ExamTrackingService, LicenseService
from apps.core.services.exceptions import (
    ConflictError,
    ExamCooldownError,
    ExamExpiredError,
    ExamNotFoundError,
    InsufficientFundsError,
    LicensingServiceError,
    NotFoundError,
    PlayerWorldNotFoundError,
    PrerequisitesNotMetError,
)

logger = logging.getLogger(__name__)


def parse_uuid(value, field: str) -> UUID:
    try:
        return UUID(str(value))
    except (TypeError, ValueError):
        raise BadRequestException(
            detail=f"Invalid {field} format",
            error_code='INVALID_IDENTIFIER',
            details={field: ['Must be a valid UUID.']}
        )


class PlayerContextMixin:
    """
    Mixin for resolving the acting player.

    The user comes from the bearer token `sub` claim; the world from
    the `world_id` URL segment or request body.
    """

    def get_user_id(self) -> UUID:
        return parse_uuid(getattr(self.request.user, 'id', None), 'user_id')

    def get_player_world(self, world_id=None) -> PlayerWorld:
        """
        Resolve the player's career in a world.

        Raises:
            PlayerWorldNotFoundError: The user has not joined this world
        """
        if world_id is None:
            world_id = self.kwargs.get('world_id')
        world_id = parse_uuid(world_id, 'world_id')

        player_world = (
            PlayerWorld.objects
            .select_related('world')
            .filter(user_id=self.get_user_id(), world_id=world_id, is_active=True)
            .first()
        )
        if player_world is None:
            raise PlayerWorldNotFoundError(world_id)
        return player_world

    def get_owned_exam_id(self, pk) -> UUID:
        """Exam id from the URL, checked to belong to the acting user."""
        exam_id = parse_uuid(pk, 'exam_id')
        owned = LicenseExam.objects.filter(
            id=exam_id,
            player_world__user_id=self.get_user_id()
        ).exists()
        if not owned:
            raise ExamNotFoundError(exam_id)
        return exam_id


# Most specific first
EXCEPTION_STATUS_CODES = (
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ConflictError, status.HTTP_409_CONFLICT),
    (PrerequisitesNotMetError, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (InsufficientFundsError, status.HTTP_402_PAYMENT_REQUIRED),
    (ExamCooldownError, status.HTTP_429_TOO_MANY_REQUESTS),
    (ExamExpiredError, status.HTTP_410_GONE),
    (LicensingServiceError, status.HTTP_400_BAD_REQUEST),
)


class ExceptionHandlerMixin:
    """Mixin for handling service layer exceptions."""

    def handle_exception(self, exc):
        """Convert service exceptions to appropriate HTTP responses."""
        for exc_class, status_code in EXCEPTION_STATUS_CODES:
            if isinstance(exc, exc_class):
                request_id = getattr(self.request, 'request_id', None)
                logger.info(f"{exc.code}: {exc.message}", extra={'request_id': request_id})
                return Response(
                    error_payload(exc.code, exc.message, exc.details, request_id),
                    status=status_code
                )

        return super().handle_exception(exc)


class BaseLicensingViewSet(
    PlayerContextMixin,
    ExceptionHandlerMixin,
    ViewSet
):
    """
    Base ViewSet for Licensing Service.

    Provides player resolution, service access and exception handling.
    """

    @cached_property
    def license_service(self) -> LicenseService:
        return LicenseService()

    @cached_property
    def exam_service(self) -> ExamService:
        return ExamService(license_service=self.license_service)

    @cached_property
    def tracking_service(self) -> ExamTrackingService:
        return ExamTrackingService(exam_service=self.exam_service)
