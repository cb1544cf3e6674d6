# services/licensing-service/src/apps/core/api/views/exam_views.py
"""
Exam Views

REST API views for scheduling exams, the exam state machine and the
telemetry recorded while an exam is flown.
"""

import logging

from rest_framework import status
from rest_framework.decorators import action
from rest_framework.response import Response

from apps.core.api.serializers import (
    CheckpointReachSerializer,
    ExamCheckpointSerializer,
    ExamDetailSerializer,
    ExamHistoryQuerySerializer,
    ExamLandingSerializer,
    ExamListSerializer,
    ExamManeuverSerializer,
    ExamResultSerializer,
    ExamScheduleSerializer,
    ExamStartSerializer,
    ExamViolationSerializer,
    LandingInputSerializer,
    ManeuverResultInputSerializer,
    ViolationInputSerializer,
)
from .base import BaseLicensingViewSet

logger = logging.getLogger(__name__)


def tracking_response(result, record_serializer_class, created_status=status.HTTP_200_OK):
    """Serialize a TrackingResult; recorded results use `created_status`."""
    return Response(
        {
            'status': result.status,
            'reason': result.reason,
            'exam_failed': result.exam_failed,
            'record': record_serializer_class(result.record).data if result.record is not None else None,
        },
        status=created_status if result.is_recorded else status.HTTP_200_OK
    )


class ExamViewSet(BaseLicensingViewSet):
    """
    ViewSet for exam operations.

    Provides scheduling, state transitions and telemetry recording.
    """

    lookup_value_regex = '[0-9a-fA-F-]+'

    def retrieve(self, request, pk=None):
        """
        Exam with maneuvers, checkpoints, landings and violations.

        GET /api/v1/licensing/exams/{id}/
        """
        exam_id = self.get_owned_exam_id(pk)
        exam = self.exam_service.get_exam(exam_id)
        return Response(ExamDetailSerializer(exam).data)

    @action(detail=False, methods=['post'])
    def schedule(self, request):
        """
        Schedule an exam.

        POST /api/v1/licensing/exams/schedule/
        """
        serializer = ExamScheduleSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        player_world = self.get_player_world(data['world_id'])

        exam = self.exam_service.schedule_exam(
            player_world.id,
            data['license_code'],
            data['departure_icao']
        )

        exam = self.exam_service.get_exam(exam.id)
        return Response(ExamDetailSerializer(exam).data, status=status.HTTP_201_CREATED)

    # ==========================================================================
    # State Transitions
    # ==========================================================================

    @action(detail=True, methods=['post'])
    def start(self, request, pk=None):
        """
        POST /api/v1/licensing/exams/{id}/start/
        """
        exam_id = self.get_owned_exam_id(pk)

        serializer = ExamStartSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        exam = self.exam_service.start_exam(exam_id, serializer.validated_data['aircraft_used'])
        return Response(ExamListSerializer(exam).data)

    @action(detail=True, methods=['post'])
    def complete(self, request, pk=None):
        """
        POST /api/v1/licensing/exams/{id}/complete/
        """
        exam_id = self.get_owned_exam_id(pk)

        result = self.exam_service.complete_exam(exam_id)
        result.exam = self.exam_service.get_exam(exam_id)

        return Response(ExamResultSerializer(result).data)

    @action(detail=True, methods=['post'])
    def abandon(self, request, pk=None):
        """
        POST /api/v1/licensing/exams/{id}/abandon/
        """
        exam_id = self.get_owned_exam_id(pk)
        exam = self.exam_service.abandon_exam(exam_id)
        return Response(ExamListSerializer(exam).data)

    # ==========================================================================
    # Telemetry
    # ==========================================================================

    @action(detail=True, methods=['post'])
    def violations(self, request, pk=None):
        """
        POST /api/v1/licensing/exams/{id}/violations/
        """
        exam_id = self.get_owned_exam_id(pk)

        serializer = ViolationInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = self.tracking_service.record_violation(exam_id, **serializer.validated_data)
        return tracking_response(result, ExamViolationSerializer, status.HTTP_201_CREATED)

    @action(detail=True, methods=['post'])
    def landings(self, request, pk=None):
        """
        POST /api/v1/licensing/exams/{id}/landings/
        """
        exam_id = self.get_owned_exam_id(pk)

        serializer = LandingInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = self.tracking_service.record_landing(exam_id, **serializer.validated_data)
        return tracking_response(result, ExamLandingSerializer, status.HTTP_201_CREATED)

    @action(detail=True, methods=['post'], url_path=r'checkpoints/(?P<order>\d+)')
    def checkpoints(self, request, pk=None, order=None):
        """
        POST /api/v1/licensing/exams/{id}/checkpoints/{order}/
        """
        exam_id = self.get_owned_exam_id(pk)

        serializer = CheckpointReachSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = self.tracking_service.reach_checkpoint(
            exam_id,
            int(order),
            serializer.validated_data['altitude_ft'],
            serializer.validated_data['speed_kts']
        )
        return tracking_response(result, ExamCheckpointSerializer)

    @action(detail=True, methods=['post'], url_path=r'maneuvers/(?P<order>\d+)')
    def maneuvers(self, request, pk=None, order=None):
        """
        POST /api/v1/licensing/exams/{id}/maneuvers/{order}/
        """
        exam_id = self.get_owned_exam_id(pk)

        serializer = ManeuverResultInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = self.tracking_service.record_maneuver_result(
            exam_id, int(order), **serializer.validated_data
        )
        return tracking_response(result, ExamManeuverSerializer)


class PlayerExamViewSet(BaseLicensingViewSet):
    """
    Exam history for a player in a world.
    """

    def list(self, request, world_id=None):
        """
        Most recent exams first.

        GET /api/v1/licensing/worlds/{world_id}/exams/?limit=
        """
        player_world = self.get_player_world()

        query = ExamHistoryQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)

        exams = self.exam_service.get_player_exams(
            player_world.id,
            limit=query.validated_data.get('limit')
        )
        return Response(ExamListSerializer(exams, many=True).data)

    @action(detail=False, methods=['get'])
    def active(self, request, world_id=None):
        """
        The exam currently Scheduled or InProgress, if any.

        GET /api/v1/licensing/worlds/{world_id}/exams/active/
        """
        player_world = self.get_player_world()

        exam = self.exam_service.get_active_exam(player_world.id)
        if exam is None:
            return Response(status=status.HTTP_204_NO_CONTENT)

        exam = self.exam_service.get_exam(exam.id)
        return Response(ExamDetailSerializer(exam).data)
