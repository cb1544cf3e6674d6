# services/licensing-service/src/apps/core/events.py
"""
Licensing Service Events

Domain events for exams and licenses.
Uses Redis pub/sub for inter-service communication; the memory backend
keeps events in-process for development and tests.
"""

import json
import logging
from datetime import datetime, date, timezone
from decimal import Decimal
from typing import Any, Dict, List, Optional
from uuid import UUID

import redis
from django.conf import settings
from django.db import transaction

logger = logging.getLogger(__name__)


class DateTimeEncoder(json.JSONEncoder):
    """JSON encoder for datetime, UUID and Decimal values."""

    def default(self, obj):
        if isinstance(obj, (datetime, date)):
            return obj.isoformat()
        if isinstance(obj, UUID):
            return str(obj)
        if isinstance(obj, Decimal):
            return str(obj)
        return super().default(obj)


class EventTypes:
    """Licensing service event type definitions."""

    # Exam events
    EXAM_SCHEDULED = 'exam.scheduled'
    EXAM_STARTED = 'exam.started'
    EXAM_PASSED = 'exam.passed'
    EXAM_FAILED = 'exam.failed'
    EXAM_ABANDONED = 'exam.abandoned'
    EXAM_EXPIRED = 'exam.expired'

    # License events
    LICENSE_GRANTED = 'license.granted'
    LICENSE_RENEWED = 'license.renewed'
    LICENSE_REVOKED = 'license.revoked'
    LICENSE_EXPIRED = 'license.expired'


class EventPublisher:
    """
    Event publisher for licensing service.
    """

    def __init__(self, backend: Optional[str] = None):
        self._backend = backend
        self._redis_client = None
        self._channel_prefix = 'licensing_service'
        self.published: List[Dict[str, Any]] = []

    @property
    def backend(self) -> str:
        return self._backend or getattr(settings, 'EVENT_BACKEND', 'redis')

    @property
    def redis_client(self):
        """Lazy load Redis client."""
        if self._redis_client is None:
            self._redis_client = redis.from_url(
                settings.REDIS_URL,
                decode_responses=True
            )
        return self._redis_client

    def publish(
        self,
        event_type: str,
        data: Dict[str, Any],
        player_world_id: Optional[UUID] = None
    ) -> bool:
        """
        Publish an event.

        Args:
            event_type: Type of event
            data: Event data
            player_world_id: Player career the event belongs to

        Returns:
            bool: True once the event is recorded or queued for sending
        """
        event = {
            'event_type': event_type,
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'service': 'licensing-service',
            'player_world_id': str(player_world_id) if player_world_id else None,
            'data': data
        }

        if self.backend == 'memory':
            self.published.append(json.loads(json.dumps(event, cls=DateTimeEncoder)))
            logger.debug(f"Recorded event: {event_type}")
            return True

        channel = f"{self._channel_prefix}:{event_type}"
        message = json.dumps(event, cls=DateTimeEncoder)

        # Sent once the surrounding transaction commits; immediately outside one.
        transaction.on_commit(lambda: self._send(event_type, channel, message))
        return True

    def _send(self, event_type: str, channel: str, message: str) -> None:
        try:
            self.redis_client.publish(channel, message)
        except redis.RedisError as e:
            logger.error(f"Failed to publish event {event_type}: {e}")
            return

        logger.info(f"Published event: {event_type}")

    def clear(self) -> None:
        self.published.clear()

    def events_of_type(self, event_type: str) -> List[Dict[str, Any]]:
        return [event for event in self.published if event['event_type'] == event_type]

    # Exam event publishers
    def exam_scheduled(self, exam) -> bool:
        return self.publish(
            EventTypes.EXAM_SCHEDULED,
            {
                'exam_id': exam.id,
                'license_code': exam.license_type.code,
                'attempt_number': exam.attempt_number,
                'fee_paid': exam.fee_paid,
                'departure_icao': exam.departure_icao,
            },
            player_world_id=exam.player_world_id
        )

    def exam_started(self, exam) -> bool:
        return self.publish(
            EventTypes.EXAM_STARTED,
            {
                'exam_id': exam.id,
                'aircraft_used': exam.aircraft_used,
                'started_at': exam.started_at,
            },
            player_world_id=exam.player_world_id
        )

    def exam_finished(self, exam) -> bool:
        """Publish the terminal outcome of an exam."""
        event_type = {
            'passed': EventTypes.EXAM_PASSED,
            'failed': EventTypes.EXAM_FAILED,
            'abandoned': EventTypes.EXAM_ABANDONED,
            'expired': EventTypes.EXAM_EXPIRED,
        }[exam.status]
        return self.publish(
            event_type,
            {
                'exam_id': exam.id,
                'license_type_id': exam.license_type_id,
                'score': exam.score,
                'failure_reason': exam.failure_reason,
                'eligible_for_retake_at': exam.eligible_for_retake_at,
            },
            player_world_id=exam.player_world_id
        )

    # License event publishers
    def license_granted(self, user_license) -> bool:
        return self.publish(
            EventTypes.LICENSE_GRANTED,
            {
                'license_id': user_license.id,
                'license_type_id': user_license.license_type_id,
                'expires_at': user_license.expires_at,
                'renewal_count': user_license.renewal_count,
            },
            player_world_id=user_license.player_world_id
        )

    def license_renewed(self, user_license, cost: Decimal) -> bool:
        return self.publish(
            EventTypes.LICENSE_RENEWED,
            {
                'license_id': user_license.id,
                'expires_at': user_license.expires_at,
                'renewal_count': user_license.renewal_count,
                'cost': cost,
            },
            player_world_id=user_license.player_world_id
        )

    def license_revoked(self, user_license) -> bool:
        return self.publish(
            EventTypes.LICENSE_REVOKED,
            {
                'license_id': user_license.id,
                'reason': user_license.revocation_reason,
            },
            player_world_id=user_license.player_world_id
        )

    def license_expired(self, license_id: UUID, player_world_id: UUID) -> bool:
        return self.publish(
            EventTypes.LICENSE_EXPIRED,
            {'license_id': license_id},
            player_world_id=player_world_id
        )


# Global event publisher instance
event_publisher = EventPublisher()
