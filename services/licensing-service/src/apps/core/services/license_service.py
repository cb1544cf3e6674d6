# services/licensing-service/src/apps/core/services/license_service.py
"""
License Service

License catalog queries and the per-player license ledger: granting,
renewing, revoking and expiring UserLicense records.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from django.db import transaction
from django.utils import timezone

from apps.core.conf import game_days_to_real_time
from apps.core.events import EventPublisher, event_publisher
from apps.core.models import (
    LicenseExam,
    LicenseType,
    PlayerWorld,
    UserLicense,
)
from .exceptions import (
    InsufficientFundsError,
    LicenseNotFoundError,
    LicenseNotRenewableError,
    LicenseRevokedError,
    PlayerWorldNotFoundError,
)
from .prerequisites import PrerequisiteCheck, resolve_prerequisites

logger = logging.getLogger(__name__)


@dataclass
class RenewalResult:
    license: UserLicense
    cost: Decimal


@dataclass
class LicenseShopItem:
    """One catalog entry as seen by a particular player."""
    license_type: LicenseType
    is_owned: bool
    expires_at: Optional[datetime]
    can_take_exam: bool
    has_prerequisites: bool
    missing_prerequisites: List[str] = field(default_factory=list)
    is_on_cooldown: bool = False
    cooldown_ends_at: Optional[datetime] = None
    exam_cost: Decimal = Decimal('0')
    renewal_cost: Optional[Decimal] = None
    can_renew: bool = False


class LicenseService:
    """
    Service for the license catalog and ledger.
    """

    def __init__(self, publisher: Optional[EventPublisher] = None):
        self.events = publisher or event_publisher

    # ==========================================================================
    # Catalog
    # ==========================================================================

    def get_license_types(self, include_inactive: bool = False) -> List[LicenseType]:
        queryset = LicenseType.objects.all()
        if not include_inactive:
            queryset = queryset.filter(is_active=True)
        return list(queryset.order_by('display_order', 'name'))

    def get_license_type_by_code(self, code: str) -> Optional[LicenseType]:
        return LicenseType.objects.filter(code__iexact=code.strip()).first()

    # ==========================================================================
    # Ledger queries
    # ==========================================================================

    def get_player_licenses(self, player_world_id: UUID) -> List[UserLicense]:
        return list(
            UserLicense.objects
            .filter(player_world_id=player_world_id)
            .select_related('license_type')
            .order_by('-earned_at')
        )

    def get_valid_player_licenses(
        self,
        player_world_id: UUID,
        now: Optional[datetime] = None
    ) -> List[UserLicense]:
        now = now or timezone.now()
        return list(
            UserLicense.objects
            .filter(player_world_id=player_world_id)
            .valid(now)
            .select_related('license_type')
            .order_by('license_type__display_order', 'license_type__name')
        )

    def has_valid_license(
        self,
        player_world_id: UUID,
        license_code: str,
        now: Optional[datetime] = None
    ) -> bool:
        now = now or timezone.now()
        return UserLicense.objects.filter(
            player_world_id=player_world_id,
            license_type__code__iexact=license_code,
        ).valid(now).exists()

    def check_prerequisites(
        self,
        player_world_id: UUID,
        license_type: LicenseType,
        now: Optional[datetime] = None
    ) -> PrerequisiteCheck:
        now = now or timezone.now()
        if not license_type.prerequisites:
            return PrerequisiteCheck(satisfied=True)
        return resolve_prerequisites(
            self.get_valid_player_licenses(player_world_id, now),
            license_type,
            now
        )

    # ==========================================================================
    # Ledger mutations
    # ==========================================================================

    @transaction.atomic
    def grant_license(
        self,
        player_world_id: UUID,
        license_type: LicenseType,
        passed_exam: LicenseExam,
        now: Optional[datetime] = None
    ) -> UserLicense:
        """
        Issue a license for a passed exam.

        A player holds at most one row per license type, so passing again
        renews the existing row instead of inserting a new one.

        Args:
            player_world_id: Player career receiving the license
            license_type: License type that was examined
            passed_exam: The exam that was passed
            now: Current time

        Returns:
            The new or renewed UserLicense
        """
        now = now or timezone.now()
        expires_at = self._expiry_from(license_type, now)

        existing = (
            UserLicense.objects
            .select_for_update()
            .filter(player_world_id=player_world_id, license_type=license_type)
            .first()
        )

        if existing is not None:
            existing.last_renewed_at = now
            existing.renewal_count += 1
            existing.clear_revocation()
            existing.expires_at = expires_at
            existing.exam_score = passed_exam.score
            existing.passed_exam = passed_exam
            existing.total_paid += passed_exam.fee_paid
            existing.save()

            logger.info(
                f"Renewed license {license_type.code} for player {player_world_id} by passing exam",
                extra={'player_world_id': str(player_world_id), 'license_code': license_type.code}
            )
            self.events.license_granted(existing)
            return existing

        attempts = LicenseExam.objects.for_license(player_world_id, license_type).count()

        user_license = UserLicense.objects.create(
            player_world_id=player_world_id,
            license_type=license_type,
            earned_at=now,
            expires_at=expires_at,
            is_valid=True,
            exam_score=passed_exam.score,
            exam_attempts=attempts,
            total_paid=passed_exam.fee_paid,
            passed_exam=passed_exam,
        )

        logger.info(
            f"Granted license {license_type.code} to player {player_world_id} with score {passed_exam.score}",
            extra={'player_world_id': str(player_world_id), 'license_code': license_type.code}
        )
        self.events.license_granted(user_license)
        return user_license

    def renew_license(
        self,
        player_world_id: UUID,
        license_id: UUID,
        now: Optional[datetime] = None
    ) -> RenewalResult:
        """
        Pay to extend a license.

        Raises:
            LicenseNotFoundError: No such license for this player
            LicenseRevokedError: License was revoked
            LicenseNotRenewableError: License type is permanent
            InsufficientFundsError: Balance below the renewal cost
        """
        now = now or timezone.now()

        with transaction.atomic():
            user_license = (
                UserLicense.objects
                .select_for_update()
                .select_related('license_type')
                .filter(id=license_id, player_world_id=player_world_id)
                .first()
            )
            if user_license is None:
                raise LicenseNotFoundError(license_id)

            if user_license.is_revoked:
                raise LicenseRevokedError(license_id)

            license_type = user_license.license_type
            if license_type.base_renewal_cost is None:
                raise LicenseNotRenewableError(license_type.code)

            player_world = self._lock_player_world(player_world_id)
            cost = license_type.renewal_cost(player_world.world.license_cost_multiplier)

            if player_world.balance < cost:
                raise InsufficientFundsError(cost, player_world.balance)

            player_world.balance -= cost
            player_world.save(update_fields=['balance'])

            user_license.last_renewed_at = now
            user_license.renewal_count += 1
            user_license.clear_revocation()
            user_license.total_paid += cost
            if license_type.validity_game_days is not None:
                user_license.expires_at = now + game_days_to_real_time(license_type.validity_game_days)
            user_license.save()

        logger.info(
            f"Renewed license {license_id} for player {player_world_id}, cost: ${cost}",
            extra={'player_world_id': str(player_world_id), 'license_code': license_type.code}
        )
        self.events.license_renewed(user_license, cost)
        return RenewalResult(license=user_license, cost=cost)

    def revoke_license(
        self,
        license_id: UUID,
        reason: str,
        now: Optional[datetime] = None
    ) -> UserLicense:
        now = now or timezone.now()

        user_license = UserLicense.objects.filter(id=license_id).first()
        if user_license is None:
            raise LicenseNotFoundError(license_id)

        user_license.revoke(reason, now)
        user_license.save()

        logger.warning(
            f"Revoked license {license_id} for reason: {reason}",
            extra={'player_world_id': str(user_license.player_world_id)}
        )
        self.events.license_revoked(user_license)
        return user_license

    def expire_overdue_licenses(self, now: Optional[datetime] = None) -> int:
        """
        Clear the validity flag on every license past its expiry.

        Safe to run repeatedly; already expired rows are skipped.

        Returns:
            Number of licenses expired by this run
        """
        now = now or timezone.now()

        with transaction.atomic():
            overdue = list(
                UserLicense.objects.overdue(now).values_list('id', 'player_world_id')
            )
            expired = UserLicense.objects.filter(
                id__in=[license_id for license_id, _ in overdue]
            ).update(is_valid=False, updated_at=now)

        for license_id, player_world_id in overdue:
            self.events.license_expired(license_id, player_world_id)

        if expired:
            logger.info(f"Expired {expired} overdue licenses")
        return expired

    # ==========================================================================
    # Shop
    # ==========================================================================

    def get_license_shop(
        self,
        player_world_id: UUID,
        now: Optional[datetime] = None
    ) -> List[LicenseShopItem]:
        """Every active license type with the player's eligibility for it."""
        now = now or timezone.now()

        player_world = (
            PlayerWorld.objects.select_related('world').filter(id=player_world_id).first()
        )
        if player_world is None:
            raise PlayerWorldNotFoundError(player_world_id)

        multiplier = player_world.world.license_cost_multiplier
        valid_licenses = self.get_valid_player_licenses(player_world_id, now)
        owned = {user_license.license_type_id: user_license for user_license in valid_licenses}

        items = []
        for license_type in self.get_license_types():
            existing = owned.get(license_type.id)
            prerequisites = resolve_prerequisites(valid_licenses, license_type, now)

            last_failed = LicenseExam.objects.for_license(player_world_id, license_type).last_failed()
            cooldown_ends_at = last_failed.eligible_for_retake_at if last_failed else None
            on_cooldown = cooldown_ends_at is not None and cooldown_ends_at > now

            items.append(LicenseShopItem(
                license_type=license_type,
                is_owned=existing is not None,
                expires_at=existing.expires_at if existing else None,
                can_take_exam=existing is None and prerequisites.satisfied and not on_cooldown,
                has_prerequisites=prerequisites.satisfied,
                missing_prerequisites=prerequisites.missing,
                is_on_cooldown=on_cooldown,
                cooldown_ends_at=cooldown_ends_at,
                exam_cost=license_type.exam_cost(multiplier),
                renewal_cost=license_type.renewal_cost(multiplier),
                can_renew=existing is not None and existing.expires_at is not None,
            ))

        return items

    # ==========================================================================
    # Helpers
    # ==========================================================================

    @staticmethod
    def _expiry_from(license_type: LicenseType, now: datetime) -> Optional[datetime]:
        if license_type.validity_game_days is None:
            return None
        return now + game_days_to_real_time(license_type.validity_game_days)

    @staticmethod
    def _lock_player_world(player_world_id: UUID) -> PlayerWorld:
        player_world = (
            PlayerWorld.objects
            .select_for_update()
            .select_related('world')
            .filter(id=player_world_id)
            .first()
        )
        if player_world is None:
            raise PlayerWorldNotFoundError(player_world_id)
        return player_world
