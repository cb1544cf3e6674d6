# services/licensing-service/src/apps/core/models/license.py
"""
License Models

The license catalog (LicenseType) and the per-player ledger (UserLicense).
"""

import uuid
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional

from django.db import models
from django.db.models import Q

CENT = Decimal('0.01')


class LicenseCategory(models.TextChoices):
    """Kinds of license in the catalog."""
    CORE = 'core', 'Core License'
    ENDORSEMENT = 'endorsement', 'Endorsement'
    TYPE_RATING = 'type_rating', 'Type Rating'
    CERTIFICATION = 'certification', 'Certification'


class AircraftCategory(models.TextChoices):
    """Aircraft categories an exam can require."""
    SEP = 'sep', 'Single Engine Piston'
    MEP = 'mep', 'Multi Engine Piston'
    TURBOPROP = 'turboprop', 'Turboprop'
    REGIONAL_JET = 'regional_jet', 'Regional Jet'
    NARROW_BODY = 'narrow_body', 'Narrow Body'
    WIDE_BODY = 'wide_body', 'Wide Body'
    HELICOPTER = 'helicopter', 'Helicopter'


class LicenseType(models.Model):
    """
    Catalog definition of an earnable license.

    Reference data maintained through the admin; gameplay never edits it.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    code = models.CharField(max_length=30, unique=True)
    name = models.CharField(max_length=100)
    description = models.TextField(blank=True, null=True)
    category = models.CharField(
        max_length=20,
        choices=LicenseCategory.choices,
        default=LicenseCategory.CORE
    )

    # Exam configuration
    base_exam_cost = models.DecimalField(max_digits=12, decimal_places=2)
    exam_duration_minutes = models.PositiveIntegerField(default=60)
    passing_score = models.PositiveSmallIntegerField(default=70)
    required_aircraft_category = models.CharField(
        max_length=20,
        choices=AircraftCategory.choices,
        blank=True,
        null=True
    )
    required_aircraft_type = models.CharField(max_length=50, blank=True, null=True)

    # Validity, null means permanent
    validity_game_days = models.PositiveIntegerField(blank=True, null=True)
    base_renewal_cost = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        blank=True,
        null=True
    )

    # Codes of licenses that must be held before the exam can be scheduled
    prerequisite_codes = models.JSONField(default=list, blank=True)

    display_order = models.IntegerField(default=0)
    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'license_types'
        ordering = ['display_order', 'name']

    def __str__(self):
        return f"{self.code} - {self.name}"

    @property
    def is_permanent(self) -> bool:
        return self.validity_game_days is None

    @property
    def prerequisites(self) -> List[str]:
        """Prerequisite codes, normalised to upper case."""
        return [code.upper() for code in (self.prerequisite_codes or [])]

    def exam_cost(self, multiplier: Decimal) -> Decimal:
        return (self.base_exam_cost * multiplier).quantize(CENT, rounding=ROUND_HALF_UP)

    def renewal_cost(self, multiplier: Decimal) -> Optional[Decimal]:
        if self.base_renewal_cost is None:
            return None
        return (self.base_renewal_cost * multiplier).quantize(CENT, rounding=ROUND_HALF_UP)


class UserLicenseQuerySet(models.QuerySet):
    """Ledger queries."""

    def valid(self, now: datetime):
        """Licenses that are flagged valid, not revoked and not past expiry."""
        return self.filter(
            is_valid=True,
            is_revoked=False,
        ).filter(
            Q(expires_at__isnull=True) | Q(expires_at__gt=now)
        )

    def overdue(self, now: datetime):
        """Licenses still flagged valid whose expiry has passed."""
        return self.filter(
            is_valid=True,
            is_revoked=False,
            expires_at__lt=now,
        )


class UserLicense(models.Model):
    """
    Ledger entry for a license held by a player.

    One row per (player, license type); renewals reuse the row and
    rows are never deleted.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    player_world = models.ForeignKey(
        'core.PlayerWorld',
        on_delete=models.CASCADE,
        related_name='licenses'
    )
    license_type = models.ForeignKey(
        LicenseType,
        on_delete=models.PROTECT,
        related_name='+'
    )

    earned_at = models.DateTimeField()
    expires_at = models.DateTimeField(blank=True, null=True, db_index=True)
    last_renewed_at = models.DateTimeField(blank=True, null=True)
    renewal_count = models.PositiveIntegerField(default=0)

    is_valid = models.BooleanField(default=True)
    is_revoked = models.BooleanField(default=False)
    revocation_reason = models.CharField(max_length=500, blank=True, null=True)
    revoked_at = models.DateTimeField(blank=True, null=True)

    exam_score = models.PositiveSmallIntegerField(default=0)
    exam_attempts = models.PositiveIntegerField(default=0)
    total_paid = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    passed_exam = models.ForeignKey(
        'core.LicenseExam',
        on_delete=models.SET_NULL,
        blank=True,
        null=True,
        related_name='+'
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = UserLicenseQuerySet.as_manager()

    class Meta:
        db_table = 'user_licenses'
        ordering = ['-earned_at']
        constraints = [
            models.UniqueConstraint(
                fields=['player_world', 'license_type'],
                name='unique_license_per_player'
            ),
        ]

    def __str__(self):
        return f"{self.license_type.code} ({self.player_world_id})"

    def is_currently_valid(self, now: datetime) -> bool:
        if not self.is_valid or self.is_revoked:
            return False
        return self.expires_at is None or self.expires_at > now

    def revoke(self, reason: str, now: datetime) -> None:
        self.is_valid = False
        self.is_revoked = True
        self.revocation_reason = reason
        self.revoked_at = now

    def clear_revocation(self) -> None:
        self.is_valid = True
        self.is_revoked = False
        self.revocation_reason = None
        self.revoked_at = None
