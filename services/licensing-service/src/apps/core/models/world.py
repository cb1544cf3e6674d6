# services/licensing-service/src/apps/core/models/world.py
"""
World, Player and Airport Models

Local copies of the collaborator data the licensing rules read:
the world's license cost multiplier, the player's balance in a world,
and the airport directory used for route generation.
"""

import uuid
from decimal import Decimal

from django.db import models


class WorldDifficulty(models.TextChoices):
    """World difficulty presets."""
    EASY = 'easy', 'Easy'
    MEDIUM = 'medium', 'Medium'
    HARD = 'hard', 'Hard'


# License cost multiplier per difficulty preset
DIFFICULTY_LICENSE_MULTIPLIERS = {
    WorldDifficulty.EASY: Decimal('0.5'),
    WorldDifficulty.MEDIUM: Decimal('1.0'),
    WorldDifficulty.HARD: Decimal('1.5'),
}


class World(models.Model):
    """A game world. Every player career lives inside exactly one world."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=100)
    slug = models.SlugField(max_length=50, unique=True)
    difficulty = models.CharField(
        max_length=20,
        choices=WorldDifficulty.choices,
        default=WorldDifficulty.MEDIUM
    )
    license_cost_multiplier = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        default=Decimal('1.00')
    )
    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'worlds'
        ordering = ['name']

    def __str__(self):
        return self.name

    @classmethod
    def from_preset(cls, difficulty: str, name: str = None, slug: str = None) -> 'World':
        """Build an unsaved world using the multiplier of a difficulty preset."""
        difficulty = WorldDifficulty(difficulty)
        return cls(
            name=name or difficulty.label,
            slug=slug or difficulty.value,
            difficulty=difficulty,
            license_cost_multiplier=DIFFICULTY_LICENSE_MULTIPLIERS[difficulty],
        )


class PlayerWorld(models.Model):
    """A player's career inside one world, holding their balance."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user_id = models.UUIDField(db_index=True)
    world = models.ForeignKey(
        World,
        on_delete=models.CASCADE,
        related_name='players'
    )
    balance = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        default=Decimal('0.00')
    )
    is_active = models.BooleanField(default=True)

    joined_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'player_worlds'
        constraints = [
            models.UniqueConstraint(
                fields=['user_id', 'world'],
                name='unique_player_per_world'
            ),
        ]

    def __str__(self):
        return f"{self.user_id} @ {self.world_id}"


class AirportType(models.TextChoices):
    """Airport classes from the airport directory."""
    LARGE = 'large_airport', 'Large Airport'
    MEDIUM = 'medium_airport', 'Medium Airport'
    SMALL = 'small_airport', 'Small Airport'
    HELIPORT = 'heliport', 'Heliport'
    SEAPLANE_BASE = 'seaplane_base', 'Seaplane Base'
    CLOSED = 'closed', 'Closed'


class Airport(models.Model):
    """Airport directory entry."""

    ident = models.CharField(max_length=10, unique=True)
    name = models.CharField(max_length=255)
    type = models.CharField(max_length=20, choices=AirportType.choices, db_index=True)
    latitude = models.FloatField()
    longitude = models.FloatField()
    elevation_ft = models.IntegerField(blank=True, null=True)
    country = models.CharField(max_length=2, blank=True, null=True)

    class Meta:
        db_table = 'airports'
        ordering = ['ident']
        indexes = [
            models.Index(fields=['latitude', 'longitude']),
        ]

    def __str__(self):
        return f"{self.ident} - {self.name}"
