# services/licensing-service/src/apps/core/conf.py
"""
Licensing settings with defaults.

Reads the LICENSING dict from Django settings.
"""

from datetime import timedelta

from django.conf import settings

DEFAULTS = {
    'GAME_DAY_REAL_HOURS': 6,
    'SCHEDULED_EXAM_TIMEOUT_HOURS': 24,
    'CRITICAL_FAILURE_COOLDOWN_HOURS': 12,
    'EXAM_HISTORY_LIMIT': 20,
    'EXPIRY_SWEEP_MINUTES': 15,
}


def licensing_setting(name: str):
    return getattr(settings, 'LICENSING', {}).get(name, DEFAULTS[name])


def game_days_to_real_time(game_days: int) -> timedelta:
    """Convert a validity period in game days into wall-clock time."""
    return timedelta(hours=game_days * licensing_setting('GAME_DAY_REAL_HOURS'))
