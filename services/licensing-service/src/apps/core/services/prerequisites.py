# services/licensing-service/src/apps/core/services/prerequisites.py
"""
Prerequisite resolution for license types.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, List

from apps.core.models import LicenseType, UserLicense


@dataclass(frozen=True)
class PrerequisiteCheck:
    """Outcome of checking a player's licenses against a license type."""
    satisfied: bool
    missing: List[str] = field(default_factory=list)


def resolve_prerequisites(
    player_licenses: Iterable[UserLicense],
    license_type: LicenseType,
    now: datetime
) -> PrerequisiteCheck:
    """
    Compute which prerequisite codes the player does not currently hold.

    Only licenses that are valid at `now` count: not revoked, flagged
    valid, and either permanent or expiring after `now`.
    """
    held = {
        user_license.license_type.code.upper()
        for user_license in player_licenses
        if user_license.is_currently_valid(now)
    }

    missing = []
    for code in license_type.prerequisites:
        if code not in held and code not in missing:
            missing.append(code)

    return PrerequisiteCheck(satisfied=not missing, missing=missing)
