# services/licensing-service/src/apps/core/services/exceptions.py
"""
Licensing Service Exceptions

Domain errors raised by the licensing services. Each carries a stable
code and a details dict; the API layer maps the families to HTTP statuses.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional, Dict, Any, List


class LicensingServiceError(Exception):
    """Base exception for licensing service errors."""

    def __init__(
        self,
        message: str,
        code: str = "LICENSING_SERVICE_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


# =============================================================================
# NOT FOUND
# =============================================================================

class NotFoundError(LicensingServiceError):
    """Base for missing entities."""

    entity = "Resource"

    def __init__(self, identifier: Any = None, message: str = None, code: str = "NOT_FOUND"):
        super().__init__(
            message=message or f"{self.entity} not found: {identifier}",
            code=code,
            details={"identifier": str(identifier) if identifier is not None else None}
        )


class LicenseTypeNotFoundError(NotFoundError):
    entity = "License type"

    def __init__(self, code: str):
        super().__init__(code, message=f"License type '{code}' not found", code="LICENSE_TYPE_NOT_FOUND")


class PlayerWorldNotFoundError(NotFoundError):
    entity = "Player world"

    def __init__(self, identifier: Any = None):
        super().__init__(identifier, message="Player world not found", code="PLAYER_WORLD_NOT_FOUND")


class ExamNotFoundError(NotFoundError):
    entity = "Exam"

    def __init__(self, exam_id: Any):
        super().__init__(exam_id, code="EXAM_NOT_FOUND")


class AirportNotFoundError(NotFoundError):
    entity = "Airport"

    def __init__(self, icao: str):
        super().__init__(icao, message=f"Departure airport '{icao}' not found", code="AIRPORT_NOT_FOUND")


class LicenseNotFoundError(NotFoundError):
    entity = "License"

    def __init__(self, license_id: Any):
        super().__init__(license_id, code="LICENSE_NOT_FOUND")


# =============================================================================
# CONFLICTS
# =============================================================================

class ConflictError(LicensingServiceError):
    """Base for requests that clash with current state."""


class ExamStateError(ConflictError):
    """Raised when an exam status transition is not allowed."""

    def __init__(
        self,
        current_state: str,
        target_state: str,
        message: str = None,
        details: Optional[Dict[str, Any]] = None
    ):
        msg = message or f"Cannot transition exam from {current_state} to {target_state}"
        error_details = details or {}
        error_details.update({
            "current_state": current_state,
            "target_state": target_state
        })
        super().__init__(
            message=msg,
            code="EXAM_STATE_ERROR",
            details=error_details
        )


class ActiveExamExistsError(ConflictError):
    def __init__(self, license_code: str, exam_id: Any = None):
        super().__init__(
            message="You already have an exam scheduled or in progress for this license",
            code="ACTIVE_EXAM_EXISTS",
            details={"license_code": license_code, "exam_id": str(exam_id) if exam_id else None}
        )


class LicenseAlreadyHeldError(ConflictError):
    def __init__(self, license_code: str):
        super().__init__(
            message="You already have this license",
            code="LICENSE_ALREADY_HELD",
            details={"license_code": license_code}
        )


class LicenseRevokedError(ConflictError):
    def __init__(self, license_id: Any):
        super().__init__(
            message="Cannot renew a revoked license",
            code="LICENSE_REVOKED",
            details={"license_id": str(license_id)}
        )


class LicenseNotRenewableError(ConflictError):
    def __init__(self, license_code: str):
        super().__init__(
            message="This license does not require renewal",
            code="LICENSE_NOT_RENEWABLE",
            details={"license_code": license_code}
        )


# =============================================================================
# GATES
# =============================================================================

class PrerequisitesNotMetError(LicensingServiceError):
    def __init__(self, missing: List[str]):
        super().__init__(
            message=f"Missing prerequisite licenses: {', '.join(missing)}",
            code="PREREQUISITES_NOT_MET",
            details={"missing": list(missing)}
        )
        self.missing = list(missing)


class InsufficientFundsError(LicensingServiceError):
    def __init__(self, required: Decimal, available: Decimal):
        super().__init__(
            message=f"Insufficient funds. Required: ${required:,.2f}, available: ${available:,.2f}",
            code="INSUFFICIENT_FUNDS",
            details={"required": str(required), "available": str(available)}
        )
        self.required = required
        self.available = available


class ExamCooldownError(LicensingServiceError):
    def __init__(self, eligible_at: datetime):
        super().__init__(
            message=f"You must wait until {eligible_at:%Y-%m-%d %H:%M} UTC to retake this exam",
            code="EXAM_ON_COOLDOWN",
            details={"eligible_at": eligible_at.isoformat()}
        )
        self.eligible_at = eligible_at


class ExamExpiredError(LicensingServiceError):
    def __init__(self, exam_id: Any):
        super().__init__(
            message="Exam has expired. Please schedule a new exam.",
            code="EXAM_EXPIRED",
            details={"exam_id": str(exam_id)}
        )
