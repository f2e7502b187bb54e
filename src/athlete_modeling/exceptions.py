"""
Errors raised by the modeling engines.

Each error has a message fit to show a coach, a stable ErrorCode for
callers that translate errors into responses, and a details dict.
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorCode(str, Enum):
    """Stable identifiers for error kinds."""

    INTERNAL_ERROR = "INTERNAL_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"

    # Metabolic profiler
    INSUFFICIENT_DATA = "INSUFFICIENT_DATA"


class AthleteModelingError(Exception):
    """Base class for every error the engines raise on purpose."""

    default_code = ErrorCode.INTERNAL_ERROR

    def __init__(
        self,
        message: str,
        code: Optional[ErrorCode] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.details = dict(details or {})

    def to_dict(self) -> Dict[str, Any]:
        """Error payload; 'details' is left out when empty."""
        error: Dict[str, Any] = {"code": self.code.value, "message": self.message}
        if self.details:
            error["details"] = self.details
        return {"error": error}

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.code.value}, message={self.message!r})"


class ValidationError(AthleteModelingError):
    """An argument could not be turned into a usable value."""

    default_code = ErrorCode.VALIDATION_ERROR

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, details=details)
        if field:
            self.details["field"] = field


class InsufficientDataError(AthleteModelingError):
    """Too few tested durations to fit a model, and no manual CP to fall back on."""

    default_code = ErrorCode.INSUFFICIENT_DATA

    def __init__(self, populated_points: int, required_points: int = 5) -> None:
        super().__init__(
            f"Enter at least {required_points} power-duration test points "
            f"or a manual critical power (got {populated_points} points)",
            details={
                "populated_points": populated_points,
                "required_points": required_points,
            },
        )
