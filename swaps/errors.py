"""
Swap engine error taxonomy.

Every failure surfaced by the engine is a SwapError carrying a kind, a
human-readable message and the slot/request id it concerns. Only
UNAVAILABLE is retryable; the other kinds need different input.
"""

from enum import Enum
from typing import Any
from uuid import UUID


class ErrorKind(str, Enum):
    """Failure kinds exposed to callers."""

    NOT_FOUND = "NOT_FOUND"
    FORBIDDEN = "FORBIDDEN"
    INVALID_ARGUMENT = "INVALID_ARGUMENT"
    INVALID_STATE = "INVALID_STATE"
    UNAVAILABLE = "UNAVAILABLE"


class SwapError(Exception):
    """
    Base exception for swap engine errors.

    Attributes:
        kind: ErrorKind of the failure
        message: Error message
        slot_id: Slot the failure concerns (if any)
        request_id: Swap request the failure concerns (if any)
        details: Extra structured context (conflicting ids, states, ...)
    """

    kind: ErrorKind = ErrorKind.INVALID_STATE
    retryable: bool = False

    def __init__(
        self,
        message: str,
        *,
        slot_id: UUID | None = None,
        request_id: UUID | None = None,
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.slot_id = slot_id
        self.request_id = request_id
        self.details = details or {}
        super().__init__(self.message)

    @property
    def error_code(self) -> str:
        return self.kind.value

    def to_dict(self) -> dict[str, Any]:
        """Render the failure payload returned to API callers."""
        details: dict[str, Any] = dict(self.details)
        if self.slot_id is not None:
            details["slot_id"] = str(self.slot_id)
        if self.request_id is not None:
            details["request_id"] = str(self.request_id)
        details["retryable"] = self.retryable
        return {
            "success": False,
            "error_code": self.error_code,
            "error_message": self.message,
            "details": details,
        }


class SwapNotFoundError(SwapError):
    """Raised when a referenced slot or swap request does not exist."""

    kind = ErrorKind.NOT_FOUND


class SwapForbiddenError(SwapError):
    """Raised when the actor is authenticated but not entitled to act."""

    kind = ErrorKind.FORBIDDEN


class SwapInvalidArgumentError(SwapError):
    """Raised for malformed or self-referential requests."""

    kind = ErrorKind.INVALID_ARGUMENT


class SwapInvalidStateError(SwapError):
    """Raised when an entity's state does not permit the transition."""

    kind = ErrorKind.INVALID_STATE


class SwapUnavailableError(SwapError):
    """Raised when the store transaction could not be committed."""

    kind = ErrorKind.UNAVAILABLE
    retryable = True


class SwapConflictError(SwapUnavailableError):
    """
    Raised when the database aborted the transaction to keep it serializable.

    The transaction lost a race with a concurrent one (SQLSTATE 40001 or
    40P01). Re-running it from the start observes the winner's committed
    state, so transaction handlers retry it before surfacing UNAVAILABLE.
    """
