"""
Result types for explicit success/failure tracking at the ballot call surface.

A cast either succeeds with a receipt or fails with a reason; callers that
prefer exceptions can unwrap the result.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Generic, List, Optional, TypeVar

T = TypeVar("T")


class ErrorSeverity(Enum):
    """Severity levels for processing errors."""

    ERROR = "error"  # Operation rejected, state untouched
    CRITICAL = "critical"  # Ledger failed mid-settlement, transfers reversed


@dataclass
class ProcessingError:
    """
    Represents a single processing error with context.

    Attributes:
        source: Component that generated the error (e.g., "cast_ballot")
        message: Human-readable error description
        severity: How severe the error is
        context: Additional context like card_id, previous/new amounts
        exception: Original exception if available
    """

    source: str
    message: str
    severity: ErrorSeverity
    context: Dict[str, Any] = field(default_factory=dict)
    exception: Optional[Exception] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "source": self.source,
            "message": self.message,
            "severity": self.severity.value,
            "reason": (
                type(self.exception).__name__ if self.exception else None
            ),
            "context": self.context,
        }


@dataclass
class Result(Generic[T]):
    """
    Result type that carries success/failure information.

    Attributes:
        success: Whether the operation succeeded
        data: The result data if successful
        errors: Errors that made the operation fail
    """

    success: bool
    data: Optional[T] = None
    errors: List[ProcessingError] = field(default_factory=list)

    @classmethod
    def ok(cls, data: T) -> "Result[T]":
        """Create a successful result with data."""
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: ProcessingError) -> "Result[T]":
        """Create a failed result with an error."""
        return cls(success=False, errors=[error])

    def get_error_messages(self) -> List[str]:
        """Get all error messages as strings."""
        return [e.message for e in self.errors]

    @property
    def reason(self) -> Optional[str]:
        """Exception class name of the first error, e.g. "StaleProof"."""
        for e in self.errors:
            if e.exception is not None:
                return type(e.exception).__name__
        return None

    def unwrap(self) -> T:
        """
        Return data on success; otherwise re-raise the original exception.

        Falls back to RuntimeError when the failure carries no exception.
        """
        if self.success:
            return self.data
        for e in self.errors:
            if e.exception is not None:
                raise e.exception
        raise RuntimeError("; ".join(self.get_error_messages()))
