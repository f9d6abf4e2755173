"""Error Hierarchy — typed, categorized exceptions for all Soundope failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Domain errors (400-level) are raised BEFORE any write — no partial mutation
    - Infrastructure errors (500-level) never leak driver details to the client
    - to_response() produces the single REST error envelope

Design Decisions:
    - Single hierarchy with SoundopeError base: FastAPI global handler catches all (ADR: uniform error shape)
    - ErrorContext as dataclass: rich observability without coupling to logging framework
    - ConcurrentModificationError is WARNING severity: the client may simply retry
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from datetime import datetime, timezone


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    BUSINESS_RULE = "business_rule"
    RESOURCE_NOT_FOUND = "resource_not_found"
    FORBIDDEN = "forbidden"
    DATABASE = "database"
    INTERNAL = "internal"
    CONFLICT = "conflict"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    user_id: str | None = None
    track_id: str | None = None
    user_message: str | None = None
    debug_info: dict[str, Any] | None = None
    retry_after_ms: int | None = None


class SoundopeError(Exception):
    """Base exception for all Soundope errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
        http_status: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.http_status = http_status

    def to_response(self) -> dict:
        """Convert to standardized REST error response."""
        return {
            "error": {
                "code": self.code,
                "message": self.context.user_message or self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "user_id": self.context.user_id,
                    "track_id": self.context.track_id,
                    "retry_after_ms": self.context.retry_after_ms,
                },
            }
        }


# ─── Domain Errors (400-level) ──────────────────────────────────

class InsufficientCreditsError(SoundopeError):
    """Boost cost exceeds the combined premium + standard balance."""
    def __init__(
        self, required: int, available: int, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"Insufficient credits: boost costs {required}, "
            f"you have {available} available.",
            "INSUFFICIENT_CREDITS", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.WARNING, context, 400,
        )
        self.required = required
        self.available = available


class InsufficientVotesError(SoundopeError):
    """Requested vote count exceeds the monthly allowance left."""
    def __init__(
        self, requested: int, remaining: int, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"Not enough votes remaining: requested {requested}, "
            f"{remaining} left this month.",
            "INSUFFICIENT_VOTES", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.WARNING, context, 400,
        )
        self.requested = requested
        self.remaining = remaining


class UnknownBoostPlanError(SoundopeError):
    """Boost plan id is not in the catalog."""
    def __init__(self, plan_id: str, context: ErrorContext | None = None):
        super().__init__(
            f"Unknown boost plan '{plan_id}'",
            "UNKNOWN_BOOST_PLAN", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )
        self.plan_id = plan_id


class TrackOwnershipError(SoundopeError):
    """Requester tried to boost a track they do not own."""
    def __init__(self, track_id: str, context: ErrorContext | None = None):
        super().__init__(
            f"Track '{track_id}' is not owned by the requesting user",
            "NOT_TRACK_OWNER", ErrorCategory.FORBIDDEN,
            ErrorSeverity.ERROR, context, 403,
        )


class ResourceNotFoundError(SoundopeError):
    """Requested resource does not exist."""
    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context, 404,
        )


# ─── Infrastructure Errors (500-level) ──────────────────────────

class DatabaseError(SoundopeError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation


class ConcurrentModificationError(SoundopeError):
    """A write lost a race on the same aggregate, and so did its retry."""
    def __init__(
        self, operation: str, attempts: int, context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        if ctx.retry_after_ms is None:
            ctx.retry_after_ms = 250
        super().__init__(
            f"Concurrent modification during {operation} "
            f"(gave up after {attempts} attempts). Please retry.",
            "CONCURRENT_MODIFICATION", ErrorCategory.CONFLICT,
            ErrorSeverity.WARNING, ctx, 409,
        )
        self.operation = operation
        self.attempts = attempts
