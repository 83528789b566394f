"""Error Hierarchy — typed, categorized exceptions for all ledger failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Business-rule errors (400-level) leave ledger state untouched; internal
      errors (500-level) signal a broken invariant or unavailable infrastructure
    - to_response() produces the REST envelope
    - No internal details leaked in user-facing messages

Design Decisions:
    - Single hierarchy with LedgerError base: FastAPI global handler catches all
    - ErrorContext as dataclass: rich observability without coupling to logging framework
    - Amounts rendered as strings in responses: u128 values exceed JSON-safe ints
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
    DATABASE = "database"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    operation: str | None = None
    account: str | None = None
    requested: int | None = None
    available: int | None = None
    debug_info: dict[str, Any] | None = None


class LedgerError(Exception):
    """Base exception for all ledger errors."""

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
                "message": self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "operation": self.context.operation,
                    "account": self.context.account,
                    "requested": _amount_or_none(self.context.requested),
                    "available": _amount_or_none(self.context.available),
                },
            }
        }


def _amount_or_none(value: int | None) -> str | None:
    return str(value) if value is not None else None


# ─── Domain Errors (400-level) ──────────────────────────────────

class InsufficientBalanceError(LedgerError):
    """Balance or allowance precondition not met."""
    def __init__(
        self, requested: int, available: int, context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.requested = requested
        ctx.available = available
        super().__init__(
            f"Insufficient balance: requested {requested}, available {available}",
            "INSUFFICIENT_BALANCE", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.ERROR, ctx, 400,
        )
        self.requested = requested
        self.available = available


class BalanceOverflowError(LedgerError):
    """Checked addition would exceed the balance width."""
    def __init__(self, current: int, added: int, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.requested = added
        ctx.available = current
        super().__init__(
            f"Balance overflow: {current} + {added} exceeds the maximum balance",
            "BALANCE_OVERFLOW", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.ERROR, ctx, 400,
        )
        self.current = current
        self.added = added


class CallerUnresolvedError(LedgerError):
    """No caller identity is bound to the current invocation."""
    def __init__(self, message: str = "Caller account could not be resolved",
                 context: ErrorContext | None = None):
        super().__init__(
            message, "CALLER_UNRESOLVED", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 401,
        )


# ─── Internal / Infrastructure Errors (500-level) ───────────────

class LedgerInvariantError(LedgerError):
    """Internal ledger invariant violated. Never expected in correct use."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            f"Ledger invariant violated: {message}",
            "LEDGER_INVARIANT_VIOLATED", ErrorCategory.INTERNAL,
            ErrorSeverity.CRITICAL, context, 500,
        )


class LedgerNotInitializedError(LedgerError):
    """Ledger service used before bootstrap."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "Ledger has not been initialized",
            "LEDGER_NOT_INITIALIZED", ErrorCategory.INTERNAL,
            ErrorSeverity.CRITICAL, context, 503,
        )


class DatabaseError(LedgerError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation
