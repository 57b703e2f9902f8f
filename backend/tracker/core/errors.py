"""Error Hierarchy: typed, categorized exceptions for every tracker failure mode.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Not-found is never raised: lookups return None / False
    - Validation failures are never raised: they are returned as ValidationResult
    - Integrity and constraint failures always carry operation + entity context
    - to_response() produces the envelope the presentation layer renders

Design Decisions:
    - Single hierarchy with TrackerError base: callers can catch one type
    - ErrorContext as dataclass: rich observability without coupling to logging
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class ErrorSeverity(str, Enum):
    """Error severity for observability and caller handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    BUSINESS_RULE = "business_rule"
    CONFLICT = "conflict"
    CONSTRAINT = "constraint"
    DATABASE = "database"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Where the failure happened: enough to diagnose without a stack trace."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    operation: str | None = None
    entity: str | None = None
    entity_id: str | None = None
    field: str | None = None
    debug_info: dict[str, Any] | None = None


class TrackerError(Exception):
    """Base exception for all tracker errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()

    def to_response(self) -> dict:
        """Convert to the standardized error envelope."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "operation": self.context.operation,
                    "entity": self.context.entity,
                    "entity_id": self.context.entity_id,
                    "field": self.context.field,
                },
            }
        }


# ─── Domain Errors ───────────────────────────────────────────────

class UniquenessViolationError(TrackerError):
    """A write collided with a unique column (Company.name)."""
    def __init__(
        self, entity: str, field_name: str, value: Any = None,
        context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.entity = ctx.entity or entity
        ctx.field = field_name
        shown = f" '{value}'" if value is not None else ""
        super().__init__(
            f"{entity} with {field_name}{shown} already exists",
            "UNIQUENESS_VIOLATION", ErrorCategory.CONFLICT,
            ErrorSeverity.ERROR, ctx,
        )
        self.entity = entity
        self.field = field_name
        self.value = value


class ReferentialIntegrityError(TrackerError):
    """Delete refused: other rows still reference the entity."""
    def __init__(
        self, entity: str, entity_id: str, blocking: dict[str, int],
        context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.entity = entity
        ctx.entity_id = entity_id
        ctx.debug_info = {"blocking": dict(blocking)}
        held_by = " and ".join(
            f"{count} {name}" for name, count in blocking.items() if count
        )
        super().__init__(
            f"Cannot delete {entity.lower()} '{entity_id}': still referenced by {held_by}",
            "REFERENTIAL_INTEGRITY", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.ERROR, ctx,
        )
        self.blocking = dict(blocking)


# ─── Infrastructure Errors ───────────────────────────────────────

class ConstraintViolationError(TrackerError):
    """Store rejected a write on a foreign key, check or not-null constraint."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.operation = operation
        target = f" ({ctx.entity} '{ctx.entity_id}')" if ctx.entity_id else ""
        super().__init__(
            f"Constraint violated during {operation}{target}: {message}",
            "CONSTRAINT_VIOLATION", ErrorCategory.CONSTRAINT,
            ErrorSeverity.ERROR, ctx,
        )
        self.operation = operation


class DatabaseError(TrackerError):
    """Database operation failed for a non-integrity reason."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.operation = operation
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, ctx,
        )
        self.operation = operation
