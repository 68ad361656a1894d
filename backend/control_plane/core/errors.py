"""Error Hierarchy — typed, categorized exceptions for all control plane failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Domain errors (400-level) are user-correctable; infrastructure errors (500-level) are not
    - to_response() produces the REST envelope
    - No internal details leaked in user-facing messages

Design Decisions:
    - Single hierarchy with ControlPlaneError base: FastAPI global handler catches all
    - Topology violations are values (Violation), not exceptions; TopologyValidationError
      only wraps the complete list once the service decides to reject the mutation
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    RESOURCE_NOT_FOUND = "resource_not_found"
    DATABASE = "database"
    INTERNAL = "internal"
    CONFLICT = "conflict"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    workspace_id: str | None = None
    pipeline_id: str | None = None


@dataclass(frozen=True)
class Violation:
    """One broken topology rule, with enough context to highlight the field."""
    rule: str
    field: str
    value: Any
    message: str

    def to_dict(self) -> dict:
        return {
            "rule": self.rule,
            "field": self.field,
            "value": self.value,
            "message": self.message,
        }


class ControlPlaneError(Exception):
    """Base exception for all control plane errors."""

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
                    "workspace_id": self.context.workspace_id,
                    "pipeline_id": self.context.pipeline_id,
                },
            }
        }


# ─── Domain Errors (400-level) ──────────────────────────────────

class TopologyValidationError(ControlPlaneError):
    """Candidate pipeline graph broke one or more topology rules."""
    def __init__(self, violations: list[Violation], context: ErrorContext | None = None):
        rules = sorted({v.rule for v in violations})
        super().__init__(
            f"Pipeline topology is invalid ({len(violations)} violation(s): {', '.join(rules)})",
            "TOPOLOGY_INVALID", ErrorCategory.VALIDATION,
            ErrorSeverity.WARNING, context, 422,
        )
        self.violations = violations

    def to_response(self) -> dict:
        response = super().to_response()
        response["error"]["details"] = [v.to_dict() for v in self.violations]
        return response


class MalformedTopicNameError(ControlPlaneError):
    """Wire name cannot be split into its five components."""
    def __init__(self, wire_name: str, reason: str, context: ErrorContext | None = None):
        super().__init__(
            f"Malformed topic name '{wire_name}': {reason}",
            "MALFORMED_TOPIC_NAME", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )
        self.wire_name = wire_name
        self.reason = reason

    def to_response(self) -> dict:
        response = super().to_response()
        response["error"]["wire_name"] = self.wire_name
        return response


class ResourceNotFoundError(ControlPlaneError):
    """Requested resource does not exist."""
    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context, 404,
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


class ResourceConflictError(ControlPlaneError):
    """Resource with the same identity already exists."""
    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} '{resource_id}' already exists",
            "RESOURCE_CONFLICT", ErrorCategory.CONFLICT,
            ErrorSeverity.ERROR, context, 409,
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


# ─── Infrastructure Errors (500-level) ──────────────────────────

class CodeGenerationExhaustedError(ControlPlaneError):
    """No unused short code found within the attempt budget."""
    def __init__(self, kind: str, attempts: int, context: ErrorContext | None = None):
        super().__init__(
            f"Failed to generate a unique {kind} code after {attempts} attempts",
            "CODE_GENERATION_EXHAUSTED", ErrorCategory.INTERNAL,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.kind = kind
        self.attempts = attempts


class DatabaseError(ControlPlaneError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database error during {operation}: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 500,
        )
        self.operation = operation
