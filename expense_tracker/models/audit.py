"""
Audit Models for Expense Tracker

Every store mutation and every storage recovery is recorded as an audit event.
This provides:
1. Traceability of what changed the expense list and when
2. Debugging information when the durable slot and memory diverge
3. A short activity history for the UI

DESIGN DECISION: Audit events are append-only. We never modify them.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Store mutations
    EXPENSE_ADDED = "expense_added"
    EXPENSE_UPDATED = "expense_updated"
    EXPENSE_DELETED = "expense_deleted"
    EXPENSES_DELETED = "expenses_deleted"
    EXPENSES_CLEARED = "expenses_cleared"
    MUTATION_IGNORED = "mutation_ignored"

    # Persistence
    STORAGE_LOADED = "storage_loaded"
    STORAGE_LOAD_RECOVERED = "storage_load_recovered"
    STORAGE_SAVE_FAILED = "storage_save_failed"

    # Form boundary
    VALIDATION_FAILED = "validation_failed"

    # System events
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    Every significant action creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'expense', 'slot')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.expense_added(expense_id, "food", 12.5)
        event = AuditEventBuilder.storage_save_failed("expenses", "quota exceeded")
    """

    @staticmethod
    def expense_added(
        expense_id: str,
        category: str,
        amount: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_ADDED,
            entity_type="expense",
            entity_id=expense_id,
            description=f"Expense added: {category} - {amount}",
            details={
                "category": category,
                "amount": amount,
            },
            is_user_action=True,
        )

    @staticmethod
    def expense_updated(
        expense_id: str,
        fields: list[str],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_UPDATED,
            entity_type="expense",
            entity_id=expense_id,
            description=f"Expense updated: {', '.join(fields) or 'no fields'}",
            details={
                "fields": fields,
            },
            is_user_action=True,
        )

    @staticmethod
    def expense_deleted(expense_id: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_DELETED,
            entity_type="expense",
            entity_id=expense_id,
            description="Expense deleted",
            is_user_action=True,
        )

    @staticmethod
    def expenses_deleted(
        requested: int,
        removed: int,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSES_DELETED,
            entity_type="expense",
            description=f"Deleted {removed} of {requested} requested expenses",
            details={
                "requested": requested,
                "removed": removed,
            },
            is_user_action=True,
        )

    @staticmethod
    def expenses_cleared(removed: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSES_CLEARED,
            severity=AuditSeverity.WARNING,
            entity_type="expense",
            description=f"All expenses cleared ({removed} removed)",
            details={
                "removed": removed,
            },
            is_user_action=True,
        )

    @staticmethod
    def mutation_ignored(
        operation: str,
        expense_id: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.MUTATION_IGNORED,
            severity=AuditSeverity.DEBUG,
            entity_type="expense",
            entity_id=expense_id,
            description=f"{operation} ignored: expense not found",
            details={
                "operation": operation,
            },
        )

    @staticmethod
    def storage_loaded(
        slot_name: str,
        count: int,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORAGE_LOADED,
            entity_type="slot",
            entity_id=slot_name,
            description=f"Loaded {count} expenses from slot '{slot_name}'",
            details={
                "count": count,
            },
        )

    @staticmethod
    def storage_load_recovered(
        slot_name: str,
        reason: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORAGE_LOAD_RECOVERED,
            severity=AuditSeverity.WARNING,
            entity_type="slot",
            entity_id=slot_name,
            description=f"Slot '{slot_name}' unreadable, starting with an empty list",
            error_message=reason,
        )

    @staticmethod
    def storage_save_failed(
        slot_name: str,
        count: int,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORAGE_SAVE_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="slot",
            entity_id=slot_name,
            description=(
                f"Could not persist {count} expenses to slot '{slot_name}'; "
                "in-memory list remains authoritative"
            ),
            details={
                "count": count,
            },
        )

    @staticmethod
    def validation_failed(
        operation: str,
        issues: list[dict],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.VALIDATION_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="form",
            description=f"{operation.capitalize()} rejected with {len(issues)} issues",
            details={
                "operation": operation,
                "issues": issues,
            },
            is_user_action=True,
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
        )
