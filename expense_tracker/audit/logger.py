"""
Audit Logger

DESIGN DECISION: Every change to the expense list is logged.
This provides:
1. Traceability of mutations
2. Visibility when durable storage falls behind the in-memory list
3. A recent-activity view in the UI

The audit logger:
- Is synchronous, like every store operation
- Never raises into the caller
- Keeps a bounded in-memory history of recent events
"""

from collections import deque
from typing import Optional

import structlog

from expense_tracker.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger(__name__)


class AuditLogger:
    """
    Central audit logging service.

    Logs events to the structured local log and remembers the most
    recent ones for display.
    """

    def __init__(self, history_size: int = 200):
        self._history: deque[AuditEvent] = deque(maxlen=history_size)
        self._logger = structlog.get_logger("expense_tracker.audit")

    def log(self, event: AuditEvent) -> None:
        """Append an audit event to the history and write it to the local log."""
        self._history.append(event)

        try:
            log_dict = event.to_log_dict()
            if event.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL):
                self._logger.error("audit_event", **log_dict)
            elif event.severity == AuditSeverity.WARNING:
                self._logger.warning("audit_event", **log_dict)
            elif event.severity == AuditSeverity.DEBUG:
                self._logger.debug("audit_event", **log_dict)
            else:
                self._logger.info("audit_event", **log_dict)
        except Exception as e:
            # Log failure but don't raise
            logger.error(
                "audit_log_failed",
                error=str(e),
                event_id=str(event.event_id),
                event_type=event.event_type.value,
            )

    def recent_events(self, limit: int = 20) -> list[AuditEvent]:
        """Most recent events, newest first."""
        if limit <= 0:
            return []
        events = list(self._history)
        events.reverse()
        return events[:limit]

    def log_expense_added(self, expense_id: str, category: str, amount: str) -> None:
        self.log(AuditEventBuilder.expense_added(expense_id, category, amount))

    def log_expense_updated(self, expense_id: str, fields: list[str]) -> None:
        self.log(AuditEventBuilder.expense_updated(expense_id, fields))

    def log_expense_deleted(self, expense_id: str) -> None:
        self.log(AuditEventBuilder.expense_deleted(expense_id))

    def log_expenses_deleted(self, requested: int, removed: int) -> None:
        self.log(AuditEventBuilder.expenses_deleted(requested, removed))

    def log_expenses_cleared(self, removed: int) -> None:
        self.log(AuditEventBuilder.expenses_cleared(removed))

    def log_mutation_ignored(self, operation: str, expense_id: str) -> None:
        self.log(AuditEventBuilder.mutation_ignored(operation, expense_id))

    def log_storage_loaded(self, slot_name: str, count: int) -> None:
        self.log(AuditEventBuilder.storage_loaded(slot_name, count))

    def log_storage_load_recovered(self, slot_name: str, reason: str) -> None:
        self.log(AuditEventBuilder.storage_load_recovered(slot_name, reason))

    def log_storage_save_failed(self, slot_name: str, count: int) -> None:
        self.log(AuditEventBuilder.storage_save_failed(slot_name, count))

    def log_validation_failed(self, operation: str, issues: list[dict]) -> None:
        self.log(AuditEventBuilder.validation_failed(operation, issues))

    def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
    ) -> None:
        self.log(AuditEventBuilder.system_error(error_type, error_message, details))
