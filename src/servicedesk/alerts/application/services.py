"""
Alert Application Services
===========================

Maps SLA and workflow events to alert records.

Classification is a pure mapping: no I/O and no delivery. Persisting and
pushing alerts belongs to the notification channel.
"""

from typing import Callable, Optional
from uuid import uuid4

from servicedesk.alerts.domain import (
    Alert,
    AssignmentEvent,
    NewMessageEvent,
    SLAViolationEvent,
    StatusChangeEvent,
    TicketCreatedEvent,
)
from servicedesk.config import AlertSeverity, AlertType, Priority, SLACompliance, TicketStatus
from servicedesk.core import ValidationException
from servicedesk.sla.domain import SLACalculator, SLAEvaluationResult

URGENT_PRIORITIES = (Priority.CRITICAL.value, Priority.HIGH.value)


def detect_sla_violation(
    previous: Optional[SLACompliance],
    result: SLAEvaluationResult,
    ticket_number: Optional[str] = None,
    assigned_to: Optional[str] = None
) -> Optional[SLAViolationEvent]:
    """
    An SLAViolationEvent when ``result`` is the first violated evaluation.

    Repeated violated evaluations (every poll) yield nothing.
    """
    if result.compliance != SLACompliance.VIOLATED:
        return None
    if previous == SLACompliance.VIOLATED:
        return None

    return SLAViolationEvent(
        ticket_id=result.ticket_id,
        priority=result.priority,
        elapsed_hours=result.elapsed_hours,
        target_hours=result.target_hours,
        occurred_at=result.evaluated_at,
        ticket_number=ticket_number,
        previous_compliance=previous,
        assigned_to=assigned_to,
    )


class AlertClassifier:
    """Turns a ticket event into an Alert with type, severity and wording."""

    def __init__(self, id_factory: Callable[[], str] = lambda: str(uuid4())):
        self._id_factory = id_factory
        self._handlers = {
            SLAViolationEvent: self._sla_violation,
            StatusChangeEvent: self._status_change,
            AssignmentEvent: self._assignment,
            TicketCreatedEvent: self._ticket_created,
            NewMessageEvent: self._new_message,
        }

    def classify(self, event) -> Alert:
        """
        Classify one event.

        Raises:
            ValidationException: the event kind is not supported
        """
        handler = self._handlers.get(type(event))
        if handler is None:
            raise ValidationException(
                f"Unsupported alert event: {type(event).__name__}",
                {"event_type": type(event).__name__}
            )
        return handler(event)

    def _alert(self, event, alert_type: AlertType, severity: AlertSeverity,
               title: str, message: str, recipient_id: Optional[str]) -> Alert:
        return Alert(
            id=self._id_factory(),
            ticket_id=event.ticket_id,
            alert_type=alert_type,
            severity=severity,
            title=title,
            message=message,
            created_at=event.occurred_at,
            recipient_id=recipient_id,
        )

    def _sla_violation(self, event: SLAViolationEvent) -> Alert:
        ref = event.ticket_number or event.ticket_id
        return self._alert(
            event,
            AlertType.SLA_VIOLATION,
            AlertSeverity.CRITICAL,
            f"SLA violated: ticket {ref}",
            f"{event.priority} ticket {ref} has been open "
            f"{SLACalculator.format_hours(event.elapsed_hours)} "
            f"against a {event.target_hours:g}h target.",
            event.assigned_to,
        )

    def _status_change(self, event: StatusChangeEvent) -> Alert:
        ref = event.ticket_number or event.ticket_id
        message = f"Status changed from {event.from_status} to {event.to_status}"
        if event.changed_by:
            message += f" by {event.changed_by}"
        if event.to_status == TicketStatus.CLOSED.value:
            title = f"Ticket {ref} was closed"
        else:
            title = f"Ticket {ref} moved to {event.to_status}"
        return self._alert(
            event, AlertType.STATUS_CHANGE, AlertSeverity.INFO,
            title, message + ".", event.recipient_id,
        )

    def _assignment(self, event: AssignmentEvent) -> Alert:
        ref = event.ticket_number or event.ticket_id
        message = f"Ticket {ref} has been assigned to you"
        if event.assigned_by:
            message += f" by {event.assigned_by}"
        return self._alert(
            event, AlertType.ASSIGNMENT, AlertSeverity.WARNING,
            f"Ticket {ref} assigned to you", message + ".", event.assignee_id,
        )

    def _ticket_created(self, event: TicketCreatedEvent) -> Alert:
        ref = event.ticket_number or event.ticket_id
        severity = (
            AlertSeverity.WARNING if event.priority in URGENT_PRIORITIES else AlertSeverity.INFO
        )
        message = f"A new {event.priority} priority ticket {ref} was submitted"
        if event.created_by:
            message += f" by {event.created_by}"
        return self._alert(
            event, AlertType.TICKET_CREATED, severity,
            f"New {event.priority} ticket {ref}", message + ".", event.recipient_id,
        )

    def _new_message(self, event: NewMessageEvent) -> Alert:
        ref = event.ticket_number or event.ticket_id
        sender = event.sender_name or event.sender_id
        return self._alert(
            event, AlertType.NEW_MESSAGE, AlertSeverity.INFO,
            f"New message on ticket {ref}",
            f"{sender} posted a new message on ticket {ref}.",
            event.recipient_id,
        )
