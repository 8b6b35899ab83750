"""
Alert Domain Entities
======================

Alert records and the events they are classified from.

Alerts are handed to an external delivery channel; the only field that
changes after creation is ``is_read``.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from servicedesk.config import AlertSeverity, AlertType, SLACompliance


@dataclass
class Alert:
    """A notification for one ticket, ready for delivery."""

    id: str
    ticket_id: str
    alert_type: AlertType
    severity: AlertSeverity
    title: str
    message: str
    created_at: datetime
    recipient_id: Optional[str] = None
    is_read: bool = False

    def mark_read(self) -> None:
        self.is_read = True

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "ticket_id": self.ticket_id,
            "alert_type": self.alert_type.value,
            "severity": self.severity.value,
            "title": self.title,
            "message": self.message,
            "created_at": self.created_at.isoformat(),
            "recipient_id": self.recipient_id,
            "is_read": self.is_read,
        }


@dataclass(frozen=True)
class SLAViolationEvent:
    """A ticket's compliance moved from non-violated to violated."""
    ticket_id: str
    priority: str
    elapsed_hours: float
    target_hours: float
    occurred_at: datetime
    ticket_number: Optional[str] = None
    previous_compliance: Optional[SLACompliance] = None
    assigned_to: Optional[str] = None


@dataclass(frozen=True)
class StatusChangeEvent:
    """A ticket moved between statuses."""
    ticket_id: str
    from_status: str
    to_status: str
    occurred_at: datetime
    ticket_number: Optional[str] = None
    changed_by: Optional[str] = None
    recipient_id: Optional[str] = None


@dataclass(frozen=True)
class AssignmentEvent:
    """A ticket was assigned to an agent."""
    ticket_id: str
    assignee_id: str
    occurred_at: datetime
    ticket_number: Optional[str] = None
    assigned_by: Optional[str] = None


@dataclass(frozen=True)
class TicketCreatedEvent:
    """A ticket was submitted."""
    ticket_id: str
    priority: str
    occurred_at: datetime
    ticket_number: Optional[str] = None
    created_by: Optional[str] = None
    recipient_id: Optional[str] = None


@dataclass(frozen=True)
class NewMessageEvent:
    """A message was posted on a ticket conversation."""
    ticket_id: str
    sender_id: str
    occurred_at: datetime
    ticket_number: Optional[str] = None
    sender_name: Optional[str] = None
    recipient_id: Optional[str] = None
