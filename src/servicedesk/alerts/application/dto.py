"""
Alert Application DTOs
=======================

Pydantic models for alert events coming in and alert records going out.
"""

from datetime import datetime, timezone
from typing import Literal, Optional, Union

from pydantic import BaseModel, Field

from servicedesk.alerts.domain import (
    Alert,
    AssignmentEvent,
    NewMessageEvent,
    SLAViolationEvent,
    StatusChangeEvent,
    TicketCreatedEvent,
)
from servicedesk.config import SLACompliance


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AlertResponse(BaseModel):
    """Alert record handed to the delivery channel."""
    id: str
    ticket_id: str
    alert_type: str
    severity: str
    title: str
    message: str
    created_at: datetime
    recipient_id: Optional[str] = None
    is_read: bool = False

    @classmethod
    def from_domain(cls, alert: Alert) -> "AlertResponse":
        return cls(**alert.to_dict())


class _EventDTO(BaseModel):
    ticket_id: str = Field(..., min_length=1)
    ticket_number: Optional[str] = None
    occurred_at: datetime = Field(default_factory=_utcnow)


class SLAViolationEventDTO(_EventDTO):
    kind: Literal["sla_violation"] = "sla_violation"
    priority: str
    elapsed_hours: float = Field(..., ge=0)
    target_hours: float = Field(..., gt=0)
    previous_compliance: Optional[SLACompliance] = None
    assigned_to: Optional[str] = None

    def to_domain(self) -> SLAViolationEvent:
        return SLAViolationEvent(**self.model_dump(exclude={"kind"}))


class StatusChangeEventDTO(_EventDTO):
    kind: Literal["status_change"] = "status_change"
    from_status: str
    to_status: str
    changed_by: Optional[str] = None
    recipient_id: Optional[str] = None

    def to_domain(self) -> StatusChangeEvent:
        return StatusChangeEvent(**self.model_dump(exclude={"kind"}))


class AssignmentEventDTO(_EventDTO):
    kind: Literal["assignment"] = "assignment"
    assignee_id: str = Field(..., min_length=1)
    assigned_by: Optional[str] = None

    def to_domain(self) -> AssignmentEvent:
        return AssignmentEvent(**self.model_dump(exclude={"kind"}))


class TicketCreatedEventDTO(_EventDTO):
    kind: Literal["ticket_created"] = "ticket_created"
    priority: str
    created_by: Optional[str] = None
    recipient_id: Optional[str] = None

    def to_domain(self) -> TicketCreatedEvent:
        return TicketCreatedEvent(**self.model_dump(exclude={"kind"}))


class NewMessageEventDTO(_EventDTO):
    kind: Literal["new_message"] = "new_message"
    sender_id: str = Field(..., min_length=1)
    sender_name: Optional[str] = None
    recipient_id: Optional[str] = None

    def to_domain(self) -> NewMessageEvent:
        return NewMessageEvent(**self.model_dump(exclude={"kind"}))


AlertEventDTO = Union[
    SLAViolationEventDTO,
    StatusChangeEventDTO,
    AssignmentEventDTO,
    TicketCreatedEventDTO,
    NewMessageEventDTO,
]


class ClassifyAlertRequest(BaseModel):
    """Request body for alert classification."""
    event: AlertEventDTO = Field(..., discriminator="kind")
