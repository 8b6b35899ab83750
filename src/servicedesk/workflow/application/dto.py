"""
Workflow Application DTOs
==========================

Request and response models for the status workflow endpoints.
"""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from servicedesk.alerts.application import AlertResponse
from servicedesk.sla.application import TicketSnapshotDTO
from servicedesk.workflow.domain import StatusInfo, TransitionDecision, TransitionOutcome


class StatusInfoResponse(BaseModel):
    """Display metadata for one status."""
    name: str
    order: int
    color: str
    description: str

    @classmethod
    def from_domain(cls, info: StatusInfo) -> "StatusInfoResponse":
        return cls(**info.to_dict())


class TransitionEdge(BaseModel):
    """One edge of the transition graph."""
    from_status: str
    to_status: str


class WorkflowResponse(BaseModel):
    """The full status workflow: catalog plus transition graph."""
    statuses: List[StatusInfoResponse]
    transitions: List[TransitionEdge]
    role_permissions: Dict[str, List[str]] = Field(
        default_factory=dict,
        description="Statuses from which each role may initiate a change"
    )
    initial_status: str
    terminal_status: str
    creator_can_cancel: bool


class AllowedTransitionsResponse(BaseModel):
    """Legal successors of a status."""
    current_status: str
    allowed_transitions: List[str] = Field(default_factory=list)


class TransitionValidationRequest(BaseModel):
    """A proposed status change, checked without applying it."""
    role: str = Field(..., description="Role of the requesting user")
    current_status: str
    target_status: str
    creator_id: Optional[str] = Field(None, description="Ticket creator user id")
    requester_id: Optional[str] = Field(None, description="Requesting user id")


class TransitionValidationResponse(BaseModel):
    """Decision for a proposed change."""
    allowed: bool
    reason: Optional[str] = None
    code: Optional[str] = None
    allowed_transitions: List[str] = Field(
        default_factory=list,
        description="Targets this requester may choose from the current status"
    )

    @classmethod
    def from_domain(
        cls,
        decision: TransitionDecision,
        allowed_transitions: List[str]
    ) -> "TransitionValidationResponse":
        return cls(
            allowed=decision.allowed,
            reason=decision.reason,
            code=decision.code,
            allowed_transitions=allowed_transitions,
        )


class TransitionApplyRequest(BaseModel):
    """Apply a status change to a ticket snapshot."""
    ticket: TicketSnapshotDTO
    target_status: str
    role: str
    requester_id: Optional[str] = None
    now: Optional[datetime] = Field(None, description="Instant stamped on close; defaults to now")


class TransitionApplyResponse(BaseModel):
    """Result of an applied (or idempotently skipped) change."""
    ticket: TicketSnapshotDTO
    previous_status: str
    status: str
    applied: bool
    already_closed: bool = False
    resolved_at: Optional[datetime] = None
    alert: Optional[AlertResponse] = None

    @classmethod
    def from_domain(
        cls,
        ticket: TicketSnapshotDTO,
        outcome: TransitionOutcome,
        alert: Optional[AlertResponse] = None
    ) -> "TransitionApplyResponse":
        return cls(
            ticket=ticket,
            previous_status=outcome.previous_status,
            status=outcome.status,
            applied=outcome.applied,
            already_closed=outcome.already_closed,
            resolved_at=outcome.resolved_at,
            alert=alert,
        )
