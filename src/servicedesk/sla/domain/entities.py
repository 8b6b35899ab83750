"""
SLA Domain Entities
====================

Pure Python domain entities for SLA tracking.

Following Domain-Driven Design principles, these entities contain
business logic and are free of infrastructure concerns.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional, Union

from servicedesk.config import (
    Priority, TicketStatus, SLACompliance,
    OPEN_STATUSES, VALID_PRIORITIES, VALID_STATUSES
)
from servicedesk.core import AlreadyClosed, ApplicationException, InvalidTicket


def _coerce(value, members):
    for member in members:
        if value == member.value:
            return member
    return value


@dataclass
class Ticket:
    """
    Ticket snapshot as persisted elsewhere.

    Priority and status are coerced to their enums when recognised and kept
    as raw strings otherwise, so bad upstream data surfaces as a per-ticket
    error instead of a construction failure.
    """

    id: str
    priority: Union[Priority, str, None]
    status: Union[TicketStatus, str, None]
    created_at: Optional[datetime]

    ticket_id: Optional[str] = None
    resolved_at: Optional[datetime] = None
    assigned_to: Optional[str] = None
    created_by: Optional[str] = None

    # Derived, recomputed by the evaluator
    sla_violated: bool = False

    def __post_init__(self):
        self.priority = _coerce(self.priority, VALID_PRIORITIES)
        self.status = _coerce(self.status, VALID_STATUSES)

    @property
    def display_id(self) -> str:
        """Human-facing ticket number, falling back to the internal id."""
        return self.ticket_id or self.id

    @property
    def is_closed(self) -> bool:
        return self.status == TicketStatus.CLOSED

    @property
    def is_open(self) -> bool:
        return self.status in OPEN_STATUSES

    def validate(self, require_resolved_at: bool = True) -> None:
        """Raise InvalidTicket when the snapshot cannot be evaluated."""
        if self.created_at is None:
            raise InvalidTicket(self.id, "missing or malformed created_at")
        if self.status is None:
            raise InvalidTicket(self.id, "missing status")
        if not isinstance(self.status, TicketStatus):
            raise InvalidTicket(self.id, f"unknown status '{self.status}'")
        if require_resolved_at and self.is_closed and self.resolved_at is None:
            raise InvalidTicket(self.id, "closed ticket has no resolved_at")

    def close(self, timestamp: Optional[datetime] = None) -> datetime:
        """
        Move the ticket into Closed and stamp ``resolved_at``.

        ``resolved_at`` is written once and never replaced.
        """
        if self.is_closed:
            raise AlreadyClosed(self.id)
        if self.resolved_at is None:
            self.resolved_at = timestamp or datetime.now(timezone.utc)
        self.status = TicketStatus.CLOSED
        return self.resolved_at


@dataclass(frozen=True)
class SLAEvaluationResult:
    """
    Derived SLA judgement for one ticket snapshot.

    Ephemeral: recomputed on demand, never persisted.
    """

    ticket_id: str
    priority: str
    status: str
    created_at: datetime
    elapsed_hours: float
    target_hours: float
    compliance: SLACompliance
    evaluated_at: datetime
    clock_skew: bool = False

    @property
    def ratio(self) -> float:
        """Elapsed time as a fraction of the target."""
        return self.elapsed_hours / self.target_hours

    @property
    def is_closed(self) -> bool:
        return self.status == TicketStatus.CLOSED.value

    @property
    def is_violated(self) -> bool:
        return self.compliance == SLACompliance.VIOLATED

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "ticket_id": self.ticket_id,
            "priority": self.priority,
            "status": self.status,
            "created_at": self.created_at.isoformat(),
            "elapsed_hours": round(self.elapsed_hours, 4),
            "target_hours": self.target_hours,
            "ratio": round(self.ratio, 4),
            "compliance": self.compliance.value,
            "clock_skew": self.clock_skew,
            "evaluated_at": self.evaluated_at.isoformat(),
        }


@dataclass(frozen=True)
class TicketError:
    """A per-ticket failure collected alongside partial batch results."""

    ticket_id: str
    error_type: str
    message: str

    @classmethod
    def from_exception(cls, ticket_id: str, exc: ApplicationException) -> "TicketError":
        return cls(ticket_id=ticket_id, error_type=type(exc).__name__, message=exc.message)

    def to_dict(self) -> dict:
        return {
            "ticket_id": self.ticket_id,
            "error_type": self.error_type,
            "message": self.message,
        }
