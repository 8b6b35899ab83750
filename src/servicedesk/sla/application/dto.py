"""
SLA Application DTOs
=====================

Data Transfer Objects for the SLA API layer and the analytics reports.

These Pydantic models handle serialization/deserialization and validation
for ticket snapshots coming in and reports going out.
"""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from servicedesk.sla.domain import SLACalculator, SLAEvaluationResult, Ticket, TicketError


def _parse_timestamp(value):
    """Lenient ISO8601 parsing: malformed strings become None (reported later)."""
    if value is None or isinstance(value, datetime):
        return value
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            return None
    return None


# ========== Request DTOs ==========

class TicketSnapshotDTO(BaseModel):
    """A ticket as read from the service-desk API (fields this engine uses)."""
    id: str = Field(..., min_length=1, description="Stable internal identifier")
    ticket_id: Optional[str] = Field(None, description="Human-facing ticket number")
    priority: Optional[str] = Field(None, description="Critical | High | Medium | Low")
    status: Optional[str] = Field(None, description="New | Open | Pending | Closed")
    created_at: Optional[datetime] = Field(None, description="Creation timestamp")
    resolved_at: Optional[datetime] = Field(None, description="Set when the ticket is closed")
    assigned_to: Optional[str] = Field(None, description="Assigned agent id")
    created_by: Optional[str] = Field(None, description="Creator user id")
    sla_violated: bool = Field(default=False, description="Derived flag, recomputed here")

    @field_validator("id", "ticket_id", "assigned_to", "created_by", mode="before")
    @classmethod
    def coerce_identifier(cls, v):
        """Identifiers may arrive as integers."""
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v

    @field_validator("created_at", "resolved_at", mode="before")
    @classmethod
    def parse_timestamp(cls, v):
        return _parse_timestamp(v)

    def to_domain(self) -> Ticket:
        """Convert to domain entity."""
        return Ticket(
            id=self.id,
            ticket_id=self.ticket_id,
            priority=self.priority,
            status=self.status,
            created_at=self.created_at,
            resolved_at=self.resolved_at,
            assigned_to=self.assigned_to,
            created_by=self.created_by,
            sla_violated=self.sla_violated,
        )

    @classmethod
    def from_domain(cls, ticket: Ticket) -> "TicketSnapshotDTO":
        """Create from domain entity."""
        return cls(
            id=ticket.id,
            ticket_id=ticket.ticket_id,
            priority=getattr(ticket.priority, "value", ticket.priority),
            status=getattr(ticket.status, "value", ticket.status),
            created_at=ticket.created_at,
            resolved_at=ticket.resolved_at,
            assigned_to=ticket.assigned_to,
            created_by=ticket.created_by,
            sla_violated=ticket.sla_violated,
        )


class TicketBatchRequest(BaseModel):
    """A ticket snapshot set, optionally evaluated at a fixed instant."""
    tickets: List[TicketSnapshotDTO] = Field(default_factory=list)
    now: Optional[datetime] = Field(
        None,
        description="Evaluation instant; defaults to the current time"
    )

    def to_domain(self) -> List[Ticket]:
        return [t.to_domain() for t in self.tickets]


# ========== Response DTOs ==========

class TicketErrorResponse(BaseModel):
    """A ticket that was excluded from a batch result."""
    ticket_id: str
    error_type: str
    message: str

    @classmethod
    def from_domain(cls, error: TicketError) -> "TicketErrorResponse":
        return cls(**error.to_dict())


class SLAEvaluationResponse(BaseModel):
    """SLA judgement for one ticket."""
    ticket_id: str
    priority: str
    status: str
    created_at: datetime
    elapsed_hours: float
    elapsed_display: str
    target_hours: float
    ratio: float
    compliance: str
    clock_skew: bool = False
    evaluated_at: datetime

    @classmethod
    def from_domain(cls, result: SLAEvaluationResult) -> "SLAEvaluationResponse":
        """Create from domain result, adding the display form of the elapsed time."""
        data = result.to_dict()
        data["elapsed_display"] = SLACalculator.format_hours(result.elapsed_hours)
        return cls(**data)


class EvaluationBatchResponse(BaseModel):
    """Evaluations for a ticket set with isolated failures."""
    evaluated_at: Optional[datetime] = None
    results: List[SLAEvaluationResponse] = Field(default_factory=list)
    errors: List[TicketErrorResponse] = Field(default_factory=list)


class AdherenceStats(BaseModel):
    """Met/violated counts and adherence for one slice of tickets."""
    total_tickets: int = 0
    closed_met: int = 0
    closed_violated: int = 0
    open_on_track: int = 0
    open_at_risk: int = 0
    open_violated: int = 0
    adherence_percentage: Optional[float] = Field(
        None,
        description="closed_met / (closed_met + closed_violated) * 100; null without closed tickets"
    )
    band: Optional[str] = Field(None, description="good | fair | poor; null without data")


class PriorityAdherence(AdherenceStats):
    """Adherence for one priority."""
    target_hours: float


class ResolutionTimeStats(BaseModel):
    """Average time to resolve closed tickets of one priority."""
    closed_tickets: int = 0
    average_hours: Optional[float] = None
    target_hours: float
    within_target: Optional[bool] = None


class AdherenceReport(BaseModel):
    """Overall, per-priority and time-windowed SLA adherence."""
    generated_at: datetime
    at_risk_threshold: float
    sla_targets: Dict[str, float]
    overall: AdherenceStats
    by_priority: Dict[str, PriorityAdherence]
    average_resolution_times: Dict[str, ResolutionTimeStats]
    time_windows: Dict[str, AdherenceStats]
    errors: List[TicketErrorResponse] = Field(default_factory=list)


class AgingBucketResponse(BaseModel):
    """One aging bucket with its member tickets."""
    label: str
    lower_hours: float
    upper_hours: Optional[float] = None
    color: str
    count: int = 0
    ticket_ids: List[str] = Field(default_factory=list)


class AgingReport(BaseModel):
    """Open tickets grouped by age."""
    generated_at: datetime
    total_open_tickets: int
    average_age_hours: Optional[float] = None
    buckets: List[AgingBucketResponse]
    errors: List[TicketErrorResponse] = Field(default_factory=list)


class AgentPerformance(BaseModel):
    """Scorecard line for one assigned agent."""
    agent_id: str
    active_tickets: int = 0
    closed_tickets: int = 0
    sla_violations: int = 0
    average_handle_hours: Optional[float] = None
    score: int = 0


class AgentPerformanceReport(BaseModel):
    """Agent scorecard ordered by score."""
    generated_at: datetime
    agents: List[AgentPerformance] = Field(default_factory=list)
    errors: List[TicketErrorResponse] = Field(default_factory=list)


class SLAPolicyResponse(BaseModel):
    """The active SLA policy."""
    sla_targets: Dict[str, float]
    at_risk_threshold: float
    aging_buckets: List[AgingBucketResponse]

    @classmethod
    def from_domain(cls, policy) -> "SLAPolicyResponse":
        return cls(
            sla_targets=dict(policy.sla_targets),
            at_risk_threshold=policy.at_risk_threshold,
            aging_buckets=[
                AgingBucketResponse(
                    label=b.label,
                    lower_hours=b.lower_hours,
                    upper_hours=b.upper_hours,
                    color=b.color,
                )
                for b in policy.aging_buckets
            ],
        )
