"""
SLA Domain Layer
================

Domain layer for SLA tracking.

Contains:
- Entities: Ticket, SLAEvaluationResult, TicketError
- Value Objects: SLAPolicy, AgingBucket
- Domain Services: Stateless calculations (SLACalculator)

This layer has no dependencies on infrastructure - pure Python business logic.
"""

from servicedesk.sla.domain.entities import Ticket, SLAEvaluationResult, TicketError
from servicedesk.sla.domain.value_objects import (
    SLACalculator,
    SLAPolicy,
    AgingBucket,
    DEFAULT_AGING_BUCKETS,
    DEFAULT_AT_RISK_THRESHOLD,
    DEFAULT_SLA_TARGETS,
    to_utc,
)

__all__ = [
    # Entities
    "Ticket",
    "SLAEvaluationResult",
    "TicketError",
    # Value Objects & Services
    "SLACalculator",
    "SLAPolicy",
    "AgingBucket",
    "DEFAULT_AGING_BUCKETS",
    "DEFAULT_AT_RISK_THRESHOLD",
    "DEFAULT_SLA_TARGETS",
    "to_utc",
]
