"""
SLA Application Layer
======================

Application layer for SLA tracking.

Contains:
- Services: evaluation, aging and adherence over ticket snapshots
- DTOs: data transfer objects for API serialization and reports

This layer depends on the domain layer and the policy provider interface,
but not on concrete infrastructure implementations.
"""

from servicedesk.sla.application.dto import (
    TicketSnapshotDTO,
    TicketBatchRequest,
    TicketErrorResponse,
    SLAEvaluationResponse,
    EvaluationBatchResponse,
    AdherenceStats,
    PriorityAdherence,
    ResolutionTimeStats,
    AdherenceReport,
    AgingBucketResponse,
    AgingReport,
    AgentPerformance,
    AgentPerformanceReport,
    SLAPolicyResponse,
)
from servicedesk.sla.application.services import (
    ISLAPolicyProvider,
    StaticPolicyProvider,
    EvaluationBatch,
    SLAEvaluator,
    AgingClassifier,
    AdherenceAggregator,
    adherence_percentage,
    adherence_band,
    TIME_WINDOWS,
)

__all__ = [
    # DTOs
    "TicketSnapshotDTO",
    "TicketBatchRequest",
    "TicketErrorResponse",
    "SLAEvaluationResponse",
    "EvaluationBatchResponse",
    "AdherenceStats",
    "PriorityAdherence",
    "ResolutionTimeStats",
    "AdherenceReport",
    "AgingBucketResponse",
    "AgingReport",
    "AgentPerformance",
    "AgentPerformanceReport",
    "SLAPolicyResponse",
    # Services
    "ISLAPolicyProvider",
    "StaticPolicyProvider",
    "EvaluationBatch",
    "SLAEvaluator",
    "AgingClassifier",
    "AdherenceAggregator",
    "adherence_percentage",
    "adherence_band",
    "TIME_WINDOWS",
]
