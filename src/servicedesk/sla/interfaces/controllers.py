"""
SLA Controllers (API Routes)
=============================

FastAPI routes for SLA evaluation and reporting.

Controllers are thin - they delegate to application services. Ticket
snapshots arrive in the request body and nothing is persisted.
"""

from fastapi import APIRouter, Depends, Request

from servicedesk.shared.infrastructure.logging import get_logger, log_latency
from servicedesk.sla.application import (
    AdherenceAggregator,
    AdherenceReport,
    AgentPerformanceReport,
    AgingClassifier,
    AgingReport,
    EvaluationBatchResponse,
    ISLAPolicyProvider,
    SLAEvaluationResponse,
    SLAEvaluator,
    SLAPolicyResponse,
    StaticPolicyProvider,
    TicketBatchRequest,
    TicketErrorResponse,
)

logger = get_logger(__name__)
router = APIRouter(prefix="/sla", tags=["SLA"])


# ========== Example payloads for Swagger ==========

TICKET_BATCH_EXAMPLE = {
    "tickets": [
        {
            "id": "1",
            "ticket_id": "TKT-0001",
            "priority": "Critical",
            "status": "Open",
            "created_at": "2024-01-10T10:00:00Z",
            "assigned_to": "agent-7",
            "created_by": "user-3"
        },
        {
            "id": "2",
            "ticket_id": "TKT-0002",
            "priority": "High",
            "status": "Closed",
            "created_at": "2024-01-10T08:00:00Z",
            "resolved_at": "2024-01-10T12:00:00Z",
            "assigned_to": "agent-7",
            "created_by": "user-5"
        }
    ],
    "now": "2024-01-10T15:00:00Z"
}

_batch_body = {"requestBody": {"content": {"application/json": {"example": TICKET_BATCH_EXAMPLE}}}}


# ========== Dependencies ==========

def get_policy_provider(request: Request) -> ISLAPolicyProvider:
    """Get the policy provider placed on app state at startup."""
    provider = getattr(request.app.state, "policy_manager", None)
    return provider or StaticPolicyProvider()


def get_evaluator(provider: ISLAPolicyProvider = Depends(get_policy_provider)) -> SLAEvaluator:
    return SLAEvaluator(provider)


def get_aging_classifier(
    provider: ISLAPolicyProvider = Depends(get_policy_provider)
) -> AgingClassifier:
    return AgingClassifier(provider)


def get_aggregator(evaluator: SLAEvaluator = Depends(get_evaluator)) -> AdherenceAggregator:
    return AdherenceAggregator(evaluator)


# ========== Route Handlers ==========

@router.get(
    "/policy",
    response_model=SLAPolicyResponse,
    summary="Get the active SLA policy",
    description="""
    Resolution targets per priority (hours), the at-risk threshold and the
    aging buckets.

    | Priority | Target |
    |----------|--------|
    | Critical | 4h     |
    | High     | 8h     |
    | Medium   | 24h    |
    | Low      | 72h    |

    *Defaults; the policy file may override them.*
    """
)
async def get_policy(provider: ISLAPolicyProvider = Depends(get_policy_provider)):
    return SLAPolicyResponse.from_domain(provider.get_policy())


@router.post(
    "/evaluate",
    response_model=EvaluationBatchResponse,
    summary="Evaluate tickets for SLA compliance",
    description="""
    Evaluate each ticket snapshot against its priority target.

    **Compliance**:
    - `met` / `violated`: closed tickets, measured up to `resolved_at`
    - `on_track` / `at_risk` / `violated`: open tickets, measured up to `now`

    Tickets with missing timestamps or unknown priority/status are listed in
    `errors`; the rest of the batch is still evaluated.
    """,
    openapi_extra=_batch_body
)
async def evaluate_tickets(
    request: TicketBatchRequest,
    evaluator: SLAEvaluator = Depends(get_evaluator)
):
    tickets = request.to_domain()
    with log_latency(logger, "sla_evaluation", tickets=len(tickets)):
        batch = evaluator.evaluate_many(tickets, request.now)

    logger.info(
        "SLA evaluation complete",
        extra={
            "tickets_evaluated": len(batch.results),
            "tickets_failed": len(batch.errors),
            "tickets_violated": sum(1 for r in batch.results if r.is_violated)
        }
    )

    return EvaluationBatchResponse(
        evaluated_at=batch.evaluated_at,
        results=[SLAEvaluationResponse.from_domain(r) for r in batch.results],
        errors=[
            TicketErrorResponse.from_domain(e)
            for e in sorted(batch.errors, key=lambda e: e.ticket_id)
        ],
    )


@router.post(
    "/adherence",
    response_model=AdherenceReport,
    summary="Aggregate SLA adherence",
    description="""
    Adherence = closed met / (closed met + closed violated) * 100, rounded to
    one decimal; `null` when no ticket in the slice is closed.

    Reported overall, per priority, and for tickets created in the last
    24 hours, 7 days and 30 days. Each slice carries a `band`
    (`good` >= 90, `fair` >= 75, `poor` otherwise).
    """,
    openapi_extra=_batch_body
)
async def get_adherence(
    request: TicketBatchRequest,
    aggregator: AdherenceAggregator = Depends(get_aggregator)
):
    return aggregator.aggregate(request.to_domain(), request.now)


@router.post(
    "/aging",
    response_model=AgingReport,
    summary="Bucket open tickets by age",
    description="Open tickets grouped into the policy's aging buckets; closed tickets are skipped.",
    openapi_extra=_batch_body
)
async def get_aging(
    request: TicketBatchRequest,
    classifier: AgingClassifier = Depends(get_aging_classifier)
):
    return classifier.age_report(request.to_domain(), request.now)


@router.post(
    "/agent-performance",
    response_model=AgentPerformanceReport,
    summary="Score assigned agents",
    description="""
    Per-agent active and closed ticket counts, SLA violations and average
    handle time. `score = closed * 10 - violations * 5`, ordered by score
    then agent id. Unassigned tickets are excluded.
    """,
    openapi_extra=_batch_body
)
async def get_agent_performance(
    request: TicketBatchRequest,
    aggregator: AdherenceAggregator = Depends(get_aggregator)
):
    return aggregator.agent_performance(request.to_domain(), request.now)


# Export router for inclusion in main app
sla_router = router
