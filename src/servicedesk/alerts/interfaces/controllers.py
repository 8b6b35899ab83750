"""
Alert Controllers (API Routes)
===============================

Controllers are thin - they delegate to AlertClassifier.
"""

from fastapi import APIRouter

from servicedesk.alerts.application import AlertClassifier, AlertResponse, ClassifyAlertRequest
from servicedesk.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)
router = APIRouter(prefix="/alerts", tags=["Alerts"])

CLASSIFY_REQUEST_EXAMPLE = {
    "event": {
        "kind": "sla_violation",
        "ticket_id": "42",
        "ticket_number": "TKT-0042",
        "priority": "Critical",
        "elapsed_hours": 5.0,
        "target_hours": 4.0,
        "occurred_at": "2024-01-10T15:00:00Z",
        "assigned_to": "agent-7"
    }
}

_classifier = AlertClassifier()


@router.post(
    "/classify",
    response_model=AlertResponse,
    summary="Classify a ticket event into an alert",
    description="""
    Map one ticket event to an alert record.

    **Event kinds**: `sla_violation`, `status_change`, `assignment`,
    `ticket_created`, `new_message`

    **Severity**:
    - `critical`: SLA violation
    - `warning`: assignment, Critical/High ticket created
    - `info`: everything else
    """,
    responses={200: {"description": "Classified alert"}},
    openapi_extra={"requestBody": {"content": {"application/json": {"example": CLASSIFY_REQUEST_EXAMPLE}}}}
)
async def classify_alert(request: ClassifyAlertRequest) -> AlertResponse:
    alert = _classifier.classify(request.event.to_domain())
    logger.info(
        "Alert classified",
        extra={
            "ticket_id": alert.ticket_id,
            "alert_type": alert.alert_type.value,
            "severity": alert.severity.value
        }
    )
    return AlertResponse.from_domain(alert)


# Export router for inclusion in main app
alerts_router = router
