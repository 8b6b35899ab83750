"""
Workflow Controllers (API Routes)
==================================

FastAPI routes for the ticket status workflow.

Controllers are thin - they delegate to StatusWorkflow, which the
application lifespan places on ``app.state``.
"""

from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, Request

from servicedesk.alerts.application import AlertClassifier, AlertResponse
from servicedesk.alerts.domain import StatusChangeEvent
from servicedesk.config import VALID_ROLES, VALID_STATUSES
from servicedesk.sla.application import TicketSnapshotDTO
from servicedesk.workflow.application import (
    AllowedTransitionsResponse,
    StatusInfoResponse,
    StatusWorkflow,
    TransitionApplyRequest,
    TransitionApplyResponse,
    TransitionEdge,
    TransitionValidationRequest,
    TransitionValidationResponse,
    WorkflowResponse,
)
from servicedesk.workflow.domain import TransitionOutcome

router = APIRouter(prefix="/status", tags=["Status Workflow"])

_alert_classifier = AlertClassifier()


# ========== Dependencies ==========

def get_workflow(request: Request) -> StatusWorkflow:
    """Get the shared StatusWorkflow instance."""
    workflow = getattr(request.app.state, "workflow", None)
    return workflow or StatusWorkflow()


# ========== Route Handlers ==========

@router.get(
    "/workflow",
    response_model=WorkflowResponse,
    summary="Get the status workflow",
    description="""
    Status catalog (name, order, color, description), the transition graph
    and the statuses from which each role may initiate a change.

    `New -> Closed` is not an edge: a ticket must be actioned before closing.
    """
)
async def get_status_workflow(workflow: StatusWorkflow = Depends(get_workflow)):
    policy = workflow.policy
    return WorkflowResponse(
        statuses=[StatusInfoResponse.from_domain(info) for info in workflow.statuses()],
        transitions=[
            TransitionEdge(from_status=current.value, to_status=target.value)
            for current in VALID_STATUSES
            for target in workflow.allowed_transitions(current)
        ],
        role_permissions={
            role.value: [s.value for s in VALID_STATUSES if s in policy.role_scope(role)]
            for role in VALID_ROLES
        },
        initial_status=policy.initial_status.value,
        terminal_status=policy.terminal_status.value,
        creator_can_cancel=policy.creator_can_cancel,
    )


@router.get(
    "/allowed-transitions/{current_status}",
    response_model=AllowedTransitionsResponse,
    summary="List legal successors of a status",
    description="Role-independent successors; an unrecognized status has none."
)
async def get_allowed_transitions(
    current_status: str,
    workflow: StatusWorkflow = Depends(get_workflow)
):
    return AllowedTransitionsResponse(
        current_status=current_status,
        allowed_transitions=[s.value for s in workflow.allowed_transitions(current_status)],
    )


@router.post(
    "/validate",
    response_model=TransitionValidationResponse,
    summary="Check a proposed status change",
    description="""
    Decide whether the requester may move the ticket, without applying it.

    Refusals carry a human-readable `reason` and a machine-readable `code`:
    `unknown_role`, `unknown_status`, `terminal_status`, `not_actioned`,
    `no_such_transition`, `not_creator`, `creator_after_new`,
    `role_not_permitted`.
    """
)
async def validate_transition(
    request: TransitionValidationRequest,
    workflow: StatusWorkflow = Depends(get_workflow)
):
    decision = workflow.validate_transition(
        request.role,
        request.creator_id,
        request.requester_id,
        request.current_status,
        request.target_status,
    )
    choices = workflow.allowed_transitions_for(
        request.role, request.creator_id, request.requester_id, request.current_status
    )
    return TransitionValidationResponse.from_domain(decision, [s.value for s in choices])


@router.post(
    "/apply",
    response_model=TransitionApplyResponse,
    summary="Apply a status change to a ticket snapshot",
    description="""
    Re-validate and apply a transition to the submitted snapshot. Nothing is
    persisted: the updated snapshot is returned to the caller.

    - Closing stamps `resolved_at` once.
    - Closing a ticket that is already Closed is a no-op (`already_closed`).
    - Illegal transitions return **409** with `reason` and `code`.

    Applied changes include the `status_change` alert for the ticket creator.
    """
)
async def apply_transition(
    request: TransitionApplyRequest,
    workflow: StatusWorkflow = Depends(get_workflow)
):
    ticket = request.ticket.to_domain()
    now = request.now or datetime.now(timezone.utc)

    outcome = workflow.apply_transition(
        ticket, request.target_status, request.role, request.requester_id, now
    )

    return TransitionApplyResponse.from_domain(
        TicketSnapshotDTO.from_domain(ticket),
        outcome,
        _status_change_alert(outcome, ticket.display_id, ticket.created_by, request.requester_id, now),
    )


def _status_change_alert(
    outcome: TransitionOutcome,
    ticket_number: Optional[str],
    creator_id: Optional[str],
    changed_by: Optional[str],
    occurred_at: datetime
) -> Optional[AlertResponse]:
    if not outcome.applied:
        return None
    alert = _alert_classifier.classify(StatusChangeEvent(
        ticket_id=outcome.ticket_id,
        from_status=outcome.previous_status,
        to_status=outcome.status,
        occurred_at=occurred_at,
        ticket_number=ticket_number,
        changed_by=changed_by,
        recipient_id=creator_id,
    ))
    return AlertResponse.from_domain(alert)


# Export router for inclusion in main app
workflow_router = router
