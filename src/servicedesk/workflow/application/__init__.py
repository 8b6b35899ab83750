"""
Workflow Application Layer
==========================

The status workflow service and the DTOs of its endpoints.
"""

from servicedesk.workflow.application.dto import (
    StatusInfoResponse,
    TransitionEdge,
    WorkflowResponse,
    AllowedTransitionsResponse,
    TransitionValidationRequest,
    TransitionValidationResponse,
    TransitionApplyRequest,
    TransitionApplyResponse,
)
from servicedesk.workflow.application.services import StatusWorkflow

__all__ = [
    "StatusInfoResponse",
    "TransitionEdge",
    "WorkflowResponse",
    "AllowedTransitionsResponse",
    "TransitionValidationRequest",
    "TransitionValidationResponse",
    "TransitionApplyRequest",
    "TransitionApplyResponse",
    "StatusWorkflow",
]
