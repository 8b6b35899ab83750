"""
Workflow Domain Layer
=====================

Ticket status state machine: status catalog, transition graph, role
permissions and the decisions they produce.
"""

from servicedesk.workflow.domain.entities import (
    ReasonCode,
    TransitionDecision,
    TransitionOutcome,
    TransitionRequest,
)
from servicedesk.workflow.domain.value_objects import (
    DEFAULT_ROLE_PERMISSIONS,
    DEFAULT_TRANSITIONS,
    STATUS_CATALOG,
    StatusInfo,
    WorkflowPolicy,
    parse_role,
    parse_status,
)

__all__ = [
    "ReasonCode",
    "TransitionDecision",
    "TransitionOutcome",
    "TransitionRequest",
    "DEFAULT_ROLE_PERMISSIONS",
    "DEFAULT_TRANSITIONS",
    "STATUS_CATALOG",
    "StatusInfo",
    "WorkflowPolicy",
    "parse_role",
    "parse_status",
]
