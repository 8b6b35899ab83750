"""
Alerts Application Layer
========================

Alert classification service and its DTOs.
"""

from servicedesk.alerts.application.dto import (
    AlertResponse,
    AlertEventDTO,
    ClassifyAlertRequest,
    SLAViolationEventDTO,
    StatusChangeEventDTO,
    AssignmentEventDTO,
    TicketCreatedEventDTO,
    NewMessageEventDTO,
)
from servicedesk.alerts.application.services import AlertClassifier, detect_sla_violation

__all__ = [
    "AlertResponse",
    "AlertEventDTO",
    "ClassifyAlertRequest",
    "SLAViolationEventDTO",
    "StatusChangeEventDTO",
    "AssignmentEventDTO",
    "TicketCreatedEventDTO",
    "NewMessageEventDTO",
    "AlertClassifier",
    "detect_sla_violation",
]
