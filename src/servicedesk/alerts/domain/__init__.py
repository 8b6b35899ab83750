"""
Alerts Domain Layer
===================

Alert records and the ticket events that produce them.
"""

from servicedesk.alerts.domain.entities import (
    Alert,
    AssignmentEvent,
    NewMessageEvent,
    SLAViolationEvent,
    StatusChangeEvent,
    TicketCreatedEvent,
)

__all__ = [
    "Alert",
    "AssignmentEvent",
    "NewMessageEvent",
    "SLAViolationEvent",
    "StatusChangeEvent",
    "TicketCreatedEvent",
]
