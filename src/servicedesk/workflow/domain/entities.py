"""
Workflow Domain Entities
=========================

Decisions and outcomes produced by the status workflow.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Union

from servicedesk.config import Role, TicketStatus
from servicedesk.core import IllegalTransition
from servicedesk.sla.domain import Ticket


class ReasonCode:
    """Machine-readable rejection codes."""
    UNKNOWN_ROLE = "unknown_role"
    UNKNOWN_STATUS = "unknown_status"
    TERMINAL_STATUS = "terminal_status"
    NOT_ACTIONED = "not_actioned"
    NO_SUCH_TRANSITION = "no_such_transition"
    NOT_CREATOR = "not_creator"
    CREATOR_AFTER_NEW = "creator_after_new"
    ROLE_NOT_PERMITTED = "role_not_permitted"


@dataclass(frozen=True)
class TransitionDecision:
    """Whether a change is allowed, and if not, exactly why."""
    allowed: bool
    reason: Optional[str] = None
    code: Optional[str] = None

    @classmethod
    def allow(cls) -> "TransitionDecision":
        return cls(allowed=True)

    @classmethod
    def deny(cls, code: str, reason: str) -> "TransitionDecision":
        return cls(allowed=False, reason=reason, code=code)

    def __bool__(self) -> bool:
        return self.allowed


@dataclass
class TransitionRequest:
    """A request to move ``ticket`` to ``target_status`` on behalf of a user."""
    ticket: Ticket
    target_status: Union[TicketStatus, str]
    role: Union[Role, str]
    requester_id: Optional[str] = None


@dataclass
class TransitionOutcome:
    """
    Result of applying one transition.

    ``already_closed`` reports the idempotent close-of-a-closed-ticket case;
    ``error`` carries the rejection when the request was illegal.
    """
    ticket_id: str
    previous_status: str
    status: str
    applied: bool = False
    already_closed: bool = False
    resolved_at: Optional[datetime] = None
    error: Optional[IllegalTransition] = None

    @property
    def rejected(self) -> bool:
        return self.error is not None
