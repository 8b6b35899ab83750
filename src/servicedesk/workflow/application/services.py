"""
Workflow Application Services
==============================

The role-gated ticket status state machine.

The same service backs the UI (which buttons to show) and the server-side
re-validation before a change is committed, so both sides share one set of
rules.
"""

from datetime import datetime, timezone
from typing import Iterable, List, Optional, Union

from servicedesk.config import Role, TicketStatus, VALID_STATUSES
from servicedesk.core import AlreadyClosed, IllegalTransition
from servicedesk.shared.infrastructure.logging import get_logger
from servicedesk.sla.domain import Ticket
from servicedesk.workflow.domain import (
    STATUS_CATALOG,
    ReasonCode,
    StatusInfo,
    TransitionDecision,
    TransitionOutcome,
    TransitionRequest,
    WorkflowPolicy,
    parse_role,
    parse_status,
)

logger = get_logger(__name__)

RoleLike = Union[Role, str, None]
StatusLike = Union[TicketStatus, str, None]


def _value(item) -> str:
    return getattr(item, "value", str(item))


class StatusWorkflow:
    """
    Validates and applies ticket status transitions.

    Every check fails closed: unrecognized roles or statuses are refused.
    """

    def __init__(self, policy: Optional[WorkflowPolicy] = None):
        self._policy = policy or WorkflowPolicy()

    @property
    def policy(self) -> WorkflowPolicy:
        return self._policy

    def statuses(self) -> List[StatusInfo]:
        """Status catalog in happy-path order."""
        return sorted(STATUS_CATALOG, key=lambda s: s.order)

    def allowed_transitions(self, current_status: StatusLike) -> List[TicketStatus]:
        """Legal successors of ``current_status`` in canonical order, ignoring roles."""
        current = parse_status(current_status)
        if current is None:
            return []
        successors = self._policy.successors(current)
        return [s for s in VALID_STATUSES if s in successors]

    def allowed_transitions_for(
        self,
        role: RoleLike,
        creator_id: Optional[str],
        requester_id: Optional[str],
        current_status: StatusLike
    ) -> List[TicketStatus]:
        """Successors this particular requester may move the ticket to."""
        return [
            target for target in VALID_STATUSES
            if self.can_transition(role, creator_id, requester_id, current_status, target)
        ]

    def check_update(
        self,
        role: RoleLike,
        creator_id: Optional[str],
        requester_id: Optional[str],
        current_status: StatusLike
    ) -> TransitionDecision:
        """
        May this requester act on the ticket at all (edit, reassign, move)?

        Privileged roles act within their status scope. Anyone else acts only
        as the ticket's creator, and only while the ticket is New.
        """
        parsed_role = parse_role(role)
        if parsed_role is None:
            return TransitionDecision.deny(ReasonCode.UNKNOWN_ROLE, f"unrecognized role '{role}'")

        current = parse_status(current_status)
        if current is None:
            return TransitionDecision.deny(
                ReasonCode.UNKNOWN_STATUS, f"unrecognized status '{current_status}'"
            )

        if current == self._policy.terminal_status:
            return TransitionDecision.deny(ReasonCode.TERMINAL_STATUS, "ticket is closed")

        if current in self._policy.role_scope(parsed_role):
            return TransitionDecision.allow()

        if not _is_creator(creator_id, requester_id):
            if parsed_role == Role.NORMAL_USER:
                return TransitionDecision.deny(
                    ReasonCode.NOT_CREATOR, "only the ticket creator or support staff may update this ticket"
                )
            return TransitionDecision.deny(
                ReasonCode.ROLE_NOT_PERMITTED,
                f"role '{parsed_role.value}' may not update tickets in status {current.value}"
            )

        if current != self._policy.initial_status:
            return TransitionDecision.deny(
                ReasonCode.CREATOR_AFTER_NEW,
                "the ticket creator may only act while the ticket is New"
            )

        return TransitionDecision.allow()

    def validate_transition(
        self,
        role: RoleLike,
        creator_id: Optional[str],
        requester_id: Optional[str],
        current_status: StatusLike,
        target_status: StatusLike
    ) -> TransitionDecision:
        """Decide a requested transition, with a specific reason on refusal."""
        current = parse_status(current_status)
        target = parse_status(target_status)
        if current is None or target is None:
            bad = current_status if current is None else target_status
            return TransitionDecision.deny(ReasonCode.UNKNOWN_STATUS, f"unrecognized status '{bad}'")

        if parse_role(role) is None:
            return TransitionDecision.deny(ReasonCode.UNKNOWN_ROLE, f"unrecognized role '{role}'")

        if current == self._policy.terminal_status:
            return TransitionDecision.deny(
                ReasonCode.TERMINAL_STATUS, "ticket is closed and cannot change status"
            )

        if self._is_creator_cancel(creator_id, requester_id, current, target):
            return TransitionDecision.allow()

        if not self._policy.is_edge(current, target):
            if current == self._policy.initial_status and target == self._policy.terminal_status:
                return TransitionDecision.deny(
                    ReasonCode.NOT_ACTIONED, "must be actioned before closing"
                )
            return TransitionDecision.deny(
                ReasonCode.NO_SUCH_TRANSITION,
                f"no transition from {current.value} to {target.value}"
            )

        return self.check_update(role, creator_id, requester_id, current)

    def can_transition(
        self,
        role: RoleLike,
        creator_id: Optional[str],
        requester_id: Optional[str],
        current_status: StatusLike,
        target_status: StatusLike
    ) -> bool:
        return self.validate_transition(
            role, creator_id, requester_id, current_status, target_status
        ).allowed

    def ensure_transition(
        self,
        role: RoleLike,
        creator_id: Optional[str],
        requester_id: Optional[str],
        current_status: StatusLike,
        target_status: StatusLike
    ) -> None:
        """Raise IllegalTransition when the transition is refused."""
        decision = self.validate_transition(
            role, creator_id, requester_id, current_status, target_status
        )
        if not decision.allowed:
            raise IllegalTransition(
                _value(current_status), _value(target_status), decision.reason, decision.code
            )

    def apply_transition(
        self,
        ticket: Ticket,
        target_status: StatusLike,
        role: RoleLike,
        requester_id: Optional[str] = None,
        now: Optional[datetime] = None
    ) -> TransitionOutcome:
        """
        Validate and apply a transition to ``ticket`` in place.

        Closing a ticket stamps ``resolved_at`` once. Closing an already
        closed ticket is a no-op reported as ``already_closed``.

        Raises:
            IllegalTransition: the request breaks the graph or role gating
        """
        previous = _value(ticket.status)
        target = parse_status(target_status)

        if ticket.is_closed and target == TicketStatus.CLOSED:
            return self._already_closed(ticket, previous)

        self.ensure_transition(role, ticket.created_by, requester_id, ticket.status, target_status)

        if target == TicketStatus.CLOSED:
            had_resolution = ticket.resolved_at is not None
            try:
                ticket.close(now or datetime.now(timezone.utc))
            except AlreadyClosed:
                return self._already_closed(ticket, previous)
            if had_resolution:
                logger.warning(
                    "Closing ticket that already carried resolved_at, keeping it",
                    extra={"ticket_id": ticket.id, "resolved_at": ticket.resolved_at.isoformat()}
                )
        else:
            ticket.status = target

        logger.info(
            "Ticket status changed",
            extra={
                "ticket_id": ticket.id,
                "from_status": previous,
                "to_status": target.value,
                "requester_id": requester_id,
            }
        )

        return TransitionOutcome(
            ticket_id=ticket.id,
            previous_status=previous,
            status=target.value,
            applied=True,
            resolved_at=ticket.resolved_at,
        )

    def apply_transitions(
        self,
        requests: Iterable[TransitionRequest],
        now: Optional[datetime] = None
    ) -> List[TransitionOutcome]:
        """Apply a batch; rejections are reported per request, never raised."""
        outcomes = []
        for request in requests:
            try:
                outcomes.append(self.apply_transition(
                    request.ticket, request.target_status, request.role,
                    request.requester_id, now
                ))
            except IllegalTransition as e:
                outcomes.append(TransitionOutcome(
                    ticket_id=request.ticket.id,
                    previous_status=_value(request.ticket.status),
                    status=_value(request.ticket.status),
                    resolved_at=request.ticket.resolved_at,
                    error=e,
                ))
        return outcomes

    def _is_creator_cancel(
        self,
        creator_id: Optional[str],
        requester_id: Optional[str],
        current: TicketStatus,
        target: TicketStatus
    ) -> bool:
        return (
            self._policy.creator_can_cancel
            and current == self._policy.initial_status
            and target == self._policy.terminal_status
            and _is_creator(creator_id, requester_id)
        )

    @staticmethod
    def _already_closed(ticket: Ticket, previous: str) -> TransitionOutcome:
        logger.info("Ticket already closed, nothing to do", extra={"ticket_id": ticket.id})
        return TransitionOutcome(
            ticket_id=ticket.id,
            previous_status=previous,
            status=previous,
            already_closed=True,
            resolved_at=ticket.resolved_at,
        )


def _is_creator(creator_id: Optional[str], requester_id: Optional[str]) -> bool:
    return bool(creator_id) and bool(requester_id) and str(creator_id) == str(requester_id)
