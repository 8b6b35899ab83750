"""
Workflow Value Objects
=======================

The status catalog, transition graph and role permissions.

Lookups go through explicit tables keyed by enum members: a role or status
that is not in a table is refused, never allowed by default.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import FrozenSet, Mapping, Optional, Tuple, Union

from servicedesk.config import Role, TicketStatus


@dataclass(frozen=True)
class StatusInfo:
    """Display metadata for one status. ``order`` is its happy-path position."""
    status: TicketStatus
    order: int
    color: str
    description: str

    def to_dict(self) -> dict:
        return {
            "name": self.status.value,
            "order": self.order,
            "color": self.color,
            "description": self.description,
        }


STATUS_CATALOG: Tuple[StatusInfo, ...] = (
    StatusInfo(TicketStatus.NEW, 1, "#3b82f6", "Submitted and waiting to be claimed by support"),
    StatusInfo(TicketStatus.OPEN, 2, "#10b981", "Claimed and being worked on"),
    StatusInfo(TicketStatus.PENDING, 3, "#f59e0b", "Waiting on the requester or a third party"),
    StatusInfo(TicketStatus.CLOSED, 4, "#6b7280", "Resolved and closed"),
)

# New -> Closed is deliberately absent: a ticket must be actioned before closing.
DEFAULT_TRANSITIONS: Mapping[TicketStatus, FrozenSet[TicketStatus]] = MappingProxyType({
    TicketStatus.NEW: frozenset({TicketStatus.OPEN}),
    TicketStatus.OPEN: frozenset({TicketStatus.PENDING, TicketStatus.CLOSED}),
    TicketStatus.PENDING: frozenset({TicketStatus.OPEN, TicketStatus.CLOSED}),
    TicketStatus.CLOSED: frozenset(),
})

_STAFF_SCOPE = frozenset({TicketStatus.NEW, TicketStatus.OPEN, TicketStatus.PENDING})

# Statuses from which each role may initiate a change. Normal users act only
# through the creator rule.
DEFAULT_ROLE_PERMISSIONS: Mapping[Role, FrozenSet[TicketStatus]] = MappingProxyType({
    Role.NORMAL_USER: frozenset(),
    Role.TECHNICAL_USER: _STAFF_SCOPE,
    Role.TECHNICAL_SUPERVISOR: _STAFF_SCOPE,
    Role.SYSTEM_ADMIN: _STAFF_SCOPE,
})


def parse_role(value: Union[Role, str, None]) -> Optional[Role]:
    """The Role for ``value``, or None when unrecognized."""
    if isinstance(value, Role):
        return value
    try:
        return Role(value)
    except ValueError:
        return None


def parse_status(value: Union[TicketStatus, str, None]) -> Optional[TicketStatus]:
    """The TicketStatus for ``value``, or None when unrecognized."""
    if isinstance(value, TicketStatus):
        return value
    try:
        return TicketStatus(value)
    except ValueError:
        return None


@dataclass(frozen=True)
class WorkflowPolicy:
    """
    Transition graph plus role gating.

    ``creator_can_cancel`` lets a ticket's creator close their own ticket
    while it is still New, the one exception to the New -> Closed ban.
    """
    transitions: Mapping[TicketStatus, FrozenSet[TicketStatus]] = field(
        default_factory=lambda: DEFAULT_TRANSITIONS
    )
    role_permissions: Mapping[Role, FrozenSet[TicketStatus]] = field(
        default_factory=lambda: DEFAULT_ROLE_PERMISSIONS
    )
    creator_can_cancel: bool = False
    initial_status: TicketStatus = TicketStatus.NEW
    terminal_status: TicketStatus = TicketStatus.CLOSED

    def successors(self, status: TicketStatus) -> FrozenSet[TicketStatus]:
        return self.transitions.get(status, frozenset())

    def is_edge(self, current: TicketStatus, target: TicketStatus) -> bool:
        return target in self.successors(current)

    def role_scope(self, role: Role) -> FrozenSet[TicketStatus]:
        return self.role_permissions.get(role, frozenset())
