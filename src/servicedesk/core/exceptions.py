"""
Core Exceptions
================

Custom exceptions for the application following clean architecture principles.

These exceptions define domain-specific errors that can be caught and handled
appropriately at the application boundaries.
"""

from typing import Optional


class ApplicationException(Exception):
    """Base exception for all application errors."""

    def __init__(self, message: str, details: Optional[dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class DomainException(ApplicationException):
    """Base exception for domain logic violations."""


class ValidationException(ApplicationException):
    """Exception for validation errors."""


class ConfigurationException(ApplicationException):
    """Exception for configuration errors."""


class UnknownPriority(DomainException):
    """A ticket references a priority absent from the SLA policy."""

    def __init__(self, priority: object, ticket_id: Optional[str] = None):
        self.priority = priority
        self.ticket_id = ticket_id
        message = f"Unknown priority '{priority}'"
        if ticket_id:
            message += f" on ticket {ticket_id}"
        super().__init__(message, {"priority": str(priority), "ticket_id": ticket_id})


class InvalidTicket(DomainException):
    """A ticket carries missing or malformed data."""

    def __init__(self, ticket_id: Optional[str], reason: str):
        self.ticket_id = ticket_id
        self.reason = reason
        super().__init__(
            f"Invalid ticket {ticket_id}: {reason}",
            {"ticket_id": ticket_id, "reason": reason}
        )


class IllegalTransition(DomainException):
    """A requested status change violates the workflow graph or role gating."""

    def __init__(
        self,
        current_status: str,
        target_status: str,
        reason: str,
        code: str = "illegal_transition"
    ):
        self.current_status = current_status
        self.target_status = target_status
        self.reason = reason
        self.code = code
        super().__init__(
            f"Cannot move ticket from {current_status} to {target_status}: {reason}",
            {
                "current_status": current_status,
                "target_status": target_status,
                "reason": reason,
                "code": code,
            }
        )


class AlreadyClosed(DomainException):
    """Closing a ticket that is already Closed. Idempotent no-op signal."""

    def __init__(self, ticket_id: str):
        self.ticket_id = ticket_id
        super().__init__(f"Ticket {ticket_id} is already closed", {"ticket_id": ticket_id})
