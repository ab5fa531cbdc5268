from __future__ import annotations

from decimal import Decimal


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class NotFoundError(DomainError):
    """Raised when a referenced employee, record or request does not exist."""


class Unauthorized(DomainError):
    """Raised when an actor lacks the authority for an action."""


class AlreadyCheckedIn(DomainError):
    """Raised when an open session already exists for the employee today."""


class NotCheckedIn(DomainError):
    """Raised when a session operation needs an open session and there is none."""


class InvalidTransition(DomainError):
    """Raised when a session operation is not allowed from the current state."""


class AlreadyResolved(DomainError):
    """Raised when a request is no longer in the state an operation requires."""


class ConcurrentModification(DomainError):
    """Raised when a versioned write loses a race with another writer."""


class InsufficientBalance(DomainError):
    """Raised when a debit would push usage above the allowance."""

    def __init__(self, *, kind: str, requested: Decimal, remaining: Decimal):
        self.kind = kind
        self.requested = requested
        self.remaining = remaining
        super().__init__(f"Insufficient {kind} balance: requested {requested}, remaining {remaining}")
