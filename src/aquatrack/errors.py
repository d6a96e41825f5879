"""Error taxonomy shared by the ledger services and the HTTP layer."""

from __future__ import annotations


class LedgerError(Exception):
    """Base class for failures surfaced to callers of the ledger."""

    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(LedgerError):
    """Caller-supplied input violates a precondition."""

    status_code = 400


class NotFoundError(LedgerError):
    """A referenced customer, order or user does not exist."""

    status_code = 404


class InvalidReturnError(LedgerError):
    """A container return exceeds what the customer currently holds."""

    status_code = 409


class ConflictError(LedgerError):
    """A row cannot be removed while other rows still reference it."""

    status_code = 409


class AuthorizationError(LedgerError):
    """The caller's role does not permit the requested action."""

    status_code = 403


class AuthenticationError(AuthorizationError):
    status_code = 401


class ScheduleError(LedgerError):
    """A scheduled delivery was requested without a valid future timestamp."""

    status_code = 422


class StoreError(LedgerError):
    """The persistence backend rejected or failed a request."""

    status_code = 502
