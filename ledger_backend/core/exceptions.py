# core/exceptions.py

"""
LEDGER SERVICE ERRORS

Centralized domain errors for the stock, valuation and reconciliation
services. Every error carries a stable `code` and a `details` dict so the
operation boundary can turn it into a structured result.

Numbers in `details` are strings (never floats).
"""


class LedgerError(Exception):
    """Base exception for all ledger service failures."""

    code = "ledger_error"
    retryable = False

    def __init__(self, message: str = "", **details):
        super().__init__(message)
        self.message = message
        self.details = details

    def __str__(self):
        return self.message


class LedgerValidationError(LedgerError):
    """Malformed or inconsistent input. Never retried."""

    code = "validation_error"


class NothingToAllocateError(LedgerValidationError):
    """Every requested allocation grouped down to zero."""

    code = "nothing_to_allocate"


class MixedDirectionError(LedgerValidationError):
    """Installments of purchase and sale documents in a single request."""

    code = "mixed_direction"


class DirectionMismatchError(LedgerValidationError):
    """New payment direction does not settle the targeted installments."""

    code = "direction_mismatch"


class NotFoundError(LedgerError):
    """
    Entity does not resolve inside the caller's organization.

    The message never distinguishes "missing" from "owned by another tenant".
    """

    code = "not_found"

    def __init__(self, entity: str, **details):
        super().__init__(f"{entity} not found or not authorized", **details)


class PermissionDeniedError(LedgerError):
    """Caller's context does not allow writes."""

    code = "forbidden"


class InvariantViolationError(LedgerError):
    """A conservation rule would be broken (requested vs available)."""

    code = "invariant_violation"


class PaymentCapacityExceededError(InvariantViolationError):
    code = "payment_capacity_exceeded"


class ResidualExceededError(InvariantViolationError):
    code = "residual_exceeded"


class ConfigurationError(LedgerError):
    """Unexpected configuration (e.g. an operation sign outside +1/-1). Fatal."""

    code = "configuration_error"


class ConflictError(LedgerError):
    """Concurrent write lost the race. Safe to retry."""

    code = "conflict"
    retryable = True
