# core/results.py

"""
OPERATION BOUNDARY

Exposed ledger operations never raise domain errors at their callers.
`ledger_operation` converts them into an OperationResult:

- LedgerError subclasses   -> failure with the error's code + details
- django ValidationError    -> failure "validation_error"
- IntegrityError            -> failure "conflict" (retryable, tx rolled back)
- anything else             -> propagates (database down, programming error)
"""

from __future__ import annotations

import functools
import logging
from dataclasses import dataclass, field
from typing import Any

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import IntegrityError

from core.exceptions import ConfigurationError, ConflictError, LedgerError

logger = logging.getLogger("ledger.operations")


@dataclass(frozen=True)
class OperationResult:
    success: bool
    data: Any = None
    error: str | None = None
    code: str | None = None
    details: dict = field(default_factory=dict)
    retryable: bool = False

    @classmethod
    def ok(cls, data=None) -> "OperationResult":
        return cls(success=True, data=data)

    @classmethod
    def failure(cls, exc: LedgerError) -> "OperationResult":
        return cls(
            success=False,
            error=exc.message,
            code=exc.code,
            details=dict(exc.details),
            retryable=exc.retryable,
        )


def _django_validation_message(exc: DjangoValidationError) -> str:
    if hasattr(exc, "message_dict"):
        return "; ".join(
            f"{k}: {' '.join(v)}" for k, v in sorted(exc.message_dict.items())
        )
    return " ".join(exc.messages)


def ledger_operation(func):
    """Wrap a service call so it returns an OperationResult."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        name = func.__name__
        try:
            return OperationResult.ok(func(*args, **kwargs))
        except ConfigurationError as exc:
            logger.critical(
                "Ledger configuration error",
                extra={"operation": name, "error": exc.message, **exc.details},
            )
            return OperationResult.failure(exc)
        except LedgerError as exc:
            logger.warning(
                "Ledger operation rejected",
                extra={"operation": name, "code": exc.code, "error": exc.message},
            )
            return OperationResult.failure(exc)
        except DjangoValidationError as exc:
            message = _django_validation_message(exc)
            logger.warning(
                "Ledger operation rejected by model validation",
                extra={"operation": name, "error": message},
            )
            return OperationResult(
                success=False, error=message, code="validation_error"
            )
        except IntegrityError as exc:
            logger.warning(
                "Ledger operation hit a write conflict",
                extra={"operation": name, "error": str(exc)},
            )
            return OperationResult.failure(
                ConflictError("Concurrent update detected, please retry")
            )

    return wrapper
