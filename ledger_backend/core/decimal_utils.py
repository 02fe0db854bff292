# core/decimal_utils.py

"""
======================================================
PATH: core/decimal_utils.py
======================================================
DECIMAL ARITHMETIC

Every monetary or quantity value entering or leaving the ledger passes
through here.

Rules:
- Decimal only. Floats are rejected, never coerced.
- Rounding is ROUND_HALF_UP at fixed places:
    money      -> 2 dp
    quantity   -> 4 dp
    unit cost  -> 4 dp (weighted average cost, last cost)
"""

from __future__ import annotations

import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Iterable

from core.exceptions import LedgerValidationError

TWOPLACES = Decimal("0.01")
FOURPLACES = Decimal("0.0001")

ZERO = Decimal("0")
ZERO_MONEY = Decimal("0.00")

_AMOUNT_RE = re.compile(r"^\d+(\.\d{1,2})?$")


def to_decimal(value, *, field_name: str = "value") -> Decimal:
    if value is None or value == "" or value == "null":
        raise LedgerValidationError(f"{field_name} is required", field=field_name)
    if isinstance(value, bool):
        raise LedgerValidationError(
            f"{field_name} must be a valid decimal", field=field_name
        )
    if isinstance(value, float):
        # binary floats cannot represent cents exactly
        raise LedgerValidationError(
            f"{field_name} must be a decimal string or Decimal, not float",
            field=field_name,
        )
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value).strip())
        except (InvalidOperation, ValueError) as exc:
            raise LedgerValidationError(
                f"{field_name} must be a valid decimal", field=field_name
            ) from exc
    if not result.is_finite():
        raise LedgerValidationError(
            f"{field_name} must be a finite decimal", field=field_name
        )
    return result


def quantize(value, places: Decimal) -> Decimal:
    return to_decimal(value).quantize(places, rounding=ROUND_HALF_UP)


def money(value) -> Decimal:
    """Round to 2 dp (amounts)."""
    return quantize(ZERO if value is None else value, TWOPLACES)


def quantity(value) -> Decimal:
    """Round to 4 dp (quantities)."""
    return quantize(ZERO if value is None else value, FOURPLACES)


def unit_cost(value) -> Decimal:
    """Round to 4 dp (weighted average cost, last cost)."""
    return quantize(ZERO if value is None else value, FOURPLACES)


def parse_amount(value, *, field_name: str = "amount") -> Decimal:
    """
    Strict amount parser for allocations and payments.

    Accepts "123", "123.4", "123.45" (or an equivalent Decimal) and
    requires the result to be strictly positive.
    """
    if isinstance(value, Decimal):
        raw = format(value, "f")
    elif isinstance(value, (int, str)) and not isinstance(value, bool):
        raw = str(value).strip()
    else:
        raise LedgerValidationError(
            f"{field_name} must be a decimal string with at most 2 decimals",
            field=field_name,
        )

    if not _AMOUNT_RE.match(raw):
        # Decimal("500.00") is fine; Decimal("500.000") is not
        try:
            normalized = Decimal(raw)
        except InvalidOperation as exc:
            raise LedgerValidationError(
                f"{field_name} must be a decimal string with at most 2 decimals",
                field=field_name,
            ) from exc
        if normalized != normalized.quantize(TWOPLACES) or normalized < ZERO:
            raise LedgerValidationError(
                f"{field_name} must be a decimal string with at most 2 decimals",
                field=field_name,
            )
        raw = format(normalized.quantize(TWOPLACES), "f")

    amount = money(raw)
    if amount <= ZERO_MONEY:
        raise LedgerValidationError(
            f"{field_name} must be greater than zero", field=field_name
        )
    return amount


def sum_decimals(values: Iterable) -> Decimal:
    total = ZERO
    for v in values:
        total += to_decimal(v)
    return total


def fmt_money(value) -> str:
    return format(money(value), "f")


def fmt_quantity(value) -> str:
    return format(quantity(value), "f")
