# finance/services/reconciliation.py

"""
======================================================
PATH: finance/services/reconciliation.py
======================================================
RECONCILIATION ENGINE

Allocates a payment (existing, or created here) across installments.

Pipeline (every check passes before any write):
1. group allocations by installment (duplicates summed, zeros dropped)
2. resolve payment amount + what it already allocates
3. payment capacity: existing + requested <= payment.amount
4. installments resolve inside the caller's organization
5. residual per installment (allocations from ALL payments) >= requested
6. new payment only: account belongs to organization, direction matches
   (PURCHASE -> OUTFLOW, SALE -> INFLOW, mixed -> rejected)
7. one transaction: lock installments (+ payment), re-run 3 and 5 on the
   locked rows, create payment, upsert mappings as previous + requested

Invariants after every successful call:
- SUM(mappings of a payment) <= payment.amount
- SUM(mappings of an installment) <= installment.amount
"""

from __future__ import annotations

import dataclasses
import datetime
import logging
import uuid
from dataclasses import dataclass, field
from decimal import Decimal

from django.conf import settings
from django.db import transaction

from core.decimal_utils import (
    ZERO_MONEY,
    fmt_money,
    money,
    parse_amount,
    sum_decimals,
    to_decimal,
)
from core.exceptions import (
    ConfigurationError,
    ConflictError,
    DirectionMismatchError,
    LedgerValidationError,
    MixedDirectionError,
    NotFoundError,
    NothingToAllocateError,
    PaymentCapacityExceededError,
    ResidualExceededError,
)
from documents.models import DocumentType, Installment
from finance.models import FinancialAccount, Payment, PaymentMapping

logger = logging.getLogger("ledger.reconciliation")

DEFAULT_DESCRIPTION = "Riconciliazione scadenze"

REQUIRED_PAYMENT_DIRECTION = {
    "PURCHASE": "OUTFLOW",
    "SALE": "INFLOW",
}

INTERNAL_AS_SALE = "SALE"
INTERNAL_AS_PURCHASE = "PURCHASE"
INTERNAL_REJECT = "REJECT"


@dataclass(frozen=True)
class NewPayment:
    account_id: uuid.UUID
    amount: Decimal
    date: datetime.date
    direction: str
    method: str = Payment.Method.TRANSFER
    payment_type: str = ""
    reference: str = ""
    notes: str = ""


@dataclass(frozen=True)
class AllocationRequest:
    installment_id: uuid.UUID
    amount: Decimal


@dataclass
class _PaymentTarget:
    payment: Payment | None
    amount: Decimal
    existing_total: Decimal = ZERO_MONEY
    existing_by_installment: dict = field(default_factory=dict)


# =====================================================
# INPUT NORMALIZATION
# =====================================================


def _as_uuid(value, *, field_name: str) -> uuid.UUID:
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError) as exc:
        raise LedgerValidationError(
            f"{field_name} must be a valid id", field=field_name
        ) from exc


def _allocation_amount(value) -> Decimal:
    amount = to_decimal(value, field_name="allocation amount")
    if amount == 0:
        return ZERO_MONEY
    return parse_amount(value, field_name="allocation amount")


def _text(data: dict, key: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise LedgerValidationError(f"{key} must be a string", field=key)
    return value.strip()


def group_allocations(allocations) -> dict:
    """
    {installment_id: total} in first-seen order; zero totals removed.
    """
    if allocations is None:
        allocations = []
    if not isinstance(allocations, (list, tuple)):
        raise LedgerValidationError("allocations must be a list", field="allocations")

    grouped: dict = {}
    for item in allocations:
        if isinstance(item, AllocationRequest):
            raw_id, raw_amount = item.installment_id, item.amount
        elif isinstance(item, dict):
            raw_id, raw_amount = item.get("installment_id"), item.get("amount")
        else:
            raise LedgerValidationError(
                "each allocation must have installment_id and amount",
                field="allocations",
            )

        iid = _as_uuid(raw_id, field_name="installment_id")
        grouped[iid] = money(grouped.get(iid, ZERO_MONEY) + _allocation_amount(raw_amount))

    grouped = {iid: amount for iid, amount in grouped.items() if amount > ZERO_MONEY}
    if not grouped:
        raise NothingToAllocateError("Nothing to allocate")
    return grouped


def _normalize_new_payment(new_payment) -> NewPayment:
    if isinstance(new_payment, NewPayment):
        data = dataclasses.asdict(new_payment)
    elif isinstance(new_payment, dict):
        data = new_payment
    else:
        raise LedgerValidationError(
            "new_payment must be an object with account, amount, date and direction",
            field="new_payment",
        )

    direction = _text(data, "direction").upper()
    if direction not in Payment.Direction.values:
        raise LedgerValidationError(
            "direction must be INFLOW or OUTFLOW", field="direction"
        )

    method = (_text(data, "method") or Payment.Method.TRANSFER).upper()
    if method not in Payment.Method.values:
        raise LedgerValidationError(f"Unknown payment method {method!r}", field="method")

    pay_date = data.get("date")
    if isinstance(pay_date, str):
        try:
            pay_date = datetime.date.fromisoformat(pay_date)
        except ValueError as exc:
            raise LedgerValidationError("date must be YYYY-MM-DD", field="date") from exc
    if not isinstance(pay_date, datetime.date):
        raise LedgerValidationError("date is required", field="date")

    reference = _text(data, "reference")
    if len(reference) > 100:
        raise LedgerValidationError(
            "reference must be at most 100 characters", field="reference"
        )

    notes = _text(data, "notes")
    if len(notes) > 500:
        raise LedgerValidationError("notes must be at most 500 characters", field="notes")

    return NewPayment(
        account_id=_as_uuid(data.get("account_id"), field_name="account_id"),
        amount=parse_amount(data.get("amount"), field_name="amount"),
        date=pay_date,
        direction=direction,
        method=method,
        payment_type=_text(data, "payment_type")[:20],
        reference=reference,
        notes=notes,
    )


# =====================================================
# READS
# =====================================================


def _allocated_per_installment(installment_ids) -> dict:
    totals = {iid: ZERO_MONEY for iid in installment_ids}
    for iid, amount in PaymentMapping.objects.filter(
        installment_id__in=list(installment_ids)
    ).values_list("installment_id", "amount"):
        totals[iid] = money(totals.get(iid, ZERO_MONEY) + amount)
    return totals


def _existing_allocations(payment: Payment) -> tuple[Decimal, dict]:
    per_installment = {}
    for iid, amount in PaymentMapping.objects.filter(payment=payment).values_list(
        "installment_id", "amount"
    ):
        per_installment[iid] = money(per_installment.get(iid, ZERO_MONEY) + amount)
    return money(sum_decimals(per_installment.values())), per_installment


def _resolve_payment(*, organization_id, payment_id, new_payment) -> _PaymentTarget:
    if payment_id is not None:
        payment = Payment.objects.filter(
            id=_as_uuid(payment_id, field_name="payment_id"),
            organization_id=organization_id,
        ).first()
        if payment is None:
            raise NotFoundError("Payment", payment_id=str(payment_id))
        existing_total, per_installment = _existing_allocations(payment)
        return _PaymentTarget(
            payment=payment,
            amount=money(payment.amount),
            existing_total=existing_total,
            existing_by_installment=per_installment,
        )

    return _PaymentTarget(payment=None, amount=new_payment.amount)


def _load_installments(*, organization_id, installment_ids, lock: bool = False) -> dict:
    qs = Installment.objects.filter(
        id__in=list(installment_ids), organization_id=organization_id
    )
    if lock:
        qs = qs.select_for_update(of=("self",))
    qs = qs.select_related("document__document_type").order_by("id")

    found = {inst.id: inst for inst in qs}
    missing = [iid for iid in installment_ids if iid not in found]
    if missing:
        # Missing and cross-tenant look the same to the caller
        raise NotFoundError("Installment", installment_id=str(missing[0]))
    return found


# =====================================================
# CHECKS
# =====================================================


def _check_payment_capacity(target: _PaymentTarget, grouped: dict) -> None:
    requested = money(sum_decimals(grouped.values()))
    available = money(target.amount - target.existing_total)
    if requested > available:
        raise PaymentCapacityExceededError(
            f"Allocations ({fmt_money(requested)}) exceed the payment's "
            f"unallocated amount ({fmt_money(available)})",
            requested=fmt_money(requested),
            available=fmt_money(available),
            payment_amount=fmt_money(target.amount),
            already_allocated=fmt_money(target.existing_total),
        )


def _check_residuals(*, installments: dict, grouped: dict, allocated: dict) -> None:
    for iid, requested in grouped.items():
        inst = installments[iid]
        residual = money(inst.amount - allocated.get(iid, ZERO_MONEY))
        if requested > residual:
            raise ResidualExceededError(
                f"Allocation {fmt_money(requested)} exceeds residual "
                f"{fmt_money(residual)} on installment {iid}",
                installment_id=str(iid),
                requested=fmt_money(requested),
                available=fmt_money(residual),
            )


def internal_direction_policy() -> str:
    policy = (
        getattr(settings, "LEDGER_INTERNAL_DIRECTION", INTERNAL_AS_SALE) or ""
    ).strip().upper()
    if policy not in (INTERNAL_AS_SALE, INTERNAL_AS_PURCHASE, INTERNAL_REJECT):
        raise ConfigurationError(
            f"LEDGER_INTERNAL_DIRECTION must be SALE, PURCHASE or REJECT, got {policy!r}",
            setting="LEDGER_INTERNAL_DIRECTION",
        )
    return policy


def _effective_direction(document_direction: str, policy: str) -> str:
    if document_direction != DocumentType.Direction.INTERNAL:
        return document_direction
    if policy == INTERNAL_REJECT:
        raise LedgerValidationError(
            "Installments of internal documents cannot be settled by a new payment"
        )
    return policy


def required_payment_direction(installments) -> str:
    policy = internal_direction_policy()
    directions = {
        _effective_direction(inst.document.document_type.direction, policy)
        for inst in installments
    }
    if len(directions) > 1:
        raise MixedDirectionError(
            "Installments mix purchase and sale documents; reconcile each "
            "direction separately",
            directions=",".join(sorted(directions)),
        )
    return REQUIRED_PAYMENT_DIRECTION[directions.pop()]


def _check_new_payment(*, organization_id, new_payment: NewPayment, installments) -> None:
    if not FinancialAccount.objects.filter(
        id=new_payment.account_id, organization_id=organization_id
    ).exists():
        raise NotFoundError("Financial account", account_id=str(new_payment.account_id))

    required = required_payment_direction(installments)
    if new_payment.direction != required:
        raise DirectionMismatchError(
            f"Payment direction {new_payment.direction} does not settle these "
            f"installments; expected {required}",
            requested=new_payment.direction,
            expected=required,
        )


# =====================================================
# ENTRY POINT
# =====================================================


def reconcile_payment(
    *,
    organization_id,
    allocations,
    payment_id=None,
    new_payment=None,
    user_id=None,
) -> dict:
    if (payment_id is None) == (new_payment is None):
        raise LedgerValidationError(
            "Provide either an existing payment_id or a new_payment, not both"
        )

    grouped = group_allocations(allocations)
    requested = _normalize_new_payment(new_payment) if new_payment is not None else None

    target = _resolve_payment(
        organization_id=organization_id, payment_id=payment_id, new_payment=requested
    )
    _check_payment_capacity(target, grouped)

    installments = _load_installments(
        organization_id=organization_id, installment_ids=grouped.keys()
    )
    _check_residuals(
        installments=installments,
        grouped=grouped,
        allocated=_allocated_per_installment(grouped.keys()),
    )

    if requested is not None:
        _check_new_payment(
            organization_id=organization_id,
            new_payment=requested,
            installments=installments.values(),
        )

    with transaction.atomic():
        # Re-verify against locked rows: a concurrent reconciliation on the
        # same installment may have committed since the reads above.
        locked = _load_installments(
            organization_id=organization_id,
            installment_ids=grouped.keys(),
            lock=True,
        )
        _check_residuals(
            installments=locked,
            grouped=grouped,
            allocated=_allocated_per_installment(grouped.keys()),
        )

        if target.payment is not None:
            payment = (
                Payment.objects.select_for_update()
                .filter(id=target.payment.id, organization_id=organization_id)
                .first()
            )
            if payment is None:
                raise ConflictError(
                    "Payment was removed while reconciling",
                    payment_id=str(target.payment.id),
                )
            existing_total, _ = _existing_allocations(payment)
            _check_payment_capacity(
                _PaymentTarget(
                    payment=payment,
                    amount=money(payment.amount),
                    existing_total=existing_total,
                ),
                grouped,
            )
            created = False
        else:
            payment = Payment.objects.create(
                organization_id=organization_id,
                account_id=requested.account_id,
                direction=requested.direction,
                amount=requested.amount,
                date=requested.date,
                method=requested.method,
                description=(requested.notes or DEFAULT_DESCRIPTION)[:255],
                payment_type=requested.payment_type,
                reference=requested.reference,
                notes=requested.notes,
            )
            created = True

        mapping_ids = []
        for iid, add in grouped.items():
            mapping = (
                PaymentMapping.objects.select_for_update()
                .filter(payment=payment, installment_id=iid)
                .first()
            )
            if mapping is not None:
                mapping.amount = money(mapping.amount + add)
                mapping.save(update_fields=["amount", "updated_at"])
            else:
                mapping = PaymentMapping.objects.create(
                    payment=payment, installment_id=iid, amount=add
                )
            mapping_ids.append(str(mapping.id))

    logger.info(
        "Payment reconciled",
        extra={
            "organization_id": str(organization_id),
            "payment_id": str(payment.id),
            "payment_created": created,
            "allocated": fmt_money(sum_decimals(grouped.values())),
            "installments": len(grouped),
            "user_id": user_id,
        },
    )

    return {
        "payment_id": str(payment.id),
        "payment_created": created,
        "mapping_ids": mapping_ids,
    }
