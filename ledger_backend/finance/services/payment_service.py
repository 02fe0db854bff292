# finance/services/payment_service.py

"""
PAYMENTS + INSTALLMENTS (read models, payment deletion)

RULES:
- paid / residual / status of an installment are computed on every read
- deleting a payment removes its allocations first; residuals grow back
  because they are sums, not stored values
"""

from __future__ import annotations

import datetime
import logging
from collections import defaultdict

from django.db import transaction
from django.utils import timezone

from core.decimal_utils import ZERO_MONEY, fmt_money, money
from core.exceptions import LedgerValidationError, NotFoundError
from documents.models import DocumentType, Installment
from finance.models import Payment, PaymentMapping

logger = logging.getLogger("ledger.reconciliation")

DEFAULT_PAYMENT_LIMIT = 100
DEFAULT_INSTALLMENT_LIMIT = 200
MAX_LIMIT = 1000


class InstallmentStatus:
    PENDING = "PENDING"
    PARTIAL = "PARTIAL"
    PAID = "PAID"
    OVERDUE = "OVERDUE"


def _limit(value, default: int) -> int:
    if value is None:
        return default
    try:
        limit = int(value)
    except (TypeError, ValueError) as exc:
        raise LedgerValidationError("limit must be an integer", field="limit") from exc
    if limit <= 0:
        raise LedgerValidationError("limit must be greater than zero", field="limit")
    return min(limit, MAX_LIMIT)


def installment_status(*, amount, paid, due_date, today: datetime.date) -> str:
    residual = money(amount - paid)
    if residual <= ZERO_MONEY:
        return InstallmentStatus.PAID
    if due_date < today:
        return InstallmentStatus.OVERDUE
    if paid > ZERO_MONEY:
        return InstallmentStatus.PARTIAL
    return InstallmentStatus.PENDING


@transaction.atomic
def delete_payment(*, organization_id, payment_id) -> dict:
    payment = (
        Payment.objects.select_for_update()
        .filter(id=payment_id, organization_id=organization_id)
        .first()
    )
    if payment is None:
        raise NotFoundError("Payment", payment_id=str(payment_id))

    released = [
        {"installment_id": str(iid), "amount": fmt_money(amount)}
        for iid, amount in payment.allocations.values_list("installment_id", "amount")
    ]

    payment.allocations.all().delete()
    payment.delete()

    logger.info(
        "Payment deleted",
        extra={
            "organization_id": str(organization_id),
            "payment_id": str(payment_id),
            "allocations_released": len(released),
        },
    )
    return {"payment_id": str(payment_id), "released": released}


def list_payments(
    *, organization_id, direction: str | None = None, limit=None
) -> list[dict]:
    qs = Payment.objects.filter(organization_id=organization_id).select_related(
        "account"
    )
    if direction:
        direction = direction.strip().upper()
        if direction not in Payment.Direction.values:
            raise LedgerValidationError(
                "direction must be INFLOW or OUTFLOW", field="direction"
            )
        qs = qs.filter(direction=direction)

    limit = _limit(limit, DEFAULT_PAYMENT_LIMIT)
    payments = list(qs.order_by("-date", "-created_at")[:limit])

    allocated = defaultdict(lambda: ZERO_MONEY)
    for pid, amount in PaymentMapping.objects.filter(
        payment_id__in=[p.id for p in payments]
    ).values_list("payment_id", "amount"):
        allocated[pid] += amount

    return [
        {
            "id": str(p.id),
            "date": p.date.isoformat(),
            "direction": p.direction,
            "amount": fmt_money(p.amount),
            "allocated_amount": fmt_money(allocated[p.id]),
            "unallocated_amount": fmt_money(p.amount - allocated[p.id]),
            "method": p.method,
            "description": p.description,
            "payment_type": p.payment_type,
            "reference": p.reference,
            "notes": p.notes,
            "account_id": str(p.account_id),
            "account_name": p.account.name,
        }
        for p in payments
    ]


def get_installments_for_allocation(
    *, organization_id, limit=None, open_only: bool = False, today=None
) -> list[dict]:
    today = today or timezone.localdate()

    installments = list(
        Installment.objects.filter(organization_id=organization_id)
        .select_related("document__document_type")
        .order_by("due_date", "created_at")[: _limit(limit, DEFAULT_INSTALLMENT_LIMIT)]
    )

    paid = defaultdict(lambda: ZERO_MONEY)
    for iid, amount in PaymentMapping.objects.filter(
        installment_id__in=[i.id for i in installments]
    ).values_list("installment_id", "amount"):
        paid[iid] += amount

    rows = []
    for inst in installments:
        paid_amount = money(paid[inst.id])
        residual = money(inst.amount - paid_amount)
        if open_only and residual <= ZERO_MONEY:
            continue

        document = inst.document
        rows.append(
            {
                "id": str(inst.id),
                "due_date": inst.due_date.isoformat(),
                "amount": fmt_money(inst.amount),
                "paid_amount": fmt_money(paid_amount),
                "residual": fmt_money(residual),
                "status": installment_status(
                    amount=inst.amount,
                    paid=paid_amount,
                    due_date=inst.due_date,
                    today=today,
                ),
                "document_id": str(document.id),
                "document_number": document.number,
                "document_direction": (
                    document.document_type.direction or DocumentType.Direction.SALE
                ),
                "notes": inst.notes,
            }
        )
    return rows
