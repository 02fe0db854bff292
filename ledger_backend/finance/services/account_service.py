# finance/services/account_service.py

from __future__ import annotations

import logging
import re

from django.db import transaction

from core.decimal_utils import TWOPLACES, money, to_decimal
from core.exceptions import InvariantViolationError, LedgerValidationError, NotFoundError
from finance.models import FinancialAccount

logger = logging.getLogger("ledger.reconciliation")

_IBAN_RE = re.compile(r"^[A-Z]{2}[0-9]{2}[A-Z0-9]{1,30}$")


def _clean_iban(value: str) -> str:
    iban = (value or "").replace(" ", "").upper()
    if iban and not _IBAN_RE.match(iban):
        raise LedgerValidationError("IBAN is not valid", field="iban")
    return iban


@transaction.atomic
def create_financial_account(
    *,
    organization_id,
    name: str,
    kind: str = FinancialAccount.Kind.BANK,
    iban: str = "",
    bic_swift: str = "",
    initial_balance="0.00",
) -> FinancialAccount:
    name = (name or "").strip()
    if not name:
        raise LedgerValidationError("name is required", field="name")
    if len(name) > 100:
        raise LedgerValidationError("name must be at most 100 characters", field="name")

    kind = (kind or "").strip().upper()
    if kind not in FinancialAccount.Kind.values:
        raise LedgerValidationError("kind must be BANK, CASH or VIRTUAL", field="kind")

    balance = to_decimal(initial_balance, field_name="initial_balance")
    if balance != balance.quantize(TWOPLACES):
        raise LedgerValidationError(
            "initial_balance must have at most 2 decimals", field="initial_balance"
        )

    if FinancialAccount.objects.filter(
        organization_id=organization_id, name=name
    ).exists():
        raise LedgerValidationError(
            f"An account named {name!r} already exists", field="name"
        )

    account = FinancialAccount.objects.create(
        organization_id=organization_id,
        name=name,
        kind=kind,
        iban=_clean_iban(iban),
        bic_swift=(bic_swift or "").strip().upper()[:11],
        initial_balance=money(balance),
    )
    logger.info(
        "Financial account created",
        extra={"account_id": str(account.id), "organization_id": str(organization_id)},
    )
    return account


@transaction.atomic
def delete_financial_account(*, organization_id, account_id) -> dict:
    account = (
        FinancialAccount.objects.select_for_update()
        .filter(id=account_id, organization_id=organization_id)
        .first()
    )
    if account is None:
        raise NotFoundError("Financial account", account_id=str(account_id))

    if account.payments.exists():
        raise InvariantViolationError(
            "Financial account has payments and cannot be deleted",
            account_id=str(account_id),
            payments=str(account.payments.count()),
        )

    account.delete()
    return {"account_id": str(account_id)}
