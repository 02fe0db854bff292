# finance/services/balance_service.py

"""
ACCOUNT BALANCE SERVICE

Read-only aggregation helpers.

RULES:
- READ-ONLY: no writes, ever
- balance = initial_balance + SUM(INFLOW) - SUM(OUTFLOW)
- never cached; every call re-reads the payments
"""

from __future__ import annotations

from collections import defaultdict
from decimal import Decimal

from core.decimal_utils import ZERO_MONEY, fmt_money, money
from finance.models import FinancialAccount, Payment


def _flows_by_account(*, organization_id, account_ids) -> dict:
    flows = defaultdict(lambda: {"in": ZERO_MONEY, "out": ZERO_MONEY})
    for account_id, direction, amount in Payment.objects.filter(
        organization_id=organization_id, account_id__in=list(account_ids)
    ).values_list("account_id", "direction", "amount"):
        key = "in" if direction == Payment.Direction.INFLOW else "out"
        flows[account_id][key] += amount
    return flows


def get_account_balance(account: FinancialAccount) -> Decimal:
    flows = _flows_by_account(
        organization_id=account.organization_id, account_ids=[account.id]
    )[account.id]
    return money(account.initial_balance + flows["in"] - flows["out"])


def get_account_balances(*, organization_id, include_inactive: bool = False) -> list[dict]:
    qs = FinancialAccount.objects.filter(organization_id=organization_id)
    if not include_inactive:
        qs = qs.filter(is_active=True)
    accounts = list(qs.order_by("name"))

    flows = _flows_by_account(
        organization_id=organization_id, account_ids=[a.id for a in accounts]
    )

    return [
        {
            "id": str(a.id),
            "name": a.name,
            "kind": a.kind,
            "iban": a.iban,
            "initial_balance": fmt_money(a.initial_balance),
            "total_inflow": fmt_money(flows[a.id]["in"]),
            "total_outflow": fmt_money(flows[a.id]["out"]),
            "balance": fmt_money(
                a.initial_balance + flows[a.id]["in"] - flows[a.id]["out"]
            ),
        }
        for a in accounts
    ]
