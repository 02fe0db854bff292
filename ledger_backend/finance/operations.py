# finance/operations.py

"""
FINANCE OPERATIONS (boundary)

Tenant-scoped entry points for reconciliation, payments and accounts.
Each returns an OperationResult; nothing but infrastructure failures
escapes.
"""

from __future__ import annotations

from core.context import TenantContext
from core.results import ledger_operation
from finance.services import (
    account_service,
    balance_service,
    payment_service,
    reconciliation,
)


@ledger_operation
def reconcile_payment(
    ctx: TenantContext, *, allocations, payment_id=None, new_payment=None
) -> dict:
    ctx.require_write("reconcile payments")
    return reconciliation.reconcile_payment(
        organization_id=ctx.organization_id,
        allocations=allocations,
        payment_id=payment_id,
        new_payment=new_payment,
        user_id=ctx.user_id,
    )


@ledger_operation
def delete_payment(ctx: TenantContext, *, payment_id) -> dict:
    ctx.require_write("delete payments")
    return payment_service.delete_payment(
        organization_id=ctx.organization_id, payment_id=payment_id
    )


@ledger_operation
def list_payments(ctx: TenantContext, *, direction=None, limit=None) -> list:
    return payment_service.list_payments(
        organization_id=ctx.organization_id, direction=direction, limit=limit
    )


@ledger_operation
def get_installments_for_allocation(
    ctx: TenantContext, *, limit=None, open_only: bool = False
) -> list:
    return payment_service.get_installments_for_allocation(
        organization_id=ctx.organization_id, limit=limit, open_only=open_only
    )


@ledger_operation
def get_account_balances(ctx: TenantContext) -> list:
    return balance_service.get_account_balances(organization_id=ctx.organization_id)


@ledger_operation
def create_financial_account(ctx: TenantContext, **fields) -> dict:
    ctx.require_write("create financial accounts")
    account = account_service.create_financial_account(
        organization_id=ctx.organization_id, **fields
    )
    return {"id": str(account.id), "name": account.name, "kind": account.kind}


@ledger_operation
def delete_financial_account(ctx: TenantContext, *, account_id) -> dict:
    ctx.require_write("delete financial accounts")
    return account_service.delete_financial_account(
        organization_id=ctx.organization_id, account_id=account_id
    )
