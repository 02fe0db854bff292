# inventory/operations.py

"""
INVENTORY OPERATIONS (boundary)

Tenant-scoped entry points for the movement ledger and the valuation
aggregator. Each returns an OperationResult; see core.results.
"""

from __future__ import annotations

from core.context import TenantContext
from core.decimal_utils import fmt_quantity
from core.exceptions import LedgerValidationError, NotFoundError
from core.results import ledger_operation
from documents.models import Document
from inventory.services import stock_ledger, valuation
from inventory.services.valuation import DocumentSnapshot


def _parse_year(value) -> int:
    try:
        year = int(value)
    except (TypeError, ValueError) as exc:
        raise LedgerValidationError("year must be an integer", field="year") from exc
    if year < 1900 or year > 9999:
        raise LedgerValidationError("year must be between 1900 and 9999", field="year")
    return year


def _require_document(ctx: TenantContext, document_id) -> Document:
    document = (
        Document.objects.select_related("document_type")
        .prefetch_related("lines")
        .filter(id=document_id, organization_id=ctx.organization_id)
        .first()
    )
    if document is None:
        raise NotFoundError("Document", document_id=str(document_id))
    return document


@ledger_operation
def record_movement(
    ctx: TenantContext,
    *,
    product_id,
    warehouse_id,
    signed_quantity,
    movement_kind: str,
    source_document_id=None,
    notes: str = "",
) -> dict:
    ctx.require_write("record stock movements")

    document = None
    if source_document_id is not None:
        document = _require_document(ctx, source_document_id)

    movement = stock_ledger.record_movement(
        organization_id=ctx.organization_id,
        product_id=product_id,
        warehouse_id=warehouse_id,
        signed_quantity=signed_quantity,
        movement_kind=movement_kind,
        document=document,
        notes=notes,
        user_id=ctx.user_id,
    )
    return {"movement_id": str(movement.id)}


@ledger_operation
def current_stock(ctx: TenantContext, *, product_id, warehouse_id=None) -> dict:
    stock = stock_ledger.current_stock(
        organization_id=ctx.organization_id,
        product_id=product_id,
        warehouse_id=warehouse_id,
    )
    return {
        "product_id": str(product_id),
        "warehouse_id": str(warehouse_id) if warehouse_id else None,
        "stock": fmt_quantity(stock),
    }


@ledger_operation
def apply_document_stats(ctx: TenantContext, *, document_id) -> dict:
    ctx.require_write("update valuation statistics")
    document = _require_document(ctx, document_id)
    lines = valuation.apply_document_stats(document)
    return {"document_id": str(document.id), "lines_applied": lines}


@ledger_operation
def revert_document_stats(ctx: TenantContext, *, snapshot: DocumentSnapshot) -> dict:
    ctx.require_write("update valuation statistics")
    if snapshot.organization_id != ctx.organization_id:
        raise NotFoundError("Document", document_id=str(snapshot.document_id))
    lines = valuation.revert_document_stats(snapshot)
    return {"document_id": str(snapshot.document_id), "lines_reverted": lines}


@ledger_operation
def recalculate_stats_for_year(ctx: TenantContext, *, year) -> dict:
    ctx.require_write("recalculate valuation statistics")
    year = _parse_year(year)
    processed = valuation.recalculate_stats_for_year(
        organization_id=ctx.organization_id, year=year
    )
    return {"year": year, "documents_processed": processed}


@ledger_operation
def get_product_stats(ctx: TenantContext, *, product_id, year) -> dict:
    return valuation.get_product_stats(
        organization_id=ctx.organization_id,
        product_id=product_id,
        year=_parse_year(year),
    )


@ledger_operation
def list_product_stats(
    ctx: TenantContext, *, year, q=None, sort=None, page=1, per_page=None
) -> dict:
    return valuation.list_product_stats(
        organization_id=ctx.organization_id,
        year=_parse_year(year),
        q=q,
        sort=sort,
        page=page,
        per_page=per_page or valuation.DEFAULT_PER_PAGE,
    )


@ledger_operation
def movement_summary(ctx: TenantContext) -> dict:
    return stock_ledger.movement_summary(organization_id=ctx.organization_id)
