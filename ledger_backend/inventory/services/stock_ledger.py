# inventory/services/stock_ledger.py

"""
======================================================
PATH: inventory/services/stock_ledger.py
======================================================
MOVEMENT LEDGER SERVICES

Purpose:
- Append immutable StockMovement rows.
- Derive current stock by summing signed quantities (no stored counter).
- Summarize the ledger (counts per kind, latest movement).
- Turn a posted document line into (at most) one movement.

Rules for a line to move stock (else: no movement, not an error):
- document type has inventory movement active
- line references a catalogued product
- product classification manages stock
- a warehouse resolves: line -> product default -> document main warehouse

Errors:
- product not found in the organization -> NotFoundError (aborts posting)
- stock sign outside +1/-1 -> ConfigurationError (aborts posting)
"""

from __future__ import annotations

import logging
from collections import defaultdict
from decimal import Decimal

from django.db import transaction
from django.db.models import Count, Max

from core.decimal_utils import ZERO, quantity, to_decimal
from core.exceptions import LedgerValidationError, NotFoundError
from inventory.models import StockMovement
from inventory.movement_kinds import (
    MovementKind,
    require_stock_sign,
    resolve_movement_kind,
)
from products.models import Product, Warehouse

logger = logging.getLogger("ledger.stock")


def _require_product(*, organization_id, product_id) -> Product:
    product = (
        Product.objects.select_related("product_type", "default_warehouse")
        .filter(id=product_id, organization_id=organization_id)
        .first()
    )
    if product is None:
        logger.error(
            "Product not found while recording stock",
            extra={
                "organization_id": str(organization_id),
                "product_id": str(product_id),
            },
        )
        raise NotFoundError("Product", product_id=str(product_id))
    return product


def _require_warehouse(*, organization_id, warehouse_id) -> Warehouse:
    warehouse = Warehouse.objects.filter(
        id=warehouse_id, organization_id=organization_id
    ).first()
    if warehouse is None:
        raise NotFoundError("Warehouse", warehouse_id=str(warehouse_id))
    return warehouse


@transaction.atomic
def record_movement(
    *,
    organization_id,
    product_id,
    warehouse_id,
    signed_quantity,
    movement_kind: str,
    document=None,
    document_number: str = "",
    notes: str = "",
    user_id=None,
) -> StockMovement:
    """
    Append one movement. Positive quantity = inbound, negative = outbound.
    """
    qty = quantity(to_decimal(signed_quantity, field_name="signed_quantity"))
    if qty == ZERO:
        raise LedgerValidationError(
            "signed_quantity must be non-zero", field="signed_quantity"
        )

    if movement_kind not in MovementKind.values:
        raise LedgerValidationError(
            f"Unknown movement kind {movement_kind!r}", field="movement_kind"
        )

    product = _require_product(organization_id=organization_id, product_id=product_id)
    warehouse = _require_warehouse(
        organization_id=organization_id, warehouse_id=warehouse_id
    )

    if document is not None and document.organization_id != organization_id:
        raise NotFoundError("Document", document_id=str(document.id))

    movement = StockMovement.objects.create(
        organization_id=organization_id,
        product=product,
        warehouse=warehouse,
        quantity=qty,
        kind=movement_kind,
        document=document,
        document_number=(document_number or getattr(document, "number", "") or "")[:50],
        notes=(notes or "")[:500],
        performed_by_id=user_id,
    )

    logger.info(
        "Stock movement recorded",
        extra={
            "movement_id": str(movement.id),
            "product_id": str(product.id),
            "warehouse_id": str(warehouse.id),
            "quantity": str(qty),
            "kind": movement_kind,
        },
    )
    return movement


def current_stock(*, organization_id, product_id, warehouse_id=None) -> Decimal:
    """
    Exact decimal sum of signed quantities. Summed in Python so the result
    does not depend on the database's numeric aggregation.
    """
    qs = StockMovement.objects.filter(
        organization_id=organization_id, product_id=product_id
    )
    if warehouse_id is not None:
        qs = qs.filter(warehouse_id=warehouse_id)

    total = ZERO
    for q in qs.values_list("quantity", flat=True):
        total += q
    return quantity(total)


def current_stocks(*, organization_id, product_ids, warehouse_id=None) -> dict:
    """Batch variant: {product_id: Decimal}, zero for products with no movements."""
    ids = list(product_ids)
    totals = {pid: ZERO for pid in ids}
    if not ids:
        return totals

    qs = StockMovement.objects.filter(
        organization_id=organization_id, product_id__in=ids
    )
    if warehouse_id is not None:
        qs = qs.filter(warehouse_id=warehouse_id)

    for pid, q in qs.values_list("product_id", "quantity"):
        totals[pid] = totals.get(pid, ZERO) + q

    return {pid: quantity(v) for pid, v in totals.items()}


def movement_summary(*, organization_id) -> dict:
    """Total count, count per kind and the time of the latest movement."""
    qs = StockMovement.objects.filter(organization_id=organization_id)
    by_kind = {
        row["kind"]: row["n"]
        for row in qs.order_by().values("kind").annotate(n=Count("id"))
    }
    last = qs.aggregate(last=Max("created_at"))["last"]
    return {
        "total": sum(by_kind.values()),
        "by_kind": by_kind,
        "last_movement_at": last.isoformat() if last else None,
    }


def resolve_line_warehouse_id(*, line, product: Product, document):
    return line.warehouse_id or product.default_warehouse_id or document.main_warehouse_id


def process_document_line(*, document, line, user_id=None) -> StockMovement | None:
    """
    Produce the movement for one line of a document being posted, or None
    when the line legitimately has no stock impact.
    """
    document_type = document.document_type
    if not document_type.inventory_movement:
        return None

    if not line.product_id:
        return None

    product = _require_product(
        organization_id=document.organization_id, product_id=line.product_id
    )
    if not product.manages_stock:
        return None

    warehouse_id = resolve_line_warehouse_id(line=line, product=product, document=document)
    if not warehouse_id:
        logger.info(
            "No warehouse resolvable for line; skipping movement",
            extra={"document_id": str(document.id), "line_id": str(line.id)},
        )
        return None

    sign = require_stock_sign(
        document_type.operation_sign_stock, document_type_code=document_type.code
    )
    line_qty = quantity(line.quantity)
    if line_qty == ZERO:
        return None

    return record_movement(
        organization_id=document.organization_id,
        product_id=product.id,
        warehouse_id=warehouse_id,
        signed_quantity=line_qty * sign,
        movement_kind=resolve_movement_kind(document_type.code, sign),
        document=document,
        document_number=document.number,
        user_id=user_id,
    )


def reverse_document_movements(*, document, user_id=None) -> list[StockMovement]:
    """
    Append compensating movements that net every (product, warehouse)
    position of the document back to zero. Used before re-posting an
    edited document; existing rows are never touched.
    """
    net = defaultdict(lambda: ZERO)
    for product_id, warehouse_id, q in StockMovement.objects.filter(
        document=document
    ).values_list("product_id", "warehouse_id", "quantity"):
        net[(product_id, warehouse_id)] += q

    reversals = []
    for (product_id, warehouse_id), total in sorted(
        net.items(), key=lambda item: (str(item[0][0]), str(item[0][1]))
    ):
        if total == ZERO:
            continue
        reversals.append(
            record_movement(
                organization_id=document.organization_id,
                product_id=product_id,
                warehouse_id=warehouse_id,
                signed_quantity=-total,
                movement_kind=MovementKind.INVENTORY_ADJUSTMENT,
                document=document,
                document_number=document.number,
                notes="Reversal before re-posting edited document",
                user_id=user_id,
            )
        )
    return reversals
