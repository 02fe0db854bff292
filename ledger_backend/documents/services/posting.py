# documents/services/posting.py

"""
======================================================
PATH: documents/services/posting.py
======================================================
DOCUMENT POSTING WORKFLOW

Purpose:
- post_document: lines -> stock movements + valuation stats, once.
- update_document_lines: edit a (possibly posted) document.
    posted: snapshot -> revert stats -> compensating movements
            -> replace lines -> re-post lines -> re-apply stats
- delete_document: revert stats, then cascade-delete the document
  (movements, installments and their allocations go with it).

Rules:
- Every function runs in ONE transaction (all-or-nothing).
- Document signs are checked before any line is processed, so a
  misconfigured type aborts the whole posting with zero writes.
"""

from __future__ import annotations

import logging

from django.db import transaction
from django.utils import timezone

from core.decimal_utils import money, quantity, to_decimal
from core.exceptions import LedgerValidationError, NotFoundError
from documents.models import Document, DocumentLine
from inventory.movement_kinds import require_stock_sign
from inventory.services.stock_ledger import (
    process_document_line,
    reverse_document_movements,
)
from inventory.services.valuation import (
    DocumentSnapshot,
    apply_document_stats,
    require_valuation_sign,
    revert_document_stats,
)
from products.models import Product, Warehouse

logger = logging.getLogger("ledger.posting")


def _lock_document(*, organization_id, document_id) -> Document:
    document = (
        Document.objects.select_for_update(of=("self",))
        .select_related("document_type")
        .filter(id=document_id, organization_id=organization_id)
        .first()
    )
    if document is None:
        raise NotFoundError("Document", document_id=str(document_id))
    return document


def _check_signs(document: Document) -> None:
    document_type = document.document_type
    if document_type.inventory_movement:
        require_stock_sign(
            document_type.operation_sign_stock, document_type_code=document_type.code
        )
    if document_type.affects_valuation:
        require_valuation_sign(
            document_type.operation_sign_valuation,
            document_type_code=document_type.code,
        )


def _post_lines(document: Document, *, user_id=None) -> list:
    movements = []
    for line in document.lines.all():
        movement = process_document_line(document=document, line=line, user_id=user_id)
        if movement is not None:
            movements.append(movement)
    return movements


@transaction.atomic
def post_document(*, organization_id, document_id, user_id=None) -> dict:
    document = _lock_document(organization_id=organization_id, document_id=document_id)
    if document.is_posted:
        raise LedgerValidationError(
            "Document is already posted", document_id=str(document.id)
        )

    _check_signs(document)

    movements = _post_lines(document, user_id=user_id)
    stats_lines = apply_document_stats(document)

    document.posted_at = timezone.now()
    document.save(update_fields=["posted_at"])

    logger.info(
        "Document posted",
        extra={
            "document_id": str(document.id),
            "movements": len(movements),
            "stats_lines": stats_lines,
        },
    )

    return {
        "document_id": str(document.id),
        "movement_ids": [str(m.id) for m in movements],
        "stats_lines": stats_lines,
    }


def _build_line(*, document: Document, position: int, data: dict) -> DocumentLine:
    product_id = data.get("product_id")
    if product_id and not Product.objects.filter(
        id=product_id, organization_id=document.organization_id
    ).exists():
        raise NotFoundError("Product", product_id=str(product_id))

    warehouse_id = data.get("warehouse_id")
    if warehouse_id and not Warehouse.objects.filter(
        id=warehouse_id, organization_id=document.organization_id
    ).exists():
        raise NotFoundError("Warehouse", warehouse_id=str(warehouse_id))

    qty = quantity(to_decimal(data.get("quantity"), field_name="quantity"))
    price = to_decimal(data.get("unit_price", "0"), field_name="unit_price")

    net = data.get("net_amount")
    net_amount = money(qty * price) if net is None else money(
        to_decimal(net, field_name="net_amount")
    )

    return DocumentLine(
        document=document,
        position=position,
        product_id=product_id or None,
        warehouse_id=warehouse_id or None,
        description=(data.get("description") or "")[:500],
        quantity=qty,
        unit_price=price,
        net_amount=net_amount,
    )


@transaction.atomic
def update_document_lines(
    *, organization_id, document_id, lines: list[dict], date=None, user_id=None
) -> dict:
    """
    Replace every line of a document. When the document is posted its old
    contribution is reverted from the snapshot (old date, old lines) and the
    new one applied, inside the same transaction.
    """
    document = _lock_document(organization_id=organization_id, document_id=document_id)
    was_posted = document.is_posted

    new_lines = [
        _build_line(document=document, position=i, data=data)
        for i, data in enumerate(lines or [])
    ]

    if was_posted:
        _check_signs(document)
        snapshot = DocumentSnapshot.from_document(document)
        revert_document_stats(snapshot)
        reverse_document_movements(document=document, user_id=user_id)

    document.lines.all().delete()
    DocumentLine.objects.bulk_create(new_lines)

    if date is not None:
        document.date = date
        document.save(update_fields=["date"])

    movements = []
    stats_lines = 0
    if was_posted:
        movements = _post_lines(document, user_id=user_id)
        stats_lines = apply_document_stats(document)

    logger.info(
        "Document lines replaced",
        extra={
            "document_id": str(document.id),
            "lines": len(new_lines),
            "reposted": was_posted,
        },
    )

    return {
        "document_id": str(document.id),
        "line_ids": [str(line.id) for line in new_lines],
        "movement_ids": [str(m.id) for m in movements],
        "stats_lines": stats_lines,
    }


@transaction.atomic
def delete_document(*, organization_id, document_id) -> dict:
    document = _lock_document(organization_id=organization_id, document_id=document_id)

    reverted = 0
    if document.is_posted:
        reverted = revert_document_stats(DocumentSnapshot.from_document(document))

    doc_id = str(document.id)
    document.delete()

    logger.warning(
        "Document deleted",
        extra={"document_id": doc_id, "stats_lines_reverted": reverted},
    )
    return {"document_id": doc_id, "stats_lines_reverted": reverted}
