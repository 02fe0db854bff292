# inventory/services/valuation.py

"""
======================================================
PATH: inventory/services/valuation.py
======================================================
VALUATION AGGREGATOR (ProductAnnualStat)

Purpose:
- apply_document_stats: add a document's lines to the yearly statistics
- revert_document_stats: subtract a previously captured snapshot
- recalculate_stats_for_year: delete + rebuild a whole year from documents
- get_product_stats / list_product_stats: read side, with current stock

Rules:
- Skip when the document type has no valuation impact, or its valuation
  sign is null/zero. Any other sign than +1/-1 is a configuration error.
- SALE direction adjusts sold_*; PURCHASE adjusts purchased_*, last_cost
  and weighted_average_cost. INTERNAL touches nothing but still creates
  the row.
- Rounding: quantities 4 dp, amounts 2 dp, costs 4 dp (ROUND_HALF_UP).
- Revert never changes last_cost; it clamps WAC to 0 when the resulting
  quantity is <= 0 or the resulting amount is negative.

The arithmetic lives in pure functions (apply_line / revert_line) over a
frozen StatState; the DB functions only lock, load, call and save.
"""

from __future__ import annotations

import dataclasses
import datetime
import logging
import uuid
from dataclasses import dataclass
from decimal import Decimal

from django.db import transaction
from django.db.models import Q

from core.decimal_utils import (
    ZERO,
    ZERO_MONEY,
    fmt_money,
    fmt_quantity,
    money,
    quantity,
    unit_cost,
)
from core.exceptions import ConfigurationError, LedgerValidationError, NotFoundError
from documents.models import Document
from inventory.models import ProductAnnualStat
from inventory.services.stock_ledger import current_stock, current_stocks
from products.models import Product

logger = logging.getLogger("ledger.valuation")

SALE = "SALE"
PURCHASE = "PURCHASE"

STAT_FIELDS = (
    "purchased_quantity",
    "purchased_total_amount",
    "sold_quantity",
    "sold_total_amount",
    "weighted_average_cost",
    "last_cost",
)
MONEY_FIELDS = {"purchased_total_amount", "sold_total_amount"}

# Sort keys accepted by list_product_stats -> ORM column
SORT_FIELDS = {
    "product_code": "product__code",
    "product_name": "product__name",
    **{name: name for name in STAT_FIELDS},
}
DEFAULT_PER_PAGE = 10
MAX_PER_PAGE = 100


# =====================================================
# PURE STATE + TRANSITIONS
# =====================================================


@dataclass(frozen=True)
class StatState:
    purchased_quantity: Decimal = ZERO
    purchased_total_amount: Decimal = ZERO_MONEY
    sold_quantity: Decimal = ZERO
    sold_total_amount: Decimal = ZERO_MONEY
    weighted_average_cost: Decimal = ZERO
    last_cost: Decimal = ZERO

    @classmethod
    def from_row(cls, row: ProductAnnualStat) -> "StatState":
        return cls(
            purchased_quantity=quantity(row.purchased_quantity),
            purchased_total_amount=money(row.purchased_total_amount),
            sold_quantity=quantity(row.sold_quantity),
            sold_total_amount=money(row.sold_total_amount),
            weighted_average_cost=unit_cost(row.weighted_average_cost),
            last_cost=unit_cost(row.last_cost),
        )

    def write_to(self, row: ProductAnnualStat) -> None:
        for name in STAT_FIELDS:
            setattr(row, name, getattr(self, name))


def _positive_int(value, *, field_name: str) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError) as exc:
        raise LedgerValidationError(
            f"{field_name} must be an integer", field=field_name
        ) from exc
    if number <= 0:
        raise LedgerValidationError(
            f"{field_name} must be greater than zero", field=field_name
        )
    return number


def should_skip(valuation_impact: bool, sign) -> bool:
    return not valuation_impact or sign is None or sign == 0


def require_valuation_sign(sign, *, document_type_code: str = "") -> int:
    if sign not in (1, -1):
        raise ConfigurationError(
            f"Unexpected valuation operation sign {sign!r} on document type "
            f"{document_type_code or '?'}; expected +1 or -1",
            document_type_code=document_type_code,
            sign=str(sign),
        )
    return int(sign)


def apply_line(
    state: StatState, *, direction: str, sign: int, line_quantity, line_net_amount
) -> StatState:
    delta_qty = line_quantity * sign
    delta_amount = line_net_amount * sign

    if direction == SALE:
        return dataclasses.replace(
            state,
            sold_quantity=quantity(state.sold_quantity + delta_qty),
            sold_total_amount=money(state.sold_total_amount + delta_amount),
        )

    if direction == PURCHASE:
        purchased_qty = quantity(state.purchased_quantity + delta_qty)
        purchased_amount = money(state.purchased_total_amount + delta_amount)

        last = state.last_cost
        if delta_qty > 0 and line_quantity > 0:
            last = unit_cost(line_net_amount / line_quantity)

        wac = ZERO
        if purchased_qty > 0:
            wac = unit_cost(purchased_amount / purchased_qty)

        return dataclasses.replace(
            state,
            purchased_quantity=purchased_qty,
            purchased_total_amount=purchased_amount,
            weighted_average_cost=wac,
            last_cost=last,
        )

    return state


def revert_line(
    state: StatState, *, direction: str, sign: int, line_quantity, line_net_amount
) -> StatState:
    delta_qty = line_quantity * sign
    delta_amount = line_net_amount * sign

    if direction == SALE:
        return dataclasses.replace(
            state,
            sold_quantity=quantity(state.sold_quantity - delta_qty),
            sold_total_amount=money(state.sold_total_amount - delta_amount),
        )

    if direction == PURCHASE:
        purchased_qty = quantity(state.purchased_quantity - delta_qty)
        purchased_amount = money(state.purchased_total_amount - delta_amount)

        if purchased_qty > 0 and purchased_amount >= 0:
            wac = unit_cost(purchased_amount / purchased_qty)
        else:
            wac = ZERO

        return dataclasses.replace(
            state,
            purchased_quantity=purchased_qty,
            purchased_total_amount=purchased_amount,
            weighted_average_cost=wac,
        )

    return state


# =====================================================
# SNAPSHOT
# =====================================================


@dataclass(frozen=True)
class SnapshotLine:
    product_id: uuid.UUID
    quantity: Decimal
    net_amount: Decimal


@dataclass(frozen=True)
class DocumentSnapshot:
    """
    What a document contributed to the statistics at a point in time.
    Captured before editing so the old contribution can be reverted.
    """

    organization_id: uuid.UUID
    document_id: uuid.UUID
    date: datetime.date
    direction: str
    document_type_code: str
    valuation_impact: bool
    operation_sign_valuation: int | None
    lines: tuple[SnapshotLine, ...] = ()

    @property
    def year(self) -> int:
        return self.date.year

    @classmethod
    def from_document(cls, document) -> "DocumentSnapshot":
        document_type = document.document_type
        return cls(
            organization_id=document.organization_id,
            document_id=document.id,
            date=document.date,
            direction=document_type.direction,
            document_type_code=document_type.code,
            valuation_impact=bool(document_type.valuation_impact),
            operation_sign_valuation=document_type.operation_sign_valuation,
            lines=tuple(
                SnapshotLine(
                    product_id=line.product_id,
                    quantity=quantity(line.quantity),
                    net_amount=money(line.net_amount),
                )
                for line in document.lines.all()
                if line.product_id
            ),
        )


# =====================================================
# PERSISTENCE
# =====================================================


def _lock_stat(*, organization_id, product_id, year: int, create: bool):
    qs = ProductAnnualStat.objects.select_for_update()
    if create:
        stat, _ = qs.get_or_create(
            organization_id=organization_id, product_id=product_id, year=year
        )
        return stat
    return qs.filter(
        organization_id=organization_id, product_id=product_id, year=year
    ).first()


def _ordered_lines(snapshot: DocumentSnapshot):
    # Stable sort: one lock order across concurrent postings, same-product
    # lines keep their document order.
    return sorted(snapshot.lines, key=lambda line: str(line.product_id))


@transaction.atomic
def apply_snapshot_stats(snapshot: DocumentSnapshot) -> int:
    """Apply a snapshot; returns the number of lines applied."""
    if should_skip(snapshot.valuation_impact, snapshot.operation_sign_valuation):
        return 0

    sign = require_valuation_sign(
        snapshot.operation_sign_valuation,
        document_type_code=snapshot.document_type_code,
    )

    applied = 0
    for line in _ordered_lines(snapshot):
        stat = _lock_stat(
            organization_id=snapshot.organization_id,
            product_id=line.product_id,
            year=snapshot.year,
            create=True,
        )
        new_state = apply_line(
            StatState.from_row(stat),
            direction=snapshot.direction,
            sign=sign,
            line_quantity=line.quantity,
            line_net_amount=line.net_amount,
        )
        new_state.write_to(stat)
        stat.save()
        applied += 1

    logger.info(
        "Document stats applied",
        extra={
            "document_id": str(snapshot.document_id),
            "year": snapshot.year,
            "lines": applied,
        },
    )
    return applied


def apply_document_stats(document) -> int:
    return apply_snapshot_stats(DocumentSnapshot.from_document(document))


@transaction.atomic
def revert_document_stats(snapshot: DocumentSnapshot) -> int:
    """Subtract a snapshot; rows that do not exist are left absent."""
    if should_skip(snapshot.valuation_impact, snapshot.operation_sign_valuation):
        return 0

    sign = require_valuation_sign(
        snapshot.operation_sign_valuation,
        document_type_code=snapshot.document_type_code,
    )

    reverted = 0
    for line in _ordered_lines(snapshot):
        stat = _lock_stat(
            organization_id=snapshot.organization_id,
            product_id=line.product_id,
            year=snapshot.year,
            create=False,
        )
        if stat is None:
            continue
        new_state = revert_line(
            StatState.from_row(stat),
            direction=snapshot.direction,
            sign=sign,
            line_quantity=line.quantity,
            line_net_amount=line.net_amount,
        )
        new_state.write_to(stat)
        stat.save()
        reverted += 1

    logger.info(
        "Document stats reverted",
        extra={
            "document_id": str(snapshot.document_id),
            "year": snapshot.year,
            "lines": reverted,
        },
    )
    return reverted


@transaction.atomic
def recalculate_stats_for_year(*, organization_id, year: int) -> int:
    """
    Authoritative rebuild: delete the year's rows and re-apply every
    valuation document of that year in (date, created_at, id) order.
    Returns the number of documents processed.
    """
    deleted, _ = ProductAnnualStat.objects.filter(
        organization_id=organization_id, year=year
    ).delete()

    documents = (
        Document.objects.filter(
            organization_id=organization_id,
            date__year=year,
            posted_at__isnull=False,
            document_type__valuation_impact=True,
            document_type__operation_sign_valuation__isnull=False,
        )
        .exclude(document_type__operation_sign_valuation=0)
        .select_related("document_type")
        .prefetch_related("lines")
        .order_by("date", "created_at", "id")
    )

    processed = 0
    for document in documents:
        apply_document_stats(document)
        processed += 1

    logger.info(
        "Stats recalculated for year",
        extra={
            "organization_id": str(organization_id),
            "year": year,
            "rows_deleted": deleted,
            "documents": processed,
        },
    )
    return processed


def _stat_payload(state: StatState) -> dict:
    return {
        name: fmt_money(value) if name in MONEY_FIELDS else fmt_quantity(value)
        for name, value in dataclasses.asdict(state).items()
    }


def get_product_stats(*, organization_id, product_id, year: int) -> dict:
    """
    One product's figures for a year, plus its current stock.
    A product with no row for the year reports zeros.
    """
    if not Product.objects.filter(id=product_id, organization_id=organization_id).exists():
        raise NotFoundError("Product", product_id=str(product_id))

    stat = ProductAnnualStat.objects.filter(
        organization_id=organization_id, product_id=product_id, year=year
    ).first()
    state = StatState.from_row(stat) if stat is not None else StatState()
    stock = current_stock(organization_id=organization_id, product_id=product_id)
    return {
        "product_id": str(product_id),
        "year": year,
        **_stat_payload(state),
        "current_stock": fmt_quantity(stock),
    }


def list_product_stats(
    *, organization_id, year: int, q=None, sort=None, page=1, per_page=DEFAULT_PER_PAGE
) -> dict:
    """
    Yearly valuation table: one row per ProductAnnualStat of the year.

    q filters on product code or name (case-insensitive). sort is one of
    SORT_FIELDS, "-" prefix for descending; anything else keeps code order.
    """
    page = _positive_int(page, field_name="page")
    per_page = min(_positive_int(per_page, field_name="per_page"), MAX_PER_PAGE)

    qs = ProductAnnualStat.objects.filter(
        organization_id=organization_id, year=year
    ).select_related("product")

    q = (q or "").strip()
    if q:
        qs = qs.filter(Q(product__code__icontains=q) | Q(product__name__icontains=q))

    order = ["product__code", "id"]
    if sort:
        descending = sort.startswith("-")
        column = SORT_FIELDS.get(sort.lstrip("-"))
        if column is not None:
            order = [f"-{column}" if descending else column, "id"]

    count = qs.count()
    offset = (page - 1) * per_page
    rows = list(qs.order_by(*order)[offset : offset + per_page])

    stocks = current_stocks(
        organization_id=organization_id, product_ids=[row.product_id for row in rows]
    )

    return {
        "year": year,
        "count": count,
        "page": page,
        "per_page": per_page,
        "results": [
            {
                "id": str(row.id),
                "product_id": str(row.product_id),
                "product_code": row.product.code,
                "product_name": row.product.name,
                **_stat_payload(StatState.from_row(row)),
                "current_stock": fmt_quantity(stocks[row.product_id]),
            }
            for row in rows
        ],
    }
