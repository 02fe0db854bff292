# inventory/movement_kinds.py

"""
======================================================
PATH: inventory/movement_kinds.py
======================================================
MOVEMENT KIND LOOKUP

(document-type code, stock sign) -> MovementKind

Rules:
- Sign must be +1 or -1. Anything else is a configuration error.
- Unmapped codes fall back to the generic kind for the sign
  (SUPPLIER_RECEIPT for +1, SALE_SHIPMENT for -1) so custom document
  types keep working. DocumentType.clean() reports them up front.
"""

from __future__ import annotations

from django.db import models

from core.exceptions import ConfigurationError

INBOUND = 1
OUTBOUND = -1
VALID_STOCK_SIGNS = (INBOUND, OUTBOUND)


class MovementKind(models.TextChoices):
    INITIAL_LOAD = "INITIAL_LOAD", "Initial load"
    SUPPLIER_RECEIPT = "SUPPLIER_RECEIPT", "Supplier receipt"
    SALE_SHIPMENT = "SALE_SHIPMENT", "Sale shipment"
    DELIVERY_NOTE_SHIPMENT = "DELIVERY_NOTE_SHIPMENT", "Sale shipment (delivery note)"
    INVENTORY_ADJUSTMENT = "INVENTORY_ADJUSTMENT", "Inventory adjustment"
    CUSTOMER_RETURN = "CUSTOMER_RETURN", "Customer return"
    SUPPLIER_RETURN = "SUPPLIER_RETURN", "Return to supplier"
    TRANSFER_OUT = "TRANSFER_OUT", "Transfer out"
    TRANSFER_IN = "TRANSFER_IN", "Transfer in"


MOVEMENT_KIND_TABLE: dict[tuple[str, int], str] = {
    # inbound
    ("OF", INBOUND): MovementKind.SUPPLIER_RECEIPT,
    ("ORD_FORNITORE", INBOUND): MovementKind.SUPPLIER_RECEIPT,
    ("RESO_FORNITORE", INBOUND): MovementKind.SUPPLIER_RECEIPT,
    ("NC", INBOUND): MovementKind.CUSTOMER_RETURN,
    ("NDC", INBOUND): MovementKind.CUSTOMER_RETURN,
    ("NCF", INBOUND): MovementKind.CUSTOMER_RETURN,
    # outbound
    ("DDT", OUTBOUND): MovementKind.DELIVERY_NOTE_SHIPMENT,
    ("CAF", OUTBOUND): MovementKind.DELIVERY_NOTE_SHIPMENT,
    ("FAI", OUTBOUND): MovementKind.SALE_SHIPMENT,
    ("FAD", OUTBOUND): MovementKind.SALE_SHIPMENT,
    ("FAC", OUTBOUND): MovementKind.SALE_SHIPMENT,
    ("RESO_FORNITORE", OUTBOUND): MovementKind.SUPPLIER_RETURN,
}

DEFAULT_KIND_BY_SIGN: dict[int, str] = {
    INBOUND: MovementKind.SUPPLIER_RECEIPT,
    OUTBOUND: MovementKind.SALE_SHIPMENT,
}


def require_stock_sign(sign, *, document_type_code: str = "") -> int:
    if sign not in VALID_STOCK_SIGNS:
        raise ConfigurationError(
            f"Unexpected stock operation sign {sign!r} on document type "
            f"{document_type_code or '?'}; expected +1 or -1",
            document_type_code=document_type_code,
            sign=str(sign),
        )
    return int(sign)


def is_mapped(code: str, sign: int) -> bool:
    return ((code or "").strip().upper(), sign) in MOVEMENT_KIND_TABLE


def resolve_movement_kind(code: str, sign) -> str:
    s = require_stock_sign(sign, document_type_code=code)
    key = ((code or "").strip().upper(), s)
    return MOVEMENT_KIND_TABLE.get(key, DEFAULT_KIND_BY_SIGN[s])
