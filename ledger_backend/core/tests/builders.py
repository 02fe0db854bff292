# core/tests/builders.py

"""
Shared fixtures for ledger tests.

Plain functions over the ORM; each returns the created row. Amounts and
quantities are passed as strings so no float ever reaches a Decimal field.
"""

from __future__ import annotations

import datetime
from decimal import Decimal

from django.contrib.auth import get_user_model

from core.context import TenantContext
from documents.models import Document, DocumentLine, DocumentType, Installment
from finance.models import FinancialAccount, Payment, PaymentMapping
from organizations.models import Membership, Organization
from products.models import Product, ProductType, Warehouse

User = get_user_model()

DEFAULT_DATE = datetime.date(2024, 3, 15)


# --------------------------------------------------
# Tenancy
# --------------------------------------------------


def make_org(name: str = "Acme S.r.l.") -> Organization:
    return Organization.objects.create(name=name)


def make_user(username: str = "operatore", password: str = "pass") -> User:
    return User.objects.create_user(username=username, password=password)


def make_member(user, org, role=Membership.Role.USER) -> Membership:
    return Membership.objects.create(user=user, organization=org, role=role)


def ctx_for(org, *, can_write: bool = True, user=None) -> TenantContext:
    return TenantContext(
        organization_id=org.id,
        can_write=can_write,
        user_id=getattr(user, "pk", None),
    )


# --------------------------------------------------
# Catalogue
# --------------------------------------------------


def make_warehouse(org, code: str = "MAG1", name: str = "Magazzino") -> Warehouse:
    return Warehouse.objects.create(organization=org, code=code, name=name)


def make_product_type(org, code: str = "MERCE", *, manage_stock: bool = True):
    return ProductType.objects.create(
        organization=org, code=code, description=code, manage_stock=manage_stock
    )


def make_product(
    org, code: str = "P001", *, product_type=None, default_warehouse=None
) -> Product:
    return Product.objects.create(
        organization=org,
        code=code,
        name=f"Prodotto {code}",
        product_type=product_type,
        default_warehouse=default_warehouse,
    )


# --------------------------------------------------
# Documents
# --------------------------------------------------


def make_document_type(
    org,
    code: str,
    *,
    direction=DocumentType.Direction.SALE,
    inventory_movement: bool = False,
    stock_sign=None,
    valuation_impact: bool = False,
    valuation_sign=None,
) -> DocumentType:
    return DocumentType.objects.create(
        organization=org,
        code=code,
        name=code,
        direction=direction,
        inventory_movement=inventory_movement,
        operation_sign_stock=stock_sign,
        valuation_impact=valuation_impact,
        operation_sign_valuation=valuation_sign,
    )


def purchase_type(org, code: str = "OF") -> DocumentType:
    """Supplier receipt: stock +1, purchase valuation +1."""
    return make_document_type(
        org,
        code,
        direction=DocumentType.Direction.PURCHASE,
        inventory_movement=True,
        stock_sign=1,
        valuation_impact=True,
        valuation_sign=1,
    )


def sale_type(org, code: str = "FAI") -> DocumentType:
    """Immediate sale invoice: stock -1, sale valuation +1."""
    return make_document_type(
        org,
        code,
        direction=DocumentType.Direction.SALE,
        inventory_movement=True,
        stock_sign=-1,
        valuation_impact=True,
        valuation_sign=1,
    )


def make_document(
    org,
    document_type,
    *,
    number: str = "1",
    date: datetime.date = DEFAULT_DATE,
    main_warehouse=None,
    lines=(),
) -> Document:
    """
    lines: iterable of dicts with product, quantity, unit_price and
    optionally warehouse / net_amount.
    """
    document = Document.objects.create(
        organization=org,
        document_type=document_type,
        number=number,
        date=date,
        main_warehouse=main_warehouse,
    )
    for position, data in enumerate(lines):
        qty = Decimal(str(data["quantity"]))
        price = Decimal(str(data.get("unit_price", "0")))
        net = data.get("net_amount")
        DocumentLine.objects.create(
            document=document,
            position=position,
            product=data.get("product"),
            warehouse=data.get("warehouse"),
            quantity=qty,
            unit_price=price,
            net_amount=(qty * price).quantize(Decimal("0.01"))
            if net is None
            else Decimal(str(net)),
        )
    return document


def make_installment(
    document, amount: str, *, due_date: datetime.date = DEFAULT_DATE
) -> Installment:
    return Installment.objects.create(
        organization_id=document.organization_id,
        document=document,
        amount=Decimal(amount),
        due_date=due_date,
    )


# --------------------------------------------------
# Finance
# --------------------------------------------------


def make_account(
    org, name: str = "Banca", *, initial_balance: str = "0.00"
) -> FinancialAccount:
    return FinancialAccount.objects.create(
        organization=org, name=name, initial_balance=Decimal(initial_balance)
    )


def make_payment(
    org,
    account,
    amount: str,
    *,
    direction=Payment.Direction.INFLOW,
    date: datetime.date = DEFAULT_DATE,
) -> Payment:
    return Payment.objects.create(
        organization=org,
        account=account,
        direction=direction,
        amount=Decimal(amount),
        date=date,
    )


def allocate(payment, installment, amount: str) -> PaymentMapping:
    return PaymentMapping.objects.create(
        payment=payment, installment=installment, amount=Decimal(amount)
    )
