"""
======================================================
PATH: inventory/migrations/0001_initial.py
======================================================
MIGRATION: CREATE StockMovement (append-only) + ProductAnnualStat
"""

from __future__ import annotations

import uuid
from decimal import Decimal

from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ("organizations", "0001_initial"),
        ("products", "0001_initial"),
        ("documents", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="StockMovement",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        primary_key=True,
                        default=uuid.uuid4,
                        editable=False,
                        serialize=False,
                    ),
                ),
                (
                    "quantity",
                    models.DecimalField(decimal_places=4, max_digits=12),
                ),
                (
                    "kind",
                    models.CharField(
                        choices=[
                            ("INITIAL_LOAD", "Initial load"),
                            ("SUPPLIER_RECEIPT", "Supplier receipt"),
                            ("SALE_SHIPMENT", "Sale shipment"),
                            (
                                "DELIVERY_NOTE_SHIPMENT",
                                "Sale shipment (delivery note)",
                            ),
                            ("INVENTORY_ADJUSTMENT", "Inventory adjustment"),
                            ("CUSTOMER_RETURN", "Customer return"),
                            ("SUPPLIER_RETURN", "Return to supplier"),
                            ("TRANSFER_OUT", "Transfer out"),
                            ("TRANSFER_IN", "Transfer in"),
                        ],
                        max_length=30,
                    ),
                ),
                (
                    "document_number",
                    models.CharField(blank=True, default="", max_length=50),
                ),
                (
                    "notes",
                    models.CharField(blank=True, default="", max_length=500),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "document",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="stock_movements",
                        to="documents.document",
                    ),
                ),
                (
                    "organization",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="stock_movements",
                        to="organizations.organization",
                    ),
                ),
                (
                    "performed_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="stock_movements",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "product",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="stock_movements",
                        to="products.product",
                    ),
                ),
                (
                    "warehouse",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="stock_movements",
                        to="products.warehouse",
                    ),
                ),
            ],
            options={
                "ordering": ["created_at"],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("quantity", 0), _negated=True),
                        name="stock_movement_quantity_nonzero",
                    )
                ],
                "indexes": [
                    models.Index(
                        fields=["organization", "product", "warehouse"],
                        name="mov_org_prod_wh_idx",
                    ),
                    models.Index(fields=["document"], name="mov_document_idx"),
                    models.Index(fields=["kind"], name="mov_kind_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="ProductAnnualStat",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        primary_key=True,
                        default=uuid.uuid4,
                        editable=False,
                        serialize=False,
                    ),
                ),
                ("year", models.PositiveSmallIntegerField()),
                (
                    "purchased_quantity",
                    models.DecimalField(
                        decimal_places=4, default=Decimal("0"), max_digits=12
                    ),
                ),
                (
                    "purchased_total_amount",
                    models.DecimalField(
                        decimal_places=2, default=Decimal("0.00"), max_digits=15
                    ),
                ),
                (
                    "sold_quantity",
                    models.DecimalField(
                        decimal_places=4, default=Decimal("0"), max_digits=12
                    ),
                ),
                (
                    "sold_total_amount",
                    models.DecimalField(
                        decimal_places=2, default=Decimal("0.00"), max_digits=15
                    ),
                ),
                (
                    "weighted_average_cost",
                    models.DecimalField(
                        decimal_places=4, default=Decimal("0"), max_digits=15
                    ),
                ),
                (
                    "last_cost",
                    models.DecimalField(
                        decimal_places=4, default=Decimal("0"), max_digits=15
                    ),
                ),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "organization",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="product_annual_stats",
                        to="organizations.organization",
                    ),
                ),
                (
                    "product",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="annual_stats",
                        to="products.product",
                    ),
                ),
            ],
            options={
                "ordering": ["year", "product"],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("organization", "product", "year"),
                        name="uniq_annual_stat_org_product_year",
                    )
                ],
                "indexes": [
                    models.Index(
                        fields=["organization", "year"], name="stat_org_year_idx"
                    )
                ],
            },
        ),
    ]
