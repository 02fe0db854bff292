"""
======================================================
PATH: finance/migrations/0001_initial.py
======================================================
MIGRATION: CREATE FinancialAccount, Payment, PaymentMapping

Purpose:
- PaymentMapping is unique per (payment, installment) so allocations
  to the same pair are merged, never duplicated.
- Positive-amount check constraints on payments and mappings.
"""

from __future__ import annotations

import uuid
from decimal import Decimal

from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        ("organizations", "0001_initial"),
        ("documents", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="FinancialAccount",
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
                ("name", models.CharField(max_length=100)),
                (
                    "kind",
                    models.CharField(
                        choices=[
                            ("BANK", "Bank"),
                            ("CASH", "Cash"),
                            ("VIRTUAL", "Virtual"),
                        ],
                        default="BANK",
                        max_length=10,
                    ),
                ),
                ("iban", models.CharField(blank=True, default="", max_length=34)),
                (
                    "bic_swift",
                    models.CharField(blank=True, default="", max_length=11),
                ),
                (
                    "initial_balance",
                    models.DecimalField(
                        decimal_places=2, default=Decimal("0.00"), max_digits=14
                    ),
                ),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "organization",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="financial_accounts",
                        to="organizations.organization",
                    ),
                ),
            ],
            options={
                "ordering": ["name"],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("organization", "name"),
                        name="uniq_fin_account_org_name",
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="Payment",
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
                    "direction",
                    models.CharField(
                        choices=[("INFLOW", "Inflow"), ("OUTFLOW", "Outflow")],
                        max_length=7,
                    ),
                ),
                (
                    "amount",
                    models.DecimalField(decimal_places=2, max_digits=12),
                ),
                ("date", models.DateField()),
                (
                    "method",
                    models.CharField(
                        choices=[
                            ("TRANSFER", "Bank transfer"),
                            ("CASH", "Cash"),
                            ("CREDIT_CARD", "Credit card"),
                            ("CHECK", "Check"),
                            ("RIBA", "Ri.Ba."),
                            ("OTHER", "Other"),
                        ],
                        default="TRANSFER",
                        max_length=12,
                    ),
                ),
                (
                    "description",
                    models.CharField(blank=True, default="", max_length=255),
                ),
                (
                    "payment_type",
                    models.CharField(blank=True, default="", max_length=20),
                ),
                (
                    "reference",
                    models.CharField(blank=True, default="", max_length=100),
                ),
                (
                    "notes",
                    models.CharField(blank=True, default="", max_length=500),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "account",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="payments",
                        to="finance.financialaccount",
                    ),
                ),
                (
                    "organization",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="payments",
                        to="organizations.organization",
                    ),
                ),
            ],
            options={
                "ordering": ["-date", "-created_at"],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(amount__gt=0),
                        name="payment_amount_gt_0",
                    )
                ],
                "indexes": [
                    models.Index(
                        fields=["organization", "date"], name="pay_org_date_idx"
                    ),
                    models.Index(
                        fields=["organization", "direction"],
                        name="pay_org_dir_idx",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="PaymentMapping",
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
                    "amount",
                    models.DecimalField(decimal_places=2, max_digits=12),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "installment",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="allocations",
                        to="documents.installment",
                    ),
                ),
                (
                    "payment",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="allocations",
                        to="finance.payment",
                    ),
                ),
            ],
            options={
                "ordering": ["created_at"],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("payment", "installment"),
                        name="uniq_payment_mapping_pair",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(amount__gt=0),
                        name="payment_mapping_amount_gt_0",
                    ),
                ],
            },
        ),
    ]
