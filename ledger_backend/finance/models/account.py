# finance/models/account.py

"""
FINANCIAL ACCOUNT (bank / cash / virtual)

Balance is NOT stored:
    balance = initial_balance + SUM(inflow payments) - SUM(outflow payments)
See finance.services.balance_service.
"""

import uuid
from decimal import Decimal

from django.db import models

from organizations.models import Organization


class FinancialAccount(models.Model):
    class Kind(models.TextChoices):
        BANK = "BANK", "Bank"
        CASH = "CASH", "Cash"
        VIRTUAL = "VIRTUAL", "Virtual"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    organization = models.ForeignKey(
        Organization, on_delete=models.CASCADE, related_name="financial_accounts"
    )

    name = models.CharField(max_length=100)
    kind = models.CharField(max_length=10, choices=Kind.choices, default=Kind.BANK)
    iban = models.CharField(max_length=34, blank=True, default="")
    bic_swift = models.CharField(max_length=11, blank=True, default="")
    initial_balance = models.DecimalField(
        max_digits=14, decimal_places=2, default=Decimal("0.00")
    )
    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["name"]
        constraints = [
            models.UniqueConstraint(
                fields=["organization", "name"], name="uniq_fin_account_org_name"
            ),
        ]

    def __str__(self):
        return f"{self.name} ({self.kind})"
