# finance/models/payment.py

"""
PAYMENT + PAYMENT MAPPING (allocation)

Rules:
- Payment fields are fixed once created; only its allocations change.
- PaymentMapping is unique per (payment, installment); a second allocation
  to the same pair ADDS to the existing row (see reconciliation service).
- Deleting a payment deletes its allocations (cascade), which frees the
  residual on the installments automatically (residuals are summed, never
  stored).
- Global invariants (enforced by finance.services.reconciliation):
    SUM(mapping.amount) over a payment     <= payment.amount
    SUM(mapping.amount) over an installment <= installment.amount
"""

import uuid

from django.db import models

from documents.models import Installment
from organizations.models import Organization

from .account import FinancialAccount


class Payment(models.Model):
    class Direction(models.TextChoices):
        INFLOW = "INFLOW", "Inflow"
        OUTFLOW = "OUTFLOW", "Outflow"

    class Method(models.TextChoices):
        TRANSFER = "TRANSFER", "Bank transfer"
        CASH = "CASH", "Cash"
        CREDIT_CARD = "CREDIT_CARD", "Credit card"
        CHECK = "CHECK", "Check"
        RIBA = "RIBA", "Ri.Ba."
        OTHER = "OTHER", "Other"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    organization = models.ForeignKey(
        Organization, on_delete=models.CASCADE, related_name="payments"
    )
    account = models.ForeignKey(
        FinancialAccount, on_delete=models.PROTECT, related_name="payments"
    )

    direction = models.CharField(max_length=7, choices=Direction.choices)
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    date = models.DateField()
    method = models.CharField(
        max_length=12, choices=Method.choices, default=Method.TRANSFER
    )

    description = models.CharField(max_length=255, blank=True, default="")
    payment_type = models.CharField(max_length=20, blank=True, default="")
    reference = models.CharField(max_length=100, blank=True, default="")
    notes = models.CharField(max_length=500, blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-date", "-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(amount__gt=0),
                name="payment_amount_gt_0",
            ),
        ]
        indexes = [
            models.Index(fields=["organization", "date"], name="pay_org_date_idx"),
            models.Index(
                fields=["organization", "direction"], name="pay_org_dir_idx"
            ),
        ]

    def __str__(self):
        return f"{self.direction} {self.amount} on {self.date}"


class PaymentMapping(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    payment = models.ForeignKey(
        Payment, on_delete=models.CASCADE, related_name="allocations"
    )
    installment = models.ForeignKey(
        Installment, on_delete=models.CASCADE, related_name="allocations"
    )
    amount = models.DecimalField(max_digits=12, decimal_places=2)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["payment", "installment"],
                name="uniq_payment_mapping_pair",
            ),
            models.CheckConstraint(
                condition=models.Q(amount__gt=0),
                name="payment_mapping_amount_gt_0",
            ),
        ]

    def __str__(self):
        return f"{self.payment_id} -> {self.installment_id}: {self.amount}"
