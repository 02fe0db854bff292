# documents/models/installment.py

"""
INSTALLMENT (receivable / payable due date)

RULES:
- amount is the fixed face value
- paid amount is NEVER stored: it is the sum of PaymentMapping rows
- status is derived on read (finance.services.payment_service)
"""

import uuid

from django.db import models

from organizations.models import Organization

from .document import Document


class Installment(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    organization = models.ForeignKey(
        Organization, on_delete=models.CASCADE, related_name="installments"
    )
    document = models.ForeignKey(
        Document, on_delete=models.CASCADE, related_name="installments"
    )

    due_date = models.DateField()
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    notes = models.CharField(max_length=500, blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["due_date", "created_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(amount__gt=0),
                name="installment_amount_gt_0",
            ),
        ]
        indexes = [
            models.Index(
                fields=["organization", "due_date"], name="inst_org_due_idx"
            ),
        ]

    def __str__(self):
        return f"{self.document} due {self.due_date}: {self.amount}"

    @property
    def direction(self) -> str:
        return self.document.document_type.direction
