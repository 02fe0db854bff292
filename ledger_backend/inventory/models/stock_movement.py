# inventory/models/stock_movement.py

"""
CANONICAL INVENTORY LEDGER

Immutable inventory ledger entry.

GUARANTEES:
- Append-only (no updates, no deletes through the ORM instance)
- Signed quantity: positive = inbound, negative = outbound, never zero
- Current stock = SUM(quantity); there is no stored counter
- Rows disappear only when their source document is deleted (cascade)
"""

import uuid

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models

from inventory.movement_kinds import MovementKind
from organizations.models import Organization
from products.models import Product, Warehouse


class StockMovement(models.Model):
    Kind = MovementKind

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    organization = models.ForeignKey(
        Organization, on_delete=models.CASCADE, related_name="stock_movements"
    )
    product = models.ForeignKey(
        Product, on_delete=models.PROTECT, related_name="stock_movements"
    )
    warehouse = models.ForeignKey(
        Warehouse, on_delete=models.PROTECT, related_name="stock_movements"
    )

    quantity = models.DecimalField(max_digits=12, decimal_places=4)
    kind = models.CharField(max_length=30, choices=MovementKind.choices)

    document = models.ForeignKey(
        "documents.Document",
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="stock_movements",
    )
    document_number = models.CharField(max_length=50, blank=True, default="")
    notes = models.CharField(max_length=500, blank=True, default="")

    performed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="stock_movements",
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at"]
        constraints = [
            models.CheckConstraint(
                condition=~models.Q(quantity=0),
                name="stock_movement_quantity_nonzero",
            ),
        ]
        indexes = [
            models.Index(
                fields=["organization", "product", "warehouse"],
                name="mov_org_prod_wh_idx",
            ),
            models.Index(fields=["document"], name="mov_document_idx"),
            models.Index(fields=["kind"], name="mov_kind_idx"),
        ]

    def clean(self):
        if self.quantity is None or self.quantity == 0:
            raise ValidationError("quantity must be non-zero")

        if self.product_id and self.product.organization_id != self.organization_id:
            raise ValidationError("Product does not belong to organization")

        if self.warehouse_id and self.warehouse.organization_id != self.organization_id:
            raise ValidationError("Warehouse does not belong to organization")

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError("StockMovement records are immutable")
        self.full_clean()
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError(
            "StockMovement records are immutable and cannot be deleted"
        )

    @property
    def is_inbound(self) -> bool:
        return self.quantity > 0

    def __str__(self):
        product_name = getattr(self.product, "name", "Product")
        return f"{product_name} | {self.kind} | {self.quantity}"
