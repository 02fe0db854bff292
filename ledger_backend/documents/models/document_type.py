# documents/models/document_type.py

"""
DOCUMENT TYPE CONFIGURATION

Decides, per organization and code, what posting a document does:
- inventory_movement + operation_sign_stock  -> Movement Ledger
- valuation_impact + operation_sign_valuation -> Valuation Aggregator
- direction -> which payment direction settles its installments

Signs are validated when the configuration is saved, not when a
document is posted.
"""

import logging
import uuid

from django.core.exceptions import ValidationError
from django.db import models

from inventory.movement_kinds import VALID_STOCK_SIGNS, is_mapped
from organizations.models import Organization

logger = logging.getLogger("ledger.posting")

VALID_VALUATION_SIGNS = (-1, 0, 1)


class DocumentType(models.Model):
    class Direction(models.TextChoices):
        SALE = "SALE", "Sale"
        PURCHASE = "PURCHASE", "Purchase"
        INTERNAL = "INTERNAL", "Internal"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    organization = models.ForeignKey(
        Organization, on_delete=models.CASCADE, related_name="document_types"
    )

    code = models.CharField(max_length=20)
    name = models.CharField(max_length=255)
    direction = models.CharField(
        max_length=10, choices=Direction.choices, default=Direction.SALE
    )

    inventory_movement = models.BooleanField(default=False)
    operation_sign_stock = models.SmallIntegerField(null=True, blank=True)

    valuation_impact = models.BooleanField(default=False)
    operation_sign_valuation = models.SmallIntegerField(null=True, blank=True)

    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["code"]
        constraints = [
            models.UniqueConstraint(
                fields=["organization", "code"], name="uniq_document_type_org_code"
            ),
        ]

    def __str__(self):
        return f"{self.code} - {self.name}"

    def clean(self):
        self.code = (self.code or "").strip().upper()
        errors = {}

        if self.inventory_movement and self.operation_sign_stock not in VALID_STOCK_SIGNS:
            errors["operation_sign_stock"] = (
                "Must be +1 or -1 when inventory movement is active"
            )

        if (
            self.operation_sign_valuation is not None
            and self.operation_sign_valuation not in VALID_VALUATION_SIGNS
        ):
            errors["operation_sign_valuation"] = "Must be -1, 0, +1 or empty"

        if errors:
            raise ValidationError(errors)

        if self.inventory_movement and not is_mapped(
            self.code, self.operation_sign_stock
        ):
            logger.warning(
                "Document type code has no movement kind mapping; generic kind will be used",
                extra={
                    "document_type_code": self.code,
                    "sign": self.operation_sign_stock,
                },
            )

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)

    @property
    def affects_valuation(self) -> bool:
        return bool(self.valuation_impact) and self.operation_sign_valuation not in (
            None,
            0,
        )
