# products/models/product.py

import uuid

from django.core.exceptions import ValidationError
from django.db import models

from organizations.models import Organization

from .warehouse import Warehouse


class ProductType(models.Model):
    """
    Product classification.

    STOCK MODEL (IMPORTANT):
    - manage_stock=False (services, fees, ...) never produces movements
    - Product itself does NOT store stock; stock = sum of StockMovement rows
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    organization = models.ForeignKey(
        Organization, on_delete=models.CASCADE, related_name="product_types"
    )
    code = models.CharField(max_length=20)
    description = models.CharField(max_length=255, blank=True, default="")
    manage_stock = models.BooleanField(default=True)

    class Meta:
        ordering = ["code"]
        constraints = [
            models.UniqueConstraint(
                fields=["organization", "code"], name="uniq_product_type_org_code"
            ),
        ]

    def __str__(self):
        return self.code


class Product(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    organization = models.ForeignKey(
        Organization, on_delete=models.CASCADE, related_name="products"
    )
    product_type = models.ForeignKey(
        ProductType,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="products",
    )
    default_warehouse = models.ForeignKey(
        Warehouse,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="default_for_products",
    )

    code = models.CharField(max_length=50, db_index=True)
    name = models.CharField(max_length=255)
    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["code"]
        constraints = [
            models.UniqueConstraint(
                fields=["organization", "code"], name="uniq_product_org_code"
            ),
        ]

    def __str__(self):
        return f"{self.name} ({self.code})"

    def clean(self):
        if (
            self.product_type_id
            and self.product_type.organization_id != self.organization_id
        ):
            raise ValidationError(
                {"product_type": "Product type belongs to another organization"}
            )
        if (
            self.default_warehouse_id
            and self.default_warehouse.organization_id != self.organization_id
        ):
            raise ValidationError(
                {"default_warehouse": "Warehouse belongs to another organization"}
            )

    @property
    def manages_stock(self) -> bool:
        # Untyped products are treated as goods
        if self.product_type_id is None:
            return True
        return bool(self.product_type.manage_stock)
