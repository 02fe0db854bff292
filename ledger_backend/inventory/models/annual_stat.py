# inventory/models/annual_stat.py

"""
PRODUCT ANNUAL STATISTICS (incremental aggregate)

One row per (organization, product, year), adjusted by
inventory.services.valuation only:
- apply_document_stats / revert_document_stats adjust it
- recalculate_stats_for_year rebuilds the whole year

INVARIANT:
- weighted_average_cost = purchased_total_amount / purchased_quantity
  when purchased_quantity > 0, else 0
"""

import uuid
from decimal import Decimal

from django.db import models

from organizations.models import Organization
from products.models import Product


class ProductAnnualStat(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    organization = models.ForeignKey(
        Organization, on_delete=models.CASCADE, related_name="product_annual_stats"
    )
    product = models.ForeignKey(
        Product, on_delete=models.CASCADE, related_name="annual_stats"
    )
    year = models.PositiveSmallIntegerField()

    purchased_quantity = models.DecimalField(
        max_digits=12, decimal_places=4, default=Decimal("0")
    )
    purchased_total_amount = models.DecimalField(
        max_digits=15, decimal_places=2, default=Decimal("0.00")
    )
    sold_quantity = models.DecimalField(
        max_digits=12, decimal_places=4, default=Decimal("0")
    )
    sold_total_amount = models.DecimalField(
        max_digits=15, decimal_places=2, default=Decimal("0.00")
    )
    weighted_average_cost = models.DecimalField(
        max_digits=15, decimal_places=4, default=Decimal("0")
    )
    last_cost = models.DecimalField(
        max_digits=15, decimal_places=4, default=Decimal("0")
    )

    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["year", "product"]
        constraints = [
            models.UniqueConstraint(
                fields=["organization", "product", "year"],
                name="uniq_annual_stat_org_product_year",
            ),
        ]
        indexes = [
            models.Index(fields=["organization", "year"], name="stat_org_year_idx"),
        ]

    def __str__(self):
        return f"{self.product_id} {self.year}: WAC {self.weighted_average_cost}"
