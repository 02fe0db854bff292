# documents/models/document.py

import uuid

from django.db import models

from organizations.models import Organization
from products.models import Product, Warehouse

from .document_type import DocumentType


class Document(models.Model):
    """
    A commercial document (invoice, delivery note, order, credit note...).

    Posting (documents.services.posting) is what turns its lines into
    stock movements and valuation statistics. `posted_at` is set once.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    organization = models.ForeignKey(
        Organization, on_delete=models.CASCADE, related_name="documents"
    )
    document_type = models.ForeignKey(
        DocumentType, on_delete=models.PROTECT, related_name="documents"
    )

    number = models.CharField(max_length=50, blank=True, default="")
    date = models.DateField()
    main_warehouse = models.ForeignKey(
        Warehouse,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="documents",
    )
    notes = models.TextField(blank=True, default="")

    posted_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-date", "-created_at"]
        indexes = [
            models.Index(fields=["organization", "date"], name="doc_org_date_idx"),
        ]

    def __str__(self):
        return f"{self.document_type.code} {self.number or self.id}"

    @property
    def direction(self) -> str:
        return self.document_type.direction

    @property
    def is_posted(self) -> bool:
        return self.posted_at is not None


class DocumentLine(models.Model):
    """
    One document row. product=None means a free-text line (never moves stock,
    never touches valuation).
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    document = models.ForeignKey(
        Document, on_delete=models.CASCADE, related_name="lines"
    )
    position = models.PositiveIntegerField(default=0)

    product = models.ForeignKey(
        Product,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="document_lines",
    )
    warehouse = models.ForeignKey(
        Warehouse,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="document_lines",
    )
    description = models.CharField(max_length=500, blank=True, default="")

    quantity = models.DecimalField(max_digits=12, decimal_places=4)
    unit_price = models.DecimalField(max_digits=15, decimal_places=4)
    net_amount = models.DecimalField(max_digits=15, decimal_places=2)

    class Meta:
        ordering = ["position", "id"]

    def __str__(self):
        label = self.product.name if self.product_id else self.description
        return f"{label} x {self.quantity}"
