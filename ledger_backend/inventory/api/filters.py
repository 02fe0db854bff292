# inventory/api/filters.py

import django_filters

from inventory.models import StockMovement
from inventory.movement_kinds import MovementKind


class StockMovementFilter(django_filters.FilterSet):
    product = django_filters.UUIDFilter(field_name="product_id")
    warehouse = django_filters.UUIDFilter(field_name="warehouse_id")
    document = django_filters.UUIDFilter(field_name="document_id")
    kind = django_filters.ChoiceFilter(choices=MovementKind.choices)
    created_from = django_filters.IsoDateTimeFilter(
        field_name="created_at", lookup_expr="gte"
    )
    created_to = django_filters.IsoDateTimeFilter(
        field_name="created_at", lookup_expr="lte"
    )

    class Meta:
        model = StockMovement
        fields = ["product", "warehouse", "document", "kind"]
