# inventory/api/serializers.py

from rest_framework import serializers

from inventory.models import StockMovement


class StockMovementSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source="product.name", read_only=True)
    warehouse_code = serializers.CharField(source="warehouse.code", read_only=True)

    class Meta:
        model = StockMovement
        fields = (
            "id",
            "product",
            "product_name",
            "warehouse",
            "warehouse_code",
            "quantity",
            "kind",
            "document",
            "document_number",
            "notes",
            "created_at",
        )
        read_only_fields = fields


class CurrentStockSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
    warehouse_id = serializers.UUIDField(allow_null=True)
    stock = serializers.CharField()


class ProductAnnualStatSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
    year = serializers.IntegerField()
    purchased_quantity = serializers.CharField()
    purchased_total_amount = serializers.CharField()
    sold_quantity = serializers.CharField()
    sold_total_amount = serializers.CharField()
    weighted_average_cost = serializers.CharField()
    last_cost = serializers.CharField()
    current_stock = serializers.CharField()


class ProductStatsRowSerializer(serializers.Serializer):
    id = serializers.UUIDField()
    product_id = serializers.UUIDField()
    product_code = serializers.CharField()
    product_name = serializers.CharField()
    purchased_quantity = serializers.CharField()
    purchased_total_amount = serializers.CharField()
    sold_quantity = serializers.CharField()
    sold_total_amount = serializers.CharField()
    weighted_average_cost = serializers.CharField()
    last_cost = serializers.CharField()
    current_stock = serializers.CharField()


class ProductStatsPageSerializer(serializers.Serializer):
    year = serializers.IntegerField()
    count = serializers.IntegerField()
    page = serializers.IntegerField()
    per_page = serializers.IntegerField()
    results = ProductStatsRowSerializer(many=True)


class MovementSummarySerializer(serializers.Serializer):
    total = serializers.IntegerField()
    by_kind = serializers.DictField(child=serializers.IntegerField())
    last_movement_at = serializers.DateTimeField(allow_null=True)


class RecalculateResultSerializer(serializers.Serializer):
    year = serializers.IntegerField()
    documents_processed = serializers.IntegerField()
