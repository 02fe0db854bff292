# inventory/admin.py

from django.contrib import admin

from inventory.models import ProductAnnualStat, StockMovement


class ReadOnlyAdmin(admin.ModelAdmin):
    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


# ======================================================
# STOCK MOVEMENTS (append-only ledger)
# ======================================================


@admin.register(StockMovement)
class StockMovementAdmin(ReadOnlyAdmin):
    list_display = (
        "created_at",
        "product",
        "warehouse",
        "quantity",
        "kind",
        "document_number",
        "organization",
    )
    list_filter = ("kind", "organization", "warehouse")
    search_fields = ("product__code", "product__name", "document_number")


# ======================================================
# ANNUAL STATS (derived; rebuild with recalculate_stats)
# ======================================================


@admin.register(ProductAnnualStat)
class ProductAnnualStatAdmin(ReadOnlyAdmin):
    list_display = (
        "product",
        "year",
        "purchased_quantity",
        "purchased_total_amount",
        "sold_quantity",
        "sold_total_amount",
        "weighted_average_cost",
        "last_cost",
    )
    list_filter = ("year", "organization")
    search_fields = ("product__code", "product__name")
