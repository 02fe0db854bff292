# inventory/api/urls.py

from django.urls import path

from inventory.api.views import (
    CurrentStockView,
    MovementSummaryView,
    ProductStatsListView,
    ProductStatsView,
    RecalculateStatsView,
    StockMovementListView,
)

urlpatterns = [
    path("movements/", StockMovementListView.as_view(), name="inventory-movements"),
    path(
        "movements/summary/",
        MovementSummaryView.as_view(),
        name="inventory-movement-summary",
    ),
    path(
        "stock/<uuid:product_id>/",
        CurrentStockView.as_view(),
        name="inventory-current-stock",
    ),
    path(
        "stats/<int:year>/",
        ProductStatsListView.as_view(),
        name="inventory-stats-list",
    ),
    path(
        "stats/<uuid:product_id>/<int:year>/",
        ProductStatsView.as_view(),
        name="inventory-product-stats",
    ),
    path(
        "stats/<int:year>/recalculate/",
        RecalculateStatsView.as_view(),
        name="inventory-recalculate-stats",
    ),
]
