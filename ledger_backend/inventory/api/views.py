# inventory/api/views.py

from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework.generics import GenericAPIView, ListAPIView
from rest_framework.permissions import IsAuthenticated

from core.api import result_response
from inventory import operations
from inventory.api.filters import StockMovementFilter
from inventory.api.serializers import (
    CurrentStockSerializer,
    MovementSummarySerializer,
    ProductAnnualStatSerializer,
    ProductStatsPageSerializer,
    RecalculateResultSerializer,
    StockMovementSerializer,
)
from inventory.models import StockMovement
from organizations.context import tenant_context_for

ORG_HEADER = OpenApiParameter(
    name="X-Organization-Id",
    type=str,
    location=OpenApiParameter.HEADER,
    required=True,
)


@extend_schema(tags=["inventory"], parameters=[ORG_HEADER])
class StockMovementListView(ListAPIView):
    """Read-only movement ledger (newest first)."""

    permission_classes = [IsAuthenticated]
    serializer_class = StockMovementSerializer
    filterset_class = StockMovementFilter

    def get_queryset(self):
        ctx = tenant_context_for(self.request)
        return (
            StockMovement.objects.filter(organization_id=ctx.organization_id)
            .select_related("product", "warehouse")
            .order_by("-created_at")
        )


class CurrentStockView(GenericAPIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(
        tags=["inventory"],
        parameters=[ORG_HEADER, OpenApiParameter("warehouse", str)],
        responses=CurrentStockSerializer,
    )
    def get(self, request, product_id):
        ctx = tenant_context_for(request)
        result = operations.current_stock(
            ctx,
            product_id=product_id,
            warehouse_id=request.query_params.get("warehouse") or None,
        )
        return result_response(result)


class ProductStatsView(GenericAPIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(
        tags=["inventory"],
        parameters=[ORG_HEADER],
        responses=ProductAnnualStatSerializer,
    )
    def get(self, request, product_id, year):
        ctx = tenant_context_for(request)
        return result_response(
            operations.get_product_stats(ctx, product_id=product_id, year=year)
        )


class RecalculateStatsView(GenericAPIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(
        tags=["inventory"],
        parameters=[ORG_HEADER],
        request=None,
        responses=RecalculateResultSerializer,
    )
    def post(self, request, year):
        ctx = tenant_context_for(request)
        return result_response(operations.recalculate_stats_for_year(ctx, year=year))


class ProductStatsListView(GenericAPIView):
    """Yearly valuation table (search, sort, page)."""

    permission_classes = [IsAuthenticated]

    @extend_schema(
        tags=["inventory"],
        parameters=[
            ORG_HEADER,
            OpenApiParameter("q", str),
            OpenApiParameter("sort", str),
            OpenApiParameter("page", int),
            OpenApiParameter("per_page", int),
        ],
        responses=ProductStatsPageSerializer,
    )
    def get(self, request, year):
        ctx = tenant_context_for(request)
        params = request.query_params
        return result_response(
            operations.list_product_stats(
                ctx,
                year=year,
                q=params.get("q"),
                sort=params.get("sort"),
                page=params.get("page") or 1,
                per_page=params.get("per_page"),
            )
        )


class MovementSummaryView(GenericAPIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(
        tags=["inventory"],
        parameters=[ORG_HEADER],
        responses=MovementSummarySerializer,
    )
    def get(self, request):
        ctx = tenant_context_for(request)
        return result_response(operations.movement_summary(ctx))
