# finance/api/views.py

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.generics import GenericAPIView
from rest_framework.permissions import IsAuthenticated

from core.api import result_response
from finance import operations
from finance.api.serializers import (
    AccountBalanceSerializer,
    FinancialAccountCreateSerializer,
    InstallmentForAllocationSerializer,
    PaymentListItemSerializer,
    ReconcileInputSerializer,
    ReconcileResultSerializer,
)
from organizations.context import tenant_context_for

ORG_HEADER = OpenApiParameter(
    name="X-Organization-Id",
    type=str,
    location=OpenApiParameter.HEADER,
    required=True,
)


class ReconcilePaymentView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = ReconcileInputSerializer

    @extend_schema(
        tags=["finance"],
        parameters=[ORG_HEADER],
        request=ReconcileInputSerializer,
        responses={201: ReconcileResultSerializer},
    )
    def post(self, request):
        ctx = tenant_context_for(request)
        s = ReconcileInputSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        result = operations.reconcile_payment(
            ctx,
            allocations=data["allocations"],
            payment_id=data.get("payment_id"),
            new_payment=data.get("new_payment"),
        )
        return result_response(result, success_status=status.HTTP_201_CREATED)


class PaymentListView(GenericAPIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(
        tags=["finance"],
        parameters=[
            ORG_HEADER,
            OpenApiParameter("direction", str, enum=["INFLOW", "OUTFLOW"]),
            OpenApiParameter("limit", int),
        ],
        responses=PaymentListItemSerializer(many=True),
    )
    def get(self, request):
        ctx = tenant_context_for(request)
        result = operations.list_payments(
            ctx,
            direction=request.query_params.get("direction") or None,
            limit=request.query_params.get("limit"),
        )
        return result_response(result)


class PaymentDetailView(GenericAPIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(
        tags=["finance"],
        parameters=[ORG_HEADER],
        responses={200: OpenApiTypes.OBJECT},
    )
    def delete(self, request, payment_id):
        ctx = tenant_context_for(request)
        return result_response(operations.delete_payment(ctx, payment_id=payment_id))


class InstallmentsForAllocationView(GenericAPIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(
        tags=["finance"],
        parameters=[
            ORG_HEADER,
            OpenApiParameter("limit", int),
            OpenApiParameter("open_only", bool),
        ],
        responses=InstallmentForAllocationSerializer(many=True),
    )
    def get(self, request):
        ctx = tenant_context_for(request)
        open_only = (request.query_params.get("open_only") or "").lower() in (
            "1",
            "true",
            "yes",
        )
        result = operations.get_installments_for_allocation(
            ctx, limit=request.query_params.get("limit"), open_only=open_only
        )
        return result_response(result)


class FinancialAccountListCreateView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = FinancialAccountCreateSerializer

    @extend_schema(
        tags=["finance"],
        parameters=[ORG_HEADER],
        responses=AccountBalanceSerializer(many=True),
    )
    def get(self, request):
        ctx = tenant_context_for(request)
        return result_response(operations.get_account_balances(ctx))

    @extend_schema(
        tags=["finance"],
        parameters=[ORG_HEADER],
        request=FinancialAccountCreateSerializer,
        responses={201: OpenApiTypes.OBJECT},
    )
    def post(self, request):
        ctx = tenant_context_for(request)
        s = FinancialAccountCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        result = operations.create_financial_account(ctx, **s.validated_data)
        return result_response(result, success_status=status.HTTP_201_CREATED)


class FinancialAccountDetailView(GenericAPIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(
        tags=["finance"],
        parameters=[ORG_HEADER],
        responses={200: OpenApiTypes.OBJECT},
    )
    def delete(self, request, account_id):
        ctx = tenant_context_for(request)
        return result_response(
            operations.delete_financial_account(ctx, account_id=account_id)
        )
