# finance/api/urls.py

from django.urls import path

from finance.api.views import (
    FinancialAccountDetailView,
    FinancialAccountListCreateView,
    InstallmentsForAllocationView,
    PaymentDetailView,
    PaymentListView,
    ReconcilePaymentView,
)

urlpatterns = [
    path("reconcile/", ReconcilePaymentView.as_view(), name="finance-reconcile"),
    path("payments/", PaymentListView.as_view(), name="finance-payments"),
    path(
        "payments/<uuid:payment_id>/",
        PaymentDetailView.as_view(),
        name="finance-payment-detail",
    ),
    path(
        "installments/",
        InstallmentsForAllocationView.as_view(),
        name="finance-installments",
    ),
    path(
        "accounts/", FinancialAccountListCreateView.as_view(), name="finance-accounts"
    ),
    path(
        "accounts/<uuid:account_id>/",
        FinancialAccountDetailView.as_view(),
        name="finance-account-detail",
    ),
]
