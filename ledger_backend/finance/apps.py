# finance/apps.py

"""
FINANCE APP CONFIG

Financial accounts, payments and payment-to-installment allocations.
"""

from django.apps import AppConfig


class FinanceConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "finance"
    verbose_name = "Finance & Reconciliation"
