# core/apps.py

"""
CORE APP CONFIG

Shared building blocks for the ledger apps:
- Decimal arithmetic (money / quantity / unit cost rounding)
- Tenant context passed into every operation
- Domain error taxonomy + operation boundary result
"""

from django.apps import AppConfig


class CoreConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "core"
    verbose_name = "Ledger Core"
