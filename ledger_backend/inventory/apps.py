# inventory/apps.py

"""
INVENTORY APP CONFIG

Movement ledger (append-only) + annual valuation statistics.
"""

from django.apps import AppConfig


class InventoryConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "inventory"
    verbose_name = "Inventory Ledger & Valuation"
