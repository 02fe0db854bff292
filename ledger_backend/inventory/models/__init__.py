"""
PATH: inventory/models/__init__.py

Inventory models export surface.
"""

from .annual_stat import ProductAnnualStat
from .stock_movement import StockMovement

__all__ = [
    "ProductAnnualStat",
    "StockMovement",
]
