"""
PATH: products/models/__init__.py

Products models export surface.
"""

from .product import Product, ProductType
from .warehouse import Warehouse

__all__ = [
    "Product",
    "ProductType",
    "Warehouse",
]
