"""
PATH: finance/models/__init__.py

Finance models export surface.
"""

from .account import FinancialAccount
from .payment import Payment, PaymentMapping

__all__ = [
    "FinancialAccount",
    "Payment",
    "PaymentMapping",
]
