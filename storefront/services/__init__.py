"""
State services built on the repositories.

Each service owns one transition of shopper state:
- SessionResolver: startup reconciliation (self-healing)
- CartSynchronizer: login merge and logout
- OrderProcessor: checkout
- Authenticator: registration and credential checks
"""

from storefront.services.auth import Authenticator
from storefront.services.cart_sync import CartSynchronizer
from storefront.services.ordering import CheckoutResult, OrderProcessor
from storefront.services.resolver import Resolution, SessionResolver

__all__ = [
    "Authenticator",
    "CartSynchronizer",
    "CheckoutResult",
    "OrderProcessor",
    "Resolution",
    "SessionResolver",
]
