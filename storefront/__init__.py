"""
Client-side shopper state for the storefront.

This package keeps a shopper's identity, cart and order history durable using
nothing but a key/value store:
- Domain models (Product, User, Order, DeliveryDetails)
- Record codec with tagged decode results
- Repositories for the directory, session and guest cart blobs
- Services for startup self-healing, login cart merge and checkout
- The Storefront facade that a UI drives
"""

from storefront.codec import CorruptFormat, Ok
from storefront.engine import Storefront
from storefront.errors import AuthenticationError, RegistrationError, StorefrontError
from storefront.event_bus import Event, EventBus
from storefront.models import (
    CartItem,
    DeliveryDetails,
    Order,
    OrderStatus,
    Product,
    User,
)
from storefront.repositories import GuestCartStore, Repositories, SessionStore, UserDirectory
from storefront.storage import FileStorage, InMemoryStorage, KeyValueStorage

__all__ = [
    "Storefront",
    "Product",
    "CartItem",
    "DeliveryDetails",
    "Order",
    "OrderStatus",
    "User",
    "Ok",
    "CorruptFormat",
    "UserDirectory",
    "SessionStore",
    "GuestCartStore",
    "Repositories",
    "KeyValueStorage",
    "InMemoryStorage",
    "FileStorage",
    "Event",
    "EventBus",
    "StorefrontError",
    "AuthenticationError",
    "RegistrationError",
]
