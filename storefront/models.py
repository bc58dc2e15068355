"""
Domain models for the storefront state engine.

These models describe everything the shopper state engine persists: catalog
products placed in a cart, delivery details captured at checkout, orders and
the full account record.

Design decisions:
- Using Pydantic for validation and serialization
- Persisted field names follow the browser storefront's JSON layout
  (displayPrice, fullName, zip, date) via aliases, so existing blobs stay readable
- Every field has a default: a stored record with a missing key still decodes,
  and a null list (cart, orders, items) reads as empty
- Products, delivery details and orders are frozen; a cart holds them by value
- Prices are not range-checked here: stored records are read as written
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Iterable, Optional
from pydantic import BaseModel, Field, ConfigDict, field_validator


# =============================================================================
# Enums
# =============================================================================

class OrderStatus(str, Enum):
    """
    Order lifecycle states.
    Orders are only ever created as PROCESSING here; fulfillment moves them on.
    """
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"


# =============================================================================
# Catalog / Cart
# =============================================================================

class Product(BaseModel):
    """
    Catalog line item.

    Copied by value into carts and orders, so it is immutable once created.
    """
    id: str = Field(default="", description="Catalog identifier")
    name: str = Field(default="", description="Display name")
    price: float = Field(default=0.0, description="Numeric price used for totals")
    display_price: str = Field(
        default="",
        alias="displayPrice",
        description="Formatted price as shown in the catalog",
    )
    category: str = Field(default="")
    description: Optional[str] = Field(default=None)
    image: Optional[str] = Field(default=None)

    model_config = ConfigDict(frozen=True, populate_by_name=True)


# A cart entry is a product occurrence; quantity is the number of repeats.
CartItem = Product


def cart_total(items: Iterable[Product]) -> float:
    """Sum of item prices."""
    return sum((item.price for item in items), 0.0)


# =============================================================================
# Checkout
# =============================================================================

class DeliveryDetails(BaseModel):
    """Shipping form snapshot captured at checkout."""
    full_name: str = Field(default="", alias="fullName")
    email: str = Field(default="")
    phone: str = Field(default="")
    address: str = Field(default="")
    city: str = Field(default="")
    postal_code: str = Field(default="", alias="zip")

    model_config = ConfigDict(frozen=True, populate_by_name=True)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _null_as_empty(value):
    return [] if value is None else value


class Order(BaseModel):
    """
    A completed purchase.

    Frozen: items, total and delivery are fixed at creation. A status change
    produces a new record via with_status().
    """
    id: str = Field(default="", description="Unique within the owning account's history")
    created_at: datetime = Field(default_factory=utc_now, alias="date")
    items: list[Product] = Field(default_factory=list)
    total: float = Field(default=0.0)
    status: OrderStatus = Field(default=OrderStatus.PROCESSING)
    delivery: Optional[DeliveryDetails] = Field(default=None)

    model_config = ConfigDict(frozen=True, use_enum_values=True, populate_by_name=True)

    @field_validator("items", mode="before")
    @classmethod
    def null_items_as_empty(cls, value):
        return _null_as_empty(value)

    def with_status(self, status: OrderStatus) -> "Order":
        return self.model_copy(update={"status": OrderStatus(status).value})

    @property
    def item_count(self) -> int:
        return len(self.items)


# =============================================================================
# Account
# =============================================================================

class User(BaseModel):
    """
    Full account record.

    The email is the Directory key. The password field holds the credential
    used by the authenticator and plays no part in cart or order logic.
    """
    name: str = Field(default="")
    email: str = Field(default="", description="Directory key, casing preserved")
    password: Optional[str] = Field(default=None, description="Credential hash")
    cart: list[Product] = Field(default_factory=list, description="Persisted account cart")
    orders: list[Order] = Field(default_factory=list, description="Append-only order history")

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("cart", "orders", mode="before")
    @classmethod
    def null_lists_as_empty(cls, value):
        # the browser client wrote null for an account that never had a cart
        return _null_as_empty(value)

    def with_cart(self, items: Iterable[Product]) -> "User":
        """Copy of this account with a replaced cart."""
        return self.model_copy(update={"cart": list(items)})

    def order_ids(self) -> set[str]:
        return {order.id for order in self.orders}
