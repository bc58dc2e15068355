"""
Checkout: turning a live cart into an order.

Signed-in shoppers get the order appended to their history and their cart
emptied, in one account write. Guests get an order object back, but nothing is
stored for them; only their guest cart is cleared.
"""

import logging
import secrets
import string
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Container, Iterable, Optional

from storefront.event_bus import EventBus
from storefront.events import order_placed
from storefront.models import CartItem, DeliveryDetails, Order, OrderStatus, User, cart_total, utc_now
from storefront.repositories import Repositories

logger = logging.getLogger("order_processor")

ORDER_ID_ALPHABET = string.digits + string.ascii_uppercase
ORDER_ID_LENGTH = 9


def generate_order_id(taken: Container[str] = ()) -> str:
    """Random 9-character base-36 id, regenerated while it collides with `taken`."""
    while True:
        candidate = "".join(secrets.choice(ORDER_ID_ALPHABET) for _ in range(ORDER_ID_LENGTH))
        if candidate not in taken:
            return candidate


@dataclass
class CheckoutResult:
    """The order plus the account as persisted (None for guests)."""
    order: Order
    user: Optional[User]

    @property
    def retained(self) -> bool:
        return self.user is not None


class OrderProcessor:
    """
    Builds orders and records them against the owning account.

    Example:
        processor = OrderProcessor(repositories)
        result = processor.checkout(user, cart, delivery)
        if result is None:
            ...  # empty cart, nothing happened
    """

    def __init__(
        self,
        repositories: Repositories,
        event_bus: Optional[EventBus] = None,
        clock: Callable[[], datetime] = utc_now,
        id_factory: Callable[[Container[str]], str] = generate_order_id,
    ):
        self.repositories = repositories
        self.event_bus = event_bus
        self.clock = clock
        self.id_factory = id_factory

    def checkout(
        self,
        user: Optional[User],
        cart: Iterable[CartItem],
        delivery: DeliveryDetails,
    ) -> Optional[CheckoutResult]:
        """
        Place an order for the given cart.

        Args:
            user: Signed-in account, or None for a guest
            cart: The live cart
            delivery: Shipping details from the checkout form

        Returns:
            CheckoutResult, or None when the cart is empty (no state changes)
        """
        items = list(cart)
        if not items:
            logger.info("Checkout with an empty cart ignored")
            return None

        taken = user.order_ids() if user is not None else set()
        order = Order(
            id=self.id_factory(taken),
            created_at=self.clock(),
            items=items,
            total=cart_total(items),
            status=OrderStatus.PROCESSING,
            delivery=delivery,
        )

        if user is not None:
            updated = user.model_copy(update={"orders": [*user.orders, order], "cart": []})
            self.repositories.save_account(updated)
            logger.info(f"Order {order.id} placed by {updated.email}: {order.item_count} item(s), total {order.total}")
        else:
            updated = None
            self.repositories.guest_cart.clear()
            logger.info(f"Guest order {order.id} placed: {order.item_count} item(s), total {order.total} (not retained)")

        if self.event_bus is not None:
            self.event_bus.publish(order_placed(
                order_id=order.id,
                email=user.email if user is not None else None,
                item_count=order.item_count,
                total=order.total,
                retained=updated is not None,
            ))
        return CheckoutResult(order=order, user=updated)
