"""
The storefront facade: the single surface a UI talks to.

It holds the live state (active account, live cart) and routes every mutation
to the right repository:

    signed in  -> Repositories.save_account (session + directory)
    guest      -> GuestCartStore

Design decisions:
- Single-threaded. Every operation finishes its writes before returning.
- start() runs the self-healing pass once. Every operation and projection
  calls it first, so nothing reads or writes live state before reconciliation
- Projections return copies, so a caller cannot mutate live state by accident
- Several processes sharing the same storage are not coordinated (last write
  wins per key)
"""

import logging
from typing import Optional

from storefront.config import Settings, get_settings
from storefront.event_bus import Event, EventBus
from storefront.events import EventTypes, cart_updated
from storefront.models import CartItem, DeliveryDetails, Order, Product, User, cart_total
from storefront.repositories import Repositories
from storefront.services import (
    Authenticator,
    CartSynchronizer,
    OrderProcessor,
    SessionResolver,
)
from storefront.storage import KeyValueStorage, create_storage

logger = logging.getLogger("storefront")


class Storefront:
    """
    Shopper state engine.

    Example:
        shop = Storefront(InMemoryStorage())
        shop.start()
        shop.add_to_cart(product)
        shop.sign_in("alice@example.com", "secret")
        order = shop.checkout(delivery)
    """

    def __init__(
        self,
        storage: Optional[KeyValueStorage] = None,
        settings: Optional[Settings] = None,
        event_bus: Optional[EventBus] = None,
        order_processor: Optional[OrderProcessor] = None,
    ):
        self.settings = settings or get_settings()
        self.storage = storage if storage is not None else create_storage(self.settings)
        self.event_bus = event_bus or EventBus()
        self.repositories = Repositories.from_storage(self.storage, self.settings, self.event_bus)

        self.resolver = SessionResolver(self.repositories, self.event_bus)
        self.cart_sync = CartSynchronizer(self.repositories, self.event_bus)
        self.order_processor = order_processor or OrderProcessor(self.repositories, self.event_bus)
        self.authenticator = Authenticator(self.repositories.directory, self.settings.password_iterations)

        self._user: Optional[User] = None
        self._cart: list[CartItem] = []
        self._started = False

    # =========================================================================
    # Startup
    # =========================================================================

    def start(self) -> "Storefront":
        """Reconcile stored state and load the live cart. Runs once."""
        if self._started:
            return self
        resolution = self.resolver.resolve()
        self._user = resolution.user
        self._cart = list(resolution.cart)
        self._started = True
        return self

    # =========================================================================
    # Projections
    # =========================================================================

    @property
    def current_user(self) -> Optional[User]:
        self.start()
        return self._user.model_copy(deep=True) if self._user is not None else None

    @property
    def is_authenticated(self) -> bool:
        self.start()
        return self._user is not None

    @property
    def cart(self) -> list[CartItem]:
        self.start()
        return list(self._cart)

    @property
    def cart_total(self) -> float:
        self.start()
        return cart_total(self._cart)

    @property
    def orders(self) -> list[Order]:
        """Order history of the active account; empty for guests."""
        self.start()
        if self._user is None:
            return []
        return [order.model_copy(deep=True) for order in self._user.orders]

    @property
    def diagnostics(self) -> list[Event]:
        """Storage corruption reports published since this instance was created."""
        return [e for e in self.event_bus.get_event_log() if e.event_type in EventTypes.CORRUPTION]

    # =========================================================================
    # Cart
    # =========================================================================

    def _set_cart(self, items: list[CartItem]) -> None:
        self._cart = items
        if self._user is not None:
            self._user = self._user.with_cart(items)
            self.repositories.save_account(self._user)
        else:
            self.repositories.guest_cart.save(items)
        self.event_bus.publish(cart_updated(
            self._user.email if self._user is not None else None,
            len(items),
            cart_total(items),
        ))

    def add_to_cart(self, product: Product) -> list[CartItem]:
        """Append a product. Adding the same product twice gives two entries."""
        self.start()
        self._set_cart([*self._cart, product])
        return self.cart

    def remove_from_cart(self, product_id: str) -> list[CartItem]:
        """Remove every entry with this product id."""
        self.start()
        remaining = [item for item in self._cart if item.id != product_id]
        if len(remaining) != len(self._cart):
            self._set_cart(remaining)
        return self.cart

    # =========================================================================
    # Session
    # =========================================================================

    def login(self, authenticated: User) -> User:
        """
        Sign in an account the authentication step already accepted.

        The live cart is merged into the account's stored cart. If another
        account is active it is signed out first, so its cart is never merged
        into a different account.
        """
        self.start()
        if self._user is not None:
            self.logout()
        self._user = self.cart_sync.merge_on_login(authenticated, self._cart)
        self._cart = list(self._user.cart)
        return self.current_user

    def sign_in(self, email: str, password: str) -> User:
        """Check credentials, then login(). Raises AuthenticationError."""
        return self.login(self.authenticator.authenticate(email, password))

    def register(self, name: str, email: str, password: str) -> User:
        """Create an account, then login(). Raises RegistrationError."""
        return self.login(self.authenticator.register(name, email, password))

    def logout(self) -> None:
        """Drop the session and empty the live cart. The account cart stays stored."""
        self.start()
        if self._user is None:
            return
        self.cart_sync.logout(self._user)
        self._user = None
        self._cart = []

    # =========================================================================
    # Checkout
    # =========================================================================

    def checkout(self, delivery: DeliveryDetails) -> Optional[Order]:
        """
        Place an order for the live cart.

        Returns:
            The new order, or None when the cart is empty
        """
        self.start()
        result = self.order_processor.checkout(self._user, self._cart, delivery)
        if result is None:
            return None
        if result.user is not None:
            self._user = result.user
        self._cart = []
        return result.order
