"""
Demonstration scripts for the storefront engine.

Each scenario runs against in-memory storage and simulates page reloads by
building a fresh Storefront over the same storage.
"""

import logging

from storefront.config import Settings
from storefront.engine import Storefront
from storefront.event_bus import EventBus
from storefront.models import DeliveryDetails, Product
from storefront.storage import InMemoryStorage

# Configure logging to see what's happening
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(name)-24s | %(levelname)-5s | %(message)s",
    datefmt="%H:%M:%S",
)

DEMO_SETTINGS = Settings(storage_backend="memory", password_iterations=1_000)

LAMP = Product(id="lamp", name="Desk Lamp", price=40.0, display_price="40 $", category="lighting")
RUG = Product(id="rug", name="Wool Rug", price=120.0, display_price="120 $", category="textiles")
VASE = Product(id="vase", name="Clay Vase", price=25.5, display_price="25.5 $", category="decor")

DELIVERY = DeliveryDetails(
    full_name="Alice Doe",
    email="alice@example.com",
    phone="+1-555-0100",
    address="1 Main St",
    city="Springfield",
    postal_code="12345",
)


def _reload(storage: InMemoryStorage) -> Storefront:
    """A new page load over the same storage."""
    return Storefront(storage, settings=DEMO_SETTINGS, event_bus=EventBus()).start()


def _banner(title: str) -> None:
    print("\n" + "=" * 70)
    print(title)
    print("=" * 70 + "\n")


def run_login_merge_demo() -> None:
    """Guest cart + stored account cart are concatenated on sign-in."""
    _banner("DEMO: Guest cart merged into account cart on sign-in")
    storage = InMemoryStorage()

    shop = _reload(storage)
    shop.register("Alice", "alice@example.com", "secret")
    shop.add_to_cart(LAMP)
    shop.add_to_cart(RUG)
    shop.logout()

    shop = _reload(storage)
    shop.add_to_cart(RUG)
    shop.add_to_cart(VASE)
    print(f"Guest cart before sign-in: {[item.id for item in shop.cart]}")

    shop.sign_in("ALICE@example.com", "secret")
    print(f"Cart after sign-in:        {[item.id for item in shop.cart]}")


def run_self_healing_demo() -> None:
    """The directory is wiped but the session survives; startup repairs it."""
    _banner("DEMO: Directory rebuilt from the session snapshot")
    storage = InMemoryStorage()

    shop = _reload(storage)
    shop.register("Alice", "alice@example.com", "secret")
    shop.add_to_cart(VASE)

    storage.remove_item(DEMO_SETTINGS.users_key)
    print("Directory blob removed, session left in place.\n")

    shop = _reload(storage)
    print(f"\nSigned in as: {shop.current_user.email}")
    print(f"Directory now holds: {shop.repositories.directory.emails()}")


def run_checkout_demo() -> None:
    """Signed-in checkout keeps the order; guest checkout does not."""
    _banner("DEMO: Checkout")
    storage = InMemoryStorage()

    shop = _reload(storage)
    shop.register("Alice", "alice@example.com", "secret")
    shop.add_to_cart(LAMP)
    shop.add_to_cart(VASE)
    order = shop.checkout(DELIVERY)
    print(f"Order {order.id}: {order.item_count} item(s), total {order.total}")
    print(f"History after reload: {[o.id for o in _reload(storage).orders]}")

    shop.logout()
    shop.add_to_cart(RUG)
    guest_order = shop.checkout(DELIVERY)
    print(f"Guest order {guest_order.id} placed, retained nowhere")
    print(f"Empty-cart checkout returns: {shop.checkout(DELIVERY)}")


def run_all_demos() -> None:
    run_login_merge_demo()
    run_self_healing_demo()
    run_checkout_demo()


if __name__ == "__main__":
    run_all_demos()
