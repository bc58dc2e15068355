"""
Shared pytest fixtures for the storefront engine tests.

Every test gets fresh in-memory storage, so no test sees another's writes.
"""

import pytest

from storefront.config import Settings
from storefront.engine import Storefront
from storefront.event_bus import EventBus
from storefront.models import DeliveryDetails, Product, User
from storefront.repositories import Repositories
from storefront.storage import InMemoryStorage


@pytest.fixture
def settings() -> Settings:
    """In-memory backend and cheap password hashing."""
    return Settings(storage_backend="memory", password_iterations=1_000)


@pytest.fixture
def storage() -> InMemoryStorage:
    return InMemoryStorage()


@pytest.fixture
def event_bus() -> EventBus:
    return EventBus()


@pytest.fixture
def repositories(storage: InMemoryStorage, settings: Settings, event_bus: EventBus) -> Repositories:
    return Repositories.from_storage(storage, settings, event_bus)


@pytest.fixture
def make_storefront(storage: InMemoryStorage, settings: Settings):
    """
    Build a started Storefront over the shared storage.

    Calling it twice simulates a page reload.
    """
    def _make() -> Storefront:
        return Storefront(storage, settings=settings, event_bus=EventBus()).start()
    return _make


# =============================================================================
# Product Fixtures
# =============================================================================

@pytest.fixture
def lamp() -> Product:
    return Product(id="p1", name="Desk Lamp", price=10.0, display_price="10 $", category="lighting")


@pytest.fixture
def rug() -> Product:
    return Product(
        id="p2",
        name="Wool Rug",
        price=25.5,
        display_price="25.5 $",
        category="textiles",
        description="Hand woven",
    )


@pytest.fixture
def vase() -> Product:
    return Product(id="p3", name="Clay Vase", price=7.25, display_price="7.25 $", category="decor", image="vase.png")


# =============================================================================
# Account Fixtures
# =============================================================================

@pytest.fixture
def alice(lamp: Product, rug: Product) -> User:
    """Alice has a stored cart of [p1, p2] and no orders."""
    return User(name="Alice", email="alice@x.com", password="secret", cart=[lamp, rug])


@pytest.fixture
def bob(vase: Product) -> User:
    """Bob has one item in his cart."""
    return User(name="Bob", email="bob@x.com", password="hunter2", cart=[vase])


@pytest.fixture
def delivery() -> DeliveryDetails:
    return DeliveryDetails(
        full_name="Alice Doe",
        email="alice@x.com",
        phone="+1-555-0100",
        address="1 Main St",
        city="Springfield",
        postal_code="12345",
    )
