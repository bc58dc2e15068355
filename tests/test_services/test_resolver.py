"""
Tests for the startup self-healing pass.
"""

from storefront.config import Settings
from storefront.event_bus import EventBus
from storefront.events import EventTypes
from storefront.models import Product, User
from storefront.repositories import Repositories
from storefront.services.resolver import SessionResolver
from storefront.storage import InMemoryStorage


class TestNoSession:

    def test_guest_cart_becomes_live_cart(self, repositories: Repositories, lamp: Product, rug: Product):
        repositories.guest_cart.save([lamp, rug])

        resolution = SessionResolver(repositories).resolve()

        assert resolution.is_guest
        assert resolution.cart == [lamp, rug]
        assert resolution.repaired is False

    def test_nothing_stored(self, repositories: Repositories):
        resolution = SessionResolver(repositories).resolve()

        assert resolution.user is None
        assert resolution.cart == []

    def test_corrupt_guest_cart(self, storage: InMemoryStorage, settings: Settings, repositories: Repositories):
        storage.set_item(settings.guest_cart_key, "garbage")

        resolution = SessionResolver(repositories).resolve()

        assert resolution.cart == []
        assert storage.get_item(settings.guest_cart_key) == "garbage"


class TestSessionInDirectory:

    def test_directory_entry_wins(self, repositories: Repositories, event_bus: EventBus,
                                  alice: User, vase: Product):
        """Data carried only in the snapshot is discarded."""
        repositories.directory.upsert(alice)
        repositories.session.activate(alice.with_cart([vase]))

        resolution = SessionResolver(repositories, event_bus).resolve()

        assert resolution.user == alice
        assert resolution.cart == alice.cart
        assert resolution.repaired is False
        assert repositories.session.restore() == alice
        assert event_bus.get_event_log(EventTypes.DIRECTORY_REPAIRED) == []

    def test_case_insensitive_match(self, repositories: Repositories, alice: User):
        stored = alice.model_copy(update={"email": "Alice@X.com"})
        repositories.directory.upsert(stored)
        repositories.session.activate(alice)

        resolution = SessionResolver(repositories).resolve()

        assert resolution.user == stored
        assert repositories.directory.emails() == ["Alice@X.com"]

    def test_guest_cart_ignored_when_signed_in(self, repositories: Repositories, alice: User, vase: Product):
        repositories.directory.upsert(alice)
        repositories.session.activate(alice)
        repositories.guest_cart.save([vase])

        resolution = SessionResolver(repositories).resolve()

        assert vase not in resolution.cart


class TestSelfHealing:

    def test_repairs_missing_directory_entry(self, repositories: Repositories, event_bus: EventBus, alice: User):
        """Valid session + empty directory: the snapshot is written back."""
        repositories.session.activate(alice)

        resolution = SessionResolver(repositories, event_bus).resolve()

        assert repositories.directory.lookup("alice@x.com") == alice
        assert resolution.user == alice
        assert resolution.repaired is True

        repaired = event_bus.get_event_log(EventTypes.DIRECTORY_REPAIRED)
        assert len(repaired) == 1
        assert repaired[0].payload["email"] == "alice@x.com"

        restored = event_bus.get_event_log(EventTypes.SESSION_RESTORED)
        assert restored[0].payload["repaired"] is True

    def test_repair_keeps_other_accounts(self, repositories: Repositories, alice: User, bob: User):
        repositories.directory.upsert(bob)
        repositories.session.activate(alice)

        SessionResolver(repositories).resolve()

        assert sorted(repositories.directory.emails()) == ["alice@x.com", "bob@x.com"]

    def test_corrupt_directory_takes_repair_path(self, storage: InMemoryStorage, settings: Settings,
                                                 repositories: Repositories, event_bus: EventBus, alice: User):
        storage.set_item(settings.users_key, "{corrupt")
        repositories.session.activate(alice)

        resolution = SessionResolver(repositories, event_bus).resolve()

        assert resolution.repaired is True
        assert repositories.directory.load() == {alice.email: alice}
        assert len(event_bus.get_event_log(EventTypes.DIRECTORY_CORRUPTED)) >= 1


class TestCorruptSession:

    def test_falls_back_to_guest(self, storage: InMemoryStorage, settings: Settings,
                                 repositories: Repositories, lamp: Product):
        storage.set_item(settings.session_key, "{{{")
        repositories.guest_cart.save([lamp])

        resolution = SessionResolver(repositories).resolve()

        assert resolution.is_guest
        assert resolution.cart == [lamp]
        assert storage.get_item(settings.session_key) is None
