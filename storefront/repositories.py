"""
Repositories over the three persisted blobs.

- UserDirectory: email -> full account record. The source of truth for accounts.
- SessionStore: single-slot snapshot of the signed-in account on this device.
- GuestCartStore: the cart of a visitor who is not signed in.

Each repository owns one storage key and decodes through the record codec, so
corruption is handled in exactly one place per blob:

    blob        on corrupt text
    ---------   -----------------------------------------------
    directory   read as empty (lossy; next write replaces it);
                a single unreadable account is skipped and kept
    session     slot cleared, shopper falls back to guest flow
    guest cart  read as empty, blob left in storage

A blob whose bytes are not valid UTF-8 counts as corrupt text.

Design decisions:
- Stateless: every read goes to storage, nothing is cached
- Directory keys keep the casing they were written with; lookups fall back
  to a case-insensitive match
- Repositories.save_account writes Session and Directory together; it is the
  only way a signed-in account is written
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Optional

from storefront.codec import (
    CorruptFormat,
    DecodeResult,
    decode_cart,
    decode_directory,
    decode_user,
    encode_cart,
    encode_directory,
    encode_user,
)
from storefront.config import Settings, get_settings
from storefront.event_bus import EventBus
from storefront.events import EventTypes, storage_corrupted
from storefront.models import CartItem, User
from storefront.storage import KeyValueStorage


class _Repository:
    """Shared plumbing: one storage key plus optional diagnostics."""

    source = "repository"

    def __init__(self, storage: KeyValueStorage, key: str, event_bus: Optional[EventBus] = None):
        self.storage = storage
        self.key = key
        self.event_bus = event_bus

    def _read(self, decode: Callable[[str], DecodeResult]) -> Optional[DecodeResult]:
        """Decode the stored blob; None when the key is absent."""
        try:
            text = self.storage.get_item(self.key)
        except UnicodeDecodeError as e:
            return CorruptFormat(reason=f"blob is not valid UTF-8: {e.reason} at byte {e.start}")
        if text is None:
            return None
        return decode(text)

    def _report_corruption(self, event_type: str, reason: str) -> None:
        if self.event_bus is not None:
            self.event_bus.publish(storage_corrupted(event_type, self.key, reason, self.source))


# =============================================================================
# User Directory
# =============================================================================

directory_logger = logging.getLogger("user_directory")


class UserDirectory(_Repository):
    """Durable mapping of every known account, keyed by email."""

    source = "user-directory"

    def _load(self) -> tuple[dict[str, User], dict[str, Any]]:
        result = self._read(decode_directory)
        if result is None:
            return {}, {}

        if isinstance(result, CorruptFormat):
            directory_logger.error(f"Directory blob '{self.key}' is corrupt, reading as empty: {result.reason}")
            self._report_corruption(EventTypes.DIRECTORY_CORRUPTED, result.reason)
            return {}, {}

        if result.rejected:
            reason = f"unreadable account entries kept as stored: {', '.join(result.rejected)}"
            directory_logger.warning(f"Directory blob '{self.key}': {reason}")
            self._report_corruption(EventTypes.DIRECTORY_CORRUPTED, reason)
        return result.value, result.rejected

    def load(self) -> dict[str, User]:
        """
        Decode the whole directory.

        An absent blob is an empty directory. So is a corrupt one: account
        lookups keep working, and the next persist() overwrites the bad blob.
        A single account entry that cannot be decoded is left out of the
        result but stays in storage.
        """
        users, _ = self._load()
        return users

    def persist(self, users: dict[str, User]) -> None:
        """Replace the directory, keeping any stored entries that could not be decoded."""
        _, rejected = self._load()
        self._write(users, rejected)

    def _write(self, users: dict[str, User], rejected: dict[str, Any]) -> None:
        self.storage.set_item(self.key, encode_directory(users, rejected))

    def lookup(self, email: str) -> Optional[User]:
        """
        Find an account by email.

        Exact key match first. Otherwise the lowercased email is compared with
        every stored key lowercased, and the first key in stored order wins.

        Returns:
            The stored account, or None when no key matches
        """
        users = self.load()
        if email in users:
            return users[email]

        wanted = email.lower()
        for key, user in users.items():
            if key.lower() == wanted:
                directory_logger.debug(f"Case-insensitive match: '{email}' -> '{key}'")
                return user
        return None

    def upsert(self, user: User) -> None:
        """Write the account under user.email exactly as given (no normalization)."""
        users, rejected = self._load()
        users[user.email] = user
        self._write(users, rejected)
        directory_logger.debug(f"Upserted account '{user.email}'")

    def emails(self) -> list[str]:
        return list(self.load())


# =============================================================================
# Session Store
# =============================================================================

session_logger = logging.getLogger("session_store")


class SessionStore(_Repository):
    """Snapshot of the signed-in account, used for auto-login after a reload."""

    source = "session-store"

    def restore(self) -> Optional[User]:
        """
        Read the session snapshot.

        Corrupt text clears the slot and returns None. A snapshot whose account
        is missing from the directory is still returned; repairing that is the
        resolver's job.
        """
        result = self._read(decode_user)
        if result is None:
            return None

        if isinstance(result, CorruptFormat):
            reason = result.reason
        elif not result.value.email:
            reason = "snapshot has no email"
        else:
            return result.value

        session_logger.error(f"Session blob '{self.key}' is corrupt, clearing it: {reason}")
        self.clear()
        self._report_corruption(EventTypes.SESSION_CORRUPTED, reason)
        return None

    def activate(self, user: User) -> None:
        self.storage.set_item(self.key, encode_user(user))

    def clear(self) -> None:
        self.storage.remove_item(self.key)

    def exists(self) -> bool:
        return self.key in self.storage.keys()


# =============================================================================
# Guest Cart Store
# =============================================================================

guest_cart_logger = logging.getLogger("guest_cart")


class GuestCartStore(_Repository):
    """Cart of an anonymous visitor."""

    source = "guest-cart"

    def load(self) -> list[CartItem]:
        """
        Read the guest cart.

        Absent or corrupt data reads as an empty cart. A corrupt blob is left
        where it is so it can still be recovered by hand.
        """
        result = self._read(decode_cart)
        if result is None:
            return []

        if isinstance(result, CorruptFormat):
            guest_cart_logger.warning(f"Guest cart blob '{self.key}' is corrupt, reading as empty: {result.reason}")
            self._report_corruption(EventTypes.GUEST_CART_CORRUPTED, result.reason)
            return []
        return result.value

    def save(self, items: Iterable[CartItem]) -> None:
        self.storage.set_item(self.key, encode_cart(list(items)))

    def clear(self) -> None:
        self.storage.remove_item(self.key)


# =============================================================================
# Wiring
# =============================================================================

@dataclass
class Repositories:
    """The three repositories over one backing store."""
    directory: UserDirectory
    session: SessionStore
    guest_cart: GuestCartStore

    @classmethod
    def from_storage(
        cls,
        storage: KeyValueStorage,
        settings: Optional[Settings] = None,
        event_bus: Optional[EventBus] = None,
    ) -> "Repositories":
        settings = settings or get_settings()
        return cls(
            directory=UserDirectory(storage, settings.users_key, event_bus),
            session=SessionStore(storage, settings.session_key, event_bus),
            guest_cart=GuestCartStore(storage, settings.guest_cart_key, event_bus),
        )

    def save_account(self, user: User) -> None:
        """
        Persist a signed-in account: session snapshot first, then directory.

        Both writes finish before this returns. There is no rollback; if the
        process dies between them the resolver reconciles on next start.
        """
        self.session.activate(user)
        self.directory.upsert(user)
