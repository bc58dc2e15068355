"""
Startup reconciliation of the session snapshot against the directory.

Precedence: directory entry > session snapshot > nothing.

1. No session: the shopper is a guest, the live cart is the guest cart.
2. Session whose email is in the directory: the directory entry wins. Data
   that only lives in the snapshot is dropped and the snapshot is rewritten.
3. Session whose email is NOT in the directory: the snapshot is trusted and
   written back into the directory before being activated. This recovers from
   partial storage loss, at the price of trusting data nothing else vouches for.

A corrupt directory reads as empty, so case 3 also runs when the directory
blob is damaged. That case is reported (DirectoryCorrupted + DirectoryRepaired)
rather than special-cased.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

from storefront.event_bus import EventBus
from storefront.events import directory_repaired, session_restored
from storefront.models import CartItem, User
from storefront.repositories import Repositories

logger = logging.getLogger("session_resolver")


@dataclass
class Resolution:
    """Outcome of the startup pass."""
    user: Optional[User]
    cart: list[CartItem] = field(default_factory=list)
    repaired: bool = False

    @property
    def is_guest(self) -> bool:
        return self.user is None


class SessionResolver:
    """Runs the self-healing pass once per application start."""

    def __init__(self, repositories: Repositories, event_bus: Optional[EventBus] = None):
        self.repositories = repositories
        self.event_bus = event_bus

    def _publish(self, event) -> None:
        if self.event_bus is not None:
            self.event_bus.publish(event)

    def resolve(self) -> Resolution:
        snapshot = self.repositories.session.restore()
        if snapshot is None:
            cart = self.repositories.guest_cart.load()
            logger.info(f"No active session, guest cart has {len(cart)} item(s)")
            return Resolution(user=None, cart=cart)

        user = self.repositories.directory.lookup(snapshot.email)
        repaired = False
        if user is None:
            logger.warning(f"Directory has no entry for '{snapshot.email}', repairing it from the session")
            user = snapshot
            self.repositories.directory.upsert(user)
            repaired = True
            self._publish(directory_repaired(user.email))

        self.repositories.session.activate(user)
        logger.info(f"Session restored for {user.email}")
        self._publish(session_restored(user.email, len(user.cart), repaired))
        return Resolution(user=user, cart=list(user.cart), repaired=repaired)
