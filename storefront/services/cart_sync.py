"""
Cart synchronization at login/logout boundaries.

Login merges carts by concatenation: stored account cart first, then the
pre-login live cart. There is no deduplication; a product present in both
appears twice afterwards, which is how quantity is expressed.

Logout only drops the session. The account's cart stays in the directory
exactly as last written, so it comes back on the next login.
"""

import logging
from typing import Iterable, Optional

from storefront.event_bus import EventBus
from storefront.events import user_logged_in, user_logged_out
from storefront.models import CartItem, User
from storefront.repositories import Repositories

logger = logging.getLogger("cart_sync")


class CartSynchronizer:
    """Merges guest and account carts when a shopper signs in or out."""

    def __init__(self, repositories: Repositories, event_bus: Optional[EventBus] = None):
        self.repositories = repositories
        self.event_bus = event_bus

    def merge_on_login(self, authenticated: User, live_cart: Iterable[CartItem]) -> User:
        """
        Merge the live cart into the account being signed in.

        Args:
            authenticated: Account produced by the authentication step. The
                directory entry for the same email wins when one exists.
            live_cart: Cart shown to the shopper right before login

        Returns:
            The account as persisted, carrying the merged cart
        """
        stored = self.repositories.directory.lookup(authenticated.email)
        account = stored if stored is not None else authenticated

        carried = list(live_cart)
        merged = account.with_cart([*account.cart, *carried])

        self.repositories.save_account(merged)
        self.repositories.guest_cart.clear()

        logger.info(
            f"{merged.email} signed in: {len(account.cart)} stored + {len(carried)} carried "
            f"= {len(merged.cart)} item(s)"
        )
        if self.event_bus is not None:
            self.event_bus.publish(user_logged_in(merged.email, len(account.cart), len(carried)))
        return merged

    def logout(self, user: User) -> None:
        """Drop the session. The directory keeps the account and its cart."""
        self.repositories.session.clear()
        logger.info(f"{user.email} signed out")
        if self.event_bus is not None:
            self.event_bus.publish(user_logged_out(user.email))
