"""
Diagnostic and lifecycle events published by the engine.

Events are named in past tense and carry everything a listener needs, so a
UI can render them without reading storage back.
"""

from typing import Optional

from storefront.event_bus import Event


class EventTypes:
    """Constants for event type names."""
    # Storage health
    SESSION_CORRUPTED = "SessionCorrupted"
    DIRECTORY_CORRUPTED = "DirectoryCorrupted"
    GUEST_CART_CORRUPTED = "GuestCartCorrupted"
    DIRECTORY_REPAIRED = "DirectoryRepaired"

    # Session lifecycle
    SESSION_RESTORED = "SessionRestored"
    USER_LOGGED_IN = "UserLoggedIn"
    USER_LOGGED_OUT = "UserLoggedOut"

    # Cart / orders
    CART_UPDATED = "CartUpdated"
    ORDER_PLACED = "OrderPlaced"

    CORRUPTION = (SESSION_CORRUPTED, DIRECTORY_CORRUPTED, GUEST_CART_CORRUPTED)


# =============================================================================
# Storage health
# =============================================================================

def storage_corrupted(event_type: str, key: str, reason: str, source: str) -> Event:
    """
    A stored blob failed to decode.

    `cleared` tells the listener whether the blob was dropped (session) or
    left in place for manual recovery (guest cart, directory).
    """
    return Event(
        event_type=event_type,
        source=source,
        payload={
            "key": key,
            "reason": reason,
            "cleared": event_type == EventTypes.SESSION_CORRUPTED,
        },
    )


def directory_repaired(email: str, source: str = "session-resolver") -> Event:
    """The directory had no entry for an active session; the snapshot was written back."""
    return Event(
        event_type=EventTypes.DIRECTORY_REPAIRED,
        source=source,
        payload={"email": email},
    )


# =============================================================================
# Session lifecycle
# =============================================================================

def session_restored(email: str, cart_size: int, repaired: bool, source: str = "session-resolver") -> Event:
    return Event(
        event_type=EventTypes.SESSION_RESTORED,
        source=source,
        payload={"email": email, "cart_size": cart_size, "repaired": repaired},
    )


def user_logged_in(email: str, account_items: int, carried_items: int, source: str = "cart-sync") -> Event:
    """
    Published after the login merge.

    account_items came from the stored account cart, carried_items from the
    pre-login live cart.
    """
    return Event(
        event_type=EventTypes.USER_LOGGED_IN,
        source=source,
        payload={
            "email": email,
            "account_items": account_items,
            "carried_items": carried_items,
            "cart_size": account_items + carried_items,
        },
    )


def user_logged_out(email: str, source: str = "cart-sync") -> Event:
    return Event(
        event_type=EventTypes.USER_LOGGED_OUT,
        source=source,
        payload={"email": email},
    )


# =============================================================================
# Cart / orders
# =============================================================================

def cart_updated(email: Optional[str], cart_size: int, total: float, source: str = "storefront") -> Event:
    """email is None for the guest cart."""
    return Event(
        event_type=EventTypes.CART_UPDATED,
        source=source,
        payload={"email": email, "cart_size": cart_size, "total": total},
    )


def order_placed(
    order_id: str,
    email: Optional[str],
    item_count: int,
    total: float,
    retained: bool,
    source: str = "order-processor",
) -> Event:
    """
    A checkout produced an order.

    retained is False for guest orders, which are never stored.
    """
    return Event(
        event_type=EventTypes.ORDER_PLACED,
        source=source,
        payload={
            "order_id": order_id,
            "email": email,
            "item_count": item_count,
            "total": total,
            "retained": retained,
        },
    )
