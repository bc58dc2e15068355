"""
FastAPI surface for the storefront engine.

One process serves one shopper device: the app holds a single Storefront,
started on first use, exactly as a browser tab would hold its state.

Run with:
    uv run uvicorn api.main:app --reload

Then visit http://localhost:8000/docs for interactive API documentation.
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, Optional

from fastapi import Depends, FastAPI, HTTPException
from pydantic import BaseModel, Field

from storefront.config import get_settings
from storefront.engine import Storefront
from storefront.errors import AuthenticationError, RegistrationError
from storefront.event_bus import get_event_bus
from storefront.models import DeliveryDetails, Order, Product, User

logging.basicConfig(
    level=get_settings().log_level,
    format="%(asctime)s | %(name)-24s | %(levelname)-5s | %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger("storefront_api")


# Request / response models
class ProductRequest(Product):
    """Product posted by the UI. Stored records are read as written, new ones are checked."""
    price: float = Field(default=0.0, ge=0)


class RegisterRequest(BaseModel):
    name: str
    email: str
    password: str


class LoginRequest(BaseModel):
    email: str
    password: str


class AccountView(BaseModel):
    """Account as shown to the UI (no credential)."""
    name: str
    email: str
    order_count: int


class StateView(BaseModel):
    """Everything the UI renders from the engine."""
    user: Optional[AccountView]
    cart: list[Product]
    cart_total: float
    orders: list[Order]


class CheckoutResponse(BaseModel):
    order: Optional[Order]


# Module-level engine (one device per process)
_storefront: Optional[Storefront] = None


def get_storefront() -> Storefront:
    """Get the started storefront instance."""
    global _storefront
    if _storefront is None:
        _storefront = Storefront(event_bus=get_event_bus()).start()
    return _storefront


def reset_storefront(storefront: Optional[Storefront] = None) -> None:
    """Replace the engine (for testing)."""
    global _storefront
    _storefront = storefront


def _account_view(user: Optional[User]) -> Optional[AccountView]:
    if user is None:
        return None
    return AccountView(name=user.name, email=user.email, order_count=len(user.orders))


def _state(shop: Storefront) -> StateView:
    return StateView(
        user=_account_view(shop.current_user),
        cart=shop.cart,
        cart_total=shop.cart_total,
        orders=shop.orders,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown."""
    shop = get_storefront()
    logger.info(f"Storefront API started ({'signed in' if shop.is_authenticated else 'guest'})")
    yield
    logger.info("Shutting down")


app = FastAPI(
    title="Storefront State API",
    description="""
    Shopper identity, cart and order history persisted in a key/value store.

    - `/cart/*` - live cart (account cart when signed in, guest cart otherwise)
    - `/auth/*` - register, sign in (merges the guest cart), sign out
    - `/checkout` - place an order for the live cart
    - `/diagnostics` - storage corruption reports
    """,
    version="1.0.0",
    lifespan=lifespan,
)


# =============================================================================
# Health / State
# =============================================================================

@app.get("/health", tags=["Health"])
def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "service": "storefront-state"}


@app.get("/state", response_model=StateView, tags=["State"])
def get_state(shop: Storefront = Depends(get_storefront)):
    return _state(shop)


# =============================================================================
# Cart
# =============================================================================

@app.post("/cart/items", response_model=StateView, tags=["Cart"])
def add_item(product: ProductRequest, shop: Storefront = Depends(get_storefront)):
    """Append a product to the live cart."""
    shop.add_to_cart(Product.model_validate(product.model_dump()))
    return _state(shop)


@app.delete("/cart/items/{product_id}", response_model=StateView, tags=["Cart"])
def remove_item(product_id: str, shop: Storefront = Depends(get_storefront)):
    """Remove every cart entry with this product id."""
    shop.remove_from_cart(product_id)
    return _state(shop)


# =============================================================================
# Auth
# =============================================================================

@app.post("/auth/register", response_model=StateView, tags=["Auth"])
def register(request: RegisterRequest, shop: Storefront = Depends(get_storefront)):
    try:
        shop.register(request.name, request.email, request.password)
    except RegistrationError as e:
        raise HTTPException(status_code=409, detail=e.message)
    return _state(shop)


@app.post("/auth/login", response_model=StateView, tags=["Auth"])
def login(request: LoginRequest, shop: Storefront = Depends(get_storefront)):
    """Sign in. The current guest cart is merged into the account cart."""
    try:
        shop.sign_in(request.email, request.password)
    except AuthenticationError as e:
        raise HTTPException(status_code=401, detail=e.message)
    return _state(shop)


@app.post("/auth/logout", response_model=StateView, tags=["Auth"])
def logout(shop: Storefront = Depends(get_storefront)):
    shop.logout()
    return _state(shop)


# =============================================================================
# Orders
# =============================================================================

@app.post("/checkout", response_model=CheckoutResponse, tags=["Orders"])
def checkout(delivery: DeliveryDetails, shop: Storefront = Depends(get_storefront)):
    """
    Place an order for the live cart.

    An empty cart is not an error: the response carries no order.
    """
    return CheckoutResponse(order=shop.checkout(delivery))


@app.get("/orders", response_model=list[Order], tags=["Orders"])
def get_orders(shop: Storefront = Depends(get_storefront)):
    """Order history of the signed-in account (empty for guests)."""
    return shop.orders


@app.get("/diagnostics", tags=["Diagnostics"])
def get_diagnostics(shop: Storefront = Depends(get_storefront)) -> list[dict[str, Any]]:
    return [
        {"event_type": e.event_type, "source": e.source, "timestamp": e.timestamp.isoformat(), **e.payload}
        for e in shop.diagnostics
    ]
