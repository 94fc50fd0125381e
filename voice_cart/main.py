"""
FastAPI Application Entry Point

Voice Cart Service - Hybrid Architecture
Supports both Mock services (development) and Real backends (production).

Each endpoint is one voice agent function. Bodies carry the call metadata
and the function arguments; responses are wrapped in {"result": {...}} so
the agent can read `success` and `message` directly.

Endpoints:
    - POST /cart/add-item
    - POST /cart/remove-item
    - POST /cart/summary
    - POST /cart/upsell
    - POST /cart/add-modifiers
    - POST /cart/remove-modifiers
    - POST /checkout/payment-link
    - GET /health

Author: Khalil Bannouri
Version: 1.0.0
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from voice_cart.core.config import get_settings, setup_logging
from voice_cart.core.errors import CartError
from voice_cart.database import dispose_engine, init_db
from voice_cart.schemas import (
    AddItemRequest,
    CallInfo,
    CheckoutRequest,
    FunctionCall,
    HealthResponse,
    ModifierRequest,
    RemoveItemRequest,
)
from voice_cart.services import (
    get_cart_engine,
    get_cart_store,
    get_checkout_service,
    get_location_directory,
    get_menu_catalog,
    get_payment_link_service,
)
from voice_cart.services.cart.engine import CartEngine
from voice_cart.services.cart.checkout import CheckoutService
from voice_cart.services.cart.models import CartLineItem, RestaurantKey
from voice_cart.services.cart_store.redis_store import RedisCartStore
from voice_cart.services.locations.base import BaseLocationDirectory

# Initialize configuration and logging
settings = get_settings()
setup_logging()
logger = logging.getLogger(__name__)


# =============================================================================
# APPLICATION LIFECYCLE
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application startup and shutdown events."""
    logger.info("=" * 60)
    logger.info(f"🚀 Starting {settings.app_name}")
    logger.info(f"   Version: {settings.app_version}")
    logger.info(f"   Environment: {settings.env_mode.value}")
    logger.info(f"   Debug: {settings.debug}")
    logger.info("=" * 60)

    if settings.use_real_services:
        await init_db()
        logger.info("✅ Database initialized")

        missing = settings.validate_production_config()
        if missing:
            logger.warning(f"⚠️ Missing production config: {missing}")

    logger.info(f"✅ Cart Store: {get_cart_store().provider_name}")
    logger.info(f"✅ Menu Catalog: {get_menu_catalog().provider_name}")
    logger.info(f"✅ Locations: {get_location_directory().provider_name}")
    logger.info(f"✅ Payment Links: {get_payment_link_service().provider_name}")
    logger.info("✅ Application ready!")

    yield

    logger.info("Shutting down...")
    store = get_cart_store()
    if isinstance(store, RedisCartStore):
        await store.close()
    if settings.use_real_services:
        await dispose_engine()
    logger.info("✅ Cleanup complete")


# =============================================================================
# APPLICATION INSTANCE
# =============================================================================

app = FastAPI(
    title=settings.app_name,
    description=(
        "Session cart backend for AI voice ordering agents. "
        "Supports in-memory services for development and Redis/PostgreSQL/Stripe for production."
    ),
    version=settings.app_version,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def ok(message: str, **fields: Any) -> dict[str, Any]:
    return {"result": {"success": True, "message": message, **fields}}


def line_item_payload(item: CartLineItem) -> dict[str, Any]:
    """Agent-facing view of one cart line (amounts in dollars)."""
    return {
        "itemName": item.item_name,
        "variationId": item.variation_id,
        "quantity": item.quantity,
        "unitPrice": float(item.unit_price_dollars),
        "lineTotal": float(item.line_total_dollars),
        "currency": item.currency,
        "specialInstructions": item.special_instructions,
        "modifiers": [
            {
                "category": m.category,
                "name": m.option_name,
                "price": float(m.price_dollars),
            }
            for m in item.modifiers
        ],
    }


async def resolve_restaurant(
    call: CallInfo,
    directory: BaseLocationDirectory,
) -> RestaurantKey:
    """Map the dialled number to a location; web calls have no to_number."""
    number = call.to_number or settings.default_restaurant_phone
    return await directory.resolve(number)


# =============================================================================
# ROOT & HEALTH ENDPOINTS
# =============================================================================

@app.get("/", tags=["Root"])
async def root() -> dict[str, str]:
    """API root with navigation links."""
    return {
        "message": f"Welcome to {settings.app_name}",
        "version": settings.app_version,
        "environment": settings.env_mode.value,
        "documentation": "/docs",
        "health": "/health",
    }


@app.get(
    "/health",
    response_model=HealthResponse,
    tags=["Health"],
    summary="System Health Check",
)
async def health_check() -> HealthResponse:
    """Verify all backing services are reachable."""
    services = {
        "cart_store": get_cart_store(),
        "menu_catalog": get_menu_catalog(),
        "locations": get_location_directory(),
        "payments": get_payment_link_service(),
    }
    checks = {name: await service.health_check() for name, service in services.items()}
    status = {name: "healthy" if up else "unhealthy" for name, up in checks.items()}

    return HealthResponse(
        status="operational" if all(checks.values()) else "degraded",
        environment=settings.env_mode.value,
        providers={name: service.provider_name for name, service in services.items()},
        timestamp=datetime.now(),
        **status,
    )


# =============================================================================
# CART ENDPOINTS
# =============================================================================

@app.post("/cart/add-item", tags=["Cart"], summary="Add Item To Cart")
async def add_item(
    body: AddItemRequest,
    engine: CartEngine = Depends(get_cart_engine),
    directory: BaseLocationDirectory = Depends(get_location_directory),
) -> dict[str, Any]:
    restaurant = await resolve_restaurant(body.call, directory)
    args = body.args

    result = await engine.add_item(
        body.call.call_id,
        restaurant,
        args.item_name,
        quantity=args.quantity,
        special_instructions=args.special_instructions or "",
        first_piece_spice=args.first_item_spice_level,
        second_piece_spice=args.second_item_spice_level,
    )

    extra: dict[str, Any] = {}
    if result.skipped_modifiers:
        extra["skippedModifiers"] = result.skipped_modifiers

    return ok(
        result.message,
        cartItem=line_item_payload(result.line_item),
        merged=result.merged,
        **extra,
    )


@app.post("/cart/remove-item", tags=["Cart"], summary="Remove Item From Cart")
async def remove_item(
    body: RemoveItemRequest,
    engine: CartEngine = Depends(get_cart_engine),
) -> dict[str, Any]:
    result = await engine.remove_item(
        body.call.call_id,
        body.args.item_name,
        quantity_to_remove=body.args.quantity_to_remove,
    )
    return ok(
        result.message,
        itemName=result.item_name,
        removedQuantity=result.removed_quantity,
        remainingQuantity=result.remaining_quantity,
    )


@app.post("/cart/summary", tags=["Cart"], summary="Spoken Cart Summary")
async def cart_summary(
    body: FunctionCall,
    engine: CartEngine = Depends(get_cart_engine),
) -> dict[str, Any]:
    summary = await engine.summarize(body.call.call_id)
    return ok(
        summary.speech_summary,
        subtotal=float(summary.subtotal_dollars),
        itemCount=summary.item_count,
        speechSummary=summary.speech_summary,
        items=[line_item_payload(item) for item in summary.items],
    )


@app.post("/cart/upsell", tags=["Cart"], summary="Side/Dessert Upsell Line")
async def upsell(
    body: FunctionCall,
    engine: CartEngine = Depends(get_cart_engine),
) -> dict[str, Any]:
    suggestion = await engine.upsell_suggestions(body.call.call_id)
    return ok(suggestion, suggestion=suggestion)


@app.post("/cart/add-modifiers", tags=["Modifiers"], summary="Add Modifiers To Cart Item")
async def add_modifiers(
    body: ModifierRequest,
    engine: CartEngine = Depends(get_cart_engine),
    directory: BaseLocationDirectory = Depends(get_location_directory),
) -> dict[str, Any]:
    restaurant = await resolve_restaurant(body.call, directory)
    result = await engine.add_modifiers(
        body.call.call_id,
        restaurant,
        body.args.item_name,
        body.args.first_sandwich_mods,
        body.args.second_sandwich_mods,
    )
    return ok(
        result.message,
        cartItem=line_item_payload(result.line_item),
        addedModifiers=[m.option_name for m in result.added],
        skippedModifiers=result.skipped,
        failedModifiers=result.failed,
    )


@app.post("/cart/remove-modifiers", tags=["Modifiers"], summary="Remove Modifiers From Cart Item")
async def remove_modifiers(
    body: ModifierRequest,
    engine: CartEngine = Depends(get_cart_engine),
) -> dict[str, Any]:
    result = await engine.remove_modifiers(
        body.call.call_id,
        body.args.item_name,
        body.args.first_sandwich_mods,
        body.args.second_sandwich_mods,
    )
    return ok(
        result.message,
        cartItem=line_item_payload(result.line_item),
        removedModifiers=[m.option_name for m in result.removed],
        failedModifiers=result.failed,
    )


# =============================================================================
# CHECKOUT ENDPOINTS
# =============================================================================

@app.post("/checkout/payment-link", tags=["Checkout"], summary="Create Payment Link")
async def create_payment_link(
    body: CheckoutRequest,
    checkout: CheckoutService = Depends(get_checkout_service),
    directory: BaseLocationDirectory = Depends(get_location_directory),
) -> dict[str, Any]:
    restaurant = await resolve_restaurant(body.call, directory)
    result = await checkout.create_payment_link(
        body.call.call_id,
        restaurant,
        customer_name=body.args.customer_name,
        description=body.args.description,
    )
    return ok(
        "Payment link created",
        paymentLink=result.payment_link,
        lineItems=result.line_items,
        subtotalCents=result.subtotal_cents,
        itemCount=result.item_count,
    )


# =============================================================================
# ERROR HANDLERS
# =============================================================================

@app.exception_handler(CartError)
async def cart_error_handler(request: Request, exc: CartError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{request.url.path} failed: {exc.message} {exc.details}")
    else:
        logger.info(f"{request.url.path} rejected ({exc.status_code}): {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"result": exc.to_dict()})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        {"field": ".".join(str(part) for part in err.get("loc", ())), "error": err.get("msg", "")}
        for err in exc.errors()
    ]
    logger.info(f"{request.url.path} invalid request: {errors}")
    return JSONResponse(
        status_code=400,
        content={"result": {"success": False, "message": "Invalid request", "errors": errors}},
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all exception handler."""
    logger.exception(f"Unhandled exception: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "result": {
                "success": False,
                "message": str(exc) if settings.debug else "An unexpected error occurred",
            }
        },
    )

