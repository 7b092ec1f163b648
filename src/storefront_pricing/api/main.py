from typing import Dict, List, Optional

from fastapi import Depends, FastAPI, HTTPException
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from ..config.logging_config import setup_logging
from ..config.settings import Settings, get_settings
from ..services.cart_session import CartSession
from .coupons_api import router as coupons_router
from .rentals_api import router as rentals_router
from .error_handlers import register_error_handlers
from .state import AppState, build_state, get_state


class CalcRequest(BaseModel):
    items: Dict[str, int]
    coupon_code: Optional[str] = None


class ApplyCouponRequest(BaseModel):
    code: str
    items: Dict[str, int] = Field(default_factory=dict)


class RentalQuoteRequest(BaseModel):
    product_id: str
    plan_id: str
    coupon_code: Optional[str] = None


class RentalCheckoutRequest(RentalQuoteRequest):
    user_id: str
    shipping: Dict[str, str] = Field(default_factory=dict)


class CheckoutRequest(BaseModel):
    user_id: str
    items: Dict[str, int]
    coupon_code: Optional[str] = None
    payment_method: str = "cod"
    shipping: Dict[str, str] = Field(default_factory=dict)


def _build_session(state: AppState, items: Dict[str, int]) -> tuple[CartSession, List[str]]:
    """Fill a throwaway cart session from {product_id: qty}."""
    lines, warnings = state.catalog.resolve(items)
    session = CartSession(state.engine, state.coupon_service)
    for line in lines:
        session.add_item(line)
    return session, warnings


def _rental_inputs(state: AppState, product_id: str, plan_id: str):
    """Resolve the product and plan for a rental request, 404 when unknown."""
    if product_id not in state.catalog:
        raise HTTPException(status_code=404, detail=f"Product '{product_id}' not found")
    plan = state.rental_plan_service.get_plan(plan_id)
    if plan is None:
        raise HTTPException(status_code=404, detail=f"Rental plan '{plan_id}' not found")
    return state.catalog.get(product_id), plan


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    setup_logging(settings.log_level, settings.log_format)

    app = FastAPI(
        title="Storefront Pricing API",
        description="Cart, checkout and rental pricing with coupon handling",
        version="1.0.0",
    )
    app.state.storefront = build_state(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)
    app.include_router(coupons_router)
    app.include_router(rentals_router)

    @app.get("/")
    async def root():
        return {"status": "online", "message": "Storefront Pricing API Active"}

    @app.post("/calculate")
    async def calculate(req: CalcRequest, state: AppState = Depends(get_state)):
        session, warnings = _build_session(state, req.items)

        coupon_message = None
        if req.coupon_code:
            outcome = session.apply_coupon(req.coupon_code)
            coupon_message = outcome.message

        result = session.totals()
        for warning in warnings:
            result.add_warning(warning)

        return {
            **result.to_display_dict(),
            "coupon_applied": session.coupon is not None,
            "coupon_message": coupon_message,
            "lines": [item.to_dict() for item in session.items],
            "warnings": result.warnings,
            "trace": jsonable_encoder(result.trace),
        }

    @app.post("/coupons/apply")
    async def apply_coupon(req: ApplyCouponRequest, state: AppState = Depends(get_state)):
        session, _ = _build_session(state, req.items)
        outcome = session.apply_coupon(req.code)
        result = session.totals()
        return {
            "valid": outcome.applied,
            "message": outcome.message,
            "error_code": outcome.error_code,
            "discount": round(result.discount, 2),
            "new_total": round(result.total, 2),
        }

    @app.get("/rentals/plans")
    async def list_rental_plans(state: AppState = Depends(get_state)):
        return jsonable_encoder(state.rental_plan_service.list_plans())

    @app.post("/rentals/quote")
    async def quote_rental(req: RentalQuoteRequest, state: AppState = Depends(get_state)):
        product, plan = _rental_inputs(state, req.product_id, req.plan_id)

        coupon_message = None
        outcome = state.rental_checkout.apply_coupon(req.coupon_code, product)
        if req.coupon_code and not outcome.applied:
            coupon_message = outcome.message

        quote = state.engine.quote_rental(product, plan, outcome.coupon)
        return {
            **quote.to_display_dict(),
            "duration_days": plan.duration_days,
            "coupon_message": coupon_message,
        }

    @app.post("/rentals/checkout")
    async def rental_checkout(req: RentalCheckoutRequest, state: AppState = Depends(get_state)):
        product, plan = _rental_inputs(state, req.product_id, req.plan_id)

        order, outcome = state.rental_checkout.checkout(
            product, plan, req.user_id, req.shipping, coupon_code=req.coupon_code,
        )
        coupon_message = outcome.message if req.coupon_code else None
        return {"order": order, "coupon_message": coupon_message}

    @app.post("/checkout")
    async def checkout(req: CheckoutRequest, state: AppState = Depends(get_state)):
        session, warnings = _build_session(state, req.items)
        if not session.items:
            raise HTTPException(status_code=400, detail="Cart is empty")

        coupon_message = None
        if req.coupon_code:
            coupon_message = session.apply_coupon(req.coupon_code).message

        order = session.checkout(req.user_id, req.shipping, payment_method=req.payment_method)
        return {"order": order, "coupon_message": coupon_message, "warnings": warnings}

    @app.get("/system/status")
    async def get_status(state: AppState = Depends(get_state)):
        return {
            "engine_active": True,
            "products_loaded": len(state.catalog),
            "coupons_count": len(state.coupon_service.list_coupons()),
            "rental_plans_count": len(state.rental_plan_service.list_plans()),
            "tax_rate": state.settings.tax_rate,
            "shipping_cost": state.settings.shipping_cost,
        }

    return app


app = create_app()
