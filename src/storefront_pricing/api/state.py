"""
Shared API state - engine, catalog and stores built once per app.
"""
from dataclasses import dataclass
from typing import Optional

from fastapi import Request

from ..config.settings import get_settings, Settings
from ..engine import PricingEngine, Catalog
from ..services.coupon_service import CouponService
from ..services.rental_checkout import RentalCheckout
from ..services.rental_plan_service import RentalPlanService


@dataclass
class AppState:
    settings: Settings
    engine: PricingEngine
    catalog: Catalog
    coupon_service: CouponService
    rental_plan_service: RentalPlanService
    rental_checkout: RentalCheckout


def build_state(settings: Optional[Settings] = None) -> AppState:
    """Load the catalog and wire the stores for one app instance."""
    settings = settings or get_settings()
    engine = PricingEngine(settings)
    coupon_service = CouponService(
        settings.coupons_csv,
        max_percentage=settings.max_percentage_discount,
        min_code_length=settings.min_code_length,
        max_code_length=settings.max_code_length,
    )
    return AppState(
        settings=settings,
        engine=engine,
        catalog=Catalog(settings.products_csv),
        coupon_service=coupon_service,
        rental_plan_service=RentalPlanService(settings.rental_plans_csv),
        rental_checkout=RentalCheckout(engine, coupon_service),
    )


def get_state(request: Request) -> AppState:
    """FastAPI dependency returning the state attached by create_app()."""
    return request.app.state.storefront
