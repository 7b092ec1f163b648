"""
Rental Checkout - Turns a rental quote into a rental order record.
"""
import logging
from datetime import datetime, timezone
from typing import Optional

from ..engine.errors import CouponError
from ..engine.models import LineItem, RentalPlan
from ..engine.pricing_engine import PricingEngine
from .cart_session import CouponApplication
from .coupon_service import CouponService

logger = logging.getLogger(__name__)


class RentalCheckout:
    """Prices and books single-product rentals."""

    def __init__(self, engine: PricingEngine, coupon_service: CouponService):
        self.engine = engine
        self.coupon_service = coupon_service

    def apply_coupon(
        self,
        code: Optional[str],
        product: LineItem,
        now: Optional[datetime] = None,
    ) -> CouponApplication:
        """Look up a coupon for a rental; rejected codes fall back to no coupon."""
        code = str(code or "").strip().upper()
        if not code:
            return CouponApplication(applied=False, message="No coupon applied")

        try:
            found = self.coupon_service.find_by_code(code)
            coupon = self.engine.apply_coupon(code, [product], found, now=now)
        except CouponError as e:
            logger.info(
                "Rental coupon rejected: %s", e.message,
                extra={"coupon_code": code, "error_code": e.code},
            )
            return CouponApplication(applied=False, message=e.message, error_code=e.code)

        symbol = self.engine.settings.currency_symbol
        return CouponApplication(
            applied=True,
            message=f"Discount of {coupon.amount_text(symbol)} applied.",
            coupon=coupon,
        )

    def checkout(
        self,
        product: LineItem,
        plan: RentalPlan,
        user_id: str,
        shipping_details: Optional[dict] = None,
        coupon_code: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> tuple[dict, CouponApplication]:
        """
        Build the rental order record for one unit of `product` under `plan`.

        Returns (order, coupon_outcome). Coupon usage is recorded when a
        coupon was applied. Storing the record is the caller's job.
        """
        outcome = self.apply_coupon(coupon_code, product, now=now)
        quote = self.engine.quote_rental(product, plan, outcome.coupon)
        amounts = quote.to_display_dict()

        order = {
            "user_id": user_id,
            "product_id": product.id,
            "product_name": product.name,
            **(shipping_details or {}),
            "rental_plan": {
                "plan_id": plan.plan_id,
                "duration_days": plan.duration_days,
                "fee_percentage": plan.fee_percentage,
            },
            "security_deposit": amounts["security_deposit"],
            "rental_fee": amounts["rental_fee"],
            "discount": amounts["discount"],
            "tax": amounts["tax"],
            "shipping": amounts["shipping"],
            "total_paid": amounts["total_due"],
            "potential_refund": amounts["potential_refund"],
            "coupon": amounts["coupon"],
            "status": "rented",
            "created_at": (now or datetime.now(timezone.utc)).isoformat(),
        }

        if outcome.coupon is not None:
            self.coupon_service.record_usage(outcome.coupon.code)

        logger.info(
            "Rental order built for user %s: %s on plan %s, paid %.2f",
            user_id, product.id, plan.plan_id, amounts["total_due"],
            extra={"coupon_code": amounts["coupon"]},
        )
        return order, outcome
