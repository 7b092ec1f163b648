"""
Cart Session - One shopper's cart and applied coupon.

Holds line items for a single session and prices them through the
pricing engine. Coupon problems never break the cart: the session falls
back to "no coupon applied" and hands back a message to show.
"""
import logging
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Optional

from ..engine.errors import CouponError
from ..engine.models import Coupon, LineItem, PricingResult
from ..engine.pricing_engine import PricingEngine
from .coupon_service import CouponService

logger = logging.getLogger(__name__)


@dataclass
class CouponApplication:
    """Outcome of trying to apply a coupon code."""
    applied: bool
    message: str
    coupon: Optional[Coupon] = None
    error_code: Optional[str] = None


class CartSession:
    """Session-scoped cart passed explicitly to whatever prices it."""

    def __init__(
        self,
        engine: PricingEngine,
        coupon_service: CouponService,
        session_id: str = "",
    ):
        self.engine = engine
        self.coupon_service = coupon_service
        self.session_id = session_id
        self.items: list[LineItem] = []
        self.coupon: Optional[Coupon] = None

    @property
    def total_items(self) -> int:
        return sum(item.quantity for item in self.items)

    def add_item(self, item: LineItem, quantity: Optional[int] = None):
        """Add a product, merging with an existing line for the same id."""
        quantity = item.quantity if quantity is None else quantity
        for i, existing in enumerate(self.items):
            if existing.id == item.id:
                self.items[i] = replace(existing, quantity=existing.quantity + quantity)
                return
        self.items.append(replace(item, quantity=quantity))

    def remove_item(self, product_id: str):
        self.items = [item for item in self.items if item.id != product_id]

    def update_quantity(self, product_id: str, quantity: int):
        """Set a line's quantity; zero or less removes the line."""
        if quantity <= 0:
            self.remove_item(product_id)
            return
        self.items = [
            replace(item, quantity=quantity) if item.id == product_id else item
            for item in self.items
        ]

    def clear(self):
        self.items = []
        self.coupon = None

    def apply_coupon(self, code: str, now: Optional[datetime] = None) -> CouponApplication:
        """
        Look up and apply a coupon code.

        On any coupon error the previously applied coupon is dropped and the
        cart is priced without one.
        """
        code = str(code or "").strip().upper()
        if not code:
            return CouponApplication(applied=False, message="Enter a coupon code")

        try:
            found = self.coupon_service.find_by_code(code)
            coupon = self.engine.apply_coupon(code, self.items, found, now=now)
        except CouponError as e:
            self.coupon = None
            logger.info(
                "Coupon rejected: %s", e.message,
                extra={"coupon_code": code, "error_code": e.code, "session_id": self.session_id},
            )
            return CouponApplication(applied=False, message=e.message, error_code=e.code)

        self.coupon = coupon
        symbol = self.engine.settings.currency_symbol
        return CouponApplication(
            applied=True,
            message=f"Discount of {coupon.amount_text(symbol)} applied.",
            coupon=coupon,
        )

    def remove_coupon(self) -> str:
        self.coupon = None
        return "Coupon removed"

    def totals(self) -> PricingResult:
        """Price the cart with the currently applied coupon."""
        return self.engine.compute_totals(self.items, self.coupon)

    def checkout(
        self,
        user_id: str,
        shipping_details: Optional[dict] = None,
        payment_method: str = "cod",
    ) -> dict:
        """
        Build the order record for the current cart.

        Records coupon usage and clears the cart. Storing the record is the
        caller's job.
        """
        if not self.items:
            raise ValueError("Cannot check out an empty cart")

        result = self.totals()
        totals = result.to_display_dict()

        order = {
            "user_id": user_id,
            **(shipping_details or {}),
            "payment_method": payment_method,
            "items": [item.to_dict() for item in self.items],
            "subtotal": totals["subtotal"],
            "shipping": totals["shipping"],
            "discount": totals["discount"],
            "tax": totals["tax"],
            "coupon": totals["coupon"],
            "total": totals["total"],
            "status": "pending",
            "created_at": datetime.now(timezone.utc).isoformat(),
        }

        if self.coupon is not None:
            self.coupon_service.record_usage(self.coupon.code)

        logger.info(
            "Order built for user %s: total %.2f", user_id, totals["total"],
            extra={"session_id": self.session_id, "coupon_code": totals["coupon"]},
        )
        self.clear()
        return order
