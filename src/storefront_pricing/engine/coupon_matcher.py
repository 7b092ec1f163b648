"""
Coupon Matcher - Works out which line items a coupon covers and how much
it takes off.

Used by the pricing engine for cart/checkout totals and by the rental
quote, where the "line" is the rental fee.
"""
from typing import Iterable, Optional

from .models import Coupon, LineItem, DISCOUNT_PERCENTAGE


class CouponMatcher:
    """
    Matches a coupon against line items and computes the capped discount.

    Rules:
    1. Universal coupons cover every line item
    2. Category coupons cover only line items of that category
    3. Percentage coupons take value% of the covered amount
    4. Amount coupons take a flat value
    5. The discount never exceeds the covered amount
    """

    def applicable_total(self, coupon: Optional[Coupon], items: Iterable[LineItem]) -> float:
        """Sum of price * quantity over the items the coupon covers."""
        if coupon is None:
            return 0.0
        return sum(
            item.price * item.quantity
            for item in items
            if coupon.applies_to(item.category)
        )

    def raw_discount(self, coupon: Optional[Coupon], applicable_total: float) -> float:
        """Discount before capping at the covered amount."""
        if coupon is None:
            return 0.0
        if coupon.discount_type == DISCOUNT_PERCENTAGE:
            return applicable_total * coupon.discount_value / 100.0
        return float(coupon.discount_value)

    def discount_for_amount(
        self,
        coupon: Optional[Coupon],
        applicable_total: float,
    ) -> tuple[float, list[str]]:
        """
        Apply a coupon to an already-covered amount.

        Returns (discount, trace_messages).
        """
        traces = []
        if coupon is None or applicable_total <= 0:
            return 0.0, traces

        raw = self.raw_discount(coupon, applicable_total)
        if coupon.discount_type == DISCOUNT_PERCENTAGE:
            traces.append(
                f"Coupon {coupon.code} takes {coupon.discount_value:g}% of {applicable_total:.2f}"
            )
        else:
            traces.append(f"Coupon {coupon.code} takes flat {raw:.2f}")

        discount = max(0.0, min(raw, applicable_total))
        if discount < raw:
            traces.append(f"Discount capped at covered amount {applicable_total:.2f}")
        return discount, traces

    def discount(self, coupon: Optional[Coupon], items: Iterable[LineItem]) -> tuple[float, float, list[str]]:
        """
        Compute the capped discount for a set of line items.

        Returns (discount, applicable_total, trace_messages).
        """
        items = list(items)
        applicable = self.applicable_total(coupon, items)
        discount, traces = self.discount_for_amount(coupon, applicable)
        return discount, applicable, traces
