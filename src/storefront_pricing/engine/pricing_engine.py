"""
Pricing Engine - Order totals for cart, checkout and rentals.

One calculation shared by every flow:
- Line items → subtotal
- Coupon → discount on the covered portion, capped at that portion
- Taxable amount → tax
- Taxable + tax + shipping → total

Values keep full float precision; rounding happens in to_display_dict().
"""
import logging
from datetime import datetime
from typing import Iterable, Optional

from ..config.settings import get_settings, Settings
from .coupon_matcher import CouponMatcher
from .errors import InvalidCoupon, CouponPaused, CouponExpired
from .models import Coupon, LineItem, PricingResult, RentalPlan, RentalQuote

logger = logging.getLogger(__name__)


class PricingEngine:
    """
    Core pricing engine.

    Calculation order:
    1. Subtotal = Σ price × quantity
    2. Applicable total = items the coupon covers (0 with no coupon)
    3. Discount = min(raw coupon discount, applicable total)
    4. Taxable = subtotal - discount, tax = taxable × tax rate
    5. Total = taxable + tax + shipping
    """

    def __init__(self, settings: Optional[Settings] = None, matcher: Optional[CouponMatcher] = None):
        self.settings = settings or get_settings()
        self.matcher = matcher or CouponMatcher()

    def apply_coupon(
        self,
        code: str,
        line_items: Iterable[LineItem],
        coupon: Optional[Coupon],
        now: Optional[datetime] = None,
    ) -> Coupon:
        """
        Validate a looked-up coupon for use on the given line items.

        Checks, in order: the coupon exists, it is active, it has not expired.

        Raises:
            InvalidCoupon, CouponPaused, CouponExpired
        """
        code = str(code or "").strip().upper()

        if coupon is None:
            raise InvalidCoupon("Invalid Coupon Code", coupon_code=code)

        if not coupon.is_active:
            raise CouponPaused("Coupon is not active", coupon_code=coupon.code)

        if coupon.is_expired(now):
            raise CouponExpired("This coupon has expired", coupon_code=coupon.code)

        covered = self.matcher.applicable_total(coupon, line_items)
        if covered == 0:
            logger.info(
                "Coupon %s covers no items in this cart", coupon.code,
                extra={"coupon_code": coupon.code},
            )
        return coupon

    def compute_totals(
        self,
        line_items: Iterable[LineItem],
        coupon: Optional[Coupon] = None,
        tax_rate: Optional[float] = None,
        shipping_cost: Optional[float] = None,
    ) -> PricingResult:
        """
        Calculate subtotal, discount, tax, shipping and total.

        Args:
            line_items: Items in the cart or order
            coupon: Validated coupon, or None
            tax_rate: Defaults to the configured rate
            shipping_cost: Defaults to the configured flat shipping

        Returns:
            PricingResult with full-precision amounts and a trace
        """
        items = list(line_items)
        tax_rate = self.settings.tax_rate if tax_rate is None else tax_rate
        shipping = self.settings.shipping_cost if shipping_cost is None else shipping_cost

        subtotal = sum(item.price * item.quantity for item in items)

        result = PricingResult(
            subtotal=subtotal,
            applicable_total=0.0,
            discount=0.0,
            taxable=subtotal,
            tax=0.0,
            shipping=shipping,
            total=0.0,
            tax_rate=tax_rate,
            coupon_code=coupon.code if coupon else None,
        )
        result.add_trace("Subtotal", f"{len(items)} line item(s)", f"{subtotal:.2f}")

        if coupon is not None and subtotal > 0:
            discount, applicable, traces = self.matcher.discount(coupon, items)
            result.applicable_total = applicable
            result.discount = discount
            result.add_trace("Coupon Scope", f"{coupon.category_type} items", f"{applicable:.2f}")
            for trace_msg in traces:
                result.add_trace("Coupon Applied", trace_msg, f"{discount:.2f}")
            if applicable == 0:
                result.add_warning(f"Coupon {coupon.code} does not cover any {coupon.category_type} items")
        elif coupon is not None:
            result.add_trace("Coupon", f"{coupon.code} has nothing to discount on a zero subtotal", "0.00")
        else:
            result.add_trace("Coupon", "No coupon applied")

        result.taxable = subtotal - result.discount
        result.tax = result.taxable * tax_rate
        result.total = result.taxable + result.tax + shipping

        result.add_trace("Tax", f"{tax_rate * 100:g}% of {result.taxable:.2f}", f"{result.tax:.2f}")
        result.add_trace("Shipping", "Flat shipping", f"{shipping:.2f}")
        result.add_trace("Total", "Taxable + tax + shipping", f"{result.total:.2f}")

        return result

    def quote_rental(
        self,
        product: LineItem,
        plan: RentalPlan,
        coupon: Optional[Coupon] = None,
        tax_rate: Optional[float] = None,
        shipping_cost: Optional[float] = None,
    ) -> RentalQuote:
        """
        Price a single-unit rental.

        The full item price is held as a security deposit. The plan's fee
        percentage of the price is the rental fee; a coupon discounts the
        fee (not the deposit) and tax is charged on the discounted fee.
        The potential refund is the deposit less the discounted fee.
        """
        tax_rate = self.settings.tax_rate if tax_rate is None else tax_rate
        shipping = self.settings.shipping_cost if shipping_cost is None else shipping_cost

        deposit = product.price
        fee = deposit * plan.fee_percentage / 100.0

        quote = RentalQuote(
            product_id=product.id,
            plan_id=plan.plan_id,
            security_deposit=deposit,
            rental_fee=fee,
            discount=0.0,
            final_rental_fee=fee,
            tax=0.0,
            shipping=shipping,
            total_due=0.0,
            potential_refund=0.0,
            coupon_code=coupon.code if coupon else None,
        )
        quote.add_trace("Security Deposit", "Full item price", f"{deposit:.2f}")
        quote.add_trace(
            "Rental Fee",
            f"{plan.fee_percentage:g}% for {plan.duration_days} days",
            f"{fee:.2f}",
        )

        if coupon is not None and coupon.applies_to(product.category):
            discount, traces = self.matcher.discount_for_amount(coupon, fee)
            quote.discount = discount
            for trace_msg in traces:
                quote.add_trace("Coupon Applied", trace_msg, f"{discount:.2f}")
        elif coupon is not None:
            quote.add_trace("Coupon", f"{coupon.code} does not cover {product.category}")

        quote.final_rental_fee = fee - quote.discount
        quote.tax = quote.final_rental_fee * tax_rate
        quote.total_due = deposit + quote.tax + shipping
        quote.potential_refund = deposit - quote.final_rental_fee

        quote.add_trace("Tax", f"{tax_rate * 100:g}% of fee", f"{quote.tax:.2f}")
        quote.add_trace("Total Due", "Deposit + tax + shipping", f"{quote.total_due:.2f}")
        quote.add_trace("Potential Refund", "Deposit - final fee", f"{quote.potential_refund:.2f}")
        return quote
