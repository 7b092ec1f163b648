"""Engine subpackage - core pricing logic and coupon handling."""
from .pricing_engine import PricingEngine
from .catalog import Catalog
from .models import LineItem, Coupon, PricingResult, RentalPlan, RentalQuote
from .errors import CouponError, InvalidCoupon, CouponPaused, CouponExpired, LookupFailure

__all__ = [
    'PricingEngine', 'Catalog',
    'LineItem', 'Coupon', 'PricingResult', 'RentalPlan', 'RentalQuote',
    'CouponError', 'InvalidCoupon', 'CouponPaused', 'CouponExpired', 'LookupFailure',
]
