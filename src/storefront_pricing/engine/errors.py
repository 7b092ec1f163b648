"""
Coupon and lookup errors.

All of these are recoverable: callers fall back to "no coupon applied"
and show the message to the shopper.
"""


class CouponError(Exception):
    """Base class for coupon application failures."""

    code = "COUPON_ERROR"
    http_status = 400

    def __init__(self, message: str, coupon_code: str = None):
        super().__init__(message)
        self.message = message
        self.coupon_code = coupon_code

    def to_response(self) -> dict:
        """REST error envelope."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "coupon_code": self.coupon_code,
            }
        }


class InvalidCoupon(CouponError):
    """No coupon exists for the given code."""
    code = "INVALID_COUPON"
    http_status = 404


class CouponPaused(CouponError):
    """Coupon exists but is not active."""
    code = "COUPON_PAUSED"


class CouponExpired(CouponError):
    """Coupon expiry date has passed."""
    code = "COUPON_EXPIRED"


class LookupFailure(CouponError):
    """The coupon store could not be read."""
    code = "LOOKUP_FAILURE"
    http_status = 503
