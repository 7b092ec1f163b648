"""
Rental checkout tests: order records, coupon handling and usage counts.
"""
import pytest

from storefront_pricing.engine import LineItem, RentalPlan

from conftest import NOW, kit, component


WEEKLY = RentalPlan(plan_id="weekly", duration_days=7, fee_percentage=30)


def arm_kit():
    return LineItem(id="KIT-2", price=1000, quantity=1, category="Kits", name="Robotic Arm Kit")


def test_rental_order_record(rental_checkout):
    order, outcome = rental_checkout.checkout(
        arm_kit(), WEEKLY, "user-1", {"full_name": "Asha", "postal_code": "411001"}, now=NOW,
    )

    assert not outcome.applied
    assert order["user_id"] == "user-1"
    assert order["product_id"] == "KIT-2"
    assert order["product_name"] == "Robotic Arm Kit"
    assert order["postal_code"] == "411001"
    assert order["rental_plan"] == {"plan_id": "weekly", "duration_days": 7, "fee_percentage": 30}
    assert order["security_deposit"] == 1000
    assert order["rental_fee"] == 300
    assert order["tax"] == 54
    assert order["shipping"] == 50
    assert order["total_paid"] == 1104
    assert order["potential_refund"] == 700
    assert order["coupon"] is None
    assert order["status"] == "rented"
    assert order["created_at"] == NOW.isoformat()


def test_rental_coupon_discounts_fee_and_counts_usage(rental_checkout, coupon_service):
    order, outcome = rental_checkout.checkout(arm_kit(), WEEKLY, "user-1", coupon_code="kits20", now=NOW)

    assert outcome.applied
    assert outcome.message == "Discount of 20% applied."
    assert order["discount"] == 60
    assert order["tax"] == pytest.approx(43.2)
    assert order["total_paid"] == pytest.approx(1093.2)
    assert order["potential_refund"] == 760
    assert order["coupon"] == "KITS20"
    assert coupon_service.find_by_code("KITS20").usage_count == 1


@pytest.mark.parametrize("code, error_code", [
    ("NOPE", "INVALID_COUPON"),
    ("PAUSED5", "COUPON_PAUSED"),
    ("OLD15", "COUPON_EXPIRED"),
])
def test_rejected_coupon_rents_without_discount(rental_checkout, coupon_service, code, error_code):
    order, outcome = rental_checkout.checkout(arm_kit(), WEEKLY, "user-1", coupon_code=code, now=NOW)

    assert not outcome.applied
    assert outcome.error_code == error_code
    assert order["discount"] == 0
    assert order["total_paid"] == 1104
    assert coupon_service.find_by_code("OLD15").usage_count == 4


def test_coupon_for_other_category_leaves_fee(rental_checkout):
    sensor = component(price=150, item_id="CMP-2")
    order, _ = rental_checkout.checkout(sensor, WEEKLY, "user-2", coupon_code="KITS20", now=NOW)

    assert order["rental_fee"] == 45
    assert order["discount"] == 0


def test_blank_coupon_code(rental_checkout):
    outcome = rental_checkout.apply_coupon("  ", kit(), now=NOW)
    assert not outcome.applied
    assert outcome.coupon is None
