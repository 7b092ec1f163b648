"""
Coupon store tests: CSV CRUD, lookup by code and admin validation rules.
"""
import pytest

from storefront_pricing.engine import Coupon, LookupFailure
from storefront_pricing.services.coupon_service import CouponService

from conftest import NOW


def test_list_coupons_sorted_by_code(coupon_service):
    codes = [c.code for c in coupon_service.list_coupons()]
    assert codes == sorted(codes)
    assert len(codes) == 5


def test_list_coupons_excluding_paused(coupon_service):
    codes = {c.code for c in coupon_service.list_coupons(include_paused=False)}
    assert "PAUSED5" not in codes
    assert "SAVE10" in codes


def test_find_by_code_is_case_insensitive(coupon_service):
    coupon = coupon_service.find_by_code(" kits20 ")
    assert coupon is not None
    assert coupon.category_type == "Kits"
    assert coupon.expiry_date is not None


def test_find_by_code_unknown_returns_none(coupon_service):
    assert coupon_service.find_by_code("NOPE") is None


def test_missing_file_means_no_coupons(tmp_path):
    service = CouponService(tmp_path / "coupons.csv")
    assert service.list_coupons() == []
    assert service.find_by_code("SAVE10") is None


def test_unreadable_store_raises_lookup_failure(tmp_path):
    """A store that can't be opened surfaces as LookupFailure, not OSError."""
    broken = tmp_path / "coupons.csv"
    broken.mkdir()
    service = CouponService(broken)

    with pytest.raises(LookupFailure) as exc:
        service.find_by_code("SAVE10")
    assert exc.value.code == "LOOKUP_FAILURE"


def test_create_coupon_persists_upper_case(coupon_service):
    created = coupon_service.create_coupon(
        Coupon(code="newyear", discount_type="percentage", discount_value=12)
    )
    assert created.coupon_id
    found = coupon_service.find_by_code("NEWYEAR")
    assert found is not None
    assert found.coupon_id == created.coupon_id
    assert found.discount_value == 12


def test_create_duplicate_code_rejected(coupon_service):
    with pytest.raises(ValueError):
        coupon_service.create_coupon(Coupon(code="save10", discount_type="amount", discount_value=5))


def test_create_in_empty_store(tmp_path):
    service = CouponService(tmp_path / "nested" / "coupons.csv")
    service.create_coupon(Coupon(code="FIRST", discount_type="amount", discount_value=25))
    assert [c.code for c in service.list_coupons()] == ["FIRST"]


def test_create_over_percentage_limit_rejected(coupon_service):
    """The store enforces the 90% ceiling itself, not only the admin API."""
    with pytest.raises(ValueError, match="cannot exceed 90%"):
        coupon_service.create_coupon(
            Coupon(code="HUGE150", discount_type="percentage", discount_value=150)
        )
    assert coupon_service.find_by_code("HUGE150") is None


def test_create_short_code_rejected(coupon_service):
    with pytest.raises(ValueError, match="at least 3"):
        coupon_service.create_coupon(Coupon(code="AB", discount_type="amount", discount_value=10))


def test_update_over_percentage_limit_rejected(coupon_service):
    with pytest.raises(ValueError):
        coupon_service.update_coupon("id-save10", {"discount_value": 150})
    assert coupon_service.find_by_code("SAVE10").discount_value == 10


def test_discount_values_survive_rewrites(coupon_service):
    """Values with more than six significant digits are stored exactly."""
    coupon_service.create_coupon(
        Coupon(code="BIGFLAT", discount_type="amount", discount_value=12345.67)
    )
    coupon_service.create_coupon(
        Coupon(code="HUGEFLAT", discount_type="amount", discount_value=1234567)
    )
    # Every write rewrites all rows
    coupon_service.record_usage("SAVE10")
    coupon_service.set_status("id-kits20", "paused")

    assert coupon_service.find_by_code("BIGFLAT").discount_value == 12345.67
    assert coupon_service.find_by_code("HUGEFLAT").discount_value == 1234567


def test_update_coupon(coupon_service):
    updated = coupon_service.update_coupon("id-save10", {"discount_value": 15, "code": "save15"})
    assert updated.code == "SAVE15"
    assert coupon_service.find_by_code("SAVE15").discount_value == 15
    assert coupon_service.find_by_code("SAVE10") is None


def test_update_to_existing_code_rejected(coupon_service):
    with pytest.raises(ValueError):
        coupon_service.update_coupon("id-save10", {"code": "KITS20"})


def test_update_unknown_raises(coupon_service):
    with pytest.raises(ValueError):
        coupon_service.update_coupon("missing", {"discount_value": 1})


def test_set_status_pause_and_activate(coupon_service):
    assert coupon_service.set_status("id-save10", "paused").status == "paused"
    assert not coupon_service.find_by_code("SAVE10").is_active
    assert coupon_service.set_status("id-save10", "ACTIVE").status == "active"


def test_set_status_rejects_unknown_status(coupon_service):
    with pytest.raises(ValueError):
        coupon_service.set_status("id-save10", "archived")


def test_delete_coupon(coupon_service):
    assert coupon_service.delete_coupon("id-old15")
    assert coupon_service.find_by_code("OLD15") is None
    with pytest.raises(ValueError):
        coupon_service.delete_coupon("id-old15")


def test_record_usage_increments(coupon_service):
    coupon_service.record_usage("old15")
    assert coupon_service.find_by_code("OLD15").usage_count == 5


def test_record_usage_unknown_code(coupon_service):
    assert coupon_service.record_usage("GHOST") is None


def test_expiry_survives_round_trip(coupon_service):
    before = coupon_service.find_by_code("OLD15").expiry_date
    coupon_service.record_usage("OLD15")
    assert coupon_service.find_by_code("OLD15").expiry_date == before


@pytest.mark.parametrize("value", [0, 0.5, 90.01, 95])
def test_validate_percentage_bounds(coupon_service, value):
    coupon = Coupon(code="BAD", discount_type="percentage", discount_value=value)
    result = coupon_service.validate_coupon(coupon, now=NOW)
    assert not result.valid


@pytest.mark.parametrize("value", [1, 45, 90])
def test_validate_percentage_ok(coupon_service, value):
    coupon = Coupon(code="GOOD", discount_type="percentage", discount_value=value)
    assert coupon_service.validate_coupon(coupon, now=NOW).valid


def test_validate_code_length(coupon_service):
    short = Coupon(code="AB", discount_type="amount", discount_value=10)
    long = Coupon(code="X" * 21, discount_type="amount", discount_value=10)
    assert not coupon_service.validate_coupon(short, now=NOW).valid
    assert not coupon_service.validate_coupon(long, now=NOW).valid


def test_validate_amount_must_be_positive(coupon_service):
    coupon = Coupon(code="ZERO", discount_type="amount", discount_value=0)
    result = coupon_service.validate_coupon(coupon, now=NOW)
    assert not result.valid
    assert any("greater than 0" in e for e in result.errors)


def test_validate_unknown_enums(coupon_service):
    coupon = Coupon(code="ODD", discount_type="bogo", discount_value=5,
                    category_type="Courses", status="draft")
    result = coupon_service.validate_coupon(coupon, now=NOW)
    assert not result.valid
    assert len(result.errors) == 3


def test_validate_warns_when_expired(coupon_service):
    coupon = Coupon(code="LATE", discount_type="amount", discount_value=5, expiry_date="2020-01-01")
    result = coupon_service.validate_coupon(coupon, now=NOW)
    assert result.valid
    assert result.warnings


def test_get_stats(coupon_service):
    stats = coupon_service.get_stats(now=NOW)
    assert stats["total"] == 5
    assert stats["active"] == 4
    assert stats["paused"] == 1
    assert stats["expired"] == 1
    assert stats["total_uses"] == 4
    assert stats["by_category"]["Universal"] == 3
