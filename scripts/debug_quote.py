import sys
from pathlib import Path

# Add src to path
src_path = Path(__file__).parent.parent / 'src'
sys.path.insert(0, str(src_path))

from storefront_pricing.config.settings import get_settings
from storefront_pricing.engine import PricingEngine, Catalog
from storefront_pricing.services.cart_session import CartSession
from storefront_pricing.services.coupon_service import CouponService
from storefront_pricing.services.rental_plan_service import RentalPlanService

def debug():
    settings = get_settings()
    engine = PricingEngine(settings)
    catalog = Catalog(settings.products_csv)
    coupons = CouponService(settings.coupons_csv)
    plans = RentalPlanService(settings.rental_plans_csv)

    print(f"Data dir: {settings.data_dir}")
    print(f"Products loaded: {len(catalog)}")
    print("\nCatalog Head:")
    print(catalog.products.head())
    print("\nCoupons:")
    for coupon in coupons.list_coupons():
        print(f"  {coupon.code:<12} {coupon.label(settings.currency_symbol):<12} {coupon.category_type:<10} {coupon.status}")

    # Test Case: mixed cart with a kits-only coupon
    print("\n--- Testing KITS20 on a mixed cart ---")
    session = CartSession(engine, coupons, session_id="debug")
    lines, warnings = catalog.resolve({"KIT-001": 1, "CMP-101": 2})
    for line in lines:
        session.add_item(line)
    for warning in warnings:
        print(f"WARNING: {warning}")

    outcome = session.apply_coupon("kits20")
    print(f"Apply: {outcome.message}")
    result = session.totals()
    print(result.get_trace_text())
    print("\nFinal Totals:")
    print(result.to_display_dict())

    # Test Case: rental quote
    print("\n--- Testing rental of KIT-003 ---")
    plan_list = plans.list_plans()
    if plan_list:
        quote = engine.quote_rental(catalog.get("KIT-003"), plan_list[0])
        print(quote.to_display_dict())

if __name__ == "__main__":
    debug()
