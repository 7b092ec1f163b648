import os
import sys
from datetime import datetime, timezone

import pytest

# Add src to path for internal imports
src_path = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'src')
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from storefront_pricing.config.settings import Settings
from storefront_pricing.engine import PricingEngine, Catalog, LineItem
from storefront_pricing.services.coupon_service import CouponService
from storefront_pricing.services.rental_plan_service import RentalPlanService
from storefront_pricing.services.cart_session import CartSession
from storefront_pricing.services.rental_checkout import RentalCheckout


PRODUCTS_CSV = """id,name,price,category
KIT-1,Starter Robot Kit,100,Kits
KIT-2,Robotic Arm Kit,1000,Kits
CMP-1,Motor Driver,50,Components
CMP-2,Ultrasonic Sensor,150,Components
REC-1,Project Handbook,10,Recommendation
"""

COUPONS_CSV = """coupon_id,code,discount_type,discount_value,category_type,status,expiry_date,usage_count
id-save10,SAVE10,percentage,10,Universal,active,,0
id-kits20,KITS20,percentage,20,Kits,active,2099-12-31,0
id-flat500,FLAT500,amount,500,Components,active,,0
id-paused5,PAUSED5,percentage,5,Universal,paused,,0
id-old15,OLD15,percentage,15,Universal,active,2020-01-01T00:00:00Z,4
"""

RENTAL_PLANS_CSV = """plan_id,duration_days,fee_percentage
monthly,30,60
weekly,7,30
"""

# Fixed clock between the expired and the future coupon
NOW = datetime(2026, 6, 1, tzinfo=timezone.utc)


@pytest.fixture
def data_dir(tmp_path):
    (tmp_path / 'products.csv').write_text(PRODUCTS_CSV, encoding='utf-8')
    (tmp_path / 'coupons.csv').write_text(COUPONS_CSV, encoding='utf-8')
    (tmp_path / 'rental_plans.csv').write_text(RENTAL_PLANS_CSV, encoding='utf-8')
    return tmp_path


@pytest.fixture
def settings(data_dir):
    settings = Settings.load(data_dir)
    settings.tax_rate = 0.18
    settings.shipping_cost = 50.0
    settings.log_format = "text"
    return settings


@pytest.fixture
def engine(settings):
    return PricingEngine(settings)


@pytest.fixture
def catalog(settings):
    return Catalog(settings.products_csv)


@pytest.fixture
def coupon_service(settings):
    return CouponService(settings.coupons_csv)


@pytest.fixture
def rental_plan_service(settings):
    return RentalPlanService(settings.rental_plans_csv)


@pytest.fixture
def session(engine, coupon_service):
    return CartSession(engine, coupon_service, session_id="test-session")


@pytest.fixture
def rental_checkout(engine, coupon_service):
    return RentalCheckout(engine, coupon_service)


def kit(price=100.0, qty=1, item_id="KIT-1"):
    return LineItem(id=item_id, price=price, quantity=qty, category="Kits")


def component(price=50.0, qty=1, item_id="CMP-1"):
    return LineItem(id=item_id, price=price, quantity=qty, category="Components")
