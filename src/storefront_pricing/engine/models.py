"""
Data models for the pricing engine.

Uses dataclasses for structured, type-safe data representation.
"""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional


# Product categories a line item may belong to
CATEGORY_KITS = "Kits"
CATEGORY_COMPONENTS = "Components"
VALID_CATEGORIES = (CATEGORY_KITS, CATEGORY_COMPONENTS)

# Coupon scope: Universal applies to every line item
CATEGORY_UNIVERSAL = "Universal"
VALID_COUPON_CATEGORIES = (CATEGORY_UNIVERSAL,) + VALID_CATEGORIES

DISCOUNT_PERCENTAGE = "percentage"
DISCOUNT_AMOUNT = "amount"
VALID_DISCOUNT_TYPES = (DISCOUNT_PERCENTAGE, DISCOUNT_AMOUNT)

STATUS_ACTIVE = "active"
STATUS_PAUSED = "paused"
VALID_STATUSES = (STATUS_ACTIVE, STATUS_PAUSED)


def parse_timestamp(value) -> Optional[datetime]:
    """
    Parse an ISO date/datetime into an aware UTC datetime.

    Naive values are treated as UTC. Empty values return None.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        text = str(value).strip()
        if not text:
            return None
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass
class TraceStep:
    """A single step in the pricing calculation trace."""
    step: str
    description: str
    value: Optional[str] = None


@dataclass
class LineItem:
    """One product/quantity pair in a cart or order."""
    id: str
    price: float
    quantity: int
    category: str
    name: str = ""

    def __post_init__(self):
        self.id = str(self.id).strip()
        if self.price < 0:
            raise ValueError(f"Price must be non-negative for item {self.id}")
        if int(self.quantity) != self.quantity or self.quantity < 1:
            raise ValueError(f"Quantity must be a whole number >= 1 for item {self.id}")
        self.quantity = int(self.quantity)
        if self.category not in VALID_CATEGORIES:
            raise ValueError(f"Unknown category '{self.category}' for item {self.id}")

    @property
    def extended_price(self) -> float:
        return self.price * self.quantity

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "price": self.price,
            "quantity": self.quantity,
            "category": self.category,
        }


@dataclass
class Coupon:
    """A discount rule keyed by code, scoped to a category."""
    code: str
    discount_type: str
    discount_value: float
    category_type: str = CATEGORY_UNIVERSAL
    status: str = STATUS_ACTIVE
    expiry_date: Optional[datetime] = None
    coupon_id: str = ""
    usage_count: int = 0

    def __post_init__(self):
        self.code = str(self.code).strip().upper()
        self.expiry_date = parse_timestamp(self.expiry_date)

    @property
    def is_active(self) -> bool:
        return self.status == STATUS_ACTIVE

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        """True when an expiry date is set and lies before `now`."""
        if self.expiry_date is None:
            return False
        now = now or datetime.now(timezone.utc)
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)
        return self.expiry_date < now

    def applies_to(self, category: str) -> bool:
        """Whether an item of `category` counts toward this coupon."""
        return self.category_type == CATEGORY_UNIVERSAL or self.category_type == category

    def amount_text(self, currency_symbol: str = "₹") -> str:
        """Discount value with its unit, e.g. '10%' or '₹150'."""
        if self.discount_type == DISCOUNT_PERCENTAGE:
            return f"{self.discount_value:g}%"
        return currency_symbol + f"{self.discount_value:.2f}".rstrip("0").rstrip(".")

    def label(self, currency_symbol: str = "₹") -> str:
        """Short human-readable discount label, e.g. '10% off'."""
        return f"{self.amount_text(currency_symbol)} off"


@dataclass
class PricingResult:
    """Complete result of a pricing calculation, full precision."""
    subtotal: float
    applicable_total: float
    discount: float
    taxable: float
    tax: float
    shipping: float
    total: float
    tax_rate: float
    coupon_code: Optional[str] = None
    warnings: list[str] = field(default_factory=list)
    trace: list[TraceStep] = field(default_factory=list)

    def add_trace(self, step: str, description: str, value: str = None):
        """Add a step to the result-level trace."""
        self.trace.append(TraceStep(step=step, description=description, value=value))

    def add_warning(self, warning: str):
        """Add a result-level warning."""
        if warning not in self.warnings:
            self.warnings.append(warning)

    def get_trace_text(self) -> str:
        """Get human-readable result trace as formatted text."""
        lines = []
        for t in self.trace:
            if t.value:
                lines.append(f"• {t.step}: {t.description} = {t.value}")
            else:
                lines.append(f"• {t.step}: {t.description}")
        return "\n".join(lines)

    def to_display_dict(self) -> dict:
        """Totals rounded to 2 decimals for presentation and order records."""
        return {
            "subtotal": round(self.subtotal, 2),
            "discount": round(self.discount, 2),
            "tax": round(self.tax, 2),
            "shipping": round(self.shipping, 2),
            "total": round(self.total, 2),
            "coupon": self.coupon_code,
        }


@dataclass
class RentalPlan:
    """A rental duration and the share of the item price charged as fee."""
    plan_id: str
    duration_days: int
    fee_percentage: float


@dataclass
class RentalQuote:
    """Amounts for renting a single product under a plan."""
    product_id: str
    plan_id: str
    security_deposit: float
    rental_fee: float
    discount: float
    final_rental_fee: float
    tax: float
    shipping: float
    total_due: float
    potential_refund: float
    coupon_code: Optional[str] = None
    trace: list[TraceStep] = field(default_factory=list)

    def add_trace(self, step: str, description: str, value: str = None):
        self.trace.append(TraceStep(step=step, description=description, value=value))

    def to_display_dict(self) -> dict:
        return {
            "product_id": self.product_id,
            "plan_id": self.plan_id,
            "security_deposit": round(self.security_deposit, 2),
            "rental_fee": round(self.rental_fee, 2),
            "discount": round(self.discount, 2),
            "final_rental_fee": round(self.final_rental_fee, 2),
            "tax": round(self.tax, 2),
            "shipping": round(self.shipping, 2),
            "total_due": round(self.total_due, 2),
            "potential_refund": round(self.potential_refund, 2),
            "coupon": self.coupon_code,
        }
