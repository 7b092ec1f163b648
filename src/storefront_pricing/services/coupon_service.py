"""
Coupon Service - CRUD operations for discount coupons.
Handles reading/writing coupons.csv and lookup by code at apply-time.
"""
import csv
import logging
import uuid
from pathlib import Path
from datetime import datetime, timezone
from typing import Optional
from dataclasses import dataclass, field

from ..engine.errors import LookupFailure
from ..engine.models import (
    Coupon,
    DISCOUNT_PERCENTAGE,
    DISCOUNT_AMOUNT,
    VALID_DISCOUNT_TYPES,
    VALID_COUPON_CATEGORIES,
    VALID_STATUSES,
    STATUS_ACTIVE,
)

logger = logging.getLogger(__name__)


def coupon_to_csv_row(coupon: Coupon) -> dict:
    """Convert to CSV row format."""
    return {
        'coupon_id': coupon.coupon_id,
        'code': coupon.code,
        'discount_type': coupon.discount_type,
        'discount_value': repr(float(coupon.discount_value)),
        'category_type': coupon.category_type,
        'status': coupon.status,
        'expiry_date': coupon.expiry_date.isoformat() if coupon.expiry_date else '',
        'usage_count': str(coupon.usage_count),
    }


def coupon_from_csv_row(row: dict) -> Coupon:
    """Create Coupon from CSV row."""
    return Coupon(
        coupon_id=row.get('coupon_id', ''),
        code=row.get('code', ''),
        discount_type=row.get('discount_type', DISCOUNT_PERCENTAGE),
        discount_value=float(row.get('discount_value') or 0),
        category_type=row.get('category_type') or 'Universal',
        status=(row.get('status') or STATUS_ACTIVE).lower(),
        expiry_date=row.get('expiry_date') or None,
        usage_count=int(row.get('usage_count') or 0),
    )


@dataclass
class ValidationResult:
    """Result of coupon validation."""
    valid: bool
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


class CouponService:
    """Service for managing coupons."""

    CSV_COLUMNS = [
        'coupon_id', 'code', 'discount_type', 'discount_value',
        'category_type', 'status', 'expiry_date', 'usage_count'
    ]

    def __init__(
        self,
        coupons_csv_path: Path,
        max_percentage: float = 90.0,
        min_code_length: int = 3,
        max_code_length: int = 20,
    ):
        self.coupons_csv_path = coupons_csv_path
        self.max_percentage = max_percentage
        self.min_code_length = min_code_length
        self.max_code_length = max_code_length

    def list_coupons(self, include_paused: bool = True) -> list[Coupon]:
        """List all coupons from CSV, ordered by code."""
        coupons = []
        if not self.coupons_csv_path.exists():
            return coupons

        with open(self.coupons_csv_path, 'r', encoding='utf-8') as f:
            reader = csv.DictReader(f)
            for row in reader:
                if not row.get('code'):
                    continue
                coupon = coupon_from_csv_row(row)
                if include_paused or coupon.is_active:
                    coupons.append(coupon)

        coupons.sort(key=lambda c: c.code)
        return coupons

    def get_coupon(self, coupon_id: str) -> Optional[Coupon]:
        """Get a single coupon by ID."""
        for coupon in self.list_coupons():
            if coupon.coupon_id == coupon_id:
                return coupon
        return None

    def find_by_code(self, code: str) -> Optional[Coupon]:
        """
        Look up a coupon by code (case-insensitive).

        Returns None when no coupon has this code.

        Raises:
            LookupFailure: the coupon store could not be read
        """
        code = str(code or "").strip().upper()
        try:
            coupons = self.list_coupons()
        except (OSError, csv.Error, ValueError) as e:
            logger.error(
                "Coupon lookup failed: %s", e,
                extra={"coupon_code": code, "error_code": LookupFailure.code},
            )
            raise LookupFailure("Error applying coupon", coupon_code=code) from e

        for coupon in coupons:
            if coupon.code == code:
                return coupon
        return None

    def create_coupon(self, coupon: Coupon) -> Coupon:
        """Create a new coupon."""
        self._check_valid(coupon)
        if not coupon.coupon_id:
            coupon.coupon_id = self._generate_coupon_id()

        if self.find_by_code(coupon.code):
            raise ValueError(f"Coupon code '{coupon.code}' already exists")
        if self.get_coupon(coupon.coupon_id):
            raise ValueError(f"Coupon with ID '{coupon.coupon_id}' already exists")

        coupons = self.list_coupons()
        coupons.append(coupon)
        self._write_coupons(coupons)

        logger.info("Coupon %s created", coupon.code, extra={"coupon_code": coupon.code})
        return coupon

    def update_coupon(self, coupon_id: str, updates: dict) -> Coupon:
        """Update an existing coupon."""
        coupons = self.list_coupons()
        found = None

        for coupon in coupons:
            if coupon.coupon_id == coupon_id:
                for key, value in updates.items():
                    if key == 'coupon_id':
                        continue
                    if hasattr(coupon, key):
                        setattr(coupon, key, value)
                # Re-normalise code and expiry after raw assignment
                coupon.__post_init__()
                found = coupon
                break

        if found is None:
            raise ValueError(f"Coupon with ID '{coupon_id}' not found")
        self._check_valid(found)

        if any(c.code == found.code and c.coupon_id != coupon_id for c in coupons):
            raise ValueError(f"Coupon code '{found.code}' already exists")

        self._write_coupons(coupons)
        return found

    def set_status(self, coupon_id: str, status: str) -> Coupon:
        """Pause or re-activate a coupon."""
        status = str(status).lower()
        if status not in VALID_STATUSES:
            raise ValueError(f"Status must be one of {', '.join(VALID_STATUSES)}")
        return self.update_coupon(coupon_id, {'status': status})

    def delete_coupon(self, coupon_id: str) -> bool:
        """Delete a coupon."""
        coupons = self.list_coupons()
        original_count = len(coupons)
        coupons = [c for c in coupons if c.coupon_id != coupon_id]

        if len(coupons) == original_count:
            raise ValueError(f"Coupon with ID '{coupon_id}' not found")

        self._write_coupons(coupons)
        return True

    def record_usage(self, code: str) -> Optional[Coupon]:
        """Increment the usage count after an order is placed with a coupon."""
        coupon = self.find_by_code(code)
        if coupon is None:
            logger.warning("Usage recorded for unknown coupon %s", code, extra={"coupon_code": code})
            return None
        return self.update_coupon(coupon.coupon_id, {'usage_count': coupon.usage_count + 1})

    def validate_coupon(self, coupon: Coupon, now: Optional[datetime] = None) -> ValidationResult:
        """Validate a coupon before saving."""
        result = ValidationResult(valid=True)

        if len(coupon.code) < self.min_code_length:
            result.errors.append(f"Code must be at least {self.min_code_length} characters")
            result.valid = False
        if len(coupon.code) > self.max_code_length:
            result.errors.append(f"Code must be at most {self.max_code_length} characters")
            result.valid = False

        if coupon.discount_type not in VALID_DISCOUNT_TYPES:
            result.errors.append(f"Discount type must be one of {', '.join(VALID_DISCOUNT_TYPES)}")
            result.valid = False

        if coupon.category_type not in VALID_COUPON_CATEGORIES:
            result.errors.append(f"Category must be one of {', '.join(VALID_COUPON_CATEGORIES)}")
            result.valid = False

        if coupon.status not in VALID_STATUSES:
            result.errors.append(f"Status must be one of {', '.join(VALID_STATUSES)}")
            result.valid = False

        if coupon.discount_type == DISCOUNT_PERCENTAGE:
            if coupon.discount_value < 1:
                result.errors.append("Discount must be at least 1%")
                result.valid = False
            elif coupon.discount_value > self.max_percentage:
                result.errors.append(f"Discount cannot exceed {self.max_percentage:g}%")
                result.valid = False
        elif coupon.discount_type == DISCOUNT_AMOUNT and coupon.discount_value <= 0:
            result.errors.append("Discount amount must be greater than 0")
            result.valid = False

        # Warn if already expired
        if coupon.is_expired(now):
            result.warnings.append("Coupon has expired (expiry date is in the past)")

        return result

    def _check_valid(self, coupon: Coupon):
        """Reject coupons that break the admin form rules before they are stored."""
        validation = self.validate_coupon(coupon)
        if not validation.valid:
            raise ValueError("; ".join(validation.errors))

    def get_stats(self, now: Optional[datetime] = None) -> dict:
        """Get statistics about coupons."""
        coupons = self.list_coupons()
        now = now or datetime.now(timezone.utc)

        active = [c for c in coupons if c.is_active]
        expired = [c for c in coupons if c.is_expired(now)]
        by_category = {}
        for c in coupons:
            by_category[c.category_type] = by_category.get(c.category_type, 0) + 1

        return {
            'total': len(coupons),
            'active': len(active),
            'paused': len(coupons) - len(active),
            'expired': len(expired),
            'total_uses': sum(c.usage_count for c in coupons),
            'by_category': by_category,
        }

    def _generate_coupon_id(self) -> str:
        """Generate a unique coupon ID."""
        existing_ids = {c.coupon_id for c in self.list_coupons()}
        candidate = uuid.uuid4().hex[:12]
        while candidate in existing_ids:
            candidate = uuid.uuid4().hex[:12]
        return candidate

    def _write_coupons(self, coupons: list[Coupon]):
        """Write coupons back to CSV."""
        self.coupons_csv_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.coupons_csv_path, 'w', encoding='utf-8', newline='') as f:
            writer = csv.DictWriter(f, fieldnames=self.CSV_COLUMNS)
            writer.writeheader()
            for coupon in coupons:
                writer.writerow(coupon_to_csv_row(coupon))
