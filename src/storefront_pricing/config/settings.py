"""
Centralized settings and path configuration for storefront pricing.
"""
import os
from pathlib import Path
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv


def get_default_data_dir() -> Path:
    """Bundled sample data shipped with the package."""
    return Path(__file__).resolve().parent.parent / 'data'


@dataclass
class Settings:
    """Application settings with sensible defaults."""

    # Data paths
    data_dir: Path
    products_csv: Path
    coupons_csv: Path
    rental_plans_csv: Path

    # Pricing
    tax_rate: float = 0.18
    shipping_cost: float = 100.00
    currency_symbol: str = "₹"

    # Coupon limits (admin form rules)
    max_percentage_discount: float = 90.0
    min_code_length: int = 3
    max_code_length: int = 20

    # API server
    api_host: str = "127.0.0.1"
    api_port: int = 8000

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"

    @classmethod
    def load(cls, data_dir: Optional[Path] = None) -> 'Settings':
        """Load settings from the environment, falling back to bundled data."""
        load_dotenv()

        env_dir = os.getenv("STOREFRONT_DATA_DIR")
        root = Path(data_dir or env_dir or get_default_data_dir())

        return cls(
            data_dir=root,
            products_csv=root / 'products.csv',
            coupons_csv=root / 'coupons.csv',
            rental_plans_csv=root / 'rental_plans.csv',
            tax_rate=float(os.getenv("STOREFRONT_TAX_RATE", "0.18")),
            shipping_cost=float(os.getenv("STOREFRONT_SHIPPING_COST", "100.00")),
            api_host=os.getenv("STOREFRONT_API_HOST", "127.0.0.1"),
            api_port=int(os.getenv("STOREFRONT_API_PORT", "8000")),
            log_level=os.getenv("STOREFRONT_LOG_LEVEL", "INFO"),
            log_format=os.getenv("STOREFRONT_LOG_FORMAT", "json"),
        )


# Default settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings.load()
    return _settings
