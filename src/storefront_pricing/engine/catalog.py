"""
Product catalog - loads products.csv and resolves cart entries to line items.
"""
import logging
from pathlib import Path
from typing import Optional

import pandas as pd

from .models import LineItem, VALID_CATEGORIES

logger = logging.getLogger(__name__)

CATALOG_COLUMNS = ['id', 'name', 'price', 'category']


class Catalog:
    """Product table indexed by product id."""

    def __init__(self, products_path: Optional[Path] = None, products: Optional[pd.DataFrame] = None):
        if products is None:
            if products_path is None or not products_path.exists():
                raise FileNotFoundError(f"products.csv not found at {products_path}.")
            products = pd.read_csv(products_path, dtype={'id': str})

        missing = [c for c in CATALOG_COLUMNS if c not in products.columns]
        if missing:
            raise ValueError(f"Catalog is missing columns: {', '.join(missing)}")

        products = products[CATALOG_COLUMNS].copy()
        products['id'] = products['id'].astype(str).str.strip()
        products['category'] = products['category'].astype(str).str.strip()
        products['name'] = products['name'].fillna('')
        products['price'] = pd.to_numeric(products['price'], errors='coerce')

        # Rows that can't be priced or categorised never reach the cart
        unpriced = products['price'].isna() | (products['price'] < 0)
        if unpriced.any():
            logger.warning("Dropping %d catalog rows without a valid price", int(unpriced.sum()))
        unknown = ~products['category'].isin(VALID_CATEGORIES)
        if unknown.any():
            logger.warning(
                "Dropping %d catalog rows outside %s",
                int(unknown.sum()),
                ", ".join(VALID_CATEGORIES),
            )
        products = products[~unpriced & ~unknown]

        # Handle potential duplicates by keeping the first entry
        self.products = products.drop_duplicates('id').set_index('id')

    def __len__(self) -> int:
        return len(self.products)

    def __contains__(self, product_id) -> bool:
        return str(product_id).strip() in self.products.index

    def get(self, product_id: str, quantity: int = 1) -> LineItem:
        """Build a line item for a product. Raises KeyError for unknown ids."""
        product_id = str(product_id).strip()
        if product_id not in self.products.index:
            raise KeyError(product_id)
        row = self.products.loc[product_id]
        return LineItem(
            id=product_id,
            price=float(row['price']),
            quantity=quantity,
            category=row['category'],
            name=row['name'],
        )

    def resolve(self, items: dict[str, int]) -> tuple[list[LineItem], list[str]]:
        """
        Resolve {product_id: quantity} into line items.

        Returns (line_items, warnings). Unknown ids and non-positive
        quantities are skipped with a warning.
        """
        lines = []
        warnings = []
        for product_id, qty in items.items():
            if product_id not in self:
                warnings.append(f"Unknown product {product_id} skipped")
                continue
            if qty < 1:
                warnings.append(f"Quantity {qty} for product {product_id} skipped")
                continue
            lines.append(self.get(product_id, qty))
        return lines, warnings
