# app/repositories/product_repo.py
import logging
from pathlib import Path

from app.core import line_codec
from app.core.exceptions import LedgerNotFound
from app.core.parsing import parse_amount
from app.models.product import CatalogItem

logger = logging.getLogger(__name__)


class ProductRepository:
    """
    Read-only access to products.txt.

    - One product per line: category|name|description|price
    - Lines with the wrong number of parts are skipped.
    """

    def __init__(self, path: Path | str, currency_symbol: str = "₱"):
        self.path = Path(path)
        self.currency_symbol = currency_symbol

    def load_all(self) -> list[CatalogItem]:
        if not self.path.exists():
            raise LedgerNotFound(str(self.path))

        items: list[CatalogItem] = []
        for lineno, line in enumerate(
            self.path.read_text(encoding="utf-8").splitlines(), start=1
        ):
            if not line_codec.is_data_line(line):
                continue
            parts = [p.strip() for p in line.split("|")]
            if len(parts) != 4:
                logger.warning(f"⚠️ Skipping product line {lineno}: expected 4 parts")
                continue
            category, name, description, price = parts
            items.append(
                CatalogItem(
                    category=category,
                    name=name,
                    description=description,
                    price=parse_amount(price, self.currency_symbol),
                )
            )
        logger.info(f"🍽️ Loaded {len(items)} products from {self.path}")
        return items
