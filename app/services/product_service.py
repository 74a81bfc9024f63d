# app/services/product_service.py
import logging
from typing import Protocol

from app.core.exceptions import LedgerNotFound
from app.models.product import CatalogItem
from app.repositories.product_repo import ProductRepository

logger = logging.getLogger(__name__)


class PriceLookup(Protocol):
    """
    The only catalog capability the ledger depends on.
    """

    def price_of(self, category: str, name: str, default: float | None = None) -> float | None:
        ...

    def price_of_name(self, name: str, default: float | None = None) -> float | None:
        ...


class ProductService:
    """
    Read-only catalog lookup keyed by (category, item name).

    Responsibilities:
      - Hold the products loaded from products.txt
      - Resolve unit prices, falling back to the caller's default
      - List categories for the order form
    """

    def __init__(self, items: list[CatalogItem], default_price: float = 45.0):
        self.default_price = default_price
        self._by_key: dict[tuple[str, str], CatalogItem] = {}
        self._by_name: dict[str, CatalogItem] = {}
        self._items = list(items)
        for item in self._items:
            self._by_key[(item.category.lower(), item.name.lower())] = item
            # first product wins when a name repeats across categories
            self._by_name.setdefault(item.name.lower(), item)

    @classmethod
    def from_repository(cls, repo: ProductRepository, default_price: float = 45.0) -> "ProductService":
        try:
            items = repo.load_all()
        except LedgerNotFound as e:
            logger.warning(f"⚠️ {e}; every item will use the default price")
            items = []
        return cls(items, default_price=default_price)

    def price_of(self, category: str, name: str, default: float | None = None) -> float | None:
        item = self._by_key.get((category.strip().lower(), name.strip().lower()))
        if item is None:
            return self.default_price if default is None else default
        return item.price

    def price_of_name(self, name: str, default: float | None = None) -> float | None:
        """
        Price lookup when only the item name survives (historical orders
        store "2x Classic", not the category).
        """
        item = self._by_name.get(name.strip().lower())
        if item is None:
            return self.default_price if default is None else default
        return item.price

    def categories(self) -> list[str]:
        return sorted({item.category for item in self._items}, key=str.lower)

    def items(self, category: str | None = None) -> list[CatalogItem]:
        if category is None:
            return list(self._items)
        wanted = category.strip().lower()
        return [item for item in self._items if item.category.lower() == wanted]
