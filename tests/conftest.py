# tests/conftest.py
from datetime import datetime

import pytest
from fastapi.testclient import TestClient

from app.core.config import Settings
from app.main import create_app
from app.models.product import CatalogItem
from app.repositories.order_repo import ORDERS_HEADER, OrderRepository
from app.repositories.sale_repo import SALES_HEADER, SaleRepository
from app.services.ledger_service import LedgerService
from app.services.product_service import ProductService

FIXED_NOW = datetime(2025, 1, 26, 15, 45)

ORDER_LINES = [
    'WP20250126-001,Ana Cruz,09171234567,"2x Classic; 1x Tropiham",3,₱155.00,Cash,"Jan 26, 2025 9:15 AM",Completed,"","200.00",Paid',
    'WP20250126-002,Ben Reyes,09180000000,"1x Banana Split",1,₱65.00,GCash,"Jan 26, 2025 10:30 AM",Pending,"GC123","01/26/2025 10:29 AM",Unpaid',
    'WP20250125-001,Carla Diaz,09190000000,"3x Classic",3,₱135.00,Maya,"Jan 25, 2025 4:00 PM",Completed,"MY777","01/25/2025 3:58 PM",Paid',
]

SALE_LINES = [
    'S001,WP20250125-001,Carla Diaz,09190000000,"3x Classic",3,₱135.00,Maya,"Jan 25, 2025 4:05 PM","MY777",0.00',
]

PRODUCT_LINES = [
    "Classic Waffles|Classic|Plain golden waffle|45.00",
    "Classic Waffles|Tropiham|Ham and pineapple|65.00",
    "Premium Waffles|Banana Split|Banana, chocolate and nuts|65.00",
]


def write_lines(path, header, lines):
    path.write_text("\n".join([header, *lines]) + "\n", encoding="utf-8")


@pytest.fixture
def clock():
    return lambda: FIXED_NOW


@pytest.fixture
def orders_path(tmp_path):
    return tmp_path / "orders.txt"


@pytest.fixture
def sales_path(tmp_path):
    return tmp_path / "sales.txt"


@pytest.fixture
def seeded_files(tmp_path, orders_path, sales_path):
    """Sample orders, sales and products on disk."""
    write_lines(orders_path, ORDERS_HEADER, ORDER_LINES)
    write_lines(sales_path, SALES_HEADER, SALE_LINES)
    (tmp_path / "products.txt").write_text("\n".join(PRODUCT_LINES) + "\n", encoding="utf-8")
    return tmp_path


@pytest.fixture
def empty_ledger(orders_path, sales_path):
    ledger = LedgerService(OrderRepository(orders_path), SaleRepository(sales_path))
    ledger.refresh()
    return ledger


@pytest.fixture
def ledger(seeded_files, orders_path, sales_path):
    ledger = LedgerService(OrderRepository(orders_path), SaleRepository(sales_path))
    ledger.refresh()
    return ledger


@pytest.fixture
def catalog():
    return ProductService(
        [
            CatalogItem(category="Classic Waffles", name="Classic", price=45.0),
            CatalogItem(category="Classic Waffles", name="Tropiham", price=65.0),
            CatalogItem(category="Premium Waffles", name="Banana Split", price=65.0),
        ]
    )


@pytest.fixture
def settings(tmp_path):
    return Settings(DATA_DIR=str(tmp_path))


@pytest.fixture
def client(seeded_files, settings, clock):
    app = create_app(settings, clock=clock)
    with TestClient(app) as c:
        yield c
