# app/storage.py
from datetime import datetime
from typing import Callable

from fastapi import Depends, Request

from app.core.config import Settings
from app.repositories.order_repo import OrderRepository
from app.repositories.product_repo import ProductRepository
from app.repositories.sale_repo import SaleRepository
from app.services.ledger_service import LedgerService
from app.services.order_service import OrderService
from app.services.product_service import ProductService
from app.services.query_service import QueryService
from app.services.sale_service import SaleService
from app.services.stats_service import StatsService

# ---------------------------------------------------------
# Ledger wiring
#
# One LedgerService per application, created in the lifespan
# handler and kept on app.state. Routers never touch files or
# app.state directly; they receive services through Depends().
# ---------------------------------------------------------


def create_ledger(settings: Settings) -> LedgerService:
    """
    Build the ledger over the configured files and load it once.
    """
    ledger = LedgerService(
        OrderRepository(settings.orders_path),
        SaleRepository(settings.sales_path),
    )
    ledger.refresh()
    return ledger


def create_catalog(settings: Settings) -> ProductService:
    repo = ProductRepository(settings.products_path, settings.CURRENCY_SYMBOL)
    return ProductService.from_repository(repo, default_price=settings.DEFAULT_ITEM_PRICE)


def get_settings_dep(request: Request) -> Settings:
    return request.app.state.settings


def get_clock(request: Request) -> Callable[[], datetime]:
    return request.app.state.clock


def get_ledger(request: Request) -> LedgerService:
    """
    FastAPI dependency that yields the shared LedgerService.

    Usage:

        @router.get("/example")
        def example_endpoint(ledger: LedgerService = Depends(get_ledger)):
            ...
    """
    return request.app.state.ledger


def get_catalog(request: Request) -> ProductService:
    return request.app.state.catalog


def get_order_service(
    ledger: LedgerService = Depends(get_ledger),
    catalog: ProductService = Depends(get_catalog),
    settings: Settings = Depends(get_settings_dep),
    clock: Callable[[], datetime] = Depends(get_clock),
) -> OrderService:
    return OrderService(ledger, catalog, settings.CURRENCY_SYMBOL, now=clock)


def get_sale_service(
    ledger: LedgerService = Depends(get_ledger),
    clock: Callable[[], datetime] = Depends(get_clock),
) -> SaleService:
    return SaleService(ledger, now=clock)


def get_query_service(
    ledger: LedgerService = Depends(get_ledger),
    settings: Settings = Depends(get_settings_dep),
    clock: Callable[[], datetime] = Depends(get_clock),
) -> QueryService:
    return QueryService(ledger, settings.CURRENCY_SYMBOL, now=clock)


def get_stats_service(
    ledger: LedgerService = Depends(get_ledger),
    settings: Settings = Depends(get_settings_dep),
    clock: Callable[[], datetime] = Depends(get_clock),
) -> StatsService:
    return StatsService(ledger, settings.CURRENCY_SYMBOL, now=clock)
