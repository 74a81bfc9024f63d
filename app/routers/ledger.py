# app/routers/ledger.py
from fastapi import APIRouter, Depends
from sqlmodel import SQLModel

from app.models.product import CatalogItem
from app.services.ledger_service import LedgerService
from app.services.product_service import ProductService
from app.storage import get_catalog, get_ledger

router = APIRouter(tags=["Ledger"])


class RefreshResult(SQLModel):
    orders: int
    sales: int
    missing_files: list[str]


@router.post(
    "/ledger/refresh",
    response_model=RefreshResult,
)
def refresh_ledger(
    ledger: LedgerService = Depends(get_ledger),
):
    """
    Reload orders and sales from disk, e.g. after another process
    changed the files.
    """
    ledger.refresh()
    return RefreshResult(
        orders=len(ledger.orders),
        sales=len(ledger.sales),
        missing_files=sorted(ledger.missing_files),
    )


@router.get(
    "/catalog/categories",
    response_model=list[str],
)
def list_categories(
    catalog: ProductService = Depends(get_catalog),
):
    return catalog.categories()


@router.get(
    "/catalog/items",
    response_model=list[CatalogItem],
)
def list_catalog_items(
    category: str | None = None,
    catalog: ProductService = Depends(get_catalog),
):
    return catalog.items(category)
