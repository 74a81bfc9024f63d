# app/routers/sales.py
from fastapi import APIRouter, Depends, Query

from app.core.config import Settings
from app.schemas.sale import SalePage, SaleSortKey
from app.services.query_service import QueryService
from app.storage import get_query_service, get_settings_dep

router = APIRouter(prefix="/sales", tags=["Sales"])


@router.get(
    "",
    response_model=SalePage,
)
def list_sales(
    q: str | None = None,
    payment_method: str = "All",
    sort: SaleSortKey = "date_desc",
    page: int = 1,
    page_size: int | None = Query(None, gt=0),
    service: QueryService = Depends(get_query_service),
    settings: Settings = Depends(get_settings_dep),
):
    """
    List recorded sales.

    - q matches sale id, order id, customer name and items
    - payment_method: Cash | GCash | Maya | All
    """
    return service.sale_page(
        text=q,
        payment_method=payment_method,
        sort_by=sort,
        page=page,
        page_size=page_size or settings.SALES_PAGE_SIZE,
    )
