# app/routers/orders.py
from fastapi import APIRouter, Depends, Query, status

from app.core.config import Settings
from app.schemas.order import (
    OrderCreate,
    OrderPage,
    OrderRead,
    OrderStatusUpdate,
    PaymentStatusUpdate,
    RecalculatedTotal,
    SortKey,
)
from app.schemas.sale import FinalizeResult
from app.schemas.stats import StatusCounts
from app.services.ledger_service import LedgerService
from app.services.order_service import OrderService
from app.services.query_service import QueryService
from app.services.sale_service import SaleService
from app.services.stats_service import StatsService
from app.storage import (
    get_ledger,
    get_order_service,
    get_query_service,
    get_sale_service,
    get_settings_dep,
    get_stats_service,
)

router = APIRouter(prefix="/orders", tags=["Orders"])


@router.get(
    "",
    response_model=OrderPage,
)
def list_orders(
    status_filter: str = Query("All", alias="status"),
    q: str | None = None,
    sort: SortKey = "date_desc",
    page: int = 1,
    page_size: int | None = Query(None, gt=0),
    service: QueryService = Depends(get_query_service),
    settings: Settings = Depends(get_settings_dep),
):
    """
    Filter, sort and paginate orders.

    Query params (optional):
      - status: one of the order statuses, or "All"
      - q: case-insensitive text matched against id, customer and items
      - sort: date_desc | date_asc | name_asc | name_desc |
              amount_desc | amount_asc | status
      - page: clamped into the valid range
    """
    return service.order_page(
        status=status_filter,
        text=q,
        sort_by=sort,
        page=page,
        page_size=page_size or settings.ORDERS_PAGE_SIZE,
    )


@router.post(
    "",
    response_model=OrderRead,
    status_code=status.HTTP_201_CREATED,
)
def create_order(
    payload: OrderCreate,
    service: OrderService = Depends(get_order_service),
):
    """
    Enter a new order. It starts Pending / Unpaid.
    """
    return OrderRead.from_order(service.create_order(payload))


@router.get(
    "/status-counts",
    response_model=StatusCounts,
)
def get_status_counts(
    service: StatsService = Depends(get_stats_service),
):
    return service.status_counts()


@router.get(
    "/{order_id}",
    response_model=OrderRead,
)
def get_order(
    order_id: str,
    ledger: LedgerService = Depends(get_ledger),
):
    return OrderRead.from_order(ledger.get_order(order_id))


@router.patch(
    "/{order_id}/status",
    response_model=OrderRead,
)
def update_order_status(
    order_id: str,
    payload: OrderStatusUpdate,
    service: OrderService = Depends(get_order_service),
):
    """
    Update order status. Any of Pending, In Progress, Completed,
    Cancelled may follow any other; payment status is not touched.
    """
    return OrderRead.from_order(service.set_order_status(order_id, payload.status))


@router.patch(
    "/{order_id}/payment-status",
    response_model=OrderRead,
)
def update_payment_status(
    order_id: str,
    payload: PaymentStatusUpdate,
    service: OrderService = Depends(get_order_service),
):
    return OrderRead.from_order(service.set_payment_status(order_id, payload.status))


@router.post(
    "/{order_id}/finalize",
    response_model=FinalizeResult,
)
def finalize_order(
    order_id: str,
    service: SaleService = Depends(get_sale_service),
):
    """
    Record the sale for a Completed order.

    Calling it again for the same order returns the existing sale
    with created=false.
    """
    sale, created = service.finalize_order(order_id)
    return FinalizeResult(sale=sale, created=created)


@router.get(
    "/{order_id}/recalculated-total",
    response_model=RecalculatedTotal,
)
def get_recalculated_total(
    order_id: str,
    service: OrderService = Depends(get_order_service),
):
    """
    Re-derive the order total from current catalog prices.
    """
    return service.recalculated_total(order_id)
