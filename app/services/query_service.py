# app/services/query_service.py
import math
from datetime import datetime
from typing import Callable, Sequence, TypeVar

from app.core.parsing import parse_amount, parse_ledger_datetime
from app.models.order import Order
from app.models.sale import SalesRecord
from app.schemas.order import OrderPage, OrderRead
from app.schemas.sale import SalePage
from app.services.ledger_service import LedgerService

T = TypeVar("T")

ALL = "All"


# -------- Filtering --------


def matches_status(order: Order, status: str | None) -> bool:
    if not status or status == ALL:
        return True
    return order.order_status == status


def _contains(needle: str, *haystack: str | None) -> bool:
    return any(value and needle in value.lower() for value in haystack)


def matches_search(order: Order, text: str | None) -> bool:
    """Case-insensitive substring match on order id, customer name or items."""
    if not text or not text.strip():
        return True
    needle = text.strip().lower()
    return _contains(needle, order.order_id, order.customer_name, order.items_ordered)


def filter_orders(orders: Sequence[Order], status: str | None = None, text: str | None = None) -> list[Order]:
    return [o for o in orders if matches_status(o, status) and matches_search(o, text)]


def filter_sales(
    sales: Sequence[SalesRecord],
    text: str | None = None,
    payment_method: str | None = None,
) -> list[SalesRecord]:
    needle = text.strip().lower() if text and text.strip() else None
    result = []
    for sale in sales:
        if payment_method and payment_method != ALL and sale.payment_method != payment_method:
            continue
        if needle and not _contains(needle, sale.sale_id, sale.order_id, sale.customer_name, sale.items_sold):
            continue
        result.append(sale)
    return result


# -------- Sorting --------


def _sort_nulls_last(
    items: Sequence[T],
    key: Callable[[T], object | None],
    reverse: bool = False,
) -> list[T]:
    """
    Stable sort on key(item); items whose key is None go last in either
    direction.
    """
    present = [i for i in items if key(i) is not None]
    missing = [i for i in items if key(i) is None]
    return sorted(present, key=key, reverse=reverse) + missing


def _text_key(value: str | None) -> str | None:
    if value is None or not value.strip():
        return None
    return value.strip().lower()


def sort_orders(
    orders: Sequence[Order],
    sort_by: str = "date_desc",
    currency_symbol: str = "₱",
    now: datetime | None = None,
) -> list[Order]:
    """
    Sort keys: date_desc/date_asc (unparseable dates count as "now"),
    name_asc/name_desc (case-insensitive), amount_desc/amount_asc
    (currency-stripped), status (lexicographic). Unknown keys keep the
    input order.
    """
    moment = now or datetime.now()

    def date_key(o: Order) -> datetime:
        return parse_ledger_datetime(o.order_date_time) or moment

    def amount_key(o: Order) -> float | None:
        if not o.total_amount.strip():
            return None
        return parse_amount(o.total_amount, currency_symbol)

    if sort_by == "date_desc":
        return sorted(orders, key=date_key, reverse=True)
    if sort_by == "date_asc":
        return sorted(orders, key=date_key)
    if sort_by == "name_asc":
        return _sort_nulls_last(orders, lambda o: _text_key(o.customer_name))
    if sort_by == "name_desc":
        return _sort_nulls_last(orders, lambda o: _text_key(o.customer_name), reverse=True)
    if sort_by == "amount_desc":
        return _sort_nulls_last(orders, amount_key, reverse=True)
    if sort_by == "amount_asc":
        return _sort_nulls_last(orders, amount_key)
    if sort_by == "status":
        return _sort_nulls_last(orders, lambda o: _text_key(o.order_status))
    return list(orders)


def sort_sales(
    sales: Sequence[SalesRecord],
    sort_by: str = "date_desc",
    currency_symbol: str = "₱",
    now: datetime | None = None,
) -> list[SalesRecord]:
    moment = now or datetime.now()

    def date_key(s: SalesRecord) -> datetime:
        return parse_ledger_datetime(s.sale_date_time) or moment

    if sort_by == "date_desc":
        return sorted(sales, key=date_key, reverse=True)
    if sort_by == "date_asc":
        return sorted(sales, key=date_key)
    if sort_by == "amount_desc":
        return sorted(sales, key=lambda s: parse_amount(s.sale_amount, currency_symbol), reverse=True)
    if sort_by == "amount_asc":
        return sorted(sales, key=lambda s: parse_amount(s.sale_amount, currency_symbol))
    return list(sales)


# -------- Pagination --------


def total_pages(total: int, page_size: int) -> int:
    return max(1, math.ceil(total / page_size))


def clamp_page(page: int, total: int, page_size: int) -> int:
    return min(max(page, 1), total_pages(total, page_size))


def paginate(items: Sequence[T], page: int, page_size: int) -> tuple[list[T], int, int]:
    """
    Slice one page. Out-of-range page numbers are clamped into
    [1, total_pages] instead of raising.

    Returns (page_items, page, total_pages).
    """
    if page_size <= 0:
        raise ValueError("page_size must be positive")
    current = clamp_page(page, len(items), page_size)
    start = (current - 1) * page_size
    return list(items[start:start + page_size]), current, total_pages(len(items), page_size)


class QueryService:
    """
    Filtered, sorted, paginated views over the in-memory ledger.
    """

    def __init__(
        self,
        ledger: LedgerService,
        currency_symbol: str = "₱",
        now: Callable[[], datetime] = datetime.now,
    ):
        self.ledger = ledger
        self.currency_symbol = currency_symbol
        self.now = now

    def order_page(
        self,
        status: str | None = None,
        text: str | None = None,
        sort_by: str = "date_desc",
        page: int = 1,
        page_size: int = 15,
    ) -> OrderPage:
        matched = filter_orders(self.ledger.orders, status=status, text=text)
        ordered = sort_orders(matched, sort_by, self.currency_symbol, self.now())
        items, current, pages = paginate(ordered, page, page_size)
        return OrderPage(
            items=[OrderRead.from_order(o) for o in items],
            page=current,
            page_size=page_size,
            total=len(ordered),
            total_pages=pages,
        )

    def sale_page(
        self,
        text: str | None = None,
        payment_method: str | None = None,
        sort_by: str = "date_desc",
        page: int = 1,
        page_size: int = 10,
    ) -> SalePage:
        matched = filter_sales(self.ledger.sales, text=text, payment_method=payment_method)
        ordered = sort_sales(matched, sort_by, self.currency_symbol, self.now())
        items, current, pages = paginate(ordered, page, page_size)
        return SalePage(
            items=items,
            page=current,
            page_size=page_size,
            total=len(ordered),
            total_pages=pages,
        )
