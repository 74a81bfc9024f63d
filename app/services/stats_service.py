# app/services/stats_service.py
from collections import defaultdict
from datetime import date, datetime, timedelta
from typing import Callable, Iterable, Sequence

from app.core.parsing import parse_amount, parse_items, parse_ledger_date
from app.models.order import Order, OrderStatus, PaymentMethod
from app.models.sale import SalesRecord
from app.schemas.stats import (
    ChartData,
    DailyOverview,
    DailySalesSummary,
    DateWindow,
    GrowthRate,
    ItemQuantity,
    KpiSummary,
    SeriesPoint,
    StatusCounts,
)
from app.services.ledger_service import LedgerService

DEFAULT_PERIOD = "Last 30 Days"

_LAST_N_DAYS = {
    "Last 7 Days": 7,
    "Last 14 Days": 14,
    "Last 30 Days": 30,
    "Last 90 Days": 90,
}


# -------- Windows --------


def resolve_window(period: str | None, today: date) -> DateWindow:
    """
    Map a period name to an inclusive [start, end] ending today.

    Unknown names resolve to "Last 30 Days".
    """
    name = (period or "").strip()
    if name == "Today":
        start = today
    elif name == "This Week":
        start = today - timedelta(days=today.weekday())  # Monday
    elif name in _LAST_N_DAYS:
        start = today - timedelta(days=_LAST_N_DAYS[name] - 1)
    elif name == "This Month":
        start = today.replace(day=1)
    elif name == "This Year":
        start = today.replace(month=1, day=1)
    else:
        name = DEFAULT_PERIOD
        start = today - timedelta(days=_LAST_N_DAYS[DEFAULT_PERIOD] - 1)
    return DateWindow(period=name, start=start, end=today)


def previous_window(window: DateWindow) -> DateWindow:
    """The window of equal length that ends the day before `window` starts."""
    end = window.start - timedelta(days=1)
    start = end - timedelta(days=window.days - 1)
    return DateWindow(period=f"Before {window.period}", start=start, end=end)


def orders_in(orders: Iterable[Order], window: DateWindow) -> list[Order]:
    return [o for o in orders if window.contains(parse_ledger_date(o.order_date_time))]


def sales_in(sales: Iterable[SalesRecord], window: DateWindow) -> list[SalesRecord]:
    return [s for s in sales if window.contains(parse_ledger_date(s.sale_date_time))]


# -------- Aggregates --------


def _pct(part: float, whole: float) -> float:
    return round(part * 100.0 / whole, 2) if whole else 0.0


def revenue(sales: Iterable[SalesRecord], currency_symbol: str = "₱") -> float:
    return round(sum(parse_amount(s.sale_amount, currency_symbol) for s in sales), 2)


def _customer_key(sale: SalesRecord) -> str:
    return sale.contact_number.strip() or sale.customer_name.strip().lower()


def customer_retention(sales: Sequence[SalesRecord]) -> float:
    """
    Share of distinct customers (by contact number, else name) with more
    than one purchase.
    """
    purchases: dict[str, int] = defaultdict(int)
    for sale in sales:
        key = _customer_key(sale)
        if key:
            purchases[key] += 1
    repeat = sum(1 for count in purchases.values() if count > 1)
    return _pct(repeat, len(purchases))


def growth_rate(current_revenue: float, previous_revenue: float) -> GrowthRate:
    if previous_revenue == 0 and current_revenue == 0:
        return GrowthRate(signal="no_data", percent=0.0, current_revenue=0.0, previous_revenue=0.0)
    if previous_revenue == 0:
        return GrowthRate(
            signal="new_sales",
            percent=None,
            current_revenue=current_revenue,
            previous_revenue=0.0,
        )
    return GrowthRate(
        signal="change",
        percent=round((current_revenue - previous_revenue) / previous_revenue * 100.0, 2),
        current_revenue=current_revenue,
        previous_revenue=previous_revenue,
    )


def item_quantities(sales: Iterable[SalesRecord]) -> dict[str, int]:
    totals: dict[str, int] = defaultdict(int)
    for sale in sales:
        for quantity, name in parse_items(sale.items_sold):
            totals[name or "Unknown"] += quantity
    return dict(totals)


def rank_items(totals: dict[str, float]) -> list[tuple[str, float]]:
    """Highest value first; ties broken alphabetically (case-insensitive)."""
    return sorted(totals.items(), key=lambda kv: (-kv[1], kv[0].lower(), kv[0]))


def best_selling_item(sales: Iterable[SalesRecord]) -> str | None:
    ranked = rank_items(item_quantities(sales))
    return ranked[0][0] if ranked else None


def status_counts(orders: Iterable[Order]) -> StatusCounts:
    counts = StatusCounts()
    for order in orders:
        if order.order_status == OrderStatus.PENDING.value:
            counts.pending += 1
        elif order.order_status == OrderStatus.IN_PROGRESS.value:
            counts.in_progress += 1
        elif order.order_status == OrderStatus.COMPLETED.value:
            counts.completed += 1
        elif order.order_status == OrderStatus.CANCELLED.value:
            counts.cancelled += 1
    return counts


def compute_kpis(
    orders: Sequence[Order],
    sales: Sequence[SalesRecord],
    period: str | None,
    today: date,
    currency_symbol: str = "₱",
) -> KpiSummary:
    """
    KPI cards for a period.

      - total/completed orders and completion rate come from orders dated
        inside the window
      - revenue, retention and best seller come from sales inside it
      - average order value is revenue per completed order
      - growth compares revenue with the preceding window of equal length
    """
    window = resolve_window(period, today)
    window_orders = orders_in(orders, window)
    window_sales = sales_in(sales, window)

    total_orders = len(window_orders)
    completed = sum(1 for o in window_orders if o.order_status == OrderStatus.COMPLETED.value)
    total_revenue = revenue(window_sales, currency_symbol)
    previous_revenue = revenue(sales_in(sales, previous_window(window)), currency_symbol)

    return KpiSummary(
        window=window,
        total_orders=total_orders,
        completed_orders=completed,
        completion_rate=_pct(completed, total_orders),
        total_revenue=total_revenue,
        avg_order_value=round(total_revenue / completed, 2) if completed else 0.0,
        customer_retention=customer_retention(window_sales),
        growth=growth_rate(total_revenue, previous_revenue),
        best_selling_item=best_selling_item(window_sales),
    )


def build_charts(
    sales: Sequence[SalesRecord],
    period: str | None,
    today: date,
    currency_symbol: str = "₱",
    top_n: int = 10,
    revenue_top_n: int = 8,
) -> ChartData:
    window = resolve_window(period, today)
    window_sales = sales_in(sales, window)

    daily: dict[date, float] = defaultdict(float)
    monthly: dict[tuple[int, int], float] = defaultdict(float)
    by_item: dict[str, float] = defaultdict(float)

    for sale in window_sales:
        amount = parse_amount(sale.sale_amount, currency_symbol)
        day = parse_ledger_date(sale.sale_date_time)
        if day is not None:
            daily[day] += amount
            monthly[(day.year, day.month)] += amount
        items = parse_items(sale.items_sold)
        if items:
            # approximate: the sale amount is spread evenly over its item tokens
            share = amount / len(items)
            for _, name in items:
                by_item[name or "Unknown"] += share

    return ChartData(
        window=window,
        daily_revenue=[
            SeriesPoint(label=day.isoformat(), value=round(value, 2))
            for day, value in sorted(daily.items())
        ],
        monthly_revenue=[
            SeriesPoint(label=date(year, month, 1).strftime("%b %Y"), value=round(value, 2))
            for (year, month), value in sorted(monthly.items())
        ],
        top_items=[
            ItemQuantity(name=name, quantity=int(qty))
            for name, qty in rank_items(item_quantities(window_sales))[:top_n]
        ],
        revenue_by_item=[
            SeriesPoint(label=name, value=round(value, 2))
            for name, value in rank_items(by_item)[:revenue_top_n]
        ],
    )


def daily_sales_summary(sales: Sequence[SalesRecord], day: date, currency_symbol: str = "₱") -> DailySalesSummary:
    todays = [s for s in sales if parse_ledger_date(s.sale_date_time) == day]
    total = revenue(todays, currency_symbol)
    digital = sum(1 for s in todays if s.payment_method != PaymentMethod.CASH.value)
    return DailySalesSummary(
        day=day,
        total_sales=total,
        transactions=len(todays),
        average_ticket=round(total / len(todays), 2) if todays else 0.0,
        digital_payment_ratio=_pct(digital, len(todays)),
    )


def _gross_sales(orders: Iterable[Order], currency_symbol: str) -> float:
    return round(
        sum(
            parse_amount(o.total_amount, currency_symbol)
            for o in orders
            if o.order_status == OrderStatus.COMPLETED.value
        ),
        2,
    )


def daily_overview(orders: Sequence[Order], day: date, currency_symbol: str = "₱") -> DailyOverview:
    """
    Today's order cards compared with yesterday.

    Gross sales count Completed orders only.
    """
    yesterday = day - timedelta(days=1)
    todays = [o for o in orders if parse_ledger_date(o.order_date_time) == day]
    yesterdays = [o for o in orders if parse_ledger_date(o.order_date_time) == yesterday]

    counts = status_counts(todays)
    gross = _gross_sales(todays, currency_symbol)
    previous = _gross_sales(yesterdays, currency_symbol)

    change: float | None = None
    if previous == 0 and gross > 0:
        comparison = "new_sales"
    elif previous == 0 and gross == 0:
        comparison = "no_data"
    elif gross > previous:
        comparison = "up"
        change = round((gross - previous) / previous * 100.0, 2)
    elif gross < previous:
        comparison = "down"
        change = round((previous - gross) / previous * 100.0, 2)
    else:
        comparison = "same"
        change = 0.0

    return DailyOverview(
        day=day,
        total_orders=len(todays),
        status_counts=counts,
        gross_sales=gross,
        previous_gross_sales=previous,
        comparison=comparison,
        change_percent=change,
        avg_order_value=round(gross / counts.completed, 2) if counts.completed else 0.0,
        completion_rate=_pct(counts.completed, len(todays)),
    )


class StatsService:
    """
    Orchestrates dashboard statistics over the in-memory ledger.
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

    def _today(self) -> date:
        return self.now().date()

    def kpis(self, period: str | None = None) -> KpiSummary:
        return compute_kpis(
            self.ledger.orders,
            self.ledger.sales,
            period,
            self._today(),
            self.currency_symbol,
        )

    def charts(self, period: str | None = None, top_n: int = 10) -> ChartData:
        return build_charts(self.ledger.sales, period, self._today(), self.currency_symbol, top_n=top_n)

    def daily_sales(self, day: date | None = None) -> DailySalesSummary:
        return daily_sales_summary(self.ledger.sales, day or self._today(), self.currency_symbol)

    def overview(self, day: date | None = None) -> DailyOverview:
        return daily_overview(self.ledger.orders, day or self._today(), self.currency_symbol)

    def status_counts(self) -> StatusCounts:
        return status_counts(self.ledger.orders)
