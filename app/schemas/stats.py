# app/schemas/stats.py
from datetime import date
from typing import Literal

from pydantic import ConfigDict
from sqlmodel import SQLModel

GrowthSignal = Literal["no_data", "new_sales", "change"]
ComparisonSignal = Literal["no_data", "new_sales", "up", "down", "same"]


class DateWindow(SQLModel):
    """
    Inclusive [start, end] date range resolved from a period name.
    """
    model_config = ConfigDict(extra="forbid")

    period: str
    start: date
    end: date

    @property
    def days(self) -> int:
        return (self.end - self.start).days + 1

    def contains(self, day: date | None) -> bool:
        return day is not None and self.start <= day <= self.end


class GrowthRate(SQLModel):
    """
    Revenue change versus the previous window of equal length.

    signal:
      - no_data   : both windows have zero revenue (percent = 0)
      - new_sales : previous window had none, current has some (percent = None)
      - change    : ordinary percentage delta
    """
    model_config = ConfigDict(extra="forbid")

    signal: GrowthSignal
    percent: float | None
    current_revenue: float
    previous_revenue: float


class KpiSummary(SQLModel):
    """
    KPI cards for one resolved window.
    """
    model_config = ConfigDict(extra="forbid")

    window: DateWindow
    total_orders: int
    completed_orders: int
    completion_rate: float
    total_revenue: float
    avg_order_value: float
    customer_retention: float
    growth: GrowthRate
    best_selling_item: str | None


class SeriesPoint(SQLModel):
    label: str
    value: float


class ItemQuantity(SQLModel):
    name: str
    quantity: int


class ChartData(SQLModel):
    """
    Data behind the analytics charts (rendering happens client-side).
    """
    model_config = ConfigDict(extra="forbid")

    window: DateWindow
    daily_revenue: list[SeriesPoint]
    monthly_revenue: list[SeriesPoint]
    top_items: list[ItemQuantity]
    revenue_by_item: list[SeriesPoint]


class DailySalesSummary(SQLModel):
    """
    Sales view cards for a single day.
    """
    model_config = ConfigDict(extra="forbid")

    day: date
    total_sales: float
    transactions: int
    average_ticket: float
    digital_payment_ratio: float


class StatusCounts(SQLModel):
    pending: int = 0
    in_progress: int = 0
    completed: int = 0
    cancelled: int = 0


class DailyOverview(SQLModel):
    """
    Overview cards: today's orders against yesterday's.
    """
    model_config = ConfigDict(extra="forbid")

    day: date
    total_orders: int
    status_counts: StatusCounts
    gross_sales: float
    previous_gross_sales: float
    comparison: ComparisonSignal
    change_percent: float | None
    avg_order_value: float
    completion_rate: float
