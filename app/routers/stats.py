# app/routers/stats.py
from datetime import date

from fastapi import APIRouter, Depends, Query

from app.schemas.stats import ChartData, DailyOverview, DailySalesSummary, KpiSummary
from app.services.stats_service import StatsService
from app.storage import get_stats_service

router = APIRouter(prefix="/stats", tags=["Stats"])


@router.get(
    "/kpis",
    response_model=KpiSummary,
)
def get_kpis(
    period: str = "Last 30 Days",
    service: StatsService = Depends(get_stats_service),
):
    """
    KPI cards for a period.

    Query params (optional):
      - period: Today | This Week | Last 7 Days | Last 14 Days |
                Last 30 Days | Last 90 Days | This Month | This Year
        (anything else falls back to Last 30 Days)
    """
    return service.kpis(period)


@router.get(
    "/charts",
    response_model=ChartData,
)
def get_charts(
    period: str = "Last 30 Days",
    top_n: int = Query(10, gt=0, le=50),
    service: StatsService = Depends(get_stats_service),
):
    return service.charts(period, top_n=top_n)


@router.get(
    "/daily-sales",
    response_model=DailySalesSummary,
)
def get_daily_sales(
    day: date | None = None,
    service: StatsService = Depends(get_stats_service),
):
    """
    Sales cards for one day (defaults to today).
    """
    return service.daily_sales(day)


@router.get(
    "/overview",
    response_model=DailyOverview,
)
def get_overview(
    day: date | None = None,
    service: StatsService = Depends(get_stats_service),
):
    """
    Orders and gross sales for a day compared with the day before.
    """
    return service.overview(day)
