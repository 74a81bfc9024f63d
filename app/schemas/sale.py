# app/schemas/sale.py
from typing import Literal

from sqlmodel import SQLModel

from app.models.sale import SalesRecord

SaleSortKey = Literal["date_desc", "date_asc", "amount_desc", "amount_asc"]


class SalePage(SQLModel):
    """
    One page of the sales list.
    """

    items: list[SalesRecord]
    page: int
    page_size: int
    total: int
    total_pages: int


class FinalizeResult(SQLModel):
    """
    Outcome of finalizing an order.

    created=False means a sale already existed for the order and was
    returned unchanged.
    """

    sale: SalesRecord
    created: bool
