# app/models/sale.py
from sqlmodel import SQLModel, Field


class SalesRecord(SQLModel):
    """
    One row of sales.txt, written once when an order is finalized.

    Values are copied from the source order at that moment; later edits
    to the order never reach the sale.
    """

    sale_id: str = Field(description="S<seq>, globally increasing")
    order_id: str
    customer_name: str = ""
    contact_number: str = ""
    items_sold: str = ""
    total_items: str = "0"
    sale_amount: str = ""
    payment_method: str = ""
    sale_date_time: str = ""
    payment_reference: str = ""
    cash_received: str = "0.00"
