# app/schemas/order.py
from typing import Literal

from pydantic import ConfigDict, field_validator, model_validator
from sqlmodel import SQLModel, Field

from app.models.order import Order

PaymentMethodName = Literal["Cash", "GCash", "Maya"]

SortKey = Literal[
    "date_desc",
    "date_asc",
    "name_asc",
    "name_desc",
    "amount_desc",
    "amount_asc",
    "status",
]


class OrderLineItem(SQLModel):
    """
    One line on the order form: a catalog item and how many.
    """

    model_config = ConfigDict(extra="forbid")

    category: str
    name: str
    quantity: int = Field(gt=0)

    @field_validator("category", "name")
    @classmethod
    def not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("field cannot be empty")
        return v


class OrderCreate(SQLModel):
    """
    Payload for entering a new order.

    User provides:
      - customer_name, contact_number
      - items (at least one)
      - payment_method
      - cash_received (Cash) or reference_number + timestamp (GCash/Maya)

    Backend derives:
      - order_id (WP<today>-<seq>)
      - totals from catalog prices
      - order_status = 'Pending', payment_status = 'Unpaid'
    """

    model_config = ConfigDict(extra="forbid")

    customer_name: str
    contact_number: str
    items: list[OrderLineItem]
    payment_method: PaymentMethodName
    cash_received: str | None = None
    reference_number: str | None = None
    timestamp: str | None = None

    @field_validator("customer_name", "contact_number")
    @classmethod
    def not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("field cannot be empty")
        return v

    @field_validator("cash_received", "reference_number", "timestamp", mode="before")
    @classmethod
    def normalize_optional(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = str(v).strip()
        return v or None

    @model_validator(mode="after")
    def has_items(self) -> "OrderCreate":
        if not self.items:
            raise ValueError("add at least one item")
        return self


class OrderRead(SQLModel):
    """
    Flat view of an order, with the payment variant spelled out.
    """

    order_id: str
    customer_name: str
    contact_number: str
    items_ordered: str
    total_items: str
    total_amount: str
    payment_method: str
    order_date_time: str
    order_status: str
    payment_status: str
    reference_number: str
    cash_or_timestamp: str

    @classmethod
    def from_order(cls, order: Order) -> "OrderRead":
        return cls(
            order_id=order.order_id,
            customer_name=order.customer_name,
            contact_number=order.contact_number,
            items_ordered=order.items_ordered,
            total_items=order.total_items,
            total_amount=order.total_amount,
            payment_method=order.payment_method,
            order_date_time=order.order_date_time,
            order_status=order.order_status,
            payment_status=order.payment_status,
            reference_number=order.reference_number,
            cash_or_timestamp=order.cash_or_timestamp,
        )


class OrderStatusUpdate(SQLModel):
    """
    Payload to change order status. Validated by the service so an
    unknown value is reported as InvalidStatus, not a 422.
    """

    model_config = ConfigDict(extra="forbid")

    status: str


class PaymentStatusUpdate(SQLModel):
    model_config = ConfigDict(extra="forbid")

    status: str


class OrderPage(SQLModel):
    """
    One page of the filtered/sorted order list.
    """

    items: list[OrderRead]
    page: int
    page_size: int
    total: int
    total_pages: int


class RecalculatedTotal(SQLModel):
    order_id: str
    recorded_total: float
    recalculated_total: float
    matches: bool
