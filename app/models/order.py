# app/models/order.py
from enum import Enum
from typing import Literal

from sqlmodel import SQLModel, Field


class OrderStatus(str, Enum):
    PENDING = "Pending"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"


class PaymentStatus(str, Enum):
    UNPAID = "Unpaid"
    PAID = "Paid"
    FAILED = "Failed"
    REFUNDED = "Refunded"


class PaymentMethod(str, Enum):
    CASH = "Cash"
    GCASH = "GCash"
    MAYA = "Maya"


ORDER_STATUSES: list[str] = [s.value for s in OrderStatus]
PAYMENT_STATUSES: list[str] = [s.value for s in PaymentStatus]
PAYMENT_METHODS: list[str] = [m.value for m in PaymentMethod]

# Old files carry a single status; payment status is back-filled from it once, at load.
LEGACY_PAYMENT_STATUS: dict[str, str] = {
    OrderStatus.COMPLETED.value: PaymentStatus.PAID.value,
    OrderStatus.CANCELLED.value: PaymentStatus.REFUNDED.value,
    OrderStatus.PENDING.value: PaymentStatus.UNPAID.value,
    OrderStatus.IN_PROGRESS.value: PaymentStatus.UNPAID.value,
}


def legacy_payment_status(order_status: str) -> str:
    return LEGACY_PAYMENT_STATUS.get(order_status, PaymentStatus.UNPAID.value)


class CashPayment(SQLModel):
    """
    Cash tender. `amount` is the cash handed over, as written on the form.
    """

    kind: Literal["cash"] = "cash"
    amount: str = ""


class DigitalPayment(SQLModel):
    """
    GCash / Maya transfer identified by the wallet's reference number
    and the timestamp printed on the customer's receipt.
    """

    kind: Literal["digital"] = "digital"
    reference: str = ""
    timestamp: str = ""


PaymentDetails = CashPayment | DigitalPayment


class Order(SQLModel):
    """
    One row of orders.txt.

    Amounts and dates are kept exactly as written in the ledger
    ("₱90.00", "Jan 26, 2025 3:45 PM"); analytics parse them on demand.
    """

    order_id: str = Field(description="WP<YYYYMMDD>-<seq>")
    customer_name: str = ""
    contact_number: str = ""

    # "2x Classic; 1x Tropiham"
    items_ordered: str = ""
    total_items: str = "0"
    total_amount: str = ""

    payment_method: str = PaymentMethod.CASH.value
    order_date_time: str = ""

    order_status: str = OrderStatus.PENDING.value
    payment_status: str = PaymentStatus.UNPAID.value

    payment: PaymentDetails = Field(default_factory=CashPayment)

    @property
    def is_cash(self) -> bool:
        return isinstance(self.payment, CashPayment)

    @property
    def reference_number(self) -> str:
        if isinstance(self.payment, DigitalPayment):
            return self.payment.reference
        return ""

    @property
    def cash_or_timestamp(self) -> str:
        """Value of the shared ledger column: cash amount or wallet timestamp."""
        if isinstance(self.payment, DigitalPayment):
            return self.payment.timestamp
        return self.payment.amount

    @property
    def sequence(self) -> int | None:
        """Daily sequence number, e.g. 3 for 'WP20250624-003'."""
        _, _, seq = self.order_id.rpartition("-")
        return int(seq) if seq.isdigit() else None


def build_payment(payment_method: str, reference: str, cash_or_timestamp: str) -> PaymentDetails:
    """Pick the payment variant from the method column of a ledger row."""
    if payment_method == PaymentMethod.CASH.value:
        return CashPayment(amount=cash_or_timestamp)
    return DigitalPayment(reference=reference, timestamp=cash_or_timestamp)
