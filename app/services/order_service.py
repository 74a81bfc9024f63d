# app/services/order_service.py
import logging
from datetime import date, datetime
from typing import Callable

from app.core.exceptions import InvalidOrder, InvalidStatus, PersistenceFailure
from app.core.parsing import (
    format_amount,
    format_display_datetime,
    format_item_token,
    is_payment_timestamp,
    parse_amount,
    parse_items,
)
from app.models.order import (
    ORDER_STATUSES,
    PAYMENT_STATUSES,
    CashPayment,
    DigitalPayment,
    Order,
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
)
from app.schemas.order import OrderCreate, RecalculatedTotal
from app.services.ledger_service import LedgerService
from app.services.product_service import PriceLookup

logger = logging.getLogger(__name__)

ORDER_ID_PREFIX = "WP"


def next_order_id(orders: list[Order], today: date) -> str:
    """
    WP<YYYYMMDD>-<seq>: seq = number of ids already minted today + 1.

    Not safe on its own under concurrency; callers hold the ledger
    writer lock while minting and saving.
    """
    prefix = f"{ORDER_ID_PREFIX}{today.strftime('%Y%m%d')}"
    count = sum(1 for o in orders if o.order_id.startswith(prefix))
    return f"{prefix}-{count + 1:03d}"


def apply_order_status(order: Order, new_status: str) -> str:
    """
    Set order_status; any of the four values is reachable from any other.
    Payment status is left alone. Returns the previous value.
    """
    if new_status not in ORDER_STATUSES:
        raise InvalidStatus(new_status, ORDER_STATUSES)
    previous = order.order_status
    order.order_status = new_status
    return previous


def apply_payment_status(order: Order, new_status: str) -> str:
    if new_status not in PAYMENT_STATUSES:
        raise InvalidStatus(new_status, PAYMENT_STATUSES)
    previous = order.payment_status
    order.payment_status = new_status
    return previous


def recalculate_total(items_ordered: str, prices: PriceLookup, default_price: float | None = None) -> float:
    """
    Re-derive an order total from its item list and current catalog prices.
    """
    total = 0.0
    for quantity, name in parse_items(items_ordered):
        unit = prices.price_of_name(name, default_price)
        total += quantity * (unit or 0.0)
    return round(total, 2)


class OrderService:
    """
    Business logic for orders.

    Responsibilities:
      - Validate order entry (payment details, items)
      - Price line items through the catalog
      - Mint daily order ids
      - Change order / payment status, reverting memory if the save fails
    """

    def __init__(
        self,
        ledger: LedgerService,
        catalog: PriceLookup,
        currency_symbol: str = "₱",
        now: Callable[[], datetime] = datetime.now,
    ):
        self.ledger = ledger
        self.catalog = catalog
        self.currency_symbol = currency_symbol
        self.now = now

    # -------- Order entry --------

    def create_order(self, payload: OrderCreate) -> Order:
        """
        Build a Pending order from the entry form and persist it.

        Steps:
          1. Validate payment details for the chosen method.
          2. Price each line through the catalog.
          3. Mint the id and save, both under the writer lock.
        """
        payment = self._payment_from_payload(payload)

        tokens: list[str] = []
        total_quantity = 0
        subtotal = 0.0
        for line in payload.items:
            unit_price = self.catalog.price_of(line.category, line.name) or 0.0
            subtotal += unit_price * line.quantity
            total_quantity += line.quantity
            tokens.append(format_item_token(line.quantity, line.name))

        moment = self.now()

        with self.ledger.writer():
            current = self.ledger.orders
            order = Order(
                order_id=next_order_id(current, moment.date()),
                customer_name=payload.customer_name,
                contact_number=payload.contact_number,
                items_ordered="; ".join(tokens),
                total_items=str(total_quantity),
                total_amount=format_amount(subtotal, self.currency_symbol),
                payment_method=payload.payment_method,
                order_date_time=format_display_datetime(moment),
                order_status=OrderStatus.PENDING.value,
                payment_status=PaymentStatus.UNPAID.value,
                payment=payment,
            )
            # newest first, like the orders table
            self.ledger.save_all_orders([order] + current)

        logger.info(f"💾 New order {order.order_id} created with status: Pending")
        return order

    def _payment_from_payload(self, payload: OrderCreate) -> CashPayment | DigitalPayment:
        if payload.payment_method == PaymentMethod.CASH.value:
            raw = payload.cash_received
            if raw is None:
                raise InvalidOrder("Please enter the cash amount received for Cash payment.")
            try:
                amount = float(raw.replace(",", ""))
            except ValueError:
                raise InvalidOrder("Please enter a valid number for cash amount, e.g. 100.00")
            if amount <= 0:
                raise InvalidOrder("Cash amount must be greater than 0.")
            return CashPayment(amount=f"{amount:.2f}")

        if not payload.reference_number or not payload.timestamp:
            raise InvalidOrder(
                f"Please enter both Reference Number and Timestamp for {payload.payment_method} payment."
            )
        if not is_payment_timestamp(payload.timestamp):
            raise InvalidOrder(
                "Timestamp must look like MM/DD/YYYY H:MM AM/PM, e.g. 01/26/2025 2:30 PM"
            )
        return DigitalPayment(reference=payload.reference_number, timestamp=payload.timestamp)

    # -------- Status changes --------

    def set_order_status(self, order_id: str, new_status: str) -> Order:
        """
        Change order status and persist. On PersistenceFailure the
        in-memory order gets its previous status back before re-raising.
        """
        with self.ledger.writer():
            order = self.ledger.get_order(order_id)
            previous = apply_order_status(order, new_status)
            try:
                self.ledger.save_all_orders(self.ledger.orders)
            except PersistenceFailure:
                order.order_status = previous
                logger.error(f"❌ Failed to save status change for {order_id}. Reverted to: {previous}")
                raise

        logger.info(f"🎯 Order {order_id} status updated: {previous} → {new_status}")
        return order

    def set_payment_status(self, order_id: str, new_status: str) -> Order:
        with self.ledger.writer():
            order = self.ledger.get_order(order_id)
            previous = apply_payment_status(order, new_status)
            try:
                self.ledger.save_all_orders(self.ledger.orders)
            except PersistenceFailure:
                order.payment_status = previous
                logger.error(f"❌ Failed to save payment status for {order_id}. Reverted to: {previous}")
                raise

        logger.info(f"💳 Order {order_id} payment status updated: {previous} → {new_status}")
        return order

    # -------- Consistency checks --------

    def recalculated_total(self, order_id: str) -> RecalculatedTotal:
        """
        Compare the stored total with one re-derived from catalog prices.
        """
        order = self.ledger.get_order(order_id)
        recorded = round(parse_amount(order.total_amount, self.currency_symbol), 2)
        recalculated = recalculate_total(order.items_ordered, self.catalog)
        return RecalculatedTotal(
            order_id=order.order_id,
            recorded_total=recorded,
            recalculated_total=recalculated,
            matches=abs(recorded - recalculated) < 0.005,
        )
