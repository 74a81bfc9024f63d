# app/repositories/order_repo.py
import logging
import os
import tempfile
from pathlib import Path

from app.core import line_codec
from app.core.exceptions import DecodeError, LedgerNotFound, PersistenceFailure
from app.models.order import (
    PAYMENT_STATUSES,
    Order,
    build_payment,
    legacy_payment_status,
)

logger = logging.getLogger(__name__)

ORDERS_HEADER = (
    "# Format: Order ID, Name, Contact Number, Items Ordered, Total Items, "
    "Total Amount, Payment Method, Date and Time, Status, Reference Number, "
    "Timestamp, Payment Status"
)

# Free-text columns that always get quoted: items, date/time, reference, cash/timestamp
_QUOTED_COLUMNS = (3, 7, 9, 10)

MIN_ORDER_FIELDS = 8


def order_to_fields(order: Order) -> list[str]:
    return [
        order.order_id,
        order.customer_name,
        order.contact_number,
        order.items_ordered,
        order.total_items,
        order.total_amount,
        order.payment_method,
        order.order_date_time,
        order.order_status,
        order.reference_number,
        order.cash_or_timestamp,
        order.payment_status,
    ]


def fields_to_order(tokens: list[str]) -> Order:
    """
    Build an Order from decoded tokens.

    Historical layouts, by token count:
      8  : id, name, items, total items, amount, method, date, status
      9  : as 8 plus contact number after name
      10 : as 8 plus reference number and timestamp
      11 : contact number and reference/timestamp
      12 : as 11 plus payment status
    Payment status is back-filled from the order status whenever the
    file does not carry a valid one.
    """
    count = len(tokens)
    if count < MIN_ORDER_FIELDS:
        raise DecodeError(f"Expected at least {MIN_ORDER_FIELDS} fields, got {count}")

    contact = ""
    reference = ""
    cash_or_timestamp = ""
    payment_status = ""

    if count >= 11:
        (order_id, name, contact, items, total_items, amount,
         method, when, status, reference, cash_or_timestamp) = tokens[:11]
        if count >= 12:
            payment_status = tokens[11]
    elif count == 10:
        (order_id, name, items, total_items, amount,
         method, when, status, reference, cash_or_timestamp) = tokens
    elif count == 9:
        (order_id, name, contact, items, total_items, amount,
         method, when, status) = tokens
    else:
        (order_id, name, items, total_items, amount,
         method, when, status) = tokens

    if not order_id:
        raise DecodeError("Missing order id")

    if payment_status not in PAYMENT_STATUSES:
        payment_status = legacy_payment_status(status)

    return Order(
        order_id=order_id,
        customer_name=name,
        contact_number=contact,
        items_ordered=items,
        total_items=total_items,
        total_amount=amount,
        payment_method=method,
        order_date_time=when,
        order_status=status,
        payment_status=payment_status,
        payment=build_payment(method, reference, cash_or_timestamp),
    )


def atomic_write_lines(path: Path, lines: list[str]) -> None:
    """
    Replace `path` with `lines` via write-temp-then-rename, so a reader
    sees either the old file or the new one, never a truncated one.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as fh:
            for line in lines:
                fh.write(line + "\n")
            fh.flush()
            os.fsync(fh.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        try:
            os.unlink(tmp_name)
        except OSError:
            pass
        raise


class OrderRepository:
    """
    File access for orders.txt.

    - load_all(): partial-failure load, one bad line never aborts it.
    - save_all(): full rewrite through an atomic replace.
    """

    def __init__(self, path: Path | str):
        self.path = Path(path)

    def parse_line(self, line: str) -> Order:
        return fields_to_order(line_codec.decode(line))

    def format_line(self, order: Order) -> str:
        return line_codec.encode(order_to_fields(order), quoted=_QUOTED_COLUMNS)

    def load_all(self) -> list[Order]:
        """
        Read every order in file order.

        Raises:
            LedgerNotFound: file is absent.
            PersistenceFailure: file exists but could not be read.
        """
        if not self.path.exists():
            raise LedgerNotFound(str(self.path))

        try:
            raw_lines = self.path.read_text(encoding="utf-8").splitlines()
        except OSError as e:
            raise PersistenceFailure(f"Could not read {self.path}", cause=e) from e

        orders: list[Order] = []
        for lineno, line in enumerate(raw_lines, start=1):
            if not line_codec.is_data_line(line):
                continue
            try:
                orders.append(self.parse_line(line))
            except (DecodeError, ValueError) as e:
                logger.warning(f"⚠️ Skipping order line {lineno} in {self.path.name}: {e}")
        logger.info(f"✅ Loaded {len(orders)} orders from {self.path}")
        return orders

    def save_all(self, orders: list[Order]) -> None:
        lines = [ORDERS_HEADER] + [self.format_line(o) for o in orders]
        try:
            atomic_write_lines(self.path, lines)
        except OSError as e:
            raise PersistenceFailure(f"Could not write {self.path}", cause=e) from e
        logger.info(f"💾 Saved {len(orders)} orders to {self.path}")
