# app/services/sale_service.py
import logging
import re
from datetime import datetime
from typing import Callable

from app.core.exceptions import InvalidState, LedgerError
from app.core.parsing import format_display_datetime, normalize_cash_amount
from app.models.order import Order, OrderStatus, PaymentMethod
from app.models.sale import SalesRecord
from app.services.ledger_service import LedgerService

logger = logging.getLogger(__name__)

# sequence ids only; time-derived fallback ids (S<epoch ms>) are 13 digits
_SALE_ID_RE = re.compile(r"^S(\d{3,6})$")


def next_sale_id(existing_ids: list[str]) -> str:
    """
    S<seq> after the numerically highest well-formed id; S001 when none.

    Gaps are not refilled: S001, S002, S005 -> S006.
    """
    numbers = [
        int(match.group(1))
        for match in (_SALE_ID_RE.match(sid) for sid in sorted(existing_ids))
        if match
    ]
    if not numbers:
        return "S001"
    return f"S{max(numbers) + 1:03d}"


def fallback_sale_id(existing_ids: set[str], moment: datetime) -> str:
    """Time-derived id used when the sequence can't be computed."""
    stamp = int(moment.timestamp() * 1000)
    candidate = f"S{stamp}"
    while candidate in existing_ids:
        stamp += 1
        candidate = f"S{stamp}"
    return candidate


def derive_sale(order: Order, sale_id: str, moment: datetime) -> SalesRecord:
    """
    Copy a Completed order into a sales record.

    Cash orders carry the cash received (blank or invalid -> "0.00") and
    no reference; digital orders carry their reference and "0.00" cash.

    Raises:
        InvalidState: order is not Completed.
    """
    if order.order_status != OrderStatus.COMPLETED.value:
        raise InvalidState(
            f"Order {order.order_id} is '{order.order_status}'; only Completed orders can be finalized"
        )

    if order.payment_method == PaymentMethod.CASH.value:
        cash_received = normalize_cash_amount(order.cash_or_timestamp)
        reference = ""
    else:
        cash_received = "0.00"
        reference = order.reference_number

    return SalesRecord(
        sale_id=sale_id,
        order_id=order.order_id,
        customer_name=order.customer_name,
        contact_number=order.contact_number,
        items_sold=order.items_ordered,
        total_items=order.total_items,
        sale_amount=order.total_amount,
        payment_method=order.payment_method,
        sale_date_time=format_display_datetime(moment),
        payment_reference=reference,
        cash_received=cash_received,
    )


class SaleService:
    """
    Turns Completed orders into sales records.

    finalize_order() is idempotent per order: a second call returns the
    sale already on file instead of appending another one.
    """

    def __init__(self, ledger: LedgerService, now: Callable[[], datetime] = datetime.now):
        self.ledger = ledger
        self.now = now

    def finalize_order(self, order_id: str) -> tuple[SalesRecord, bool]:
        """
        Returns (sale, created). created is False when the order had
        already been finalized.
        """
        with self.ledger.writer():
            order = self.ledger.get_order(order_id)
            existing = self.ledger.sale_for_order(order_id)
            if existing is not None:
                logger.warning(f"⚠️ Sales record already exists for order {order_id}; skipping creation")
                return existing, False

            moment = self.now()
            # validates Completed before anything touches the sales file
            sale = derive_sale(order, "", moment)
            sale.sale_id = self._mint_sale_id(moment)

            self.ledger.append_sale(sale)

        logger.info(f"💰 Sales record {sale.sale_id} created for order {order_id}")
        return sale, True

    def _mint_sale_id(self, moment: datetime) -> str:
        """
        Sequence from the sales file as it is on disk now (another ledger
        instance may have appended since our last refresh).
        """
        known = {s.sale_id for s in self.ledger.sales}
        try:
            on_disk = self.ledger.load_sales()
            return next_sale_id([s.sale_id for s in on_disk] + list(known))
        except LedgerError:
            logger.exception("⚠️ Error generating next sale ID, using timestamp-based ID")
            return fallback_sale_id(known, moment)
