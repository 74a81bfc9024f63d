# app/repositories/sale_repo.py
import logging
import os
from pathlib import Path

from app.core import line_codec
from app.core.exceptions import DecodeError, LedgerNotFound, PersistenceFailure
from app.models.sale import SalesRecord

logger = logging.getLogger(__name__)

SALES_HEADER = (
    "# Format: Sale ID, Order ID, Customer Name, Contact Number, Items Sold, "
    "Total Items, Sale Amount, Payment Method, Sale Date Time, Payment Reference, "
    "Cash Received"
)

# items sold, sale date/time, payment reference
_QUOTED_COLUMNS = (4, 8, 9)

SALE_FIELD_COUNT = 11


def sale_to_fields(sale: SalesRecord) -> list[str]:
    return [
        sale.sale_id,
        sale.order_id,
        sale.customer_name,
        sale.contact_number,
        sale.items_sold,
        sale.total_items,
        sale.sale_amount,
        sale.payment_method,
        sale.sale_date_time,
        sale.payment_reference,
        sale.cash_received,
    ]


def fields_to_sale(tokens: list[str]) -> SalesRecord:
    if len(tokens) < SALE_FIELD_COUNT:
        raise DecodeError(f"Expected {SALE_FIELD_COUNT} fields, got {len(tokens)}")
    (sale_id, order_id, name, contact, items, total_items, amount,
     method, when, reference, cash) = tokens[:SALE_FIELD_COUNT]
    if not sale_id:
        raise DecodeError("Missing sale id")
    return SalesRecord(
        sale_id=sale_id,
        order_id=order_id,
        customer_name=name,
        contact_number=contact,
        items_sold=items,
        total_items=total_items,
        sale_amount=amount,
        payment_method=method,
        sale_date_time=when,
        payment_reference=reference,
        cash_received=cash,
    )


class SaleRepository:
    """
    File access for sales.txt.

    Sales are append-only: a new record is added to the end of the file
    without reading or rewriting the rest.
    """

    def __init__(self, path: Path | str):
        self.path = Path(path)

    def parse_line(self, line: str) -> SalesRecord:
        return fields_to_sale(line_codec.decode(line))

    def format_line(self, sale: SalesRecord) -> str:
        return line_codec.encode(sale_to_fields(sale), quoted=_QUOTED_COLUMNS)

    def load_all(self) -> list[SalesRecord]:
        if not self.path.exists():
            raise LedgerNotFound(str(self.path))

        try:
            raw_lines = self.path.read_text(encoding="utf-8").splitlines()
        except OSError as e:
            raise PersistenceFailure(f"Could not read {self.path}", cause=e) from e

        sales: list[SalesRecord] = []
        for lineno, line in enumerate(raw_lines, start=1):
            if not line_codec.is_data_line(line):
                continue
            try:
                sales.append(self.parse_line(line))
            except (DecodeError, ValueError) as e:
                logger.warning(f"⚠️ Skipping sales line {lineno} in {self.path.name}: {e}")
        logger.info(f"✅ Loaded {len(sales)} sales records from {self.path}")
        return sales

    def append(self, sale: SalesRecord) -> None:
        """
        Append one encoded record.

        A new file starts with the format header. If the existing file
        does not end with a newline one is added first, so the record
        never merges into the previous line.
        """
        line = self.format_line(sale)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            prefix = ""
            if not self.path.exists() or self.path.stat().st_size == 0:
                prefix = SALES_HEADER + "\n"
            else:
                with self.path.open("rb") as fh:
                    fh.seek(-1, os.SEEK_END)
                    if fh.read(1) != b"\n":
                        prefix = "\n"
            with self.path.open("a", encoding="utf-8", newline="\n") as fh:
                fh.write(prefix + line + "\n")
                fh.flush()
                os.fsync(fh.fileno())
        except OSError as e:
            raise PersistenceFailure(f"Could not append to {self.path}", cause=e) from e
        logger.info(f"💾 Appended sale {sale.sale_id} for order {sale.order_id}")
