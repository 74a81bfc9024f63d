# tests/test_repositories.py
import pytest

from app.core.exceptions import DecodeError, LedgerNotFound, PersistenceFailure
from app.models.order import CashPayment, DigitalPayment, Order
from app.models.sale import SalesRecord
from app.repositories.order_repo import ORDERS_HEADER, OrderRepository, fields_to_order
from app.repositories.product_repo import ProductRepository
from app.repositories.sale_repo import SALES_HEADER, SaleRepository

DATE = "Jan 26, 2025 3:45 PM"


# -------- orders.txt layouts --------


def test_eight_field_line_has_no_contact_or_payment_details():
    order = fields_to_order(["WP1", "Ana", "1x Classic", "1", "₱45.00", "Cash", DATE, "Completed"])
    assert order.contact_number == ""
    assert order.reference_number == ""
    assert order.cash_or_timestamp == ""
    assert order.payment_status == "Paid"


def test_nine_field_line_reads_contact_and_empty_payment_details():
    order = fields_to_order(
        ["WP1", "Ana", "0917", "1x Classic", "1", "₱45.00", "GCash", DATE, "Pending"]
    )
    assert order.contact_number == "0917"
    assert order.reference_number == ""
    assert order.cash_or_timestamp == ""
    assert order.payment_status == "Unpaid"


def test_ten_field_line_reads_reference_and_timestamp():
    order = fields_to_order(
        ["WP1", "Ana", "1x Classic", "1", "₱45.00", "GCash", DATE, "Cancelled", "REF9", "01/26/2025 3:40 PM"]
    )
    assert order.contact_number == ""
    assert isinstance(order.payment, DigitalPayment)
    assert order.reference_number == "REF9"
    assert order.cash_or_timestamp == "01/26/2025 3:40 PM"
    assert order.payment_status == "Refunded"


def test_eleven_field_cash_line():
    order = fields_to_order(
        ["WP1", "Ana", "0917", "1x Classic", "1", "₱45.00", "Cash", DATE, "In Progress", "", "100.00"]
    )
    assert isinstance(order.payment, CashPayment)
    assert order.payment.amount == "100.00"
    assert order.payment_status == "Unpaid"


def test_twelve_field_line_keeps_payment_status():
    tokens = ["WP1", "Ana", "0917", "1x Classic", "1", "₱45.00", "Cash", DATE, "Completed", "", "100.00", "Failed"]
    assert fields_to_order(tokens).payment_status == "Failed"


def test_unknown_payment_status_is_back_filled():
    tokens = ["WP1", "Ana", "0917", "1x Classic", "1", "₱45.00", "Cash", DATE, "Completed", "", "100.00", "Bogus"]
    assert fields_to_order(tokens).payment_status == "Paid"


@pytest.mark.parametrize(
    "tokens",
    [
        ["WP1", "Ana", "1x Classic"],
        ["", "Ana", "1x Classic", "1", "₱45.00", "Cash", DATE, "Completed"],
    ],
)
def test_bad_tokens_raise_decode_error(tokens):
    with pytest.raises(DecodeError):
        fields_to_order(tokens)


# -------- OrderRepository --------


def test_load_skips_malformed_lines(orders_path):
    orders_path.write_text(
        "\n".join(
            [
                ORDERS_HEADER,
                f'WP1,Ana,"1x Classic",1,₱45.00,Cash,"{DATE}",Completed',
                f'WP2,Ben,"1x Classic",1,₱45.00,Cash,"{DATE}",Pending',
                "WP3,broken line",
                "",
                f'WP4,Cy,"1x Classic",1,₱45.00,Cash,"{DATE}",Pending',
                f'WP5,Di,"1x Classic",1,₱45.00,Cash,"{DATE}",Cancelled',
            ]
        )
        + "\n",
        encoding="utf-8",
    )
    orders = OrderRepository(orders_path).load_all()
    assert [o.order_id for o in orders] == ["WP1", "WP2", "WP4", "WP5"]


def test_load_missing_file_raises_not_found(orders_path):
    with pytest.raises(LedgerNotFound):
        OrderRepository(orders_path).load_all()


def test_save_writes_header_and_reloads_same_orders(orders_path):
    repo = OrderRepository(orders_path)
    orders = [
        Order(
            order_id="WP20250126-001",
            customer_name="Cruz, Ana",
            contact_number="0917",
            items_ordered="2x Classic; 1x Tropiham",
            total_items="3",
            total_amount="₱155.00",
            payment_method="Cash",
            order_date_time=DATE,
            order_status="Completed",
            payment_status="Paid",
            payment=CashPayment(amount="200.00"),
        ),
        Order(
            order_id="WP20250126-002",
            customer_name="Ben",
            items_ordered="1x Classic",
            total_items="1",
            total_amount="₱45.00",
            payment_method="Maya",
            order_date_time=DATE,
            payment=DigitalPayment(reference="MY1", timestamp="01/26/2025 3:40 PM"),
        ),
    ]
    repo.save_all(orders)

    lines = orders_path.read_text(encoding="utf-8").splitlines()
    assert lines[0] == ORDERS_HEADER
    assert len(lines) == 3
    assert [o.model_dump() for o in repo.load_all()] == [o.model_dump() for o in orders]


def test_save_leaves_no_temp_files(orders_path):
    OrderRepository(orders_path).save_all([])
    assert [p.name for p in orders_path.parent.iterdir()] == ["orders.txt"]


def test_save_failure_keeps_previous_file(orders_path, monkeypatch):
    repo = OrderRepository(orders_path)
    repo.save_all([Order(order_id="WP1", order_date_time=DATE)])
    before = orders_path.read_text(encoding="utf-8")

    def broken_replace(src, dst):
        raise OSError("disk full")

    monkeypatch.setattr("app.repositories.order_repo.os.replace", broken_replace)
    with pytest.raises(PersistenceFailure):
        repo.save_all([])

    assert orders_path.read_text(encoding="utf-8") == before
    assert [p.name for p in orders_path.parent.iterdir()] == ["orders.txt"]


# -------- SaleRepository --------


def _sale(sale_id, order_id="WP1"):
    return SalesRecord(
        sale_id=sale_id,
        order_id=order_id,
        customer_name="Ana",
        contact_number="0917",
        items_sold="2x Classic",
        total_items="2",
        sale_amount="₱90.00",
        payment_method="Cash",
        sale_date_time=DATE,
        payment_reference="",
        cash_received="100.00",
    )


def test_append_creates_file_with_header(sales_path):
    repo = SaleRepository(sales_path)
    repo.append(_sale("S001"))
    repo.append(_sale("S002", "WP2"))

    lines = sales_path.read_text(encoding="utf-8").splitlines()
    assert lines[0] == SALES_HEADER
    assert len(lines) == 3
    assert [s.sale_id for s in repo.load_all()] == ["S001", "S002"]


def test_append_adds_missing_trailing_newline(sales_path):
    repo = SaleRepository(sales_path)
    sales_path.write_text(SALES_HEADER + "\n" + repo.format_line(_sale("S001")), encoding="utf-8")

    repo.append(_sale("S002", "WP2"))

    assert [s.sale_id for s in repo.load_all()] == ["S001", "S002"]


def test_load_sales_skips_short_lines(sales_path):
    repo = SaleRepository(sales_path)
    sales_path.write_text(
        "\n".join([SALES_HEADER, repo.format_line(_sale("S001")), "S002,WP2,Ana"]) + "\n",
        encoding="utf-8",
    )
    assert [s.sale_id for s in repo.load_all()] == ["S001"]


def test_load_sales_missing_file(sales_path):
    with pytest.raises(LedgerNotFound):
        SaleRepository(sales_path).load_all()


# -------- ProductRepository --------


def test_products_are_read_pipe_delimited(tmp_path):
    path = tmp_path / "products.txt"
    path.write_text(
        "# category|name|description|price\n"
        "Classic Waffles|Classic|Plain|45.00\n"
        "Classic Waffles|Broken line\n"
        "Premium Waffles|Banana Split|Banana and chocolate|₱65\n",
        encoding="utf-8",
    )
    items = ProductRepository(path).load_all()
    assert [(i.name, i.price) for i in items] == [("Classic", 45.0), ("Banana Split", 65.0)]
