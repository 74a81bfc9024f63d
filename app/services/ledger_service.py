# app/services/ledger_service.py
import logging
import threading
from contextlib import contextmanager
from typing import Callable, Iterator

from app.core.exceptions import LedgerNotFound, OrderNotFound
from app.models.order import Order
from app.models.sale import SalesRecord
from app.repositories.order_repo import OrderRepository
from app.repositories.sale_repo import SaleRepository

logger = logging.getLogger(__name__)

Listener = Callable[[str], None]


class LedgerService:
    """
    In-memory ledger (orders + sales) backed by the two flat files.

    One instance is created at startup and handed to every consumer.
    All mutations and reloads go through `writer()`, a re-entrant lock,
    so there is a single writer at a time and a background refresh can
    never land between an edit and its save.

    Events sent to subscribers: "orders_saved", "sale_appended", "refreshed".
    """

    def __init__(self, order_repo: OrderRepository, sale_repo: SaleRepository):
        self.order_repo = order_repo
        self.sale_repo = sale_repo
        self._orders: list[Order] = []
        self._sales: list[SalesRecord] = []
        self._lock = threading.RLock()
        self._listeners: list[Listener] = []
        self.missing_files: set[str] = set()

    # -------- Read access --------

    @property
    def orders(self) -> list[Order]:
        with self._lock:
            return list(self._orders)

    @property
    def sales(self) -> list[SalesRecord]:
        with self._lock:
            return list(self._sales)

    def get_order(self, order_id: str) -> Order:
        with self._lock:
            for order in self._orders:
                if order.order_id == order_id:
                    return order
        raise OrderNotFound(order_id)

    def sale_for_order(self, order_id: str) -> SalesRecord | None:
        with self._lock:
            for sale in self._sales:
                if sale.order_id == order_id:
                    return sale
        return None

    @contextmanager
    def writer(self) -> Iterator["LedgerService"]:
        """
        Hold the single-writer lock for a read-modify-save sequence.
        """
        with self._lock:
            yield self

    # -------- Loading --------

    def load_orders(self) -> list[Order]:
        """
        Read orders.txt. A missing file is not an error: it yields []
        and is recorded in `missing_files`.
        """
        try:
            orders = self.order_repo.load_all()
        except LedgerNotFound as e:
            logger.warning(f"⚠️ {e}")
            self.missing_files.add(str(self.order_repo.path))
            return []
        self.missing_files.discard(str(self.order_repo.path))
        return orders

    def load_sales(self) -> list[SalesRecord]:
        try:
            sales = self.sale_repo.load_all()
        except LedgerNotFound as e:
            logger.warning(f"⚠️ {e}")
            self.missing_files.add(str(self.sale_repo.path))
            return []
        self.missing_files.discard(str(self.sale_repo.path))
        return sales

    def refresh(self) -> None:
        """
        Reload both collections from disk.

        Both files are read before anything is replaced: if either read
        fails the previous in-memory state is kept and the error raised.
        """
        with self._lock:
            orders = self.load_orders()
            sales = self.load_sales()
            self._orders = orders
            self._sales = sales
        logger.info(f"🔄 Ledger refreshed: {len(orders)} orders, {len(sales)} sales")
        self._notify("refreshed")

    # -------- Writing --------

    def save_all_orders(self, orders: list[Order]) -> None:
        """
        Rewrite orders.txt with `orders` and adopt them as the in-memory list.

        Memory is only replaced after the file write succeeded; on
        PersistenceFailure the previous list stays in place.
        """
        with self._lock:
            snapshot = list(orders)
            self.order_repo.save_all(snapshot)
            self._orders = snapshot
            self.missing_files.discard(str(self.order_repo.path))
        self._notify("orders_saved")

    def append_sale(self, sale: SalesRecord) -> None:
        with self._lock:
            self.sale_repo.append(sale)
            self._sales.append(sale)
            self.missing_files.discard(str(self.sale_repo.path))
        self._notify("sale_appended")

    # -------- Change notification --------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Register a callback run after every save, append or refresh.
        Returns a function that removes it again.
        """
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, event: str) -> None:
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(event)
            except Exception:
                logger.exception(f"❌ Ledger listener failed on '{event}'")
