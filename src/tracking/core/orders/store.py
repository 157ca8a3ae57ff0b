# src/tracking/core/orders/store.py
from __future__ import annotations

import logging
import threading
from datetime import datetime, timezone
from typing import Callable, Iterable, Optional

from src.tracking.core.models.enums import OrderStatus
from src.tracking.core.models.order import Order
from src.tracking.core.orders.sync import RemoteSync
from src.tracking.data.storage.base import OrdersStorage

log = logging.getLogger("tracking.orders.store")

TOP_ORDERS_LIMIT = 5

# listener(event, order_id); event: loaded | created | location | delivered | selected
Listener = Callable[[str, Optional[str]], None]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class OrderStore:
    """
    In-memory order collection + current selection.

    Local state is updated first and at once; the matching backend write is
    handed to RemoteSync and never awaited. Readers get list copies, so a
    snapshot taken by a timer tick is not affected by later mutations.
    """

    def __init__(
        self,
        storage: Optional[OrdersStorage] = None,
        *,
        sync: Optional[RemoteSync] = None,
        clock: Callable[[], datetime] = _utc_now,
    ):
        self.storage = storage
        self.sync = sync
        self.clock = clock

        self._lock = threading.RLock()
        self._refresh_lock = threading.Lock()
        self._orders: list[Order] = []
        self._selected: Optional[Order] = None
        self._listeners: list[Listener] = []

        # per-id local write bookkeeping, consulted by refresh()
        self._seq = 0
        self._touched: dict[str, int] = {}
        self._inflight: dict[str, int] = {}

    # ------------------------------------------------------------------
    # read
    # ------------------------------------------------------------------

    def orders(self) -> list[Order]:
        with self._lock:
            return list(self._orders)

    def get(self, order_id: str) -> Optional[Order]:
        oid = str(order_id)
        with self._lock:
            for o in self._orders:
                if o.id == oid:
                    return o
        return None

    def selected(self) -> Optional[Order]:
        with self._lock:
            return self._selected

    def __len__(self) -> int:
        with self._lock:
            return len(self._orders)

    # ------------------------------------------------------------------
    # observers
    # ------------------------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, event: str, order_id: Optional[str] = None) -> None:
        with self._lock:
            listeners = list(self._listeners)
        for cb in listeners:
            try:
                cb(event, order_id)
            except Exception:
                log.exception("order listener failed on %s(%s)", event, order_id)

    # ------------------------------------------------------------------
    # mutations
    # ------------------------------------------------------------------

    def load(self, orders: Iterable[Order]) -> None:
        with self._lock:
            self._orders = list(orders)
        self._notify("loaded")

    def refresh(self) -> bool:
        """
        Reload from the backend. On failure the current collection is kept.

        Refreshes run one at a time, so a slow fetch never lands on top of a
        newer one. Backend rows become the collection, except that an order
        with a local write still in flight (or settled while the fetch ran)
        keeps its local copy, and a locally delivered order stays delivered.
        """
        if self.storage is None:
            return False
        with self._refresh_lock:
            with self._lock:
                started = self._seq
            try:
                rows = self.storage.fetch_all()
            except Exception as e:
                log.warning("Failed to load orders: %r", e)
                return False
            with self._lock:
                self._orders = [self._merge(row, started) for row in rows]
        self._notify("loaded")
        log.debug("orders loaded: %d", len(rows))
        return True

    def select(self, order: Optional[Order]) -> None:
        # no membership check: any order (or None) may be selected
        with self._lock:
            self._selected = order
        self._notify("selected", None if order is None else order.id)

    def update_location(self, order_id: str, lat: float, lng: float) -> bool:
        """
        Move an order. Returns False (and writes nothing) when no order has this id.
        """
        oid = str(order_id)
        with self._lock:
            idx = self._index_of(oid)
            if idx is None:
                return False
            self._orders[idx] = self._orders[idx].with_location(lat, lng)

        self._notify("location", oid)
        self._push(oid, {"latitude": float(lat), "longitude": float(lng)}, label=f"location:{oid}")
        return True

    def mark_delivered(self, order_id: str) -> bool:
        """
        ON_ROUTE -> DELIVERED. Unknown id or already delivered: no-op, returns False.
        """
        oid = str(order_id)
        with self._lock:
            idx = self._index_of(oid)
            if idx is None:
                return False
            cur = self._orders[idx]
            if cur.status == OrderStatus.DELIVERED:
                return False
            self._orders[idx] = cur.delivered()

        self._notify("delivered", oid)
        self._push(oid, {"status": OrderStatus.DELIVERED.value}, label=f"delivered:{oid}")
        return True

    def create(self, order: Order) -> None:
        """
        Submit a new order to the backend; the store reloads once the backend
        acknowledges it. Without a backend the order is appended locally.
        """
        if self.storage is None:
            with self._lock:
                self._orders.append(order)
            self._notify("created", order.id)
            return

        def _after_create(created: Order) -> None:
            self._notify("created", created.id)
            self.refresh()

        if self.sync is None:
            try:
                _after_create(self.storage.create(order))
            except Exception as e:
                log.warning("Failed to create order for %s: %r", order.customer_name, e)
            return

        self.sync.submit(self.storage.create, order, label="create", on_done=_after_create)

    # ------------------------------------------------------------------
    # derived views
    # ------------------------------------------------------------------

    def todays_orders(self) -> list[Order]:
        today = self.clock().astimezone(timezone.utc).date().isoformat()
        with self._lock:
            return [o for o in self._orders if o.created_at and o.created_at.startswith(today)]

    def todays_revenue(self) -> float:
        return sum(o.amount for o in self.todays_orders())

    def top_orders_of_day(self, limit: int = TOP_ORDERS_LIMIT) -> list[Order]:
        # sorted() is stable: equal amounts keep encounter order
        return sorted(self.todays_orders(), key=lambda o: o.amount, reverse=True)[:limit]

    def on_route(self) -> list[Order]:
        with self._lock:
            return [o for o in self._orders if o.status == OrderStatus.ON_ROUTE]

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------

    def _index_of(self, order_id: str) -> Optional[int]:
        for i, o in enumerate(self._orders):
            if o.id == order_id:
                return i
        return None

    def _merge(self, row: Order, started: int) -> Order:
        # caller holds self._lock
        idx = self._index_of(row.id) if row.id is not None else None
        if idx is None:
            return row
        local = self._orders[idx]
        if self._inflight.get(row.id, 0) > 0 or self._touched.get(row.id, -1) > started:
            return local
        if local.status == OrderStatus.DELIVERED and row.status != OrderStatus.DELIVERED:
            return row.delivered()
        return row

    def _begin_write(self, order_id: str) -> None:
        with self._lock:
            self._seq += 1
            self._touched[order_id] = self._seq
            self._inflight[order_id] = self._inflight.get(order_id, 0) + 1

    def _end_write(self, order_id: str) -> None:
        with self._lock:
            self._seq += 1
            self._touched[order_id] = self._seq
            left = self._inflight.get(order_id, 0) - 1
            if left > 0:
                self._inflight[order_id] = left
            else:
                self._inflight.pop(order_id, None)

    def _push(self, order_id: str, fields: dict, *, label: str) -> None:
        if self.storage is None:
            return

        def _write() -> None:
            try:
                self.storage.patch(order_id, fields)
            finally:
                self._end_write(order_id)

        self._begin_write(order_id)
        if self.sync is None:
            try:
                _write()
            except Exception as e:
                log.warning("remote write failed (%s): %r", label, e)
            return
        if self.sync.submit(_write, label=label) is None:
            self._end_write(order_id)
