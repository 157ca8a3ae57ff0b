# src/tracking/data/storage/memory.py
from __future__ import annotations

import threading
from dataclasses import replace
from typing import Any, Mapping, Optional

from src.tracking.core.models.enums import OrderStatus
from src.tracking.core.models.order import Order
from src.tracking.data.storage.base import KeyValueStore, OrdersStorage

_PATCHABLE = {
    "latitude": ("latitude", float),
    "longitude": ("longitude", float),
    "status": ("status", OrderStatus),
    "amount": ("amount", float),
    "customerName": ("customer_name", str),
}


class InMemoryOrdersStorage(OrdersStorage):
    def __init__(self, orders: Optional[list[Order]] = None):
        self._lock = threading.Lock()
        self._rows: dict[str, Order] = {}
        self._next_id = 1
        for o in orders or []:
            self.create(o)

    def fetch_all(self) -> list[Order]:
        with self._lock:
            return list(self._rows.values())

    def create(self, order: Order) -> Order:
        with self._lock:
            oid = order.id
            if oid is None:
                oid = str(self._next_id)
            self._next_id = max(self._next_id, _as_int(oid) + 1)
            row = replace(order, id=oid)
            self._rows[oid] = row
            return row

    def patch(self, order_id: str, fields: Mapping[str, Any]) -> None:
        with self._lock:
            row = self._rows.get(str(order_id))
            if row is None:
                raise KeyError(f"order not found: {order_id}")
            changes = {}
            for k, v in fields.items():
                if k not in _PATCHABLE:
                    raise KeyError(f"field not patchable: {k}")
                attr, conv = _PATCHABLE[k]
                changes[attr] = conv(v)
            self._rows[row.id] = replace(row, **changes)


class InMemoryKeyValueStore(KeyValueStore):
    def __init__(self, initial: Optional[Mapping[str, str]] = None):
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = str(value)

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def __contains__(self, key: str) -> bool:
        return key in self._data


def _as_int(x: str) -> int:
    try:
        return int(x)
    except (TypeError, ValueError):
        return 0
