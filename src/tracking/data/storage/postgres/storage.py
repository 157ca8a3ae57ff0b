# src/tracking/data/storage/postgres/storage.py
from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from psycopg_pool import ConnectionPool

from src.tracking.core.models.order import Order
from src.tracking.data.storage.base import KeyValueStore, OrdersStorage

logger = logging.getLogger(__name__)

# wire name -> column
_PATCH_COLUMNS = {
    "customerName": "customer_name",
    "status": "status",
    "latitude": "latitude",
    "longitude": "longitude",
    "amount": "amount",
}

_ORDER_COLUMNS = "order_id, customer_name, status, latitude, longitude, amount, created_at"


def _row_to_order(row: tuple) -> Order:
    order_id, customer_name, status, lat, lng, amount, created_at = row
    return Order.from_dict(
        {
            "order_id": order_id,
            "customer_name": customer_name,
            "status": status,
            "latitude": lat,
            "longitude": lng,
            "amount": amount,
            "created_at": created_at,
        }
    )


class PostgresOrdersStorage(OrdersStorage):
    def __init__(self, pool: ConnectionPool):
        self.pool = pool

    def exec_ddl(self, ddl_sql: str) -> None:
        with self.pool.connection() as conn:
            with conn.cursor() as cur:
                cur.execute(ddl_sql)
            conn.commit()

    def fetch_all(self) -> list[Order]:
        with self.pool.connection() as conn:
            with conn.cursor() as cur:
                cur.execute(f"SELECT {_ORDER_COLUMNS} FROM orders ORDER BY order_id")
                rows = cur.fetchall()
        return [_row_to_order(r) for r in rows]

    def create(self, order: Order) -> Order:
        with self.pool.connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    f"""
                    INSERT INTO orders (customer_name, status, latitude, longitude, amount, created_at)
                    VALUES (%s, %s, %s, %s, %s, %s)
                    RETURNING {_ORDER_COLUMNS}
                    """,
                    (
                        order.customer_name,
                        order.status.value,
                        order.latitude,
                        order.longitude,
                        order.amount,
                        order.created_at,
                    ),
                )
                row = cur.fetchone()
            conn.commit()
        return _row_to_order(row)

    def patch(self, order_id: str, fields: Mapping[str, Any]) -> None:
        sets: list[str] = []
        params: list[Any] = []
        for k, v in fields.items():
            col = _PATCH_COLUMNS.get(k)
            if col is None:
                raise KeyError(f"field not patchable: {k}")
            sets.append(f"{col} = %s")
            params.append(getattr(v, "value", v))
        if not sets:
            return
        params.append(int(order_id))

        with self.pool.connection() as conn:
            with conn.cursor() as cur:
                cur.execute(f"UPDATE orders SET {', '.join(sets)} WHERE order_id = %s", tuple(params))
                if cur.rowcount == 0:
                    logger.warning("patch: order %s not found", order_id)
            conn.commit()


class PostgresKeyValueStore(KeyValueStore):
    def __init__(self, pool: ConnectionPool):
        self.pool = pool

    def get(self, key: str) -> Optional[str]:
        with self.pool.connection() as conn:
            with conn.cursor() as cur:
                cur.execute("SELECT value FROM kv_state WHERE key = %s", (key,))
                row = cur.fetchone()
        return None if row is None else str(row[0])

    def set(self, key: str, value: str) -> None:
        with self.pool.connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    INSERT INTO kv_state (key, value, updated_at)
                    VALUES (%s, %s, now())
                    ON CONFLICT (key)
                    DO UPDATE SET value = EXCLUDED.value, updated_at = now()
                    """,
                    (key, str(value)),
                )
            conn.commit()

    def remove(self, key: str) -> None:
        with self.pool.connection() as conn:
            with conn.cursor() as cur:
                cur.execute("DELETE FROM kv_state WHERE key = %s", (key,))
            conn.commit()
