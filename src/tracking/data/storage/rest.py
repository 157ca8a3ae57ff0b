# src/tracking/data/storage/rest.py
from __future__ import annotations

import logging
import time
from typing import Any, Mapping

import requests

from src.tracking.core.models.order import Order
from src.tracking.data.storage.base import OrdersStorage

BASE_URL = "http://127.0.0.1:3000"

log = logging.getLogger("tracking.storage.rest")


class OrdersApiError(RuntimeError):
    pass


class OrdersRestClient(OrdersStorage):
    """
    json-server style orders API:
      GET   /orders
      POST  /orders          -> echoes the row with its id
      PATCH /orders/{id}

    Retries 429 / 5xx / network errors with linear backoff. Other 4xx fail at once.
    """

    def __init__(
        self,
        base_url: str = BASE_URL,
        *,
        resource: str = "orders",
        timeout: float = 10.0,
        max_retries: int = 3,
        backoff_base: float = 0.5,
        session: requests.Session | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.resource = resource.strip("/")
        self.timeout = float(timeout)
        self.max_retries = max(1, int(max_retries))
        self.backoff_base = float(backoff_base)

        self.sess = session or requests.Session()
        self.sess.headers.update({"Accept": "application/json"})

    # ---------------------------------------------------------------------
    # CORE REQUEST (WITH BACKOFF)
    # ---------------------------------------------------------------------

    def _request(self, method: str, path: str, *, json: Any = None) -> Any:
        url = f"{self.base_url}{path}"
        last_err: Exception | None = None

        for attempt in range(1, self.max_retries + 1):
            try:
                r = self.sess.request(method=method, url=url, json=json, timeout=self.timeout)
            except requests.RequestException as e:
                last_err = e
                sleep = self.backoff_base * attempt
                log.warning(
                    "Orders API request error (%s %s), retry %d/%d, sleep %.1fs | %r",
                    method, path, attempt, self.max_retries, sleep, e,
                )
                time.sleep(sleep)
                continue

            # --- RATE LIMIT / TEMP SERVER ERRORS ---
            if r.status_code == 429 or r.status_code >= 500:
                last_err = OrdersApiError(f"HTTP {r.status_code}")
                sleep = self.backoff_base * attempt
                log.warning(
                    "Orders API %d (%s %s), retry %d/%d, sleep %.1fs",
                    r.status_code, method, path, attempt, self.max_retries, sleep,
                )
                time.sleep(sleep)
                continue

            # --- OTHER ERRORS ---
            if r.status_code >= 400:
                raise OrdersApiError(f"Orders API HTTP {r.status_code} {method} {path}: {r.text[:500]}")

            # --- OK ---
            if r.text:
                return r.json()
            return {}

        raise OrdersApiError(
            f"Orders API request failed after {self.max_retries} retries: {method} {path} | last_err={last_err!r}"
        )

    # ---------------------------------------------------------------------
    # OrdersStorage
    # ---------------------------------------------------------------------

    def fetch_all(self) -> list[Order]:
        rows = self._request("GET", f"/{self.resource}")
        if not isinstance(rows, list):
            raise OrdersApiError(f"GET /{self.resource}: expected list, got {type(rows).__name__}")
        return [Order.from_dict(r) for r in rows]

    def create(self, order: Order) -> Order:
        payload = order.to_payload()
        payload.pop("id", None)
        row = self._request("POST", f"/{self.resource}", json=payload)
        return Order.from_dict(row)

    def patch(self, order_id: str, fields: Mapping[str, Any]) -> None:
        self._request("PATCH", f"/{self.resource}/{order_id}", json=dict(fields))
