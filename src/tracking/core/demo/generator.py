# src/tracking/core/demo/generator.py
from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Optional

from src.tracking.core.models.enums import OrderStatus
from src.tracking.core.models.order import Order, format_timestamp
from src.tracking.core.orders.store import OrderStore
from src.tracking.data.storage.base import KeyValueStore

log = logging.getLogger("tracking.demo.generator")

MARKER_KEY = "demo_orders_last_generated"

CUSTOMERS: tuple[str, ...] = (
    "Aarav Sharma",
    "Priya Patel",
    "Rohan Mehta",
    "Ananya Iyer",
    "Vikram Singh",
    "Sneha Reddy",
    "Arjun Nair",
    "Kavya Gupta",
    "Ishaan Verma",
    "Meera Joshi",
)

# central India, roughly matches the default map view
LAT_RANGE = (12.0, 28.0)
LNG_RANGE = (74.0, 86.0)
AMOUNT_RANGE = (500.0, 3000.0)


@dataclass(frozen=True)
class DemoConfig:
    min_daily: int = 5
    max_daily: int = 10


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class DemoOrderGenerator:
    """
    Synthetic ON_ROUTE orders for the demo, at most one batch per calendar day.

    The marker in `kv` is the only gate, so restarts within the same day do
    not generate again.
    """

    def __init__(
        self,
        *,
        store: OrderStore,
        kv: KeyValueStore,
        cfg: DemoConfig | None = None,
        rng: Optional[random.Random] = None,
        clock: Callable[[], datetime] = _utc_now,
    ):
        self.store = store
        self.kv = kv
        self.cfg = cfg or DemoConfig()
        self.rng = rng or random.Random()
        self.clock = clock

    def _today(self) -> str:
        return self.clock().astimezone(timezone.utc).date().isoformat()

    def make_order(self) -> Order:
        amount = round(self.rng.uniform(*AMOUNT_RANGE), 2)
        return Order(
            customer_name=self.rng.choice(CUSTOMERS),
            status=OrderStatus.ON_ROUTE,
            latitude=self.rng.uniform(*LAT_RANGE),
            longitude=self.rng.uniform(*LNG_RANGE),
            amount=amount,
            created_at=format_timestamp(self.clock().astimezone(timezone.utc)),
        )

    def generate_demo_orders(self, count: int) -> list[Order]:
        orders = [self.make_order() for _ in range(max(0, int(count)))]
        for o in orders:
            self.store.create(o)
        log.info("demo orders submitted: %d", len(orders))
        return orders

    def generate_daily_orders(self) -> int:
        """
        Returns how many orders were submitted (0 if today's batch already exists).
        """
        today = self._today()
        last = self.kv.get(MARKER_KEY)
        if last == today:
            log.debug("daily demo orders already generated for %s", today)
            return 0

        lo = max(0, int(self.cfg.min_daily))
        hi = max(lo, int(self.cfg.max_daily))
        count = self.rng.randint(lo, hi)

        self.generate_demo_orders(count)
        self.kv.set(MARKER_KEY, today)
        log.info("daily demo orders generated: %d (day=%s, previous=%s)", count, today, last)
        return count
