# src/tracking/core/simulation/movement.py
from __future__ import annotations

import logging
import math
import random
import threading
from dataclasses import dataclass
from typing import Callable, Optional

from src.tracking.core.orders.store import OrderStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SimulationConfig:
    jitter_sec: float = 2.5
    jitter_span: float = 0.01      # full width: offsets are in [-span/2, +span/2)
    delivery_sec: float = 120.0
    max_deliveries: int = 2


class Ticker(threading.Thread):
    """
    Calls `fn` every `period_sec` until stop(). The first call happens after
    one full period. Exceptions are logged and the loop keeps going.
    """

    def __init__(self, *, name: str, period_sec: float, fn: Callable[[], object]):
        super().__init__(daemon=True, name=name)
        self.period_sec = float(period_sec)
        self.fn = fn
        self._stop_event = threading.Event()

    def stop(self):
        self._stop_event.set()

    @property
    def stopped(self) -> bool:
        return self._stop_event.is_set()

    def run(self):
        logger.info("%s started (period=%.1fs)", self.name, self.period_sec)
        while not self._stop_event.wait(self.period_sec):
            try:
                self.fn()
            except Exception as e:
                logger.exception("%s tick error: %s", self.name, e)
        logger.info("%s stopped", self.name)


class MovementSimulator:
    """
    Two timers over the OrderStore:
      - jitter: nudges every ON_ROUTE order that has an id
      - delivery: marks 1..max_deliveries random ON_ROUTE orders DELIVERED

    start*/stop are idempotent. isRunning follows the jitter timer.
    """

    def __init__(
        self,
        store: OrderStore,
        *,
        cfg: SimulationConfig | None = None,
        rng: Optional[random.Random] = None,
    ):
        self.store = store
        self.cfg = cfg or SimulationConfig()
        self.rng = rng or random.Random()
        self._lock = threading.Lock()
        self._jitter: Optional[Ticker] = None
        self._delivery: Optional[Ticker] = None

    # ------------------------------------------------------------------
    # ticks
    # ------------------------------------------------------------------

    def jitter_tick(self) -> int:
        half = self.cfg.jitter_span / 2.0
        moved = 0
        for order in self.store.orders():
            if not order.is_on_route or not order.id:
                continue
            d_lat = self.rng.uniform(-half, half)
            d_lng = self.rng.uniform(-half, half)
            if self.store.update_location(order.id, order.latitude + d_lat, order.longitude + d_lng):
                moved += 1
        return moved

    def delivery_tick(self) -> list[str]:
        active = [o for o in self.store.on_route() if o.id]
        if not active:
            return []

        count = math.ceil(self.rng.random() * self.cfg.max_deliveries)
        count = max(1, min(count, len(active)))

        self.rng.shuffle(active)
        delivered: list[str] = []
        for order in active[:count]:
            if self.store.mark_delivered(order.id):
                delivered.append(order.id)

        if delivered:
            logger.info("auto-delivered: %s", ",".join(delivered))
        return delivered

    # ------------------------------------------------------------------
    # lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        self.start_jitter()
        self.start_delivery()

    def start_jitter(self) -> None:
        with self._lock:
            if self._jitter is not None:
                return
            self._jitter = Ticker(name="GpsJitter", period_sec=self.cfg.jitter_sec, fn=self.jitter_tick)
            self._jitter.start()

    def start_delivery(self) -> None:
        with self._lock:
            if self._delivery is not None:
                return
            self._delivery = Ticker(name="AutoDelivery", period_sec=self.cfg.delivery_sec, fn=self.delivery_tick)
            self._delivery.start()

    def stop(self, *, join: bool = True, timeout: float = 5.0) -> None:
        with self._lock:
            tickers = [t for t in (self._jitter, self._delivery) if t is not None]
            self._jitter = None
            self._delivery = None
        for t in tickers:
            t.stop()
        if join:
            for t in tickers:
                t.join(timeout)

    def is_running(self) -> bool:
        with self._lock:
            return self._jitter is not None
