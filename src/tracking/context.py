# src/tracking/context.py
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from src.tracking.config import DashboardConfig
from src.tracking.core.analytics.registry import ChartRegistry
from src.tracking.core.analytics.summary import DashboardStats
from src.tracking.core.demo.generator import DemoOrderGenerator
from src.tracking.core.orders.store import OrderStore
from src.tracking.core.orders.sync import RemoteSync
from src.tracking.core.simulation.daily_worker import DailyGenerationWorker
from src.tracking.core.simulation.movement import MovementSimulator
from src.tracking.data.storage.base import KeyValueStore, OrdersStorage
from src.tracking.data.storage.json_file import JsonFileKeyValueStore
from src.tracking.data.storage.memory import InMemoryOrdersStorage
from src.tracking.data.storage.rest import OrdersRestClient

log = logging.getLogger("tracking.context")


@dataclass
class AppContext:
    """
    One instance per session. Consumers receive these objects explicitly;
    nothing here is a module-level singleton.
    """

    cfg: DashboardConfig
    storage: OrdersStorage
    kv: KeyValueStore
    sync: RemoteSync
    store: OrderStore
    registry: ChartRegistry
    generator: DemoOrderGenerator
    simulator: MovementSimulator
    pool: Any = None
    daily_worker: Optional[DailyGenerationWorker] = field(default=None)

    def stats(self) -> DashboardStats:
        return DashboardStats.from_store(self.store)

    def start(self) -> None:
        """Initial load, today's demo batch, then the timers."""
        self.store.refresh()
        self.generator.generate_daily_orders()
        self.simulator.start()
        if self.daily_worker is None:
            self.daily_worker = DailyGenerationWorker(
                generator=self.generator,
                check_sec=self.cfg.demo_check_sec,
            )
            self.daily_worker.start()

    def close(self) -> None:
        self.simulator.stop()
        if self.daily_worker is not None:
            self.daily_worker.stop()
            self.daily_worker = None
        if not self.sync.flush(timeout=10.0):
            log.warning("shutdown: some remote writes still pending")
        self.sync.shutdown()
        if self.pool is not None:
            self.pool.close()


def _build_backends(cfg: DashboardConfig) -> tuple[OrdersStorage, KeyValueStore, Any]:
    st = cfg.storage

    if st.backend == "postgres":
        if not st.pg_dsn:
            raise SystemExit("PG_DSN env var is required for storage.backend=postgres")
        from src.tracking.data.storage.postgres.pool import create_pool
        from src.tracking.data.storage.postgres.storage import PostgresKeyValueStore, PostgresOrdersStorage

        pool = create_pool(st.pg_dsn)
        return PostgresOrdersStorage(pool), PostgresKeyValueStore(pool), pool

    kv = JsonFileKeyValueStore(st.state_path)
    if st.backend == "memory":
        return InMemoryOrdersStorage(), kv, None

    rest = OrdersRestClient(
        st.api_url,
        timeout=st.timeout_sec,
        max_retries=st.max_retries,
        backoff_base=st.backoff_sec,
    )
    return rest, kv, None


def build_context(cfg: DashboardConfig) -> AppContext:
    storage, kv, pool = _build_backends(cfg)
    sync = RemoteSync(workers=cfg.sync_workers)
    store = OrderStore(storage, sync=sync)

    ctx = AppContext(
        cfg=cfg,
        storage=storage,
        kv=kv,
        sync=sync,
        store=store,
        registry=ChartRegistry(kv=kv, store=store),
        generator=DemoOrderGenerator(store=store, kv=kv, cfg=cfg.demo),
        simulator=MovementSimulator(store, cfg=cfg.simulation),
        pool=pool,
    )
    log.info(
        "context ready: backend=%s state=%s",
        cfg.storage.backend,
        cfg.storage.state_path if cfg.storage.backend != "postgres" else "postgres:kv_state",
    )
    return ctx
