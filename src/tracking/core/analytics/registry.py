# src/tracking/core/analytics/registry.py
from __future__ import annotations

import json
import logging
import threading
from datetime import tzinfo
from typing import Optional

from src.tracking.core.analytics.aggregate import build_chart_data
from src.tracking.core.models.chart import ChartQuery, StoredChart
from src.tracking.core.orders.store import OrderStore
from src.tracking.data.storage.base import KeyValueStore

log = logging.getLogger("tracking.analytics.registry")

STORAGE_KEY = "custom_analytics_charts"


class ChartRegistry:
    """
    User-defined charts, persisted as one JSON list under STORAGE_KEY.

    Each chart is computed once in add_chart() and never refreshed.
    Every change rewrites the whole blob.
    """

    def __init__(
        self,
        *,
        kv: KeyValueStore,
        store: OrderStore,
        key: str = STORAGE_KEY,
        tz: Optional[tzinfo] = None,
    ):
        self.kv = kv
        self.store = store
        self.key = key
        self.tz = tz
        self._lock = threading.Lock()
        self._charts: list[StoredChart] = []
        self._next_id = 1
        self.reload()

    @property
    def charts(self) -> list[StoredChart]:
        with self._lock:
            return list(self._charts)

    def get(self, chart_id: int) -> Optional[StoredChart]:
        with self._lock:
            for c in self._charts:
                if c.id == chart_id:
                    return c
        return None

    # ------------------------------------------------------------------
    # persistence
    # ------------------------------------------------------------------

    def reload(self) -> None:
        charts = self._read()
        with self._lock:
            self._charts = charts
            self._next_id = max((c.id for c in charts), default=0) + 1

    def _read(self) -> list[StoredChart]:
        raw = self.kv.get(self.key)
        if not raw:
            return []
        try:
            items = json.loads(raw)
        except ValueError as e:
            log.warning("Chart registry blob is corrupt -> empty registry: %s", e)
            return []
        if not isinstance(items, list):
            log.warning("Chart registry blob is not a list -> empty registry")
            return []

        charts: list[StoredChart] = []
        for item in items:
            try:
                charts.append(StoredChart.from_dict(item))
            except (KeyError, TypeError, ValueError) as e:
                log.warning("Skipping malformed stored chart %r: %s", item, e)
        return charts

    def _save_locked(self) -> None:
        self.kv.set(self.key, json.dumps([c.to_dict() for c in self._charts], ensure_ascii=False))

    # ------------------------------------------------------------------
    # operations
    # ------------------------------------------------------------------

    def add_chart(self, query: ChartQuery) -> StoredChart:
        result = build_chart_data(self.store.orders(), query, tz=self.tz)
        with self._lock:
            chart = StoredChart(
                id=self._next_id,
                kind=query.kind,
                dimension=query.dimension,
                metric=query.metric,
                labels=result.labels,
                data=result.data,
                title=query.title,
            )
            self._next_id += 1
            self._charts.append(chart)
            self._save_locked()
        log.info("chart added: #%d %s (%d points)", chart.id, chart.title, len(chart.labels))
        return chart

    def remove_chart(self, chart_id: int) -> bool:
        with self._lock:
            kept = [c for c in self._charts if c.id != chart_id]
            if len(kept) == len(self._charts):
                return False
            self._charts = kept
            self._save_locked()
        log.info("chart removed: #%d", chart_id)
        return True

    def clear(self) -> None:
        with self._lock:
            self._charts = []
            self.kv.remove(self.key)
