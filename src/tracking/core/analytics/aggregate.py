# src/tracking/core/analytics/aggregate.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, tzinfo
from typing import Iterable, Optional

from src.tracking.core.models.chart import ChartFilters, ChartQuery, ChartResult
from src.tracking.core.models.enums import ChartDimension, ChartMetric
from src.tracking.core.models.order import Order

_END_OF_DAY = time(23, 59, 59, 999000)


@dataclass(slots=True)
class Bucket:
    count: int = 0
    total: float = 0.0

    def add(self, amount: float) -> None:
        self.count += 1
        self.total += amount

    def value(self, metric: ChartMetric) -> float:
        if metric == ChartMetric.ORDER_COUNT:
            return self.count
        if metric == ChartMetric.TOTAL_REVENUE:
            return self.total
        if metric == ChartMetric.AVG_ORDER_VALUE:
            return 0.0 if self.count == 0 else self.total / self.count
        raise ValueError(f"unknown metric: {metric!r}")


# ------------------------------------------------------------
# time helpers
# tz=None means the machine's local zone
# ------------------------------------------------------------
def _localize(dt: datetime, tz: Optional[tzinfo]) -> datetime:
    if dt.tzinfo is None:
        # naive timestamps are wall-clock time in the target zone
        return dt.replace(tzinfo=tz) if tz is not None else dt.astimezone()
    return dt.astimezone(tz)


def start_of_day(d: date, tz: Optional[tzinfo] = None) -> datetime:
    return _localize(datetime.combine(d, time.min), tz)


def end_of_day(d: date, tz: Optional[tzinfo] = None) -> datetime:
    return _localize(datetime.combine(d, _END_OF_DAY), tz)


# ------------------------------------------------------------
# steps
# ------------------------------------------------------------
def filter_orders(
    orders: Iterable[Order],
    filters: ChartFilters,
    *,
    tz: Optional[tzinfo] = None,
) -> list[Order]:
    out = list(orders)

    if filters.status is not None:
        out = [o for o in out if o.status == filters.status]

    if filters.has_date_range:
        lo = start_of_day(filters.from_date, tz) if filters.from_date else None
        hi = end_of_day(filters.to_date, tz) if filters.to_date else None

        kept = []
        for o in out:
            created = o.created_dt()
            if created is None:
                continue
            created = _localize(created, tz)
            if lo is not None and created < lo:
                continue
            if hi is not None and created > hi:
                continue
            kept.append(o)
        out = kept

    return out


def bucket_key(order: Order, dimension: ChartDimension, *, tz: Optional[tzinfo] = None) -> Optional[str]:
    if dimension == ChartDimension.DATE:
        return order.created_date

    if dimension == ChartDimension.HOUR:
        created = order.created_dt()
        if created is None:
            return None
        return f"{_localize(created, tz).hour:02d}:00"

    if dimension == ChartDimension.STATUS:
        return order.status.value

    if dimension == ChartDimension.CUSTOMER:
        return order.customer_name

    return None


def sort_keys(keys: Iterable[str], dimension: ChartDimension) -> list[str]:
    if dimension == ChartDimension.HOUR:
        return sorted(keys, key=lambda k: int(k.split(":")[0]))
    return sorted(keys)


def build_buckets(
    orders: Iterable[Order],
    dimension: ChartDimension,
    *,
    tz: Optional[tzinfo] = None,
) -> dict[str, Bucket]:
    buckets: dict[str, Bucket] = {}
    for o in orders:
        key = bucket_key(o, dimension, tz=tz)
        if not key:
            continue
        b = buckets.get(key)
        if b is None:
            b = buckets[key] = Bucket()
        b.add(o.amount)
    return buckets


# ------------------------------------------------------------
# entry point
# ------------------------------------------------------------
def build_chart_data(
    orders: Iterable[Order],
    query: ChartQuery,
    *,
    tz: Optional[tzinfo] = None,
) -> ChartResult:
    """
    filter -> bucket by dimension -> sort keys -> one value per key.

    Pure: same orders + query (+ tz) always give the same result.
    """
    survivors = filter_orders(orders, query.filters, tz=tz)
    buckets = build_buckets(survivors, query.dimension, tz=tz)

    labels: list[str] = []
    data: list[float] = []
    for key in sort_keys(buckets.keys(), query.dimension):
        labels.append(key)
        data.append(buckets[key].value(query.metric))

    return ChartResult(labels=tuple(labels), data=tuple(data))
