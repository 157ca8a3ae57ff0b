# src/tracking/core/models/chart.py
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Mapping, Optional

from src.tracking.core.models.enums import (
    CHART_KIND_LABELS,
    DIMENSION_LABELS,
    METRIC_LABELS,
    ChartDimension,
    ChartKind,
    ChartMetric,
    OrderStatus,
)


def _value(x: Any) -> Any:
    return getattr(x, "value", x)


def _opt_date(value: Any) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value).strip()[:10])


@dataclass(frozen=True, slots=True)
class ChartFilters:
    status: Optional[OrderStatus] = None
    from_date: Optional[date] = None
    to_date: Optional[date] = None

    @property
    def has_date_range(self) -> bool:
        return self.from_date is not None or self.to_date is not None


@dataclass(frozen=True, slots=True)
class ChartQuery:
    """
    What to chart: group orders by `dimension`, compute `metric` per group.
    `kind` only matters to the presentation layer and the stored title.
    """

    kind: ChartKind = ChartKind.BAR
    dimension: ChartDimension = ChartDimension.DATE
    metric: ChartMetric = ChartMetric.ORDER_COUNT
    filters: ChartFilters = field(default_factory=ChartFilters)

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "ChartQuery":
        """
        Build from loosely typed input (CLI args, YAML, JSON).
        Unknown enum values raise ValueError.
        """
        flt = raw.get("filters") or {}
        status = flt.get("status", raw.get("status"))
        return cls(
            kind=ChartKind(_value(raw.get("kind") or raw.get("chartType") or ChartKind.BAR)),
            dimension=ChartDimension(_value(raw.get("dimension") or raw.get("xAxis") or ChartDimension.DATE)),
            metric=ChartMetric(_value(raw.get("metric") or raw.get("yAxis") or ChartMetric.ORDER_COUNT)),
            filters=ChartFilters(
                status=OrderStatus(_value(status)) if status else None,
                from_date=_opt_date(flt.get("from_date", raw.get("from_date"))),
                to_date=_opt_date(flt.get("to_date", raw.get("to_date"))),
            ),
        )

    @property
    def title(self) -> str:
        return (
            f"{CHART_KIND_LABELS[self.kind]} - "
            f"{DIMENSION_LABELS[self.dimension]} vs "
            f"{METRIC_LABELS[self.metric]}"
        )


@dataclass(frozen=True, slots=True)
class ChartResult:
    labels: tuple[str, ...] = ()
    data: tuple[float, ...] = ()

    def __len__(self) -> int:
        return len(self.labels)

    def pairs(self) -> list[tuple[str, float]]:
        return list(zip(self.labels, self.data))


@dataclass(frozen=True, slots=True)
class StoredChart:
    """
    A chart frozen at creation time. It does not follow later order changes.
    """

    id: int
    kind: ChartKind
    dimension: ChartDimension
    metric: ChartMetric
    labels: tuple[str, ...]
    data: tuple[float, ...]
    title: str

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "chartType": self.kind.value,
            "dimension": self.dimension.value,
            "metric": self.metric.value,
            "labels": list(self.labels),
            "data": list(self.data),
            "title": self.title,
        }

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "StoredChart":
        labels = raw["labels"]
        data = raw["data"]
        if not isinstance(labels, list) or not isinstance(data, list):
            raise ValueError("labels/data must be lists")
        if len(labels) != len(data):
            raise ValueError("labels/data length mismatch")
        return cls(
            id=int(raw["id"]),
            kind=ChartKind(str(raw.get("chartType") or raw.get("kind"))),
            dimension=ChartDimension(str(raw.get("dimension", ChartDimension.DATE.value))),
            metric=ChartMetric(str(raw.get("metric", ChartMetric.ORDER_COUNT.value))),
            labels=tuple(str(x) for x in labels),
            data=tuple(float(x) for x in data),
            title=str(raw.get("title") or ""),
        )
