# src/tracking/core/models/order.py
from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any, Mapping, Optional

from src.tracking.core.models.enums import OrderStatus


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    ISO-8601 -> datetime. A trailing 'Z' is accepted.
    Naive results are left naive (caller decides the zone).
    Returns None for empty / unparseable input.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value
    s = str(value).strip()
    if not s:
        return None
    if s.endswith(("Z", "z")):
        s = s[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(s)
    except ValueError:
        return None


def format_timestamp(dt: datetime) -> str:
    """UTC datetime -> '2024-01-01T09:15:00.000Z' (the wire format of the orders API)."""
    return dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{dt.microsecond // 1000:03d}Z"


@dataclass(slots=True)
class Order:
    """
    Delivery order.

    id is assigned by the persistence backend and stays None until the
    order has been created there. created_at is kept as the raw ISO string
    received from the backend; date grouping works on its text prefix.
    """

    customer_name: str
    status: OrderStatus
    latitude: float
    longitude: float
    amount: float
    created_at: Optional[str] = None
    id: Optional[str] = None

    # ------------------------------------------------------------
    # Constructors
    # ------------------------------------------------------------
    @classmethod
    def from_dict(cls, row: Mapping[str, Any]) -> "Order":
        """
        Accepts both the camelCase wire shape and snake_case DB rows.
        """
        def pick(*keys: str, default: Any = None) -> Any:
            for k in keys:
                if k in row and row[k] is not None:
                    return row[k]
            return default

        raw_id = pick("id", "order_id")
        status = pick("status", default=OrderStatus.ON_ROUTE.value)
        created = pick("createdAt", "created_at")
        if isinstance(created, datetime):
            created = created.isoformat()

        return cls(
            id=None if raw_id is None else str(raw_id),
            customer_name=str(pick("customerName", "customer_name", default="")),
            status=OrderStatus(getattr(status, "value", status)),
            latitude=float(pick("latitude", "lat", default=0.0)),
            longitude=float(pick("longitude", "lng", default=0.0)),
            amount=float(pick("amount", default=0.0)),
            created_at=None if created is None else str(created),
        )

    # ------------------------------------------------------------
    # Wire
    # ------------------------------------------------------------
    def to_payload(self) -> dict:
        """camelCase representation; id omitted while pending creation."""
        out = {
            "customerName": self.customer_name,
            "status": self.status.value,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "amount": self.amount,
            "createdAt": self.created_at,
        }
        if self.id is not None:
            out["id"] = self.id
        return out

    # ------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------
    @property
    def is_on_route(self) -> bool:
        return self.status == OrderStatus.ON_ROUTE

    @property
    def created_date(self) -> Optional[str]:
        """'YYYY-MM-DD' text prefix of created_at."""
        if not self.created_at:
            return None
        return self.created_at.split("T")[0]

    def created_dt(self) -> Optional[datetime]:
        return parse_timestamp(self.created_at)

    def with_location(self, lat: float, lng: float) -> "Order":
        return replace(self, latitude=float(lat), longitude=float(lng))

    def delivered(self) -> "Order":
        return replace(self, status=OrderStatus.DELIVERED)

    def __repr__(self) -> str:
        return (
            f"Order(id={self.id} {self.customer_name!r} "
            f"{self.status.value} amount={self.amount} "
            f"at=({self.latitude:.5f},{self.longitude:.5f}))"
        )
