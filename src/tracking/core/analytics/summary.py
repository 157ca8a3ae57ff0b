# src/tracking/core/analytics/summary.py
from __future__ import annotations

from dataclasses import dataclass

from src.tracking.core.models.order import Order
from src.tracking.core.orders.store import OrderStore


def _group_indian(digits: str) -> str:
    # 1234567 -> 12,34,567
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    parts = []
    while len(head) > 2:
        parts.insert(0, head[-2:])
        head = head[:-2]
    if head:
        parts.insert(0, head)
    return ",".join(parts) + "," + tail


def format_currency(amount: float) -> str:
    """₹ with Indian digit grouping, up to 2 decimals: 123456.5 -> '₹1,23,456.5'."""
    sign = "-" if amount < 0 else ""
    whole, _, frac = f"{abs(amount):.2f}".partition(".")
    frac = frac.rstrip("0")
    return f"{sign}₹{_group_indian(whole)}" + (f".{frac}" if frac else "")


@dataclass(frozen=True)
class DashboardStats:
    todays_count: int
    todays_revenue: float
    top_orders: tuple[Order, ...]

    @classmethod
    def from_store(cls, store: OrderStore) -> "DashboardStats":
        todays = store.todays_orders()
        return cls(
            todays_count=len(todays),
            todays_revenue=sum(o.amount for o in todays),
            top_orders=tuple(store.top_orders_of_day()),
        )

    @property
    def top_labels(self) -> list[str]:
        return [o.customer_name for o in self.top_orders]

    @property
    def top_amounts(self) -> list[float]:
        return [o.amount for o in self.top_orders]

    def render(self) -> str:
        lines = [
            f"Today's orders:  {self.todays_count}",
            f"Today's revenue: {format_currency(self.todays_revenue)}",
        ]
        if self.top_orders:
            lines.append("Top orders of the day:")
            for i, o in enumerate(self.top_orders, 1):
                lines.append(f"  {i}. #{o.id} {o.customer_name:<16} {format_currency(o.amount)}  {o.status.value}")
        return "\n".join(lines)
