# src/tracking/data/storage/base.py
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Mapping, Optional

from src.tracking.core.models.order import Order


class OrdersStorage(ABC):
    """
    Source of truth for orders. Backends: REST (json-server), PostgreSQL, memory.
    """

    @abstractmethod
    def fetch_all(self) -> list[Order]: ...

    @abstractmethod
    def create(self, order: Order) -> Order:
        """Persist an order without id; returns it with the assigned id."""

    @abstractmethod
    def patch(self, order_id: str, fields: Mapping[str, Any]) -> None:
        """Partial update. `fields` uses the camelCase wire names."""


class KeyValueStore(ABC):
    """
    Durable string slots (chart registry blob, daily generation marker).
    """

    @abstractmethod
    def get(self, key: str) -> Optional[str]: ...

    @abstractmethod
    def set(self, key: str, value: str) -> None: ...

    @abstractmethod
    def remove(self, key: str) -> None: ...
