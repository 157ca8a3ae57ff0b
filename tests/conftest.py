import random
from datetime import datetime, timezone

import pytest

from src.tracking.core.models.enums import OrderStatus
from src.tracking.core.models.order import Order
from src.tracking.core.orders.store import OrderStore
from src.tracking.core.orders.sync import RemoteSync
from src.tracking.data.storage.memory import InMemoryKeyValueStore, InMemoryOrdersStorage


class FixedClock:
    """Callable clock the tests can move forward."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


def make_order(
    oid=None,
    *,
    customer="Aarav Sharma",
    status=OrderStatus.ON_ROUTE,
    amount=100.0,
    created_at="2024-01-01T09:15:00.000Z",
    lat=20.0,
    lng=78.0,
):
    return Order(
        id=None if oid is None else str(oid),
        customer_name=customer,
        status=status,
        latitude=lat,
        longitude=lng,
        amount=amount,
        created_at=created_at,
    )


@pytest.fixture
def clock():
    return FixedClock(datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def kv():
    return InMemoryKeyValueStore()


@pytest.fixture
def storage():
    return InMemoryOrdersStorage()


@pytest.fixture
def store(storage, clock):
    # no RemoteSync: backend writes happen inline, which keeps assertions simple
    return OrderStore(storage, clock=clock)


@pytest.fixture
def sync():
    s = RemoteSync(workers=2)
    yield s
    s.shutdown()
