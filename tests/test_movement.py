import threading
import time

import pytest

from conftest import make_order
from src.tracking.core.models.enums import OrderStatus
from src.tracking.core.simulation.movement import MovementSimulator, SimulationConfig, Ticker


@pytest.fixture
def simulator(store, rng):
    sim = MovementSimulator(store, cfg=SimulationConfig(jitter_sec=0.05, delivery_sec=0.05), rng=rng)
    yield sim
    sim.stop()


def test_jitter_moves_only_on_route_orders_with_id(store, simulator):
    store.load(
        [
            make_order(1, lat=20.0, lng=78.0),
            make_order(2, lat=21.0, lng=79.0, status=OrderStatus.DELIVERED),
            make_order(None, lat=22.0, lng=80.0),
        ]
    )
    assert simulator.jitter_tick() == 1

    moved, delivered, pending = store.orders()
    assert (moved.latitude, moved.longitude) != (20.0, 78.0)
    assert abs(moved.latitude - 20.0) <= 0.005
    assert abs(moved.longitude - 78.0) <= 0.005
    assert (delivered.latitude, delivered.longitude) == (21.0, 79.0)
    assert (pending.latitude, pending.longitude) == (22.0, 80.0)


def test_jitter_stays_within_span(store, simulator):
    store.load([make_order(i, lat=0.0, lng=0.0) for i in range(1, 51)])
    simulator.jitter_tick()
    for o in store.orders():
        assert -0.005 <= o.latitude <= 0.005
        assert -0.005 <= o.longitude <= 0.005


def test_delivery_tick_marks_one_or_two(store, simulator):
    store.load([make_order(i) for i in range(1, 8)])
    for _ in range(3):
        before = len(store.on_route())
        delivered = simulator.delivery_tick()
        assert 1 <= len(delivered) <= 2
        assert len(set(delivered)) == len(delivered)
        assert len(store.on_route()) == before - len(delivered)


def test_delivery_tick_bounded_by_available(store, simulator):
    store.load([make_order(1), make_order(2, status=OrderStatus.DELIVERED)])
    assert simulator.delivery_tick() == ["1"]
    assert simulator.delivery_tick() == []
    assert all(o.status == OrderStatus.DELIVERED for o in store.orders())


def test_delivery_never_reverts_status(store, simulator):
    store.load([make_order(i) for i in range(1, 4)])
    for _ in range(5):
        simulator.delivery_tick()
        simulator.jitter_tick()
    assert all(o.status == OrderStatus.DELIVERED for o in store.orders())


def _live(name):
    return [t for t in threading.enumerate() if t.name == name and t.is_alive()]


def test_start_is_idempotent_and_stop(simulator):
    assert simulator.is_running() is False
    simulator.start()
    simulator.start()
    assert len(_live("GpsJitter")) == 1
    assert len(_live("AutoDelivery")) == 1
    assert simulator.is_running() is True

    jitter = _live("GpsJitter")[0]
    simulator.stop()
    assert simulator.is_running() is False
    assert not jitter.is_alive()
    assert _live("GpsJitter") == [] and _live("AutoDelivery") == []
    simulator.stop()


def test_timers_drive_the_store(store, simulator):
    store.load([make_order(1, lat=10.0, lng=10.0), make_order(2, lat=10.0, lng=10.0)])
    simulator.start()
    deadline = time.monotonic() + 5
    while store.on_route() and time.monotonic() < deadline:
        time.sleep(0.02)
    simulator.stop()
    assert store.on_route() == []


def test_ticker_survives_exceptions():
    calls = []
    done = threading.Event()

    def flaky():
        calls.append(1)
        if len(calls) == 1:
            raise RuntimeError("first tick fails")
        done.set()

    t = Ticker(name="Flaky", period_sec=0.01, fn=flaky)
    t.start()
    assert done.wait(5)
    t.stop()
    t.join(5)
    assert len(calls) >= 2
    assert not t.is_alive()
