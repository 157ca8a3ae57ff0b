from src.tracking.config import DashboardConfig
from src.tracking.context import build_context
from src.tracking.core.demo.generator import MARKER_KEY


def test_session_start_and_close(tmp_path):
    cfg = DashboardConfig.from_dict(
        {
            "storage": {"backend": "memory", "state_path": str(tmp_path / "state.json")},
            "simulation": {"jitter_sec": 0.05, "delivery_sec": 60},
            "demo": {"check_sec": 60},
        }
    )
    ctx = build_context(cfg)
    try:
        ctx.start()
        assert ctx.simulator.is_running()
        assert ctx.daily_worker is not None and ctx.daily_worker.is_alive()

        assert ctx.sync.flush(timeout=10)
        assert 5 <= len(ctx.store) <= 10
        assert ctx.kv.get(MARKER_KEY) is not None
        assert ctx.stats().todays_count == len(ctx.store)

        # restart within the same day: no second batch
        ctx.start()
        assert ctx.sync.flush(timeout=10)
        assert len(ctx.storage.fetch_all()) == len(ctx.store)
    finally:
        worker = ctx.daily_worker
        ctx.close()

    assert not ctx.simulator.is_running()
    worker.join(5)
    assert not worker.is_alive()
