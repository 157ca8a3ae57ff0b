# src/tracking/config.py
from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml

from src.tracking.core.demo.generator import DemoConfig
from src.tracking.core.simulation.movement import SimulationConfig

ROOT = Path(__file__).resolve().parents[2]  # src/tracking/ -> repo root
DEFAULT_CONFIG_PATH = ROOT / "config" / "dashboard.yaml"


def _get_env(name: str, default: Optional[str] = None) -> Optional[str]:
    v = os.getenv(name)
    if v is None:
        return default
    v = v.strip()
    return v if v else default


def _load_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        raise SystemExit(f"Config file not found: {path}")
    data = yaml.safe_load(path.read_text(encoding="utf-8"))
    return data or {}


@dataclass(frozen=True)
class StorageConfig:
    backend: str = "rest"  # rest | postgres | memory
    api_url: str = "http://127.0.0.1:3000"
    timeout_sec: float = 10.0
    max_retries: int = 3
    backoff_sec: float = 0.5
    state_path: str = ".dashboard_state.json"
    pg_dsn: Optional[str] = None


@dataclass(frozen=True)
class DashboardConfig:
    storage: StorageConfig = field(default_factory=StorageConfig)
    simulation: SimulationConfig = field(default_factory=SimulationConfig)
    demo: DemoConfig = field(default_factory=DemoConfig)
    demo_check_sec: float = 600.0
    sync_workers: int = 2
    summary_sec: float = 30.0
    log_level: str = "INFO"

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "DashboardConfig":
        st = raw.get("storage") or {}
        sim = raw.get("simulation") or {}
        demo = raw.get("demo") or {}
        sync = raw.get("sync") or {}

        backend = str(st.get("backend", "rest")).strip().lower()
        if backend not in ("rest", "postgres", "memory"):
            raise ValueError(f"storage.backend must be rest|postgres|memory, got {backend!r}")

        state_path = str(_get_env("DASHBOARD_STATE_PATH", st.get("state_path") or ".dashboard_state.json"))
        if not Path(state_path).is_absolute():
            state_path = str(ROOT / state_path)

        return cls(
            storage=StorageConfig(
                backend=backend,
                api_url=str(_get_env("ORDERS_API_URL", st.get("api_url") or "http://127.0.0.1:3000")),
                timeout_sec=float(st.get("timeout_sec", 10.0)),
                max_retries=int(st.get("max_retries", 3)),
                backoff_sec=float(st.get("backoff_sec", 0.5)),
                state_path=state_path,
                pg_dsn=_get_env("PG_DSN", st.get("pg_dsn")),
            ),
            simulation=SimulationConfig(
                jitter_sec=float(sim.get("jitter_sec", 2.5)),
                jitter_span=float(sim.get("jitter_span", 0.01)),
                delivery_sec=float(sim.get("delivery_sec", 120.0)),
                max_deliveries=int(sim.get("max_deliveries", 2)),
            ),
            demo=DemoConfig(
                min_daily=int(demo.get("min_daily", 5)),
                max_daily=int(demo.get("max_daily", 10)),
            ),
            demo_check_sec=float(demo.get("check_sec", 600.0)),
            sync_workers=int(sync.get("workers", 2)),
            summary_sec=float(raw.get("summary_sec", 30.0)),
            log_level=str(_get_env("LOG_LEVEL", raw.get("log_level") or "INFO")).upper(),
        )


def load_config(path: str | Path | None = None) -> DashboardConfig:
    return DashboardConfig.from_dict(_load_yaml(Path(path) if path else DEFAULT_CONFIG_PATH))
