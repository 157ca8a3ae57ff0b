# src/tracking/run_dashboard.py
from __future__ import annotations

import argparse
import logging
import signal
import threading

from dotenv import load_dotenv

from src.tracking.config import load_config
from src.tracking.context import build_context


def main() -> None:
    ap = argparse.ArgumentParser(description="Delivery dashboard: demo orders, GPS simulation, live summary")
    ap.add_argument("--config", default=None, help="path to dashboard.yaml")
    ap.add_argument("--no-simulation", action="store_true", help="load and summarise only, no timers")
    args = ap.parse_args()

    # -------------------------------------------------------------------------
    # ENV + CONFIG
    # -------------------------------------------------------------------------
    load_dotenv()
    cfg = load_config(args.config)

    # -------------------------------------------------------------------------
    # LOGGING
    # -------------------------------------------------------------------------
    logging.basicConfig(
        level=getattr(logging, cfg.log_level, logging.INFO),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )
    logger = logging.getLogger("tracking.run_dashboard")
    logger.info("=== DASHBOARD START ===")

    ctx = build_context(cfg)

    stop = threading.Event()

    def _on_signal(signum, _frame):
        logger.info("signal %s -> stopping", signum)
        stop.set()

    signal.signal(signal.SIGINT, _on_signal)
    signal.signal(signal.SIGTERM, _on_signal)

    try:
        if args.no_simulation:
            ctx.store.refresh()
            logger.info("dashboard summary\n%s", ctx.stats().render())
            return

        ctx.start()
        logger.info("simulation running=%s orders=%d", ctx.simulator.is_running(), len(ctx.store))

        while not stop.wait(cfg.summary_sec):
            logger.info("dashboard summary\n%s", ctx.stats().render())
    finally:
        ctx.close()
        logger.info("=== DASHBOARD STOP ===")


if __name__ == "__main__":
    main()
