import threading
import logging

from src.tracking.core.demo.generator import DemoOrderGenerator

logger = logging.getLogger(__name__)


class DailyGenerationWorker(threading.Thread):
    """Re-checks the daily marker so a long session rolls over at midnight."""

    def __init__(self, *, generator: DemoOrderGenerator, check_sec: float = 600.0):
        super().__init__(daemon=True, name="DailyDemoOrders")
        self.generator = generator
        self.check_sec = float(check_sec)
        self._stop_event = threading.Event()

    def stop(self):
        self._stop_event.set()

    def tick(self) -> int:
        created = self.generator.generate_daily_orders()
        if created:
            logger.info("Daily demo orders generated: %d", created)
        return created

    def run(self):
        logger.info("DailyGenerationWorker started")
        while not self._stop_event.is_set():
            try:
                self.tick()
            except Exception as e:
                logger.exception("Daily generation error: %s", e)
            self._stop_event.wait(self.check_sec)
