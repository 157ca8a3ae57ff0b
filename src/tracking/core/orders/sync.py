# src/tracking/core/orders/sync.py
from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import Any, Callable, Optional

log = logging.getLogger("tracking.orders.sync")


class RemoteSync:
    """
    Fire-and-forget channel for writes to the orders backend.

    submit() never blocks on the write. Failures are logged inside the task,
    nothing is retried and local state is not rolled back. A finished
    future therefore always resolves to (ok, result) and never raises.
    """

    def __init__(self, *, workers: int = 2, name: str = "orders_sync"):
        workers = max(1, min(16, int(workers)))
        self._pool = ThreadPoolExecutor(max_workers=workers, thread_name_prefix=name)
        self._pending: set[Future] = set()
        self._lock = threading.Lock()
        self._closed = False
        self.failures = 0

    def submit(
        self,
        fn: Callable[..., Any],
        *args: Any,
        label: str = "",
        on_done: Optional[Callable[[Any], None]] = None,
        **kwargs: Any,
    ) -> Optional[Future]:
        """
        Schedule fn(*args, **kwargs); on_done(result) runs in the same task on success.
        Returns None when the channel is already shut down.
        """
        name = label or getattr(fn, "__name__", "write")

        def _task() -> tuple[bool, Any]:
            try:
                result = fn(*args, **kwargs)
            except Exception as e:
                with self._lock:
                    self.failures += 1
                log.warning("remote write failed (%s): %r", name, e)
                return False, None
            if on_done is not None:
                try:
                    on_done(result)
                except Exception:
                    log.exception("sync on_done callback failed (%s)", name)
            return True, result

        with self._lock:
            if self._closed:
                log.warning("sync closed, dropping write: %s", name)
                return None
            fut = self._pool.submit(_task)
            self._pending.add(fut)

        fut.add_done_callback(self._forget)
        return fut

    def _forget(self, fut: Future) -> None:
        with self._lock:
            self._pending.discard(fut)

    def flush(self, timeout: Optional[float] = None) -> bool:
        """Wait for writes issued so far. True if all finished in time."""
        with self._lock:
            pending = list(self._pending)
        if not pending:
            return True
        _, not_done = wait(pending, timeout=timeout)
        return not not_done

    def shutdown(self, *, wait_pending: bool = True) -> None:
        with self._lock:
            self._closed = True
        self._pool.shutdown(wait=wait_pending)
