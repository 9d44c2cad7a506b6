"""
Drip Runner Adapter.

Background worker that ticks the drip scheduler on a fixed interval.

Key behaviors:
- One daemon thread per process
- First tick after a start delay, then every interval
- A lock serializes ticks, so a manual trigger never overlaps a scheduled one
- Errors in a tick are logged and the loop keeps running
"""

from __future__ import annotations

import logging
import threading

from src.components.drip import DripBatchResult, DripService

logger = logging.getLogger(__name__)


class DripRunner:
    """Runs DripService.process_due() in a background thread."""

    def __init__(
        self,
        service: DripService,
        interval_seconds: float = 3600.0,
        start_delay_seconds: float = 30.0,
    ) -> None:
        self._service = service
        self._interval = interval_seconds
        self._start_delay = start_delay_seconds
        self._stop_event = threading.Event()
        self._tick_lock = threading.Lock()
        self._thread: threading.Thread | None = None
        self._running = False
        self.ticks = 0

    def start(self) -> None:
        """Start the background loop."""
        if self._running:
            return

        self._stop_event.clear()
        self._thread = threading.Thread(target=self._loop, name="drip-runner", daemon=True)
        self._thread.start()
        self._running = True
        logger.info(
            "Drip runner started (start delay: %.1fs, interval: %.1fs)",
            self._start_delay,
            self._interval,
        )

    def stop(self) -> None:
        """Stop the loop; an in-flight tick finishes first."""
        if not self._running:
            return

        self._stop_event.set()
        if self._thread:
            self._thread.join(timeout=5.0)
        self._running = False
        logger.info("Drip runner stopped")

    def trigger_now(self) -> DripBatchResult:
        """Run one tick synchronously, waiting for any tick in progress."""
        return self._tick()

    @property
    def is_running(self) -> bool:
        return self._running

    def _tick(self) -> DripBatchResult:
        with self._tick_lock:
            batch = self._service.process_due()
            self.ticks += 1

        if batch.error:
            logger.error("Drip tick failed: %s", batch.error)
        elif batch.scanned:
            logger.info(
                "Drip tick processed %d leads: %d sent, %d failed",
                batch.scanned,
                batch.sent,
                batch.failed,
            )
        return batch

    def _loop(self) -> None:
        if self._stop_event.wait(timeout=self._start_delay):
            return

        while True:
            try:
                self._tick()
            except Exception:
                logger.exception("Error in drip runner loop")
            if self._stop_event.wait(timeout=self._interval):
                return
