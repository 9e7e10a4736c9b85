"""Supervised periodic driver for the reconciliation loop.

- One daemon thread ticks on a fixed-rate monotonic schedule
- Ticks never overlap; slots missed while a tick overran are skipped
- Any exception escaping a tick is logged and counted, the loop keeps going
"""
from __future__ import annotations

import datetime as _dt
import logging
import threading
import time
from typing import Any, Callable, Dict, Optional, Tuple

from ..utils.logger import log_shutdown
from .reconciler import Reconciler, TickOutcome, TickResult

_logger = logging.getLogger("spotikeep.monitor")


def _utc_now_iso() -> str:
    now = _dt.datetime.now(tz=_dt.timezone.utc)
    return now.isoformat(timespec="seconds").replace("+00:00", "Z")


class MonitorScheduler:
    def __init__(
        self,
        reconciler: Reconciler,
        interval_seconds: float,
        *,
        monotonic: Callable[[], float] = time.monotonic,
    ):
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self._reconciler = reconciler
        self._interval = float(interval_seconds)
        self._monotonic = monotonic
        self._thread: Optional[threading.Thread] = None
        self._stop_event = threading.Event()
        self._lock = threading.RLock()
        # Held for the duration of a tick; shared by the thread and run_once()
        self._tick_lock = threading.Lock()
        self._running = False

        self._tick_count = 0
        self._skipped_ticks = 0
        self._error_count = 0
        self._last_tick_at: Optional[str] = None
        self._last_outcome: Optional[str] = None
        self._last_error: Optional[str] = None

    @property
    def interval_seconds(self) -> float:
        return self._interval

    def start(self) -> None:
        with self._lock:
            if self._thread is not None and self._thread.is_alive():
                if self._stop_event.is_set():
                    _logger.warning("Previous monitor loop is still finishing a tick; not restarting")
                return
            self._stop_event.clear()
            self._thread = threading.Thread(target=self._run_loop, name="ReconciliationMonitor", daemon=True)
            self._running = True
            self._thread.start()
            _logger.info("🔁 Reconciliation monitor started (every %.1fs)", self._interval)

    def stop(self, timeout: Optional[float] = None) -> None:
        with self._lock:
            thread = self._thread
            self._stop_event.set()
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)
        with self._lock:
            self._running = False
            if thread is not None and thread.is_alive():
                # Keep the reference so start() cannot spawn a second loop
                _logger.warning("Monitor thread still busy after stop timeout; it exits after the current tick")
            else:
                self._thread = None
        log_shutdown(_logger, "reconciliation monitor")

    def is_running(self) -> bool:
        with self._lock:
            return self._running

    def advance_deadline(self, deadline: float, now: float) -> Tuple[float, int]:
        """Next fixed-rate deadline after ``deadline`` that is still ahead of ``now``.

        Returns:
            Tuple of (next deadline, number of slots skipped)
        """
        next_deadline = deadline + self._interval
        if now < next_deadline:
            return next_deadline, 0
        missed = int((now - next_deadline) // self._interval) + 1
        return next_deadline + missed * self._interval, missed

    def _run_loop(self) -> None:
        deadline = self._monotonic() + self._interval
        while not self._stop_event.is_set():
            delay = deadline - self._monotonic()
            if delay > 0 and self._stop_event.wait(delay):
                break
            self.run_once()
            deadline, missed = self.advance_deadline(deadline, self._monotonic())
            if missed:
                with self._lock:
                    self._skipped_ticks += missed
                _logger.debug("Tick overran; skipped %d slot(s)", missed)

    def run_once(self) -> Optional[TickResult]:
        """Run one tick now unless one is already in flight.

        Returns:
            Optional[TickResult]: None when skipped or when the tick raised
        """
        if not self._tick_lock.acquire(blocking=False):
            with self._lock:
                self._skipped_ticks += 1
            _logger.debug("Tick already in flight; skipping")
            return None
        try:
            try:
                result = self._reconciler.tick()
            except Exception as exc:
                _logger.exception("💥 Reconciliation tick crashed")
                with self._lock:
                    self._tick_count += 1
                    self._error_count += 1
                    self._last_tick_at = _utc_now_iso()
                    self._last_outcome = "error"
                    self._last_error = f"{exc.__class__.__name__}: {exc}"
                return None

            with self._lock:
                self._tick_count += 1
                self._last_tick_at = _utc_now_iso()
                self._last_outcome = result.outcome.value
                self._last_error = result.error
            if result.outcome in (TickOutcome.DISABLED, TickOutcome.IN_SYNC):
                _logger.debug("Tick: %s", result.outcome.value)
            return result
        finally:
            self._tick_lock.release()

    def status(self) -> Dict[str, Any]:
        with self._lock:
            return {
                "running": self._running,
                "interval_seconds": self._interval,
                "tick_count": self._tick_count,
                "skipped_ticks": self._skipped_ticks,
                "error_count": self._error_count,
                "last_tick_at": self._last_tick_at,
                "last_outcome": self._last_outcome,
                "last_error": self._last_error,
            }


__all__ = ["MonitorScheduler"]
