"""Monitor scheduler: supervision, serialization and fixed-rate skipping."""

from __future__ import annotations

import threading
import time

import pytest

from spotikeep.core.monitor import MonitorScheduler
from spotikeep.core.reconciler import TickOutcome, TickResult


class _ScriptedReconciler:
    def __init__(self, *steps):
        self.steps = list(steps)
        self.calls = 0

    def tick(self):
        self.calls += 1
        step = self.steps.pop(0) if self.steps else TickResult(TickOutcome.IN_SYNC)
        if isinstance(step, Exception):
            raise step
        return step


def _wait_for(predicate, timeout=2.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.005)
    return False


def test_interval_must_be_positive():
    with pytest.raises(ValueError):
        MonitorScheduler(_ScriptedReconciler(), 0)


def test_run_once_records_outcome():
    monitor = MonitorScheduler(_ScriptedReconciler(TickResult(TickOutcome.REASSERTED, error="No active device")), 20)

    result = monitor.run_once()
    status = monitor.status()

    assert result.outcome is TickOutcome.REASSERTED
    assert status["tick_count"] == 1
    assert status["last_outcome"] == "reasserted"
    assert status["last_error"] == "No active device"
    assert status["last_tick_at"].endswith("Z")
    assert status["running"] is False


def test_crashing_tick_is_counted_not_raised():
    monitor = MonitorScheduler(_ScriptedReconciler(RuntimeError("boom"), TickResult(TickOutcome.IN_SYNC)), 20)

    assert monitor.run_once() is None
    assert monitor.run_once().outcome is TickOutcome.IN_SYNC

    status = monitor.status()
    assert status["error_count"] == 1
    assert status["tick_count"] == 2
    assert status["last_outcome"] == "in_sync"


def test_loop_survives_failing_ticks():
    reconciler = _ScriptedReconciler(RuntimeError("first"), KeyError("second"))
    monitor = MonitorScheduler(reconciler, 0.01)

    monitor.start()
    try:
        assert _wait_for(lambda: reconciler.calls >= 4)
    finally:
        monitor.stop(timeout=1)

    status = monitor.status()
    assert status["error_count"] == 2
    assert status["running"] is False


def test_start_is_idempotent():
    monitor = MonitorScheduler(_ScriptedReconciler(), 5)
    monitor.start()
    first_thread = monitor._thread
    monitor.start()
    try:
        assert monitor._thread is first_thread
        assert first_thread.name == "ReconciliationMonitor"
        assert first_thread.daemon is True
    finally:
        monitor.stop(timeout=1)
    assert not first_thread.is_alive()


def test_overlapping_run_is_skipped():
    entered = threading.Event()
    release = threading.Event()

    class _Blocking:
        def tick(self):
            entered.set()
            release.wait(2)
            return TickResult(TickOutcome.IN_SYNC)

    monitor = MonitorScheduler(_Blocking(), 20)
    worker = threading.Thread(target=monitor.run_once)
    worker.start()
    assert entered.wait(2)

    assert monitor.run_once() is None
    release.set()
    worker.join(2)

    status = monitor.status()
    assert status["tick_count"] == 1
    assert status["skipped_ticks"] == 1


@pytest.mark.parametrize("now, expected_deadline, expected_missed", [
    (12.0, 20.0, 0),
    (20.0, 30.0, 1),
    (34.5, 40.0, 2),
])
def test_advance_deadline_skips_missed_slots(now, expected_deadline, expected_missed):
    monitor = MonitorScheduler(_ScriptedReconciler(), 10)

    deadline, missed = monitor.advance_deadline(10.0, now)

    assert deadline == expected_deadline
    assert missed == expected_missed


def test_restart_waits_for_busy_loop_to_exit():
    entered = threading.Event()
    release = threading.Event()

    class _Blocking:
        def __init__(self):
            self.calls = 0

        def tick(self):
            self.calls += 1
            entered.set()
            release.wait(2)
            return TickResult(TickOutcome.IN_SYNC)

    monitor = MonitorScheduler(_Blocking(), 0.01)
    monitor.start()
    old_thread = monitor._thread
    assert entered.wait(2)

    monitor.stop(timeout=0.05)
    assert old_thread.is_alive()
    assert monitor.status()["running"] is False

    alive_before = threading.active_count()
    monitor.start()
    assert monitor._thread is old_thread
    assert threading.active_count() == alive_before

    release.set()
    old_thread.join(2)
    assert not old_thread.is_alive()

    monitor.start()
    try:
        assert monitor._thread is not old_thread
        assert monitor.is_running()
    finally:
        monitor.stop(timeout=1)
