"""Reconciliation core: the tick state machine and the monitor driving it."""

from .monitor import MonitorScheduler
from .reconciler import Reconciler, TickOutcome, TickResult

__all__ = ["MonitorScheduler", "Reconciler", "TickOutcome", "TickResult"]
