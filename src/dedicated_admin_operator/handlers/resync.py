"""Periodic re-delivery of namespaces.

kopf lists namespaces once when the watch starts and afterwards only delivers
changes, and it never retries event handlers. The resync loop runs in a
background thread and re-drives passes on its own schedule:

* every ``RESYNC_INTERVAL_SECONDS`` it lists all namespaces and runs a pass for each
* a namespace whose pass raised, or left a RoleBinding uncreated, is retried
  with exponential backoff until a pass completes cleanly
"""

from __future__ import annotations

import threading
import time
from typing import Any, Callable

from .. import metrics
from ..constants import (
    KIND_NAMESPACE,
    RESYNC_INTERVAL_SECONDS,
    RETRY_DELAY_SECONDS,
    RETRY_MAX_DELAY_SECONDS,
)
from .base import BaseHandler


class ResyncLoop(BaseHandler):
    """Re-runs reconciliation passes for all namespaces and for failed ones."""

    def __init__(
        self,
        reconcile: Callable[[str], Any],
        list_names: Callable[[], list[str]],
        interval: float = RESYNC_INTERVAL_SECONDS,
        retry_delay: float = RETRY_DELAY_SECONDS,
        max_retry_delay: float = RETRY_MAX_DELAY_SECONDS,
        clock: Callable[[], float] = time.monotonic,
        poll_interval: float = 1.0,
    ):
        """Initialize resync loop.

        Args:
            reconcile: Runs one pass for a namespace and returns its outcome
            list_names: Returns the names of all namespaces
            interval: Seconds between full resyncs
            retry_delay: Delay before the first retry of a failed namespace
            max_retry_delay: Upper bound for the doubled retry delay
            clock: Monotonic time source
            poll_interval: Seconds the background thread sleeps between ticks
        """
        super().__init__(KIND_NAMESPACE)
        self._reconcile = reconcile
        self._list_names = list_names
        self.interval = interval
        self.retry_delay = retry_delay
        self.max_retry_delay = max_retry_delay
        self._clock = clock
        self.poll_interval = poll_interval

        self._lock = threading.Lock()
        # name -> (attempts, due time)
        self._retries: dict[str, tuple[int, float]] = {}
        self._next_resync: float | None = None
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    @staticmethod
    def needs_retry(outcome: Any) -> bool:
        """A completed pass needs a retry when any RoleBinding failed."""
        report = getattr(outcome, "report", None)
        return report is not None and report.errored > 0

    def pending(self) -> dict[str, float]:
        """Due times of the namespaces waiting for a retry."""
        with self._lock:
            return {name: due for name, (_, due) in self._retries.items()}

    def schedule_retry(self, name: str) -> float:
        """Schedule a retry for a namespace, doubling the delay on every attempt.

        Returns:
            Seconds until the retry is due
        """
        with self._lock:
            attempts = self._retries.get(name, (0, 0.0))[0] + 1
            delay = min(self.retry_delay * 2 ** (attempts - 1), self.max_retry_delay)
            self._retries[name] = (attempts, self._clock() + delay)

        metrics.retry_scheduled_total.inc()
        self.log_warning(name, "Pass incomplete, retry scheduled", reason="RetryScheduled", attempt=attempts, delay=delay)
        return delay

    def clear(self, name: str) -> None:
        with self._lock:
            self._retries.pop(name, None)

    def record(self, name: str, outcome: Any) -> None:
        """Schedule or clear the retry for a namespace based on a finished pass."""
        if self.needs_retry(outcome):
            self.schedule_retry(name)
        else:
            self.clear(name)

    def run_pass(self, name: str, trigger: str) -> Any | None:
        """Run one pass from the loop.

        Errors are logged by the pass itself and turned into a scheduled retry.

        Returns:
            The pass outcome, or None if the pass raised
        """
        metrics.resync_passes_total.labels(trigger=trigger).inc()
        try:
            outcome = self._reconcile(name)
        except Exception:
            self.schedule_retry(name)
            return None
        self.record(name, outcome)
        return outcome

    def resync(self) -> None:
        """Run a pass for every namespace in the cluster."""
        try:
            names = self._list_names()
        except Exception as e:
            self.log_error("*", "Failed to list namespaces for resync", error=e, reason="ResyncFailed")
            return

        self.log_info("*", "Resyncing namespaces", event="resync", reason="Resync", count=len(names))
        for name in names:
            if self._stop.is_set():
                return
            self.run_pass(name, "resync")

    def retry_due(self) -> list[str]:
        """Run a pass for every namespace whose retry is due.

        Returns:
            Names of the retried namespaces
        """
        now = self._clock()
        with self._lock:
            due = [name for name, (_, at) in self._retries.items() if at <= now]
        for name in due:
            self.run_pass(name, "retry")
        return due

    def tick(self) -> None:
        """Run a full resync when one is due, otherwise the due retries."""
        now = self._clock()
        if self._next_resync is None:
            # The watch already delivers every namespace once at startup
            self._next_resync = now + self.interval
        if now >= self._next_resync:
            self.resync()
            self._next_resync = self._clock() + self.interval
        else:
            self.retry_due()

    def run(self) -> None:
        while not self._stop.wait(self.poll_interval):
            self.tick()

    def start(self) -> None:
        """Start the loop in a daemon thread."""
        if self._thread is not None and self._thread.is_alive():
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self.run, name="namespace-resync", daemon=True)
        self._thread.start()

    def stop(self, timeout: float | None = 5.0) -> None:
        """Stop the loop and wait for the current tick to finish."""
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
