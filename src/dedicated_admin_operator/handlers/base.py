"""Base handler class with common functionality for resource handlers."""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, TypeVar

from .. import metrics
from ..constants import OPERATOR_NAME
from ..logging import log_resource_event
from ..utils.errors import sanitize_exception

_T = TypeVar("_T")


class BaseHandler:
    """Base class for resource handlers with structured logging and metrics."""

    def __init__(self, kind: str):
        """Initialize base handler.

        Args:
            kind: The Kubernetes resource kind (e.g., "Namespace")
        """
        self.kind = kind
        self.logger = logging.getLogger(__name__)

    def _log(
        self,
        level: int,
        name: str,
        message: str,
        event: str,
        reason: str,
        **kwargs: Any,
    ) -> None:
        log_resource_event(
            self.logger,
            controller=OPERATOR_NAME,
            resource_kind=self.kind,
            resource_name=name,
            event=event,
            reason=reason,
            message=message,
            level=level,
            **kwargs,
        )

    def log_info(
        self,
        name: str,
        message: str,
        event: str = "info",
        reason: str = "Info",
        **kwargs: Any,
    ) -> None:
        """Log an info-level structured log message.

        Args:
            name: Resource name
            message: Log message
            event: Event type (default: "info")
            reason: Reason for the event (default: "Info")
            **kwargs: Additional fields to include in the log
        """
        self._log(logging.INFO, name, message, event, reason, **kwargs)

    def log_warning(
        self,
        name: str,
        message: str,
        event: str = "warning",
        reason: str = "Warning",
        **kwargs: Any,
    ) -> None:
        """Log a warning-level structured log message."""
        self._log(logging.WARNING, name, message, event, reason, **kwargs)

    def log_error(
        self,
        name: str,
        message: str,
        error: BaseException | None = None,
        event: str = "error",
        reason: str = "Error",
        **kwargs: Any,
    ) -> None:
        """Log an error-level structured log message.

        Args:
            name: Resource name
            message: Log message
            error: Optional exception, logged in sanitized form
            event: Event type (default: "error")
            reason: Reason for the event (default: "Error")
            **kwargs: Additional fields to include in the log
        """
        log_data = kwargs.copy()

        if error is not None:
            log_data["error"] = sanitize_exception(error)
            log_data["error_type"] = type(error).__name__

        self._log(logging.ERROR, name, message, event, reason, **log_data)

    def result_label(self, result: Any) -> str:
        """Metric label for a finished reconciliation."""
        return "success"

    def reconcile_with_metrics(self, name: str, reconcile_fn: Callable[[], _T]) -> _T:
        """Execute reconciliation with metrics and error handling.

        Args:
            name: Resource name
            reconcile_fn: Function to execute for reconciliation

        Returns:
            Whatever reconcile_fn returns
        """
        start_time = time.time()
        try:
            result = reconcile_fn()
            metrics.reconcile_total.labels(result=self.result_label(result)).inc()
            return result
        except Exception as e:
            metrics.error_total.labels(error_type=type(e).__name__).inc()
            metrics.reconcile_total.labels(result="error").inc()
            self.log_error(name, "Reconciliation failed", error=e, reason="ReconciliationFailed")
            raise
        finally:
            duration = time.time() - start_time
            metrics.reconcile_duration_seconds.observe(duration)
