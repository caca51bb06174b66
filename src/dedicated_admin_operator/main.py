"""Main entry point for the Dedicated Admin Operator.

Run with ``kopf run --all-namespaces -m dedicated_admin_operator.main``.
"""

from __future__ import annotations

import logging
from typing import Any

import kopf

from . import health
from . import logging as structured_logging
from .constants import MAX_WORKERS, METRICS_PORT
from .handlers import namespace
from .tracing import initialize_tracing

logger = logging.getLogger(__name__)


@kopf.on.startup()
def configure(settings: kopf.OperatorSettings, **_: Any) -> None:
    """Configure the operator."""
    # Set up structured JSON logging
    structured_logging.setup_structured_logging()

    # Only warnings from kopf itself become Kubernetes events
    settings.posting.level = logging.WARNING
    settings.networking.request_timeout = 30.0
    settings.execution.max_workers = MAX_WORKERS
    settings.watching.reconnect_backoff = 1.0

    initialize_tracing()

    # Start metrics HTTP server with health check endpoints
    health.start_metrics_server(METRICS_PORT)
    logger.info(f"Serving metrics on port {METRICS_PORT}")

    # Periodic and retry passes, kopf only delivers namespace changes
    namespace.resync.start()
    health.mark_ready()


@kopf.on.cleanup()
def shutdown(**_: Any) -> None:
    """Report not ready and stop the resync loop while the operator stops."""
    health.mark_not_ready()
    namespace.resync.stop()
