"""Metrics and health check HTTP endpoints for the operator."""

from __future__ import annotations

import threading
from typing import Any

from prometheus_client import make_wsgi_app
from werkzeug.serving import BaseWSGIServer, make_server
from werkzeug.wrappers import Response

_ready = threading.Event()


def mark_ready() -> None:
    """Report the operator as ready on /readyz."""
    _ready.set()


def mark_not_ready() -> None:
    """Report the operator as not ready on /readyz."""
    _ready.clear()


def is_ready() -> bool:
    return _ready.is_set()


def create_combined_wsgi_app() -> Any:
    """Create a WSGI app serving /healthz and /readyz and delegating the rest to Prometheus.

    Returns:
        Combined WSGI application
    """
    metrics_app = make_wsgi_app()

    def combined_app(environ: dict[str, Any], start_response: Any) -> Any:
        path = environ.get("PATH_INFO", "")

        if path == "/healthz":
            response = Response('{"status":"ok"}', mimetype="application/json", status=200)
            return response(environ, start_response)
        if path == "/readyz":
            if is_ready():
                response = Response('{"status":"ready"}', mimetype="application/json", status=200)
            else:
                response = Response('{"status":"not ready"}', mimetype="application/json", status=503)
            return response(environ, start_response)

        # /metrics and anything else is served by prometheus_client
        return metrics_app(environ, start_response)

    return combined_app


def start_metrics_server(port: int, host: str = "") -> BaseWSGIServer:
    """Serve metrics and health endpoints from a daemon thread.

    Args:
        port: Port to listen on
        host: Interface to bind (all interfaces by default)

    Returns:
        The running server, so callers can shut it down
    """
    server = make_server(host, port, create_combined_wsgi_app(), threaded=True)
    thread = threading.Thread(target=server.serve_forever, name="metrics-server", daemon=True)
    thread.start()
    return server
