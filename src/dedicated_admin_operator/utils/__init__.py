"""Utility functions for the Dedicated Admin Operator."""

from .errors import sanitize_error_message, sanitize_exception
from .events import (
    emit_event,
    emit_rolebinding_created,
    emit_rolebinding_failed,
    namespace_event_body,
)

__all__ = [
    "emit_event",
    "emit_rolebinding_created",
    "emit_rolebinding_failed",
    "namespace_event_body",
    "sanitize_error_message",
    "sanitize_exception",
]
