"""Tests for base handler functionality."""

from __future__ import annotations

import json
import logging
from unittest.mock import Mock, patch

import pytest

from dedicated_admin_operator.handlers.base import BaseHandler


class TestBaseHandler:
    """Test cases for BaseHandler class."""

    def test_init(self):
        """Test handler initialization."""
        handler = BaseHandler(kind="TestKind")
        assert handler.kind == "TestKind"
        assert handler.logger is not None

    @patch("dedicated_admin_operator.handlers.base.metrics")
    def test_reconcile_with_metrics_success(self, mock_metrics):
        """Test successful reconciliation with metrics."""
        handler = BaseHandler(kind="TestKind")
        reconcile_fn = Mock(return_value="done")

        result = handler.reconcile_with_metrics("test-resource", reconcile_fn)

        assert result == "done"
        reconcile_fn.assert_called_once()
        mock_metrics.reconcile_total.labels.assert_called_once_with(result="success")
        mock_metrics.reconcile_duration_seconds.observe.assert_called_once()

    @patch("dedicated_admin_operator.handlers.base.metrics")
    @patch("dedicated_admin_operator.handlers.base.sanitize_exception")
    def test_reconcile_with_metrics_failure(self, mock_sanitize, mock_metrics):
        """Test failed reconciliation with metrics and error handling."""
        handler = BaseHandler(kind="TestKind")
        test_error = ValueError("Test error")
        mock_sanitize.return_value = "Sanitized error"

        def failing_fn():
            raise test_error

        with pytest.raises(ValueError):
            handler.reconcile_with_metrics("test-resource", failing_fn)

        mock_sanitize.assert_called_once_with(test_error)
        mock_metrics.error_total.labels.assert_called_with(error_type="ValueError")
        mock_metrics.reconcile_total.labels.assert_called_with(result="error")
        mock_metrics.reconcile_duration_seconds.observe.assert_called_once()

    def test_log_info_structured(self, caplog):
        """Test that log lines are JSON with resource context."""
        handler = BaseHandler(kind="Namespace")

        with caplog.at_level(logging.INFO, logger="dedicated_admin_operator.handlers.base"):
            handler.log_info("team-a", "hello", reason="Greeting", extra_field=3)

        record = json.loads(caplog.records[-1].getMessage())
        assert record["controller"] == "dedicated-admin-operator"
        assert record["resource"] == "Namespace"
        assert record["name"] == "team-a"
        assert record["reason"] == "Greeting"
        assert record["message"] == "hello"
        assert record["extra_field"] == 3

    def test_log_levels(self, caplog):
        """Test that warnings and errors use their log levels."""
        handler = BaseHandler(kind="Namespace")

        with caplog.at_level(logging.INFO, logger="dedicated_admin_operator.handlers.base"):
            handler.log_warning("team-a", "careful")
            handler.log_error("team-a", "failed")

        assert [r.levelno for r in caplog.records[-2:]] == [logging.WARNING, logging.ERROR]

    def test_log_error_includes_sanitized_error(self, caplog):
        """Test that errors are logged without credentials."""
        handler = BaseHandler(kind="Namespace")

        with caplog.at_level(logging.ERROR, logger="dedicated_admin_operator.handlers.base"):
            handler.log_error("team-a", "failed", error=RuntimeError("Bearer abc.def.ghi rejected"))

        record = json.loads(caplog.records[-1].getMessage())
        assert record["error_type"] == "RuntimeError"
        assert "abc.def.ghi" not in record["error"]
        assert "[REDACTED]" in record["error"]
