"""Tests for the base error type."""

import pytest

from gtakeout_reconcile.common import ReconcileError


class TestReconcileError:
    """Tests for ReconcileError."""

    def test_message_and_context(self):
        """Test base ReconcileError functionality."""
        error = ReconcileError("Test error", file_path="/test/path")

        assert str(error) == "Test error"
        assert error.message == "Test error"
        assert error.context == {"file_path": "/test/path"}

    def test_context_preserved(self):
        """Test that all keyword context is kept."""
        error = ReconcileError("Access denied", file_path="/test/path", user="testuser", mode="r")

        assert error.context == {"file_path": "/test/path", "user": "testuser", "mode": "r"}

    def test_without_context(self):
        """Test errors work without context."""
        error = ReconcileError("Invalid JSON")

        assert error.message == "Invalid JSON"
        assert error.context == {}

    def test_context_is_mutable(self):
        """Test that handlers can add context before re-raising."""
        with pytest.raises(ReconcileError) as exc_info:
            try:
                raise ReconcileError("Unknown file type", description="Zip archive data")
            except ReconcileError as e:
                e.context['path'] = "/in/a.jpg"
                raise

        assert exc_info.value.context == {"description": "Zip archive data", "path": "/in/a.jpg"}
