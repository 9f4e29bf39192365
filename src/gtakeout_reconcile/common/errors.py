"""Base error definitions for gtakeout_reconcile."""

from typing import Any, Dict


class ReconcileError(Exception):
    """Base exception for all gtakeout_reconcile errors.

    Keyword arguments are kept as ``context`` for structured logging.
    """

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.message = message
        self.context: Dict[str, Any] = context
