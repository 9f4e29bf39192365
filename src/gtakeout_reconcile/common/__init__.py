"""Common utilities for gtakeout-reconcile."""

from .config import ConfigLoader
from .logging import setup_logging, LogContext
from .logging_config import LoggingConfig
from .errors import ReconcileError
from .path_utils import normalize_path
from .checksums import compute_sha3_256

__all__ = [
    'ConfigLoader',
    'LoggingConfig',
    'setup_logging',
    'LogContext',
    'ReconcileError',
    'normalize_path',
    'compute_sha3_256',
]
