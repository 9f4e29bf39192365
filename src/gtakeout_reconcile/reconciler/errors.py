"""Error classes for the reconciler."""

from gtakeout_reconcile.common import ReconcileError


class ReconcilerError(ReconcileError):
    """Base error for reconciler operations."""
    pass


class UnknownFileTypeError(ReconcilerError):
    """The type sniffer returned a description with no known extension."""
    pass


class HashingError(ReconcilerError):
    """A media file could not be read while computing its content digest."""
    pass


class CopyError(ReconcilerError):
    """A media file could not be copied to its destination."""
    pass


class MetadataError(ReconcilerError):
    """A sidecar could not be parsed or its dates could not be applied."""
    pass


class ToolNotFoundError(ReconcilerError):
    """Required external tool is not available."""
    pass


class InvariantViolationError(ReconcilerError):
    """Pipeline state that upstream filtering should make impossible.

    Never collected as a per-file error; always propagates.
    """
    pass


def classify_error(exception: Exception) -> str:
    """
    Classify an exception into an error category for the summary report.

    Args:
        exception: The exception to classify

    Returns:
        Error category string: 'unknown_type', 'hashing', 'copy', 'metadata',
        'tool_missing', 'invariant', 'permission', 'io', 'parse' or 'unknown'
    """
    if isinstance(exception, UnknownFileTypeError):
        return 'unknown_type'
    elif isinstance(exception, HashingError):
        return 'hashing'
    elif isinstance(exception, CopyError):
        return 'copy'
    elif isinstance(exception, MetadataError):
        return 'metadata'
    elif isinstance(exception, ToolNotFoundError):
        return 'tool_missing'
    elif isinstance(exception, InvariantViolationError):
        return 'invariant'
    elif isinstance(exception, PermissionError):
        return 'permission'
    elif isinstance(exception, OSError):
        return 'io'
    elif isinstance(exception, (ValueError, KeyError)):
        return 'parse'
    else:
        return 'unknown'
