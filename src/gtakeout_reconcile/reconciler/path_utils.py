"""Path utilities for the reconciler."""

from pathlib import Path
from typing import Collection

from .config import DEFAULT_IGNORED_EXTENSIONS, DEFAULT_IGNORED_FILENAMES

__all__ = ['should_scan_file', 'is_sidecar_name', 'SIDECAR_SUFFIX']

SIDECAR_SUFFIX = ".json"


def should_scan_file(
    path: Path,
    ignored_filenames: Collection[str] = frozenset(DEFAULT_IGNORED_FILENAMES),
    ignored_extensions: Collection[str] = frozenset(DEFAULT_IGNORED_EXTENSIONS),
) -> bool:
    """
    Determine if a file takes part in reconciliation.

    The same exclusion lists are applied during enumeration, the fuzzy
    tier's directory listing and classification.

    Excluded files:
    - Takeout bookkeeping files (metadata.json, print-subscriptions.json, ...)
      compared case-insensitively on the whole name
    - Files whose extension (case-insensitive, no dot) is ignored, e.g. html

    Args:
        path: Path to check
        ignored_filenames: Lowercase file names to skip
        ignored_extensions: Lowercase extensions without dot to skip

    Returns:
        True if the file should be considered
    """
    if path.name.lower() in ignored_filenames:
        return False

    extension = path.suffix[1:].lower()
    if extension and extension in ignored_extensions:
        return False

    return True


def is_sidecar_name(name: str) -> bool:
    """Sidecars are recognised by a literal, lowercase .json ending."""
    return name.endswith(SIDECAR_SUFFIX)
