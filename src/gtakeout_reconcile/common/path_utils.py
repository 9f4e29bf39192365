"""Path utilities for consistent path handling in reports."""

import unicodedata
from pathlib import Path


def normalize_path(path: Path | str) -> str:
    """
    Normalize a path for storage in the summary report.

    Applies Unicode NFC normalization and forward slash conversion, so
    album folder names with composed/decomposed characters (common in
    Takeout exports produced on macOS) compare and serialize the same way.

    Args:
        path: Path object or string to normalize

    Returns:
        Normalized path string with forward slashes and NFC Unicode normalization

    Examples:
        >>> normalize_path(Path("café/résumé.jpg"))
        'café/résumé.jpg'
        >>> normalize_path(r"C:\\Takeout\\Google Photos")
        'C:/Takeout/Google Photos'
    """
    normalized = unicodedata.normalize('NFC', str(path))
    return normalized.replace('\\', '/')
