"""Configuration utilities."""

import os
import tempfile
from pathlib import Path

import platformdirs


def expand_path_variables(path: str) -> str:
    """Expand ${VAR} variables in configured directory paths.

    Supported variables:
        ${USER_HOME}: User's home directory
        ${USER_DATA}: User data directory
        ${USER_PICTURES}: User pictures directory
        ${TEMP}: Temporary directory

    Args:
        path: Path string with variables

    Returns:
        Expanded path string
    """
    if not isinstance(path, str):
        return path

    replacements = {
        "${USER_HOME}": str(Path.home()),
        "${USER_DATA}": platformdirs.user_data_dir(),
        "${USER_PICTURES}": platformdirs.user_pictures_dir(),
        "${TEMP}": tempfile.gettempdir(),
    }

    for var, value in replacements.items():
        path = path.replace(var, value)

    return path


def get_cpu_count() -> int:
    """Get number of CPU cores, with fallback."""
    return os.cpu_count() or 4


def auto_detect_io_workers(multiplier: float = 2.0, min_workers: int = 4) -> int:
    """Auto-detect number of I/O worker threads.

    Hashing, existence checks and exiftool calls are all I/O bound, so
    the pool is sized above the core count.

    Args:
        multiplier: Multiplier for CPU count
        min_workers: Minimum number of workers

    Returns:
        Number of I/O workers
    """
    return max(min_workers, int(get_cpu_count() * multiplier))
