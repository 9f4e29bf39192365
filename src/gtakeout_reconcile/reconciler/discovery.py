"""File discovery for Google Takeout exports.

Walks the extracted archive and splits it into media files and JSON
sidecars. Unreadable directories and entries are collected instead of
aborting the walk.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Collection, List

from .config import DEFAULT_IGNORED_EXTENSIONS, DEFAULT_IGNORED_FILENAMES
from .errors import classify_error
from .models import FileError, MediaFile
from .path_utils import is_sidecar_name, should_scan_file

logger = logging.getLogger(__name__)


@dataclass
class DiscoveryResult:
    """Result of file discovery.

    Attributes:
        media_files: One MediaFile per discovered media file, sorted by path
        sidecars: All discovered JSON sidecars
        ignored: Files skipped by the ignore lists
        errors: Entries that could not be read
    """
    media_files: List[MediaFile] = field(default_factory=list)
    sidecars: set[Path] = field(default_factory=set)
    ignored: set[Path] = field(default_factory=set)
    errors: List[FileError] = field(default_factory=list)


def discover_files(
    takeout_dir: Path,
    ignored_filenames: Collection[str] = frozenset(DEFAULT_IGNORED_FILENAMES),
    ignored_extensions: Collection[str] = frozenset(DEFAULT_IGNORED_EXTENSIONS),
) -> DiscoveryResult:
    """Discover all media files and sidecars under a Takeout directory.

    Args:
        takeout_dir: Root of the extracted archive
        ignored_filenames: Lowercase file names to skip
        ignored_extensions: Lowercase extensions to skip

    Returns:
        DiscoveryResult with media files, sidecars and per-entry errors
    """
    logger.info(f"Discovering files: {{'path': {str(takeout_dir)!r}}}")

    result = DiscoveryResult()
    pending: list[Path] = [takeout_dir]

    while pending:
        directory = pending.pop()
        try:
            entries = list(os.scandir(directory))
        except OSError as e:
            logger.warning(f"Cannot read directory: {{'path': {str(directory)!r}, 'error': {str(e)!r}}}")
            result.errors.append(FileError(directory, 'discovery', classify_error(e), str(e)))
            continue

        for entry in entries:
            path = Path(entry.path)
            try:
                if entry.is_dir(follow_symlinks=False):
                    pending.append(path)
                    continue
                if not entry.is_file():
                    continue
            except OSError as e:
                logger.warning(f"Cannot stat entry: {{'path': {str(path)!r}, 'error': {str(e)!r}}}")
                result.errors.append(FileError(path, 'discovery', classify_error(e), str(e)))
                continue

            if not should_scan_file(path, ignored_filenames, ignored_extensions):
                result.ignored.add(path)
            elif is_sidecar_name(path.name):
                result.sidecars.add(path)
            else:
                result.media_files.append(MediaFile(media_path=path))

    result.media_files.sort(key=lambda f: f.media_path)

    logger.info(
        f"Files discovered: {{'media': {len(result.media_files)}, 'sidecars': {len(result.sidecars)}, "
        f"'ignored': {len(result.ignored)}, 'errors': {len(result.errors)}}}"
    )
    return result
