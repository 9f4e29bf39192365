"""Metadata embedding for copied media files.

For files with a sidecar, exiftool copies the sidecar's capture time into
the media's own date tags (only where the media has none), then the file
timestamps are set from the sidecar. Files dated from their name get the
inferred date as file timestamps.
"""

import json
import logging
import os
import subprocess
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from .errors import MetadataError, ToolNotFoundError, classify_error
from .models import FileError, MediaFile
from .progress import ProgressTracker

logger = logging.getLogger(__name__)

# Only touch files that lack a capture date of their own
EXIFTOOL_CONDITION = (
    '($Filetype eq "MP4" and not $quicktime:TrackCreateDate) or '
    '($Filetype eq "MP4" and $quicktime:TrackCreateDate eq "0000:00:00 00:00:00") or '
    '($Filetype eq "JPEG" and not $exif:DateTimeOriginal) or '
    '($Filetype eq "PNG" and not $PNG:CreationTime)'
)

_LOCAL_TIME = "${PhotoTakenTimeTimestamp;$_=ConvertUnixTime($_,1)}"
_UTC_TIME = "${PhotoTakenTimeTimestamp;$_=ConvertUnixTime($_,0)}"

EXIFTOOL_DATE_ARGS = [
    f"-AllDates<{_LOCAL_TIME}",
    f"-XMP-Exif:DateTimeOriginal<{_LOCAL_TIME}",
    f"-PNG:CreationTime<{_LOCAL_TIME}",
    # QuickTime dates are UTC
    f"-QuickTime:TrackCreateDate<{_UTC_TIME}",
    f"-QuickTime:TrackModifyDate<{_UTC_TIME}",
    f"-QuickTime:MediaCreateDate<{_UTC_TIME}",
    f"-QuickTime:MediaModifyDate<{_UTC_TIME}",
]

SIDECAR_TIMESTAMP_FIELDS = ("creationTime", "photoLastModifiedTime")


class ExifToolEmbedder:
    """Writes sidecar capture dates into media files with exiftool."""

    def __init__(self, command: str = "exiftool", timeout: int = 60):
        self.command = command
        self.timeout = timeout

    def build_args(self, sidecar_path: Path, destination_path: Path) -> List[str]:
        return [
            self.command,
            "-if", EXIFTOOL_CONDITION,
            "-tagsfromfile", str(sidecar_path),
            *EXIFTOOL_DATE_ARGS,
            "-overwrite_original",
            str(destination_path),
        ]

    def embed(self, sidecar_path: Path, destination_path: Path) -> bool:
        """
        Run exiftool for one file.

        A non-zero exit (including the condition not being met) is logged
        and reported as False; it does not stop the file's timestamps from
        being set.

        Raises:
            ToolNotFoundError: If exiftool is not installed
        """
        try:
            result = subprocess.run(
                self.build_args(sidecar_path, destination_path),
                capture_output=True,
                text=True,
                encoding='utf-8',
                errors='replace',
                timeout=self.timeout
            )
        except FileNotFoundError as e:
            raise ToolNotFoundError(f"exiftool '{self.command}' not found", tool=self.command) from e
        except subprocess.TimeoutExpired:
            logger.warning(f"exiftool timed out: {{'path': {str(destination_path)!r}}}")
            return False

        if result.returncode != 0:
            logger.debug(
                f"exiftool did not apply dates: {{'path': {str(destination_path)!r}, "
                f"'stderr': {_one_line(result.stderr)!r}, 'stdout': {_one_line(result.stdout)!r}}}"
            )
            return False
        return True


def _one_line(text: str) -> str:
    return text.replace('\r', '').replace('\n', '  ').strip()


def read_sidecar_timestamp(sidecar_path: Path) -> datetime:
    """
    Read the earlier of a sidecar's creation and last-modified timestamps.

    Raises:
        MetadataError: If the sidecar cannot be read or carries neither timestamp
    """
    try:
        with open(sidecar_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError, UnicodeDecodeError) as e:
        raise MetadataError(f"Cannot read sidecar {sidecar_path}: {e}", path=str(sidecar_path)) from e

    epochs = []
    for field_name in SIDECAR_TIMESTAMP_FIELDS:
        value = data.get(field_name) if isinstance(data, dict) else None
        if not isinstance(value, dict) or 'timestamp' not in value:
            continue
        try:
            epochs.append(int(value['timestamp']))
        except (TypeError, ValueError) as e:
            raise MetadataError(
                f"Invalid {field_name}.timestamp in {sidecar_path}: {value['timestamp']!r}",
                path=str(sidecar_path),
            ) from e

    if not epochs:
        raise MetadataError(f"Sidecar has no timestamps: {sidecar_path}", path=str(sidecar_path))

    try:
        return datetime.fromtimestamp(min(epochs)).astimezone()
    except (OSError, OverflowError, ValueError) as e:
        raise MetadataError(
            f"Sidecar timestamp out of range in {sidecar_path}: {min(epochs)}",
            path=str(sidecar_path),
        ) from e


def set_file_times(path: Path, timestamp: datetime) -> None:
    """Set both access and modification time."""
    epoch = timestamp.timestamp()
    os.utime(path, (epoch, epoch))


@dataclass
class EmbedResult:
    """Outcome of the embedding stage."""
    exif_applied: int = 0
    exif_skipped: int = 0
    times_applied: int = 0
    errors: List[FileError] = field(default_factory=list)


class MetadataEmbedder:
    """Applies sidecar and filename dates to copied files on a thread pool."""

    def __init__(
        self,
        exiftool: Optional[ExifToolEmbedder] = None,
        max_workers: int = 8,
        progress_interval: int = 500,
    ):
        """Initialize embedder.

        Args:
            exiftool: exiftool runner; None disables tag embedding
            max_workers: Worker threads
            progress_interval: Log progress every N files
        """
        self.exiftool = exiftool
        self.max_workers = max_workers
        self.progress_interval = progress_interval

    def embed_one(self, media_file: MediaFile) -> Optional[bool]:
        """
        Apply dates to one copied file.

        Returns:
            Whether exiftool applied tags, None when exiftool did not run

        Raises:
            MetadataError: If the sidecar cannot be used or timestamps cannot be set
        """
        destination = media_file.destination_path
        if destination is None:
            return None

        exif_applied = None
        if media_file.sidecar_path is not None:
            if self.exiftool is not None:
                exif_applied = self.exiftool.embed(media_file.sidecar_path, destination)
            timestamp = read_sidecar_timestamp(media_file.sidecar_path)
        elif media_file.creation_date is not None:
            timestamp = media_file.creation_date
        else:
            return None

        try:
            set_file_times(destination, timestamp)
        except (OSError, OverflowError, ValueError) as e:
            raise MetadataError(f"Cannot set timestamps on {destination}: {e}", path=str(destination)) from e
        return exif_applied

    def embed_all(self, media_files: List[MediaFile]) -> EmbedResult:
        """Apply dates to every copied file; failures are recorded per file."""
        result = EmbedResult()
        pending = [
            f for f in media_files
            if f.destination_path is not None and (f.sidecar_path is not None or f.creation_date is not None)
        ]
        progress = ProgressTracker("Embedding metadata", len(pending), self.progress_interval)

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            futures = {executor.submit(self.embed_one, f): f for f in pending}
            for future in as_completed(futures):
                media_file = futures[future]
                try:
                    exif_applied = future.result()
                except MetadataError as e:
                    logger.warning(
                        f"Metadata embedding failed: {{'path': {str(media_file.media_path)!r}, 'error': {str(e)!r}}}"
                    )
                    result.errors.append(FileError(media_file.media_path, 'embed', classify_error(e), str(e)))
                else:
                    result.times_applied += 1
                    if exif_applied is True:
                        result.exif_applied += 1
                    elif exif_applied is False:
                        result.exif_skipped += 1
                progress.increment()

        progress.log_final_summary()
        logger.info(
            f"Metadata embedding complete: {{'timestamps': {result.times_applied}, "
            f"'exif_applied': {result.exif_applied}, 'exif_skipped': {result.exif_skipped}, "
            f"'errors': {len(result.errors)}}}"
        )
        return result
