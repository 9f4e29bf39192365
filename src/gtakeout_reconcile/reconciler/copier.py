"""Copy stage: writes resolved media files into the output tree."""

import logging
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import List

from .errors import CopyError, InvariantViolationError, classify_error
from .models import FileError, MediaFile
from .progress import ProgressTracker

logger = logging.getLogger(__name__)


@dataclass
class CopyResult:
    """Outcome of the copy stage."""
    copied: int = 0
    renamed: int = 0
    errors: List[FileError] = field(default_factory=list)


def resolve_collision(destination: Path) -> Path:
    """
    Return a free path for destination.

    ``photo.jpg`` becomes ``photo_1.jpg``, ``photo_2.jpg``, ... until a name
    is found that does not exist yet.
    """
    if not destination.exists():
        return destination

    n = 1
    while True:
        candidate = destination.with_name(f"{destination.stem}_{n}{destination.suffix}")
        if not candidate.exists():
            return candidate
        n += 1


def copy_media_file(media_file: MediaFile) -> bool:
    """
    Copy one media file to its destination, renaming on collision.

    The final destination is recorded on the media file.

    Returns:
        True if the file had to be renamed

    Raises:
        InvariantViolationError: If the file was never classified
        CopyError: If the copy fails
    """
    if media_file.destination_path is None:
        raise InvariantViolationError(
            "Media file reached the copy stage without a destination",
            path=str(media_file.media_path),
        )

    try:
        media_file.destination_path.parent.mkdir(parents=True, exist_ok=True)
        destination = resolve_collision(media_file.destination_path)
        shutil.copy2(media_file.media_path, destination)
    except OSError as e:
        raise CopyError(
            f"Cannot copy {media_file.media_path} to {media_file.destination_path}: {e}",
            path=str(media_file.media_path),
            destination=str(media_file.destination_path),
        ) from e

    renamed = destination != media_file.destination_path
    if renamed:
        logger.debug(
            f"Destination collision: {{'path': {str(media_file.media_path)!r}, "
            f"'destination': {str(destination)!r}}}"
        )
        media_file.destination_path = destination
    return renamed


def copy_files(media_files: List[MediaFile], fail_fast: bool = True, progress_interval: int = 500) -> CopyResult:
    """Copy all media files serially, in list order."""
    result = CopyResult()
    progress = ProgressTracker("Copying", len(media_files), progress_interval)

    for media_file in media_files:
        try:
            if copy_media_file(media_file):
                result.renamed += 1
            result.copied += 1
        except CopyError as e:
            if fail_fast:
                raise
            logger.warning(f"Copy failed: {{'path': {str(media_file.media_path)!r}, 'error': {str(e)!r}}}")
            result.errors.append(FileError(media_file.media_path, 'copy', classify_error(e), str(e)))
        progress.increment()

    progress.log_final_summary()
    logger.info(
        f"Copy complete: {{'copied': {result.copied}, 'renamed': {result.renamed}, 'errors': {len(result.errors)}}}"
    )
    return result
