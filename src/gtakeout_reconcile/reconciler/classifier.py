"""Destination classification.

Decides where each media file lands in the output tree and with which
extension:

- ``Archive`` and ``Photos from YYYY`` folders are the general library
- ``Untitled`` and ``Untitled(N)`` folders are shared albums
- every other folder is an album and keeps its name

Runs serially; one ``file`` invocation per media file.
"""

import logging
import re
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple

from .errors import ToolNotFoundError, UnknownFileTypeError, classify_error
from .models import DestinationCategory, FileError, MediaFile
from .type_sniffer import FileCommandSniffer, TypeSniffer, extension_for_description

logger = logging.getLogger(__name__)

GENERAL_FOLDER_NAME = "Archive"
SHARED_FOLDER_NAME = "Untitled"
SHARED_FOLDER_PREFIX = "Untitled("
YEAR_FOLDER_RE = re.compile(r"^Photos from \d{4}$", re.ASCII)

# Extensions copied as-is without sniffing
UNSNIFFED_EXTENSIONS = {"MTS"}


def categorize_directory(name: str) -> Tuple[DestinationCategory, Optional[str]]:
    """
    Map a source folder name to its destination category.

    Returns:
        (category, album segment); the segment is only set for Albums
    """
    if name == GENERAL_FOLDER_NAME or YEAR_FOLDER_RE.match(name):
        return DestinationCategory.GENERAL, None
    if name == SHARED_FOLDER_NAME or name.startswith(SHARED_FOLDER_PREFIX):
        return DestinationCategory.SHARED, None
    return DestinationCategory.ALBUMS, name


@dataclass
class ClassificationResult:
    """Outcome of classifying a batch of media files."""
    classified: int = 0
    extension_mismatches: int = 0
    errors: List[FileError] = field(default_factory=list)


class DestinationClassifier:
    """Assigns destination category, path and corrected extension."""

    def __init__(
        self,
        output_root: Path,
        sniffer: Optional[TypeSniffer] = None,
        general_dir: str = "general",
        shared_dir: str = "shared/shared",
        albums_dir: str = "albums",
        fail_fast: bool = True,
    ):
        self.output_root = Path(output_root)
        self.sniffer = sniffer or FileCommandSniffer()
        self.category_roots = {
            DestinationCategory.GENERAL: self.output_root / general_dir,
            DestinationCategory.SHARED: self.output_root / shared_dir,
            DestinationCategory.ALBUMS: self.output_root / albums_dir,
        }
        self.fail_fast = fail_fast

    def destination_for(self, media_path: Path) -> Tuple[DestinationCategory, Path]:
        """Destination before extension correction."""
        category, segment = categorize_directory(media_path.parent.name)
        root = self.category_roots[category]
        if segment is not None:
            root = root / segment
        return category, root / media_path.name

    def classify(self, media_file: MediaFile) -> bool:
        """
        Classify one media file in place.

        Returns:
            True if the sniffed extension differs from the file's own

        Raises:
            UnknownFileTypeError: If the content type is not recognised
        """
        category, destination = self.destination_for(media_file.media_path)
        media_file.destination_category = category
        media_file.destination_path = destination

        current_extension = destination.suffix[1:]
        if current_extension in UNSNIFFED_EXTENSIONS:
            return False

        description = self.sniffer.describe(media_file.media_path)
        try:
            extension = extension_for_description(description, current_extension)
        except UnknownFileTypeError as e:
            e.context['path'] = str(media_file.media_path)
            raise

        mismatch = current_extension.lower() != extension.lower()
        if mismatch:
            logger.debug(
                f"Extension mismatch: {{'path': {str(media_file.media_path)!r}, "
                f"'from': {current_extension!r}, 'to': {extension!r}}}"
            )
        if extension:
            media_file.destination_path = destination.with_suffix(f".{extension}")
        return mismatch

    def classify_all(self, media_files: List[MediaFile]) -> ClassificationResult:
        """
        Classify every media file.

        With fail_fast, the first unrecognised or unsniffable file aborts the
        run. Otherwise the failure is recorded and the file keeps its
        category with the original extension.
        """
        result = ClassificationResult()

        for media_file in media_files:
            try:
                if self.classify(media_file):
                    result.extension_mismatches += 1
            except ToolNotFoundError:
                raise
            except (UnknownFileTypeError, subprocess.SubprocessError, OSError) as e:
                if self.fail_fast:
                    raise
                logger.warning(
                    f"Classification failed: {{'path': {str(media_file.media_path)!r}, 'error': {str(e)!r}}}"
                )
                result.errors.append(
                    FileError(media_file.media_path, 'classify', classify_error(e), str(e))
                )
            result.classified += 1

        logger.info(
            f"Classification complete: {{'files': {result.classified}, "
            f"'extension_mismatches': {result.extension_mismatches}, 'errors': {len(result.errors)}}}"
        )
        return result
