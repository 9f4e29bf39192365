"""Duplicate removal by content digest.

Takeout exports a photo once per album it appears in, plus once in the
general library. Byte-identical copies are collapsed to one, keeping the
copy with the most meaningful destination: Albums, then Shared, then
General.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from gtakeout_reconcile.common import compute_sha3_256
from gtakeout_reconcile.common.checksums import DIGEST_CHUNK_SIZE

from .errors import HashingError, InvariantViolationError, classify_error
from .models import FileError, MediaFile
from .progress import ProgressTracker

logger = logging.getLogger(__name__)

DEFAULT_HASH_BATCH_SIZE = 1024


@dataclass
class DedupResult:
    """Outcome of duplicate removal.

    Attributes:
        kept: Surviving media files, in input order
        removed: Media files dropped as duplicates
        errors: Files that could not be hashed (kept untouched)
    """
    kept: List[MediaFile] = field(default_factory=list)
    removed: List[MediaFile] = field(default_factory=list)
    errors: List[FileError] = field(default_factory=list)


class DuplicateRemover:
    """Finds byte-identical media files and keeps one per group."""

    def __init__(
        self,
        batch_size: int = DEFAULT_HASH_BATCH_SIZE,
        max_workers: int = 8,
        chunk_size: int = DIGEST_CHUNK_SIZE,
        fail_fast: bool = True,
        progress_interval: int = 500,
    ):
        """Initialize remover.

        Args:
            batch_size: Files hashed per stage; a stage finishes before the next starts
            max_workers: Hashing threads
            chunk_size: Read buffer size
            fail_fast: Raise on the first unreadable file instead of recording it
            progress_interval: Log progress every N files
        """
        if batch_size < 1:
            raise ValueError(f"batch_size must be positive: {batch_size}")
        self.batch_size = batch_size
        self.max_workers = max_workers
        self.chunk_size = chunk_size
        self.fail_fast = fail_fast
        self.progress_interval = progress_interval

    def remove_duplicates(self, media_files: List[MediaFile]) -> DedupResult:
        """
        Drop duplicate media files from the working set.

        Only the in-memory list shrinks; nothing on disk is touched.

        Raises:
            InvariantViolationError: If a file has not been classified
            HashingError: If a file cannot be read and fail_fast is set
        """
        for media_file in media_files:
            if media_file.destination_category is None:
                raise InvariantViolationError(
                    "Media file reached deduplication without a destination category",
                    path=str(media_file.media_path),
                )

        result = DedupResult()
        groups: Dict[bytes, List[MediaFile]] = {}

        for media_file, digest in self._hash_all(media_files, result.errors):
            if digest is not None:
                groups.setdefault(digest, []).append(media_file)

        removed_ids = set()
        for members in groups.values():
            if len(members) < 2:
                continue
            ordered = sorted(members, key=lambda f: f.destination_category.retention_priority)
            for duplicate in ordered[1:]:
                removed_ids.add(id(duplicate))
                logger.debug(
                    f"Duplicate removed: {{'path': {str(duplicate.media_path)!r}, "
                    f"'kept': {str(ordered[0].media_path)!r}}}"
                )

        for media_file in media_files:
            if id(media_file) in removed_ids:
                result.removed.append(media_file)
            else:
                result.kept.append(media_file)

        logger.info(
            f"Deduplication complete: {{'files': {len(media_files)}, 'kept': {len(result.kept)}, "
            f"'removed': {len(result.removed)}, 'errors': {len(result.errors)}}}"
        )
        return result

    def _hash_all(
        self,
        media_files: List[MediaFile],
        errors: List[FileError],
    ) -> List[Tuple[MediaFile, Optional[bytes]]]:
        """Hash files in staged batches, returning (file, digest) in input order."""
        progress = ProgressTracker("Hashing", len(media_files), self.progress_interval)
        hashed: List[Tuple[MediaFile, Optional[bytes]]] = []

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            for start in range(0, len(media_files), self.batch_size):
                batch = media_files[start:start + self.batch_size]
                futures = [executor.submit(self._hash_one, f) for f in batch]

                # Collect the whole stage before submitting the next one
                for media_file, future in zip(batch, futures):
                    try:
                        digest = future.result()
                    except HashingError as e:
                        if self.fail_fast:
                            raise
                        logger.warning(
                            f"Hashing failed: {{'path': {str(media_file.media_path)!r}, 'error': {str(e)!r}}}"
                        )
                        errors.append(FileError(media_file.media_path, 'dedup', classify_error(e), str(e)))
                        digest = None
                    hashed.append((media_file, digest))
                    progress.increment()

        progress.log_final_summary()
        return hashed

    def _hash_one(self, media_file: MediaFile) -> bytes:
        try:
            return compute_sha3_256(media_file.media_path, self.chunk_size)
        except OSError as e:
            raise HashingError(
                f"Cannot hash {media_file.media_path}: {e}",
                path=str(media_file.media_path),
            ) from e
