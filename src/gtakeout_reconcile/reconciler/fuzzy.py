"""Fuzzy sidecar matching.

Pairs media files with sidecars whose names drifted too far for the
candidate rules, by scoring every unclaimed sidecar in the media file's
directory against the media file name.
"""

import logging
import os
import threading
from pathlib import Path
from typing import Callable, Collection, Dict, List, Optional, Tuple

from rapidfuzz import fuzz, process, utils

from .config import DEFAULT_IGNORED_EXTENSIONS, DEFAULT_IGNORED_FILENAMES
from .models import MediaFile, MatchProvenance, SidecarSet
from .path_utils import is_sidecar_name, should_scan_file

logger = logging.getLogger(__name__)

DEFAULT_FUZZY_THRESHOLD = 90

Scorer = Callable[..., float]


class DirectorySidecarCache:
    """Lazily lists the sidecar names present in each directory.

    A directory is listed at most once; entries are never invalidated
    during a run. Lookups of already listed directories take no lock.
    """

    def __init__(
        self,
        ignored_filenames: Collection[str] = frozenset(DEFAULT_IGNORED_FILENAMES),
        ignored_extensions: Collection[str] = frozenset(DEFAULT_IGNORED_EXTENSIONS),
    ):
        self.ignored_filenames = ignored_filenames
        self.ignored_extensions = ignored_extensions
        self._listings: Dict[Path, Tuple[str, ...]] = {}
        self._lock = threading.Lock()

    def get(self, directory: Path) -> Tuple[str, ...]:
        """Return the sidecar file names in a directory.

        Raises:
            OSError: If the directory cannot be listed
        """
        listing = self._listings.get(directory)
        if listing is not None:
            return listing

        with self._lock:
            listing = self._listings.get(directory)
            if listing is None:
                listing = self._list_directory(directory)
                self._listings[directory] = listing
        return listing

    def __len__(self) -> int:
        return len(self._listings)

    def _list_directory(self, directory: Path) -> Tuple[str, ...]:
        names = []
        with os.scandir(directory) as entries:
            for entry in entries:
                if entry.is_dir():
                    continue
                path = Path(entry.path)
                if not path.suffix:
                    continue
                if not should_scan_file(path, self.ignored_filenames, self.ignored_extensions):
                    continue
                if is_sidecar_name(entry.name):
                    names.append(entry.name)

        logger.debug(f"Listed sidecars: {{'directory': {str(directory)!r}, 'count': {len(names)}}}")
        return tuple(sorted(names))


class FuzzyMatcher:
    """Scores unclaimed sidecar names against a media file name.

    Scores come from ``rapidfuzz`` (``WRatio`` over names preprocessed with
    ``utils.default_process``) and are rounded to an integer 0-100; a
    match is accepted when the best score reaches ``threshold``.
    """

    def __init__(
        self,
        cache: Optional[DirectorySidecarCache] = None,
        threshold: int = DEFAULT_FUZZY_THRESHOLD,
        scorer: Scorer = fuzz.WRatio,
    ):
        if not 0 <= threshold <= 100:
            raise ValueError(f"Fuzzy threshold out of range: {threshold}")
        self.cache = cache or DirectorySidecarCache()
        self.threshold = threshold
        self.scorer = scorer

    def best_match(self, media_name: str, choices: List[str]) -> Optional[Tuple[str, int]]:
        """Return the best scoring choice and its rounded score, if accepted."""
        if not choices:
            return None

        result = process.extractOne(
            media_name,
            choices,
            scorer=self.scorer,
            processor=utils.default_process,
        )
        if result is None:
            return None

        name, score, _ = result
        rounded = int(round(score))
        if rounded < self.threshold:
            return None
        return name, rounded

    def match(self, media_file: MediaFile, sidecars: SidecarSet) -> bool:
        """Try to bind an unclaimed sidecar from the media file's directory.

        Returns:
            True if a sidecar was claimed and bound. False when nothing
            scored high enough or another worker claimed the winner first.
        """
        directory = media_file.media_path.parent
        names = self.cache.get(directory)
        choices = [name for name in names if (directory / name) in sidecars]

        best = self.best_match(media_file.media_path.name, choices)
        if best is None:
            logger.debug(f"No fuzzy match: {{'path': {str(media_file.media_path)!r}}}")
            return False

        name, score = best
        sidecar_path = directory / name
        if not sidecars.claim(sidecar_path):
            logger.debug(
                f"Fuzzy match lost to another file: {{'path': {str(media_file.media_path)!r}, "
                f"'sidecar': {str(sidecar_path)!r}}}"
            )
            return False

        media_file.bind_sidecar(sidecar_path, MatchProvenance.fuzzy(score))
        logger.debug(
            f"Fuzzy match: {{'path': {str(media_file.media_path)!r}, "
            f"'sidecar': {str(sidecar_path)!r}, 'score': {score}}}"
        )
        return True
