"""Sidecar match orchestration.

Resolves each media file's sidecar (or, failing that, a date) in three
tiers. Each tier sees only the files the previous tiers left unmatched,
and finishes completely before the next one starts:

1. Direct: generated candidate paths, first existing unclaimed one wins
2. Fuzzy: best scoring unclaimed sidecar in the same directory
3. Filename date: YYYYMMDD embedded in the file name
"""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Dict, List, Optional

from .candidates import generate_candidates
from .filename_dates import infer_date_from_filename
from .fuzzy import FuzzyMatcher
from .models import JSON_FILE, MatchResult, MediaFile, SidecarSet
from .progress import ProgressTracker

logger = logging.getLogger(__name__)

# Photos that may have a paired live-photo video sharing their sidecar
PAIRED_PHOTO_EXTENSIONS = {"heic", "jpg"}
PAIRED_VIDEO_SUFFIXES = (".MP4", ".mp4")


class SidecarMatcher:
    """Runs the three match tiers over a set of discovered media files."""

    def __init__(
        self,
        sidecars: SidecarSet,
        fuzzy_matcher: Optional[FuzzyMatcher] = None,
        max_workers: int = 8,
        progress_interval: int = 500,
    ):
        """Initialize matcher.

        Args:
            sidecars: Discovered sidecars; claimed entries are removed from it
            fuzzy_matcher: Matcher used by the fuzzy tier
            max_workers: Threads used by the fuzzy tier
            progress_interval: Log progress every N files
        """
        self.sidecars = sidecars
        self.fuzzy_matcher = fuzzy_matcher or FuzzyMatcher()
        self.max_workers = max_workers
        self.progress_interval = progress_interval

    def match(self, media_files: List[MediaFile]) -> MatchResult:
        """Resolve sidecars and dates for all media files in place."""
        result = MatchResult()

        result.matched_direct, result.matched_paired = self.match_direct(media_files)
        logger.info(
            f"Direct matching complete: {{'matched': {result.matched_direct}, "
            f"'paired_videos': {result.matched_paired}}}"
        )

        result.matched_fuzzy = self.match_fuzzy(media_files)
        logger.info(f"Fuzzy matching complete: {{'matched': {result.matched_fuzzy}}}")

        result.matched_filename_date = self.match_filename_dates(media_files)
        logger.info(f"Filename date matching complete: {{'matched': {result.matched_filename_date}}}")

        result.unmatched = [f.media_path for f in media_files if f.is_unmatched]
        return result

    def match_direct(self, media_files: List[MediaFile]) -> tuple[int, int]:
        """Tier 1: bind the first generated candidate that exists and is unclaimed.

        A matched HEIC/JPG photo lends its sidecar to a same-stem .MP4/.mp4
        video (live photos). Such videos are skipped during the pass and
        bound afterwards if still unmatched, without claiming again.

        Returns:
            (files matched directly, paired videos bound)
        """
        paired_videos: Dict[Path, Path] = {}
        matched = 0

        for media_file in media_files:
            if not media_file.is_unmatched:
                continue
            if media_file.media_path in paired_videos:
                continue

            extension = media_file.extension.lower()
            if not extension or extension == "json":
                continue

            sidecar_path = self._find_direct_sidecar(media_file.media_path)
            if sidecar_path is None:
                continue

            media_file.bind_sidecar(sidecar_path, JSON_FILE)
            matched += 1

            if extension in PAIRED_PHOTO_EXTENSIONS:
                for suffix in PAIRED_VIDEO_SUFFIXES:
                    video_path = media_file.media_path.with_suffix(suffix)
                    if video_path.exists():
                        paired_videos[video_path] = sidecar_path

        by_path = {f.media_path: f for f in media_files}
        paired = 0
        for video_path, sidecar_path in paired_videos.items():
            video = by_path.get(video_path)
            if video is None or not video.is_unmatched:
                continue
            video.bind_sidecar(sidecar_path, JSON_FILE)
            paired += 1
            logger.debug(f"Paired video bound: {{'path': {str(video_path)!r}, 'sidecar': {str(sidecar_path)!r}}}")

        return matched, paired

    def _find_direct_sidecar(self, media_path: Path) -> Optional[Path]:
        for candidate in generate_candidates(media_path):
            if candidate.exists() and self.sidecars.claim(candidate):
                return candidate
        return None

    def match_fuzzy(self, media_files: List[MediaFile]) -> int:
        """Tier 2: fuzzy-match unmatched files on a thread pool.

        Which of two files competing for the same sidecar wins depends on
        scheduling; the loser stays unmatched.
        """
        pending = [f for f in media_files if f.is_unmatched]
        if not pending:
            return 0

        progress = ProgressTracker("Fuzzy matching", len(pending), self.progress_interval)
        matched = 0

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            futures = {
                executor.submit(self.fuzzy_matcher.match, media_file, self.sidecars): media_file
                for media_file in pending
            }
            for future in as_completed(futures):
                media_file = futures[future]
                try:
                    if future.result():
                        matched += 1
                except OSError as e:
                    logger.warning(
                        f"Fuzzy matching failed: {{'path': {str(media_file.media_path)!r}, 'error': {str(e)!r}}}"
                    )
                progress.increment()

        progress.log_final_summary()
        return matched

    def match_filename_dates(self, media_files: List[MediaFile]) -> int:
        """Tier 3: attach a date parsed from the file name."""
        matched = 0
        for media_file in media_files:
            if not media_file.is_unmatched:
                continue
            creation_date = infer_date_from_filename(media_file.media_path.stem)
            if creation_date is None:
                continue
            media_file.attach_date(creation_date)
            matched += 1
        return matched
