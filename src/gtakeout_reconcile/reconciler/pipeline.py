"""End-to-end reconcile pipeline.

Phases run strictly in order, each over the whole file set:

1. Discovery: enumerate media files and sidecars
2. Matching: bind sidecars (direct, fuzzy) or infer dates from names
3. Classification: destination category, path and real extension
4. Deduplication: drop byte-identical copies, keeping the album copy
5. Copy: write the survivors into the output tree
6. Embedding: apply capture dates to the copies

A dry run stops after deduplication and touches nothing on disk.
"""

import logging
import time
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator, Optional

from gtakeout_reconcile.common import LogContext

from .classifier import DestinationClassifier
from .config import ReconcilerConfig
from .copier import copy_files
from .dedup import DuplicateRemover
from .discovery import discover_files
from .embedder import ExifToolEmbedder, MetadataEmbedder
from .fuzzy import DirectorySidecarCache, FuzzyMatcher
from .matcher import SidecarMatcher
from .models import SidecarSet
from .summary import RunReport
from .type_sniffer import FileCommandSniffer, TypeSniffer

logger = logging.getLogger(__name__)


class TakeoutReconciler:
    """Runs all reconcile phases for one Takeout directory."""

    def __init__(
        self,
        config: ReconcilerConfig,
        sniffer: Optional[TypeSniffer] = None,
        exiftool: Optional[ExifToolEmbedder] = None,
        progress_interval: int = 500,
    ):
        """
        Initialize reconciler.

        Args:
            config: Run configuration; input_dir and output_dir must be set
            sniffer: Type sniffer, defaults to the ``file`` command
            exiftool: exiftool runner, defaults to config.exiftool_command
                when config.use_exiftool is set
            progress_interval: Log progress every N files
        """
        self.config = config
        self.input_dir = Path(config.input_dir)
        self.output_dir = Path(config.output_dir)
        self.sniffer = sniffer or FileCommandSniffer(config.file_command, config.tool_timeout_seconds)
        if exiftool is None and config.use_exiftool:
            exiftool = ExifToolEmbedder(config.exiftool_command, config.tool_timeout_seconds)
        self.exiftool = exiftool if config.use_exiftool else None
        self.progress_interval = progress_interval

    def run(self, dry_run: bool = False) -> RunReport:
        """
        Run the pipeline.

        Returns:
            RunReport with per-phase results and timings

        Raises:
            ReconcilerError: On the first fatal file error when fail_fast is set
            InvariantViolationError: On impossible pipeline state
        """
        config = self.config
        report = RunReport(
            input_dir=self.input_dir,
            output_dir=self.output_dir,
            dry_run=dry_run,
            start_time=datetime.now(timezone.utc),
        )
        run_start = time.time()

        logger.info(
            f"Starting reconcile: {{'input_dir': {str(self.input_dir)!r}, "
            f"'output_dir': {str(self.output_dir)!r}, 'dry_run': {dry_run}, "
            f"'worker_threads': {config.worker_threads}, 'fail_fast': {config.fail_fast}}}"
        )

        ignored_filenames = frozenset(config.ignored_filenames)
        ignored_extensions = frozenset(config.ignored_extensions)

        with self._phase(report, 'discovery'):
            report.discovery = discover_files(self.input_dir, ignored_filenames, ignored_extensions)
        media_files = report.discovery.media_files

        with self._phase(report, 'matching'):
            sidecars = SidecarSet(report.discovery.sidecars)
            fuzzy_matcher = FuzzyMatcher(
                DirectorySidecarCache(ignored_filenames, ignored_extensions),
                threshold=config.fuzzy_threshold,
            )
            matcher = SidecarMatcher(
                sidecars,
                fuzzy_matcher,
                max_workers=config.worker_threads,
                progress_interval=self.progress_interval,
            )
            report.matching = matcher.match(media_files)
            report.unmatched_sidecars = sidecars.outstanding()
            logger.info(
                f"Unmatched after matching: {{'sidecars': {len(report.unmatched_sidecars)}, "
                f"'media_files': {len(report.matching.unmatched)}}}"
            )

        with self._phase(report, 'classification'):
            classifier = DestinationClassifier(
                self.output_dir,
                self.sniffer,
                general_dir=config.general_dir,
                shared_dir=config.shared_dir,
                albums_dir=config.albums_dir,
                fail_fast=config.fail_fast,
            )
            report.classification = classifier.classify_all(media_files)

        with self._phase(report, 'dedup'):
            remover = DuplicateRemover(
                batch_size=config.hash_batch_size,
                max_workers=config.worker_threads,
                chunk_size=config.hash_chunk_size,
                fail_fast=config.fail_fast,
                progress_interval=self.progress_interval,
            )
            report.dedup = remover.remove_duplicates(media_files)
        survivors = report.dedup.kept

        if dry_run:
            logger.info(f"Dry run: skipping copy and embedding: {{'files': {len(survivors)}}}")
        else:
            with self._phase(report, 'copy'):
                report.copy = copy_files(survivors, config.fail_fast, self.progress_interval)

            with self._phase(report, 'embed'):
                embedder = MetadataEmbedder(
                    self.exiftool,
                    max_workers=config.worker_threads,
                    progress_interval=self.progress_interval,
                )
                report.embed = embedder.embed_all(survivors)

        report.end_time = datetime.now(timezone.utc)
        total_duration = time.time() - run_start
        timing_lines = "\n".join(
            f"  {phase:15s} {seconds:>7.1f}s" for phase, seconds in report.phase_timings.items()
        )
        logger.info(f"Reconcile complete in {total_duration:.1f}s\n{timing_lines}")

        return report

    @contextmanager
    def _phase(self, report: RunReport, name: str) -> Iterator[None]:
        phase_start = time.time()
        with LogContext(logger, phase=name):
            logger.info(f"Phase started: {{'phase': {name!r}}}")
            yield
        report.phase_timings[name] = time.time() - phase_start
        logger.info(f"Phase complete: {{'phase': {name!r}, 'duration_seconds': {report.phase_timings[name]:.1f}}}")
