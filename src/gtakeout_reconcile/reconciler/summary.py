"""Run summary report generation."""

import json
import logging
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from gtakeout_reconcile.common import normalize_path

from .classifier import ClassificationResult
from .copier import CopyResult
from .dedup import DedupResult
from .discovery import DiscoveryResult
from .embedder import EmbedResult
from .models import FileError, MatchKind, MatchResult

logger = logging.getLogger(__name__)


@dataclass
class RunReport:
    """Everything a reconcile run produced, stage by stage.

    Stages that did not run (dry run, or embedding disabled) stay None.
    """
    input_dir: Path
    output_dir: Path
    dry_run: bool = False
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    discovery: Optional[DiscoveryResult] = None
    matching: Optional[MatchResult] = None
    unmatched_sidecars: List[Path] = field(default_factory=list)
    classification: Optional[ClassificationResult] = None
    dedup: Optional[DedupResult] = None
    copy: Optional[CopyResult] = None
    embed: Optional[EmbedResult] = None
    phase_timings: Dict[str, float] = field(default_factory=dict)

    @property
    def errors(self) -> List[FileError]:
        """Per-file errors from every stage, in stage order."""
        errors: List[FileError] = []
        for stage in (self.discovery, self.classification, self.dedup, self.copy, self.embed):
            if stage is not None:
                errors.extend(stage.errors)
        return errors


def generate_summary(report: RunReport) -> Dict[str, Any]:
    """
    Generate a summary dictionary for a reconcile run.

    Includes:
    - Run metadata (directories, timestamps, duration, dry run)
    - Discovery counts
    - Match counts per provenance, unmatched media and sidecars
    - Classification, deduplication, copy and embedding counts
    - Per-file errors with a breakdown by category
    - Phase timings

    Args:
        report: Completed (or partially completed) run

    Returns:
        JSON-serializable dictionary
    """
    media_files = report.discovery.media_files if report.discovery else []
    provenance_counts = Counter(f.provenance.kind.value for f in media_files)
    errors = report.errors
    duration = None
    if report.start_time and report.end_time:
        duration = (report.end_time - report.start_time).total_seconds()

    matching = report.matching or MatchResult()

    summary = {
        'input_dir': normalize_path(report.input_dir),
        'output_dir': normalize_path(report.output_dir),
        'dry_run': report.dry_run,
        'timestamps': {
            'start': report.start_time.isoformat() if report.start_time else None,
            'end': report.end_time.isoformat() if report.end_time else None,
            'duration_seconds': duration,
        },
        'discovery': {
            'media_files': len(media_files),
            'sidecars': len(report.discovery.sidecars) if report.discovery else 0,
            'ignored_files': len(report.discovery.ignored) if report.discovery else 0,
        },
        'matching': {
            'by_provenance': {kind.value: provenance_counts.get(kind.value, 0) for kind in MatchKind},
            'direct': matching.matched_direct,
            'paired_videos': matching.matched_paired,
            'fuzzy': matching.matched_fuzzy,
            'filename_date': matching.matched_filename_date,
            'unmatched_media': [normalize_path(p) for p in matching.unmatched],
            'unmatched_sidecars': [normalize_path(p) for p in report.unmatched_sidecars],
        },
        'classification': {
            'classified': report.classification.classified if report.classification else 0,
            'extension_mismatches': report.classification.extension_mismatches if report.classification else 0,
        },
        'dedup': {
            'kept': len(report.dedup.kept) if report.dedup else 0,
            'duplicates_removed': len(report.dedup.removed) if report.dedup else 0,
        },
        'copy': {
            'copied': report.copy.copied if report.copy else 0,
            'renamed': report.copy.renamed if report.copy else 0,
        },
        'embed': {
            'timestamps_applied': report.embed.times_applied if report.embed else 0,
            'exif_applied': report.embed.exif_applied if report.embed else 0,
            'exif_skipped': report.embed.exif_skipped if report.embed else 0,
        },
        'errors': {
            'total': len(errors),
            'by_category': dict(Counter(e.category for e in errors)),
            'files': [e.to_dict() for e in errors],
        },
        'phase_timings': dict(report.phase_timings),
    }

    return summary


def write_summary(summary: Dict[str, Any], report_path: Path) -> None:
    """Write the summary as JSON, creating parent directories."""
    report_path.parent.mkdir(parents=True, exist_ok=True)
    with open(report_path, 'w', encoding='utf-8') as f:
        json.dump(summary, f, indent=2, ensure_ascii=False)
    logger.info(f"Report written: {{'path': {str(report_path)!r}}}")


def format_summary_human_readable(summary: Dict[str, Any]) -> str:
    """
    Format summary as human-readable text.

    Args:
        summary: Summary dictionary from generate_summary()

    Returns:
        Formatted text report
    """
    lines = []

    lines.append("=" * 70)
    lines.append("RECONCILE SUMMARY REPORT" + (" (DRY RUN)" if summary['dry_run'] else ""))
    lines.append("=" * 70)
    lines.append("")

    lines.append(f"Input:  {summary['input_dir']}")
    lines.append(f"Output: {summary['output_dir']}")
    duration = summary['timestamps']['duration_seconds']
    if duration:
        lines.append(f"Duration: {duration:.2f} seconds ({duration/60:.2f} minutes)")
    lines.append("")

    lines.append("DISCOVERY")
    lines.append("-" * 70)
    disc = summary['discovery']
    lines.append(f"Media files:         {disc['media_files']:>8,}")
    lines.append(f"Sidecars:            {disc['sidecars']:>8,}")
    lines.append(f"Ignored files:       {disc['ignored_files']:>8,}")
    lines.append("")

    lines.append("MATCHING")
    lines.append("-" * 70)
    match = summary['matching']
    lines.append(f"Matched by JSON file: {match['direct'] + match['paired_videos']:>7,}")
    lines.append(f"  paired videos:     {match['paired_videos']:>8,}")
    lines.append(f"Matched by fuzzy:    {match['fuzzy']:>8,}")
    lines.append(f"Dated by file name:  {match['filename_date']:>8,}")
    lines.append(f"Unmatched media:     {len(match['unmatched_media']):>8,}")
    lines.append(f"Unmatched sidecars:  {len(match['unmatched_sidecars']):>8,}")
    lines.append("")

    lines.append("OUTPUT")
    lines.append("-" * 70)
    lines.append(f"Extension mismatches: {summary['classification']['extension_mismatches']:>7,}")
    lines.append(f"Duplicates removed:  {summary['dedup']['duplicates_removed']:>8,}")
    lines.append(f"Files copied:        {summary['copy']['copied']:>8,}")
    lines.append(f"Renamed on collision:{summary['copy']['renamed']:>8,}")
    lines.append(f"Timestamps applied:  {summary['embed']['timestamps_applied']:>8,}")
    lines.append(f"EXIF dates written:  {summary['embed']['exif_applied']:>8,}")
    lines.append("")

    if summary['errors']['total'] > 0:
        lines.append("ERRORS")
        lines.append("-" * 70)
        lines.append(f"Total errors: {summary['errors']['total']:,}")
        for category, count in sorted(
            summary['errors']['by_category'].items(),
            key=lambda x: x[1],
            reverse=True
        ):
            lines.append(f"  {category:20s} {count:>8,}")
        lines.append("")

    if summary['phase_timings']:
        lines.append("PERFORMANCE")
        lines.append("-" * 70)
        for phase, seconds in summary['phase_timings'].items():
            lines.append(f"{phase:20s} {seconds:>8.2f}s")
        lines.append("")

    lines.append("=" * 70)

    return "\n".join(lines)


def log_unmatched(summary: Dict[str, Any]) -> None:
    """List unmatched sidecars and media files at the end of a run."""
    for path in summary['matching']['unmatched_sidecars']:
        logger.info(f"Unmatched sidecar: {{'path': {path!r}}}")
    for path in summary['matching']['unmatched_media']:
        logger.info(f"Unmatched media file: {{'path': {path!r}}}")
