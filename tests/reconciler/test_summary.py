"""Tests for run summary generation."""

import json
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from gtakeout_reconcile.reconciler.classifier import ClassificationResult
from gtakeout_reconcile.reconciler.copier import CopyResult
from gtakeout_reconcile.reconciler.dedup import DedupResult
from gtakeout_reconcile.reconciler.discovery import DiscoveryResult
from gtakeout_reconcile.reconciler.embedder import EmbedResult
from gtakeout_reconcile.reconciler.models import (
    FILE_NAME,
    JSON_FILE,
    FileError,
    MatchProvenance,
    MatchResult,
    MediaFile,
)
from gtakeout_reconcile.reconciler.summary import (
    RunReport,
    format_summary_human_readable,
    generate_summary,
    write_summary,
)


@pytest.fixture
def report():
    start = datetime(2024, 1, 1, tzinfo=timezone.utc)
    media = [
        MediaFile(Path("/in/a.jpg"), provenance=JSON_FILE),
        MediaFile(Path("/in/b.jpg"), provenance=MatchProvenance.fuzzy(93)),
        MediaFile(Path("/in/IMG_20190704.jpg"), provenance=FILE_NAME),
        MediaFile(Path("/in/c.jpg")),
    ]
    return RunReport(
        input_dir=Path("/in"),
        output_dir=Path("/out"),
        start_time=start,
        end_time=start + timedelta(seconds=90),
        discovery=DiscoveryResult(
            media_files=media,
            sidecars={Path("/in/a.jpg.json"), Path("/in/b.json"), Path("/in/orphan.json")},
        ),
        matching=MatchResult(
            matched_direct=1, matched_fuzzy=1, matched_filename_date=1, unmatched=[Path("/in/c.jpg")]
        ),
        unmatched_sidecars=[Path("/in/orphan.json")],
        classification=ClassificationResult(classified=4, extension_mismatches=1),
        dedup=DedupResult(kept=media[:3], removed=media[3:]),
        copy=CopyResult(
            copied=2,
            renamed=1,
            errors=[FileError(Path("/in/b.jpg"), 'copy', 'copy', "disk full")],
        ),
        embed=EmbedResult(exif_applied=1, exif_skipped=0, times_applied=2),
        phase_timings={'discovery': 0.5, 'matching': 1.25},
    )


class TestGenerateSummary:
    """Tests for generate_summary."""

    def test_counts(self, report):
        """Test per-stage counts."""
        summary = generate_summary(report)

        assert summary['discovery'] == {'media_files': 4, 'sidecars': 3, 'ignored_files': 0}
        assert summary['matching']['direct'] == 1
        assert summary['matching']['fuzzy'] == 1
        assert summary['matching']['filename_date'] == 1
        assert summary['matching']['unmatched_media'] == ["/in/c.jpg"]
        assert summary['matching']['unmatched_sidecars'] == ["/in/orphan.json"]
        assert summary['dedup'] == {'kept': 3, 'duplicates_removed': 1}
        assert summary['copy'] == {'copied': 2, 'renamed': 1}
        assert summary['embed']['timestamps_applied'] == 2
        assert summary['timestamps']['duration_seconds'] == 90

    def test_provenance_breakdown(self, report):
        """Test that every provenance kind is reported, including zero counts."""
        by_provenance = generate_summary(report)['matching']['by_provenance']

        assert by_provenance == {
            'no_match': 1,
            'json_file': 1,
            'file_name': 1,
            'directory_name': 0,
            'fuzzy_match': 1,
        }

    def test_errors(self, report):
        """Test the error breakdown."""
        errors = generate_summary(report)['errors']

        assert errors['total'] == 1
        assert errors['by_category'] == {'copy': 1}
        assert errors['files'][0]['stage'] == 'copy'

    def test_dry_run_report(self):
        """Test that stages that never ran count as zero."""
        summary = generate_summary(RunReport(Path("/in"), Path("/out"), dry_run=True))

        assert summary['dry_run'] is True
        assert summary['copy'] == {'copied': 0, 'renamed': 0}
        assert summary['timestamps']['duration_seconds'] is None


class TestFormatSummary:
    """Tests for format_summary_human_readable."""

    def test_sections(self, report):
        """Test that the main sections are present."""
        text = format_summary_human_readable(generate_summary(report))

        assert "RECONCILE SUMMARY REPORT" in text
        assert "MATCHING" in text
        assert "ERRORS" in text
        assert "PERFORMANCE" in text
        assert "DRY RUN" not in text

    def test_no_errors_section_when_clean(self):
        """Test that a clean run omits the error section."""
        text = format_summary_human_readable(generate_summary(RunReport(Path("/in"), Path("/out"), dry_run=True)))

        assert "ERRORS" not in text
        assert "(DRY RUN)" in text


class TestWriteSummary:
    """Tests for write_summary."""

    def test_writes_json(self, report, tmp_path):
        """Test that the report is written as JSON."""
        path = tmp_path / "reports" / "run.json"

        write_summary(generate_summary(report), path)

        data = json.loads(path.read_text(encoding="utf-8"))
        assert data['copy']['copied'] == 2
        assert data['phase_timings']['matching'] == 1.25
