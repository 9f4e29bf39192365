"""Tests for the reconcile data model."""

import threading
from datetime import datetime
from pathlib import Path

import pytest

from gtakeout_reconcile.reconciler.errors import InvariantViolationError
from gtakeout_reconcile.reconciler.models import (
    FILE_NAME,
    JSON_FILE,
    NO_MATCH,
    DestinationCategory,
    MatchKind,
    MatchProvenance,
    MediaFile,
    SidecarSet,
)


class TestMatchProvenance:
    """Tests for MatchProvenance."""

    def test_fuzzy_carries_score(self):
        """Test that fuzzy provenance records its score."""
        provenance = MatchProvenance.fuzzy(92)
        assert provenance.kind is MatchKind.FUZZY_MATCH
        assert provenance.score == 92
        assert str(provenance) == "fuzzy_match(92)"

    def test_fuzzy_score_range(self):
        """Test that scores outside 0-100 are rejected."""
        with pytest.raises(ValueError):
            MatchProvenance.fuzzy(101)
        with pytest.raises(ValueError):
            MatchProvenance.fuzzy(-1)

    def test_is_match(self):
        """Test that only NoMatch is unmatched."""
        assert not NO_MATCH.is_match
        assert JSON_FILE.is_match
        assert FILE_NAME.is_match
        assert MatchProvenance(MatchKind.DIRECTORY_NAME).is_match


class TestDestinationCategory:
    """Tests for retention priority."""

    def test_priority_order(self):
        """Test Albums before Shared before General."""
        ordered = sorted(DestinationCategory, key=lambda c: c.retention_priority)
        assert ordered == [DestinationCategory.ALBUMS, DestinationCategory.SHARED, DestinationCategory.GENERAL]


class TestMediaFile:
    """Tests for MediaFile provenance transitions."""

    def test_starts_unmatched(self):
        """Test initial state."""
        media = MediaFile(Path("/a/IMG_1.JPG"))
        assert media.is_unmatched
        assert media.extension == "JPG"
        assert media.sidecar_path is None

    def test_bind_sidecar(self):
        """Test binding moves the file out of NoMatch."""
        media = MediaFile(Path("/a/IMG_1.jpg"))
        media.bind_sidecar(Path("/a/IMG_1.jpg.json"), JSON_FILE)

        assert media.provenance == JSON_FILE
        assert media.sidecar_path == Path("/a/IMG_1.jpg.json")

    def test_attach_date(self):
        """Test date attachment marks FileName provenance."""
        media = MediaFile(Path("/a/IMG_20190704.jpg"))
        date = datetime(2019, 7, 4).astimezone()
        media.attach_date(date)

        assert media.provenance == FILE_NAME
        assert media.creation_date == date

    def test_terminal_provenance_is_final(self):
        """Test that a resolved file cannot be resolved again."""
        media = MediaFile(Path("/a/IMG_1.jpg"))
        media.bind_sidecar(Path("/a/IMG_1.jpg.json"), JSON_FILE)

        with pytest.raises(InvariantViolationError):
            media.bind_sidecar(Path("/a/other.json"), MatchProvenance.fuzzy(95))
        with pytest.raises(InvariantViolationError):
            media.attach_date(datetime(2019, 7, 4).astimezone())
        assert media.sidecar_path == Path("/a/IMG_1.jpg.json")

    def test_cannot_bind_with_no_match(self):
        """Test that NoMatch is not a valid target."""
        media = MediaFile(Path("/a/IMG_1.jpg"))
        with pytest.raises(InvariantViolationError):
            media.bind_sidecar(Path("/a/IMG_1.jpg.json"), NO_MATCH)

    def test_to_dict(self):
        """Test report serialization."""
        media = MediaFile(Path("/a/IMG_1.jpg"), destination_category=DestinationCategory.ALBUMS)
        data = media.to_dict()

        assert data['media_path'] == str(Path("/a/IMG_1.jpg"))
        assert data['destination_category'] == "albums"
        assert data['provenance'] == "no_match"


class TestSidecarSet:
    """Tests for SidecarSet claiming."""

    def test_claim_removes_from_outstanding(self):
        """Test that claiming shrinks the outstanding set."""
        sidecars = SidecarSet([Path("/a/x.json"), Path("/a/y.json")])

        assert sidecars.claim(Path("/a/x.json"))
        assert len(sidecars) == 1
        assert Path("/a/x.json") not in sidecars
        assert sidecars.is_claimed(Path("/a/x.json"))
        assert sidecars.outstanding() == [Path("/a/y.json")]

    def test_claim_only_once(self):
        """Test that a claimed path cannot be claimed again."""
        sidecars = SidecarSet([Path("/a/x.json")])

        assert sidecars.claim(Path("/a/x.json"))
        assert not sidecars.claim(Path("/a/x.json"))

    def test_claim_unenumerated_path_once(self):
        """Test that paths never discovered can still be claimed, once."""
        sidecars = SidecarSet()

        assert sidecars.claim(Path("/a/late.json"))
        assert not sidecars.claim(Path("/a/late.json"))
        assert len(sidecars) == 0

    def test_concurrent_claims_single_winner(self):
        """Test that racing threads produce exactly one winner."""
        path = Path("/a/contested.json")
        sidecars = SidecarSet([path])
        results = []
        barrier = threading.Barrier(16)

        def worker():
            barrier.wait()
            results.append(sidecars.claim(path))

        threads = [threading.Thread(target=worker) for _ in range(16)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert results.count(True) == 1
        assert results.count(False) == 15
