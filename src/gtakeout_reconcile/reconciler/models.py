"""Data model for the reconcile pipeline.

A MediaFile moves through the stages unmatched -> matched/dated ->
classified -> (optionally) removed as duplicate, and never returns to an
earlier stage.
"""

import threading
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterable, Optional

from .errors import InvariantViolationError


class MatchKind(str, Enum):
    """How a media file's sidecar or date was resolved."""

    NO_MATCH = "no_match"
    JSON_FILE = "json_file"
    FILE_NAME = "file_name"
    DIRECTORY_NAME = "directory_name"  # reserved, no tier produces it
    FUZZY_MATCH = "fuzzy_match"


@dataclass(frozen=True)
class MatchProvenance:
    """Tagged match provenance; only FUZZY_MATCH carries a score (0-100)."""

    kind: MatchKind = MatchKind.NO_MATCH
    score: Optional[int] = None

    @classmethod
    def fuzzy(cls, score: int) -> "MatchProvenance":
        if not 0 <= score <= 100:
            raise ValueError(f"Fuzzy score out of range: {score}")
        return cls(MatchKind.FUZZY_MATCH, score)

    @property
    def is_match(self) -> bool:
        return self.kind is not MatchKind.NO_MATCH

    def __str__(self) -> str:
        if self.score is not None:
            return f"{self.kind.value}({self.score})"
        return self.kind.value


NO_MATCH = MatchProvenance(MatchKind.NO_MATCH)
JSON_FILE = MatchProvenance(MatchKind.JSON_FILE)
FILE_NAME = MatchProvenance(MatchKind.FILE_NAME)


class DestinationCategory(str, Enum):
    """Destination folder family, also the duplicate retention priority."""

    GENERAL = "general"
    SHARED = "shared"
    ALBUMS = "albums"

    @property
    def retention_priority(self) -> int:
        """Lower value wins when duplicates are pruned."""
        return _RETENTION_PRIORITY[self]


_RETENTION_PRIORITY = {
    DestinationCategory.ALBUMS: 0,
    DestinationCategory.SHARED: 1,
    DestinationCategory.GENERAL: 2,
}


@dataclass
class MediaFile:
    """A discovered media file and everything resolved about it.

    Attributes:
        media_path: Source path, the file's identity
        sidecar_path: Bound JSON sidecar, if any
        destination_path: Where the copy stage writes the file
        destination_category: General, Shared or Albums
        creation_date: Date inferred from the filename (local midnight)
        provenance: How the sidecar or date was resolved
    """
    media_path: Path
    sidecar_path: Optional[Path] = None
    destination_path: Optional[Path] = None
    destination_category: Optional[DestinationCategory] = None
    creation_date: Optional[datetime] = None
    provenance: MatchProvenance = NO_MATCH

    @property
    def is_unmatched(self) -> bool:
        return not self.provenance.is_match

    @property
    def extension(self) -> str:
        """Extension without the leading dot, '' when absent."""
        return self.media_path.suffix[1:]

    def bind_sidecar(self, sidecar_path: Path, provenance: MatchProvenance) -> None:
        """Bind a sidecar and move out of NoMatch.

        Raises:
            InvariantViolationError: If the file already has a terminal provenance
        """
        self._transition(provenance)
        self.sidecar_path = sidecar_path

    def attach_date(self, creation_date: datetime) -> None:
        """Attach a filename-inferred date and mark the file FileName."""
        self._transition(FILE_NAME)
        self.creation_date = creation_date

    def _transition(self, provenance: MatchProvenance) -> None:
        if self.provenance.is_match:
            raise InvariantViolationError(
                f"Media file already resolved as {self.provenance}",
                path=str(self.media_path),
                requested=str(provenance),
            )
        if not provenance.is_match:
            raise InvariantViolationError(
                "Cannot transition back to no_match",
                path=str(self.media_path),
            )
        self.provenance = provenance

    def to_dict(self) -> Dict[str, Any]:
        return {
            'media_path': str(self.media_path),
            'sidecar_path': str(self.sidecar_path) if self.sidecar_path else None,
            'destination_path': str(self.destination_path) if self.destination_path else None,
            'destination_category': self.destination_category.value if self.destination_category else None,
            'creation_date': self.creation_date.isoformat() if self.creation_date else None,
            'provenance': str(self.provenance),
        }


class SidecarSet:
    """Sidecar paths not yet claimed by any media file.

    The outstanding set only shrinks. ``claim`` is an atomic
    check-then-remove: across threads at most one caller wins a given path.
    Paths that exist on disk but were never enumerated can still be
    claimed, once.
    """

    def __init__(self, sidecars: Iterable[Path] = ()) -> None:
        self._outstanding: set[Path] = set(sidecars)
        self._claimed: set[Path] = set()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._outstanding)

    def __contains__(self, path: object) -> bool:
        return path in self._outstanding

    def is_claimed(self, path: Path) -> bool:
        return path in self._claimed

    def claim(self, path: Path) -> bool:
        """Claim a sidecar path.

        Returns:
            True if this caller won the path, False if it was already claimed
        """
        with self._lock:
            if path in self._claimed:
                return False
            self._claimed.add(path)
            self._outstanding.discard(path)
            return True

    def outstanding(self) -> list[Path]:
        """Snapshot of unclaimed sidecars, sorted for stable reporting."""
        with self._lock:
            return sorted(self._outstanding)


@dataclass
class FileError:
    """A per-file failure recorded instead of aborting the run."""
    path: Path
    stage: str
    category: str
    message: str

    def to_dict(self) -> Dict[str, str]:
        return {
            'path': str(self.path),
            'stage': self.stage,
            'category': self.category,
            'message': self.message,
        }


@dataclass
class MatchResult:
    """Per-tier outcome of a match run."""
    matched_direct: int = 0
    matched_paired: int = 0
    matched_fuzzy: int = 0
    matched_filename_date: int = 0
    unmatched: list[Path] = field(default_factory=list)
