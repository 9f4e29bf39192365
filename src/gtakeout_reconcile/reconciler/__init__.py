"""Takeout sidecar matching, classification and deduplication pipeline."""

from .candidates import generate_candidates
from .classifier import DestinationClassifier
from .config import ReconcilerConfig, TakeoutReconcileConfig
from .dedup import DuplicateRemover
from .matcher import SidecarMatcher
from .models import DestinationCategory, MatchKind, MatchProvenance, MediaFile, SidecarSet
from .pipeline import TakeoutReconciler

__version__ = "0.1.0"

__all__ = [
    'TakeoutReconciler',
    'ReconcilerConfig',
    'TakeoutReconcileConfig',
    'generate_candidates',
    'SidecarMatcher',
    'DestinationClassifier',
    'DuplicateRemover',
    'MediaFile',
    'MatchKind',
    'MatchProvenance',
    'DestinationCategory',
    'SidecarSet',
]
