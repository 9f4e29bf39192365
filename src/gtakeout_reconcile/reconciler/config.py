"""Configuration models for the reconciler."""

from pydantic import BaseModel, Field, ConfigDict, field_validator

from gtakeout_reconcile.common import LoggingConfig
from gtakeout_reconcile.common.config_utils import auto_detect_io_workers, expand_path_variables

DEFAULT_IGNORED_FILENAMES = [
    "metadata.json",
    "shared_album_comments.json",
    "user-generated-memory-titles.json",
    "print-subscriptions.json",
]

DEFAULT_IGNORED_EXTENSIONS = ["html"]


class ReconcilerConfig(BaseModel):
    """Reconcile run configuration."""

    model_config = ConfigDict(extra='forbid')

    input_dir: str = Field(
        default="",
        description="Extracted Takeout directory to reconcile"
    )
    output_dir: str = Field(
        default="",
        description="Directory receiving the general/, shared/ and albums/ trees"
    )
    worker_threads: int = Field(
        default_factory=auto_detect_io_workers,
        ge=1,
        description="Threads used for fuzzy matching, hashing and metadata embedding"
    )
    fuzzy_threshold: int = Field(
        default=90,
        ge=0,
        le=100,
        description="Minimum fuzzy score (0-100) to accept a sidecar match"
    )
    hash_batch_size: int = Field(
        default=1024,
        ge=1,
        description="Maximum files hashed concurrently per batch"
    )
    hash_chunk_size: int = Field(
        default=65536,
        ge=1,
        description="Read buffer size used while hashing"
    )
    fail_fast: bool = Field(
        default=True,
        description="Abort on unknown file types and unreadable files instead of recording per-file errors"
    )
    ignored_filenames: list[str] = Field(
        default_factory=lambda: list(DEFAULT_IGNORED_FILENAMES),
        description="File names skipped everywhere (case-insensitive)"
    )
    ignored_extensions: list[str] = Field(
        default_factory=lambda: list(DEFAULT_IGNORED_EXTENSIONS),
        description="Extensions without dot skipped everywhere (case-insensitive)"
    )
    general_dir: str = Field(default="general", description="Output subdirectory for General files")
    shared_dir: str = Field(default="shared/shared", description="Output subdirectory for Shared files")
    albums_dir: str = Field(default="albums", description="Output subdirectory for Album files")
    use_exiftool: bool = Field(
        default=True,
        description="Embed sidecar dates with exiftool after copying"
    )
    file_command: str = Field(default="file", description="Type sniffer executable")
    exiftool_command: str = Field(default="exiftool", description="Metadata embedder executable")
    tool_timeout_seconds: int = Field(
        default=60,
        ge=1,
        description="Timeout for each file/exiftool invocation"
    )

    @field_validator('input_dir', 'output_dir', mode='before')
    @classmethod
    def expand_variables(cls, v: str) -> str:
        return expand_path_variables(v)

    @field_validator('ignored_filenames', mode='before')
    @classmethod
    def normalize_filenames(cls, v):
        """Accept comma-separated strings and store entries lowercase."""
        return [item.lower() for item in _split_list(v)]

    @field_validator('ignored_extensions', mode='before')
    @classmethod
    def normalize_extensions(cls, v):
        """Store extensions lowercase without a leading dot."""
        return [item.lower().lstrip('.') for item in _split_list(v)]


def _split_list(v):
    if isinstance(v, str):
        return [item.strip() for item in v.split(",") if item.strip()]
    return v


class TakeoutReconcileConfig(BaseModel):
    """Root configuration for gtakeout-reconcile."""

    model_config = ConfigDict(extra='forbid')

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    reconciler: ReconcilerConfig = Field(default_factory=ReconcilerConfig)
