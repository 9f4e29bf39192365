"""Progress tracking for pipeline phases.

Tracks and reports progress with ETA calculation. Safe to update from
worker threads.
"""

import logging
import threading
import time

logger = logging.getLogger(__name__)


class ProgressTracker:
    """Tracks progress of one phase and calculates ETA.

    Features:
    - Items processed count
    - Processing rate (items/sec)
    - Estimated time remaining
    - Periodic logging (every N items)
    """

    def __init__(self, phase: str, total_items: int, log_interval: int = 500):
        """Initialize progress tracker.

        Args:
            phase: Phase name used in log messages
            total_items: Total number of items to process
            log_interval: Log progress every N items
        """
        self.phase = phase
        self.total_items = total_items
        self.log_interval = max(1, log_interval)

        self.items_processed = 0
        self.start_time = time.time()
        self._lock = threading.Lock()

    def increment(self, count: int = 1) -> int:
        """Increment the processed counter and log at interval boundaries.

        Returns:
            The counter value after incrementing
        """
        with self._lock:
            before = self.items_processed
            self.items_processed += count
            current = self.items_processed

        if current // self.log_interval > before // self.log_interval:
            self._log_progress(current)
        return current

    def get_progress(self) -> dict:
        """Get current progress statistics."""
        elapsed_time = time.time() - self.start_time
        processed = self.items_processed

        rate = processed / elapsed_time if elapsed_time > 0 else 0.0
        percentage = (processed / self.total_items) * 100 if self.total_items > 0 else 0.0
        remaining = self.total_items - processed
        eta_seconds = remaining / rate if rate > 0 and remaining > 0 else 0.0

        return {
            "phase": self.phase,
            "total_items": self.total_items,
            "items_processed": processed,
            "remaining_items": remaining,
            "percentage": percentage,
            "elapsed_seconds": elapsed_time,
            "rate_items_per_sec": rate,
            "eta_seconds": eta_seconds,
        }

    def _log_progress(self, current: int) -> None:
        progress = self.get_progress()
        logger.info(
            f"{self.phase}: {current}/{self.total_items} "
            f"({progress['percentage']:.1f}%) - "
            f"{progress['rate_items_per_sec']:.1f} items/sec - "
            f"ETA: {format_duration(progress['eta_seconds'])}"
        )

    def log_final_summary(self) -> None:
        """Log final progress summary."""
        elapsed_time = time.time() - self.start_time
        rate = self.items_processed / elapsed_time if elapsed_time > 0 else 0.0

        logger.info(
            f"{self.phase} complete: {self.items_processed}/{self.total_items} items "
            f"in {format_duration(elapsed_time)} "
            f"({rate:.1f} items/sec average)"
        )


def format_duration(seconds: float) -> str:
    """Format seconds as human-readable time, e.g. "2h 15m 30s"."""
    if seconds <= 0:
        return "0s"

    hours = int(seconds // 3600)
    minutes = int((seconds % 3600) // 60)
    secs = int(seconds % 60)

    parts = []
    if hours > 0:
        parts.append(f"{hours}h")
    if minutes > 0:
        parts.append(f"{minutes}m")
    if secs > 0 or not parts:
        parts.append(f"{secs}s")

    return " ".join(parts)
