"""Progress tracking utilities for bulk tab operations."""

from __future__ import annotations

import time
from dataclasses import dataclass, field

from auto_tab_groups.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class ProgressTracker:
    """Track progress of a bulk pass over the tabs of a window."""

    total: int
    processed: int = 0
    successful: int = 0
    failed: int = 0
    skipped: int = 0
    errors: list[str] = field(default_factory=list)
    start_time: float = field(default_factory=time.monotonic)

    def record_success(self) -> None:
        """Record a tab that ended up in its target group."""
        self.processed += 1
        self.successful += 1

    def record_failure(self, error: str) -> None:
        """Record a tab whose reconciliation raised."""
        self.processed += 1
        self.failed += 1
        self.errors.append(error)

    def record_skip(self) -> None:
        """Record a tab left alone (pinned, extension page, below threshold...)."""
        self.processed += 1
        self.skipped += 1

    @property
    def elapsed_seconds(self) -> float:
        """Time elapsed since start."""
        return time.monotonic() - self.start_time

    def log_summary(self, operation: str) -> None:
        """Log the final counters for the operation."""
        logger.info(
            "bulk_operation_complete",
            operation=operation,
            total=self.total,
            successful=self.successful,
            failed=self.failed,
            skipped=self.skipped,
            elapsed=f"{self.elapsed_seconds:.2f}s",
        )

    def summary(self) -> dict[str, int | float | list[str]]:
        """Return summary statistics."""
        return {
            "processed": self.processed,
            "successful": self.successful,
            "failed": self.failed,
            "skipped": self.skipped,
            "duration_seconds": round(self.elapsed_seconds, 2),
            "errors": self.errors,
        }
