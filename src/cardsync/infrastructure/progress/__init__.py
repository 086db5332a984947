"""Progress channel adapters."""

from cardsync.infrastructure.progress.json_lines_reporter import (
    JsonLinesProgressReporter,
)

__all__ = ["JsonLinesProgressReporter"]
