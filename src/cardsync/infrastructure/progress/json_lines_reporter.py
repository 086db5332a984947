"""Progress reporter writing one JSON object per line."""

from __future__ import annotations

import json
import logging
import sys
from typing import TextIO

from cardsync.application.dtos.integration import SyncProgressEvent

logger = logging.getLogger(__name__)


class JsonLinesProgressReporter:
    """
    Print each progress event as a flat JSON line.

    Meant for stderr: the trigger process parses these lines for live
    status while stdout carries only the terminal result.
    """

    def __init__(self, stream: TextIO | None = None):
        self._stream = stream

    @property
    def stream(self) -> TextIO:
        return self._stream or sys.stderr

    def __call__(self, event: SyncProgressEvent) -> None:
        logger.info("[%s] %s", event.step, (event.message.splitlines() or [""])[0])
        self.stream.write(json.dumps(event.to_dict(), default=str) + "\n")
        self.stream.flush()
