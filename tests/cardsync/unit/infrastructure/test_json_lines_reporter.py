"""Unit tests for JsonLinesProgressReporter."""

import io
import json

from cardsync.application.dtos.integration import ChunkCompletedEvent, SyncProgressEvent
from cardsync.infrastructure.progress import JsonLinesProgressReporter


def test_writes_one_json_object_per_event():
    stream = io.StringIO()
    reporter = JsonLinesProgressReporter(stream)

    reporter(SyncProgressEvent(step="sync_start", message="Starting"))
    reporter(ChunkCompletedEvent(1, 2, chunk_count=3, cumulative_count=3))

    lines = stream.getvalue().splitlines()
    assert len(lines) == 2
    assert json.loads(lines[0]) == {"step": "sync_start", "message": "Starting"}
    assert json.loads(lines[1])["totalCount"] == 3


def test_multiline_message_stays_on_one_line():
    stream = io.StringIO()
    reporter = JsonLinesProgressReporter(stream)

    reporter(SyncProgressEvent(step="account_ambiguous", message="a\nb"))

    (line,) = stream.getvalue().splitlines()
    assert json.loads(line)["message"] == "a\nb"


def test_defaults_to_stderr(capsys):
    JsonLinesProgressReporter()(SyncProgressEvent(step="page_load", message="x"))

    captured = capsys.readouterr()
    assert captured.out == ""
    assert json.loads(captured.err)["step"] == "page_load"
