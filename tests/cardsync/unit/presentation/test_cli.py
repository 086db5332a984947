"""Tests for the cardsync CLI."""

import json

import pytest
from typer.testing import CliRunner

from cardsync.application.commands.integration import SyncRunLock
from cardsync.application.dtos.integration import SyncRunResult
from cardsync.domain.shared.exceptions import ErrorKind
from cardsync.presentation.cli import app as cli_app
from cardsync_config import Settings

runner = CliRunner()

REQUIRED_ENV = {
    "ICS_EMAIL": "jane@example.com",
    "ICS_PASSWORD": "hunter2",
    "LUNCHMONEY_TOKEN": "lm-token",
    "LUNCHMONEY_ASSET_ID": "4242",
    "SYNC_DAYS": "30",
}


def _result_document(output: str) -> dict:
    """Pick the terminal result out of the captured output."""
    for line in reversed(output.splitlines()):
        if line.startswith("{") and '"success"' in line:
            return json.loads(line)
    msg = f"No result document in output: {output!r}"
    raise AssertionError(msg)


class StubCommand:
    """Stands in for TransactionSyncCommand; returns a canned result."""

    def __init__(self, result: SyncRunResult):
        self.result = result
        self.closed = False

    async def execute(self, on_progress=None):
        return self.result

    async def close(self):
        self.closed = True


@pytest.fixture
def env(monkeypatch):
    for name, value in REQUIRED_ENV.items():
        monkeypatch.setenv(name, value)
    monkeypatch.setattr(
        cli_app,
        "get_settings",
        lambda: Settings(_env_file=None),  # type: ignore[call-arg]
    )
    # Keep pytest's log capture handlers in place
    monkeypatch.setattr(cli_app, "configure_logging", lambda level="INFO": None)
    return monkeypatch


def _use_command(monkeypatch, result: SyncRunResult) -> StubCommand:
    command = StubCommand(result)
    captured = {}

    def from_settings(settings):
        captured["settings"] = settings
        return command

    monkeypatch.setattr(
        cli_app.TransactionSyncCommand,
        "from_settings",
        staticmethod(from_settings),
    )
    command.captured = captured
    return command


def test_missing_configuration_fails_validation(env):
    env.delenv("LUNCHMONEY_TOKEN")

    result = runner.invoke(cli_app.app, ["sync"])

    assert result.exit_code == 1
    document = _result_document(result.stdout)
    assert document["success"] is False
    assert document["step"] == "validation"
    assert document["kind"] == "configuration"
    assert "LUNCHMONEY_TOKEN" in document["error"]


def test_successful_sync_prints_result(env):
    command = _use_command(
        env,
        SyncRunResult(success=True, message="Synced: 1 inserted", inserted_count=1),
    )

    result = runner.invoke(cli_app.app, ["sync", "--days", "7", "--account", "99"])

    assert result.exit_code == 0
    document = _result_document(result.stdout)
    assert document["success"] is True
    assert document["insertedCount"] == 1
    assert command.closed
    settings = command.captured["settings"]
    assert settings.sync_days == 7
    assert settings.ics_account_number == "99"


def test_failed_sync_exits_non_zero(env):
    _use_command(
        env,
        SyncRunResult.failure(
            error="2FA verification timeout",
            step="2fa_wait",
            kind=ErrorKind.SECOND_FACTOR_TIMEOUT,
            retryable=True,
        ),
    )

    result = runner.invoke(cli_app.app, ["sync"])

    assert result.exit_code == 1
    assert _result_document(result.stdout)["step"] == "2fa_wait"


def test_concurrent_run_is_rejected(env):
    _use_command(env, SyncRunResult(success=True, message="ok"))
    lock = SyncRunLock()
    lock.acquire()

    result = runner.invoke(cli_app.app, ["sync"], obj=lock)

    assert result.exit_code == 1
    document = _result_document(result.stdout)
    assert document["step"] == "sync_start"
    assert document["retryable"] is True
    assert lock.is_held


def test_lock_passed_by_the_caller_is_released_after_the_run(env):
    _use_command(env, SyncRunResult(success=True, message="ok"))
    lock = SyncRunLock()

    result = runner.invoke(cli_app.app, ["sync"], obj=lock)

    assert result.exit_code == 0
    assert not lock.is_held
    assert lock.try_acquire()


def test_days_must_be_positive(env):
    result = runner.invoke(cli_app.app, ["sync", "--days", "0"])

    assert result.exit_code != 0


def test_apply_overrides_leaves_settings_untouched_without_flags(env):
    settings = Settings(_env_file=None)  # type: ignore[call-arg]

    assert cli_app.apply_overrides(settings) is settings

    headed = cli_app.apply_overrides(settings, headed=True)
    assert headed.browser_headless is False
    assert settings.browser_headless is True


def test_version_command():
    result = runner.invoke(cli_app.app, ["version"])

    assert result.exit_code == 0
    assert "cardsync" in result.stdout
