"""Unit tests for SyncRunLock."""

import pytest

from cardsync.application.commands.integration import SyncRunLock
from cardsync.domain.shared.exceptions import SyncAlreadyRunningError


def test_second_acquire_is_rejected():
    lock = SyncRunLock()

    assert lock.try_acquire()
    assert not lock.try_acquire()
    with pytest.raises(SyncAlreadyRunningError):
        lock.acquire()


def test_release_frees_the_slot():
    lock = SyncRunLock()
    lock.acquire()

    lock.release()

    assert not lock.is_held
    assert lock.try_acquire()


@pytest.mark.asyncio
async def test_hold_releases_on_error():
    lock = SyncRunLock()

    with pytest.raises(ValueError):
        async with lock.hold():
            assert lock.is_held
            msg = "run failed"
            raise ValueError(msg)

    assert not lock.is_held


@pytest.mark.asyncio
async def test_concurrent_hold_is_rejected():
    lock = SyncRunLock()

    async with lock.hold():
        with pytest.raises(SyncAlreadyRunningError) as exc_info:
            async with lock.hold():
                pass

    assert exc_info.value.retryable is True
    assert not lock.is_held
