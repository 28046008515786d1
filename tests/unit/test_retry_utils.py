"""Unit tests for the retry executor and decorator."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, call

import pytest

from portal_e2e.exceptions import RetryExhaustedError
from portal_e2e.utils.retry_utils import retry, with_retry


def flaky(failures: int, result="ok", error=RuntimeError):
    """Build an async action that fails *failures* times before returning *result*."""
    calls = []

    async def action():
        calls.append(1)
        if len(calls) <= failures:
            raise error(f"failure {len(calls)}")
        return result

    action.calls = calls
    return action


@pytest.mark.unit
class TestRetry:
    @pytest.mark.asyncio
    async def test_succeeds_after_two_failures(self):
        action = flaky(2, result="saved")
        loop = asyncio.get_running_loop()
        started = loop.time()

        assert await retry(action, 3, 50) == "saved"

        elapsed = loop.time() - started
        assert len(action.calls) == 3
        assert 0.09 <= elapsed < 0.5

    @pytest.mark.asyncio
    async def test_first_success_returns_without_sleeping(self):
        sleep = AsyncMock()
        action = flaky(0)

        assert await retry(action, 3, 1_000, sleep=sleep) == "ok"
        sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_exhaustion_keeps_last_error(self):
        sleep = AsyncMock()
        action = flaky(5)

        with pytest.raises(RetryExhaustedError) as excinfo:
            await retry(action, 3, 50, sleep=sleep)

        error = excinfo.value
        assert error.attempts == 3
        assert str(error.last_error) == "failure 3"
        assert error.__cause__ is error.last_error
        assert str(error) == "Action failed after 3 attempts. Last error: failure 3"
        assert len(action.calls) == 3

    @pytest.mark.asyncio
    async def test_no_sleep_after_final_attempt(self):
        sleep = AsyncMock()

        with pytest.raises(RetryExhaustedError):
            await retry(flaky(5), 4, 250, sleep=sleep)

        assert sleep.await_args_list == [call(0.25)] * 3

    @pytest.mark.asyncio
    async def test_two_attempts_raise_from_second_failure(self):
        sleep = AsyncMock()
        action = flaky(2, error=ConnectionError)

        with pytest.raises(RetryExhaustedError) as excinfo:
            await retry(action, 2, 100, sleep=sleep)

        error = excinfo.value
        assert isinstance(error.__cause__, ConnectionError)
        assert str(error.__cause__) == "failure 2"
        assert error.last_error is error.__cause__
        sleep.assert_awaited_once_with(0.1)

    @pytest.mark.asyncio
    async def test_single_attempt_propagates_original_error(self):
        action = flaky(1, error=KeyError)

        with pytest.raises(KeyError):
            await retry(action, max_attempts=1)

        assert len(action.calls) == 1

    @pytest.mark.asyncio
    async def test_sync_action_supported(self):
        attempts = []

        def action():
            attempts.append(1)
            if len(attempts) < 2:
                raise ValueError("not yet")
            return 7

        assert await retry(action, 3, 0) == 7

    @pytest.mark.asyncio
    async def test_failed_attempts_logged(self, caplog):
        await retry(flaky(1), 2, 0)

        assert "Attempt 1/2 failed: failure 1" in caplog.text

    @pytest.mark.asyncio
    @pytest.mark.parametrize(("max_attempts", "delay_ms"), [(0, 10), (-1, 10), (3, -1)])
    async def test_invalid_policy_rejected(self, max_attempts, delay_ms):
        action = flaky(0)

        with pytest.raises(ValueError):
            await retry(action, max_attempts, delay_ms)

        assert action.calls == []


@pytest.mark.unit
class TestWithRetryDecorator:
    @pytest.mark.asyncio
    async def test_decorated_coroutine_is_retried(self):
        calls = []

        @with_retry(max_attempts=2, delay_ms=0)
        async def open_menu(name):
            calls.append(name)
            if len(calls) == 1:
                raise RuntimeError("menu not rendered")
            return f"opened {name}"

        assert await open_menu("user") == "opened user"
        assert calls == ["user", "user"]
        assert open_menu.__name__ == "open_menu"

    @pytest.mark.asyncio
    async def test_decorated_coroutine_exhausts(self):
        @with_retry(max_attempts=2, delay_ms=0)
        async def always_fails():
            raise RuntimeError("boom")

        with pytest.raises(RetryExhaustedError, match="after 2 attempts"):
            await always_fails()
