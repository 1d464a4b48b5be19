"""
test_retry.py — RetryPolicy attempt counting, back-off and cancellation.
"""

import asyncio
from unittest.mock import AsyncMock, patch

import pytest

from gigmate.core.result import ErrorKind, Result
from gigmate.core.retry import RetryPolicy


def _scripted(*outcomes):
    """Operation that returns/raises the given outcomes in order and counts calls."""
    calls = {"n": 0}

    async def operation():
        outcome = outcomes[min(calls["n"], len(outcomes) - 1)]
        calls["n"] += 1
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    return operation, calls


class TestRetryExhaustion:

    @pytest.mark.parametrize("max_attempts", [1, 2, 3, 5])
    async def test_all_failures_make_exactly_n_calls(self, max_attempts):
        operation, calls = _scripted(Result.failure(ErrorKind.TRANSIENT, "boom"))
        result = await RetryPolicy(max_attempts=max_attempts, delay_ms=0).execute(operation)

        assert calls["n"] == max_attempts
        assert result.error is ErrorKind.EXHAUSTED
        assert result.cause is ErrorKind.TRANSIENT

    @pytest.mark.parametrize("failures", [0, 1, 2])
    async def test_success_after_k_failures_makes_k_plus_one_calls(self, failures):
        outcomes = [Result.failure(ErrorKind.TRANSIENT)] * failures + [Result.success("value")]
        operation, calls = _scripted(*outcomes)
        result = await RetryPolicy(max_attempts=3, delay_ms=0).execute(operation)

        assert calls["n"] == failures + 1
        assert result.ok
        assert result.value == "value"

    async def test_raised_exception_counts_as_transient(self):
        operation, calls = _scripted(ConnectionError("reset by peer"))
        result = await RetryPolicy(max_attempts=2, delay_ms=0).execute(operation)

        assert calls["n"] == 2
        assert result.error is ErrorKind.EXHAUSTED
        assert result.cause is ErrorKind.TRANSIENT
        assert "reset by peer" in result.detail

    async def test_last_error_kind_is_reported(self):
        operation, _ = _scripted(
            Result.failure(ErrorKind.TRANSIENT),
            Result.failure(ErrorKind.MALFORMED_RESPONSE, "not JSON"),
        )
        result = await RetryPolicy(max_attempts=2, delay_ms=0).execute(operation)
        assert result.cause is ErrorKind.MALFORMED_RESPONSE


class TestRetryDelay:

    async def test_fixed_delay_between_attempts_only(self):
        operation, _ = _scripted(Result.failure(ErrorKind.TRANSIENT))
        with patch("gigmate.core.retry.asyncio.sleep", new_callable=AsyncMock) as sleep:
            await RetryPolicy(max_attempts=3, delay_ms=1000).execute(operation)

        # 3 attempts → 2 waits, all the same length
        assert sleep.await_count == 2
        assert [c.args[0] for c in sleep.await_args_list] == [1.0, 1.0]

    async def test_no_wait_after_success(self):
        operation, _ = _scripted(Result.success(1))
        with patch("gigmate.core.retry.asyncio.sleep", new_callable=AsyncMock) as sleep:
            await RetryPolicy(max_attempts=3, delay_ms=1000).execute(operation)
        sleep.assert_not_awaited()


class TestRetryCancellation:

    async def test_cancel_during_wait_stops_further_attempts(self):
        operation, calls = _scripted(Result.failure(ErrorKind.TRANSIENT))
        task = asyncio.create_task(RetryPolicy(max_attempts=3, delay_ms=10_000).execute(operation))

        await asyncio.sleep(0.05)  # first attempt done, now sleeping
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        assert calls["n"] == 1


class TestRetryPolicyValidation:

    def test_zero_attempts_rejected(self):
        with pytest.raises(ValueError):
            RetryPolicy(max_attempts=0)

    def test_negative_delay_rejected(self):
        with pytest.raises(ValueError):
            RetryPolicy(delay_ms=-1)
