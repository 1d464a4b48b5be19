"""
retry.py — Fixed-delay retry loop for async operations that return a Result.

Each use site picks its own budget:

    LIVE hotspots       3 attempts, 1000 ms apart
    PREDICTED hotspots  2 attempts, 1000 ms apart (fails fast to fallback)
    advice queries      default policy (3 attempts, 1000 ms)

An attempt fails when the operation returns a failed Result or raises.
Raised exceptions are recorded as TRANSIENT. asyncio.CancelledError is a
BaseException and is never caught here, so cancelling the caller aborts a
pending wait immediately and no further attempt runs.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, TypeVar

from gigmate.core.result import ErrorKind, Result

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_DELAY_MS = 1000


@dataclass
class RetryAttemptState:
    """Per-call bookkeeping. Lives only for one execute() call."""

    attempt: int = 0
    last_error: Optional[ErrorKind] = None


@dataclass(frozen=True)
class RetryPolicy:
    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    delay_ms: int = DEFAULT_DELAY_MS

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {self.max_attempts}")
        if self.delay_ms < 0:
            raise ValueError(f"delay_ms must be >= 0, got {self.delay_ms}")

    async def execute(self, operation: Callable[[], Awaitable[Result[T]]]) -> Result[T]:
        """
        Run `operation` until it succeeds or the budget is used up.

        Returns:
            The first successful Result, or Result(error=EXHAUSTED, cause=<last error>).
        """
        state = RetryAttemptState()

        while True:
            state.attempt += 1
            try:
                result = await operation()
            except Exception as exc:
                result = Result.failure(ErrorKind.TRANSIENT, str(exc))

            if result.ok:
                if state.attempt > 1:
                    logger.info("Succeeded on attempt %d/%d", state.attempt, self.max_attempts)
                return result

            state.last_error = result.error
            logger.warning(
                "Attempt %d/%d failed (%s): %s",
                state.attempt, self.max_attempts, result.error.value, result.detail,
            )

            if state.attempt >= self.max_attempts:
                return Result.failure(
                    ErrorKind.EXHAUSTED,
                    detail=f"gave up after {state.attempt} attempts: {result.detail}",
                    cause=state.last_error,
                )

            await asyncio.sleep(self.delay_ms / 1000)
