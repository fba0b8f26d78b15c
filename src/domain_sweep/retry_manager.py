"""
Retry Manager for the domain sweep system.

Runs an operation in a bounded loop carrying an explicit retry budget. Each
failed attempt either spends one unit of the budget and tries again, after a
delay chosen per error, or ends the loop.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable, Generic, Optional, TypeVar

T = TypeVar("T")


@dataclass
class RetryResult(Generic[T]):
    """Result of a retry operation."""

    success: bool
    result: Optional[T]
    attempts: int
    last_error: Optional[Exception]


class RetryManager:
    """
    Bounded retry loop with a per-error delay.

    The budget belongs to one execute_with_retry() call; two calls never
    share it. With max_retries=n an operation runs at most n + 1 times.
    """

    def __init__(
        self,
        max_retries: int,
        retry_delay_seconds: float,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """
        Initialize the retry manager.

        Args:
            max_retries: Retries allowed after the first attempt
            retry_delay_seconds: Default delay before a retry
            sleep: Delay primitive, replaceable in tests
        """
        self._max_retries = max(0, max_retries)
        self._retry_delay_seconds = retry_delay_seconds
        self._sleep = sleep

    @property
    def max_retries(self) -> int:
        return self._max_retries

    @property
    def retry_delay_seconds(self) -> float:
        return self._retry_delay_seconds

    async def execute_with_retry(
        self,
        operation: Callable[[], Awaitable[T]],
        is_retryable: Optional[Callable[[Exception], bool]] = None,
        delay_for: Optional[Callable[[Exception], float]] = None,
    ) -> RetryResult[T]:
        """
        Execute an operation until it succeeds or the budget is spent.

        Args:
            operation: The async operation to execute; every call is a fresh attempt
            is_retryable: Decides whether an exception may be retried.
                          If not provided, all exceptions are considered retryable.
            delay_for: Seconds to wait before retrying after an exception.
                       If not provided, retry_delay_seconds is used.

        Returns:
            RetryResult containing success status, result, attempts, and last error
        """
        remaining = self._max_retries
        attempts = 0

        while True:
            attempts += 1
            try:
                result = await operation()
            except Exception as e:
                should_retry = is_retryable(e) if is_retryable else True
                if not should_retry or remaining <= 0:
                    return RetryResult(
                        success=False,
                        result=None,
                        attempts=attempts,
                        last_error=e,
                    )

                remaining -= 1
                delay = delay_for(e) if delay_for else self._retry_delay_seconds
                if delay > 0:
                    await self._sleep(delay)
                continue

            return RetryResult(
                success=True,
                result=result,
                attempts=attempts,
                last_error=None,
            )
