from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Tuple, Type, TypeVar

from domain.ports import CacheBackendError, LoggerPort

T = TypeVar("T")

SleepFn = Callable[[float], Awaitable[None]]


def linear_backoff(base_seconds: float = 0.1) -> Callable[[int], float]:
    """Delay of ``base_seconds * attempt`` after the given failed attempt."""
    return lambda attempt: base_seconds * attempt


async def retry_async(
    operation: Callable[[], Awaitable[T]],
    *,
    attempts: int = 3,
    backoff: Callable[[int], float] = linear_backoff(),
    retry_on: Tuple[Type[BaseException], ...] = (CacheBackendError,),
    sleep: SleepFn = asyncio.sleep,
    logger: LoggerPort | None = None,
    operation_name: str = "operation",
) -> T:
    """
    Await ``operation`` until it succeeds or ``attempts`` are used up.

    Only exceptions in ``retry_on`` are retried; the last one is re-raised
    once every attempt has failed. There is no sleep after the final attempt.
    """
    if attempts < 1:
        raise ValueError("attempts must be at least 1")

    for attempt in range(1, attempts + 1):
        try:
            return await operation()
        except retry_on as exc:
            if attempt == attempts:
                raise
            delay = backoff(attempt)
            if logger is not None:
                logger.warning(
                    "Retrying after transient failure",
                    operation=operation_name,
                    attempt=attempt,
                    delay_seconds=delay,
                    error=str(exc),
                )
            await sleep(delay)
    raise AssertionError("unreachable")
