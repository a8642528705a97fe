"""Async retry with capped exponential backoff."""

import asyncio
import functools
import re
from collections.abc import Awaitable, Callable
from typing import ParamSpec, TypeVar
import structlog

log = structlog.get_logger(__name__)

P = ParamSpec("P")
R = TypeVar("R")

# Credentials that can end up in URLs or handshake errors
_SENSITIVE_PARAMS = re.compile(
    r"((?:token|access_?token|secret|password|authorization)=)[^&\s'\")]+",
    re.IGNORECASE,
)
_BEARER = re.compile(r"(Bearer\s+)[A-Za-z0-9\-._~+/]+=*", re.IGNORECASE)


def sanitize_error(error: str) -> str:
    """Strip tokens and bearer credentials from error messages."""
    return _BEARER.sub(r"\1[REDACTED]", _SENSITIVE_PARAMS.sub(r"\1[REDACTED]", error))


def backoff_delay(attempt: int, base_delay: float, max_delay: float) -> float:
    """Delay before retry number ``attempt`` (0-based)."""
    return min(base_delay * (2 ** attempt), max_delay)


async def retry_async(
    func: Callable[[], Awaitable[R]],
    *,
    max_retries: int = 3,
    base_delay: float = 1.0,
    max_delay: float = 60.0,
    exceptions: tuple[type[Exception], ...] = (Exception,),
    label: str | None = None,
) -> R:
    """Await ``func()`` up to ``max_retries + 1`` times, sleeping between failures."""
    name = label or getattr(func, "__name__", "call")
    last_exception: Exception | None = None
    for attempt in range(max_retries + 1):
        try:
            return await func()
        except exceptions as e:
            last_exception = e
            if attempt == max_retries:
                break
            delay = backoff_delay(attempt, base_delay, max_delay)
            log.warning(
                "retry_attempt",
                func=name,
                attempt=attempt + 1,
                max_retries=max_retries,
                delay=delay,
                error=sanitize_error(str(e)),
            )
            await asyncio.sleep(delay)
    raise last_exception  # type: ignore[misc]


def async_retry(
    max_retries: int = 3,
    base_delay: float = 1.0,
    max_delay: float = 60.0,
    exceptions: tuple[type[Exception], ...] = (Exception,),
) -> Callable[[Callable[P, Awaitable[R]]], Callable[P, Awaitable[R]]]:
    """Decorator form of :func:`retry_async`."""

    def decorator(func: Callable[P, Awaitable[R]]) -> Callable[P, Awaitable[R]]:
        @functools.wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            return await retry_async(
                lambda: func(*args, **kwargs),
                max_retries=max_retries,
                base_delay=base_delay,
                max_delay=max_delay,
                exceptions=exceptions,
                label=func.__name__,
            )

        return wrapper

    return decorator
