"""Bounded retry with exponential backoff for non-streaming requests."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

from .errors import ErrorCategory, UserFacingError, is_fail_fast, to_user_facing

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Default retry parameters
DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_BASE_DELAY = 1.0
DEFAULT_MAX_DELAY = 5.0


@dataclass(frozen=True)
class ApiResult(Generic[T]):
    """Outcome of a retried request: a value or a categorized error.

    Use factory classmethods instead of constructing directly:
        ApiResult.success(value, attempts)
        ApiResult.failure(error, attempts)
    """

    value: T | None = None
    error: UserFacingError | None = None
    attempts: int = 0

    def __bool__(self) -> bool:
        """True only for successful results."""
        return self.error is None

    @classmethod
    def success(cls, value: T, attempts: int = 1) -> "ApiResult[T]":
        return cls(value=value, attempts=attempts)

    @classmethod
    def failure(cls, error: UserFacingError, attempts: int = 0) -> "ApiResult[T]":
        return cls(error=error, attempts=attempts)


@dataclass
class RetryState:
    """Per-request retry bookkeeping. Never shared across requests."""
    attempt: int = 0
    last_error: BaseException | None = None
    delay: float = 0.0


def backoff_delay(
    attempt: int,
    base_delay: float = DEFAULT_BASE_DELAY,
    max_delay: float = DEFAULT_MAX_DELAY,
) -> float:
    """Seconds to wait before ``attempt`` (1-based).

    No delay before the first attempt; then base, 2*base, 4*base, ...
    capped at max_delay.
    """
    if attempt < 2:
        return 0.0
    return min(base_delay * (2 ** (attempt - 2)), max_delay)


async def execute_with_retry(
    request_fn: Callable[[], Awaitable[T]],
    *,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    base_delay: float = DEFAULT_BASE_DELAY,
    max_delay: float = DEFAULT_MAX_DELAY,
    is_network_available: Callable[[], Awaitable[bool]] | None = None,
    context: str = "",
) -> ApiResult[T]:
    """Run ``request_fn`` up to ``max_attempts`` times.

    Args:
        request_fn: Zero-arg callable returning an awaitable (e.g.,
            lambda: client.post(...)). Called once per attempt.
        max_attempts: Total attempts, including the first.
        base_delay: Delay before the second attempt; doubles after that.
        max_delay: Upper bound for any single delay.
        is_network_available: Optional probe checked before every attempt
            after the first. When it reports no network the call fails
            with NO_NETWORK without using up an attempt.
        context: Short description for log messages.

    Returns:
        ApiResult with the value on success, or a UserFacingError derived
        from the last failure. DNS and connection-refused failures are not
        retried.
    """
    if max_attempts < 1:
        raise ValueError(f"max_attempts must be >= 1, got {max_attempts}")

    state = RetryState()

    while state.attempt < max_attempts:
        next_attempt = state.attempt + 1

        if next_attempt > 1:
            if is_network_available is not None and not await is_network_available():
                logger.warning("%s no network available, giving up", context)
                return ApiResult.failure(
                    UserFacingError.from_category(ErrorCategory.NO_NETWORK),
                    attempts=state.attempt,
                )
            state.delay = backoff_delay(next_attempt, base_delay, max_delay)
            logger.warning(
                "%s retrying in %ss (attempt %d/%d)...",
                context, state.delay, next_attempt, max_attempts,
            )
            await asyncio.sleep(state.delay)

        state.attempt = next_attempt
        try:
            value = await request_fn()
        except Exception as e:
            state.last_error = e
            if is_fail_fast(e):
                logger.warning("%s %s (not retryable): %s", context, type(e).__name__, e)
                return ApiResult.failure(to_user_facing(e), attempts=state.attempt)
            logger.warning(
                "%s %s on attempt %d/%d: %s",
                context, type(e).__name__, state.attempt, max_attempts, e,
            )
            continue

        logger.debug("%s succeeded on attempt %d", context, state.attempt)
        return ApiResult.success(value, attempts=state.attempt)

    logger.warning("%s exhausted %d attempts", context, max_attempts)
    return ApiResult.failure(to_user_facing(state.last_error), attempts=state.attempt)
