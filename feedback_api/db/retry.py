from __future__ import annotations

import asyncio
import enum
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional, Tuple, Type

from sqlalchemy.exc import DBAPIError, DisconnectionError

from ..exceptions import TrackedError, TransientStoreError

logger = logging.getLogger(__name__)

# Fallback heuristic: driver messages seen when the database server is
# unreachable or drops the connection. Matched case-sensitively.
TRANSIENT_ERROR_MARKERS: Tuple[str, ...] = (
    "Can't reach database server",
    "Connection terminated",
    "Connection refused",
)

TRANSIENT_ERROR_TYPES: Tuple[Type[BaseException], ...] = (
    TransientStoreError,
    DisconnectionError,
)


def is_transient_error(exc: BaseException) -> bool:
    """Return True when ``exc`` looks like temporary store unavailability."""
    if isinstance(exc, TRANSIENT_ERROR_TYPES):
        return True
    # Domain errors carry caller-supplied text and are never retried.
    if isinstance(exc, TrackedError):
        return False
    if isinstance(exc, DBAPIError) and exc.connection_invalidated:
        return True
    message = str(exc)
    return any(marker in message for marker in TRANSIENT_ERROR_MARKERS)


class AttemptStatus(str, enum.Enum):
    SUCCEEDED = "succeeded"
    TRANSIENT_FAILURE = "transient_failure"
    TERMINAL_FAILURE = "terminal_failure"


@dataclass(frozen=True)
class AttemptOutcome:
    attempt: int
    status: AttemptStatus
    value: Any = None
    error: Optional[BaseException] = None
    # Seconds waited before the next attempt; None when no retry follows.
    delay: Optional[float] = None


async def with_retry(
    func: Callable[..., Awaitable[Any]],
    *args: Any,
    max_retries: int = 3,
    base_delay: float = 1.0,
    is_transient: Callable[[BaseException], bool] = is_transient_error,
    sleep: Optional[Callable[[float], Awaitable[Any]]] = None,
    on_attempt: Optional[Callable[[AttemptOutcome], None]] = None,
    **kwargs: Any,
) -> Any:
    """
    Execute an async data-store call, retrying transient failures with linear backoff.

    Args:
        func: Async function performing a single data-store call
        max_retries: Maximum number of attempts, including the first one
        base_delay: Seconds to wait after attempt 1; attempt n waits base_delay * n
        is_transient: Classifier for failures worth retrying. Anything else is raised at once.
        sleep: Awaitable delay function, asyncio.sleep by default
        on_attempt: Called with the outcome of every attempt
    """
    attempts = max(1, int(max_retries))
    delay_fn = sleep or asyncio.sleep

    for attempt in range(1, attempts + 1):
        try:
            result = await func(*args, **kwargs)
        except Exception as exc:
            if not is_transient(exc):
                if on_attempt is not None:
                    on_attempt(AttemptOutcome(attempt, AttemptStatus.TERMINAL_FAILURE, error=exc))
                raise
            if attempt >= attempts:
                if on_attempt is not None:
                    on_attempt(AttemptOutcome(attempt, AttemptStatus.TRANSIENT_FAILURE, error=exc))
                logger.error("Database call failed after %s attempts: %s", attempts, exc)
                raise
            delay = float(base_delay) * attempt
            if on_attempt is not None:
                on_attempt(AttemptOutcome(attempt, AttemptStatus.TRANSIENT_FAILURE, error=exc, delay=delay))
            logger.warning(
                "Database connection attempt %s/%s failed: %s. Retrying in %.2fs...",
                attempt,
                attempts,
                exc,
                delay,
            )
            await delay_fn(delay)
            continue

        if on_attempt is not None:
            on_attempt(AttemptOutcome(attempt, AttemptStatus.SUCCEEDED, value=result))
        return result

    raise RuntimeError("Retry loop exited without a result")  # pragma: no cover


@dataclass
class RetryPolicy:
    max_retries: int = 3
    base_delay: float = 1.0

    @classmethod
    def from_settings(cls, settings: Any) -> "RetryPolicy":
        return cls(
            max_retries=settings.db_max_retries,
            base_delay=settings.db_retry_base_delay,
        )

    async def run(self, func: Callable[..., Awaitable[Any]], *args: Any, **kwargs: Any) -> Any:
        return await with_retry(
            func,
            *args,
            max_retries=self.max_retries,
            base_delay=self.base_delay,
            **kwargs,
        )


__all__ = [
    "TRANSIENT_ERROR_MARKERS",
    "TRANSIENT_ERROR_TYPES",
    "AttemptStatus",
    "AttemptOutcome",
    "RetryPolicy",
    "is_transient_error",
    "with_retry",
]
