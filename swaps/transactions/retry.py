"""
Re-run a swap transaction that lost a serialization race.

Only SwapConflictError is retried: every attempt opens a fresh unit of
work, so the retry re-reads the committed state and either succeeds or
fails with the precondition error the winner's commit now implies
(typically SwapInvalidStateError). Other errors propagate immediately.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from shared.config import get_settings
from swaps.errors import SwapConflictError

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def call_with_conflict_retry(
    attempt_fn: Callable[[], Awaitable[T]],
    trace_id: str,
    max_attempts: int | None = None,
    initial_delay: float = 0.02,
    max_delay: float = 0.2,
) -> T:
    """
    Await attempt_fn(), re-running it on SwapConflictError.

    Args:
        attempt_fn: Zero-argument coroutine function running one whole transaction
        trace_id: Prefix for log lines
        max_attempts: Total attempts (default: settings.SWAP_MAX_ATTEMPTS)
        initial_delay: Delay before the second attempt, doubled afterwards
        max_delay: Upper bound for the delay

    Raises:
        SwapConflictError: Every attempt conflicted
    """
    attempts = max(1, max_attempts or get_settings().SWAP_MAX_ATTEMPTS)

    for attempt in range(1, attempts + 1):
        try:
            result = await attempt_fn()
        except SwapConflictError:
            if attempt == attempts:
                logger.error(f"[{trace_id}] Transaction still conflicting after {attempts} attempts")
                raise

            delay = min(initial_delay * (2 ** (attempt - 1)), max_delay)
            logger.warning(
                f"[{trace_id}] Serialization conflict (attempt {attempt}/{attempts}), "
                f"retrying in {delay:.2f}s"
            )
            await asyncio.sleep(delay)
            continue

        if attempt > 1:
            logger.info(f"[{trace_id}] Transaction succeeded on attempt {attempt}")
        return result

    # Should never reach here, every attempt returns or raises
    raise AssertionError(f"[{trace_id}] retry loop exited without a result")
