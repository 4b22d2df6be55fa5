"""Bounded retry loop shared by the network backends."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, TypeVar

from treestore.errors import BackendError, BackendUnavailableError, TreeStoreError

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    max_retries: int = 3
    initial_delay_sec: float = 0.5


def call_with_retry(
    func: Callable[[], T],
    *,
    policy: RetryPolicy,
    map_exception: Callable[[Exception], TreeStoreError],
    what: str,
) -> T:
    """
    Run func, retrying BackendUnavailableError with exponential backoff.

    Exceptions that are not TreeStoreError are mapped first. Anything else
    (auth failures, conflicts, malformed responses) is raised immediately.
    """
    delay = policy.initial_delay_sec
    for attempt in range(policy.max_retries + 1):
        try:
            return func()
        except Exception as exc:
            mapped = exc if isinstance(exc, TreeStoreError) else map_exception(exc)
            if isinstance(mapped, BackendUnavailableError) and attempt < policy.max_retries:
                logger.warning(
                    "%s failed (%s), retrying in %.2fs (attempt %d/%d)",
                    what,
                    mapped,
                    delay,
                    attempt + 1,
                    policy.max_retries,
                )
                time.sleep(delay)
                delay *= 2
                continue
            if mapped is exc:
                raise
            raise mapped from exc

    raise BackendError("Unexpected retry loop termination")
