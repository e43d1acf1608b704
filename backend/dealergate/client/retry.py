from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Callable, TypeVar

import backoff
import httpx

from dealergate.client.errors import ApiError

logger = logging.getLogger(__name__)

T = TypeVar('T')

# Auth / permission / missing-resource failures will not change on retry.
NON_RETRYABLE_STATUSES = frozenset({401, 403, 404})


def is_permanent(error: Exception) -> bool:
    # a malformed 2xx body will not change on retry either
    return isinstance(error, ApiError) and (
        error.status_code in NON_RETRYABLE_STATUSES or error.status_code < 400
    )


@dataclass
class RetryPolicy:
    """Read-request retries, waiting ``min(base_delay * 2**attempt, max_delay)`` between tries."""
    max_retries: int = 2
    base_delay: float = 1.0
    max_delay: float = 10.0

    def call(self, fn: Callable[[], T]) -> T:
        retrying = backoff.on_exception(
            backoff.expo,
            (ApiError, httpx.TransportError),
            max_tries=self.max_retries + 1,
            giveup=is_permanent,
            jitter=None,
            logger=logger,
            factor=self.base_delay,
            max_value=self.max_delay,
        )(fn)
        return retrying()


__all__ = ['RetryPolicy', 'NON_RETRYABLE_STATUSES', 'is_permanent']
