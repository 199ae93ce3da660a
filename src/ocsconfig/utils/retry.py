# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/ocsconfig/utils/retry.py
"""
Retrying a whole reconciliation pass against the Kubernetes API.

Only transient API failures get another attempt: resourceVersion
conflicts, throttling and server-side errors. Anything else (403, 422,
a bad manifest) would fail the same way again and is raised at once.
"""

import functools
import time
from typing import Callable

from kubernetes.client import ApiException
from urllib3.exceptions import HTTPError

RETRYABLE_STATUSES = frozenset({409, 429, 500, 502, 503, 504})


class RetryError(RuntimeError):
    def __init__(self, message: str, attempts: int):
        super().__init__(message)
        self.attempts = attempts


def is_transient(exc: BaseException) -> bool:
    if isinstance(exc, ApiException):
        return exc.status in RETRYABLE_STATUSES
    # connection refused / reset / timeouts below the API client
    return isinstance(exc, HTTPError)


def retry(
    *,
    attempts: int,
    delay: float,
    backoff: float = 2.0,
    max_delay: float = 60.0,
    retry_if: Callable[[BaseException], bool] = is_transient,
    on_retry: Callable[[int, BaseException, float], None] | None = None,
):
    """
    attempts: total calls, including the first
    delay: seconds before the second call, multiplied by backoff after each
           failure and capped at max_delay
    retry_if: decides whether a raised exception is worth another attempt
    on_retry: callback(attempt, exception, next_wait)
    """
    if attempts < 1:
        raise ValueError("attempts must be >= 1")

    def decorator(fn):
        @functools.wraps(fn)
        def wrapper(*args, **kwargs):
            wait = delay
            for attempt in range(1, attempts + 1):
                try:
                    return fn(*args, **kwargs)
                except Exception as exc:
                    if not retry_if(exc):
                        raise
                    if attempt == attempts:
                        raise RetryError(
                            f"{fn.__name__} gave up after {attempts} attempt(s): {exc}", attempts
                        ) from exc
                    if on_retry:
                        on_retry(attempt, exc, wait)
                    time.sleep(wait)
                    wait = min(wait * backoff, max_delay)
        return wrapper
    return decorator
