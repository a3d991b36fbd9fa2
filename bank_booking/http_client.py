"""HTTP session with retry and connection pooling for the booking backend.

Pattern: requests.Session with tenacity retry strategy and connection pooling.

- Connection errors, timeouts and 5xx responses are retried with exponential backoff
- Responses are handed back untouched once retries run out: a 4xx or 5xx body
  can carry a structured error the caller shows
- tenacity owns every retry; the urllib3 adapter only pools connections
- Every request gets a default timeout
"""
import logging

import requests
from requests.adapters import HTTPAdapter
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception_type,
    retry_if_result,
    stop_after_attempt,
    wait_exponential,
)
from urllib3.util.retry import Retry

from bank_booking import config

logger = logging.getLogger(__name__)

RETRYABLE_ERRORS = (
    requests.exceptions.ConnectionError,
    requests.exceptions.Timeout,
)


def is_server_error(response: requests.Response) -> bool:
    return response.status_code >= 500


def raise_for_server_error(response: requests.Response):
    """Raise HTTPError for 5xx responses only."""
    if is_server_error(response):
        raise requests.exceptions.HTTPError(
            f"{response.status_code} Server Error for url: {response.url}",
            response=response
        )


def create_http_session(
    max_retries: int = config.HTTP_MAX_RETRIES,
    timeout: float = config.HTTP_TIMEOUT_SECONDS,
    wait=None
) -> requests.Session:
    """
    Create HTTP session with retry and connection pooling.

    Args:
        max_retries: Maximum number of retry attempts (default: 3)
        timeout: Request timeout in seconds (default: 15)
        wait: tenacity wait strategy (default: exponential 1s, 2s, 4s... capped at 8s)

    Returns:
        Configured requests.Session whose get/post retry transient failures.
        A 5xx that persists through every attempt is returned, not raised.
    """
    session = requests.Session()

    # Pooling only; tenacity below owns retries
    retry_strategy = Retry(total=0, raise_on_status=False)
    adapter = HTTPAdapter(
        max_retries=retry_strategy,
        pool_connections=10,
        pool_maxsize=10,
    )
    session.mount("http://", adapter)
    session.mount("https://", adapter)

    if wait is None:
        wait = wait_exponential(multiplier=1, min=1, max=8)

    def with_retry(send):
        @retry(
            stop=stop_after_attempt(max_retries + 1),
            wait=wait,
            retry=retry_if_exception_type(RETRYABLE_ERRORS) | retry_if_result(is_server_error),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            retry_error_callback=lambda state: state.outcome.result()
        )
        def send_with_retry(*args, **kwargs):
            kwargs.setdefault('timeout', timeout)
            return send(*args, **kwargs)
        return send_with_retry

    session.get = with_retry(session.get)
    session.post = with_retry(session.post)

    return session
