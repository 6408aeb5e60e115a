"""
Shared GET helper for the third-party sports APIs.
Transient failures are retried with exponential backoff; client errors fail fast.
"""
import time
from typing import Any, Dict, Optional
import requests
import structlog
from tenacity import retry, retry_if_exception, stop_after_attempt, wait_exponential

from config.settings import get_settings

logger = structlog.get_logger()
settings = get_settings()

RETRYABLE_STATUS = {429, 500, 502, 503, 504}


class ApiError(Exception):
    """Non-2xx response (or unusable body) from an upstream API."""

    def __init__(self, message: str, status_code: Optional[int] = None, url: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.url = url


def rate_limit():
    """Apply the fixed delay between paginated calls."""
    time.sleep(settings.page_delay)


def _is_transient(exc: BaseException) -> bool:
    if isinstance(exc, (requests.ConnectionError, requests.Timeout)):
        return True
    return isinstance(exc, ApiError) and exc.status_code in RETRYABLE_STATUS


def _log_retry(retry_state):
    logger.warning(
        "http_retry",
        attempt=retry_state.attempt_number,
        error=str(retry_state.outcome.exception())
    )


@retry(
    retry=retry_if_exception(_is_transient),
    stop=stop_after_attempt(settings.http_max_attempts),
    wait=wait_exponential(multiplier=1, min=1, max=8),
    before_sleep=_log_retry,
    reraise=True
)
def get_json(
    url: str,
    params: Optional[Dict[str, Any]] = None,
    headers: Optional[Dict[str, str]] = None
) -> Any:
    """GET a URL and decode its JSON body.

    Args:
        url: Absolute URL
        params: Query parameters (list values repeat the key)
        headers: Extra request headers

    Returns:
        Decoded JSON payload

    Raises:
        ApiError: On a non-2xx status or a body that is not JSON
    """
    response = requests.get(
        url,
        params=params,
        headers=headers,
        timeout=settings.request_timeout
    )

    if not response.ok:
        raise ApiError(
            f"HTTP error! status: {response.status_code} - {response.text} fetching {url}",
            status_code=response.status_code,
            url=url
        )

    try:
        return response.json()
    except ValueError as e:
        raise ApiError(f"Invalid JSON from {url}: {e}", status_code=response.status_code, url=url)
