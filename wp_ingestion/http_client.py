from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests
from tenacity import (
    RetryError,
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from common.logger import get_logger
from wp_ingestion.errors import NetworkError

log = get_logger(__name__)

_TRANSIENT = (requests.ConnectionError, requests.Timeout)


@dataclass
class HttpResponse:
    status: int
    reason: str
    url: str
    body: Any = None  # decoded JSON, None when the payload is not JSON


def _fetch(
    url: str,
    headers: Optional[Dict[str, str]],
    params: Optional[Dict[str, Any]],
    timeout: int,
    max_retries: int,
) -> requests.Response:
    """GET with retries on connection failures only; HTTP statuses are never retried."""
    for attempt in Retrying(
        retry=retry_if_exception_type(_TRANSIENT),
        stop=stop_after_attempt(max_retries),
        wait=wait_exponential(multiplier=1, min=2, max=10),
    ):
        with attempt:
            return requests.get(url, headers=headers, params=params, timeout=timeout)


def http_get(
    url: str,
    headers: Optional[Dict[str, str]] = None,
    params: Optional[Dict[str, Any]] = None,
    timeout: int = 20,
    max_retries: int = 3,
) -> HttpResponse:
    try:
        resp = _fetch(url, headers, params, timeout, max_retries)
    except RetryError as e:
        cause = e.last_attempt.exception()
        raise NetworkError(
            f"Network error: Cannot connect to WordPress API ({cause}). Please check your connection",
            url=url,
        ) from cause
    except requests.RequestException as e:
        raise NetworkError(f"Request failed: {e}", url=url) from e

    try:
        body = resp.json()
    except ValueError:
        log.debug("Non-JSON payload from %s", resp.url)
        body = None
    return HttpResponse(status=resp.status_code, reason=resp.reason or "", url=resp.url, body=body)
