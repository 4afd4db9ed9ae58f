"""
Shared HTTP client for calls to the import backend.
GET may be retried on gateway errors and connection failures; POST never is
(fetch and sync are not idempotent).
"""
import asyncio
import logging
from typing import Any, Optional

import httpx

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT: Optional[float] = None  # wait for the backend as long as it takes
DEFAULT_RETRIES = 0
RETRY_BACKOFF_BASE = 1.0  # seconds


async def _sleep_backoff(attempt: int, base: float = RETRY_BACKOFF_BASE) -> None:
    if attempt <= 0:
        return
    delay = base * (2 ** (attempt - 1))
    await asyncio.sleep(min(delay, 10.0))


async def request_with_retry(
    method: str,
    url: str,
    *,
    timeout: Optional[float] = DEFAULT_TIMEOUT,
    max_retries: int = DEFAULT_RETRIES,
    retry_on: tuple[int, ...] = (502, 503, 504),
    backoff_base: float = RETRY_BACKOFF_BASE,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    **kwargs: Any,
) -> httpx.Response:
    """
    Perform HTTP request with optional retries for gateway and network errors.
    Retries only on retry_on status codes and on connection/timeout errors.
    """
    for attempt in range(max_retries + 1):
        try:
            async with httpx.AsyncClient(timeout=timeout, transport=transport) as client:
                resp = await client.request(method, url, **kwargs)
            if attempt < max_retries and resp.status_code in retry_on:
                logger.warning("HTTP %s %s returned %s, retrying", method, url, resp.status_code)
                await _sleep_backoff(attempt + 1, backoff_base)
                continue
            return resp
        except (httpx.ConnectError, httpx.ReadTimeout, httpx.ConnectTimeout) as e:
            if attempt < max_retries:
                logger.warning("HTTP %s %s attempt %s failed: %s", method, url, attempt + 1, e)
                await _sleep_backoff(attempt + 1, backoff_base)
            else:
                raise
    raise RuntimeError("unreachable")  # pragma: no cover


async def get_with_retry(
    url: str,
    *,
    params: Optional[dict] = None,
    headers: Optional[dict] = None,
    timeout: Optional[float] = DEFAULT_TIMEOUT,
    max_retries: int = DEFAULT_RETRIES,
    backoff_base: float = RETRY_BACKOFF_BASE,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> httpx.Response:
    """GET with retries on 5xx gateway errors and connection errors."""
    return await request_with_retry(
        "GET",
        url,
        params=params,
        headers=headers,
        timeout=timeout,
        max_retries=max_retries,
        backoff_base=backoff_base,
        transport=transport,
    )


async def post_no_retry(
    url: str,
    *,
    json: Optional[dict] = None,
    headers: Optional[dict] = None,
    timeout: Optional[float] = DEFAULT_TIMEOUT,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> httpx.Response:
    """POST with no retries (non-idempotent). Single attempt."""
    async with httpx.AsyncClient(timeout=timeout, transport=transport) as client:
        return await client.post(url, json=json or {}, headers=headers or {})
