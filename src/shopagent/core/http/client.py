from __future__ import annotations

import asyncio
import random
from typing import Any

import httpx

from shopagent.core.config import get_float_env, get_int_env, get_str_env

from .errors import ShopAgentHTTPNetworkError, ShopAgentHTTPStatusError

_RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}
_RETRYABLE_EXCEPTIONS = (httpx.ConnectError, httpx.ReadTimeout, httpx.RemoteProtocolError)
_DEFAULT_TIMEOUT_S = 10.0
_DEFAULT_CONNECT_TIMEOUT_S = 5.0
_DEFAULT_RETRIES = 0
_DEFAULT_BACKOFF_BASE_S = 0.25
_DEFAULT_BACKOFF_MAX_S = 2.0
_DEFAULT_USER_AGENT = "shopagent/0.1"


def _build_timeout(total_s: float | None = None) -> httpx.Timeout:
    connect_s = max(0.1, get_float_env("SHOPAGENT_HTTP_CONNECT_TIMEOUT_S", _DEFAULT_CONNECT_TIMEOUT_S))
    read_total = max(0.1, total_s if total_s is not None else get_float_env("SHOPAGENT_HTTP_TIMEOUT_S", _DEFAULT_TIMEOUT_S))
    return httpx.Timeout(read_total, connect=min(connect_s, read_total))


def build_http_client(
    base_url: str = "",
    *,
    timeout_s: float | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        base_url=base_url,
        timeout=_build_timeout(timeout_s),
        headers={
            "User-Agent": get_str_env("SHOPAGENT_HTTP_USER_AGENT", _DEFAULT_USER_AGENT),
            "Content-Type": "application/json",
        },
        transport=transport,
    )


async def request_json(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    *,
    headers: dict[str, str] | None = None,
    json: object | None = None,
    retries: int | None = None,
) -> Any:
    """Send a request and decode the JSON body.

    Retries are off unless ``SHOPAGENT_HTTP_RETRIES`` (or ``retries``) says
    otherwise; a call either resolves or raises a ``ShopAgentHTTPError``.
    """
    max_retries = max(0, get_int_env("SHOPAGENT_HTTP_RETRIES", _DEFAULT_RETRIES)) if retries is None else max(0, retries)
    backoff_base = max(0.01, get_float_env("SHOPAGENT_HTTP_BACKOFF_BASE_S", _DEFAULT_BACKOFF_BASE_S))
    backoff_max = max(0.01, get_float_env("SHOPAGENT_HTTP_BACKOFF_MAX_S", _DEFAULT_BACKOFF_MAX_S))

    for attempt in range(max_retries + 1):
        try:
            response = await client.request(method, url, headers=headers, json=json)
        except _RETRYABLE_EXCEPTIONS as exc:
            if attempt >= max_retries:
                raise ShopAgentHTTPNetworkError(f"HTTP request failed for {method} {url}: {exc.__class__.__name__}") from exc
            await _sleep_for_retry(attempt, backoff_base, backoff_max)
            continue
        except httpx.HTTPError as exc:
            raise ShopAgentHTTPNetworkError(f"HTTP request error for {method} {url}: {exc.__class__.__name__}") from exc

        status = response.status_code
        if 200 <= status < 300:
            if not response.content:
                return None
            try:
                return response.json()
            except ValueError as exc:
                raise ShopAgentHTTPNetworkError(f"Invalid JSON body from {method} {url}") from exc
        if status in _RETRYABLE_STATUS_CODES and attempt < max_retries:
            await _sleep_for_retry(attempt, backoff_base, backoff_max)
            continue
        raise ShopAgentHTTPStatusError(f"HTTP status {status} for {method} {url}", status_code=status)

    raise ShopAgentHTTPNetworkError(f"HTTP request failed for {method} {url}")


async def _sleep_for_retry(attempt: int, backoff_base: float, backoff_max: float) -> None:
    sleep_s = min(backoff_max, backoff_base * (2**attempt)) * (0.5 + random.random())
    await asyncio.sleep(sleep_s)
