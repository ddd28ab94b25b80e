"""Shared async HTTP helpers used by registry sources.

Encapsulates timeout, retry and JSON decoding so individual sources avoid
duplicating try/except blocks. Failures are reported through the returned
status code (0 when no response was received) rather than raised.
"""
from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Dict, Optional, Tuple

import aiohttp

from ..constants import Constants
from .logging_utils import extra_context, is_debug_enabled, safe_url, Timer

logger = logging.getLogger(__name__)


async def _fetch_once(
    session: aiohttp.ClientSession,
    url: str,
    headers: Optional[Dict[str, str]],
) -> Tuple[int, Dict[str, str], str]:
    async with session.get(url, headers=headers) as response:
        text = await response.text()
        return response.status, dict(response.headers), text


async def robust_get(
    url: str,
    *,
    headers: Optional[Dict[str, str]] = None,
    session: Optional[aiohttp.ClientSession] = None,
    retries: Optional[int] = None,
    timeout: Optional[int] = None,
) -> Tuple[int, Dict[str, str], str]:
    """Perform GET request with timeout and retries, with DEBUG traces.

    Server errors (5xx) and transport errors are retried with exponential
    backoff. Client errors are returned immediately.

    Args:
        url: Target URL
        headers: Optional request headers
        session: Shared session; a short-lived one is created when omitted
        retries: Attempt count override (defaults to Constants.HTTP_RETRY_MAX)
        timeout: Total timeout in seconds for an owned session

    Returns:
        Tuple of (status_code, headers_dict, body_text); status_code is 0 when
        every attempt failed without a response.
    """
    if session is None:
        client_timeout = aiohttp.ClientTimeout(total=timeout or Constants.REQUEST_TIMEOUT)
        async with aiohttp.ClientSession(timeout=client_timeout) as owned:
            return await robust_get(url, headers=headers, session=owned, retries=retries)

    safe_target = safe_url(url)
    attempts = max(1, retries if retries is not None else Constants.HTTP_RETRY_MAX)
    last_error = None
    result: Optional[Tuple[int, Dict[str, str], str]] = None

    for attempt in range(attempts):
        if attempt:
            await asyncio.sleep(Constants.HTTP_RETRY_BASE_DELAY_SEC * (2 ** (attempt - 1)))
        with Timer() as t:
            try:
                if is_debug_enabled(logger):
                    logger.debug(
                        "HTTP request",
                        extra=extra_context(
                            event="http_request",
                            component="http_client",
                            action="GET",
                            target=safe_target,
                            attempt=attempt + 1
                        )
                    )
                result = await _fetch_once(session, url, headers)
            except asyncio.TimeoutError:
                last_error = "timeout"
                result = None
                continue
            except aiohttp.ClientError as exc:
                last_error = str(exc)
                result = None
                continue

        status = result[0]
        if is_debug_enabled(logger):
            logger.debug(
                "HTTP response",
                extra=extra_context(
                    event="http_response",
                    component="http_client",
                    action="GET",
                    outcome="success" if status < 500 else "server_error",
                    status_code=status,
                    duration_ms=t.duration_ms(),
                    target=safe_target
                )
            )
        if status < 500:
            return result
        last_error = f"HTTP {status}"

    if result is not None:
        return result

    logger.warning(
        "Request to %s failed after %s attempts: %s", safe_target, attempts, last_error
    )
    return 0, {}, f"Request failed after {attempts} attempts: {last_error}"


async def get_json(
    url: str,
    *,
    headers: Optional[Dict[str, str]] = None,
    session: Optional[aiohttp.ClientSession] = None,
    retries: Optional[int] = None,
    timeout: Optional[int] = None,
) -> Tuple[int, Dict[str, str], Optional[Any]]:
    """Perform GET request and parse JSON response with DEBUG traces.

    Args:
        url: Target URL
        headers: Optional request headers
        session: Optional shared session
        retries: Attempt count override
        timeout: Total timeout in seconds when no session is given

    Returns:
        Tuple of (status_code, headers_dict, parsed_json_or_none)
    """
    status_code, response_headers, text = await robust_get(
        url, headers=headers, session=session, retries=retries, timeout=timeout
    )

    if status_code == 200 and text:
        try:
            return status_code, response_headers, json.loads(text)
        except json.JSONDecodeError:
            if is_debug_enabled(logger):
                logger.debug(
                    "JSON decode error",
                    extra=extra_context(
                        event="parse",
                        component="http_client",
                        action="get_json",
                        outcome="json_decode_error",
                        status_code=status_code,
                        target=safe_url(url)
                    )
                )
            return status_code, response_headers, None

    return status_code, response_headers, None
