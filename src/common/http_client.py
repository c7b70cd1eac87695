"""Shared HTTP helpers used by the remote repository client.

Encapsulates the timeout/retry/error handling so callers deal with plain
status codes. A status code of 0 means the transport failed on every attempt
(unknown host, refused connection, timeout) and the accompanying message holds
the last error.
"""
from __future__ import annotations

import logging
import os
import time
from typing import Any, Optional, Dict, Tuple

import requests

from constants import Constants
from common.logging_utils import extra_context, is_debug_enabled, safe_url, Timer

logger = logging.getLogger(__name__)


def _default_headers(headers: Optional[Dict[str, str]]) -> Dict[str, str]:
    merged = {"User-Agent": Constants.USER_AGENT}
    if headers:
        merged.update(headers)
    return merged


def _backoff(attempt: int) -> None:
    if attempt + 1 < Constants.HTTP_RETRY_MAX:
        time.sleep(Constants.HTTP_RETRY_BASE_DELAY_SEC * (2 ** attempt))


def robust_get(
    url: str,
    *,
    headers: Optional[Dict[str, str]] = None,
    **kwargs: Any
) -> Tuple[int, Dict[str, str], str]:
    """Perform GET request with timeout and retries, with DEBUG traces.

    Responses are never cached: repository metadata must always be read fresh.

    Returns:
        Tuple of (status_code, headers_dict, text). status_code is 0 when all
        attempts failed at the transport level.
    """
    safe_target = safe_url(url)
    last_exception = None

    for attempt in range(Constants.HTTP_RETRY_MAX):
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

                response = requests.get(
                    url,
                    timeout=Constants.REQUEST_TIMEOUT,
                    headers=_default_headers(headers),
                    **kwargs
                )

                if response.status_code >= 500:
                    last_exception = f"server error {response.status_code}"
                    _backoff(attempt)
                    continue

                if is_debug_enabled(logger):
                    logger.debug(
                        "HTTP response ok",
                        extra=extra_context(
                            event="http_response",
                            component="http_client",
                            action="GET",
                            outcome="success",
                            status_code=response.status_code,
                            duration_ms=t.duration_ms(),
                            target=safe_target
                        )
                    )
                return response.status_code, dict(response.headers), response.text

            except requests.Timeout:
                last_exception = f"timed out after {Constants.REQUEST_TIMEOUT} seconds"
            except requests.RequestException as exc:  # includes ConnectionError
                last_exception = str(exc)

            if is_debug_enabled(logger):
                logger.debug(
                    "HTTP request exception",
                    extra=extra_context(
                        event="http_exception",
                        component="http_client",
                        action="GET",
                        outcome="request_exception",
                        attempt=attempt + 1,
                        target=safe_target
                    )
                )
            _backoff(attempt)

    return 0, {}, f"Request failed after {Constants.HTTP_RETRY_MAX} attempts: {last_exception}"


def robust_download(
    url: str,
    destination: str,
    *,
    headers: Optional[Dict[str, str]] = None,
) -> Tuple[int, Optional[str]]:
    """Stream ``url`` into ``destination`` with timeout and retries.

    The body is written to a sibling temporary file and renamed into place, so
    a reader never observes a half-written artifact.

    Returns:
        Tuple of (status_code, error_message). status_code is 200 on success,
        the HTTP status for non-2xx answers, and 0 on transport failure.
    """
    safe_target = safe_url(url)
    partial = f"{destination}.part"
    last_exception = None

    for attempt in range(Constants.HTTP_RETRY_MAX):
        with Timer() as t:
            try:
                with requests.get(
                    url,
                    timeout=Constants.REQUEST_TIMEOUT,
                    headers=_default_headers(headers),
                    stream=True,
                ) as response:
                    if response.status_code >= 500:
                        last_exception = f"server error {response.status_code}"
                        _backoff(attempt)
                        continue
                    if response.status_code != 200:
                        return response.status_code, f"HTTP {response.status_code}"

                    os.makedirs(os.path.dirname(destination) or ".", exist_ok=True)
                    with open(partial, "wb") as fh:
                        for chunk in response.iter_content(chunk_size=Constants.DOWNLOAD_CHUNK_SIZE):
                            if chunk:
                                fh.write(chunk)
                    os.replace(partial, destination)

                logger.info("Downloaded %s (%d ms)", safe_target, t.duration_ms())
                return 200, None

            except requests.Timeout:
                last_exception = f"timed out after {Constants.REQUEST_TIMEOUT} seconds"
            except requests.RequestException as exc:
                last_exception = str(exc)

            if os.path.exists(partial):
                try:
                    os.remove(partial)
                except OSError:
                    logger.debug("Could not remove partial download %s", partial)
            if is_debug_enabled(logger):
                logger.debug(
                    "HTTP download exception",
                    extra=extra_context(
                        event="http_exception",
                        component="http_client",
                        action="GET",
                        outcome="download_failed",
                        attempt=attempt + 1,
                        target=safe_target
                    )
                )
            _backoff(attempt)

    return 0, f"Download failed after {Constants.HTTP_RETRY_MAX} attempts: {last_exception}"
