"""Shared HTTP helpers for the Azure service clients."""
from __future__ import annotations
import logging
from typing import Any

import httpx

from completion_runner.common.errors import (
    AuthenticationError,
    CompletionServiceError,
    RateLimitError,
    ServerError,
    ServiceUnavailableError,
)

LOGGER = logging.getLogger("completion_runner.service")


def _error_detail(response: httpx.Response) -> tuple[str | None, str]:
    """Pull (code, message) from an Azure error body, falling back to the raw text."""
    try:
        data = response.json()
    except ValueError:
        return None, response.text or response.reason_phrase
    error = data.get("error") if isinstance(data, dict) else None
    if isinstance(error, dict):
        return error.get("code"), error.get("message") or response.reason_phrase
    return None, response.text or response.reason_phrase


def handle_error(response: httpx.Response) -> None:
    """Raise the matching exception for an error response."""
    status = response.status_code
    code, message = _error_detail(response)

    if status in (401, 403):
        raise AuthenticationError(f"Authentication failed: {message}", code=code, status_code=status)
    elif status == 429:
        retry_after = response.headers.get("Retry-After")
        try:
            retry_after_s = float(retry_after) if retry_after else None
        except ValueError:
            retry_after_s = None
        raise RateLimitError(f"Rate limit exceeded: {message}", code=code, retry_after=retry_after_s)
    elif status >= 500:
        raise ServerError(f"Server error: {message}", code=code, status_code=status)
    else:
        raise CompletionServiceError(f"Request failed: {message}", code=code, status_code=status)


async def send(client: httpx.AsyncClient, method: str, url: str, **kwargs: Any) -> httpx.Response:
    """Issue one request; transport failures and error statuses raise."""
    try:
        response = await client.request(method, url, **kwargs)
    except httpx.TransportError as exc:
        LOGGER.error("%s %s failed: %s", method, url, exc)
        raise ServiceUnavailableError(f"Could not reach service: {exc}") from exc
    if not response.is_success:
        LOGGER.error("%s %s returned %s", method, url, response.status_code)
        handle_error(response)
    return response
