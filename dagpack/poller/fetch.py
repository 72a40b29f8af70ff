"""Cache-bypassing fetch of the status resource."""

from __future__ import annotations

from pathlib import Path
from typing import Awaitable, Callable
from urllib.parse import unquote, urlsplit

import httpx

from dagpack.poller.exceptions import FetchError

FetchText = Callable[[str], Awaitable[str]]

NO_STORE_HEADERS = {
    "Cache-Control": "no-store",
    "Pragma": "no-cache",
}
_HTTP_SCHEMES = {"http", "https"}


def is_local_resource(resource: str) -> bool:
    scheme = urlsplit(resource).scheme.lower()
    # A single letter is a Windows drive, not a scheme.
    return scheme == "file" or len(scheme) <= 1


def local_resource_path(resource: str) -> Path:
    parts = urlsplit(resource)
    if parts.scheme.lower() == "file":
        return Path(unquote(parts.path))
    return Path(resource)


class ResourceFetcher:
    """Fetches resource text over HTTP(S), or from disk for local paths.

    Every HTTP request bypasses caches. Transport errors and non-success
    statuses are raised as ``FetchError``.
    """

    def __init__(
        self,
        *,
        timeout_seconds: float = 5.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._timeout_seconds = timeout_seconds
        self._transport = transport

    async def __call__(self, resource: str) -> str:
        if is_local_resource(resource):
            return self._read_local(resource)

        scheme = urlsplit(resource).scheme.lower()
        if scheme not in _HTTP_SCHEMES:
            raise FetchError(f"Unsupported resource scheme: {scheme}")

        try:
            async with httpx.AsyncClient(
                timeout=self._timeout_seconds,
                transport=self._transport,
                follow_redirects=True,
            ) as client:
                response = await client.get(resource, headers=NO_STORE_HEADERS)
                response.raise_for_status()
                return response.text
        except httpx.HTTPStatusError as error:
            raise FetchError(
                f"{resource} returned HTTP {error.response.status_code}"
            ) from error
        except httpx.HTTPError as error:
            raise FetchError(f"{resource} fetch failed: {error.__class__.__name__}: {error}") from error

    def _read_local(self, resource: str) -> str:
        path = local_resource_path(resource)
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as error:
            raise FetchError(f"{path} could not be read: {error}") from error


async def fetch_resource_text(resource: str, *, timeout_seconds: float = 5.0) -> str:
    return await ResourceFetcher(timeout_seconds=timeout_seconds)(resource)
