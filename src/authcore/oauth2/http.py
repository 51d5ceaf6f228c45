"""
Bearer-token HTTP client used for provider API calls.

A BearerSession is bound to one access token and never changes; a refresh
produces a new BearerSession sharing the same pooled aiohttp session.
"""

import asyncio
import json
from collections.abc import Awaitable, Callable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

import aiohttp

from authcore.errors.exceptions import RequestError, SerdeError

QueryParams = Sequence[tuple[str, str]]
SessionProvider = Callable[[], Awaitable[aiohttp.ClientSession]]

DEFAULT_TIMEOUT_SECONDS = 30


@dataclass
class HttpResponse:
    """Fully-read HTTP response with status and headers."""

    status: int
    content: bytes
    url: str = ""
    reason: str | None = None
    headers: Mapping[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    def text(self, encoding: str = "utf-8") -> str:
        return self.content.decode(encoding, errors="replace")

    def json(self) -> Any:
        """
        Parse the body as JSON.

        Raises:
            SerdeError: If the body is not valid JSON
        """
        try:
            return json.loads(self.content)
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise SerdeError(
                f"Response from {self.url or 'provider'} is not valid JSON: {e}",
                cause=e,
                context={"status_code": self.status},
            ) from e


class BearerSession:
    """
    HTTP client primed with a bearer token and user agent.

    Instances are snapshots: holding on to one keeps using the token it was
    built with.
    """

    def __init__(
        self,
        session_provider: SessionProvider,
        access_token: str,
        user_agent: str,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ):
        self._session_provider = session_provider
        self._access_token = access_token
        self.user_agent = user_agent
        self.timeout = timeout

    @property
    def headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._access_token}",
            "User-Agent": self.user_agent,
        }

    def is_bound_to(self, access_token: str) -> bool:
        return self._access_token == access_token

    async def request(
        self,
        method: str,
        url: str,
        *,
        params: QueryParams | None = None,
        json_body: Any = None,
        headers: Mapping[str, str] | None = None,
    ) -> HttpResponse:
        """
        Issue a request and read the whole body.

        Raises:
            RequestError: On transport failure or timeout (never on HTTP status)
        """
        session = await self._session_provider()
        request_headers = self.headers
        if headers:
            request_headers.update(headers)

        try:
            async with session.request(
                method,
                url,
                params=list(params) if params else None,
                json=json_body,
                headers=request_headers,
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            ) as response:
                content = await response.read()
                return HttpResponse(
                    status=response.status,
                    content=content,
                    url=str(response.url),
                    reason=response.reason,
                    headers=response.headers.copy(),
                )
        except asyncio.TimeoutError as e:
            raise RequestError(
                f"{method} {url} timed out after {self.timeout}s",
                cause=e,
                context={"http_method": method, "http_url": url},
            ) from e
        except aiohttp.ClientError as e:
            raise RequestError(
                f"{method} {url} failed: {e}",
                cause=e,
                context={"http_method": method, "http_url": url},
            ) from e

    async def get(self, url: str, params: QueryParams | None = None) -> HttpResponse:
        return await self.request("GET", url, params=params)


__all__ = ["BearerSession", "HttpResponse", "QueryParams", "DEFAULT_TIMEOUT_SECONDS"]
