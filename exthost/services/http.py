"""
Outbound HTTP client backing the http facade.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import aiohttp


@dataclass
class HTTPResponse:
    """Response returned to extensions; the body is always text."""
    status: int
    status_text: str
    headers: Dict[str, str] = field(default_factory=dict)
    data: str = ""

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


class HttpClient:
    """Thin aiohttp wrapper sharing one session across requests."""

    def __init__(self, timeout: float = 30.0, user_agent: str = "exthost"):
        self.timeout = timeout
        self.user_agent = user_agent
        self._session: Optional[aiohttp.ClientSession] = None
        self.logger = logging.getLogger("exthost.services.http")

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                headers={"User-Agent": self.user_agent},
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            )
        return self._session

    async def request(self, url: str, method: str = "GET",
                      headers: Optional[Dict[str, str]] = None,
                      body: Any = None, timeout: Optional[float] = None) -> HTTPResponse:
        session = await self._get_session()
        kwargs: Dict[str, Any] = {"headers": headers}
        if isinstance(body, (dict, list)):
            kwargs["json"] = body
        elif body is not None:
            kwargs["data"] = body
        if timeout is not None:
            kwargs["timeout"] = aiohttp.ClientTimeout(total=timeout)

        async with session.request(method.upper(), url, **kwargs) as response:
            data = await response.text()
            self.logger.debug(f"{method.upper()} {url} -> {response.status}")
            return HTTPResponse(
                status=response.status,
                status_text=response.reason or "",
                headers=dict(response.headers),
                data=data,
            )

    async def close(self) -> None:
        if self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None
