"""
Outbound HTTP for extensions.
"""

from typing import Any, Dict, Optional

from ...services.http import HTTPResponse
from ..permissions import Permission
from .base import Facade


class HTTPAPI(Facade):

    @property
    def _client(self):
        return self._services.http

    async def request(self, url: str, method: str = "GET", headers: Optional[Dict[str, str]] = None,
                      body: Any = None, timeout: Optional[float] = None) -> HTTPResponse:
        self._require(Permission.NETWORK_REQUEST)
        self._host.logger.debug(f"Extension {self.extension_name} requesting {method} {url}")
        return await self._client.request(url, method=method, headers=headers, body=body, timeout=timeout)

    async def get(self, url: str, headers: Optional[Dict[str, str]] = None) -> HTTPResponse:
        self._require(Permission.NETWORK_REQUEST)
        return await self._client.request(url, method="GET", headers=headers)

    async def post(self, url: str, data: Any = None, headers: Optional[Dict[str, str]] = None) -> HTTPResponse:
        self._require(Permission.NETWORK_REQUEST)
        return await self._client.request(url, method="POST", headers=headers, body=data)

    async def put(self, url: str, data: Any = None, headers: Optional[Dict[str, str]] = None) -> HTTPResponse:
        self._require(Permission.NETWORK_REQUEST)
        return await self._client.request(url, method="PUT", headers=headers, body=data)

    async def delete(self, url: str, headers: Optional[Dict[str, str]] = None) -> HTTPResponse:
        self._require(Permission.NETWORK_REQUEST)
        return await self._client.request(url, method="DELETE", headers=headers)
