"""
Persistent key/value storage for extensions.

Three scopes are available: ``global`` (shared across workspaces),
``workspace`` and ``extension``. Keys are always namespaced by the calling
extension, so two extensions never see each other's values.
"""

from typing import Any, List

from ..permissions import Permission
from .base import Facade


class StorageAPI(Facade):

    @property
    def _store(self):
        return self._services.storage

    async def get_global(self, key: str, default: Any = None) -> Any:
        self._require(Permission.STORAGE_PERSISTENT)
        return await self._store.get("global", self.extension_name, key, default)

    async def set_global(self, key: str, value: Any) -> None:
        self._require(Permission.STORAGE_PERSISTENT)
        await self._store.set("global", self.extension_name, key, value)

    async def delete_global(self, key: str) -> bool:
        self._require(Permission.STORAGE_PERSISTENT)
        return await self._store.delete("global", self.extension_name, key)

    async def get_workspace(self, key: str, default: Any = None) -> Any:
        self._require(Permission.STORAGE_PERSISTENT)
        return await self._store.get("workspace", self.extension_name, key, default)

    async def set_workspace(self, key: str, value: Any) -> None:
        self._require(Permission.STORAGE_PERSISTENT)
        await self._store.set("workspace", self.extension_name, key, value)

    async def delete_workspace(self, key: str) -> bool:
        self._require(Permission.STORAGE_PERSISTENT)
        return await self._store.delete("workspace", self.extension_name, key)

    async def get_extension(self, key: str, default: Any = None) -> Any:
        self._require(Permission.STORAGE_PERSISTENT)
        return await self._store.get("extension", self.extension_name, key, default)

    async def set_extension(self, key: str, value: Any) -> None:
        self._require(Permission.STORAGE_PERSISTENT)
        await self._store.set("extension", self.extension_name, key, value)

    async def delete_extension(self, key: str) -> bool:
        self._require(Permission.STORAGE_PERSISTENT)
        return await self._store.delete("extension", self.extension_name, key)

    async def keys(self, scope: str = "extension") -> List[str]:
        self._require(Permission.STORAGE_PERSISTENT)
        return await self._store.keys(scope, self.extension_name)
