"""
Per-extension persistent key/value storage.
"""

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union


SCOPES = ("global", "workspace", "extension")


class JsonFileStorage:
    """
    Key/value store with one JSON document per (scope, extension).

    Layout: ``<root>/<scope>/<extension-name>.json``. With ``root=None`` the
    store keeps everything in memory, which is what tests use.
    """

    def __init__(self, root: Optional[Union[str, Path]] = None):
        self.root = Path(root) if root else None
        self._data: Dict[Tuple[str, str], Dict[str, Any]] = {}
        self._locks: Dict[Tuple[str, str], asyncio.Lock] = {}
        self.logger = logging.getLogger("exthost.services.storage")

    async def initialize(self, extension_name: str) -> None:
        """Load (or create) every scope document for an extension."""
        for scope in SCOPES:
            await self._load(scope, extension_name)
        self.logger.debug(f"Initialized storage for extension {extension_name}")

    async def get(self, scope: str, extension_name: str, key: str, default: Any = None) -> Any:
        data = await self._load(scope, extension_name)
        return data.get(key, default)

    async def set(self, scope: str, extension_name: str, key: str, value: Any) -> None:
        data = await self._load(scope, extension_name)
        data[key] = value
        await self._save(scope, extension_name)

    async def delete(self, scope: str, extension_name: str, key: str) -> bool:
        data = await self._load(scope, extension_name)
        if key not in data:
            return False
        del data[key]
        await self._save(scope, extension_name)
        return True

    async def keys(self, scope: str, extension_name: str) -> list:
        data = await self._load(scope, extension_name)
        return list(data)

    def _path(self, scope: str, extension_name: str) -> Optional[Path]:
        if self.root is None:
            return None
        return self.root / scope / f"{extension_name}.json"

    async def _load(self, scope: str, extension_name: str) -> Dict[str, Any]:
        if scope not in SCOPES:
            raise ValueError(f"Unknown storage scope: {scope}")

        slot = (scope, extension_name)
        if slot in self._data:
            return self._data[slot]

        path = self._path(scope, extension_name)
        data: Dict[str, Any] = {}
        if path is not None and path.exists():
            try:
                raw = await asyncio.to_thread(path.read_text, encoding="utf-8")
                data = json.loads(raw) or {}
            except (OSError, json.JSONDecodeError) as e:
                self.logger.error(f"Failed to read storage {path}: {e}")
                data = {}

        return self._data.setdefault(slot, data)

    async def _save(self, scope: str, extension_name: str) -> None:
        path = self._path(scope, extension_name)
        if path is None:
            return

        slot = (scope, extension_name)
        lock = self._locks.setdefault(slot, asyncio.Lock())
        payload = json.dumps(self._data[slot], indent=2, default=str)

        def _write():
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(payload, encoding="utf-8")

        async with lock:
            await asyncio.to_thread(_write)
