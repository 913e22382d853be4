"""
Settings access for extensions.
"""

from typing import Any, Optional

from ..errors import NotFoundError
from ..permissions import Permission
from .base import Facade


class ConfigAPI(Facade):

    @property
    def _settings(self):
        return self._services.settings

    async def get(self, section: Optional[str] = None) -> Any:
        self._require(Permission.SETTINGS_READ)
        return self._settings.get(section)

    async def set(self, section: str, value: Any) -> None:
        self._require(Permission.SETTINGS_WRITE)
        self._settings.set(section, value)

    async def get_workspace(self, section: Optional[str] = None) -> Any:
        self._require(Permission.SETTINGS_READ)
        return self._settings.get_workspace(section)

    async def set_workspace(self, section: str, value: Any) -> None:
        self._require(Permission.SETTINGS_WRITE)
        self._settings.set_workspace(section, value)

    async def get_extension(self, section: Optional[str] = None) -> Any:
        """The extension's own configuration, or one key of it."""
        self._require(Permission.SETTINGS_READ)
        instance = self._host.extensions.get(self.extension_name)
        if instance is None:
            return None
        if section is None:
            return dict(instance.config)
        return instance.config.get(section)

    async def set_extension(self, section: str, value: Any) -> None:
        self._require(Permission.SETTINGS_WRITE)
        if self.extension_name not in self._host.extensions:
            raise NotFoundError(f"Extension {self.extension_name} not found")
        await self._host.apply_config(self.extension_name, {section: value})
