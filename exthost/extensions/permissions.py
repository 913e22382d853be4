"""
Capability tokens and the per-extension permission matrix.
"""

import logging
from enum import Enum
from typing import Dict, FrozenSet, Iterable, List, Optional

from .errors import PermissionDeniedError


class Permission(str, Enum):
    """Capability tokens an extension manifest may request."""
    WORKSPACE_READ = "workspace.read"
    WORKSPACE_WRITE = "workspace.write"
    WORKSPACE_FILESYSTEM = "workspace.fileSystem"
    EDITOR_READ = "editor.read"
    EDITOR_WRITE = "editor.write"
    TERMINAL_EXECUTE = "terminal.execute"
    TERMINAL_READ = "terminal.read"
    AI_REQUEST = "ai.request"
    GIT_READ = "git.read"
    GIT_WRITE = "git.write"
    SETTINGS_READ = "settings.read"
    SETTINGS_WRITE = "settings.write"
    UI_RENDER = "ui.render"
    UI_COMMAND = "ui.command"
    UI_SHORTCUT = "ui.shortcut"
    NETWORK_REQUEST = "network.request"
    STORAGE_PERSISTENT = "storage.persistent"

    @classmethod
    def values(cls) -> FrozenSet[str]:
        return frozenset(p.value for p in cls)

    @classmethod
    def is_known(cls, token: str) -> bool:
        return token in cls.values()


def _token(permission) -> str:
    return permission.value if isinstance(permission, Permission) else str(permission)


class PermissionMatrix:
    """
    Granted capability tokens per extension name.

    A grant is derived 1:1 from ``manifest.permissions`` and replaced, never
    merged, when the same name is registered again.
    """

    def __init__(self):
        self._grants: Dict[str, FrozenSet[str]] = {}
        self.logger = logging.getLogger("exthost.permissions")

    def grant(self, manifest) -> FrozenSet[str]:
        """Store the manifest's permissions as the grant for its name."""
        tokens = frozenset(_token(p) for p in manifest.permissions)
        self._grants[manifest.name] = tokens
        self.logger.debug(f"Granted {sorted(tokens)} to {manifest.name}")
        return tokens

    def revoke(self, extension_name: str) -> None:
        self._grants.pop(extension_name, None)

    def has_grant(self, extension_name: str) -> bool:
        return extension_name in self._grants

    def granted(self, extension_name: str) -> FrozenSet[str]:
        return self._grants.get(extension_name, frozenset())

    def check(self, extension_name: str, required: Iterable = ()) -> None:
        """Raise PermissionDeniedError unless every required token is granted."""
        granted = self._grants.get(extension_name)
        if granted is None:
            raise PermissionDeniedError(extension_name)

        for permission in required:
            token = _token(permission)
            if token not in granted:
                raise PermissionDeniedError(extension_name, token)

    def missing(self, extension_name: str, required: Iterable) -> List[str]:
        granted = self.granted(extension_name)
        return [_token(p) for p in required if _token(p) not in granted]

    def counts(self) -> Dict[str, int]:
        """Number of extensions holding each granted token."""
        counts: Dict[str, int] = {}
        for tokens in self._grants.values():
            for token in tokens:
                counts[token] = counts.get(token, 0) + 1
        return counts

    def names(self) -> List[str]:
        return list(self._grants)

    def __len__(self) -> int:
        return len(self._grants)

    def __contains__(self, extension_name: Optional[str]) -> bool:
        return extension_name in self._grants
