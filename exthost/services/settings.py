"""
IDE-wide and workspace settings exposed through the config facade.
"""

import copy
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml


def _lookup(data: Dict[str, Any], section: Optional[str]) -> Any:
    if not section:
        return copy.deepcopy(data)
    node: Any = data
    for part in section.split("."):
        if not isinstance(node, dict) or part not in node:
            return None
        node = node[part]
    return copy.deepcopy(node)


def _assign(data: Dict[str, Any], section: str, value: Any) -> None:
    parts = section.split(".")
    node = data
    for part in parts[:-1]:
        child = node.get(part)
        if not isinstance(child, dict):
            child = {}
            node[part] = child
        node = child
    node[parts[-1]] = value


class SettingsStore:
    """Nested settings addressed by dotted section names (``editor.tabSize``)."""

    def __init__(self, settings: Optional[Dict[str, Any]] = None,
                 workspace_settings: Optional[Dict[str, Any]] = None,
                 workspace_file: Optional[Union[str, Path]] = None):
        self.settings: Dict[str, Any] = copy.deepcopy(settings or {})
        self.workspace_file = Path(workspace_file) if workspace_file else None
        self.workspace: Dict[str, Any] = copy.deepcopy(workspace_settings or {})
        self.logger = logging.getLogger("exthost.services.settings")

        if self.workspace_file and self.workspace_file.exists():
            self.workspace.update(self._load_workspace_file())

    def get(self, section: Optional[str] = None) -> Any:
        return _lookup(self.settings, section)

    def set(self, section: str, value: Any) -> None:
        _assign(self.settings, section, value)

    def get_workspace(self, section: Optional[str] = None) -> Any:
        return _lookup(self.workspace, section)

    def set_workspace(self, section: str, value: Any) -> None:
        _assign(self.workspace, section, value)
        self._save_workspace_file()

    def _load_workspace_file(self) -> Dict[str, Any]:
        try:
            with open(self.workspace_file, "r") as f:
                return yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            self.logger.error(f"Failed to load workspace settings: {e}")
            return {}

    def _save_workspace_file(self) -> None:
        if not self.workspace_file:
            return
        try:
            self.workspace_file.parent.mkdir(parents=True, exist_ok=True)
            with open(self.workspace_file, "w") as f:
                yaml.dump(self.workspace, f, default_flow_style=False)
        except OSError as e:
            self.logger.error(f"Failed to save workspace settings: {e}")
