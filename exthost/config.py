"""Configuration management for the extension host."""

import copy
import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml
from dotenv import load_dotenv

CONFIG_FILENAME = ".exthostrc"


class Config:
    """Configuration manager for the extension host."""

    def __init__(self, path: Optional[Union[str, Path]] = None):
        """Initialize configuration with environment variables and config files."""
        # Load environment variables from .env file if it exists
        load_dotenv()

        self.config_path = Path(path) if path else Path.home() / CONFIG_FILENAME

        # Default configuration
        self.defaults: Dict[str, Any] = {
            "extensions_dirs": [],
            "include_builtin": True,
            "activation_permissions": ["ui.render"],
            "http": {"timeout": 30.0},
            "log_level": "INFO",
            "settings": {},
        }

        # Load user config if it exists
        self.user_config = self._load_user_config()

        self.workspace_path = Path(
            os.getenv("EXTHOST_WORKSPACE") or self.user_config.get("workspace_path") or Path.cwd()
        ).expanduser().resolve()

        storage_dir = os.getenv("EXTHOST_STORAGE_DIR") or self.user_config.get("storage_dir")
        self.storage_dir = (
            Path(storage_dir).expanduser() if storage_dir
            else self.workspace_path / ".exthost" / "storage"
        )

        self.log_level = (
            os.getenv("EXTHOST_LOG_LEVEL") or self.user_config.get("log_level") or self.defaults["log_level"]
        ).upper()

    def _load_user_config(self) -> Dict:
        """Load user configuration from ~/.exthostrc if it exists."""
        if self.config_path.exists():
            try:
                with open(self.config_path, 'r') as f:
                    return yaml.safe_load(f) or {}
            except (OSError, yaml.YAMLError):
                return {}
        return {}

    def get(self, key: str, default: Any = None) -> Any:
        """Look up a dotted key (``http.timeout``) in user config, then defaults."""
        for source in (self.user_config, self.defaults):
            node: Any = source
            for part in key.split("."):
                if not isinstance(node, dict) or part not in node:
                    node = None
                    break
                node = node[part]
            if node is not None:
                return copy.deepcopy(node)
        return default

    def get_extensions_dirs(self) -> List[Path]:
        """Configured extension directories, relative ones anchored at the workspace."""
        dirs = []
        for entry in self.get("extensions_dirs", []):
            path = Path(entry).expanduser()
            dirs.append(path if path.is_absolute() else self.workspace_path / path)
        return dirs

    def set(self, key: str, value: Any) -> None:
        """Set a dotted key in the user config and save it."""
        parts = key.split(".")
        node = self.user_config
        for part in parts[:-1]:
            node = node.setdefault(part, {})
        node[parts[-1]] = value
        self._save_user_config()

    def _save_user_config(self) -> None:
        """Save user configuration to file."""
        with open(self.config_path, 'w') as f:
            yaml.dump(self.user_config, f, default_flow_style=False)

    def create_default_config(self) -> Path:
        """Create a default .exthostrc file for the user."""
        default_config = {
            "workspace_path": ".",
            "extensions_dirs": ["extensions"],
            "activation_permissions": ["ui.render"],
            "http": {
                "timeout": 30.0
            },
            "log_level": "INFO",
            "settings": {
                "editor": {
                    "tabSize": 4,
                    "formatOnSave": False
                }
            }
        }

        self.config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.config_path, 'w') as f:
            yaml.dump(default_config, f, default_flow_style=False)
        self.user_config = default_config
        return self.config_path
