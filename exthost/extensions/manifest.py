"""
Extension manifest model and validation.
"""

import json
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

from .errors import ValidationError
from .permissions import Permission

logger = logging.getLogger("exthost.manifest")

NAME_PATTERN = re.compile(r"[a-z0-9-]+")
VERSION_PATTERN = re.compile(r"\d+\.\d+\.\d+", re.ASCII)

MANIFEST_FILENAME = "extension.json"

KNOWN_CATEGORIES = frozenset({
    "productivity",
    "themes",
    "language-support",
    "debugging",
    "git",
    "ai-tools",
    "integration",
    "utility",
    "snippets",
    "other",
})

# JSON manifest key -> dataclass field
_KEY_ALIASES = {
    "displayName": "display_name",
    "defaultConfig": "default_config",
    "configSchema": "config_schema",
}


def _freeze(value: Any) -> Any:
    if isinstance(value, list):
        return tuple(value)
    if isinstance(value, set):
        return frozenset(value)
    return value


@dataclass(frozen=True)
class ExtensionManifest:
    """Static description of an extension's identity and requested capabilities."""
    name: Optional[str] = None
    display_name: Optional[str] = None
    version: Optional[str] = None
    main: Optional[str] = None
    permissions: Any = ()
    categories: Any = ()
    description: str = ""
    author: Optional[Dict[str, Any]] = None
    default_config: Dict[str, Any] = field(default_factory=dict)
    config_schema: Optional[Dict[str, Any]] = None
    dependencies: Dict[str, str] = field(default_factory=dict)
    keywords: Any = ()
    homepage: Optional[str] = None
    repository: Optional[str] = None
    license: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ExtensionManifest":
        """Create a manifest from a JSON-style dictionary.

        Values are not coerced, so a malformed manifest still reaches
        ``validate_manifest`` in its malformed shape.
        """
        known = set(cls.__dataclass_fields__)
        kwargs = {}
        for key, value in data.items():
            attr = _KEY_ALIASES.get(key, key)
            if attr not in known:
                logger.debug(f"Ignoring unknown manifest key: {key}")
                continue
            if attr in ("permissions", "categories", "keywords"):
                value = _freeze(value)
            kwargs[attr] = value

        if kwargs.get("default_config") is None:
            kwargs["default_config"] = {}
        if kwargs.get("dependencies") is None:
            kwargs["dependencies"] = {}
        return cls(**kwargs)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the JSON manifest layout."""
        return {
            "name": self.name,
            "displayName": self.display_name,
            "version": self.version,
            "main": self.main,
            "permissions": sorted(self.permissions) if _is_collection(self.permissions) else self.permissions,
            "categories": list(self.categories) if _is_collection(self.categories) else self.categories,
            "description": self.description,
            "author": self.author,
            "defaultConfig": dict(self.default_config),
            "configSchema": self.config_schema,
            "dependencies": dict(self.dependencies),
            "keywords": list(self.keywords),
            "homepage": self.homepage,
            "repository": self.repository,
            "license": self.license,
        }

    def requires_permission(self, permission: Union[Permission, str]) -> bool:
        """Check if the manifest requests a specific capability."""
        token = permission.value if isinstance(permission, Permission) else permission
        return token in self.permissions


def _is_collection(value: Any) -> bool:
    return isinstance(value, (list, tuple, set, frozenset))


def validate_manifest(manifest: ExtensionManifest) -> None:
    """
    Validate an extension manifest.

    Raises:
        ValidationError: If any required field is missing or malformed
    """
    if not manifest.name or not isinstance(manifest.name, str) or not NAME_PATTERN.fullmatch(manifest.name):
        raise ValidationError(
            "Extension name must be kebab-case (lowercase letters, numbers, hyphens)"
        )

    if not manifest.display_name:
        raise ValidationError("Extension must have a display name")

    if (not manifest.version or not isinstance(manifest.version, str)
            or not VERSION_PATTERN.match(manifest.version)):
        raise ValidationError("Extension must have a valid semantic version (e.g., 1.0.0)")

    if not manifest.main:
        raise ValidationError("Extension must specify main entry point")

    if not _is_collection(manifest.permissions):
        raise ValidationError("Extension permissions must be an array")

    if not all(isinstance(token, str) for token in manifest.permissions):
        raise ValidationError("Extension permissions must be strings")

    if not _is_collection(manifest.categories) or len(manifest.categories) == 0:
        raise ValidationError("Extension must specify at least one category")

    if not isinstance(manifest.default_config, Mapping):
        raise ValidationError("Extension defaultConfig must be an object")

    for token in manifest.permissions:
        if not Permission.is_known(token):
            logger.warning(f"Unknown permission in {manifest.name}: {token}")

    for category in manifest.categories:
        if category not in KNOWN_CATEGORIES:
            logger.debug(f"Unrecognised category in {manifest.name}: {category}")


def coerce_manifest(manifest: Union[ExtensionManifest, Mapping[str, Any], str]) -> ExtensionManifest:
    """Accept a manifest object, a dictionary, or a JSON string."""
    if isinstance(manifest, ExtensionManifest):
        return manifest
    if isinstance(manifest, str):
        try:
            manifest = json.loads(manifest)
        except json.JSONDecodeError as e:
            raise ValidationError(f"Invalid extension manifest JSON: {e}") from e
    if not isinstance(manifest, Mapping):
        raise ValidationError(f"Extension manifest must be an object, got {type(manifest).__name__}")
    return ExtensionManifest.from_dict(manifest)


def load_manifest(path: Union[str, Path]) -> ExtensionManifest:
    """Load and validate a manifest from an extension directory or file."""
    path = Path(path)
    if path.is_dir():
        path = path / MANIFEST_FILENAME

    if not path.exists():
        raise ValidationError(f"Manifest not found: {path}")

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ValidationError(f"Invalid JSON in {path.name}: {e}") from e

    manifest = coerce_manifest(data)
    validate_manifest(manifest)
    return manifest
