"""
Discovers extension directories and imports their Python entry modules.

An extension directory holds an ``extension.json`` manifest and the Python
file named by its ``main`` field. That file exports ``Extension`` (a class
constructed with the extension context) or ``extension`` (a ready object).
"""

import importlib.util
import logging
import sys
from pathlib import Path
from typing import Iterable, List, Tuple, Union

from .errors import ModuleLoadError, ValidationError
from .manifest import MANIFEST_FILENAME, ExtensionManifest, load_manifest
from .module import ExtensionModule, resolve_module

# Extensions shipped with the package
BUILTIN_DIR = Path(__file__).parent / "available"


class ExtensionLoader:
    """Finds and loads extensions from a list of directories."""

    def __init__(self, directories: Iterable[Union[str, Path]] = (), include_builtin: bool = False):
        self.directories: List[Path] = []
        self.logger = logging.getLogger("exthost.loader")
        if include_builtin:
            self.add_directory(BUILTIN_DIR)
        for directory in directories:
            self.add_directory(directory)

    def add_directory(self, path: Union[str, Path]) -> None:
        """Add a directory to search for extensions."""
        path = Path(path).expanduser()
        if path.exists() and path.is_dir():
            if path not in self.directories:
                self.directories.append(path)
                self.logger.info(f"Added extension directory: {path}")
        else:
            self.logger.warning(f"Extension directory not found: {path}")

    def discover(self) -> List[Path]:
        """Extension directories (those holding a manifest), sorted by name."""
        found = []
        for directory in self.directories:
            for candidate in sorted(directory.iterdir()):
                if candidate.is_dir() and (candidate / MANIFEST_FILENAME).exists():
                    found.append(candidate)
        return found

    def discover_manifests(self) -> List[Tuple[Path, ExtensionManifest]]:
        """Valid manifests of every discovered extension; invalid ones are logged."""
        manifests = []
        for path in self.discover():
            try:
                manifests.append((path, load_manifest(path)))
            except ValidationError as e:
                self.logger.error(f"Failed to load extension manifest from {path}: {e}")
        return manifests

    def load_manifest(self, path: Union[str, Path]) -> ExtensionManifest:
        return load_manifest(path)

    def load_module(self, path: Union[str, Path], manifest: ExtensionManifest) -> ExtensionModule:
        """Import the manifest's ``main`` file and resolve its export."""
        root = Path(path).resolve()
        main_file = (root / manifest.main).resolve()
        if root not in main_file.parents:
            raise ModuleLoadError(f"Extension entry point escapes its directory: {manifest.main}")
        if not main_file.exists():
            raise ModuleLoadError(f"Extension entry point not found: {main_file}")
        if main_file.suffix != ".py":
            raise ModuleLoadError(f"Extension entry point must be a Python file: {manifest.main}")

        module_name = f"exthost_ext_{manifest.name.replace('-', '_')}"
        spec = importlib.util.spec_from_file_location(module_name, main_file)
        if not spec or not spec.loader:
            raise ModuleLoadError(f"Cannot import extension entry point: {main_file}")

        module = importlib.util.module_from_spec(spec)
        sys.modules[module_name] = module
        try:
            spec.loader.exec_module(module)
        except Exception as e:
            sys.modules.pop(module_name, None)
            raise ModuleLoadError(f"Failed to import {main_file}: {e}") from e

        self.logger.debug(f"Imported extension module {module_name} from {main_file}")
        return resolve_module(module)

    def load(self, path: Union[str, Path]) -> Tuple[ExtensionManifest, ExtensionModule]:
        """Manifest and resolved module of one extension directory."""
        manifest = self.load_manifest(path)
        return manifest, self.load_module(path, manifest)
