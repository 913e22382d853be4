"""
Workspace-rooted filesystem used by the workspace facade.
"""

import asyncio
import fnmatch
import logging
import shutil
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Union

from ..extensions.errors import WorkspacePathError


@dataclass
class WorkspaceItem:
    """File or directory inside the workspace, with a workspace-relative path."""
    path: str
    name: str
    type: str  # "file" or "directory"
    size: Optional[int] = None
    modified: Optional[datetime] = None

    def is_file(self) -> bool:
        return self.type == "file"

    def is_directory(self) -> bool:
        return self.type == "directory"


class ScopedFileSystem:
    """
    Read/write/delete/list/stat operations confined to one root directory.

    Every path is interpreted relative to the root and rejected with
    ``WorkspacePathError`` if it resolves outside of it.
    """

    def __init__(self, root: Union[str, Path]):
        self.root = Path(root).resolve()
        self.logger = logging.getLogger("exthost.services.filesystem")

    def resolve(self, path: Union[str, Path]) -> Path:
        """Map a workspace-relative path to an absolute one inside the root."""
        candidate = Path(path)
        if candidate.is_absolute():
            candidate = Path(*candidate.parts[1:])
        full = (self.root / candidate).resolve()
        if full != self.root and self.root not in full.parents:
            raise WorkspacePathError(f"Path escapes workspace: {path}")
        return full

    def relative(self, full: Path) -> str:
        return full.relative_to(self.root).as_posix() or "."

    async def read_text(self, path: Union[str, Path]) -> str:
        full = self.resolve(path)
        return await asyncio.to_thread(full.read_text, encoding="utf-8")

    async def write_text(self, path: Union[str, Path], content: str) -> None:
        full = self.resolve(path)

        def _write():
            full.parent.mkdir(parents=True, exist_ok=True)
            full.write_text(content, encoding="utf-8")

        await asyncio.to_thread(_write)
        self.logger.debug(f"Wrote {len(content)} chars to {path}")

    async def delete(self, path: Union[str, Path]) -> None:
        full = self.resolve(path)
        if full == self.root:
            raise WorkspacePathError("Refusing to delete the workspace root")

        def _delete():
            if full.is_dir() and not full.is_symlink():
                shutil.rmtree(full)
            else:
                full.unlink()

        await asyncio.to_thread(_delete)

    async def mkdir(self, path: Union[str, Path]) -> None:
        full = self.resolve(path)
        await asyncio.to_thread(full.mkdir, parents=True, exist_ok=True)

    async def list_dir(self, path: Union[str, Path] = ".") -> List[WorkspaceItem]:
        full = self.resolve(path)

        def _list():
            return [self._describe(entry) for entry in sorted(full.iterdir())]

        return await asyncio.to_thread(_list)

    async def stat(self, path: Union[str, Path]) -> WorkspaceItem:
        full = self.resolve(path)
        return await asyncio.to_thread(self._describe, full)

    async def walk_files(self, path: Union[str, Path] = ".", include: Optional[str] = None,
                         exclude_dirs: tuple = (".git", "node_modules", "__pycache__")) -> List[str]:
        """Workspace-relative paths of every file below ``path``."""
        start = self.resolve(path)

        def _walk():
            found = []
            for candidate in sorted(start.rglob("*")):
                if any(part in exclude_dirs for part in candidate.relative_to(self.root).parts):
                    continue
                if not candidate.is_file():
                    continue
                rel = self.relative(candidate)
                if include and not (fnmatch.fnmatch(rel, include) or fnmatch.fnmatch(candidate.name, include)):
                    continue
                found.append(rel)
            return found

        return await asyncio.to_thread(_walk)

    def _describe(self, full: Path) -> WorkspaceItem:
        stats = full.stat()
        return WorkspaceItem(
            path=self.relative(full),
            name=full.name,
            type="directory" if full.is_dir() else "file",
            size=stats.st_size,
            modified=datetime.fromtimestamp(stats.st_mtime),
        )
