"""
Workspace file access for extensions.
"""

import asyncio
import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, List, Optional

from ...services.filesystem import WorkspaceItem
from ..permissions import Permission
from .base import Disposable, Facade


@dataclass
class SearchOptions:
    include: Optional[str] = None
    exclude: List[str] = field(default_factory=list)
    max_results: int = 100
    case_sensitive: bool = False
    regex: bool = False


@dataclass
class SearchResult:
    path: str
    line: int
    column: int
    match: str
    preview: str


@dataclass
class FileChangeEvent:
    type: str  # "created", "changed" or "deleted"
    path: str
    content: Optional[str] = None
    timestamp: datetime = field(default_factory=datetime.now)


FILE_EVENTS = ("workspace:file:created", "workspace:file:changed", "workspace:file:deleted")


class WorkspaceAPI(Facade):
    """Read, write and search files below the workspace root."""

    @property
    def _fs(self):
        return self._services.filesystem

    async def read_file(self, path: str) -> str:
        self._require(Permission.WORKSPACE_READ)
        return await self._fs.read_text(path)

    async def write_file(self, path: str, content: str) -> None:
        self._require(Permission.WORKSPACE_WRITE)
        existed = await asyncio.to_thread(self._fs.resolve(path).exists)
        await self._fs.write_text(path, content)
        change = "changed" if existed else "created"
        self._events.emit(f"workspace:file:{change}", FileChangeEvent(change, path, content))

    async def delete(self, path: str) -> None:
        self._require(Permission.WORKSPACE_FILESYSTEM)
        await self._fs.delete(path)
        self._events.emit("workspace:file:deleted", FileChangeEvent("deleted", path))

    async def create_directory(self, path: str) -> None:
        self._require(Permission.WORKSPACE_FILESYSTEM)
        await self._fs.mkdir(path)

    async def list_directory(self, path: str = ".") -> List[WorkspaceItem]:
        self._require(Permission.WORKSPACE_READ)
        return await self._fs.list_dir(path)

    async def get_info(self, path: str) -> WorkspaceItem:
        self._require(Permission.WORKSPACE_READ)
        return await self._fs.stat(path)

    async def search(self, query: str, options: Optional[SearchOptions] = None) -> List[SearchResult]:
        """Line-by-line text search across workspace files."""
        self._require(Permission.WORKSPACE_READ)
        options = options or SearchOptions()

        flags = 0 if options.case_sensitive else re.IGNORECASE
        pattern = re.compile(query if options.regex else re.escape(query), flags)
        exclude = tuple(options.exclude) + (".git", "node_modules", "__pycache__")
        files = await self._fs.walk_files(".", include=options.include, exclude_dirs=exclude)

        results: List[SearchResult] = []
        for path in files:
            try:
                text = await self._fs.read_text(path)
            except (UnicodeDecodeError, OSError):
                continue
            for number, line in enumerate(text.splitlines(), 1):
                for match in pattern.finditer(line):
                    results.append(SearchResult(
                        path=path,
                        line=number,
                        column=match.start() + 1,
                        match=match.group(0),
                        preview=line.strip(),
                    ))
                    if len(results) >= options.max_results:
                        return results
        return results

    def watch(self, paths: List[str], callback: Callable[[FileChangeEvent], None]) -> Disposable:
        """Call ``callback`` for file events at or below any of ``paths``."""
        self._require(Permission.WORKSPACE_READ)
        prefixes = [p.strip("/") for p in paths]

        def _matches(change: FileChangeEvent) -> bool:
            target = change.path.strip("/")
            return any(
                prefix in ("", ".") or target == prefix or target.startswith(prefix + "/")
                for prefix in prefixes
            )

        def _listener(change: FileChangeEvent):
            if _matches(change):
                return callback(change)

        subscriptions = [self._events.on(event, _listener) for event in FILE_EVENTS]
        return self._track(*(s.dispose for s in subscriptions))
