"""
Command execution for extensions.
"""

from typing import Any, Callable, List, Optional

from ...services.terminal import TerminalHistoryEntry, TerminalResult
from ..permissions import Permission
from .base import Disposable, Facade


class TerminalAPI(Facade):

    @property
    def _terminal(self):
        return self._services.terminal

    async def execute(self, command: str, cwd: Optional[str] = None,
                      timeout: Optional[float] = None) -> TerminalResult:
        self._require(Permission.TERMINAL_EXECUTE)
        self._host.logger.info(f"Extension {self.extension_name} executing: {command}")
        return await self._terminal.execute(command, cwd=cwd, timeout=timeout)

    def get_history(self) -> List[TerminalHistoryEntry]:
        self._require(Permission.TERMINAL_READ)
        return self._terminal.get_history()

    async def clear(self) -> None:
        self._require(Permission.TERMINAL_EXECUTE)
        await self._terminal.clear()

    async def kill(self, session_id: str) -> None:
        self._require(Permission.TERMINAL_EXECUTE)
        await self._terminal.kill(session_id)

    async def resize(self, session_id: str, cols: int, rows: int) -> None:
        self._require(Permission.TERMINAL_EXECUTE)
        await self._terminal.resize(session_id, cols, rows)

    def on_output(self, callback: Callable[..., Any]) -> Disposable:
        self._require(Permission.TERMINAL_READ)
        return self._subscribe("terminal:output", callback)
