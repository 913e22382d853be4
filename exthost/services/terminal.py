"""
Command execution backing the terminal facade.
"""

import asyncio
import logging
import time
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

from ..extensions.errors import NotFoundError


@dataclass
class TerminalResult:
    output: str
    exit_code: int
    duration: float  # milliseconds
    session_id: Optional[str] = None
    error_output: str = ""


@dataclass
class TerminalHistoryEntry:
    command: str
    exit_code: Optional[int]
    cwd: str
    timestamp: datetime = field(default_factory=datetime.now)
    duration: float = 0.0


@dataclass
class TerminalOutputEvent:
    session_id: str
    data: str
    stream: str = "stdout"


class TerminalService:
    """Runs shell commands inside the workspace and keeps a history."""

    def __init__(self, cwd: Union[str, Path] = ".", events=None, timeout: float = 120.0,
                 max_history: int = 500):
        self.cwd = Path(cwd).resolve()
        self.events = events
        self.timeout = timeout
        self.max_history = max_history
        self.history: List[TerminalHistoryEntry] = []
        self.sessions: Dict[str, asyncio.subprocess.Process] = {}
        self.sizes: Dict[str, Tuple[int, int]] = {}
        self.logger = logging.getLogger("exthost.services.terminal")

    def _resolve_cwd(self, cwd: Optional[str]) -> Path:
        if not cwd:
            return self.cwd
        candidate = (self.cwd / cwd).resolve()
        if candidate != self.cwd and self.cwd not in candidate.parents:
            raise ValueError(f"Working directory escapes workspace: {cwd}")
        return candidate

    async def execute(self, command: str, cwd: Optional[str] = None,
                      timeout: Optional[float] = None) -> TerminalResult:
        workdir = self._resolve_cwd(cwd)
        session_id = uuid.uuid4().hex[:12]
        started = time.perf_counter()

        process = await asyncio.create_subprocess_shell(
            command,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            cwd=str(workdir),
        )
        self.sessions[session_id] = process

        try:
            stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=timeout or self.timeout)
        except asyncio.TimeoutError:
            process.kill()
            stdout, stderr = await process.communicate()
            self.logger.warning(f"Command timed out: {command}")
        finally:
            self.sessions.pop(session_id, None)
            self.sizes.pop(session_id, None)

        duration = (time.perf_counter() - started) * 1000
        output = stdout.decode("utf-8", errors="replace")
        error_output = stderr.decode("utf-8", errors="replace")

        if output:
            self._emit("terminal:output", TerminalOutputEvent(session_id, output, "stdout"))
        if error_output:
            self._emit("terminal:output", TerminalOutputEvent(session_id, error_output, "stderr"))

        exit_code = process.returncode if process.returncode is not None else -1
        self._record(TerminalHistoryEntry(command, exit_code, str(workdir), duration=duration))
        self.logger.info(f"Executed command: {command} (exit {exit_code})")

        return TerminalResult(
            output=output,
            exit_code=exit_code,
            duration=duration,
            session_id=session_id,
            error_output=error_output,
        )

    def get_history(self) -> List[TerminalHistoryEntry]:
        return list(self.history)

    async def clear(self) -> None:
        self.history.clear()
        self._emit("terminal:clear")

    async def kill(self, session_id: str) -> None:
        process = self.sessions.get(session_id)
        if process is None:
            raise NotFoundError(f"Terminal session not found: {session_id}")
        if process.returncode is None:
            process.terminate()

    async def resize(self, session_id: str, cols: int, rows: int) -> None:
        if session_id not in self.sessions:
            raise NotFoundError(f"Terminal session not found: {session_id}")
        self.sizes[session_id] = (cols, rows)
        self._emit("terminal:resized", session_id, cols, rows)

    def _record(self, entry: TerminalHistoryEntry) -> None:
        self.history.append(entry)
        if len(self.history) > self.max_history:
            del self.history[: len(self.history) - self.max_history]

    def _emit(self, event: str, *args) -> None:
        if self.events is not None:
            self.events.emit(event, *args)
