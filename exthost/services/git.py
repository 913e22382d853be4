"""
Git operations backing the git facade, run through the git CLI.
"""

import asyncio
import logging
import re
import subprocess
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Union


@dataclass
class GitStatus:
    """Git repository status information."""
    branch: str = ""
    ahead: int = 0
    behind: int = 0
    staged: List[str] = field(default_factory=list)
    modified: List[str] = field(default_factory=list)
    untracked: List[str] = field(default_factory=list)

    @property
    def clean(self) -> bool:
        return not (self.staged or self.modified or self.untracked)


@dataclass
class GitBranch:
    name: str
    current: bool = False


@dataclass
class GitCommit:
    hash: str
    message: str
    author: str
    date: datetime


class GitError(RuntimeError):
    """A git command exited with a non-zero status."""
    pass


_BRANCH_LINE = re.compile(r"^## (?P<branch>\S+?)(?:\.\.\.\S+)?(?: \[(?P<track>[^\]]+)\])?$")


def parse_status(porcelain: str) -> GitStatus:
    """Parse ``git status --porcelain=v1 -b`` output."""
    status = GitStatus()
    for line in porcelain.splitlines():
        if line.startswith("## "):
            match = _BRANCH_LINE.match(line)
            if match:
                status.branch = match.group("branch")
                track = match.group("track") or ""
                ahead = re.search(r"ahead (\d+)", track)
                behind = re.search(r"behind (\d+)", track)
                status.ahead = int(ahead.group(1)) if ahead else 0
                status.behind = int(behind.group(1)) if behind else 0
            continue

        if len(line) < 4:
            continue
        index, worktree, path = line[0], line[1], line[3:]
        if index == "?" and worktree == "?":
            status.untracked.append(path)
            continue
        if index not in (" ", "?"):
            status.staged.append(path)
        if worktree not in (" ", "?"):
            status.modified.append(path)
    return status


class GitService:
    """Async wrapper over the git executable for one repository."""

    def __init__(self, repo_path: Union[str, Path] = "."):
        self.repo_path = Path(repo_path).resolve()
        self.logger = logging.getLogger("exthost.services.git")

    async def _run_command(self, cmd: List[str]) -> subprocess.CompletedProcess:
        process = await asyncio.create_subprocess_exec(
            *cmd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            cwd=str(self.repo_path),
        )
        stdout, stderr = await process.communicate()

        return subprocess.CompletedProcess(
            args=cmd,
            returncode=process.returncode,
            stdout=stdout.decode("utf-8", errors="replace"),
            stderr=stderr.decode("utf-8", errors="replace"),
        )

    async def _run_git_command(self, args: List[str]) -> str:
        """Run a git command, raising GitError on failure."""
        result = await self._run_command(["git"] + args)
        if result.returncode != 0:
            raise GitError(f"git {' '.join(args)} failed: {result.stderr.strip()}")
        return result.stdout

    async def get_status(self) -> GitStatus:
        return parse_status(await self._run_git_command(["status", "--porcelain=v1", "-b"]))

    async def get_branches(self) -> List[GitBranch]:
        output = await self._run_git_command(["branch", "--list"])
        branches = []
        for line in output.splitlines():
            if not line.strip():
                continue
            branches.append(GitBranch(name=line[2:].strip(), current=line.startswith("*")))
        return branches

    async def create_branch(self, name: str) -> None:
        await self._run_git_command(["checkout", "-b", name])
        self.logger.info(f"Created and switched to branch: {name}")

    async def switch_branch(self, name: str) -> None:
        await self._run_git_command(["checkout", name])

    async def commit(self, message: str) -> None:
        await self._run_git_command(["commit", "-m", message])

    async def push(self, remote: Optional[str] = None, branch: Optional[str] = None) -> None:
        await self._run_git_command(["push"] + [a for a in (remote, branch) if a])

    async def pull(self, remote: Optional[str] = None, branch: Optional[str] = None) -> None:
        await self._run_git_command(["pull"] + [a for a in (remote, branch) if a])

    async def get_commits(self, count: int = 20) -> List[GitCommit]:
        output = await self._run_git_command(
            ["log", f"-n{count}", "--pretty=format:%H%x1f%s%x1f%an%x1f%aI"]
        )
        commits = []
        for line in output.splitlines():
            parts = line.split("\x1f")
            if len(parts) != 4:
                continue
            commits.append(GitCommit(
                hash=parts[0],
                message=parts[1],
                author=parts[2],
                date=datetime.fromisoformat(parts[3]),
            ))
        return commits

    async def get_diff(self, file: Optional[str] = None) -> str:
        args = ["diff"]
        if file:
            args += ["--", file]
        return await self._run_git_command(args)
