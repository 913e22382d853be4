"""
Git repository access for extensions.
"""

from typing import List, Optional

from ...services.git import GitBranch, GitCommit, GitStatus
from ..permissions import Permission
from .base import Facade


class GitAPI(Facade):

    @property
    def _git(self):
        return self._services.git

    async def get_status(self) -> GitStatus:
        self._require(Permission.GIT_READ)
        return await self._git.get_status()

    async def get_branches(self) -> List[GitBranch]:
        self._require(Permission.GIT_READ)
        return await self._git.get_branches()

    async def get_commits(self, count: int = 20) -> List[GitCommit]:
        self._require(Permission.GIT_READ)
        return await self._git.get_commits(count)

    async def get_diff(self, file: Optional[str] = None) -> str:
        self._require(Permission.GIT_READ)
        return await self._git.get_diff(file)

    async def create_branch(self, name: str) -> None:
        self._require(Permission.GIT_WRITE)
        await self._git.create_branch(name)

    async def switch_branch(self, name: str) -> None:
        self._require(Permission.GIT_WRITE)
        await self._git.switch_branch(name)

    async def commit(self, message: str) -> None:
        self._require(Permission.GIT_WRITE)
        await self._git.commit(message)

    async def push(self, remote: Optional[str] = None, branch: Optional[str] = None) -> None:
        self._require(Permission.GIT_WRITE)
        await self._git.push(remote, branch)

    async def pull(self, remote: Optional[str] = None, branch: Optional[str] = None) -> None:
        self._require(Permission.GIT_WRITE)
        await self._git.pull(remote, branch)
