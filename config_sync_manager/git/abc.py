"""Base ABC for git clients."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path


@dataclass
class GitCommandResult:
    """Outcome of a single git invocation."""

    args: list[str]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        """Whether the command exited successfully."""
        return self.returncode == 0


@dataclass
class GitStatusEntry:
    """A single path reported by ``git status --porcelain``."""

    code: str
    path: str


@dataclass
class GitStatus:
    """Pending changes in a working copy."""

    entries: list[GitStatusEntry] = field(default_factory=list)

    @property
    def is_clean(self) -> bool:
        """Whether the working copy has no pending changes."""
        return not self.entries


class GitClientBase(ABC):
    """Base ABC for git clients.

    Every operation takes the repository path explicitly; implementations must
    never depend on the process working directory.
    """

    @abstractmethod
    async def ensure_available(self) -> None:
        """Ensure the git client can be used, raising GitClientNotFoundError otherwise."""
        pass

    # Working copy lifecycle
    @abstractmethod
    async def clone(self, url: str, destination: Path) -> GitCommandResult:
        """Clone a repository into destination."""
        pass

    @abstractmethod
    async def pull(self, repository_path: Path, branch: str) -> GitCommandResult:
        """Pull a branch from origin into the working copy."""
        pass

    # Changes
    @abstractmethod
    async def status(self, repository_path: Path, paths: list[str] | None = None) -> GitStatus:
        """Return pending changes, optionally restricted to paths."""
        pass

    @abstractmethod
    async def add(self, repository_path: Path, paths: list[str]) -> GitCommandResult:
        """Stage paths."""
        pass

    @abstractmethod
    async def commit(self, repository_path: Path, message: str) -> GitCommandResult:
        """Commit staged changes."""
        pass

    @abstractmethod
    async def push(self, repository_path: Path) -> GitCommandResult:
        """Push the current branch to origin."""
        pass
