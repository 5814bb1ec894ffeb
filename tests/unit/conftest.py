"""Fixtures for unit tests."""

from pathlib import Path
from typing import Callable, Generator

import pytest
import structlog

from config_sync_manager.git.abc import GitClientBase, GitCommandResult, GitStatus, GitStatusEntry
from config_sync_manager.utils.github import build_clone_url


@pytest.fixture(autouse=True)
def configure_structlog_for_caplog() -> Generator[None, None, None]:
    """Configure structlog for use with caplog."""
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
    yield
    structlog.reset_defaults()


class FakeGitClient(GitClientBase):
    """In-memory git client that materializes "remote" repositories on disk.

    Remotes are keyed by 'owner/repo' and hold the files of their default
    branch. Tracked content is kept per working copy so that status reflects
    whether a copied file differs from what was last cloned or committed.
    """

    def __init__(
        self,
        remotes: dict[str, dict[str, bytes]] | None = None,
        default_branch: str = "main",
        push_returncode: int = 0,
    ) -> None:
        self.remotes = {build_clone_url(repo): files for repo, files in (remotes or {}).items()}
        self.default_branch = default_branch
        self.push_returncode = push_returncode
        self.calls: list[tuple[object, ...]] = []
        self.tracked: dict[Path, dict[str, bytes]] = {}
        self.staged: dict[Path, list[str]] = {}
        self.commits: list[tuple[Path, str]] = []

    async def ensure_available(self) -> None:
        self.calls.append(("ensure_available",))

    async def clone(self, url: str, destination: Path) -> GitCommandResult:
        self.calls.append(("clone", url, destination))
        args = ["git", "clone", url, str(destination)]
        if url not in self.remotes:
            return GitCommandResult(args=args, returncode=128, stderr="fatal: repository not found")
        destination.mkdir(parents=True)
        for relative, content in self.remotes[url].items():
            file_path = destination / relative
            file_path.parent.mkdir(parents=True, exist_ok=True)
            file_path.write_bytes(content)
        self.tracked[destination] = dict(self.remotes[url])
        return GitCommandResult(args=args, returncode=0)

    async def pull(self, repository_path: Path, branch: str) -> GitCommandResult:
        self.calls.append(("pull", repository_path, branch))
        returncode = 0 if branch == self.default_branch else 1
        stderr = "" if returncode == 0 else "fatal: couldn't find remote ref"
        return GitCommandResult(args=["git", "pull", "origin", branch], returncode=returncode, stderr=stderr)

    async def status(self, repository_path: Path, paths: list[str] | None = None) -> GitStatus:
        self.calls.append(("status", repository_path, paths))
        tracked = self.tracked.setdefault(repository_path, {})
        entries: list[GitStatusEntry] = []
        for relative in paths or list(tracked):
            file_path = repository_path / relative
            on_disk = file_path.read_bytes() if file_path.exists() else None
            if on_disk != tracked.get(relative):
                entries.append(GitStatusEntry(code="??" if relative not in tracked else " M", path=relative))
        return GitStatus(entries=entries)

    async def add(self, repository_path: Path, paths: list[str]) -> GitCommandResult:
        self.calls.append(("add", repository_path, paths))
        self.staged.setdefault(repository_path, []).extend(paths)
        return GitCommandResult(args=["git", "add", "--", *paths], returncode=0)

    async def commit(self, repository_path: Path, message: str) -> GitCommandResult:
        self.calls.append(("commit", repository_path, message))
        tracked = self.tracked.setdefault(repository_path, {})
        for relative in self.staged.pop(repository_path, []):
            tracked[relative] = (repository_path / relative).read_bytes()
        self.commits.append((repository_path, message))
        return GitCommandResult(args=["git", "commit", "-m", message], returncode=0)

    async def push(self, repository_path: Path) -> GitCommandResult:
        self.calls.append(("push", repository_path))
        return GitCommandResult(args=["git", "push", "origin", "HEAD"], returncode=self.push_returncode)

    def calls_named(self, name: str) -> list[tuple[object, ...]]:
        """Return the recorded calls of one operation, in order."""
        return [call for call in self.calls if call[0] == name]


@pytest.fixture
def make_git_client() -> Callable[..., FakeGitClient]:
    """Return a factory for in-memory git clients."""
    return FakeGitClient
