"""Pytest configuration for integration tests.

Integration tests drive the real git executable against bare repositories
created under a temporary directory and served through a file:// base URL, so
no network access or credentials are needed.
"""

import shutil
import subprocess
from pathlib import Path
from typing import Callable

import pytest

GIT = shutil.which("git")


def run_git(*args: str, cwd: Path | None = None) -> str:
    """Run a git command for test setup and return its stdout."""
    assert GIT is not None
    result = subprocess.run([GIT, *args], cwd=cwd, capture_output=True, text=True, check=True)
    return result.stdout


@pytest.fixture(autouse=True)
def isolated_git_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Skip without git, and isolate git from the user's configuration."""
    if GIT is None:
        pytest.skip("git executable not available")
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.setenv("GIT_TERMINAL_PROMPT", "0")
    monkeypatch.setenv("GIT_AUTHOR_NAME", "Config Sync Tests")
    monkeypatch.setenv("GIT_AUTHOR_EMAIL", "config-sync-tests@example.com")
    monkeypatch.setenv("GIT_COMMITTER_NAME", "Config Sync Tests")
    monkeypatch.setenv("GIT_COMMITTER_EMAIL", "config-sync-tests@example.com")


@pytest.fixture
def remote_root(tmp_path: Path) -> Path:
    """Directory holding bare repositories laid out as <owner>/<repo>.git."""
    path = tmp_path / "remotes"
    path.mkdir()
    return path


@pytest.fixture
def github_url(remote_root: Path) -> str:
    """Base URL that resolves repository references to the bare repositories."""
    return remote_root.as_uri()


@pytest.fixture
def create_remote(tmp_path: Path, remote_root: Path) -> Callable[..., Path]:
    """Return a function that creates a bare repository with one commit on the given branch."""

    def create(repo: str, files: dict[str, bytes], branch: str = "main") -> Path:
        seed = tmp_path / "seed" / repo
        seed.mkdir(parents=True)
        run_git("init", "--quiet", str(seed))
        run_git("symbolic-ref", "HEAD", f"refs/heads/{branch}", cwd=seed)
        for relative, content in files.items():
            file_path = seed / relative
            file_path.parent.mkdir(parents=True, exist_ok=True)
            file_path.write_bytes(content)
        run_git("add", "--all", cwd=seed)
        run_git("commit", "--quiet", "-m", "Initial commit", cwd=seed)

        bare = remote_root / f"{repo}.git"
        bare.parent.mkdir(parents=True, exist_ok=True)
        run_git("clone", "--quiet", "--bare", str(seed), str(bare))
        return bare

    return create


@pytest.fixture
def read_remote_file() -> Callable[[Path, str, str], bytes]:
    """Return a function that reads a file from a branch of a bare repository."""

    def read(bare: Path, branch: str, relative: str) -> bytes:
        assert GIT is not None
        result = subprocess.run([GIT, "--git-dir", str(bare), "show", f"{branch}:{relative}"], capture_output=True, check=True)
        return result.stdout

    return read


@pytest.fixture
def commit_count() -> Callable[[Path, str], int]:
    """Return a function that counts the commits on a branch of a bare repository."""

    def count(bare: Path, branch: str) -> int:
        return int(run_git("--git-dir", str(bare), "rev-list", "--count", branch).strip())

    return count
