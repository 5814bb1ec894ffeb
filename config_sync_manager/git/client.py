"""Git client that drives the git command line tool."""

import asyncio
import shutil
from pathlib import Path

import structlog

from config_sync_manager.configuration.exceptions import GitClientNotFoundError, GitCommandError
from config_sync_manager.git.abc import GitClientBase, GitCommandResult, GitStatus, GitStatusEntry

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)


def parse_porcelain_status(output: str) -> GitStatus:
    """Parse the output of ``git status --porcelain`` (v1)."""
    entries: list[GitStatusEntry] = []
    for line in output.splitlines():
        if not line.strip():
            continue
        # Each line is "XY <path>"; renames are reported as "XY <old> -> <new>".
        code, path = line[:2], line[3:]
        if " -> " in path:
            path = path.split(" -> ", 1)[1]
        entries.append(GitStatusEntry(code=code, path=path.strip('"')))
    return GitStatus(entries=entries)


class GitCLIClient(GitClientBase):
    """Runs git as a subprocess, one command at a time."""

    def __init__(self, executable: str = "git") -> None:
        """Initialize the client with the name or path of the git executable."""
        self.executable = executable

    async def ensure_available(self) -> None:
        """Ensure git is reachable on the PATH."""
        resolved = shutil.which(self.executable)
        if resolved is None:
            raise GitClientNotFoundError(f"git executable '{self.executable}' was not found on the PATH. Please install git and try again.")
        logger.debug("Found git executable", path=resolved)

    async def run(self, args: list[str], cwd: Path | None = None, check: bool = False) -> GitCommandResult:
        """Run a git command and capture its output.

        Args:
            args: Arguments passed to git (without the executable itself).
            cwd: Directory the command runs in. The process working directory is never changed.
            check: Raise GitCommandError on a non-zero exit code.
        """
        command = [self.executable, *args]
        logger.debug("Running git command", command=" ".join(command), cwd=str(cwd) if cwd else None)
        process = await asyncio.create_subprocess_exec(
            *command,
            cwd=str(cwd) if cwd is not None else None,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
        stdout, stderr = await process.communicate()
        result = GitCommandResult(
            args=command,
            returncode=process.returncode if process.returncode is not None else -1,
            stdout=stdout.decode("utf-8", errors="replace"),
            stderr=stderr.decode("utf-8", errors="replace"),
        )
        if not result.ok:
            logger.debug("git command failed", command=" ".join(command), returncode=result.returncode, stderr=result.stderr.strip())
            if check:
                raise GitCommandError(command, result.returncode, result.stderr)
        return result

    async def clone(self, url: str, destination: Path) -> GitCommandResult:
        """Clone a repository into destination."""
        return await self.run(["clone", url, str(destination)], cwd=destination.parent)

    async def pull(self, repository_path: Path, branch: str) -> GitCommandResult:
        """Pull a branch from origin into the working copy."""
        return await self.run(["pull", "origin", branch], cwd=repository_path)

    async def status(self, repository_path: Path, paths: list[str] | None = None) -> GitStatus:
        """Return pending changes, optionally restricted to paths."""
        args = ["status", "--porcelain"]
        if paths:
            args += ["--", *paths]
        result = await self.run(args, cwd=repository_path, check=True)
        return parse_porcelain_status(result.stdout)

    async def add(self, repository_path: Path, paths: list[str]) -> GitCommandResult:
        """Stage paths."""
        return await self.run(["add", "--", *paths], cwd=repository_path, check=True)

    async def commit(self, repository_path: Path, message: str) -> GitCommandResult:
        """Commit staged changes."""
        return await self.run(["commit", "-m", message], cwd=repository_path, check=True)

    async def push(self, repository_path: Path) -> GitCommandResult:
        """Push the current branch to origin."""
        return await self.run(["push", "origin", "HEAD"], cwd=repository_path)


async def pull_with_fallback(client: GitClientBase, repository_path: Path, branches: tuple[str, ...]) -> str | None:
    """Pull the first branch in branches that can be pulled.

    Returns the branch that was pulled, or None if every branch failed. A
    failure is logged but never raised; the existing working copy is then used
    as-is.
    """
    for branch in branches:
        result = await client.pull(repository_path, branch)
        if result.ok:
            logger.info("Updated working copy", path=str(repository_path), branch=branch)
            return branch
        logger.info("Unable to pull branch", path=str(repository_path), branch=branch, stderr=result.stderr.strip())
    logger.warning("Unable to update working copy, using it as-is", path=str(repository_path), branches=list(branches))
    return None
