"""Manages the working directory that repositories are cloned into."""

import shutil
import tempfile
import uuid
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

import structlog

from config_sync_manager.configuration.exceptions import WorkingDirectoryError
from config_sync_manager.utils.constants import CLEANUP_MAX_ATTEMPTS, CLEANUP_RETRY_DELAY, WORKING_DIRECTORY_PREFIX
from config_sync_manager.utils.retry import retry_on_exception

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)


@dataclass
class WorkingDirectory:
    """A resolved working directory and whether it should be removed after the run."""

    path: Path
    ephemeral: bool


def generate_working_directory_path(base: Path | None = None, now: datetime | None = None) -> Path:
    """Generate a unique, timestamped working directory path under the system temp location."""
    base = base if base is not None else Path(tempfile.gettempdir())
    now = now if now is not None else datetime.now()
    # The suffix keeps two runs started within the same second apart.
    return base / f"{WORKING_DIRECTORY_PREFIX}{now:%Y%m%d-%H%M%S}-{uuid.uuid4().hex[:8]}"


def resolve_working_directory(working_dir: Path | None) -> WorkingDirectory:
    """Resolve and create the working directory for a run.

    A caller-supplied path is used verbatim and persists after the run. When no
    path is supplied, a generated path under the system temp location is used
    and marked ephemeral.

    Raises:
        WorkingDirectoryError: If the directory cannot be created.
    """
    if working_dir is None:
        working_directory = WorkingDirectory(path=generate_working_directory_path(), ephemeral=True)
    else:
        working_directory = WorkingDirectory(path=working_dir, ephemeral=False)

    try:
        working_directory.path.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise WorkingDirectoryError(f"Unable to create working directory {working_directory.path}: {exc}") from exc

    logger.info("Using working directory", path=str(working_directory.path), ephemeral=working_directory.ephemeral)
    return working_directory


async def remove_directory(
    path: Path,
    max_attempts: int | None = None,
    delay: float | None = None,
) -> bool:
    """Recursively remove a directory, retrying while files are still locked.

    Returns True when the directory is gone, False when every attempt failed.
    Failures are logged and never raised.
    """
    max_attempts = CLEANUP_MAX_ATTEMPTS if max_attempts is None else max_attempts
    delay = CLEANUP_RETRY_DELAY if delay is None else delay

    @retry_on_exception(max_attempts=max_attempts, initial_delay=delay, exceptions=(OSError,))
    async def _remove() -> None:
        if path.exists():
            shutil.rmtree(path)

    try:
        await _remove()
    except OSError as exc:
        logger.warning("Unable to remove working directory, please remove it manually", path=str(path), error=str(exc))
        return False
    logger.info("Removed working directory", path=str(path))
    return True


async def cleanup_working_directory(working_directory: WorkingDirectory, keep_temp: bool = False) -> bool:
    """Remove an ephemeral working directory unless retention was requested.

    Returns True if the directory was removed.
    """
    if not working_directory.ephemeral:
        logger.debug("Keeping caller-supplied working directory", path=str(working_directory.path))
        return False
    if keep_temp:
        logger.info("Keeping temporary working directory", path=str(working_directory.path))
        return False
    return await remove_directory(working_directory.path)
