"""Per-repository synchronization of a distributed configuration file."""

import shutil
from pathlib import Path

import structlog

from config_sync_manager.configuration.exceptions import GitCommandError, InvalidRepositoryReferenceError, PushConfirmationAbortedError
from config_sync_manager.git.abc import GitClientBase
from config_sync_manager.git.client import pull_with_fallback
from config_sync_manager.synchronize.confirmation import PushConfirmation
from config_sync_manager.synchronize.models import SyncOutcome
from config_sync_manager.synchronize.results import RepositorySyncResult
from config_sync_manager.utils.constants import COMMIT_MESSAGE_TEMPLATE, DEFAULT_GITHUB_URL, FALLBACK_BRANCHES, WORKFLOWS_DIRECTORY
from config_sync_manager.utils.github import build_clone_url, repository_directory_name

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)


async def ensure_working_copy(
    client: GitClientBase,
    repo: str,
    working_dir: Path,
    github_url: str = DEFAULT_GITHUB_URL,
    branches: tuple[str, ...] = FALLBACK_BRANCHES,
) -> Path:
    """Clone a repository into the working directory, or update it if it is already there.

    An existing working copy is updated by pulling each of ``branches`` in turn
    until one succeeds. If none succeeds the existing copy is used as-is.

    Raises:
        InvalidRepositoryReferenceError: If repo is not in the format 'owner/repo'.
        GitCommandError: If the repository had to be cloned and cloning failed.
    """
    repository_path = working_dir / repository_directory_name(repo)
    if repository_path.exists():
        logger.info("Updating existing working copy", repo=repo, path=str(repository_path))
        await pull_with_fallback(client, repository_path, branches)
        return repository_path

    url = build_clone_url(repo, github_url)
    logger.info("Cloning repository", repo=repo, url=url, path=str(repository_path))
    result = await client.clone(url, repository_path)
    if not result.ok:
        raise GitCommandError(result.args, result.returncode, result.stderr)
    return repository_path


def destination_path_for(config_file: str) -> str:
    """Return the repository-relative path a configuration file is copied to."""
    return f"{WORKFLOWS_DIRECTORY}/{Path(config_file).name}"


def copy_config_file(source_file: Path, repository_path: Path, relative_destination: str) -> Path:
    """Copy source_file into a working copy, creating parent directories and overwriting any existing file."""
    destination = repository_path / relative_destination
    destination.parent.mkdir(parents=True, exist_ok=True)
    shutil.copyfile(source_file, destination)
    logger.debug("Copied configuration file", source=str(source_file), destination=str(destination))
    return destination


async def commit_and_push(
    client: GitClientBase,
    repo: str,
    repository_path: Path,
    relative_destination: str,
    commit_message: str,
    confirm_push: PushConfirmation,
) -> RepositorySyncResult:
    """Stage exactly one path, commit it, and push it if confirm_push approves.

    Errors while staging or committing propagate. Once the commit exists, errors
    are recorded in the returned result instead, except for an aborted push
    confirmation, which ends the run.
    """
    await client.add(repository_path, [relative_destination])
    await client.commit(repository_path, commit_message)
    logger.info("Committed configuration file", repo=repo, path=relative_destination, message=commit_message)

    try:
        approved = confirm_push(repo, commit_message)
    except PushConfirmationAbortedError:
        raise
    except Exception as exc:
        logger.error(
            "Unable to confirm push, commit kept in local working copy",
            repo=repo,
            path=str(repository_path),
            error=str(exc),
            error_type=type(exc).__name__,
        )
        return RepositorySyncResult(repo, SyncOutcome.COMMITTED_NOT_PUSHED, path=repository_path, error=str(exc) or type(exc).__name__)

    if not approved:
        logger.info("Push skipped, commit kept in local working copy", repo=repo, path=str(repository_path))
        return RepositorySyncResult(repo, SyncOutcome.COMMITTED_NOT_PUSHED, path=repository_path)

    try:
        result = await client.push(repository_path)
    except Exception as exc:
        logger.warning(
            "Push failed, commit kept in local working copy - please check manually",
            repo=repo,
            path=str(repository_path),
            error=str(exc),
            error_type=type(exc).__name__,
        )
        return RepositorySyncResult(repo, SyncOutcome.PUSH_FAILED, path=repository_path, error=str(exc) or type(exc).__name__)

    if not result.ok:
        logger.warning(
            "Push failed, commit kept in local working copy - please check manually",
            repo=repo,
            path=str(repository_path),
            returncode=result.returncode,
            stderr=result.stderr.strip(),
        )
        return RepositorySyncResult(repo, SyncOutcome.PUSH_FAILED, path=repository_path)

    logger.info("Pushed configuration file", repo=repo)
    return RepositorySyncResult(repo, SyncOutcome.PUSHED, path=repository_path)


def claim_working_copy(repo: str, claimed: dict[str, str]) -> str | None:
    """Reserve the working copy directory of repo for this run.

    Working copies are named after the part of the reference after the '/', so
    two references with different owners can map to the same directory.
    Returns the reference that already owns the directory when it is a
    different repository, otherwise None. Malformed references are left for
    sync_target_repository to report.
    """
    try:
        name = repository_directory_name(repo).lower()
    except InvalidRepositoryReferenceError:
        return None
    owner = claimed.setdefault(name, repo)
    return owner if owner.lower() != repo.lower() else None


async def sync_target_repository(
    client: GitClientBase,
    repo: str,
    source_file: Path,
    source_repo: str,
    working_dir: Path,
    confirm_push: PushConfirmation,
    github_url: str = DEFAULT_GITHUB_URL,
) -> RepositorySyncResult:
    """Synchronize the configuration file into one target repository.

    Every error is logged with the repository and turned into a failed
    RepositorySyncResult so that the remaining targets still run. Only an
    aborted push confirmation propagates.
    """
    try:
        repository_path = await ensure_working_copy(client, repo, working_dir, github_url=github_url)
    except (GitCommandError, InvalidRepositoryReferenceError) as exc:
        logger.error("Unable to clone target repository", repo=repo, error=str(exc))
        return RepositorySyncResult(repo, SyncOutcome.CLONE_FAILED, error=str(exc))
    except Exception as exc:
        logger.error("Unexpected error while preparing target repository", repo=repo, error=str(exc), error_type=type(exc).__name__)
        return RepositorySyncResult(repo, SyncOutcome.CLONE_FAILED, error=str(exc))

    try:
        relative_destination = destination_path_for(source_file.name)
        copy_config_file(source_file, repository_path, relative_destination)

        status = await client.status(repository_path, [relative_destination])
        if status.is_clean:
            logger.info("No changes", repo=repo, path=relative_destination)
            return RepositorySyncResult(repo, SyncOutcome.NO_CHANGES, path=repository_path)

        commit_message = COMMIT_MESSAGE_TEMPLATE.format(config_file=source_file.name, source_repo=source_repo)
        return await commit_and_push(client, repo, repository_path, relative_destination, commit_message, confirm_push)
    except PushConfirmationAbortedError:
        raise
    except Exception as exc:
        logger.error("Error while synchronizing target repository", repo=repo, error=str(exc), error_type=type(exc).__name__)
        return RepositorySyncResult(repo, SyncOutcome.COPY_FAILED, path=repository_path, error=str(exc) or type(exc).__name__)
