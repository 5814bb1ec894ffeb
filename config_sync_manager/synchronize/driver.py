"""Orchestrates the synchronization of a configuration file across repositories."""

import time
from collections.abc import Callable
from pathlib import Path

import structlog

from config_sync_manager.configuration.exceptions import (
    GitCommandError,
    InvalidRepositoryReferenceError,
    SourceFileNotFoundError,
    SourceRepositoryError,
)
from config_sync_manager.configuration.models import SyncConfig
from config_sync_manager.git.abc import GitClientBase
from config_sync_manager.git.client import GitCLIClient
from config_sync_manager.synchronize.confirmation import PushConfirmation, confirmation_for_policy
from config_sync_manager.synchronize.models import SyncOutcome
from config_sync_manager.synchronize.repositories import claim_working_copy, ensure_working_copy, sync_target_repository
from config_sync_manager.synchronize.results import RepositorySyncResult, SyncRunResult
from config_sync_manager.utils.constants import DEFAULT_GITHUB_URL
from config_sync_manager.utils.github import repository_directory_name
from config_sync_manager.utils.workspace import cleanup_working_directory, resolve_working_directory

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)


async def prepare_source_repository(
    client: GitClientBase,
    source_repo: str,
    config_file: str,
    working_dir: Path,
    github_url: str = DEFAULT_GITHUB_URL,
) -> Path:
    """Clone or update the source repository and return the path of the file to distribute.

    Raises:
        SourceRepositoryError: If the source repository reference is invalid or cannot be cloned.
        SourceFileNotFoundError: If config_file does not exist in the source working copy.
    """
    try:
        source_path = await ensure_working_copy(client, source_repo, working_dir, github_url=github_url)
    except InvalidRepositoryReferenceError as exc:
        raise SourceRepositoryError(str(exc)) from exc
    except GitCommandError as exc:
        raise SourceRepositoryError(f"Unable to clone source repository {source_repo}: {exc.stderr.strip() or exc}") from exc

    source_file = source_path / config_file
    if not source_file.is_file():
        raise SourceFileNotFoundError(str(source_file))
    logger.info("Resolved configuration file", source_repo=source_repo, path=str(source_file))
    return source_file


async def run_sync_workflow(
    config: SyncConfig,
    client: GitClientBase | None = None,
    confirm_push: PushConfirmation | None = None,
    on_result: Callable[[RepositorySyncResult], None] | None = None,
) -> SyncRunResult:
    """Run the sync workflow: distribute one file from the source repository to every target repository.

    Targets are processed one at a time in the order given. A failure in one
    target is recorded in its result and never stops the remaining targets.
    A target whose working copy directory is already used by the source or an
    earlier target is reported as CLONE_FAILED without touching git. Fatal
    errors (missing git, unusable working directory, unusable source
    repository, aborted push confirmation) are raised after the ephemeral
    working directory has been cleaned up. When on_result is given it is called with each target's result
    as soon as that target is done.
    """
    client = client if client is not None else GitCLIClient()
    confirm_push = confirm_push if confirm_push is not None else confirmation_for_policy(config.push_policy)

    await client.ensure_available()
    working_directory = resolve_working_directory(config.working_dir)
    run_result = SyncRunResult(
        source_repo=config.source_repo,
        config_file=config.config_file,
        working_dir=working_directory.path,
    )

    start_time = time.time()
    try:
        source_file = await prepare_source_repository(
            client,
            config.source_repo,
            config.config_file,
            working_directory.path,
            github_url=config.github_url,
        )

        logger.info("Processing target repositories", count=len(config.target_repos))
        claimed = {repository_directory_name(config.source_repo).lower(): config.source_repo}
        for index, repo in enumerate(config.target_repos, start=1):
            logger.info("Processing target repository", repo=repo, index=index, total=len(config.target_repos))
            conflicting_repo = claim_working_copy(repo, claimed)
            if conflicting_repo is not None:
                error = f"working copy directory '{repository_directory_name(repo)}' is already used by {conflicting_repo}"
                logger.error("Target repository conflicts with another working copy", repo=repo, error=error)
                result = RepositorySyncResult(repo, SyncOutcome.CLONE_FAILED, error=error)
            else:
                result = await sync_target_repository(
                    client,
                    repo,
                    source_file,
                    config.source_repo,
                    working_directory.path,
                    confirm_push,
                    github_url=config.github_url,
                )
            logger.info("Processed target repository", repo=repo, outcome=result.outcome.value)
            run_result.results.append(result)
            if on_result is not None:
                on_result(result)
    finally:
        # Cleanup must never replace an exception already propagating.
        try:
            run_result.cleaned_up = await cleanup_working_directory(working_directory, keep_temp=config.keep_temp)
        except Exception as exc:
            logger.warning("Cleanup of working directory failed", path=str(working_directory.path), error=str(exc))

    logger.info(
        "Processed target repositories",
        duration=round(time.time() - start_time, 2),
        target_count=len(config.target_repos),
        failure_count=len(run_result.failures),
    )
    return run_result
