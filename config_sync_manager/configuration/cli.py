"""Defines the Command Line Interface (CLI) using Typer."""

import asyncio
from pathlib import Path

import typer
from dotenv import load_dotenv
from typer import Argument, Option
from typing_extensions import Annotated

from config_sync_manager.configuration.env import settings
from config_sync_manager.configuration.exceptions import ConfigSyncError, TemplateConfigurationError
from config_sync_manager.configuration.models import PushPolicy, SyncConfig
from config_sync_manager.synchronize.driver import run_sync_workflow
from config_sync_manager.synchronize.models import SyncOutcome
from config_sync_manager.synchronize.results import RepositorySyncResult
from config_sync_manager.synchronize.templates import (
    TemplateCopyStatus,
    TemplateKind,
    TemplateSyncConfig,
    apply_overrides,
    apply_template_copies,
    load_template_sync_config,
    plan_template_copies,
)
from config_sync_manager.utils.logger import configure_logging

load_dotenv()

typer_app = typer.Typer(pretty_exceptions_show_locals=False, help="Distribute shared configuration templates to repositories.")

OUTCOME_MESSAGES = {
    SyncOutcome.PUSHED: "updated and pushed",
    SyncOutcome.COMMITTED_NOT_PUSHED: "committed, push skipped",
    SyncOutcome.PUSH_FAILED: "committed, push failed - please check manually",
    SyncOutcome.NO_CHANGES: "no changes",
    SyncOutcome.CLONE_FAILED: "clone failed",
    SyncOutcome.COPY_FAILED: "copy failed",
}


def echo_repository_result(result: RepositorySyncResult) -> None:
    """Print the outcome of one target repository as soon as it is known."""
    message = f"{result.repo}: {OUTCOME_MESSAGES[result.outcome]}"
    if result.error:
        message += f" ({result.error})"
    typer.echo(message, err=result.outcome.is_failure)


@typer_app.command(name="sync")
def sync_cli(
    target_repos: Annotated[list[str], Argument(help="Target repositories (owner/repo) that receive the configuration file.")],
    source_repo: Annotated[
        str, Option(envvar="SOURCE_REPO", help="Repository (owner/repo) holding the configuration file.")
    ] = settings.SOURCE_REPO,
    config_file: Annotated[
        str, Option(envvar="CONFIG_FILE", help="Name of the file to copy into each target's .github/workflows directory.")
    ] = settings.CONFIG_FILE,
    working_dir: Annotated[
        Path | None,
        Option(envvar="WORKING_DIR", help="Directory to clone repositories into. Defaults to a temporary directory removed after the run."),
    ] = settings.WORKING_DIR,
    keep_temp: Annotated[bool, Option(envvar="KEEP_TEMP", help="Keep the temporary working directory after the run.")] = settings.KEEP_TEMP,
    push: Annotated[
        PushPolicy, Option(envvar="PUSH_POLICY", help="Whether to ask before pushing, always push, or never push.")
    ] = settings.PUSH_POLICY,
    github_url: Annotated[str, Option(envvar="GITHUB_URL", help="Base URL repositories are cloned from.")] = settings.GITHUB_URL,
    debug: Annotated[bool, Option(envvar="DEBUG", help="Enable debug mode.")] = settings.DEBUG,
) -> None:
    """Copy a configuration file from the source repository into each target repository, commit, and push."""
    configure_logging(debug)
    config = SyncConfig(
        target_repos=target_repos,
        source_repo=source_repo,
        config_file=config_file,
        working_dir=working_dir,
        keep_temp=keep_temp,
        push_policy=push,
        github_url=github_url,
    )

    typer.echo(f"Synchronizing {config_file} from {source_repo} to {len(target_repos)} repositories")
    try:
        run_result = asyncio.run(run_sync_workflow(config, on_result=echo_repository_result))
    except ConfigSyncError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(1) from exc

    typer.echo("")
    typer.echo("=" * 70)
    typer.echo("SYNC SUMMARY")
    typer.echo("=" * 70)
    for outcome in SyncOutcome:
        count = run_result.count(outcome)
        if count:
            typer.echo(f"  {OUTCOME_MESSAGES[outcome].capitalize()}: {count}")
    if run_result.failures:
        typer.echo(f"  Repositories that need attention: {', '.join(result.repo for result in run_result.failures)}")
    if not run_result.cleaned_up and (working_dir is None and not keep_temp):
        typer.echo(f"  Temporary files were left in {run_result.working_dir}")
    elif keep_temp or working_dir is not None:
        typer.echo(f"  Working copies are in {run_result.working_dir}")
    typer.echo("=" * 70)


@typer_app.command(name="apply-templates")
def apply_templates_cli(
    source_dir: Annotated[Path, Argument(help="Checkout of the template repository.")],
    target_dir: Annotated[Path, Argument(help="Root of the repository the templates are applied to.")] = Path("."),
    config_path: Annotated[Path | None, Option("--config", envvar="TEMPLATE_CONFIG", help="YAML file selecting the templates to apply.")] = None,
    disable: Annotated[list[TemplateKind] | None, Option("--disable", help="Template kind to skip. May be repeated.")] = None,
    source: Annotated[list[str] | None, Option("--source", help="Source override as KIND=PATH. May be repeated.")] = None,
    extra: Annotated[list[str] | None, Option("--extra", help="Additional file pair as local:remote. May be repeated.")] = None,
    debug: Annotated[bool, Option(envvar="DEBUG", help="Enable debug mode.")] = settings.DEBUG,
) -> None:
    """Apply the selected templates from a template repository checkout to a repository."""
    configure_logging(debug)
    if not source_dir.is_dir():
        typer.echo(f"Error: template directory not found at {source_dir.absolute()}", err=True)
        raise typer.Exit(1)

    try:
        config = load_template_sync_config(config_path) if config_path is not None else TemplateSyncConfig()
        config = apply_overrides(config, disabled=disable, sources=source, extra_files=extra)
        copies = plan_template_copies(config)
    except TemplateConfigurationError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(1) from exc

    results = apply_template_copies(source_dir, target_dir, copies)
    for result in results:
        typer.echo(f"{result.copy.destination}: {result.status.value.replace('_', ' ')}")

    missing = [result for result in results if result.status is TemplateCopyStatus.MISSING_SOURCE]
    if missing:
        typer.echo(f"{len(missing)} template source file(s) were not found", err=True)


if __name__ == "__main__":
    typer_app()
