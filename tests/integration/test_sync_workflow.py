"""Integration tests for the sync workflow against real git repositories."""

from pathlib import Path
from typing import Callable, Generator
from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from config_sync_manager.configuration.cli import typer_app
from config_sync_manager.configuration.models import PushPolicy, SyncConfig
from config_sync_manager.synchronize.driver import run_sync_workflow
from config_sync_manager.synchronize.models import SyncOutcome

pytestmark = pytest.mark.integration


@pytest.fixture
def quiet_cli_logging() -> Generator[None, None, None]:
    """Keep the CLI from replacing the test run's logging handlers."""
    with patch("config_sync_manager.configuration.cli.configure_logging"):
        yield


WORKFLOW = b"name: ci\non:\n  push:\n    branches: [main]\n"
WORKFLOW_PATH = ".github/workflows/ci.yml"


def sync_config(targets: list[str], github_url: str, working_dir: Path | None, **kwargs: object) -> SyncConfig:
    """Build a SyncConfig for the acme/templates source and ci.yml."""
    return SyncConfig(
        target_repos=targets,
        source_repo="acme/templates",
        config_file="ci.yml",
        working_dir=working_dir,
        github_url=github_url,
        **kwargs,  # type: ignore[arg-type]
    )


@pytest.mark.asyncio
async def test_distributes_file_to_every_target(
    tmp_path: Path,
    github_url: str,
    create_remote: Callable[..., Path],
    read_remote_file: Callable[[Path, str, str], bytes],
) -> None:
    """Both targets receive, commit, and push a byte-identical copy of the source file."""
    create_remote("acme/templates", {"ci.yml": WORKFLOW})
    app1 = create_remote("acme/app1", {"README.md": b"app1\n"})
    app2 = create_remote("acme/app2", {"README.md": b"app2\n", WORKFLOW_PATH: b"name: old\n"})
    working_dir = tmp_path / "work"

    run_result = await run_sync_workflow(
        sync_config(["acme/app1", "acme/app2"], github_url, working_dir, push_policy=PushPolicy.ALWAYS)
    )

    assert sorted(path.name for path in working_dir.iterdir()) == ["app1", "app2", "templates"]
    assert [(result.repo, result.outcome) for result in run_result.results] == [
        ("acme/app1", SyncOutcome.PUSHED),
        ("acme/app2", SyncOutcome.PUSHED),
    ]
    source_bytes = (working_dir / "templates" / "ci.yml").read_bytes()
    for name, bare in (("app1", app1), ("app2", app2)):
        assert (working_dir / name / WORKFLOW_PATH).read_bytes() == source_bytes
        assert read_remote_file(bare, "main", WORKFLOW_PATH) == WORKFLOW


@pytest.mark.asyncio
async def test_second_run_creates_no_commit(
    tmp_path: Path,
    github_url: str,
    create_remote: Callable[..., Path],
    commit_count: Callable[[Path, str], int],
) -> None:
    """Re-running against an unchanged source reports no changes and leaves history alone."""
    create_remote("acme/templates", {"ci.yml": WORKFLOW})
    app1 = create_remote("acme/app1", {"README.md": b"app1\n"})
    working_dir = tmp_path / "work"
    config = sync_config(["acme/app1"], github_url, working_dir, push_policy=PushPolicy.ALWAYS)

    first = await run_sync_workflow(config)
    commits_after_first_run = commit_count(app1, "main")
    second = await run_sync_workflow(config)

    assert first.results[0].outcome is SyncOutcome.PUSHED
    assert second.results[0].outcome is SyncOutcome.NO_CHANGES
    assert commits_after_first_run == 2
    assert commit_count(app1, "main") == commits_after_first_run


@pytest.mark.asyncio
async def test_master_branch_repositories_are_updated(
    tmp_path: Path,
    github_url: str,
    create_remote: Callable[..., Path],
    read_remote_file: Callable[[Path, str, str], bytes],
) -> None:
    """Working copies whose default branch is master are updated through the fallback."""
    create_remote("acme/templates", {"ci.yml": WORKFLOW}, branch="master")
    legacy = create_remote("acme/legacy", {"README.md": b"legacy\n"}, branch="master")
    working_dir = tmp_path / "work"
    config = sync_config(["acme/legacy"], github_url, working_dir, push_policy=PushPolicy.ALWAYS)

    await run_sync_workflow(config)
    second = await run_sync_workflow(config)

    assert second.results[0].outcome is SyncOutcome.NO_CHANGES
    assert read_remote_file(legacy, "master", WORKFLOW_PATH) == WORKFLOW


@pytest.mark.asyncio
async def test_declined_push_keeps_local_commit(
    tmp_path: Path,
    github_url: str,
    create_remote: Callable[..., Path],
    commit_count: Callable[[Path, str], int],
) -> None:
    """With pushing disabled the commit stays in the working copy only."""
    create_remote("acme/templates", {"ci.yml": WORKFLOW})
    app1 = create_remote("acme/app1", {"README.md": b"app1\n"})
    working_dir = tmp_path / "work"

    run_result = await run_sync_workflow(sync_config(["acme/app1"], github_url, working_dir, push_policy=PushPolicy.NEVER))

    assert run_result.results[0].outcome is SyncOutcome.COMMITTED_NOT_PUSHED
    assert commit_count(app1, "main") == 1


@pytest.mark.asyncio
async def test_ephemeral_working_directory_is_removed(
    tmp_path: Path,
    github_url: str,
    create_remote: Callable[..., Path],
) -> None:
    """A generated working directory is removed after the run."""
    create_remote("acme/templates", {"ci.yml": WORKFLOW})
    create_remote("acme/app1", {"README.md": b"app1\n"})
    temp_root = tmp_path / "temp"
    temp_root.mkdir()

    with patch("config_sync_manager.utils.workspace.tempfile.gettempdir", return_value=str(temp_root)):
        run_result = await run_sync_workflow(sync_config(["acme/app1"], github_url, None, push_policy=PushPolicy.ALWAYS))

    assert run_result.results[0].outcome is SyncOutcome.PUSHED
    assert run_result.cleaned_up is True
    assert list(temp_root.iterdir()) == []


@pytest.mark.usefixtures("quiet_cli_logging")
def test_cli_missing_target_still_exits_zero(
    tmp_path: Path,
    github_url: str,
    create_remote: Callable[..., Path],
    read_remote_file: Callable[[Path, str, str], bytes],
) -> None:
    """A target that cannot be cloned is reported and the run still succeeds."""
    create_remote("acme/templates", {"ci.yml": WORKFLOW})
    app1 = create_remote("acme/app1", {"README.md": b"app1\n"})

    result = CliRunner().invoke(
        typer_app,
        [
            "sync",
            "acme/missing-repo",
            "acme/app1",
            "--source-repo",
            "acme/templates",
            "--config-file",
            "ci.yml",
            "--working-dir",
            str(tmp_path / "work"),
            "--github-url",
            github_url,
            "--push",
            "always",
        ],
    )

    assert result.exit_code == 0, result.output
    assert "acme/missing-repo: clone failed" in result.output
    assert "acme/app1: updated and pushed" in result.output
    assert read_remote_file(app1, "main", WORKFLOW_PATH) == WORKFLOW


@pytest.mark.usefixtures("quiet_cli_logging")
def test_cli_missing_source_file_exits_non_zero(tmp_path: Path, github_url: str, create_remote: Callable[..., Path]) -> None:
    """A configuration file missing from the source repository is fatal."""
    create_remote("acme/templates", {"other.yml": WORKFLOW})

    result = CliRunner().invoke(
        typer_app,
        [
            "sync",
            "acme/app1",
            "--source-repo",
            "acme/templates",
            "--config-file",
            "ci.yml",
            "--working-dir",
            str(tmp_path / "work"),
            "--github-url",
            github_url,
        ],
    )

    assert result.exit_code == 1
    assert "Configuration file not found" in result.output
