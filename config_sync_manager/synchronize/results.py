"""Contains results of application execution."""

from pathlib import Path

from config_sync_manager.synchronize.models import SyncOutcome


class RepositorySyncResult:
    """Contains the result of synchronizing one target repository."""

    def __init__(self, repo: str, outcome: SyncOutcome, path: Path | None = None, error: str | None = None) -> None:
        """Initialize the result with the repository, its outcome, and an optional error message."""
        self.repo = repo
        self.outcome = outcome
        self.path = path
        self.error = error

    def __repr__(self) -> str:
        """Return a readable representation for logs and test failures."""
        return f"RepositorySyncResult(repo={self.repo!r}, outcome={self.outcome.value!r}, error={self.error!r})"


class SyncRunResult:
    """Contains results of the sync workflow for all target repositories."""

    def __init__(
        self,
        source_repo: str,
        config_file: str,
        working_dir: Path,
        results: list[RepositorySyncResult] | None = None,
        cleaned_up: bool = False,
    ) -> None:
        """Initialize the run result with the source, the distributed file, and per-target results."""
        self.source_repo = source_repo
        self.config_file = config_file
        self.working_dir = working_dir
        self.results = results or []
        self.cleaned_up = cleaned_up

    def count(self, outcome: SyncOutcome) -> int:
        """Return how many target repositories ended with the given outcome."""
        return sum(1 for result in self.results if result.outcome is outcome)

    @property
    def failures(self) -> list[RepositorySyncResult]:
        """Results of target repositories that could not be updated."""
        return [result for result in self.results if result.outcome.is_failure]
