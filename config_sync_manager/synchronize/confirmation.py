"""Policies that decide whether committed changes are pushed."""

from typing import Callable, Protocol

import typer

from config_sync_manager.configuration.exceptions import PushConfirmationAbortedError
from config_sync_manager.configuration.models import PushPolicy


class PushConfirmation(Protocol):
    """Protocol for deciding whether to push a committed change to a repository."""

    def __call__(self, repo: str, commit_message: str) -> bool:
        """Return True to push the commit made in repo."""
        ...


def auto_approve(repo: str, commit_message: str) -> bool:
    """Always push."""
    return True


def auto_deny(repo: str, commit_message: str) -> bool:
    """Never push; commits are kept in the local working copy."""
    return False


class PromptConfirmation:
    """Ask the operator on the terminal before every push."""

    def __init__(self, confirm: Callable[..., bool] = typer.confirm) -> None:
        """Initialize with the function used to ask the question."""
        self.confirm = confirm

    def __call__(self, repo: str, commit_message: str) -> bool:
        """Ask whether to push the commit made in repo.

        Raises:
            PushConfirmationAbortedError: If the operator aborts the prompt (Ctrl-C or end of input).
        """
        try:
            return bool(self.confirm(f"Push '{commit_message}' to {repo}?", default=False))
        except typer.Abort as exc:
            raise PushConfirmationAbortedError(repo) from exc


def confirmation_for_policy(policy: PushPolicy) -> PushConfirmation:
    """Return the push confirmation matching a PushPolicy."""
    if policy is PushPolicy.ALWAYS:
        return auto_approve
    if policy is PushPolicy.NEVER:
        return auto_deny
    return PromptConfirmation()
