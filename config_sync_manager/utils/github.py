"""Contains utility functions for GitHub repository references."""

from config_sync_manager.configuration.exceptions import InvalidRepositoryReferenceError
from config_sync_manager.utils.constants import DEFAULT_GITHUB_URL


def split_repository_reference(repo: str) -> tuple[str, str]:
    """Splits a repository reference into owner and repository."""
    parts = repo.strip().split("/")
    if len(parts) != 2 or not all(part.strip() for part in parts):
        raise InvalidRepositoryReferenceError(repo)
    owner, repository = parts
    return owner, repository


def repository_directory_name(repo: str) -> str:
    """Returns the local directory name for a repository reference (the part after the '/')."""
    _, repository = split_repository_reference(repo)
    return repository


def build_clone_url(repo: str, github_url: str = DEFAULT_GITHUB_URL) -> str:
    """Builds the HTTPS clone URL for a repository reference.

    Example:
        >>> build_clone_url("acme/templates")
        'https://github.com/acme/templates.git'
    """
    owner, repository = split_repository_reference(repo)
    return f"{github_url.rstrip('/')}/{owner}/{repository}.git"
