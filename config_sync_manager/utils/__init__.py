"""Utility modules for shared functionality."""

from .constants import (
    COMMIT_MESSAGE_TEMPLATE,
    DEFAULT_CONFIG_FILE,
    DEFAULT_GITHUB_URL,
    DEFAULT_SOURCE_REPO,
    WORKFLOWS_DIRECTORY,
)
from .retry import retry_on_exception

__all__ = [
    "COMMIT_MESSAGE_TEMPLATE",
    "DEFAULT_CONFIG_FILE",
    "DEFAULT_GITHUB_URL",
    "DEFAULT_SOURCE_REPO",
    "WORKFLOWS_DIRECTORY",
    "retry_on_exception",
]
