"""Models for configuration between CLI arguments and environment variables."""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from config_sync_manager.utils.constants import DEFAULT_CONFIG_FILE, DEFAULT_GITHUB_URL, DEFAULT_SOURCE_REPO


class PushPolicy(str, Enum):
    """Enum for how pushes of committed changes are confirmed."""

    PROMPT = "prompt"
    ALWAYS = "always"
    NEVER = "never"


@dataclass
class SyncConfig:
    """Configuration class for the sync command."""

    target_repos: list[str]
    source_repo: str = DEFAULT_SOURCE_REPO
    config_file: str = DEFAULT_CONFIG_FILE
    working_dir: Path | None = None
    keep_temp: bool = False
    push_policy: PushPolicy = PushPolicy.PROMPT
    github_url: str = DEFAULT_GITHUB_URL
