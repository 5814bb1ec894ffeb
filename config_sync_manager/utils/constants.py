"""Shared constants used across the application."""

# Repository Defaults
# -------------------

DEFAULT_SOURCE_REPO = "GameDevConfigs/ConfigCommon"
"""Repository holding the canonical configuration templates."""

DEFAULT_CONFIG_FILE = "sync-config.yml"
"""Workflow file distributed to target repositories when none is named."""

DEFAULT_GITHUB_URL = "https://github.com"
"""Base URL clone URLs are built from."""

WORKFLOWS_DIRECTORY = ".github/workflows"
"""Directory (relative to a repository root) that receives the distributed file."""

FALLBACK_BRANCHES = ("main", "master")
"""Branches tried in order when updating an existing working copy."""

COMMIT_MESSAGE_TEMPLATE = "Sync {config_file} from {source_repo}"
"""Commit message for a distributed file. Use .format(config_file=..., source_repo=...)."""

# Working Directory Settings
# --------------------------

WORKING_DIRECTORY_PREFIX = "config-sync-"
"""Prefix of generated (ephemeral) working directories."""

CLEANUP_MAX_ATTEMPTS = 3
"""Number of times removal of an ephemeral working directory is attempted."""

CLEANUP_RETRY_DELAY = 1.0
"""Seconds to wait between cleanup attempts."""
