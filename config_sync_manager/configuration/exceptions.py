"""Contains exceptions raised while synchronizing configuration files."""


class ConfigSyncError(Exception):
    """Base class for errors that abort a synchronization run."""

    pass


class GitClientNotFoundError(ConfigSyncError):
    """Raised when no git executable can be found on the PATH."""

    pass


class WorkingDirectoryError(ConfigSyncError):
    """Raised when the working directory cannot be created."""

    pass


class InvalidRepositoryReferenceError(ConfigSyncError):
    """Raised when a repository reference is not in the format 'owner/repo'."""

    def __init__(self, reference: str) -> None:
        """Initializes the exception with the offending reference."""
        super().__init__(f"Repository must be in the format 'owner/repo', got '{reference}'")
        self.reference = reference


class SourceRepositoryError(ConfigSyncError):
    """Raised when the source repository cannot be cloned."""

    pass


class SourceFileNotFoundError(ConfigSyncError):
    """Raised when the file to distribute does not exist in the source repository."""

    def __init__(self, path: str) -> None:
        """Initializes the exception with the missing path."""
        super().__init__(f"Configuration file not found in source repository: {path}")
        self.path = path


class PushConfirmationAbortedError(ConfigSyncError):
    """Raised when the operator aborts the push confirmation prompt."""

    def __init__(self, repo: str) -> None:
        """Initializes the exception with the repository that was being confirmed."""
        super().__init__(f"Push confirmation for {repo} was aborted")
        self.repo = repo


class GitCommandError(Exception):
    """Raised when a git command exits with a non-zero return code."""

    def __init__(self, command: list[str], returncode: int, stderr: str) -> None:
        """Initializes the exception with the failed command and its output."""
        super().__init__(f"git command failed with exit code {returncode}: {' '.join(command)}: {stderr.strip()}")
        self.command = command
        self.returncode = returncode
        self.stderr = stderr


class TemplateConfigurationError(Exception):
    """Raised when a template synchronization configuration is invalid."""

    pass
