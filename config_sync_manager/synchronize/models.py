"""Internal data models (e.g., per-repository synchronization outcomes)."""

from enum import Enum


class SyncOutcome(Enum):
    """Enum for the outcome of synchronizing a single target repository."""

    PUSHED = "pushed"
    COMMITTED_NOT_PUSHED = "committed_not_pushed"
    PUSH_FAILED = "push_failed"
    NO_CHANGES = "no_changes"
    CLONE_FAILED = "clone_failed"
    COPY_FAILED = "copy_failed"

    @property
    def is_failure(self) -> bool:
        """Whether the outcome means the file did not reach the target's working copy."""
        return self in (SyncOutcome.CLONE_FAILED, SyncOutcome.COPY_FAILED)
