"""Git-related exception classes.

Contains all exception classes for git operations:
- GitError: Base exception for git-related errors
- GitLockError: Another process holds the index lock
- StagedChangesError: The index already holds staged changes
- UnmergedChangesError: The working tree is in a conflicted state
- NoChangesError: There is nothing to split
"""

from typing import Optional


class GitError(Exception):
    """Custom exception for git-related errors.

    Attributes:
        step: The logical operation that failed (e.g. "apply patch to index").
        stderr: Raw diagnostic text from git, unparsed.
    """

    def __init__(self, message: str, step: Optional[str] = None, stderr: str = ""):
        super().__init__(message)
        self.step = step
        self.stderr = stderr


class GitLockError(GitError):
    """Raised when the index lock is held by another git process."""

    pass


class StagedChangesError(GitError):
    """Raised when the index is not empty before a split begins."""

    pass


class UnmergedChangesError(GitError):
    """Raised when the working tree contains unmerged paths."""

    pass


class NoChangesError(GitError):
    """Raised when the working tree has no changes to split."""

    pass
