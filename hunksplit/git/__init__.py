"""Git process boundary for hunksplit.

This package provides:
- exceptions: GitError, GitLockError, StagedChangesError,
              UnmergedChangesError, NoChangesError
- runner: ProcessResult, ProcessRunner, SubprocessRunner, get_repo_root
- client: GitClient, EMPTY_TREE
"""

# Exceptions
from hunksplit.git.exceptions import (
    GitError,
    GitLockError,
    NoChangesError,
    StagedChangesError,
    UnmergedChangesError,
)

# Process runner
from hunksplit.git.runner import (
    ProcessResult,
    ProcessRunner,
    SubprocessRunner,
    get_repo_root,
)

# Logical operations
from hunksplit.git.client import (
    EMPTY_TREE,
    GitClient,
)


__all__ = [
    # Exceptions
    "GitError",
    "GitLockError",
    "StagedChangesError",
    "UnmergedChangesError",
    "NoChangesError",
    # Runner
    "ProcessResult",
    "ProcessRunner",
    "SubprocessRunner",
    "get_repo_root",
    # Client
    "EMPTY_TREE",
    "GitClient",
]
