"""Plan application for the hunksplit split workflow.

Contains:
- ApplyError: Apply-time failure, stating how many commits were created
- NothingStagedError: A planned commit staged nothing
- ApplyCancelledError: Cancellation honored between commits
- ApplyResult: Commits created by a successful apply
- apply_plan: Replay a validated plan as a sequence of commits
- restore_index: Reset the index after a failure and describe recovery
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Optional

from hunksplit.git.client import GitClient
from hunksplit.git.exceptions import GitError
from hunksplit.split.models import FileOperation, OperationKind, PlanCommit, Snapshot, SplitPlan
from hunksplit.split.patch import build_commit_patch
from hunksplit.split.session import SplitSession

logger = logging.getLogger(__name__)


class ApplyError(Exception):
    """Error while replaying a plan.

    Attributes:
        commit_index: 1-based index of the planned commit that failed.
        total: Number of planned commits.
        commit_message: Subject of the failed commit.
        commits_created: Commits created before the failure.
    """

    def __init__(
        self,
        commit_index: int,
        total: int,
        commit_message: str,
        reason: str,
        commits_created: Optional[list[str]] = None,
    ):
        self.commit_index = commit_index
        self.total = total
        self.commit_message = commit_message
        self.reason = reason
        self.commits_created = list(commits_created or [])
        super().__init__(
            f"Commit {commit_index}/{total} ({commit_message!r}) failed: {reason} "
            f"({len(self.commits_created)} of {total} commits created)"
        )


class NothingStagedError(ApplyError):
    """Raised when a planned commit leaves the index empty."""

    pass


class ApplyCancelledError(ApplyError):
    """Raised when cancellation is honored before a planned commit."""

    pass


@dataclass
class ApplyResult:
    """Outcome of a fully applied plan."""

    commits: list[str] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.commits)


def _stage_operation(git: GitClient, op: FileOperation) -> None:
    if op.kind in (OperationKind.ADD, OperationKind.BINARY, OperationKind.TYPE_CHANGE):
        git.stage_path(op.path)
    elif op.kind == OperationKind.DELETE:
        git.stage_removal(op.path)
    elif op.kind in (OperationKind.RENAME, OperationKind.COPY):
        if not op.orig_path:
            raise ValueError(f"{op.kind.value} operation {op.id} has no source path")
        git.stage_rename_pair(op.orig_path, op.path)
    else:
        raise ValueError(f"Unsupported operation kind: {op.kind}")


def _apply_commit(
    git: GitClient,
    commit: PlanCommit,
    snapshot: Snapshot,
    index: int,
    total: int,
    created: list[str],
) -> str:
    """Stage, verify and create one planned commit. Returns its id."""

    def fail(reason: str, error_class: type = ApplyError, done: Optional[list[str]] = None) -> ApplyError:
        return error_class(index, total, commit.message, reason, created if done is None else done)

    patch_error: Optional[GitError] = None
    patch = build_commit_patch(commit, snapshot)
    if patch:
        try:
            git.apply_to_index(patch, tolerant=True)
        except GitError as e:
            logger.warning("Patch for commit %d did not apply: %s", index, e.stderr.strip() or e)
            patch_error = e

    operations = snapshot.operation_index
    try:
        for op_id in commit.ops:
            op = operations.get(op_id)
            if op is None:
                raise fail(f"unknown operation {op_id}")
            _stage_operation(git, op)
    except ValueError as e:
        raise fail(str(e)) from e
    except GitError as e:
        raise fail(f"staging failed: {e}") from e

    try:
        staged = git.list_staged_paths()
    except GitError as e:
        raise fail(f"reading the index failed: {e}") from e
    if not staged:
        detail = f" (patch error: {patch_error.stderr.strip() or patch_error})" if patch_error else ""
        raise fail(f"nothing staged{detail}", NothingStagedError)
    if patch_error is not None:
        raise fail(f"patch did not apply: {patch_error.stderr.strip() or patch_error}") from patch_error

    logger.debug("Commit %d/%d stages %d path(s)", index, total, len(staged))

    try:
        sha = git.commit(commit.message, commit.body)
    except GitError as e:
        raise fail(f"commit failed: {e}") from e

    try:
        git.reset_index()
    except GitError as e:
        # The commit exists; count it
        raise fail(f"index reset after commit failed: {e}", done=created + [sha]) from e
    return sha


def apply_plan(
    git: GitClient,
    plan: SplitPlan,
    snapshot: Snapshot,
    session: SplitSession,
    on_progress: Optional[Callable[[int, int, PlanCommit, str], None]] = None,
) -> ApplyResult:
    """Replay a validated plan as one commit per planned entry.

    Only the index advances between commits; the working tree is never
    touched. Any failure stops the sequence and leaves earlier commits in
    place.

    Args:
        git: Client for the repository.
        plan: A plan already validated against ``snapshot``.
        snapshot: Snapshot the plan refers to.
        session: Exclusivity token for this cycle.
        on_progress: Called with (index, total, commit, sha) after each commit.

    Returns:
        ApplyResult listing the created commit ids in order.

    Raises:
        ApplyError: On any apply-time failure or honored cancellation.
        ValueError: If the session is already closed.
    """
    if session.closed:
        raise ValueError("Split session is closed")

    total = len(plan.commits)
    created: list[str] = []

    for index, commit in enumerate(plan.commits, 1):
        if session.cancelled:
            raise ApplyCancelledError(index, total, commit.message, "cancelled", created)

        sha = _apply_commit(git, commit, snapshot, index, total, created)
        created.append(sha)
        if on_progress:
            on_progress(index, total, commit, sha)

    return ApplyResult(commits=created)


def restore_index(git: GitClient, pre_head: Optional[str], commits_created: int) -> tuple[bool, str]:
    """Reset the index after a failed apply and describe manual recovery.

    Args:
        git: Client for the repository.
        pre_head: HEAD before the split started.
        commits_created: Number of commits already created.

    Returns:
        Tuple of (success, message)
    """
    messages = []

    try:
        git.reset_index()
    except GitError as e:
        return False, f"Failed to reset index: {e}"

    messages.append("Reset index; working tree changes are untouched")

    if commits_created > 0:
        messages.append("")
        messages.append("MANUAL RECOVERY (if needed):")
        messages.append(f"  To undo the {commits_created} commit(s) created:")
        if pre_head:
            messages.append(f"  git reset --soft {pre_head}")
        else:
            messages.append("  git update-ref -d HEAD")

    return True, "\n".join(messages)
