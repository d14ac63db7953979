"""Snapshot reconciliation and collection.

Contains:
- reconcile: Merge status, binary and hunk results into one Snapshot
- collect_snapshot: Read the repository and build its Snapshot
"""

import logging
from typing import Optional

from hunksplit import config as _config
from hunksplit.config import Granularity
from hunksplit.git.client import GitClient
from hunksplit.git.exceptions import NoChangesError, StagedChangesError, UnmergedChangesError
from hunksplit.split.binary import extract_binary_operations
from hunksplit.split.models import FileOperation, Hunk, Snapshot, StatusResult
from hunksplit.split.parser import merge_file_hunks, parse_unified_diff
from hunksplit.split.status import parse_porcelain_status

logger = logging.getLogger(__name__)


def _raise_conflict(status: StatusResult) -> None:
    paths = ", ".join(status.conflicted_paths[:5]) or "unknown paths"
    raise UnmergedChangesError(
        f"Repository has unmerged paths ({paths}). "
        "Resolve the conflicts before splitting."
    )


def reconcile(
    status: StatusResult,
    binary_operations: list[FileOperation],
    hunks: list[Hunk],
    granularity: Granularity = Granularity.HUNK,
) -> Snapshot:
    """Combine parser outputs into a Snapshot.

    Operations are deduplicated by id (last one wins). A binary marker for
    a path that status already classified is dropped, so each path has at
    most one owner. Hunks on any operation-owned path are removed.

    Args:
        status: Parsed porcelain status.
        binary_operations: Operations found from binary markers in the diff.
        hunks: Parsed diff hunks.
        granularity: Whether to keep hunks separate or merge them per file.

    Returns:
        The reconciled Snapshot.

    Raises:
        UnmergedChangesError: If status reported unmerged entries.
    """
    if status.has_conflict:
        _raise_conflict(status)

    by_id: dict[str, FileOperation] = {}
    for op in status.operations:
        by_id[op.id] = op

    status_paths = set(status.unsplittable_paths)
    for op in binary_operations:
        if op.path in status_paths:
            logger.debug("Binary change on %s already covered by status", op.path)
            continue
        by_id[op.id] = op

    operations = list(by_id.values())
    unsplittable = set(status_paths)
    for op in operations:
        unsplittable.update(op.owned_paths())

    kept = [hunk for hunk in hunks if hunk.file not in unsplittable]
    dropped = len(hunks) - len(kept)
    if dropped:
        logger.debug("Dropped %d hunk(s) on unsplittable paths", dropped)

    if granularity == Granularity.FILE:
        kept = merge_file_hunks(kept)

    return Snapshot(hunks=tuple(kept), operations=tuple(operations), granularity=granularity)


def collect_snapshot(git: GitClient, granularity: Optional[Granularity] = None) -> Snapshot:
    """Read the working tree and build its Snapshot.

    Args:
        git: Client for the repository.
        granularity: Hunk or file granularity (defaults to configuration).

    Returns:
        A non-empty Snapshot.

    Raises:
        UnmergedChangesError: If the repository has conflicts.
        StagedChangesError: If the index already holds staged changes.
        NoChangesError: If there is nothing to split.
    """
    granularity = granularity or _config.GRANULARITY

    status = parse_porcelain_status(git.status())
    if status.has_conflict:
        _raise_conflict(status)

    staged = git.list_staged_paths()
    if staged:
        shown = ", ".join(staged[:5]) + (f" and {len(staged) - 5} more" if len(staged) > 5 else "")
        raise StagedChangesError(
            f"The index already has staged changes: {shown}\n"
            "Unstage them first with: git reset"
        )

    diff_output = git.diff()
    snapshot = reconcile(
        status,
        extract_binary_operations(diff_output),
        parse_unified_diff(diff_output),
        granularity,
    )

    if snapshot.is_empty():
        raise NoChangesError("No changes to split. The working tree is clean.")

    logger.info(
        "Snapshot: %d hunk(s), %d file operation(s) across %d file(s)",
        len(snapshot.hunks),
        len(snapshot.operations),
        len(snapshot.files),
    )
    return snapshot
