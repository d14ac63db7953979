"""Plan validation for the hunksplit split workflow.

Contains:
- PlanValidationError: Exception for validation errors
- is_conventional_header: Check a commit subject against type[(scope)]: subject
- validate_plan: Collect every problem a plan has against a Snapshot
- ensure_valid_plan: Raise PlanValidationError unless the plan is valid
"""

import re

from hunksplit.split.models import Snapshot, SplitPlan

# type[(scope)]: subject, lowercase type, subject of 1-72 characters
_HEADER_RE = re.compile(r"^[a-z]+(?:\([^)]+\))?:\s.{1,72}$")


class PlanValidationError(Exception):
    """Error during plan validation.

    Attributes:
        errors: Every problem found, each naming the offending id or message.
    """

    def __init__(self, errors: list[str]):
        self.errors = list(errors)
        summary = "\n".join(f"  - {error}" for error in self.errors)
        super().__init__(f"Plan validation failed:\n{summary}")


def is_conventional_header(message: str) -> bool:
    """Check whether a commit subject follows type[(scope)]: subject."""
    return bool(_HEADER_RE.match((message or "").strip()))


def _label(index: int, message: str) -> str:
    return f"Commit {index}" + (f" ({message!r})" if message else "")


def validate_plan(plan: SplitPlan, snapshot: Snapshot) -> list[str]:
    """Validate a split plan against the snapshot it was generated for.

    Every hunk and operation id of the snapshot must be referenced by
    exactly one commit, and no other ids may appear.

    Args:
        plan: The split plan to validate
        snapshot: The snapshot the plan refers to

    Returns:
        List of validation errors (empty if valid)
    """
    errors: list[str] = []

    if not plan.commits:
        return ["Plan has no commits"]

    hunk_universe = set(snapshot.hunk_ids)
    op_universe = set(snapshot.operation_ids)
    seen_hunks: set[str] = set()
    seen_ops: set[str] = set()

    for index, commit in enumerate(plan.commits, 1):
        label = _label(index, commit.message)

        if not commit.message:
            errors.append(f"{label} has an empty message")
        elif not is_conventional_header(commit.message):
            errors.append(
                f"{label} message does not match 'type(scope): subject' "
                "(lowercase type, subject up to 72 characters)"
            )

        if not commit.hunks and not commit.ops:
            errors.append(f"{label} has no hunks and no operations")
            continue

        for hunk_id in commit.hunks:
            if hunk_id not in hunk_universe:
                errors.append(f"{label} references unknown hunk: {hunk_id}")
            elif hunk_id in seen_hunks:
                errors.append(f"Hunk {hunk_id} is used in multiple commits (again in commit {index})")
            else:
                seen_hunks.add(hunk_id)

        for op_id in commit.ops:
            if op_id not in op_universe:
                errors.append(f"{label} references unknown operation: {op_id}")
            elif op_id in seen_ops:
                errors.append(f"Operation {op_id} is used in multiple commits (again in commit {index})")
            else:
                seen_ops.add(op_id)

    # Missing coverage, reported in snapshot order
    for hunk_id in snapshot.hunk_ids:
        if hunk_id not in seen_hunks:
            errors.append(f"Hunk {hunk_id} is not assigned to any commit")
    for op_id in snapshot.operation_ids:
        if op_id not in seen_ops:
            errors.append(f"Operation {op_id} is not assigned to any commit")

    return errors


def ensure_valid_plan(plan: SplitPlan, snapshot: Snapshot) -> None:
    """Raise unless the plan is an exact partition of the snapshot.

    Raises:
        PlanValidationError: Listing every problem found.
    """
    errors = validate_plan(plan, snapshot)
    if errors:
        raise PlanValidationError(errors)
