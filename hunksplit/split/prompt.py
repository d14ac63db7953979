"""Prompts for the split planner.

The system prompts fix the model's role; the user prompts carry the
snapshot inventory, the message grammar and the output schema.
"""

from typing import Optional

from hunksplit import config as _config
from hunksplit.config import Granularity
from hunksplit.split.models import Snapshot, SplitPlan


SPLIT_SYSTEM_PROMPT = """You plan commit stacks. Given the uncommitted changes of a git working tree, \
cut them into a sequence of small commits a reviewer can read one at a time.

Guidelines:
- One purpose per commit: a feature, a fix, a refactor, tests, docs or configuration
- Earlier commits must not depend on later ones
- Use the hunk and operation IDs exactly as given, never invent one
- Place every ID in one commit, no more and no fewer

Reply with the JSON object alone, no code fences and no prose."""


SPLIT_RETRY_SYSTEM_PROMPT = """You plan commit stacks. A plan you produced was rejected by a validator.

Return a corrected plan in which:
- only IDs from the allowed lists appear, spelled exactly
- each ID sits in one commit and none is dropped
- every message reads "type(scope): subject" with a lowercase type

Reply with the JSON object alone, no code fences and no prose."""


_OUTPUT_SCHEMA = """[OUTPUT SCHEMA]
{
  "commits": [
    {
      "message": "<type>(<optional scope>): <subject, max 72 chars>",
      "body": "<optional longer description or null>",
      "hunks": ["<hunk_id>", "..."],
      "ops": ["<operation_id>", "..."]
    }
  ]
}"""

_MESSAGE_RULES = """[COMMIT MESSAGE FORMAT]
- "message" must match: type(scope): subject   or   type: subject
- type is lowercase: feat, fix, docs, refactor, perf, test, build, ci, chore, style
- subject is 1-72 characters, imperative mood
  Correct:  "fix(parser): handle empty input"
  WRONG:    "Fix bug" (no type prefix)"""


def format_snapshot_for_llm(snapshot: Snapshot, excerpt_lines: Optional[int] = None) -> str:
    """Render a snapshot as the planner sees it.

    Operations are listed whole; hunks are abbreviated to id, file, @@
    header, stats and a bounded excerpt of their changed lines.

    Args:
        snapshot: The snapshot to render.
        excerpt_lines: Maximum changed lines shown per hunk.

    Returns:
        Formatted inventory text.
    """
    excerpt_lines = excerpt_lines or _config.EXCERPT_LINES
    lines: list[str] = []

    lines.append("[FILE OPERATIONS]")
    if snapshot.operations:
        for op in snapshot.operations:
            if op.orig_path:
                lines.append(f"{op.id}: {op.kind.value} {op.orig_path} -> {op.path}")
            else:
                lines.append(f"{op.id}: {op.kind.value} {op.path}")
    else:
        lines.append("(none)")

    lines.append("")
    lines.append("[HUNKS]")
    if not snapshot.hunks:
        lines.append("(none)")

    for hunk in snapshot.hunks:
        lines.append(f"{hunk.id}: {hunk.file}  {hunk.header}  (+{hunk.additions}/-{hunk.deletions})")
        excerpt = hunk.snippet(excerpt_lines)
        for excerpt_line in excerpt.split("\n") if excerpt else []:
            lines.append(f"    {excerpt_line}")

    return "\n".join(lines)


def build_split_prompt(
    snapshot: Snapshot,
    branch: str,
    recent_commits: list[str],
    excerpt_lines: Optional[int] = None,
) -> str:
    """User prompt for a first planning attempt."""
    unit = "file" if snapshot.granularity == Granularity.FILE else "hunk"
    history = ", ".join(recent_commits[:5]) if recent_commits else "(no commits yet)"

    return f"""Plan a commit stack for these changes.

[CONTEXT]
Branch: {branch}
Recent commits: {history}
Granularity: {unit} (a hunk ID is the smallest unit you can place; here it is one {unit})

[STATS]
Files with changes: {len(snapshot.files)}
Total hunks: {len(snapshot.hunks)}
Total file operations: {len(snapshot.operations)}

{format_snapshot_for_llm(snapshot, excerpt_lines)}

{_MESSAGE_RULES}

{_OUTPUT_SCHEMA}

[RULES]
1. IDs come only from the [FILE OPERATIONS] and [HUNKS] lists
2. Every listed ID goes into one commit
3. No commit may be empty
4. A rename travels with the edits that rely on its new path"""


def _summarize_previous(plan: Optional[SplitPlan]) -> str:
    if plan is None or not plan.commits:
        return "  (could not be parsed)"

    rows = []
    for position, commit in enumerate(plan.commits, 1):
        ids = commit.hunks + commit.ops
        shown = ", ".join(ids[:5])
        if len(ids) > 5:
            shown += f", ... ({len(ids)} total)"
        rows.append(f"  {position}. {commit.message}\n      ids: [{shown}]")
    return "\n".join(rows)


def _id_block(ids: list[str], per_line: int = 10) -> str:
    if not ids:
        return "  (none)"
    chunks = (ids[start:start + per_line] for start in range(0, len(ids), per_line))
    return "\n".join("  " + ", ".join(chunk) for chunk in chunks)


def build_split_retry_prompt(
    snapshot: Snapshot,
    previous_plan: Optional[SplitPlan],
    validation_errors: list[str],
    excerpt_lines: Optional[int] = None,
) -> str:
    """User prompt after a rejected attempt.

    Args:
        snapshot: The snapshot being split.
        previous_plan: The rejected plan, or None when the reply did not parse.
        validation_errors: Reasons the attempt was rejected.
        excerpt_lines: Changed lines shown per hunk.
    """
    problems = "\n".join(f"  - {error}" for error in validation_errors)

    return f"""The plan below was rejected. Correct it.

[VALIDATION ERRORS]
{problems}

[YOUR PREVIOUS PLAN]
{_summarize_previous(previous_plan)}

[ALLOWED HUNK IDS]
{_id_block(snapshot.hunk_ids)}

[ALLOWED OPERATION IDS]
{_id_block(snapshot.operation_ids)}

[INVENTORY]
{format_snapshot_for_llm(snapshot, excerpt_lines)}

{_MESSAGE_RULES}

[WHAT TO CHANGE]
1. Resolve each validation error
2. Copy IDs verbatim from the allowed lists
3. Keep the earlier grouping unless an error forces a change

{_OUTPUT_SCHEMA}"""
