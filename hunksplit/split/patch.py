"""Patch builder for the hunksplit split workflow.

Contains:
- build_commit_patch: Build the composite index patch for a single commit
"""

import re

from hunksplit.split.models import Hunk, PlanCommit, Snapshot

# Three or more blank lines become exactly two
_EXCESS_BLANK_LINES = re.compile(r"\n{4,}")


def build_commit_patch(commit: PlanCommit, snapshot: Snapshot) -> str:
    """Build a patch for the hunks referenced by one planned commit.

    Hunks are grouped by file. Files appear in the order the snapshot first
    lists them, and each file's hunks keep their snapshot order regardless
    of the order the plan lists them in.

    Args:
        commit: The planned commit
        snapshot: Snapshot the commit's ids refer to

    Returns:
        Patch content ending in a newline, or "" if the commit has no hunks
    """
    wanted = set(commit.hunks)
    if not wanted:
        return ""

    hunks_by_file: dict[str, list[Hunk]] = {}
    for hunk in snapshot.hunks:
        if hunk.id in wanted:
            hunks_by_file.setdefault(hunk.file, []).append(hunk)

    sections: list[str] = []
    for file_hunks in hunks_by_file.values():
        section_lines = list(file_hunks[0].file_header)
        for hunk in file_hunks:
            section_lines.extend(hunk.lines)
        sections.append("\n".join(section_lines))

    if not sections:
        return ""

    patch = _EXCESS_BLANK_LINES.sub("\n\n\n", "\n\n".join(sections))
    # git apply requires the patch to end with a newline
    return patch.rstrip("\n") + "\n"
