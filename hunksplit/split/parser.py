"""Diff parser for the hunksplit split workflow.

Contains functions for parsing unified diff output:
- parse_unified_diff: Parse `git diff` output into Hunk records
- merge_file_hunks: Collapse each file's hunks into one unit (file granularity)
"""

import re
from typing import Optional

from hunksplit.split.models import Hunk, make_hunk_id

_DIFF_GIT_PREFIX = "diff --git "
_DIFF_GIT_RE = re.compile(r"^diff --git a/(?P<old>.*) b/(?P<new>.*)$")


def parse_unified_diff(diff_output: str) -> list[Hunk]:
    """Parse unified diff output from `git diff`.

    A single forward scan: 'diff --git' opens a file header, '@@ ' opens a
    hunk, and every other line extends whichever of the two is open.

    Args:
        diff_output: Raw output from git diff

    Returns:
        Hunks in diff order. Files without '@@' sections (pure mode
        changes, binary files) contribute nothing.
    """
    hunks: list[Hunk] = []
    if not diff_output.strip():
        return hunks

    lines = diff_output.split("\n")
    # Trailing newline of the last line, not an empty line of content
    if lines and lines[-1] == "":
        lines.pop()

    header_lines: list[str] = []
    plus_path: Optional[str] = None
    header_path: Optional[str] = None
    hunk_lines: Optional[list[str]] = None
    in_file = False

    def flush() -> None:
        if hunk_lines:
            file_path = plus_path or header_path
            if file_path is not None:
                hunks.append(_create_hunk(file_path, header_lines, hunk_lines))

    for line in lines:
        if line.startswith(_DIFF_GIT_PREFIX):
            flush()
            hunk_lines = None
            header_lines = [line]
            plus_path = None
            header_path = path_from_diff_git(line)
            in_file = True
        elif not in_file:
            # Preamble before the first file, e.g. from `git show`
            continue
        elif line.startswith("@@ "):
            flush()
            hunk_lines = [line]
        elif hunk_lines is not None:
            hunk_lines.append(line)
        else:
            header_lines.append(line)
            if line.startswith("+++ b/"):
                plus_path = line[6:]

    flush()
    return hunks


def path_from_diff_git(line: str) -> Optional[str]:
    """Extract the destination path from a 'diff --git a/X b/Y' line.

    Paths may contain ' b/', so the symmetric a/P b/P form is tried
    before falling back to a regex split.
    """
    rest = line[len(_DIFF_GIT_PREFIX):]
    if rest.startswith("a/") and (len(rest) - 5) % 2 == 0:
        width = (len(rest) - 5) // 2
        old = rest[2:2 + width]
        if rest[2 + width:5 + width] == " b/" and rest[5 + width:] == old:
            return old

    match = _DIFF_GIT_RE.match(line)
    if match:
        return match.group("new")
    return None


def _count_changes(lines: list[str]) -> tuple[int, int]:
    additions = 0
    deletions = 0
    for line in lines:
        if line.startswith(("+++", "---")):
            continue
        if line.startswith("+"):
            additions += 1
        elif line.startswith("-"):
            deletions += 1
    return additions, deletions


def _create_hunk(file_path: str, header_lines: list[str], lines: list[str]) -> Hunk:
    """Create a Hunk with a content-derived id."""
    additions, deletions = _count_changes(lines[1:])
    return Hunk(
        id=make_hunk_id(file_path, lines),
        file=file_path,
        file_header=tuple(header_lines),
        lines=tuple(lines),
        additions=additions,
        deletions=deletions,
    )


def merge_file_hunks(hunks: list[Hunk]) -> list[Hunk]:
    """Collapse each file's hunks into a single unit.

    Args:
        hunks: Hunks in diff order.

    Returns:
        One Hunk per file, in first-seen file order, whose lines are the
        file's hunk blocks concatenated.
    """
    by_file: dict[str, list[Hunk]] = {}
    for hunk in hunks:
        by_file.setdefault(hunk.file, []).append(hunk)

    merged: list[Hunk] = []
    for file_path, file_hunks in by_file.items():
        if len(file_hunks) == 1:
            merged.append(file_hunks[0])
            continue
        lines: list[str] = []
        for hunk in file_hunks:
            lines.extend(hunk.lines)
        merged.append(
            Hunk(
                id=make_hunk_id(file_path, lines),
                file=file_path,
                file_header=file_hunks[0].file_header,
                lines=tuple(lines),
                additions=sum(h.additions for h in file_hunks),
                deletions=sum(h.deletions for h in file_hunks),
            )
        )
    return merged
