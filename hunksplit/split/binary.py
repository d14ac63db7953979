"""Binary change detection.

Porcelain status reports a changed binary file exactly like a changed text
file; only the diff stream says "Binary files ... differ". This module
turns those markers into whole-file operations.
"""

import re
from typing import Optional

from hunksplit.split.models import FileOperation, OperationKind
from hunksplit.split.parser import path_from_diff_git

_BINARY_RE = re.compile(
    r"^Binary files (?:a/(?P<old>.+?)|/dev/null) and (?:b/(?P<new>.+)|/dev/null) differ$"
)


def extract_binary_operations(diff_output: str) -> list[FileOperation]:
    """Find binary file changes in unified diff output.

    Args:
        diff_output: Raw output from git diff

    Returns:
        One binary FileOperation per binary file, in diff order.
    """
    operations: list[FileOperation] = []
    tracked_path: Optional[str] = None

    for line in diff_output.split("\n"):
        if line.startswith("diff --git "):
            tracked_path = path_from_diff_git(line)
        elif line.startswith("+++ b/"):
            tracked_path = line[6:]
        elif line.startswith("Binary files "):
            match = _BINARY_RE.match(line)
            path = match.group("new") if match else None
            path = path or tracked_path
            if path:
                operations.append(FileOperation.create(OperationKind.BINARY, path))

    return operations
