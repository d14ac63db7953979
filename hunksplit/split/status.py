"""Porcelain v2 status parser.

Contains:
- parse_porcelain_status: Classify NUL-delimited status records into
  FileOperations and detect unmerged state

Record kinds handled:
- '#'  header lines, skipped
- '?'  untracked file            -> add
- 'u'  unmerged entry            -> conflict flag, no operation
- '1'  ordinary change           -> delete / type-change, or hunk-bearing
- '2'  rename or copy (+ origin) -> rename / copy
Anything else is ignored so that new record kinds never break parsing.
"""

import re

from hunksplit.split.models import FileOperation, OperationKind, StatusResult

# "? path" in v2; "?? path" is accepted for v1-style input.
_UNTRACKED_RE = re.compile(r"^\?{1,2} (?P<path>.+)$", re.DOTALL)

# Fields preceding the path in ordinary and rename/copy records
_ORDINARY_FIELDS = 8
_RENAME_FIELDS = 9
_UNMERGED_FIELDS = 10


def parse_porcelain_status(status_output: str) -> StatusResult:
    """Parse `git status --porcelain=v2 -z` output.

    Args:
        status_output: Raw NUL-delimited status text.

    Returns:
        StatusResult with the file-level operations found, the paths they
        make unsplittable, and whether any unmerged entry exists.
    """
    result = StatusResult()
    tokens = [token for token in status_output.split("\0") if token]

    i = 0
    while i < len(tokens):
        token = tokens[i]
        i += 1
        marker = token[0]

        if marker == "#":
            continue

        if marker == "?":
            match = _UNTRACKED_RE.match(token)
            if match:
                _add(result, FileOperation.create(OperationKind.ADD, match.group("path")))
            continue

        if marker == "u":
            result.has_conflict = True
            fields = token.split(" ", _UNMERGED_FIELDS)
            if len(fields) > _UNMERGED_FIELDS:
                result.conflicted_paths.append(fields[_UNMERGED_FIELDS])
            continue

        if marker == "1":
            fields = token.split(" ", _ORDINARY_FIELDS)
            if len(fields) <= _ORDINARY_FIELDS:
                continue
            xy = fields[1]
            path = fields[_ORDINARY_FIELDS]
            if "D" in xy:
                _add(result, FileOperation.create(OperationKind.DELETE, path))
            elif "T" in xy:
                _add(result, FileOperation.create(OperationKind.TYPE_CHANGE, path))
            # Any other change stays hunk-splittable
            continue

        if marker == "2":
            fields = token.split(" ", _RENAME_FIELDS)
            # The original path is always the next token, even if this
            # record turns out to be malformed.
            orig_path = tokens[i] if i < len(tokens) else None
            i += 1
            if len(fields) <= _RENAME_FIELDS or orig_path is None:
                continue
            action = fields[_RENAME_FIELDS - 1][:1]
            path = fields[_RENAME_FIELDS]
            kind = OperationKind.COPY if action == "C" else OperationKind.RENAME
            _add(result, FileOperation.create(kind, path, orig_path))
            continue

    return result


def _add(result: StatusResult, op: FileOperation) -> None:
    result.operations.append(op)
    result.unsplittable_paths.update(op.owned_paths())
