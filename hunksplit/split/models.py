"""Data models for the hunksplit split workflow.

Contains:
- OperationKind: Kinds of whole-file operations
- Hunk: One addressable block of a file's textual diff
- FileOperation: A whole-file change that cannot be split into hunks
- StatusResult: Classified output of the porcelain status parser
- Snapshot: Every Hunk and FileOperation of the working tree at one moment
- PlanCommit: A single commit in a split plan
- SplitPlan: The ordered list of planned commits
"""

import hashlib
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from hunksplit.config import Granularity


class OperationKind(str, Enum):
    """Whole-file operation kinds."""

    ADD = "add"
    DELETE = "delete"
    RENAME = "rename"
    COPY = "copy"
    BINARY = "binary"
    TYPE_CHANGE = "type-change"


def _digest(text: str) -> str:
    return hashlib.md5(text.encode("utf-8", "surrogateescape"), usedforsecurity=False).hexdigest()[:10]


def make_hunk_id(file: str, lines: list[str]) -> str:
    """Derive a hunk id from its file path and text."""
    return "H_" + _digest(file + "\0" + "\n".join(lines))


def make_operation_id(kind: OperationKind, path: str, orig_path: Optional[str] = None) -> str:
    """Derive an operation id from its kind and paths."""
    return "OP_" + _digest(f"{kind.value}\0{orig_path or ''}\0{path}")


@dataclass(frozen=True)
class Hunk:
    """A contiguous, independently stageable block of one file's diff."""

    id: str
    file: str
    file_header: tuple[str, ...]  # 'diff --git' through '+++'
    lines: tuple[str, ...]  # '@@' header plus body lines
    additions: int = 0
    deletions: int = 0

    @property
    def header(self) -> str:
        """The @@ ... @@ line."""
        return self.lines[0] if self.lines else ""

    def patch(self) -> str:
        """Standalone patch for this hunk alone."""
        return "\n".join(self.file_header + self.lines) + "\n"

    def snippet(self, max_lines: int = 5) -> str:
        """Get a snippet of the hunk's changed lines for display."""
        content_lines = [
            ln for ln in self.lines[1:]
            if ln.startswith(("+", "-")) and not ln.startswith(("+++", "---"))
        ]
        if len(content_lines) <= max_lines:
            return "\n".join(content_lines)
        return "\n".join(content_lines[:max_lines]) + f"\n... ({len(content_lines) - max_lines} more lines)"


@dataclass(frozen=True)
class FileOperation:
    """A whole-file change: create, delete, rename, copy, binary or type change."""

    id: str
    kind: OperationKind
    path: str
    orig_path: Optional[str] = None

    @classmethod
    def create(cls, kind: OperationKind, path: str, orig_path: Optional[str] = None) -> "FileOperation":
        return cls(
            id=make_operation_id(kind, path, orig_path),
            kind=kind,
            path=path,
            orig_path=orig_path,
        )

    def owned_paths(self) -> tuple[str, ...]:
        """Paths this operation takes away from hunk-level splitting.

        A rename also owns its source path, whose deletion would otherwise
        show up as a separate hunk.
        """
        if self.kind == OperationKind.RENAME and self.orig_path:
            return (self.path, self.orig_path)
        return (self.path,)

    def describe(self) -> str:
        if self.orig_path:
            return f"{self.kind.value} {self.orig_path} -> {self.path}"
        return f"{self.kind.value} {self.path}"


@dataclass
class StatusResult:
    """Output of parsing porcelain v2 status."""

    operations: list[FileOperation] = field(default_factory=list)
    unsplittable_paths: set[str] = field(default_factory=set)
    has_conflict: bool = False
    conflicted_paths: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class Snapshot:
    """All Hunks and FileOperations of the working tree, relative to HEAD."""

    hunks: tuple[Hunk, ...] = ()
    operations: tuple[FileOperation, ...] = ()
    granularity: Granularity = Granularity.HUNK

    @property
    def hunk_index(self) -> dict[str, Hunk]:
        return {hunk.id: hunk for hunk in self.hunks}

    @property
    def operation_index(self) -> dict[str, FileOperation]:
        return {op.id: op for op in self.operations}

    @property
    def hunk_ids(self) -> list[str]:
        return [hunk.id for hunk in self.hunks]

    @property
    def operation_ids(self) -> list[str]:
        return [op.id for op in self.operations]

    @property
    def unsplittable_paths(self) -> set[str]:
        paths: set[str] = set()
        for op in self.operations:
            paths.update(op.owned_paths())
        return paths

    @property
    def files(self) -> list[str]:
        """Changed paths in first-seen order."""
        seen: dict[str, None] = {}
        for op in self.operations:
            seen.setdefault(op.path, None)
        for hunk in self.hunks:
            seen.setdefault(hunk.file, None)
        return list(seen)

    def is_empty(self) -> bool:
        return not self.hunks and not self.operations


class PlanCommit(BaseModel):
    """A single commit in the split plan."""

    message: str
    body: Optional[str] = None
    hunks: list[str] = Field(default_factory=list)
    ops: list[str] = Field(default_factory=list)

    @field_validator("message", mode="before")
    @classmethod
    def strip_message(cls, value):
        """Strip surrounding whitespace from the subject line."""
        if isinstance(value, str):
            return value.strip()
        return value

    @field_validator("hunks", "ops", mode="before")
    @classmethod
    def none_as_empty(cls, value):
        return [] if value is None else value


class SplitPlan(BaseModel):
    """The full split plan: commits in the order they will be created."""

    commits: list[PlanCommit] = Field(default_factory=list)
