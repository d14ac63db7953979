"""Split feature for hunksplit - turn working tree changes into atomic commits.

This package provides:
- models: Hunk, FileOperation, OperationKind, Snapshot, StatusResult,
          PlanCommit, SplitPlan
- status: parse_porcelain_status
- parser: parse_unified_diff, merge_file_hunks
- binary: extract_binary_operations
- snapshot: reconcile, collect_snapshot
- validation: validate_plan, ensure_valid_plan, PlanValidationError
- patch: build_commit_patch
- session: SplitSession
- executor: apply_plan, restore_index, ApplyResult, ApplyError,
            NothingStagedError, ApplyCancelledError
- prompt: SPLIT_SYSTEM_PROMPT, build_split_prompt, build_split_retry_prompt
- planner: request_plan, parse_plan_response, load_plan_file, save_plan_file
"""

# Models
from hunksplit.split.models import (
    FileOperation,
    Hunk,
    OperationKind,
    PlanCommit,
    Snapshot,
    SplitPlan,
    StatusResult,
)

# Parsers
from hunksplit.split.status import (
    parse_porcelain_status,
)
from hunksplit.split.parser import (
    merge_file_hunks,
    parse_unified_diff,
)
from hunksplit.split.binary import (
    extract_binary_operations,
)

# Snapshot
from hunksplit.split.snapshot import (
    collect_snapshot,
    reconcile,
)

# Validation
from hunksplit.split.validation import (
    PlanValidationError,
    ensure_valid_plan,
    validate_plan,
)

# Patch builder
from hunksplit.split.patch import (
    build_commit_patch,
)

# Session
from hunksplit.split.session import (
    SplitSession,
)

# Executor
from hunksplit.split.executor import (
    ApplyCancelledError,
    ApplyError,
    ApplyResult,
    NothingStagedError,
    apply_plan,
    restore_index,
)

# Prompt
from hunksplit.split.prompt import (
    SPLIT_RETRY_SYSTEM_PROMPT,
    SPLIT_SYSTEM_PROMPT,
    build_split_prompt,
    build_split_retry_prompt,
    format_snapshot_for_llm,
)

# Planner
from hunksplit.split.planner import (
    load_plan_file,
    parse_plan_response,
    request_plan,
    save_plan_file,
)


__all__ = [
    # Models
    "FileOperation",
    "Hunk",
    "OperationKind",
    "PlanCommit",
    "Snapshot",
    "SplitPlan",
    "StatusResult",
    # Parsers
    "parse_porcelain_status",
    "parse_unified_diff",
    "merge_file_hunks",
    "extract_binary_operations",
    # Snapshot
    "collect_snapshot",
    "reconcile",
    # Validation
    "PlanValidationError",
    "ensure_valid_plan",
    "validate_plan",
    # Patch
    "build_commit_patch",
    # Session
    "SplitSession",
    # Executor
    "ApplyCancelledError",
    "ApplyError",
    "ApplyResult",
    "NothingStagedError",
    "apply_plan",
    "restore_index",
    # Prompt
    "SPLIT_RETRY_SYSTEM_PROMPT",
    "SPLIT_SYSTEM_PROMPT",
    "build_split_prompt",
    "build_split_retry_prompt",
    "format_snapshot_for_llm",
    # Planner
    "load_plan_file",
    "parse_plan_response",
    "request_plan",
    "save_plan_file",
]
