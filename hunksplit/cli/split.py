"""CLI command for splitting working tree changes into a commit stack."""

from pathlib import Path
from typing import Optional

import typer

from hunksplit import config as _config
from hunksplit.config import Granularity
from hunksplit.git import GitClient, GitError, NoChangesError, get_repo_root
from hunksplit.global_config import GlobalConfigError
from hunksplit.llm import JSONParseError, LLMError, MissingAPIKeyError, get_provider
from hunksplit.split import (
    ApplyCancelledError,
    ApplyError,
    PlanCommit,
    PlanValidationError,
    Snapshot,
    SplitPlan,
    SplitSession,
    apply_plan,
    collect_snapshot,
    ensure_valid_plan,
    load_plan_file,
    request_plan,
    restore_index,
    save_plan_file,
)


def _print_debug_info(snapshot: Snapshot) -> None:
    typer.echo("", err=True)
    typer.echo("=" * 60, err=True)
    typer.echo("              SPLIT DEBUG INFO", err=True)
    typer.echo("=" * 60, err=True)
    typer.echo(f"Granularity: {snapshot.granularity.value}", err=True)
    typer.echo(f"LLM: {_config.ACTIVE_PROVIDER.value} / {_config.ACTIVE_MODEL}", err=True)
    typer.echo(f"Files with changes: {len(snapshot.files)}", err=True)
    typer.echo(f"Hunks: {len(snapshot.hunks)}", err=True)
    typer.echo(f"File operations: {len(snapshot.operations)}", err=True)
    typer.echo("", err=True)

    for op in snapshot.operations:
        typer.echo(f"  {op.id}  {op.describe()}", err=True)
    for hunk in snapshot.hunks[:30]:
        typer.echo(f"  {hunk.id}  {hunk.file}  (+{hunk.additions}/-{hunk.deletions})", err=True)
    if len(snapshot.hunks) > 30:
        typer.echo(f"  ... and {len(snapshot.hunks) - 30} more hunks", err=True)
    typer.echo("=" * 60, err=True)
    typer.echo("", err=True)


def _print_plan(plan: SplitPlan, snapshot: Snapshot) -> None:
    hunk_index = snapshot.hunk_index
    operation_index = snapshot.operation_index

    typer.echo("")
    typer.echo("=" * 60)
    typer.echo(f"Proposed commit stack ({len(plan.commits)} commits)")
    typer.echo("=" * 60)

    for i, planned_commit in enumerate(plan.commits, 1):
        typer.echo("")
        typer.echo(f"  {i}. {planned_commit.message}")
        if planned_commit.body:
            for body_line in planned_commit.body.strip().splitlines():
                typer.echo(f"       {body_line}")

        files: dict[str, int] = {}
        for hunk_id in planned_commit.hunks:
            hunk = hunk_index.get(hunk_id)
            if hunk:
                files[hunk.file] = files.get(hunk.file, 0) + 1
        for file_path, count in files.items():
            typer.echo(f"     - {file_path} ({count} hunk{'s' if count != 1 else ''})")
        for op_id in planned_commit.ops:
            op = operation_index.get(op_id)
            if op:
                typer.echo(f"     - {op.describe()}")

    typer.echo("")
    typer.echo("=" * 60)


def _on_progress(index: int, total: int, planned_commit: PlanCommit, sha: str) -> None:
    typer.echo(f"  [{index}/{total}] {sha[:8]} {planned_commit.message}", err=True)


def split_command(
    files: bool = typer.Option(
        False,
        "--files",
        help="Split by whole files instead of individual hunks",
    ),
    do_commit: bool = typer.Option(
        False,
        "--commit",
        "-c",
        help="Execute the plan: stage changes and create commits",
    ),
    yes: bool = typer.Option(
        False,
        "--yes",
        "-y",
        help="Skip confirmation prompt in commit mode",
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        help="Force plan-only even if --commit is present",
    ),
    show_json: bool = typer.Option(
        False,
        "--json",
        "-j",
        help="Print the plan as JSON",
    ),
    from_plan: Optional[Path] = typer.Option(
        None,
        "--from-plan",
        help="Load plan JSON from file instead of calling the LLM",
    ),
    save_plan: Optional[Path] = typer.Option(
        None,
        "--save-plan",
        help="Write the validated plan to this JSON file",
    ),
    debug: bool = typer.Option(
        False,
        "--debug",
        help="Print diagnostics (snapshot ids, LLM settings)",
    ),
) -> None:
    """Split uncommitted changes into a clean commit stack.

    Reads every change in the working tree (relative to HEAD), asks the
    configured LLM to group the hunks and file operations into commits,
    and validates that every change lands in exactly one commit. By
    default only the plan is shown.

    Use --commit to create the commits. The index must be empty first.
    """
    should_commit = do_commit and not dry_run

    try:
        _config.load_config()
        granularity = Granularity.FILE if files else _config.GRANULARITY

        repo_root = get_repo_root()
        git = GitClient(repo_root)

        try:
            snapshot = collect_snapshot(git, granularity)
        except NoChangesError as e:
            typer.echo(str(e), err=True)
            raise typer.Exit(0)

        if debug:
            _print_debug_info(snapshot)

        if from_plan:
            plan = load_plan_file(from_plan)
            typer.echo(f"Loaded plan from {from_plan}", err=True)
        else:
            typer.echo("Generating split plan...", err=True)
            plan = request_plan(
                get_provider(),
                snapshot,
                branch=git.get_branch(),
                recent_commits=git.recent_subjects(),
            )

        ensure_valid_plan(plan, snapshot)

        if save_plan:
            save_plan_file(plan, save_plan)
            typer.echo(f"Saved plan to {save_plan}", err=True)

        if show_json:
            typer.echo(plan.model_dump_json(indent=2))

        _print_plan(plan, snapshot)

        if not should_commit:
            typer.echo("")
            typer.echo("Plan only - no changes made to git state.", err=True)
            typer.echo("Run with --commit to execute this plan.", err=True)
            raise typer.Exit(0)

        if not yes:
            typer.echo("")
            if not typer.confirm("Execute this plan and create commits?", default=False):
                typer.echo("Cancelled.", err=True)
                raise typer.Exit(0)

        typer.echo("")
        typer.echo("Executing split plan...", err=True)

        with SplitSession(pre_head=git.head()) as session:
            try:
                with session.interrupt_guard():
                    result = apply_plan(git, plan, snapshot, session, on_progress=_on_progress)
            except ApplyError as e:
                if isinstance(e, ApplyCancelledError):
                    typer.echo(f"\nStopped: {e}", err=True)
                else:
                    typer.echo(f"\nError during execution: {e}", err=True)
                typer.echo("\nAttempting to restore the index...", err=True)
                success, restore_msg = restore_index(git, session.pre_head, len(e.commits_created))
                typer.echo(restore_msg, err=True)
                if not success:
                    typer.echo("\nAutomatic restore failed. Manual recovery may be needed.", err=True)
                raise typer.Exit(1)

        typer.echo("")
        typer.echo(f"Successfully created {result.count} commit(s)!", err=True)

    except PlanValidationError as e:
        typer.echo(str(e), err=True)
        raise typer.Exit(1)
    except GitError as e:
        typer.echo(f"Git error: {e}", err=True)
        raise typer.Exit(1)
    except MissingAPIKeyError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)
    except JSONParseError as e:
        typer.echo(f"Failed to parse plan: {e}", err=True)
        raise typer.Exit(1)
    except LLMError as e:
        typer.echo(f"LLM error: {e}", err=True)
        raise typer.Exit(1)
    except GlobalConfigError as e:
        typer.echo(f"Configuration error: {e}", err=True)
        raise typer.Exit(1)
