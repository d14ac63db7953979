"""Logical git operations used by the split workflow.

Contains:
- EMPTY_TREE: Object id of git's empty tree
- GitClient: status/diff/stage/commit/reset primitives with lock retry
"""

import logging
import time
from pathlib import Path
from typing import Callable, Optional

from hunksplit import config as _config
from hunksplit.git.exceptions import GitError, GitLockError
from hunksplit.git.runner import ProcessResult, ProcessRunner, SubprocessRunner

logger = logging.getLogger(__name__)

# Diff base for repositories without a first commit
EMPTY_TREE = "4b825dc642cb6eb9a060e54bf8d69288fbee4904"

_LOCK_MARKERS = ("index.lock", "Another git process")


def _is_lock_error(stderr: str) -> bool:
    return any(marker in stderr for marker in _LOCK_MARKERS)


class GitClient:
    """Runs git against one repository.

    Lock contention is the only failure that is retried; every other
    non-zero exit raises GitError carrying git's raw stderr.
    """

    def __init__(
        self,
        repo_root: Path,
        runner: Optional[ProcessRunner] = None,
        lock_retries: Optional[int] = None,
        lock_retry_delay: Optional[float] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.repo_root = Path(repo_root)
        self.runner = runner or SubprocessRunner()
        self.lock_retries = max(1, lock_retries if lock_retries is not None else _config.LOCK_RETRIES)
        self.lock_retry_delay = (
            lock_retry_delay if lock_retry_delay is not None else _config.LOCK_RETRY_DELAY
        )
        self._sleep = sleep
        self._git_dir: Optional[Path] = None

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    def _execute(self, args: list[str], step: str, input_text: Optional[str] = None) -> ProcessResult:
        """Run git, retrying while another process holds the index lock."""
        attempt = 1
        while True:
            logger.debug("git %s", " ".join(args))
            result = self.runner.run(["git"] + args, cwd=self.repo_root, input_text=input_text)
            if result.ok or not _is_lock_error(result.stderr):
                return result
            if attempt >= self.lock_retries:
                raise GitLockError(
                    f"Git lock error during {step} after {attempt} attempt(s). "
                    f"Close other git applications and try again.\n{result.stderr.strip()}",
                    step=step,
                    stderr=result.stderr,
                )
            logger.warning(
                "Git lock detected during %s, retry %d/%d", step, attempt, self.lock_retries - 1
            )
            self._remove_stale_lock()
            self._sleep(self.lock_retry_delay)
            attempt += 1

    def _run(self, args: list[str], step: str, input_text: Optional[str] = None) -> str:
        """Run git and return stdout, raising GitError on failure."""
        result = self._execute(args, step, input_text)
        if not result.ok:
            raise GitError(
                f"Failed to {step}: git {' '.join(args)}\n{result.stderr.strip()}",
                step=step,
                stderr=result.stderr,
            )
        return result.stdout

    def git_dir(self) -> Path:
        """Absolute path of the repository's .git directory."""
        if self._git_dir is None:
            out = self._run(["rev-parse", "--git-dir"], "locate git directory").strip()
            path = Path(out)
            self._git_dir = path if path.is_absolute() else self.repo_root / path
        return self._git_dir

    def _remove_stale_lock(self) -> None:
        """Best-effort removal of a leftover index.lock."""
        try:
            lock_file = self.git_dir() / "index.lock"
        except GitError as e:
            logger.warning("Could not locate git directory to clear lock: %s", e)
            return
        try:
            lock_file.unlink()
            logger.warning("Removed stale lock file %s", lock_file)
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning("Could not remove lock file %s: %s", lock_file, e)

    # ------------------------------------------------------------------
    # Repository state
    # ------------------------------------------------------------------

    def has_commit(self) -> bool:
        """Whether HEAD points at a commit (False on an unborn branch)."""
        result = self._execute(["rev-parse", "--verify", "--quiet", "HEAD"], "resolve HEAD")
        return result.ok and bool(result.stdout.strip())

    def head(self) -> Optional[str]:
        """Current HEAD commit id, or None if there is no commit yet."""
        result = self._execute(["rev-parse", "--verify", "--quiet", "HEAD"], "resolve HEAD")
        sha = result.stdout.strip()
        return sha if result.ok and sha else None

    def diff_base(self) -> str:
        """HEAD, or the empty tree when the repository has no commit."""
        return "HEAD" if self.has_commit() else EMPTY_TREE

    def get_branch(self) -> str:
        """Current branch name, or a detached-HEAD placeholder."""
        result = self._execute(["symbolic-ref", "--short", "-q", "HEAD"], "read branch")
        return result.stdout.strip() if result.ok and result.stdout.strip() else "(detached HEAD)"

    def recent_subjects(self, count: int = 5) -> list[str]:
        """Subjects of the last few commits, newest first."""
        if not self.has_commit():
            return []
        out = self._run(["log", f"-n{count}", "--pretty=%s"], "read recent commits")
        return [line for line in out.splitlines() if line.strip()]

    def status(self) -> str:
        """NUL-delimited porcelain v2 status including untracked files."""
        return self._run(
            ["status", "--porcelain=v2", "-z", "--untracked-files=all"],
            "read status",
        )

    def diff(self) -> str:
        """Unified diff of the working tree against HEAD or the empty tree."""
        return self._run(
            [
                "-c", "core.quotepath=false",
                "-c", "diff.suppressBlankEmpty=false",
                "diff", "--no-color", "--no-ext-diff", "--no-renames", "--patch",
                self.diff_base(),
            ],
            "read working tree diff",
        )

    def list_staged_paths(self) -> list[str]:
        """Paths whose index entry differs from HEAD."""
        out = self._run(
            ["diff", "--cached", "--name-only", "-z", self.diff_base()],
            "list staged paths",
        )
        return [path for path in out.split("\0") if path]

    # ------------------------------------------------------------------
    # Index mutation
    # ------------------------------------------------------------------

    def apply_to_index(self, patch: str, tolerant: bool = True) -> None:
        """Apply a patch to the index only, leaving the working tree alone.

        Args:
            patch: Patch text; must end with a newline.
            tolerant: Allow 3-way fallback and whitespace differences.
        """
        args = ["apply", "--cached"]
        if tolerant:
            args += ["--3way", "--ignore-whitespace"]
        args.append("-")
        self._run(args, "apply patch to index", input_text=patch)

    def stage_path(self, path: str) -> None:
        """Stage a path as it currently is in the working tree."""
        self._run(["add", "-A", "--", path], f"stage {path}")

    def stage_removal(self, path: str) -> None:
        """Stage removal of a tracked path without touching the working tree."""
        self._run(["rm", "--cached", "--quiet", "--", path], f"stage removal of {path}")

    def stage_rename_pair(self, orig: str, dest: str) -> None:
        """Stage both sides of a move together so git can pair them."""
        self._run(["add", "-A", "--", orig, dest], f"stage {orig} -> {dest}")

    def commit(self, message: str, body: Optional[str] = None) -> str:
        """Commit the index.

        Args:
            message: Subject line.
            body: Optional body, written as a separate paragraph.

        Returns:
            Id of the new commit.
        """
        text = message.strip()
        if body and body.strip():
            text += "\n\n" + body.strip()
        self._run(["commit", "--quiet", "-F", "-"], "create commit", input_text=text + "\n")
        sha = self.head()
        if sha is None:
            raise GitError("Commit reported success but HEAD is unresolved", step="create commit")
        logger.info("Created commit %s: %s", sha[:12], message.strip())
        return sha

    def reset_index(self) -> None:
        """Unstage everything, keeping the working tree."""
        if self.has_commit():
            self._run(["reset", "--quiet"], "reset index")
        else:
            self._run(["read-tree", "--empty"], "reset index")
