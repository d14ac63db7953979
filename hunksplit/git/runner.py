"""Process execution boundary and repository discovery.

Contains:
- ProcessResult: Exit code plus captured output of one process run
- ProcessRunner: Abstract process-execution capability
- SubprocessRunner: ProcessRunner backed by subprocess.run
- get_repo_root: Top-level directory of the enclosing repository
"""

import os
import subprocess
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from hunksplit.git.exceptions import GitError


@dataclass(frozen=True)
class ProcessResult:
    """Outcome of a single blocking process invocation."""

    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class ProcessRunner(ABC):
    """Runs one external command to completion."""

    @abstractmethod
    def run(
        self,
        args: list[str],
        cwd: Optional[Path] = None,
        input_text: Optional[str] = None,
    ) -> ProcessResult:
        """Run a command and capture its output.

        Args:
            args: Full argument vector, program first.
            cwd: Working directory for the process.
            input_text: Text written to the process stdin, if any.

        Returns:
            The process result. A non-zero exit code is not an exception here.
        """
        pass


class SubprocessRunner(ProcessRunner):
    """ProcessRunner using the local executables."""

    def run(
        self,
        args: list[str],
        cwd: Optional[Path] = None,
        input_text: Optional[str] = None,
    ) -> ProcessResult:
        env = os.environ.copy()
        env.setdefault("LC_ALL", "C")
        env.setdefault("LANG", "C")
        try:
            result = subprocess.run(
                args,
                cwd=cwd,
                input=input_text,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="surrogateescape",
                env=env,
                # Ctrl-C reaches only hunksplit, so a running git finishes
                start_new_session=True,
            )
        except FileNotFoundError:
            raise GitError(f"{args[0]} is not installed or not in PATH.")
        return ProcessResult(
            returncode=result.returncode,
            stdout=result.stdout,
            stderr=result.stderr,
        )


def get_repo_root(cwd: Optional[Path] = None, runner: Optional[ProcessRunner] = None) -> Path:
    """Top-level directory of the repository containing ``cwd``.

    Args:
        cwd: Directory to start from (defaults to the process cwd).
        runner: Process runner to use.

    Returns:
        Path to the repository root.

    Raises:
        GitError: Outside any git repository.
    """
    runner = runner or SubprocessRunner()
    result = runner.run(["git", "rev-parse", "--show-toplevel"], cwd=cwd)
    if not result.ok or not result.stdout.strip():
        raise GitError(
            "Not in a git repository. Please run this command from within a git repo.",
            step="locate repository",
            stderr=result.stderr,
        )
    return Path(result.stdout.strip())
