"""Shared test fixtures and configuration."""

import subprocess
import tempfile
from pathlib import Path
from typing import Callable, Optional, Union

import pytest

from hunksplit import config as _config
from hunksplit.config import LLMProvider
from hunksplit.git.runner import ProcessResult, ProcessRunner
from hunksplit.llm.base import BaseLLMProvider, RawLLMResult


# ============================================================================
# Isolation
# ============================================================================


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Point ~/.hunksplit at a temp dir and restore active settings afterwards."""
    monkeypatch.setattr("hunksplit.global_config._CONFIG_DIR", tmp_path / ".hunksplit-home")
    for name in (
        "ACTIVE_PROVIDER",
        "ACTIVE_MODEL",
        "MAX_TOKENS",
        "TEMPERATURE",
        "GRANULARITY",
        "LOCK_RETRIES",
        "LOCK_RETRY_DELAY",
        "MAX_PLAN_ATTEMPTS",
        "EXCERPT_LINES",
    ):
        monkeypatch.setattr(_config, name, getattr(_config, name))
    for env_var in _config.API_KEY_ENV_VARS.values():
        monkeypatch.delenv(env_var, raising=False)


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


# ============================================================================
# Real git repositories
# ============================================================================


def git(repo: Path, *args: str) -> str:
    """Run git in a test repository and return stdout."""
    result = subprocess.run(
        ["git", *args],
        cwd=repo,
        capture_output=True,
        text=True,
        check=True,
    )
    return result.stdout


def _init_repo(repo_dir: Path) -> None:
    repo_dir.mkdir()
    git(repo_dir, "init", "-q")
    git(repo_dir, "config", "user.email", "test@example.com")
    git(repo_dir, "config", "user.name", "Test User")
    git(repo_dir, "config", "commit.gpgsign", "false")
    git(repo_dir, "config", "core.autocrlf", "false")


@pytest.fixture
def temp_repo(tmp_path):
    """Create a temporary git repository with one commit."""
    repo_dir = tmp_path / "test_repo"
    _init_repo(repo_dir)

    (repo_dir / "README.md").write_text("# Test Repo\n")
    (repo_dir / "a.txt").write_text("line one\nline two\nline three\n")
    git(repo_dir, "add", "README.md", "a.txt")
    git(repo_dir, "commit", "-q", "-m", "Initial commit")

    return repo_dir


@pytest.fixture
def empty_repo(tmp_path):
    """Create a temporary git repository without any commit."""
    repo_dir = tmp_path / "empty_repo"
    _init_repo(repo_dir)
    return repo_dir


# ============================================================================
# Fakes
# ============================================================================


Response = Union[ProcessResult, list, Callable[[list[str], Optional[str]], ProcessResult]]


def ok(stdout: str = "") -> ProcessResult:
    return ProcessResult(returncode=0, stdout=stdout, stderr="")


def failed(stderr: str, returncode: int = 1) -> ProcessResult:
    return ProcessResult(returncode=returncode, stdout="", stderr=stderr)


def _command_key(args: list[str]) -> str:
    """'git -c k=v diff --cached ...' -> 'diff --cached'."""
    rest = list(args[1:])
    while rest and rest[0] == "-c":
        rest = rest[2:]
    if not rest:
        return ""
    if rest[0] == "diff" and "--cached" in rest:
        return "diff --cached"
    return rest[0]


class FakeRunner(ProcessRunner):
    """ProcessRunner returning canned results keyed by git subcommand.

    A response may be a ProcessResult (returned every time), a list of
    ProcessResults (consumed in order, then success) or a callable.
    """

    def __init__(self, responses: Optional[dict[str, Response]] = None):
        self.responses = dict(responses or {})
        self.calls: list[tuple[list[str], Optional[str]]] = []

    def run(self, args, cwd=None, input_text=None):
        self.calls.append((list(args), input_text))
        response = self.responses.get(_command_key(args))
        if response is None:
            return ok()
        if isinstance(response, list):
            return response.pop(0) if response else ok()
        if callable(response):
            return response(list(args), input_text)
        return response

    def commands(self) -> list[str]:
        return [_command_key(args) for args, _ in self.calls]


class FakeProvider(BaseLLMProvider):
    """Text-completion capability that replays canned responses."""

    provider = LLMProvider.ANTHROPIC
    display_name = "Fake"

    def __init__(self, responses: list[str], model: str = "fake-model"):
        super().__init__(model)
        self.responses = list(responses)
        self.calls: list[tuple[str, str]] = []

    def get_api_key(self) -> str:
        return "fake-key"

    def _complete(self, api_key: str, system_prompt: str, user_prompt: str) -> RawLLMResult:
        self.calls.append((system_prompt, user_prompt))
        return RawLLMResult(
            raw_response=self.responses.pop(0),
            model=self.model,
            input_tokens=len(user_prompt) // 4,
            output_tokens=10,
        )


@pytest.fixture
def fake_runner():
    return FakeRunner()


# ============================================================================
# Sample git output
# ============================================================================


SHA_A = "1" * 40
SHA_B = "2" * 40


@pytest.fixture
def sample_diff():
    """Two modified files, the first with two hunks."""
    return """diff --git a/src/main.py b/src/main.py
index 1234567..abcdefg 100644
--- a/src/main.py
+++ b/src/main.py
@@ -10,6 +10,8 @@ def main():
     print("Hello")
+    print("World")
+    print("!")
     return 0
@@ -20,3 +22,5 @@ def helper():
     pass
+    # New comment
+    return True
diff --git a/docs/guide.md b/docs/guide.md
index 2345678..bcdefgh 100644
--- a/docs/guide.md
+++ b/docs/guide.md
@@ -1,3 +1,3 @@
 # Guide
-Old text
+New text
 End
"""


@pytest.fixture
def sample_diff_with_binary():
    """A text change plus a modified binary file."""
    return """diff --git a/src/main.py b/src/main.py
index 1234567..abcdefg 100644
--- a/src/main.py
+++ b/src/main.py
@@ -10,6 +10,7 @@ def main():
     print("Hello")
+    print("World")
     return 0
diff --git a/image.png b/image.png
index 1234567..abcdefg 100644
Binary files a/image.png and b/image.png differ
"""


@pytest.fixture
def scenario_status():
    """Porcelain output with one modified and one untracked file."""
    return "\0".join(
        [
            f"1 .M N... 100644 100644 100644 {SHA_A} {SHA_B} a.txt",
            "?? b.txt",
        ]
    ) + "\0"


@pytest.fixture
def scenario_diff():
    """Diff with a single hunk for a.txt."""
    return """diff --git a/a.txt b/a.txt
index 1111111..2222222 100644
--- a/a.txt
+++ b/a.txt
@@ -1,3 +1,3 @@
 line one
-line two
+line 2
 line three
"""
