"""Tests for hunksplit.split.validation module."""

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from hunksplit.split.models import (
    FileOperation,
    Hunk,
    OperationKind,
    PlanCommit,
    Snapshot,
    SplitPlan,
    make_hunk_id,
)
from hunksplit.split.validation import (
    PlanValidationError,
    ensure_valid_plan,
    is_conventional_header,
    validate_plan,
)


def _hunk(file: str, n: int) -> Hunk:
    lines = (f"@@ -{n},1 +{n},1 @@", f"-old {n}", f"+new {n}")
    return Hunk(
        id=make_hunk_id(file, list(lines)),
        file=file,
        file_header=(f"diff --git a/{file} b/{file}", f"--- a/{file}", f"+++ b/{file}"),
        lines=lines,
        additions=1,
        deletions=1,
    )


def _snapshot(n_hunks: int, n_ops: int) -> Snapshot:
    hunks = tuple(_hunk(f"src/file{i % 3}.py", i) for i in range(n_hunks))
    ops = tuple(FileOperation.create(OperationKind.ADD, f"new{i}.txt") for i in range(n_ops))
    return Snapshot(hunks=hunks, operations=ops)


@pytest.fixture
def snapshot():
    return _snapshot(3, 2)


@pytest.fixture
def valid_plan(snapshot):
    hunks = snapshot.hunk_ids
    ops = snapshot.operation_ids
    return SplitPlan(
        commits=[
            PlanCommit(message="feat(core): add parser", hunks=hunks[:2], ops=ops[:1]),
            PlanCommit(message="docs: describe usage", hunks=hunks[2:], ops=ops[1:]),
        ]
    )


class TestIsConventionalHeader:
    """Tests for the commit message convention."""

    @pytest.mark.parametrize(
        "message",
        [
            "fix(core): handle null input",
            "chore: initial",
            "feat(api/v2): add pagination",
            "docs: " + "x" * 72,
        ],
    )
    def test_accepts(self, message):
        """Test messages that follow type[(scope)]: subject."""
        assert is_conventional_header(message)

    @pytest.mark.parametrize(
        "message",
        [
            "Fix bug",
            "Fix: capitalised type",
            "fix(): empty scope",
            "fix:no space",
            "fix: ",
            "docs: " + "x" * 73,
            "",
        ],
    )
    def test_rejects(self, message):
        """Test messages that break the convention."""
        assert not is_conventional_header(message)


class TestValidatePlan:
    """Tests for validate_plan."""

    def test_valid_plan(self, valid_plan, snapshot):
        """Test that an exact partition validates."""
        assert validate_plan(valid_plan, snapshot) == []
        ensure_valid_plan(valid_plan, snapshot)

    def test_empty_plan(self, snapshot):
        """Test that a plan without commits is rejected."""
        assert validate_plan(SplitPlan(commits=[]), snapshot) == ["Plan has no commits"]

    def test_missing_hunk_named(self, valid_plan, snapshot):
        """Test that an unassigned hunk is reported by id."""
        missing = valid_plan.commits[1].hunks.pop()
        errors = validate_plan(valid_plan, snapshot)

        assert len(errors) == 1
        assert missing in errors[0]
        assert "not assigned" in errors[0]

    def test_missing_operation_named(self, valid_plan, snapshot):
        """Test that an unassigned operation is reported by id."""
        missing = valid_plan.commits[0].ops.pop()
        errors = validate_plan(valid_plan, snapshot)
        assert any(missing in error for error in errors)

    def test_duplicate_operation_named(self, valid_plan, snapshot):
        """Test that an operation used twice is reported as a duplicate."""
        dup = valid_plan.commits[0].ops[0]
        valid_plan.commits[1].ops.append(dup)

        errors = validate_plan(valid_plan, snapshot)

        assert len(errors) == 1
        assert dup in errors[0]
        assert "multiple commits" in errors[0]

    def test_duplicate_hunk_within_commit(self, valid_plan, snapshot):
        """Test that repeating an id inside one commit is a duplicate too."""
        valid_plan.commits[0].hunks.append(valid_plan.commits[0].hunks[0])
        errors = validate_plan(valid_plan, snapshot)
        assert any("multiple commits" in error for error in errors)

    def test_unknown_ids(self, valid_plan, snapshot):
        """Test that ids outside the snapshot are rejected."""
        valid_plan.commits[0].hunks.append("H_doesnotexist")
        valid_plan.commits[1].ops.append("OP_doesnotexist")

        errors = validate_plan(valid_plan, snapshot)

        assert any("unknown hunk: H_doesnotexist" in error for error in errors)
        assert any("unknown operation: OP_doesnotexist" in error for error in errors)

    def test_empty_commit(self, valid_plan, snapshot):
        """Test that a commit with no hunks and no ops is rejected."""
        valid_plan.commits.append(PlanCommit(message="chore: nothing"))
        errors = validate_plan(valid_plan, snapshot)
        assert errors == ["Commit 3 ('chore: nothing') has no hunks and no operations"]

    def test_empty_message(self, valid_plan, snapshot):
        """Test that a blank message is rejected."""
        valid_plan.commits[0].message = ""
        errors = validate_plan(valid_plan, snapshot)
        assert errors == ["Commit 1 has an empty message"]

    def test_whitespace_message_stripped_to_empty(self, snapshot):
        """Test that a whitespace-only message counts as empty."""
        plan = SplitPlan.model_validate(
            {"commits": [{"message": "   ", "hunks": snapshot.hunk_ids, "ops": snapshot.operation_ids}]}
        )
        assert validate_plan(plan, snapshot) == ["Commit 1 has an empty message"]

    def test_malformed_message(self, valid_plan, snapshot):
        """Test that a message without a type prefix is rejected."""
        valid_plan.commits[0].message = "Fix bug"
        errors = validate_plan(valid_plan, snapshot)

        assert len(errors) == 1
        assert "'Fix bug'" in errors[0]

    def test_ensure_raises_with_all_errors(self, valid_plan, snapshot):
        """Test that ensure_valid_plan raises listing every problem."""
        valid_plan.commits[0].message = "Fix bug"
        valid_plan.commits[1].hunks.append("H_unknown")

        with pytest.raises(PlanValidationError) as exc_info:
            ensure_valid_plan(valid_plan, snapshot)

        assert len(exc_info.value.errors) == 2
        assert "H_unknown" in str(exc_info.value)

    def test_none_lists_are_empty(self, snapshot):
        """Test that null hunks/ops from a planner parse as empty lists."""
        commit = PlanCommit.model_validate({"message": "chore: x", "hunks": None, "ops": None})
        assert commit.hunks == [] and commit.ops == []


# ============================================================================
# Partition property
# ============================================================================


@st.composite
def snapshot_and_assignment(draw):
    n_hunks = draw(st.integers(min_value=0, max_value=12))
    n_ops = draw(st.integers(min_value=0 if n_hunks else 1, max_value=6))
    snapshot = _snapshot(n_hunks, n_ops)
    ids = snapshot.hunk_ids + snapshot.operation_ids
    n_commits = draw(st.integers(min_value=1, max_value=len(ids)))
    # Every commit gets at least one id; the rest are assigned freely
    assignment = list(range(n_commits)) + draw(
        st.lists(
            st.integers(min_value=0, max_value=n_commits - 1),
            min_size=len(ids) - n_commits,
            max_size=len(ids) - n_commits,
        )
    )
    order = draw(st.permutations(ids))
    return snapshot, dict(zip(order, assignment)), n_commits


def _plan_from_assignment(snapshot: Snapshot, assignment: dict, n_commits: int) -> SplitPlan:
    commits = [PlanCommit(message=f"chore: part {i}") for i in range(n_commits)]
    for item_id, index in assignment.items():
        if item_id.startswith("H_"):
            commits[index].hunks.append(item_id)
        else:
            commits[index].ops.append(item_id)
    return SplitPlan(commits=commits)


class TestPartitionProperty:
    """Property tests: validation accepts exactly the partitions."""

    @settings(max_examples=75, deadline=None)
    @given(snapshot_and_assignment())
    def test_any_partition_validates(self, data):
        """Test that every partition of the ids is a valid plan."""
        snapshot, assignment, n_commits = data
        plan = _plan_from_assignment(snapshot, assignment, n_commits)

        assert validate_plan(plan, snapshot) == []

        referenced_hunks = [h for c in plan.commits for h in c.hunks]
        referenced_ops = [o for c in plan.commits for o in c.ops]
        assert sorted(referenced_hunks) == sorted(snapshot.hunk_ids)
        assert sorted(referenced_ops) == sorted(snapshot.operation_ids)

    @settings(max_examples=75, deadline=None)
    @given(snapshot_and_assignment(), st.data())
    def test_dropping_an_id_is_rejected(self, data, extra):
        """Test that removing any single id breaks validation and names it."""
        snapshot, assignment, n_commits = data
        dropped = extra.draw(st.sampled_from(sorted(assignment)))
        remaining = {k: v for k, v in assignment.items() if k != dropped}
        plan = _plan_from_assignment(snapshot, remaining, n_commits)

        errors = validate_plan(plan, snapshot)
        assert errors
        assert any(dropped in error for error in errors) or any(
            "no hunks and no operations" in error for error in errors
        )

    @settings(max_examples=75, deadline=None)
    @given(snapshot_and_assignment(), st.data())
    def test_duplicating_an_id_is_rejected(self, data, extra):
        """Test that referencing any id twice breaks validation and names it."""
        snapshot, assignment, n_commits = data
        duplicated = extra.draw(st.sampled_from(sorted(assignment)))
        plan = _plan_from_assignment(snapshot, assignment, n_commits)
        target = plan.commits[extra.draw(st.integers(min_value=0, max_value=n_commits - 1))]
        if duplicated.startswith("H_"):
            target.hunks.append(duplicated)
        else:
            target.ops.append(duplicated)

        errors = validate_plan(plan, snapshot)
        assert any(duplicated in error and "multiple commits" in error for error in errors)
