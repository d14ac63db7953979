"""Plan acquisition for the hunksplit split workflow.

Contains:
- parse_plan_response: Turn raw planner text into a SplitPlan
- load_plan_file / save_plan_file: Read and write plans as JSON files
- request_plan: Ask the planner, validate, and retry with corrections
"""

import json
import logging
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from hunksplit import config as _config
from hunksplit.llm.base import BaseLLMProvider
from hunksplit.llm.exceptions import JSONParseError, PlanParseError
from hunksplit.llm.parsing import parse_json_object
from hunksplit.split.models import Snapshot, SplitPlan
from hunksplit.split.prompt import (
    SPLIT_RETRY_SYSTEM_PROMPT,
    SPLIT_SYSTEM_PROMPT,
    build_split_prompt,
    build_split_retry_prompt,
)
from hunksplit.split.validation import PlanValidationError, validate_plan

logger = logging.getLogger(__name__)


def _plan_from_dict(data: dict) -> SplitPlan:
    try:
        return SplitPlan.model_validate(data)
    except ValidationError as e:
        raise PlanParseError(f"Plan does not match the expected schema:\n{e}")


def parse_plan_response(raw_response: str) -> SplitPlan:
    """Parse planner output into a SplitPlan.

    Args:
        raw_response: Raw text; may wrap the JSON object in prose or fences.

    Returns:
        The parsed plan (not yet validated against a snapshot).

    Raises:
        JSONParseError: If no JSON object can be decoded.
        PlanParseError: If the object is not a split plan.
    """
    return _plan_from_dict(parse_json_object(raw_response))


def load_plan_file(path: Path) -> SplitPlan:
    """Load a plan previously written by save_plan_file (or by hand)."""
    try:
        text = Path(path).read_text(encoding="utf-8")
    except OSError as e:
        raise PlanParseError(f"Could not read plan file {path}: {e}")
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise PlanParseError(f"Plan file {path} is not valid JSON: {e}")
    if not isinstance(data, dict):
        raise PlanParseError(f"Plan file {path} must contain a JSON object")
    return _plan_from_dict(data)


def save_plan_file(plan: SplitPlan, path: Path) -> Path:
    path = Path(path)
    path.write_text(plan.model_dump_json(indent=2) + "\n", encoding="utf-8")
    return path


def request_plan(
    provider: BaseLLMProvider,
    snapshot: Snapshot,
    branch: str = "",
    recent_commits: Optional[list[str]] = None,
    max_attempts: Optional[int] = None,
    excerpt_lines: Optional[int] = None,
) -> SplitPlan:
    """Ask the planner for a plan that validates against the snapshot.

    After a parse or validation failure the planner is asked again with a
    corrective prompt listing the errors and every valid id.

    Args:
        provider: Text-completion capability.
        snapshot: Snapshot to be split.
        branch: Current branch name (context only).
        recent_commits: Recent commit subjects (context only).
        max_attempts: Total requests allowed (defaults to configuration).
        excerpt_lines: Maximum changed lines shown per hunk.

    Returns:
        A SplitPlan that passed validation.

    Raises:
        PlanValidationError: If the last plan still failed validation.
        JSONParseError: If the last response could not be parsed.
        LLMError: If the provider call itself fails.
    """
    max_attempts = max(1, max_attempts or _config.MAX_PLAN_ATTEMPTS)
    system_prompt = SPLIT_SYSTEM_PROMPT
    user_prompt = build_split_prompt(snapshot, branch, recent_commits or [], excerpt_lines)

    attempt = 1
    while True:
        result = provider.generate_raw(system_prompt, user_prompt)
        logger.info(
            "Planner attempt %d/%d: %s, %d input / %d output tokens",
            attempt,
            max_attempts,
            result.model,
            result.input_tokens,
            result.output_tokens,
        )
        logger.debug("Planner response:\n%s", result.raw_response)

        plan: Optional[SplitPlan] = None
        try:
            plan = parse_plan_response(result.raw_response)
            errors = validate_plan(plan, snapshot)
        except JSONParseError as e:
            if attempt == max_attempts:
                raise
            errors = [str(e).split("\n", 1)[0]]

        if not errors:
            return plan

        if attempt == max_attempts:
            raise PlanValidationError(errors)

        logger.warning("Plan rejected with %d error(s); asking for a corrected plan", len(errors))
        system_prompt = SPLIT_RETRY_SYSTEM_PROMPT
        user_prompt = build_split_retry_prompt(snapshot, plan, errors, excerpt_lines)
        attempt += 1
