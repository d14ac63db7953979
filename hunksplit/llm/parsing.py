"""JSON extraction utilities for LLM responses.

Contains:
- extract_json_object: Find the first balanced top-level {...} in text
- parse_json_object: Extract and decode that object
"""

import json
from typing import Optional

from hunksplit.llm.exceptions import JSONParseError


def extract_json_object(text: str) -> Optional[str]:
    """Find the first balanced top-level JSON object in arbitrary text.

    Braces inside string literals (including escaped quotes) do not count
    towards nesting, so prose or code fences around the object are ignored.

    Args:
        text: Raw model output.

    Returns:
        The object's source text, or None if no balanced object exists.
    """
    start = text.find("{")
    while start != -1:
        depth = 0
        in_string = False
        escaped = False
        for pos in range(start, len(text)):
            char = text[pos]
            if in_string:
                if escaped:
                    escaped = False
                elif char == "\\":
                    escaped = True
                elif char == '"':
                    in_string = False
                continue
            if char == '"':
                in_string = True
            elif char == "{":
                depth += 1
            elif char == "}":
                depth -= 1
                if depth == 0:
                    return text[start:pos + 1]
        # Unbalanced from this brace; try the next one
        start = text.find("{", start + 1)
    return None


def parse_json_object(raw_response: str) -> dict:
    """Decode the first JSON object embedded in a model reply.

    Raises:
        JSONParseError: If the reply holds no object or it does not decode.
    """
    candidate = extract_json_object(raw_response)
    if candidate is None:
        raise JSONParseError(f"LLM response does not contain a JSON object:\n{raw_response}")

    try:
        parsed = json.loads(candidate)
    except json.JSONDecodeError as e:
        raise JSONParseError(f"Failed to parse JSON object ({e}):\n{candidate}") from e

    if not isinstance(parsed, dict):
        raise JSONParseError(f"Expected a JSON object, got {type(parsed).__name__}")
    return parsed
