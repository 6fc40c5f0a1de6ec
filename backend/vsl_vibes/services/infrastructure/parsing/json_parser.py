"""
JSON parsing for LLM responses.

Models wrap JSON in markdown fences, prepend commentary, or emit invalid
escape sequences. ``parse_llm_json`` recovers the payload where possible and
raises ``MalformedResponseError`` when it cannot, so each pipeline stage can
route the failure into its fallback path.
"""

import json
import re
from typing import Any, Dict, List, Optional, Union

from ....core.exceptions import MalformedResponseError

JsonPayload = Union[Dict[str, Any], List[Any]]

_FENCE_PATTERN = re.compile(r"```(?:json|JSON)?\s*([\s\S]*?)```")


def strip_code_fences(text: str) -> str:
    """Return the body of the first fenced block, or the text unchanged."""
    if not text:
        return ""
    match = _FENCE_PATTERN.search(text)
    if match:
        return match.group(1).strip()
    return text.strip()


def extract_largest_balanced_json(text: str, expect_array: bool = False) -> Optional[str]:
    """Extract the largest balanced JSON object/array from text.

    Scans for balanced braces/brackets while respecting string literals and escapes.

    Args:
        text: Source text potentially containing JSON.
        expect_array: If True, only return a JSON array (starts with '[').

    Returns:
        The largest balanced JSON substring, or None if not found.
    """
    if not text:
        return None

    in_string = False
    escape = False
    stack: List[str] = []
    start_idx: Optional[int] = None
    best: Optional[str] = None

    for i, ch in enumerate(text):
        if in_string:
            if escape:
                escape = False
            elif ch == "\\":
                escape = True
            elif ch == "\"":
                in_string = False
            continue

        if ch == "\"":
            in_string = True
            continue

        if ch in "{[":
            if not stack:
                start_idx = i
            stack.append(ch)
            continue

        if ch in "}]" and stack:
            if (stack[-1] == "{") == (ch == "}"):
                stack.pop()
                if not stack and start_idx is not None:
                    candidate = text[start_idx:i + 1]
                    if expect_array and candidate.startswith("{"):
                        # Arrays may sit after a preamble object; keep looking
                        start_idx = None
                        continue
                    if best is None or len(candidate) > len(best):
                        best = candidate
                    start_idx = None
            else:
                # Mismatched closing; reset state.
                stack.clear()
                start_idx = None

    return best


def fix_json_escapes(text: str) -> str:
    """Escape lone backslashes while preserving valid JSON escapes.

    SVG paths and regex-like strings from models often contain sequences
    such as ``\\d`` that are invalid JSON.
    """
    return re.sub(r'\\(?!["\\/bfnrt]|u[0-9a-fA-F]{4})', r"\\\\", text)


def _loads(candidate: str) -> Optional[JsonPayload]:
    for attempt in (candidate, fix_json_escapes(candidate)):
        try:
            return json.loads(attempt)
        except json.JSONDecodeError:
            continue
    return None


def parse_llm_json(text: str, expect_array: bool = False) -> JsonPayload:
    """Parse the JSON payload of an LLM response.

    Args:
        text: Raw model output
        expect_array: Require a top-level JSON array

    Returns:
        The decoded object or array

    Raises:
        MalformedResponseError: when no payload of the expected shape can be recovered
    """
    if not text or not text.strip():
        raise MalformedResponseError("Empty response from model", raw=text or "")

    body = strip_code_fences(text)
    expected = list if expect_array else dict

    result = _loads(body)
    if isinstance(result, expected):
        return result

    candidate = extract_largest_balanced_json(body, expect_array=expect_array)
    if candidate:
        result = _loads(candidate)
        if isinstance(result, expected):
            return result

    shape = "array" if expect_array else "object"
    raise MalformedResponseError(f"Model response is not a JSON {shape}", raw=text)

