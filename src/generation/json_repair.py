"""
Defensive parsing of semi-structured model output.

Models asked for "ONLY a JSON array" still wrap it in code fences, leave
trailing commas, or add a sentence of prose around it. The repair chain
tries a direct parse first and then applies, cumulatively and in order:

1. strip surrounding code-fence wrappers
2. remove trailing commas before closing brackets
3. keep only the span between the first '[' and the last ']'

Already-valid input never reaches a repair step, so repairs cannot change
how well-formed output parses.
"""
from __future__ import annotations

import json
import re
from typing import Any, Callable, Optional

from src.core.exceptions import StructuredOutputError

_FENCE_OPEN = re.compile(r"^\s*```[\w-]*[ \t]*\r?\n?")
_FENCE_CLOSE = re.compile(r"\r?\n?[ \t]*```\s*$")
_TRAILING_COMMA = re.compile(r",\s*([\]}])")

# Keys a model sometimes wraps the question array in
_WRAPPER_KEYS = ("questions", "items", "results", "data")


def strip_code_fences(raw: str) -> str:
    """Remove a leading ```json (or bare ```) line and a trailing ``` fence."""
    text = raw.strip()
    text = _FENCE_OPEN.sub("", text, count=1)
    text = _FENCE_CLOSE.sub("", text, count=1)
    return text.strip()


def remove_trailing_commas(raw: str) -> str:
    """Drop commas that directly precede a closing bracket or brace."""
    return _TRAILING_COMMA.sub(r"\1", raw)


def extract_bracketed(raw: str, open_char: str = "[", close_char: str = "]") -> Optional[str]:
    """Return the span from the first ``open_char`` to the last ``close_char``, if any."""
    start = raw.find(open_char)
    end = raw.rfind(close_char)
    if start == -1 or end == -1 or end <= start:
        return None
    return raw[start:end + 1]


def _try_load(text: Optional[str]) -> tuple[bool, Any]:
    if text is None:
        return False, None
    try:
        return True, json.loads(text)
    except (json.JSONDecodeError, ValueError, RecursionError):
        # RecursionError: pathologically nested input
        return False, None


def _unwrap_array(data: Any) -> Optional[list]:
    if isinstance(data, list):
        return data
    if isinstance(data, dict):
        for key in _WRAPPER_KEYS:
            if isinstance(data.get(key), list):
                return data[key]
    return None


def _repair_chain(raw: str, open_char: str, close_char: str) -> Any:
    ok, data = _try_load(raw)
    if ok:
        return data

    text = raw
    steps: list[Callable[[str], Optional[str]]] = [
        strip_code_fences,
        remove_trailing_commas,
        lambda t: extract_bracketed(t, open_char, close_char),
    ]
    for step in steps:
        repaired = step(text)
        if repaired is None:
            break
        text = repaired
        ok, data = _try_load(text)
        if ok:
            return data

    raise StructuredOutputError(
        "Failed to parse structured output from model",
        raw_excerpt=raw[:200],
    )


def parse_json_array(raw: str) -> list:
    """
    Parse model output into a JSON array, repairing it if needed.

    Raises:
        StructuredOutputError: no repair attempt produced an array
    """
    if raw is None or not raw.strip():
        raise StructuredOutputError("Empty model output", raw_excerpt="")

    data = _repair_chain(raw, "[", "]")
    array = _unwrap_array(data)
    if array is None:
        raise StructuredOutputError(
            f"Expected a JSON array, got {type(data).__name__}",
            raw_excerpt=raw[:200],
        )
    return array


def parse_json_object(raw: str) -> dict:
    """
    Parse model output into a JSON object using the same repair chain.

    Raises:
        StructuredOutputError: no repair attempt produced an object
    """
    if raw is None or not raw.strip():
        raise StructuredOutputError("Empty model output", raw_excerpt="")

    data = _repair_chain(raw, "{", "}")
    if not isinstance(data, dict):
        raise StructuredOutputError(
            f"Expected a JSON object, got {type(data).__name__}",
            raw_excerpt=raw[:200],
        )
    return data
