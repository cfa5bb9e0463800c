"""Pull JSON payloads out of model replies"""

import json
import re
from typing import Any, Optional

_FENCED = re.compile(r"```(?:json)?\s*(.*?)\s*```", re.DOTALL)


class LLMResponseError(ValueError):
    """Model reply did not contain the expected JSON"""
    pass


def extract_json(text: Optional[str], expect: type = dict) -> Any:
    """
    Parse the JSON object (or array, with expect=list) in a model reply.

    Handles ```json fenced blocks, bare JSON, and JSON surrounded by prose.
    Raises LLMResponseError when nothing parseable of the expected type is found.
    """
    if not text or not text.strip():
        raise LLMResponseError("Empty model reply")

    candidates = [match.group(1) for match in _FENCED.finditer(text)]
    candidates.append(text.strip())

    open_char, close_char = ("[", "]") if expect is list else ("{", "}")
    start, end = text.find(open_char), text.rfind(close_char)
    if start != -1 and end > start:
        candidates.append(text[start:end + 1])

    for candidate in candidates:
        try:
            value = json.loads(candidate)
        except json.JSONDecodeError:
            continue
        if isinstance(value, expect):
            return value

    raise LLMResponseError(f"No JSON {expect.__name__} found in model reply: {text[:200]}")
