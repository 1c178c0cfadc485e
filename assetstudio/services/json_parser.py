import json
import logging
from typing import Any

logger = logging.getLogger(__name__)


def extract_json_object(text: str) -> str | None:
    """Extract the first balanced JSON object using bracket matching."""
    start = text.find("{")
    if start == -1:
        return None

    depth = 0
    in_string = False
    escape_next = False

    for i, char in enumerate(text[start:], start):
        if escape_next:
            escape_next = False
            continue
        if char == "\\":
            escape_next = True
            continue
        if char == '"':
            in_string = not in_string
            continue
        if in_string:
            continue
        if char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return text[start : i + 1]

    return None


def loads_lenient(text: str) -> Any | None:
    """Parse text as JSON, falling back to its first balanced object.

    Returns None when neither attempt yields JSON.
    """
    stripped = text.strip()
    if not stripped:
        return None
    try:
        return json.loads(stripped)
    except json.JSONDecodeError:
        pass

    obj_text = extract_json_object(stripped)
    if obj_text is None:
        return None
    try:
        return json.loads(obj_text)
    except json.JSONDecodeError:
        logger.debug("json_object_unparseable preview=%s", obj_text[:120])
        return None


def parse_maybe_json(value: Any) -> Any:
    """Strings are parsed leniently; every other value is returned unchanged."""
    if not isinstance(value, str):
        return value
    return loads_lenient(value)
