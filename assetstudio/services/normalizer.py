"""Normalize loosely-structured translation payloads.

The upstream service does not commit to one response shape. Translations may
sit under `translations`, `result` or `data`, inside a JSON-encoded `output`
or `content` string, or at the root; per-language values may be arrays,
wrapper objects, or objects keyed "0", "1", ... . Each probe below is total:
a wrong shape yields None and the search moves on to the next location.
"""
from __future__ import annotations

import json
import logging
import re
from typing import Any, Iterator, Sequence

from assetstudio.core.exceptions import NormalizationFailed
from assetstudio.core.metrics import record_normalization_failure, record_normalized_language
from assetstudio.services.json_parser import parse_maybe_json

logger = logging.getLogger(__name__)

NESTED_KEYS = ("translations", "result", "data")
ENCODED_KEYS = ("output", "content")
LIST_WRAPPER_KEYS = ("translations", "texts", "items")
MAX_ENCODED_DEPTH = 2

_NUMERIC_KEY = re.compile(r"[0-9]+")


def _as_text(item: Any) -> str:
    if item is None:
        return ""
    if isinstance(item, str):
        return item
    if isinstance(item, bool):
        return "true" if item else "false"
    if isinstance(item, float) and item.is_integer():
        return str(int(item))
    if isinstance(item, (dict, list)):
        return json.dumps(item, ensure_ascii=False)
    return str(item)


def candidate_sources(payload: Any, depth: int = 0) -> Iterator[tuple[str, dict]]:
    """Yield (location, object) pairs in priority order.

    An object decoded from an `output`/`content` string is expanded through
    the same order, so `{"output": "{\\"result\\": {...}}"}` is searched under
    `output.result` before falling back to the root.
    """
    if not isinstance(payload, dict):
        return
    for key in NESTED_KEYS:
        value = parse_maybe_json(payload.get(key))
        if isinstance(value, dict):
            yield key, value
    for key in ENCODED_KEYS:
        value = payload.get(key)
        if not isinstance(value, str):
            continue
        decoded = parse_maybe_json(value)
        if not isinstance(decoded, dict):
            continue
        if depth < MAX_ENCODED_DEPTH:
            for name, inner in candidate_sources(decoded, depth + 1):
                yield f"{key}.{name}", inner
        else:
            yield key, decoded
    yield "root", payload


def language_value(source: dict, code: str) -> Any:
    value = source.get(code)
    if value is None:
        nested = source.get("translations")
        if isinstance(nested, dict):
            value = nested.get(code)
    return value


def coerce_text_list(value: Any, text_count: int) -> list[str] | None:
    """Read one language's value as an ordered list of at most `text_count` strings."""
    if isinstance(value, list):
        return [_as_text(item) for item in value[:text_count]]
    if not isinstance(value, dict):
        return None

    for key in LIST_WRAPPER_KEYS:
        wrapped = value.get(key)
        if isinstance(wrapped, list):
            return [_as_text(item) for item in wrapped[:text_count]]

    # Keys like "1" and "01" tie; order on the index alone.
    numeric = sorted(
        ((int(key), item) for key, item in value.items() if _NUMERIC_KEY.fullmatch(key)),
        key=lambda pair: pair[0],
    )
    if numeric:
        return [_as_text(item) for _, item in numeric[:text_count]]
    return None


def collect_translations(
    payload: Any,
    target_languages: Sequence[str],
    text_count: int,
) -> dict[str, list[str]]:
    """Resolve as many requested languages as possible; may return an empty dict."""
    resolved: dict[str, list[str]] = {}
    if text_count < 1:
        return resolved

    for location, source in candidate_sources(payload):
        for code in target_languages:
            if code in resolved:
                continue
            texts = coerce_text_list(language_value(source, code), text_count)
            if texts is not None and len(texts) == text_count:
                resolved[code] = texts
                record_normalized_language(location)
                logger.debug("language_resolved", extra={"language_code": code, "candidate": location})
        if len(resolved) == len(set(target_languages)):
            break
    return resolved


def normalize_translations(
    payload: Any,
    target_languages: Sequence[str],
    text_count: int,
) -> dict[str, list[str]]:
    """Canonical `{language code: [text, ...]}` with exactly `text_count` entries each.

    Raises NormalizationFailed when no requested language resolves. Callers
    must check which codes are present; full coverage is not guaranteed.
    """
    resolved = collect_translations(payload, target_languages, text_count)
    if not resolved:
        record_normalization_failure()
        raise NormalizationFailed(
            "could not normalize translated text from the upstream response",
            detail="Translation failed: unexpected response shape.",
        )
    missing = [code for code in target_languages if code not in resolved]
    if missing:
        logger.info("languages_unresolved", extra={"missing": missing})
    return {code: resolved[code] for code in target_languages if code in resolved}
