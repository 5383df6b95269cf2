"""Turn provider responses of any shape into plain transcript text."""

from __future__ import annotations

import json
from collections.abc import Iterator
from typing import Callable, Optional

_MISSING = object()


def _materialized(value: object) -> object:
    if isinstance(value, Iterator):
        return list(value)
    return value


def _join_fragments(value: object) -> Optional[str]:
    if isinstance(value, (list, tuple)) and all(isinstance(part, str) for part in value):
        return "".join(value)
    return None


def _plain_text(value: object) -> Optional[str]:
    if isinstance(value, str):
        return value
    return None


def _text_field(value: object) -> Optional[str]:
    if isinstance(value, dict):
        text = value.get("text", _MISSING)
    else:
        text = getattr(value, "text", _MISSING)
    if text is _MISSING:
        return None
    text = _materialized(text)
    for matcher in (_join_fragments, _plain_text):
        result = matcher(text)
        if result is not None:
            return result
    return None


def _serialized(value: object) -> Optional[str]:
    try:
        return json.dumps(value, ensure_ascii=False, default=str)
    except (TypeError, ValueError):
        return str(value)


# Applied in order; the first matcher returning a string wins.
MATCHERS: tuple[Callable[[object], Optional[str]], ...] = (
    _join_fragments,
    _plain_text,
    _text_field,
    _serialized,
)


def normalize_transcript(raw: object) -> str:
    if raw is None:
        return ""
    raw = _materialized(raw)
    for matcher in MATCHERS:
        result = matcher(raw)
        if result is not None:
            return result
    return ""
