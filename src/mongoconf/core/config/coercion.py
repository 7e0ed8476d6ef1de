"""Value parsers for configuration properties.

Each parser takes a raw value (a string from a settings store, or an
already-typed Python value such as a declared default) and returns the
typed value. Malformed input raises ``ValueError`` with a short reason;
``PropertyDescriptor.parse`` turns that into an ``InvalidValueError``.
"""

from __future__ import annotations

import json
import re
from typing import Any, Callable, Dict, Iterable, List, Mapping

Parser = Callable[[Any], Any]

_TRUE_WORDS = {"1", "true", "yes", "on"}
_FALSE_WORDS = {"0", "false", "no", "off"}

# Unquoted document keys as written in shell syntax, e.g. {_id: 1}
_BARE_KEY = re.compile(r'([{,]\s*)([A-Za-z_$][\w$.]*)(\s*:)')


def parse_str(value: Any) -> str:
    if not isinstance(value, str):
        raise ValueError(f"expected a string, got {type(value).__name__}")
    stripped = value.strip()
    if not stripped:
        raise ValueError("must not be empty")
    return stripped


def parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_WORDS:
            return True
        if lowered in _FALSE_WORDS:
            return False
    raise ValueError("expected a boolean (true/false)")


def _to_int(value: Any) -> int:
    if isinstance(value, bool):
        raise ValueError("expected an integer, got a boolean")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            raise ValueError("expected an integer") from None
    raise ValueError(f"expected an integer, got {type(value).__name__}")


def int_parser(minimum: int | None = None) -> Parser:
    """Build an integer parser with an optional inclusive lower bound."""

    def parse_int(value: Any) -> int:
        number = _to_int(value)
        if minimum is not None and number < minimum:
            raise ValueError(f"must be >= {minimum}")
        return number

    return parse_int


parse_positive_int = int_parser(minimum=1)
parse_non_negative_int = int_parser(minimum=0)


def choice_parser(choices: Iterable[str]) -> Parser:
    """Build a case-insensitive parser returning the canonical spelling."""
    canonical = {choice.lower(): choice for choice in choices}

    def parse_choice(value: Any) -> str:
        text = parse_str(value)
        try:
            return canonical[text.lower()]
        except KeyError:
            raise ValueError(
                "must be one of: " + ", ".join(canonical.values())
            ) from None

    return parse_choice


def _load_json(value: str, expected: type) -> Any:
    try:
        parsed = json.loads(value)
    except json.JSONDecodeError as exc:
        raise ValueError(f"not valid JSON ({exc.msg})") from None
    if not isinstance(parsed, expected):
        raise ValueError(f"expected a JSON {'object' if expected is dict else 'array'}")
    return parsed


def parse_string_map(value: Any) -> Dict[str, str]:
    """Parse a string-to-string map; keys are normalized to lowercase."""
    if isinstance(value, str):
        trimmed = value.strip()
        value = _load_json(trimmed, dict) if trimmed else {}
    if not isinstance(value, Mapping):
        raise ValueError(f"expected a mapping, got {type(value).__name__}")
    parsed: Dict[str, str] = {}
    for key, item in value.items():
        if not isinstance(key, str) or not key.strip():
            raise ValueError("map keys must be non-empty strings")
        if isinstance(item, (Mapping, list, tuple)) or item is None:
            raise ValueError(f"value for '{key}' must be a scalar")
        if isinstance(item, bool):
            item = "true" if item else "false"
        parsed[key.strip().lower()] = str(item)
    return parsed


def parse_document(value: Any) -> Dict[str, Any]:
    """Parse a JSON document, accepting shell-style unquoted keys."""
    if isinstance(value, Mapping):
        return dict(value)
    text = parse_str(value)
    return _load_json(_BARE_KEY.sub(r'\1"\2"\3', text), dict)


def parse_tag_sets(value: Any) -> List[Dict[str, str]]:
    """Parse read preference tag sets: a JSON array of string documents."""
    if isinstance(value, str):
        trimmed = value.strip()
        value = _load_json(trimmed, list) if trimmed else []
    if not isinstance(value, (list, tuple)):
        raise ValueError(f"expected a list of tag documents, got {type(value).__name__}")
    tag_sets: List[Dict[str, str]] = []
    for position, tag_set in enumerate(value):
        if not isinstance(tag_set, Mapping):
            raise ValueError(f"tag set #{position} must be a document")
        for key, tag in tag_set.items():
            if not isinstance(key, str) or not isinstance(tag, str):
                raise ValueError(f"tag set #{position} must map strings to strings")
        tag_sets.append(dict(tag_set))
    return tag_sets


def parse_connection_string(value: Any) -> str:
    text = parse_str(value)
    if not text.startswith(("mongodb://", "mongodb+srv://")):
        raise ValueError("must start with mongodb:// or mongodb+srv://")
    return text


def parse_write_concern_w(value: Any) -> int | str:
    """``w`` is either a non-negative acknowledgement count or a tag name."""
    if isinstance(value, str) and not value.strip().lstrip("-").isdigit():
        return parse_str(value)
    return parse_non_negative_int(value)
