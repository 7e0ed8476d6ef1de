"""Read preference sub-config: a mode name plus optional tag sets."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Tuple

from .coercion import choice_parser, parse_tag_sets
from .errors import InvalidValueError

NAME_PROPERTY = "readpreference.name"
TAG_SETS_PROPERTY = "readpreference.tagsets"

PRIMARY = "primary"
READ_PREFERENCE_MODES = (
    PRIMARY,
    "primaryPreferred",
    "secondary",
    "secondaryPreferred",
    "nearest",
)

parse_read_preference_name = choice_parser(READ_PREFERENCE_MODES)


@dataclass(frozen=True)
class ReadPreferenceConfig:
    name: str = PRIMARY
    tag_sets: Tuple[Mapping[str, str], ...] = field(default_factory=tuple)

    @property
    def is_tagged(self) -> bool:
        return any(self.tag_sets)

    def to_document(self) -> Dict[str, Any]:
        document: Dict[str, Any] = {"mode": self.name}
        if self.tag_sets:
            document["tags"] = [dict(tag_set) for tag_set in self.tag_sets]
        return document


def build_read_preference(values: Mapping[str, Any]) -> ReadPreferenceConfig:
    """Build the read preference from resolved values.

    The mode is resolved first. Missing tag sets mean no tags; tag sets on
    the ``primary`` mode are rejected since the server cannot honour them.
    """
    name = values.get(NAME_PROPERTY) or PRIMARY
    raw_tag_sets = values.get(TAG_SETS_PROPERTY)
    if raw_tag_sets is None:
        tag_sets: List[Dict[str, str]] = []
    else:
        try:
            tag_sets = parse_tag_sets(raw_tag_sets)
        except ValueError as exc:
            raise InvalidValueError(TAG_SETS_PROPERTY, raw_tag_sets, str(exc)) from None
    if name == PRIMARY and any(tag_sets):
        raise InvalidValueError(
            TAG_SETS_PROPERTY, raw_tag_sets, "tag sets cannot be used with the primary read preference"
        )
    return ReadPreferenceConfig(
        name=name, tag_sets=tuple(MappingProxyType(tag_set) for tag_set in tag_sets)
    )
