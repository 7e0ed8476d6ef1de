"""Read concern sub-config."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from .coercion import choice_parser

LEVEL_PROPERTY = "readconcern.level"

# DEFAULT leaves the level to the server
DEFAULT_LEVEL = "DEFAULT"
READ_CONCERN_LEVELS = (
    DEFAULT_LEVEL,
    "local",
    "majority",
    "linearizable",
    "available",
    "snapshot",
)

parse_read_concern_level = choice_parser(READ_CONCERN_LEVELS)


@dataclass(frozen=True)
class ReadConcernConfig:
    level: Optional[str] = None

    @property
    def is_server_default(self) -> bool:
        return self.level is None

    def to_document(self) -> Dict[str, Any]:
        return {} if self.level is None else {"level": self.level}


def build_read_concern(values: Mapping[str, Any]) -> ReadConcernConfig:
    level = values.get(LEVEL_PROPERTY)
    if level is None or level == DEFAULT_LEVEL:
        return ReadConcernConfig()
    return ReadConcernConfig(level=level)
