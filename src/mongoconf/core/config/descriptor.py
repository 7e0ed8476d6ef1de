"""Property descriptors: one declared, typed configuration value."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .coercion import Parser
from .errors import InvalidValueError


class _NoDefault:
    """Marker for descriptors that declare no default value."""

    def __repr__(self) -> str:
        return "NO_DEFAULT"


NO_DEFAULT: Any = _NoDefault()


@dataclass(frozen=True)
class PropertyDescriptor:
    """Metadata and parser for one configuration property.

    ``name`` is normalized to lowercase here, once, so every lookup built
    from it is case-insensitive without re-normalizing at lookup time.
    Defaults are declared as typed values and go through ``parser`` like
    any raw value would.
    """

    name: str
    parser: Parser
    value_type: type
    default: Any = NO_DEFAULT
    required: bool = False
    description: str = ""
    since: str = ""
    map_valued: bool = field(default=False, repr=False)

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name.strip():
            raise ValueError("Property name must be a non-empty string")
        object.__setattr__(self, "name", self.name.strip().lower())
        if self.required and self.has_default:
            raise ValueError(f"Required property '{self.name}' cannot declare a default")

    @property
    def has_default(self) -> bool:
        return self.default is not NO_DEFAULT

    def parse(self, raw: Any) -> Any:
        try:
            return self.parser(raw)
        except ValueError as exc:
            raise InvalidValueError(self.name, raw, str(exc)) from None

    def parsed_default(self) -> Any:
        if not self.has_default:
            raise LookupError(f"Property '{self.name}' has no default")
        return self.parse(self.default)
