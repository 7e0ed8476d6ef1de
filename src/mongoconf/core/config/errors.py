"""Exception hierarchy for registry construction and config resolution.

Build-time errors (duplicate names, colliding fully-qualified names, bad
prefixes, writes to a frozen registry) signal programmer mistakes in a
registry declaration. Resolution-time errors (missing required values,
values that fail to parse) abort one resolution pass and are surfaced to
the caller as a single typed error.
"""

from __future__ import annotations

from typing import Any


class ConfigError(Exception):
    """Base class for every configuration error raised by mongoconf."""


class DuplicatePropertyError(ConfigError):
    def __init__(self, name: str, registry_prefix: str = "") -> None:
        self.name = name
        self.registry_prefix = registry_prefix
        where = f" in registry '{registry_prefix}'" if registry_prefix else ""
        super().__init__(f"Property '{name}' is already registered{where}.")


class AmbiguousPropertyCollisionError(ConfigError):
    def __init__(
        self,
        fully_qualified_name: str,
        existing_type: type,
        new_type: type,
    ) -> None:
        self.fully_qualified_name = fully_qualified_name
        self.existing_type = existing_type
        self.new_type = new_type
        super().__init__(
            f"Property '{fully_qualified_name}' is declared as both "
            f"{existing_type.__name__} and {new_type.__name__}."
        )


class InvalidPrefixError(ConfigError):
    def __init__(self, prefix: str, reason: str) -> None:
        self.prefix = prefix
        self.reason = reason
        super().__init__(f"Invalid registry prefix '{prefix}': {reason}")


class RegistryFrozenError(ConfigError):
    def __init__(self, prefix: str) -> None:
        self.prefix = prefix
        super().__init__(f"Registry '{prefix}' is frozen; no more properties can be registered.")


class MissingRequiredError(ConfigError):
    """A required property was not supplied by any source layer."""

    def __init__(self, name: str, candidates: tuple[str, ...] = ()) -> None:
        self.name = name
        self.candidates = candidates
        message = f"Missing required property '{name}'."
        if candidates:
            message += f" Set one of: {', '.join(candidates)}."
        super().__init__(message)


class InvalidValueError(ConfigError):
    """A raw value could not be parsed into the property's type."""

    def __init__(self, name: str, raw: Any, reason: str, source: str | None = None) -> None:
        self.name = name
        self.raw = raw
        self.reason = reason
        self.source = source
        message = f"Invalid value {raw!r} for property '{name}': {reason}"
        if source:
            message += f" (from {source})"
        super().__init__(message)

    def with_source(self, source: str) -> "InvalidValueError":
        return InvalidValueError(self.name, self.raw, self.reason, source=source)
