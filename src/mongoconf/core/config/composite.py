"""Resolved configuration values with per-property provenance."""

from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass, replace
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

from .registry import PropertyRegistry

DEFAULT_SOURCE = "default"


def freeze_value(value: Any) -> Any:
    """Read-only copy of a resolved value: mappings become proxies, lists tuples."""
    if isinstance(value, Mapping):
        return MappingProxyType({key: freeze_value(item) for key, item in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(freeze_value(item) for item in value)
    return value


def thaw_value(value: Any) -> Any:
    """Plain dict/list copy of a value made by ``freeze_value``."""
    if isinstance(value, Mapping):
        return {key: thaw_value(item) for key, item in value.items()}
    if isinstance(value, tuple):
        return [thaw_value(item) for item in value]
    return value


@dataclass(frozen=True)
class PropertyResolution:
    """How one property got its value.

    ``source`` is the id of the winning layer, ``"default"`` when the
    declared default was applied, or None when the property is absent.
    ``key`` is the fully-qualified name that matched in the winning layer
    and ``raw`` the value that layer supplied before parsing.
    """

    name: str
    value: Any
    source: Optional[str]
    key: Optional[str] = None
    raw: Any = None

    @property
    def is_absent(self) -> bool:
        return self.source is None

    @property
    def is_default(self) -> bool:
        return self.source == DEFAULT_SOURCE

    @property
    def origin(self) -> Optional[str]:
        if self.key is None:
            return self.source
        return f"{self.source}:{self.key}"


@dataclass(frozen=True)
class CompositeConfig:
    """Immutable result of one resolution pass.

    Values are keyed by canonical property name, not by fully-qualified
    name. Sub-configs (read preference, read concern, write concern) are
    built once by the resolver and cached here. Nested values are frozen
    as well: documents are read-only mappings and lists are tuples.
    """

    registry: PropertyRegistry
    values: Mapping[str, Any]
    provenance: Mapping[str, PropertyResolution]
    sub_configs: Mapping[str, Any]

    @classmethod
    def build(
        cls,
        registry: PropertyRegistry,
        resolutions: Mapping[str, PropertyResolution],
        sub_configs: Mapping[str, Any],
    ) -> "CompositeConfig":
        frozen = {
            name: replace(res, value=freeze_value(res.value), raw=freeze_value(res.raw))
            for name, res in resolutions.items()
        }
        return cls(
            registry=registry,
            values=MappingProxyType({name: res.value for name, res in frozen.items()}),
            provenance=MappingProxyType(frozen),
            sub_configs=MappingProxyType(dict(sub_configs)),
        )

    def _resolution(self, name: str) -> PropertyResolution:
        return self.provenance[name.lower()]

    def __getitem__(self, name: str) -> Any:
        return self._resolution(name).value

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self.provenance

    def get(self, name: str, default: Any = None) -> Any:
        resolution = self.provenance.get(name.lower())
        if resolution is None or resolution.is_absent:
            return default
        return resolution.value

    def source_of(self, name: str) -> Optional[str]:
        return self._resolution(name).source

    def is_absent(self, name: str) -> bool:
        return self._resolution(name).is_absent

    def is_default(self, name: str) -> bool:
        return self._resolution(name).is_default

    def sub_config(self, name: str) -> Any:
        return self.sub_configs[name]

    def to_dict(self) -> Dict[str, Any]:
        """Plain, mutable copy of the resolved values (absent ones included as None)."""
        return {name: thaw_value(value) for name, value in self.values.items()}

    def as_options(self) -> Dict[str, str]:
        """Unprefixed string options that resolve back to these values."""
        options: Dict[str, str] = {}
        for name, resolution in self.provenance.items():
            if resolution.is_absent:
                continue
            options[name] = _stringify(resolution.value)
        return options

    def fingerprint(self) -> str:
        payload = json.dumps(
            self.to_dict(), sort_keys=True, separators=(",", ":"), ensure_ascii=True, default=str
        )
        return f"sha256:{hashlib.sha256(payload.encode('utf-8')).hexdigest()}"


def _stringify(value: Any) -> str:
    value = thaw_value(value)
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        # Key order is kept: shard key documents are ordered
        return json.dumps(value)
    return str(value)
