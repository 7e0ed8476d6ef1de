"""Source layers: ordered providers of raw configuration values.

A layer only has to answer ``lookup(fully_qualified_name)``. Layers backed
by an enumerable store also implement ``entries_with_prefix`` so that
map-valued properties can be given as a family of prefixed keys, e.g.
``spark.mongodb.input.partitioneroptions.partitionkey``.

Every layer snapshots its source when it is constructed, so resolving
against the same layer twice always sees the same values.
"""

from __future__ import annotations

import json
import os
import re
from abc import ABC, abstractmethod
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, TYPE_CHECKING
from urllib.parse import parse_qs, unquote, urlsplit

from .coercion import parse_connection_string
from .errors import ConfigError, InvalidValueError
from .registry import flatten

if TYPE_CHECKING:
    from .composite import CompositeConfig
    from .registry import PropertyRegistry

_ENV_UNSAFE = re.compile(r"[^A-Za-z0-9]")
_CONF_LINE = re.compile(r"^(?P<key>[^\s=]+)(?:\s*=\s*|\s+)?(?P<value>.*)$")


class SourceLayer(ABC):
    """A named provider of raw values keyed by fully-qualified name."""

    def __init__(self, layer_id: str) -> None:
        self.id = layer_id

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self.id!r})"

    @abstractmethod
    def lookup(self, fully_qualified_name: str) -> Optional[Any]:
        """Return the raw value for ``fully_qualified_name`` or None."""

    def entries_with_prefix(self, prefix: str) -> Dict[str, Any]:
        """Return ``{suffix: raw}`` for every key under ``prefix``."""
        return {}


class MappingLayer(SourceLayer):
    """In-memory layer over a mapping; keys are matched case-insensitively."""

    def __init__(self, layer_id: str, values: Mapping[str, Any]) -> None:
        super().__init__(layer_id)
        normalized: Dict[str, Any] = {}
        for key, value in values.items():
            normalized[self._normalize_key(str(key))] = value
        self._values = MappingProxyType(normalized)

    def _normalize_key(self, key: str) -> str:
        return key.strip().lower()

    def lookup(self, fully_qualified_name: str) -> Optional[Any]:
        return self._values.get(fully_qualified_name.lower())

    def entries_with_prefix(self, prefix: str) -> Dict[str, Any]:
        prefix = prefix.lower()
        return {
            key[len(prefix):]: value
            for key, value in self._values.items()
            if key.startswith(prefix) and len(key) > len(prefix)
        }

    def keys(self) -> List[str]:
        return list(self._values.keys())


class OptionsLayer(MappingLayer):
    """Explicit per-call options.

    Keys may be given with or without the registry prefix: ``sampleSize``
    and ``spark.mongodb.input.sampleSize`` address the same property. Keys
    already in the prefix's root namespace (``spark.`` for the connector
    registries) are kept as they are.
    """

    def __init__(
        self,
        options: Mapping[str, Any],
        prefix: str,
        layer_id: str = "options",
    ) -> None:
        self.prefix = prefix.lower()
        self.root = self.prefix.split(".", 1)[0] + "."
        super().__init__(layer_id, options)

    def _normalize_key(self, key: str) -> str:
        lowered = key.strip().lower()
        if lowered.startswith(self.root):
            return lowered
        return self.prefix + lowered


class EnvironmentLayer(SourceLayer):
    """Environment variables: ``spark.mongodb.input.samplesize`` is read
    from ``SPARK_MONGODB_INPUT_SAMPLESIZE``."""

    def __init__(
        self,
        environ: Optional[Mapping[str, str]] = None,
        layer_id: str = "environment",
    ) -> None:
        super().__init__(layer_id)
        source = os.environ if environ is None else environ
        self._environ = MappingProxyType({key.upper(): value for key, value in source.items()})

    @staticmethod
    def variable_name(fully_qualified_name: str) -> str:
        return _ENV_UNSAFE.sub("_", fully_qualified_name).upper()

    def lookup(self, fully_qualified_name: str) -> Optional[Any]:
        return self._environ.get(self.variable_name(fully_qualified_name))

    def entries_with_prefix(self, prefix: str) -> Dict[str, Any]:
        variable_prefix = self.variable_name(prefix)
        return {
            key[len(variable_prefix):].lower(): value
            for key, value in self._environ.items()
            if key.startswith(variable_prefix) and len(key) > len(variable_prefix)
        }


class SparkConfFileLayer(MappingLayer):
    """A ``spark-defaults.conf`` style file: ``key value`` or ``key=value``
    per line, ``#`` starts a comment line."""

    def __init__(self, path: Path | str, layer_id: Optional[str] = None) -> None:
        self.path = Path(path)
        super().__init__(layer_id or f"file:{self.path.name}", self._read(self.path))

    @staticmethod
    def _read(path: Path) -> Dict[str, str]:
        values: Dict[str, str] = {}
        for line_number, line in enumerate(path.read_text(encoding="utf-8").splitlines(), 1):
            stripped = line.strip()
            if not stripped or stripped.startswith("#"):
                continue
            match = _CONF_LINE.match(stripped)
            if match is None:
                raise ConfigError(f"{path}:{line_number}: cannot parse line {line!r}")
            values[match.group("key")] = match.group("value").strip()
        return values


class JsonFileLayer(MappingLayer):
    """A JSON object; nested objects are flattened to dotted keys.

    Each nested object is also served whole under its own key, so
    document-valued properties (``shardkey``) and map-valued ones
    (``partitioneroptions``) may be written as JSON objects.
    """

    def __init__(self, path: Path | str, layer_id: Optional[str] = None) -> None:
        self.path = Path(path)
        super().__init__(layer_id or f"file:{self.path.name}", self._read(self.path))

    @staticmethod
    def _read(path: Path) -> Dict[str, Any]:
        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise ConfigError(f"{path}: not valid JSON ({exc.msg})") from exc
        if not isinstance(payload, dict):
            raise ConfigError(f"{path}: expected a JSON object")
        if "config" in payload and isinstance(payload["config"], dict):
            payload = payload["config"]
        return flatten(payload, keep_branches=True)


def _owner_key(name: str, prefix: str, registry: Optional["PropertyRegistry"]) -> str:
    """Qualify ``name`` with the prefix of the registry that declares it."""
    if registry is not None:
        for owner in (registry, *registry.ancestors()):
            if owner.declares(name):
                return owner.fully_qualified_name(name)
    return prefix + name


# Connection string option -> property name, matched case-insensitively
_URI_OPTIONS = {
    "readpreference": "readpreference.name",
    "readconcernlevel": "readconcern.level",
    "localthresholdms": "localthreshold",
    "w": "writeconcern.w",
    "journal": "writeconcern.journal",
    "wtimeoutms": "writeconcern.wtimeoutms",
}


class ConnectionStringLayer(MappingLayer):
    """Values implied by a MongoDB connection string.

    ``mongodb://host/db.coll?readPreference=secondary`` supplies
    ``database=db``, ``collection=coll`` and ``readpreference.name=secondary``
    under ``prefix``. Repeated ``readPreferenceTags`` options become the
    tag set list, in order.

    When ``registry`` is given, each value is keyed under the prefix of the
    registry that declares the property, so an inherited ``localthreshold``
    lands on ``spark.mongodb.localthreshold`` and never outranks an
    explicitly set value.
    """

    def __init__(
        self,
        uri: str,
        prefix: str,
        layer_id: str = "connection-string",
        registry: Optional["PropertyRegistry"] = None,
    ) -> None:
        self.uri = uri
        prefix = prefix.lower()
        values = {
            _owner_key(name, prefix, registry): value
            for name, value in self._parse(uri).items()
        }
        super().__init__(layer_id, values)

    @staticmethod
    def _parse(uri: str) -> Dict[str, str]:
        try:
            parse_connection_string(uri)
        except ValueError as exc:
            raise InvalidValueError("uri", uri, str(exc)) from None

        parts = urlsplit(uri)
        values: Dict[str, str] = {}
        namespace = unquote(parts.path.lstrip("/"))
        if namespace:
            database, _, collection = namespace.partition(".")
            if database:
                values["database"] = database
            if collection:
                values["collection"] = collection

        options = parse_qs(parts.query, keep_blank_values=True)
        tag_sets: List[Dict[str, str]] = []
        for option, entries in options.items():
            key = option.lower()
            if key == "readpreferencetags":
                tag_sets.extend(ConnectionStringLayer._parse_tags(uri, entry) for entry in entries)
            elif key in _URI_OPTIONS:
                values[_URI_OPTIONS[key]] = entries[-1]
        if tag_sets:
            values["readpreference.tagsets"] = json.dumps(tag_sets)
        return values

    @staticmethod
    def _parse_tags(uri: str, entry: str) -> Dict[str, str]:
        tags: Dict[str, str] = {}
        for pair in filter(None, entry.split(",")):
            tag, separator, value = pair.partition(":")
            if not separator or not tag:
                raise InvalidValueError("uri", uri, f"malformed readPreferenceTags entry {entry!r}")
            tags[tag] = value
        return tags


class ResolvedConfigLayer(MappingLayer):
    """Serves the typed values of a resolved config back as a layer.

    Values are keyed under the prefix of the declaring registry, like
    ``ConnectionStringLayer``, so new options given under a parent prefix
    still win over them.
    """

    def __init__(self, config: "CompositeConfig", layer_id: str = "resolved") -> None:
        registry = config.registry
        values = {
            _owner_key(name, registry.prefix, registry): value
            for name, value in config.to_dict().items()
            if not config.is_absent(name)
        }
        super().__init__(layer_id, values)
