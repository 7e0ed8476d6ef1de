"""Typed read/write configuration views consumed by the connector.

``resolve_read_config`` and ``resolve_write_config`` assemble the standard
layer stack, highest priority first:

1. explicit per-call options (prefixed or unprefixed keys)
2. host settings (a mapping or any ``SourceLayer``)
3. environment variables
4. the connection string given as ``uri`` by any of the above

and hand back a frozen ``ReadConfig`` / ``WriteConfig``. Downstream code
only ever sees these views and never the raw layers.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple, TypeVar, Union

from mongoconf.core.utils.logger import log_configuration_change

from .composite import CompositeConfig
from .layers import (
    ConnectionStringLayer,
    EnvironmentLayer,
    MappingLayer,
    OptionsLayer,
    ResolvedConfigLayer,
    SourceLayer,
)
from .read_concern import ReadConcernConfig
from .read_preference import ReadPreferenceConfig
from .registry import PropertyRegistry
from .resolver import ConfigResolver
from .schema import (
    COLLECTION_NAME_PROPERTY,
    DATABASE_NAME_PROPERTY,
    FORCE_INSERT_PROPERTY,
    LOCAL_THRESHOLD_PROPERTY,
    MAX_BATCH_SIZE_PROPERTY,
    ORDERED_PROPERTY,
    PARTITIONER_OPTIONS_PROPERTY,
    PARTITIONER_PROPERTY,
    READ_CONCERN_SUB_CONFIG,
    READ_PREFERENCE_SUB_CONFIG,
    REGISTER_SQL_HELPER_FUNCTIONS_PROPERTY,
    REPLACE_DOCUMENT_PROPERTY,
    SAMPLE_SIZE_PROPERTY,
    SCHEMA_INFER_MAP_TYPE_ENABLED_PROPERTY,
    SCHEMA_INFER_MAP_TYPE_MINIMUM_KEYS_PROPERTY,
    SHARD_KEY_PROPERTY,
    URI_PROPERTY,
    WRITE_CONCERN_SUB_CONFIG,
    get_input_registry,
    get_output_registry,
)
from .write_concern import WriteConcernConfig

Settings = Union[Mapping[str, Any], SourceLayer]
_ConfigT = TypeVar("_ConfigT", bound="_ConnectorConfig")


def _find_raw(registry: PropertyRegistry, name: str, layers: List[SourceLayer]) -> Optional[Any]:
    for key in registry.candidate_names(name):
        for layer in layers:
            raw = layer.lookup(key)
            if raw is not None:
                return raw
    return None


def build_layers(
    registry: PropertyRegistry,
    options: Optional[Mapping[str, Any]] = None,
    settings: Optional[Settings] = None,
    environ: Optional[Mapping[str, str]] = None,
    use_environment: bool = True,
) -> List[SourceLayer]:
    """Build the standard layer stack for ``registry``, highest priority first."""
    layers: List[SourceLayer] = []
    if options:
        layers.append(OptionsLayer(options, registry.prefix))
    if isinstance(settings, SourceLayer):
        layers.append(settings)
    elif settings is not None:
        layers.append(MappingLayer("settings", settings))
    if use_environment:
        layers.append(EnvironmentLayer(environ))
    return add_connection_string_layer(registry, layers)


def add_connection_string_layer(
    registry: PropertyRegistry, layers: List[SourceLayer]
) -> List[SourceLayer]:
    """Append the values implied by the first ``uri`` found in ``layers``."""
    uri = _find_raw(registry, URI_PROPERTY, layers)
    if uri is not None:
        layers.append(ConnectionStringLayer(str(uri), registry.prefix, registry=registry))
    return layers


class _ConnectorConfig:
    """Behaviour shared by the read and write views."""

    config: CompositeConfig

    @classmethod
    def from_composite(cls: type[_ConfigT], config: CompositeConfig) -> _ConfigT:
        raise NotImplementedError

    @property
    def registry(self) -> PropertyRegistry:
        return self.config.registry

    def source_of(self, name: str) -> Optional[str]:
        return self.config.source_of(name)

    def as_options(self) -> Dict[str, str]:
        return self.config.as_options()

    def with_options(self: _ConfigT, options: Mapping[str, Any]) -> _ConfigT:
        """Re-resolve with ``options`` layered over the current values."""
        registry = self.registry
        layers = add_connection_string_layer(registry, [OptionsLayer(options, registry.prefix)])
        layers.append(ResolvedConfigLayer(self.config))

        updated = ConfigResolver(registry).resolve(layers)
        for name, value in updated.values.items():
            previous = self.config.values.get(name)
            if previous != value:
                log_configuration_change(registry.fully_qualified_name(name), previous, value)
        return type(self).from_composite(updated)


@dataclass(frozen=True)
class ReadConfig(_ConnectorConfig):
    database: str
    collection: str
    uri: Optional[str]
    read_preference: ReadPreferenceConfig
    read_concern: ReadConcernConfig
    sample_size: int
    partitioner: str
    partitioner_options: Mapping[str, str]
    local_threshold: int
    register_sql_helper_functions: bool
    infer_map_types: bool
    map_type_minimum_keys: int
    config: CompositeConfig = field(repr=False, compare=False)

    @classmethod
    def from_composite(cls, config: CompositeConfig) -> "ReadConfig":
        return cls(
            database=config[DATABASE_NAME_PROPERTY],
            collection=config[COLLECTION_NAME_PROPERTY],
            uri=config.get(URI_PROPERTY),
            read_preference=config.sub_config(READ_PREFERENCE_SUB_CONFIG),
            read_concern=config.sub_config(READ_CONCERN_SUB_CONFIG),
            sample_size=config[SAMPLE_SIZE_PROPERTY],
            partitioner=config[PARTITIONER_PROPERTY],
            partitioner_options=config[PARTITIONER_OPTIONS_PROPERTY],
            local_threshold=config[LOCAL_THRESHOLD_PROPERTY],
            register_sql_helper_functions=config[REGISTER_SQL_HELPER_FUNCTIONS_PROPERTY],
            infer_map_types=config[SCHEMA_INFER_MAP_TYPE_ENABLED_PROPERTY],
            map_type_minimum_keys=config[SCHEMA_INFER_MAP_TYPE_MINIMUM_KEYS_PROPERTY],
            config=config,
        )

    @property
    def namespace(self) -> Tuple[str, str]:
        return self.database, self.collection


@dataclass(frozen=True)
class WriteConfig(_ConnectorConfig):
    database: str
    collection: str
    uri: Optional[str]
    write_concern: WriteConcernConfig
    replace_document: bool
    max_batch_size: int
    shard_key: Mapping[str, Any]
    force_insert: bool
    ordered: bool
    local_threshold: int
    config: CompositeConfig = field(repr=False, compare=False)

    @classmethod
    def from_composite(cls, config: CompositeConfig) -> "WriteConfig":
        return cls(
            database=config[DATABASE_NAME_PROPERTY],
            collection=config[COLLECTION_NAME_PROPERTY],
            uri=config.get(URI_PROPERTY),
            write_concern=config.sub_config(WRITE_CONCERN_SUB_CONFIG),
            replace_document=config[REPLACE_DOCUMENT_PROPERTY],
            max_batch_size=config[MAX_BATCH_SIZE_PROPERTY],
            shard_key=config[SHARD_KEY_PROPERTY],
            force_insert=config[FORCE_INSERT_PROPERTY],
            ordered=config[ORDERED_PROPERTY],
            local_threshold=config[LOCAL_THRESHOLD_PROPERTY],
            config=config,
        )

    @property
    def namespace(self) -> Tuple[str, str]:
        return self.database, self.collection


def resolve_read_config(
    options: Optional[Mapping[str, Any]] = None,
    settings: Optional[Settings] = None,
    environ: Optional[Mapping[str, str]] = None,
    use_environment: bool = True,
) -> ReadConfig:
    registry = get_input_registry()
    layers = build_layers(registry, options, settings, environ, use_environment)
    return ReadConfig.from_composite(ConfigResolver(registry).resolve(layers))


def resolve_write_config(
    options: Optional[Mapping[str, Any]] = None,
    settings: Optional[Settings] = None,
    environ: Optional[Mapping[str, str]] = None,
    use_environment: bool = True,
) -> WriteConfig:
    registry = get_output_registry()
    layers = build_layers(registry, options, settings, environ, use_environment)
    return WriteConfig.from_composite(ConfigResolver(registry).resolve(layers))
