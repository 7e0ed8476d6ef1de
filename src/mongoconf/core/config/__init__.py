"""Connector property registries and the configuration resolution engine."""

from .composite import CompositeConfig, PropertyResolution
from .connector import (
    ReadConfig,
    WriteConfig,
    add_connection_string_layer,
    build_layers,
    resolve_read_config,
    resolve_write_config,
)
from .descriptor import NO_DEFAULT, PropertyDescriptor
from .errors import (
    AmbiguousPropertyCollisionError,
    ConfigError,
    DuplicatePropertyError,
    InvalidPrefixError,
    InvalidValueError,
    MissingRequiredError,
    RegistryFrozenError,
)
from .layers import (
    ConnectionStringLayer,
    EnvironmentLayer,
    JsonFileLayer,
    MappingLayer,
    OptionsLayer,
    ResolvedConfigLayer,
    SourceLayer,
    SparkConfFileLayer,
)
from .read_concern import ReadConcernConfig
from .read_preference import ReadPreferenceConfig
from .registry import PropertyRegistry, flatten
from .resolver import ConfigResolver
from .schema import (
    INPUT_PREFIX,
    OUTPUT_PREFIX,
    SHARED_PREFIX,
    get_input_registry,
    get_output_registry,
    get_registry,
    get_shared_registry,
)
from .write_concern import WriteConcernConfig

__all__ = [
    "AmbiguousPropertyCollisionError",
    "CompositeConfig",
    "ConfigError",
    "ConfigResolver",
    "ConnectionStringLayer",
    "DuplicatePropertyError",
    "EnvironmentLayer",
    "INPUT_PREFIX",
    "InvalidPrefixError",
    "InvalidValueError",
    "JsonFileLayer",
    "MappingLayer",
    "MissingRequiredError",
    "NO_DEFAULT",
    "OUTPUT_PREFIX",
    "OptionsLayer",
    "PropertyDescriptor",
    "PropertyRegistry",
    "PropertyResolution",
    "ReadConcernConfig",
    "ReadConfig",
    "ReadPreferenceConfig",
    "RegistryFrozenError",
    "ResolvedConfigLayer",
    "SHARED_PREFIX",
    "SourceLayer",
    "SparkConfFileLayer",
    "WriteConcernConfig",
    "WriteConfig",
    "add_connection_string_layer",
    "build_layers",
    "flatten",
    "get_input_registry",
    "get_output_registry",
    "get_registry",
    "get_shared_registry",
    "resolve_read_config",
    "resolve_write_config",
]
