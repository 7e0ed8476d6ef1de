"""
Declared connector properties.

Three registries are declared here:

- shared (``spark.mongodb.``): properties common to reading and writing,
  currently only ``localthreshold``.
- input (``spark.mongodb.input.``): everything used when reading.
- output (``spark.mongodb.output.``): everything used when writing.

Input and output inherit the shared registry by reference, so
``localthreshold`` is looked up as ``spark.mongodb.input.localthreshold``
first and ``spark.mongodb.localthreshold`` second.

The ``get_*_registry`` accessors build each registry once per process and
return the same frozen instance afterwards.
"""

from __future__ import annotations

from functools import lru_cache

from .coercion import (
    parse_bool,
    parse_connection_string,
    parse_document,
    parse_non_negative_int,
    parse_positive_int,
    parse_str,
    parse_string_map,
    parse_tag_sets,
    parse_write_concern_w,
)
from .descriptor import PropertyDescriptor
from .read_concern import DEFAULT_LEVEL, build_read_concern, parse_read_concern_level
from .read_preference import PRIMARY, build_read_preference, parse_read_preference_name
from .registry import PropertyRegistry
from .write_concern import build_write_concern

SHARED_PREFIX = "spark.mongodb."
INPUT_PREFIX = "spark.mongodb.input."
OUTPUT_PREFIX = "spark.mongodb.output."

# Property names, shared
LOCAL_THRESHOLD_PROPERTY = "localThreshold".lower()

# Property names, input and output
URI_PROPERTY = "uri"
DATABASE_NAME_PROPERTY = "database"
COLLECTION_NAME_PROPERTY = "collection"

# Property names, input
READ_PREFERENCE_NAME_PROPERTY = "readPreference.name".lower()
READ_PREFERENCE_TAG_SETS_PROPERTY = "readPreference.tagSets".lower()
READ_CONCERN_LEVEL_PROPERTY = "readConcern.level".lower()
SAMPLE_SIZE_PROPERTY = "sampleSize".lower()
PARTITIONER_PROPERTY = "partitioner"
PARTITIONER_OPTIONS_PROPERTY = "partitionerOptions".lower()
REGISTER_SQL_HELPER_FUNCTIONS_PROPERTY = "registerSQLHelperFunctions".lower()
SCHEMA_INFER_MAP_TYPE_ENABLED_PROPERTY = "schemaInfer.mapTypes.enabled".lower()
SCHEMA_INFER_MAP_TYPE_MINIMUM_KEYS_PROPERTY = "schemaInfer.mapTypes.minimumKeys".lower()

# Property names, output
REPLACE_DOCUMENT_PROPERTY = "replaceDocument".lower()
MAX_BATCH_SIZE_PROPERTY = "maxBatchSize".lower()
WRITE_CONCERN_W_PROPERTY = "writeConcern.w".lower()
WRITE_CONCERN_JOURNAL_PROPERTY = "writeConcern.journal".lower()
WRITE_CONCERN_WTIMEOUT_PROPERTY = "writeConcern.wTimeoutMS".lower()
SHARD_KEY_PROPERTY = "shardKey".lower()
FORCE_INSERT_PROPERTY = "forceInsert".lower()
ORDERED_PROPERTY = "ordered"

DEFAULT_LOCAL_THRESHOLD_MS = 15
DEFAULT_SAMPLE_SIZE = 1000
DEFAULT_PARTITIONER = "MongoDefaultPartitioner"
DEFAULT_MAP_TYPE_MINIMUM_KEYS = 250
DEFAULT_MAX_BATCH_SIZE = 512
DEFAULT_SHARD_KEY = "{_id: 1}"

READ_PREFERENCE_SUB_CONFIG = "read_preference"
READ_CONCERN_SUB_CONFIG = "read_concern"
WRITE_CONCERN_SUB_CONFIG = "write_concern"


def build_shared_registry() -> PropertyRegistry:
    registry = PropertyRegistry(SHARED_PREFIX, label="shared")
    registry.register(
        PropertyDescriptor(
            LOCAL_THRESHOLD_PROPERTY,
            parse_non_negative_int,
            int,
            default=DEFAULT_LOCAL_THRESHOLD_MS,
            description=(
                "Milliseconds added to the fastest ping time when choosing among "
                "multiple MongoDB servers to send a request."
            ),
        )
    )
    return registry


def _register_namespace(registry: PropertyRegistry, verb: str) -> None:
    registry.register(
        PropertyDescriptor(
            URI_PROPERTY,
            parse_connection_string,
            str,
            description=f"Connection string; may also supply the database and collection to {verb}.",
        )
    )
    registry.register(
        PropertyDescriptor(
            DATABASE_NAME_PROPERTY,
            parse_str,
            str,
            required=True,
            description=f"The database name to {verb}.",
        )
    )
    registry.register(
        PropertyDescriptor(
            COLLECTION_NAME_PROPERTY,
            parse_str,
            str,
            required=True,
            description=f"The collection name to {verb}.",
        )
    )


def build_input_registry(shared: PropertyRegistry | None = None) -> PropertyRegistry:
    """Declare the properties used when reading from MongoDB."""
    registry = PropertyRegistry(INPUT_PREFIX, parent=shared, label="input")
    _register_namespace(registry, "read data from")
    registry.register(
        PropertyDescriptor(
            READ_PREFERENCE_NAME_PROPERTY,
            parse_read_preference_name,
            str,
            default=PRIMARY,
            description="The name of the ReadPreference to use.",
        )
    )
    registry.register(
        PropertyDescriptor(
            READ_PREFERENCE_TAG_SETS_PROPERTY,
            parse_tag_sets,
            list,
            default=[],
            description="The ReadPreference tag sets, as a JSON array of documents.",
        )
    )
    registry.register(
        PropertyDescriptor(
            READ_CONCERN_LEVEL_PROPERTY,
            parse_read_concern_level,
            str,
            default=DEFAULT_LEVEL,
            description="The ReadConcern level to use.",
        )
    )
    registry.register(
        PropertyDescriptor(
            SAMPLE_SIZE_PROPERTY,
            parse_positive_int,
            int,
            default=DEFAULT_SAMPLE_SIZE,
            description="The sample size to use when inferring the schema.",
        )
    )
    registry.register(
        PropertyDescriptor(
            PARTITIONER_PROPERTY,
            parse_str,
            str,
            default=DEFAULT_PARTITIONER,
            description="The name of the partitioner used to partition the data.",
        )
    )
    registry.register(
        PropertyDescriptor(
            PARTITIONER_OPTIONS_PROPERTY,
            parse_string_map,
            dict,
            default={},
            description="Custom options used to configure the partitioner.",
            map_valued=True,
        )
    )
    registry.register(
        PropertyDescriptor(
            REGISTER_SQL_HELPER_FUNCTIONS_PROPERTY,
            parse_bool,
            bool,
            default=False,
            description="Register SQL helper functions for querying Bson types inside SQL queries.",
            since="1.1",
        )
    )
    registry.register(
        PropertyDescriptor(
            SCHEMA_INFER_MAP_TYPE_ENABLED_PROPERTY,
            parse_bool,
            bool,
            default=True,
            description="Infer large compatible struct types as a MapType.",
        )
    )
    registry.register(
        PropertyDescriptor(
            SCHEMA_INFER_MAP_TYPE_MINIMUM_KEYS_PROPERTY,
            parse_positive_int,
            int,
            default=DEFAULT_MAP_TYPE_MINIMUM_KEYS,
            description="How many keys a struct needs before a MapType is inferred.",
        )
    )
    registry.add_sub_config(
        READ_PREFERENCE_SUB_CONFIG,
        build_read_preference,
        (READ_PREFERENCE_NAME_PROPERTY, READ_PREFERENCE_TAG_SETS_PROPERTY),
    )
    registry.add_sub_config(
        READ_CONCERN_SUB_CONFIG, build_read_concern, (READ_CONCERN_LEVEL_PROPERTY,)
    )
    return registry


def build_output_registry(shared: PropertyRegistry | None = None) -> PropertyRegistry:
    """Declare the properties used when writing to MongoDB."""
    registry = PropertyRegistry(OUTPUT_PREFIX, parent=shared, label="output")
    _register_namespace(registry, "write data to")
    registry.register(
        PropertyDescriptor(
            REPLACE_DOCUMENT_PROPERTY,
            parse_bool,
            bool,
            default=True,
            description="Replace the whole document when saving a Dataset that contains an _id field.",
        )
    )
    registry.register(
        PropertyDescriptor(
            MAX_BATCH_SIZE_PROPERTY,
            parse_positive_int,
            int,
            default=DEFAULT_MAX_BATCH_SIZE,
            description="The maximum batch size for bulk operations.",
        )
    )
    registry.register(
        PropertyDescriptor(
            WRITE_CONCERN_W_PROPERTY,
            parse_write_concern_w,
            object,
            description="The write concern w value: an acknowledgement count or a tag name.",
        )
    )
    registry.register(
        PropertyDescriptor(
            WRITE_CONCERN_JOURNAL_PROPERTY,
            parse_bool,
            bool,
            description="Whether writes must be acknowledged by the journal.",
        )
    )
    registry.register(
        PropertyDescriptor(
            WRITE_CONCERN_WTIMEOUT_PROPERTY,
            parse_non_negative_int,
            int,
            description="The write concern timeout in milliseconds.",
        )
    )
    registry.register(
        PropertyDescriptor(
            SHARD_KEY_PROPERTY,
            parse_document,
            dict,
            default=DEFAULT_SHARD_KEY,
            description="The shard key document used for upserts.",
        )
    )
    registry.register(
        PropertyDescriptor(
            FORCE_INSERT_PROPERTY,
            parse_bool,
            bool,
            default=False,
            description="Always insert, even when the document contains an _id.",
        )
    )
    registry.register(
        PropertyDescriptor(
            ORDERED_PROPERTY,
            parse_bool,
            bool,
            default=True,
            description="Send bulk writes as ordered operations.",
        )
    )
    registry.add_sub_config(
        WRITE_CONCERN_SUB_CONFIG,
        build_write_concern,
        (WRITE_CONCERN_W_PROPERTY, WRITE_CONCERN_JOURNAL_PROPERTY, WRITE_CONCERN_WTIMEOUT_PROPERTY),
    )
    return registry


@lru_cache(maxsize=None)
def get_shared_registry() -> PropertyRegistry:
    return build_shared_registry().freeze()


@lru_cache(maxsize=None)
def get_input_registry() -> PropertyRegistry:
    return build_input_registry(get_shared_registry()).freeze()


@lru_cache(maxsize=None)
def get_output_registry() -> PropertyRegistry:
    return build_output_registry(get_shared_registry()).freeze()


REGISTRIES = {
    "shared": get_shared_registry,
    "input": get_input_registry,
    "output": get_output_registry,
}


def get_registry(name: str) -> PropertyRegistry:
    try:
        return REGISTRIES[name.lower()]()
    except KeyError:
        raise KeyError(
            f"Unknown registry '{name}'. Expected one of: {', '.join(REGISTRIES)}"
        ) from None
