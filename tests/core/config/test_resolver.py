from concurrent.futures import ThreadPoolExecutor

import pytest

from mongoconf.core.config.coercion import parse_non_negative_int, parse_str
from mongoconf.core.config.composite import DEFAULT_SOURCE
from mongoconf.core.config.descriptor import PropertyDescriptor
from mongoconf.core.config.errors import InvalidValueError, MissingRequiredError
from mongoconf.core.config.layers import MappingLayer
from mongoconf.core.config.registry import PropertyRegistry
from mongoconf.core.config.schema import get_input_registry
from mongoconf.core.config.resolver import ConfigResolver

INPUT = "spark.mongodb.input."


def test_no_layers_fails_on_first_required_property(input_registry):
    with pytest.raises(MissingRequiredError) as excinfo:
        ConfigResolver(input_registry).resolve([])
    assert excinfo.value.name == "database"
    assert excinfo.value.candidates == (INPUT + "database",)


def test_each_required_property_is_reported(input_registry):
    layer = MappingLayer("settings", {INPUT + "database": "db"})
    with pytest.raises(MissingRequiredError) as excinfo:
        input_registry.resolve_against([layer])
    assert excinfo.value.name == "collection"


def test_defaults_when_only_required_values_given(input_registry, required_options):
    config = ConfigResolver(input_registry).resolve([MappingLayer("settings", required_options)])
    assert config["samplesize"] == 1000
    assert config["readpreference.name"] == "primary"
    assert config["readpreference.tagsets"] == ()
    assert config["readconcern.level"] == "DEFAULT"
    assert config["partitioner"] == "MongoDefaultPartitioner"
    assert config["partitioneroptions"] == {}
    assert config["localthreshold"] == 15
    assert config["registersqlhelperfunctions"] is False
    assert config["schemainfer.maptypes.enabled"] is True
    assert config["schemainfer.maptypes.minimumkeys"] == 250
    assert config.source_of("samplesize") == DEFAULT_SOURCE
    assert config.source_of("database") == "settings"


def test_absent_is_distinct_from_default(input_registry, required_options):
    config = input_registry.resolve_against([MappingLayer("settings", required_options)])
    assert config.is_absent("uri")
    assert config.get("uri") is None
    assert not config.is_default("uri")
    assert config.is_default("samplesize")
    assert not config.is_absent("samplesize")


def test_layer_priority_first_match_wins(input_registry, required_options):
    layer_a = MappingLayer("a", {**required_options, INPUT + "sampleSize": "2000"})
    layer_b = MappingLayer("b", {INPUT + "samplesize": "500"})
    config = ConfigResolver(input_registry).resolve([layer_a, layer_b])
    assert config["samplesize"] == 2000
    assert config.source_of("samplesize") == "a"
    assert config.provenance["samplesize"].key == INPUT + "samplesize"


def test_inherited_property_falls_back_to_parent_prefix(input_registry, required_options):
    layer = MappingLayer("settings", {**required_options, "spark.mongodb.localThreshold": "7"})
    config = input_registry.resolve_against([layer])
    assert config["localthreshold"] == 7
    assert config.provenance["localthreshold"].key == "spark.mongodb.localthreshold"


def test_name_scope_specificity_outranks_layer_order(required_options):
    shared = PropertyRegistry("spark.mongodb.")
    shared.register(PropertyDescriptor("localthreshold", parse_non_negative_int, int, default=15))
    registry = PropertyRegistry(INPUT, parent=shared)
    registry.register(PropertyDescriptor("database", parse_str, str, required=True))
    registry.register(PropertyDescriptor("collection", parse_str, str, required=True))
    registry.register(
        PropertyDescriptor("localthreshold", parse_non_negative_int, int, default=30),
        override=True,
    )

    high = MappingLayer("high", {**required_options, "spark.mongodb.localthreshold": "5"})
    low = MappingLayer("low", {INPUT + "localthreshold": "20"})
    config = registry.resolve_against([high, low])
    assert config["localthreshold"] == 20
    assert config.source_of("localthreshold") == "low"

    # With no local value the parent prefix is still consulted
    config = registry.resolve_against([high])
    assert config["localthreshold"] == 5

    # And the local default applies when nothing matches
    config = registry.resolve_against([MappingLayer("opts", required_options)])
    assert config["localthreshold"] == 30


def test_resolution_is_idempotent(input_registry, required_options):
    layers = [
        MappingLayer("options", {**required_options, INPUT + "partitionerOptions": '{"partitionKey": "_id"}'}),
        MappingLayer("settings", {INPUT + "samplesize": "42"}),
    ]
    resolver = ConfigResolver(input_registry)
    first = resolver.resolve(layers)
    second = resolver.resolve(layers)
    assert first.to_dict() == second.to_dict()
    assert dict(first.provenance) == dict(second.provenance)
    assert first.fingerprint() == second.fingerprint()
    assert dict(first.sub_configs) == dict(second.sub_configs)


def test_invalid_value_aborts_the_pass(input_registry, required_options):
    layer = MappingLayer("options", {**required_options, INPUT + "samplesize": "not-a-number"})
    with pytest.raises(InvalidValueError) as excinfo:
        ConfigResolver(input_registry).resolve([layer])
    error = excinfo.value
    assert error.name == "samplesize"
    assert error.raw == "not-a-number"
    assert error.source == "options:" + INPUT + "samplesize"


def test_invalid_value_in_lower_layer_is_never_reached(input_registry, required_options):
    high = MappingLayer("high", {**required_options, INPUT + "samplesize": "10"})
    low = MappingLayer("low", {INPUT + "samplesize": "garbage"})
    assert ConfigResolver(input_registry).resolve([high, low])["samplesize"] == 10


def test_map_property_from_prefixed_key_family(input_registry, required_options):
    layer = MappingLayer(
        "settings",
        {
            **required_options,
            INPUT + "partitionerOptions.partitionKey": "_id",
            INPUT + "partitionerOptions.numberOfPartitions": "8",
        },
    )
    config = input_registry.resolve_against([layer])
    assert config["partitioneroptions"] == {"partitionkey": "_id", "numberofpartitions": "8"}
    assert config.provenance["partitioneroptions"].key == INPUT + "partitioneroptions.*"


def test_resolved_config_is_read_only(input_registry, required_options):
    config = input_registry.resolve_against([MappingLayer("settings", required_options)])
    with pytest.raises(TypeError):
        config.values["samplesize"] = 1
    with pytest.raises(AttributeError):
        config.registry = None


def test_nested_values_are_read_only(input_registry, required_options):
    layer = MappingLayer(
        "settings",
        {
            **required_options,
            INPUT + "readpreference.name": "nearest",
            INPUT + "readpreference.tagsets": '[{"dc": "a"}]',
            INPUT + "partitioneroptions.partitionkey": "_id",
        },
    )
    config = input_registry.resolve_against([layer])
    tag_sets = config["readpreference.tagsets"]
    with pytest.raises(AttributeError):
        tag_sets.append({"dc": "b"})
    with pytest.raises(TypeError):
        tag_sets[0]["dc"] = "b"
    with pytest.raises(TypeError):
        config["partitioneroptions"]["partitionkey"] = "sku"
    assert config.sub_config("read_preference").tag_sets == ({"dc": "a"},)

    exported = config.to_dict()
    exported["readpreference.tagsets"].append({"dc": "b"})
    assert config["readpreference.tagsets"] == ({"dc": "a"},)


def test_concurrent_resolution_on_frozen_registry():
    registry = get_input_registry()

    def resolve(size):
        layer = MappingLayer(
            "settings",
            {
                INPUT + "database": "db",
                INPUT + "collection": "coll",
                INPUT + "samplesize": str(size),
                INPUT + "partitioneroptions.partitionkey": "_id",
            },
        )
        return ConfigResolver(registry).resolve([layer])

    sizes = [100, 200] * 8
    with ThreadPoolExecutor(max_workers=8) as pool:
        configs = list(pool.map(resolve, sizes))

    assert [config["samplesize"] for config in configs] == sizes
    assert len({config.fingerprint() for config in configs[0::2]}) == 1
    assert len({config.fingerprint() for config in configs[1::2]}) == 1
    assert configs[0].fingerprint() != configs[1].fingerprint()
    assert configs[0].values is not configs[2].values
    assert configs[0]["partitioneroptions"] is not configs[2]["partitioneroptions"]
