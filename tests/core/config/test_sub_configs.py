import pytest

from mongoconf.core.config.errors import InvalidValueError
from mongoconf.core.config.layers import MappingLayer
from mongoconf.core.config.read_concern import ReadConcernConfig, build_read_concern
from mongoconf.core.config.read_preference import ReadPreferenceConfig, build_read_preference
from mongoconf.core.config.write_concern import WriteConcernConfig, build_write_concern

INPUT = "spark.mongodb.input."
OUTPUT = "spark.mongodb.output."


def _resolve(registry, values):
    return registry.resolve_against([MappingLayer("settings", values)])


def test_read_preference_defaults(input_registry, required_options):
    config = _resolve(input_registry, required_options)
    read_preference = config.sub_config("read_preference")
    assert read_preference == ReadPreferenceConfig("primary", ())
    assert read_preference.to_document() == {"mode": "primary"}


def test_tagged_read_preference(input_registry, required_options):
    config = _resolve(
        input_registry,
        {
            **required_options,
            INPUT + "readPreference.name": "NEAREST",
            INPUT + "readPreference.tagSets": '[{"dc": "east", "use": "production"}, {}]',
        },
    )
    read_preference = config.sub_config("read_preference")
    assert read_preference.name == "nearest"
    assert read_preference.is_tagged
    assert read_preference.to_document() == {
        "mode": "nearest",
        "tags": [{"dc": "east", "use": "production"}, {}],
    }


def test_tagged_mode_without_tag_sets_defaults_to_empty(input_registry, required_options):
    config = _resolve(input_registry, {**required_options, INPUT + "readpreference.name": "secondary"})
    assert config.sub_config("read_preference").tag_sets == ()


def test_malformed_tag_sets_are_invalid(input_registry, required_options):
    with pytest.raises(InvalidValueError) as excinfo:
        _resolve(
            input_registry,
            {
                **required_options,
                INPUT + "readpreference.name": "secondary",
                INPUT + "readpreference.tagsets": '{"dc": "east"}',
            },
        )
    assert excinfo.value.name == "readpreference.tagsets"


def test_tag_sets_rejected_for_primary(input_registry, required_options):
    with pytest.raises(InvalidValueError, match="primary") as excinfo:
        _resolve(input_registry, {**required_options, INPUT + "readPreference.tagSets": '[{"dc": "east"}]'})
    assert excinfo.value.name == "readpreference.tagsets"
    assert excinfo.value.raw == '[{"dc": "east"}]'
    assert excinfo.value.source == "settings:" + INPUT + "readpreference.tagsets"


def test_unknown_read_preference_name(input_registry, required_options):
    with pytest.raises(InvalidValueError) as excinfo:
        _resolve(input_registry, {**required_options, INPUT + "readpreference.name": "fastest"})
    assert excinfo.value.name == "readpreference.name"


def test_build_read_preference_from_absent_values():
    assert build_read_preference({}) == ReadPreferenceConfig()


def test_read_concern_levels(input_registry, required_options):
    config = _resolve(input_registry, required_options)
    assert config.sub_config("read_concern").is_server_default
    config = _resolve(input_registry, {**required_options, INPUT + "readConcern.level": "MAJORITY"})
    assert config.sub_config("read_concern") == ReadConcernConfig("majority")
    assert config.sub_config("read_concern").to_document() == {"level": "majority"}
    assert build_read_concern({"readconcern.level": "DEFAULT"}).level is None


def test_write_concern_defaults_to_server(output_registry):
    config = _resolve(output_registry, {OUTPUT + "database": "db", OUTPUT + "collection": "c"})
    write_concern = config.sub_config("write_concern")
    assert write_concern.is_server_default
    assert write_concern.to_document() == {}
    assert config.is_absent("writeconcern.w")


def test_write_concern_values(output_registry):
    config = _resolve(
        output_registry,
        {
            OUTPUT + "database": "db",
            OUTPUT + "collection": "c",
            OUTPUT + "writeConcern.w": "majority",
            OUTPUT + "writeConcern.journal": "true",
            OUTPUT + "writeConcern.wTimeoutMS": "500",
        },
    )
    assert config.sub_config("write_concern") == WriteConcernConfig("majority", True, 500)
    assert config.sub_config("write_concern").to_document() == {"w": "majority", "j": True, "wtimeout": 500}


def test_unacknowledged_write_concern_cannot_journal():
    with pytest.raises(InvalidValueError) as excinfo:
        build_write_concern({"writeconcern.w": 0, "writeconcern.journal": True})
    assert excinfo.value.name == "writeconcern.journal"
    assert not WriteConcernConfig(w=0).acknowledged
