import pytest

from mongoconf.core.config.coercion import (
    choice_parser,
    int_parser,
    parse_bool,
    parse_connection_string,
    parse_document,
    parse_positive_int,
    parse_str,
    parse_string_map,
    parse_tag_sets,
    parse_write_concern_w,
)


def test_parse_bool():
    assert parse_bool("true") is True
    assert parse_bool(" FALSE ") is False
    assert parse_bool("0") is False
    assert parse_bool(True) is True
    with pytest.raises(ValueError):
        parse_bool("maybe")


def test_parse_int_bounds():
    assert parse_positive_int("2000") == 2000
    assert parse_positive_int(7) == 7
    assert int_parser(minimum=0)("0") == 0
    with pytest.raises(ValueError, match=">= 1"):
        parse_positive_int("0")
    with pytest.raises(ValueError, match="integer"):
        parse_positive_int("not-a-number")
    with pytest.raises(ValueError):
        parse_positive_int(True)


def test_parse_str_rejects_blank():
    assert parse_str("  db ") == "db"
    with pytest.raises(ValueError):
        parse_str("   ")
    with pytest.raises(ValueError):
        parse_str(5)


def test_choice_parser_returns_canonical_spelling():
    parse = choice_parser(["primary", "secondaryPreferred"])
    assert parse("SECONDARYPREFERRED") == "secondaryPreferred"
    with pytest.raises(ValueError, match="must be one of"):
        parse("tertiary")


def test_parse_string_map():
    assert parse_string_map('{"partitionKey": "_id", "partitionSizeMB": 64}') == {
        "partitionkey": "_id",
        "partitionsizemb": "64",
    }
    assert parse_string_map("") == {}
    assert parse_string_map({"Flag": True}) == {"flag": "true"}
    with pytest.raises(ValueError):
        parse_string_map("[1, 2]")
    with pytest.raises(ValueError):
        parse_string_map({"nested": {"a": "b"}})


def test_parse_document_accepts_unquoted_keys():
    assert parse_document("{_id: 1}") == {"_id": 1}
    assert parse_document('{"a": 1, b: -1}') == {"a": 1, "b": -1}
    with pytest.raises(ValueError):
        parse_document("{_id: }")


def test_parse_tag_sets():
    assert parse_tag_sets('[{"dc": "east"}, {}]') == [{"dc": "east"}, {}]
    assert parse_tag_sets("") == []
    with pytest.raises(ValueError, match="must be a document"):
        parse_tag_sets('["east"]')
    with pytest.raises(ValueError, match="strings to strings"):
        parse_tag_sets('[{"dc": 1}]')
    with pytest.raises(ValueError, match="JSON"):
        parse_tag_sets("[{dc: east}")


def test_parse_connection_string():
    assert parse_connection_string("mongodb://localhost/") == "mongodb://localhost/"
    with pytest.raises(ValueError):
        parse_connection_string("http://localhost/")


def test_parse_write_concern_w():
    assert parse_write_concern_w("2") == 2
    assert parse_write_concern_w("majority") == "majority"
    with pytest.raises(ValueError):
        parse_write_concern_w("-1")
