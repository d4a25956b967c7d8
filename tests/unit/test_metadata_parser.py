"""Unit tests for tokenlens.metadata.parser and the dialect parsers."""

import json

import pytest
from pydantic import ValidationError

from tokenlens.metadata import parser as parser_module
from tokenlens.metadata import BRIDGED_COLLECTION_LABEL, MetadataKind, MetadataOptions, parse_metadata
from tokenlens.metadata.detector import Dialect
from tokenlens.metadata.dialects import resolve_index_entry


@pytest.mark.parametrize("text", [None, "", "   ", "\n\t\n"])
def test_empty_input_returns_none(text):
    """Absent or whitespace-only text has no metadata."""
    assert parse_metadata(text) is None


def test_collection_inversion():
    """A value equal to the index id turns its key into the collection."""
    meta = parse_metadata('{"721":{"93":{"Cybercitizen":"93","traits":{"Background":"Blue"}}}}')

    assert meta.kind is MetadataKind.STRUCTURED_INDEX
    assert meta.collection_name == "Cybercitizen"
    assert meta.display_name == "93"
    assert meta.description == "Cybercitizen 93"
    assert meta.trait_map == {"Background": "Blue", "Token ID": "93"}
    assert meta.standard_tag == "structured-index"


def test_token_id_trait_uses_envelope_key():
    """The Token ID trait always carries the index id, never the nested key."""
    text = json.dumps(
        {
            "721": {
                "policy1": {
                    "Bud1": {
                        "SpaceBudz": "yes",
                        "series": "S1",
                        "seed": 42,
                        "image": ["ipfs://Qm", "Xyz"],
                    }
                }
            }
        }
    )
    meta = parse_metadata(text)

    assert meta.kind is MetadataKind.STRUCTURED_INDEX
    assert meta.collection_name == "SpaceBudz"
    assert meta.display_name == "Bud1"
    assert meta.image_ref == "ipfs://QmXyz"
    assert meta.trait_map["Token ID"] == "policy1"
    assert meta.trait_map["Series"] == "S1"
    assert meta.trait_map["Seed"] == "42"
    assert meta.description == "SpaceBudz Bud1"


def test_named_entry_is_the_payload():
    """An entry with a name is the token payload; the index id is the collection."""
    meta = parse_metadata(
        '{"721":{"SpaceBudz":{"name":"SpaceBud #1","image":"ipfs://QmAbc","description":"A bud",'
        '"attributes":[{"trait_type":"Hat","value":"Cap"},{"trait_type":"Empty","value":""}]}}}'
    )

    assert meta.collection_name == "SpaceBudz"
    assert meta.display_name == "SpaceBud #1"
    assert meta.description == "A bud"
    assert meta.image_ref == "ipfs://QmAbc"
    assert meta.trait_map == {"Hat": "Cap"}


def test_multi_key_entry_without_name():
    """Several keys and no name: the entry is the payload under the index id."""
    resolution = resolve_index_entry("pol", {"a": {"x": 1}, "b": {"y": 2}})

    assert resolution.collection_name == "pol"
    assert resolution.display_name == "pol"
    assert resolution.token_id == ""
    assert resolution.payload == {"a": {"x": 1}, "b": {"y": 2}}


def test_single_key_with_scalar_value():
    """A lone non-object value yields an empty payload."""
    resolution = resolve_index_entry("pol", {"Bud7": 7})

    assert resolution.payload == {}
    assert resolution.collection_name == "pol"
    assert resolution.token_id == "Bud7"


def test_empty_index_falls_back_to_generic():
    """A 721 envelope without entries is parsed as a plain object."""
    meta = parse_metadata('{"721":{}}')
    assert meta.kind is MetadataKind.GENERIC
    assert meta.collection_name is None


def test_bridge_wrapped():
    """Bridge records get origin traits, a derived description and the bridge collection."""
    meta = parse_metadata(
        '{"title":"wHOSKY","originNetwork":"Cardano","originToken":"a0028f35","isNativeToken":false,"decimals":0}'
    )

    assert meta.kind is MetadataKind.BRIDGE_WRAPPED
    assert meta.display_name == "wHOSKY"
    assert meta.description == "wHOSKY - Wrapped from Cardano"
    assert meta.collection_name == BRIDGED_COLLECTION_LABEL
    assert meta.trait_map == {
        "Origin Network": "Cardano",
        "Origin Token": "a0028f35",
        "Is Native Token": "No",
        "decimals": "0",
    }


def test_native_token():
    """Native records derive the collection from the name and keep decimals."""
    meta = parse_metadata(
        '{"tokenId":"abc","name":"Ergnomes #12","imageUrl":"https://img.example/12.png","minter":"9fXyz",'
        '"decimals":"0","attributes":[{"trait_type":"Hat","value":"Red"}]}'
    )

    assert meta.kind is MetadataKind.NATIVE_TOKEN
    assert meta.collection_name == "Ergnomes"
    assert meta.image_ref == "https://img.example/12.png"
    assert meta.creator_ref == "9fXyz"
    assert meta.decimals == 0
    assert meta.trait_map == {"Hat": "Red"}
    assert meta.payload["tokenId"] == "abc"


def test_generic_object():
    """Generic objects pass through common fields and label the standard."""
    text = (
        '{"name":"Sword","description":"Sharp","image_url":"https://img.example/s.png","artist":"Bob",'
        '"collection":"Armory","attributes":[{"trait_type":"Rarity","value":"Epic"}]}'
    )
    meta = parse_metadata(text)

    assert meta.kind is MetadataKind.GENERIC
    assert meta.display_name == "Sword"
    assert meta.image_ref == "https://img.example/s.png"
    assert meta.creator_ref == "Bob"
    assert meta.collection_name == "Armory"
    assert meta.trait_map == {"Rarity": "Epic"}
    assert meta.standard_tag == "opensea-compatible"
    assert meta.payload == {}

    full = parse_metadata(text, MetadataOptions(include_full_payload=True))
    assert full.payload["artist"] == "Bob"


def test_generic_eip_tag():
    """An ``eip`` field labels the object with the matching chain standard."""
    assert parse_metadata('{"name":"X","eip":4}').standard_tag == "ergo-4"


def test_nested_properties_are_opt_in():
    """Nested property traits are only read when requested."""
    text = '{"name":"X","properties":{"Power":9,"Element":{"value":"Fire"},"Skip":{"other":1}}}'

    assert parse_metadata(text).trait_map is None
    nested = parse_metadata(text, MetadataOptions(extract_nested_traits=True))
    assert nested.trait_map == {"Power": "9", "Element": "Fire"}


def test_malformed_json_is_unrecognized():
    """Text that starts like JSON but fails to decode is kept verbatim."""
    meta = parse_metadata("{not json")
    assert meta.kind is MetadataKind.UNRECOGNIZED
    assert meta.payload == ["{not json"]


def test_newline_text_is_line_list():
    """Free text splits into non-blank lines."""
    meta = parse_metadata("a\n\nb\n")
    assert meta.kind is MetadataKind.LINE_LIST
    assert meta.payload == ["a", "b"]
    assert meta.lines == ["a", "b"]


def test_json_array_is_line_list():
    """Array elements are rendered as text entries."""
    meta = parse_metadata('["a", 1, true]')
    assert meta.kind is MetadataKind.LINE_LIST
    assert meta.payload == ["a", "1", "true"]


def test_non_string_input_is_unrecognized():
    """Callers passing a non-string get a degraded record, not an exception."""
    meta = parse_metadata(12345)
    assert meta.kind is MetadataKind.UNRECOGNIZED
    assert meta.payload == ["12345"]


def test_deep_nesting_does_not_raise():
    """Pathological nesting degrades to an unrecognized record."""
    text = "[" * 100_000 + "]" * 100_000
    meta = parse_metadata(text)
    assert meta.kind is MetadataKind.UNRECOGNIZED


def test_large_newline_text():
    """Very large free text is handled as a line list."""
    text = "line\n" * 2_000_000
    meta = parse_metadata(text)
    assert meta.kind is MetadataKind.LINE_LIST
    assert len(meta.payload) == 2_000_000


def test_deep_trait_values_are_truncated():
    """Trait values nested past the visit depth are cut off."""
    nested = {"a": {"b": {"c": {"d": 1}}}}
    text = json.dumps({"name": "X", "traits": {"Deep": nested}})

    meta = parse_metadata(text, MetadataOptions(max_visit_depth=2))
    assert meta.trait_map["Deep"] == '{"a": {"b": ...}}'


def test_parse_is_deterministic():
    """Parsing the same text twice yields equal records."""
    text = '{"721":{"93":{"Cybercitizen":"93","traits":{"Background":"Blue"}}}}'
    assert parse_metadata(text) == parse_metadata(text)


def test_parser_failure_degrades(monkeypatch):
    """An unexpected parser error yields an unrecognized record holding the input."""

    def boom(data, options):
        raise RuntimeError("unexpected")

    monkeypatch.setitem(parser_module._OBJECT_PARSERS, Dialect.GENERIC, boom)
    meta = parse_metadata('{"name":"X"}')
    assert meta.kind is MetadataKind.UNRECOGNIZED
    assert meta.payload == ['{"name":"X"}']


def test_records_are_immutable():
    """Parsed records cannot be modified in place."""
    meta = parse_metadata('{"name":"X"}')
    with pytest.raises(ValidationError):
        meta.display_name = "Y"


def test_single_key_without_string_fields_uses_index_id():
    """Without a string-valued field the index id stays the collection."""
    resolution = resolve_index_entry("pol", {"Bud1": {"n": 5, "tags": ["a"]}})

    assert resolution.collection_name == "pol"
    assert resolution.token_id == "Bud1"
    assert resolution.display_name == "Bud1"
    assert resolution.payload == {"n": 5, "tags": ["a"]}


def test_single_key_skips_fields_equal_to_token_id():
    """A string field repeating the token id is not taken as the collection."""
    resolution = resolve_index_entry("pol", {"Bud1": {"ref": "Bud1", "Coll": "x"}})

    assert resolution.collection_name == "Coll"
    assert resolution.token_id == "Bud1"


def test_line_list_splits_on_newlines_only():
    """Other Unicode line separators stay inside an entry; CRLF is trimmed."""
    assert parse_metadata("a\u2028b\nc").payload == ["a\u2028b", "c"]
    assert parse_metadata("a\x0bb\r\nc\r\n").payload == ["a\x0bb", "c"]
