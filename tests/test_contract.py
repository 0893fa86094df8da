"""Tests for the output-contract compiler."""

import copy
import json

from pdfields.core.contract import build_output_contract
from pdfields.core.schema import parse_schema_csv


def test_contract_top_level(schema_csv):
    fields = parse_schema_csv(schema_csv)
    contract = build_output_contract(fields)

    assert contract["type"] == "object"
    assert contract["additionalProperties"] is False
    assert contract["required"] == ["title", "year", "design"]
    assert list(contract["properties"]) == ["title", "year", "design"]


def test_contract_field_record(schema_csv):
    fields = parse_schema_csv(schema_csv)
    title = build_output_contract(fields)["properties"]["title"]

    assert title["additionalProperties"] is False
    assert title["required"] == [
        "value", "match_type", "comment", "page", "xmin", "ymin", "xmax", "ymax",
    ]
    props = title["properties"]
    assert props["value"] == {"type": ["string", "null"], "description": "Paper title"}
    assert props["match_type"] == {"type": "string", "enum": ["found", "not_found", "inferred"]}
    assert props["comment"] == {"type": ["string", "null"]}
    assert props["page"] == {"type": "integer"}
    for coord in ("xmin", "ymin", "xmax", "ymax"):
        assert props[coord] == {"type": "number"}


def test_value_type_follows_kind(schema_csv):
    props = build_output_contract(parse_schema_csv(schema_csv))["properties"]
    assert props["year"]["properties"]["value"]["type"] == ["number", "null"]
    assert props["design"]["properties"]["value"]["type"] == ["string", "null"]


def test_contract_is_pure(schema_csv):
    fields = parse_schema_csv(schema_csv)
    first = build_output_contract(fields)
    snapshot = copy.deepcopy(first)
    second = build_output_contract(fields)

    assert first == second
    assert json.dumps(first) == json.dumps(second)

    # Mutating one result must not leak into the next
    first["required"].append("bogus")
    first["properties"]["title"]["properties"]["match_type"]["enum"].append("bogus")
    assert build_output_contract(fields) == snapshot


def test_contract_is_json_serializable(make_fields):
    assert json.loads(json.dumps(build_output_contract(make_fields(3))))
