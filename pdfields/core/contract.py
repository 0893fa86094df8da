"""Output contract: the JSON schema an extraction backend must answer with."""

from typing import Any

from pdfields.core.schema import SchemaField

MATCH_TYPES = ("found", "not_found", "inferred")

RECORD_MEMBERS = ("value", "match_type", "comment", "page", "xmin", "ymin", "xmax", "ymax")


def _field_contract(field: SchemaField) -> dict[str, Any]:
    return {
        "type": "object",
        "properties": {
            "value": {
                "type": [field.kind.json_type, "null"],
                "description": field.description,
            },
            "match_type": {
                "type": "string",
                "enum": list(MATCH_TYPES),
            },
            "comment": {"type": ["string", "null"]},
            "page": {"type": "integer"},
            "xmin": {"type": "number"},
            "ymin": {"type": "number"},
            "xmax": {"type": "number"},
            "ymax": {"type": "number"},
        },
        "required": list(RECORD_MEMBERS),
        "additionalProperties": False,
    }


def build_output_contract(fields: list[SchemaField]) -> dict[str, Any]:
    """Build the structured-output schema for a list of fields.

    Pure function: the same fields in the same order always give an equal
    contract, with properties and ``required`` in field order.
    """
    properties = {f.field_name: _field_contract(f) for f in fields}
    return {
        "type": "object",
        "properties": properties,
        "required": [f.field_name for f in fields],
        "additionalProperties": False,
    }
