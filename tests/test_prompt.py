"""Tests for the extraction prompt builder."""

import pytest

from pdfields.agents.prompt import (
    PLACEHOLDER,
    build_prompt,
    format_fields_list,
    load_prompt_template,
    render_prompt,
)
from pdfields.core.schema import parse_schema_csv


def test_template_has_placeholder():
    assert PLACEHOLDER in load_prompt_template()


def test_build_prompt_includes_all_fields(schema_csv):
    fields = parse_schema_csv(schema_csv)
    prompt = build_prompt(fields)
    for f in fields:
        assert f"- **{f.field_name}**: {f.description}" in prompt
    assert PLACEHOLDER not in prompt


def test_infer_note_only_for_inferred_fields(schema_csv):
    listing = format_fields_list(parse_schema_csv(schema_csv))
    assert listing == (
        "- **title**: Paper title\n"
        "- **year**: Publication year\n"
        "  (This field should be inferred if not explicitly found)\n"
        "- **design**: Study design\n"
    )


def test_render_is_plain_substitution(schema_csv):
    fields = parse_schema_csv(schema_csv)
    prompt = render_prompt(fields[:1], "BEFORE\n{{FIELDS_LIST}}AFTER")
    assert prompt == "BEFORE\n- **title**: Paper title\nAFTER"


def test_prompt_deterministic(make_fields):
    fields = make_fields(5, infer=True)
    assert build_prompt(fields) == build_prompt(list(fields))


def test_field_order_preserved(make_fields):
    fields = make_fields(3)
    prompt = build_prompt(list(reversed(fields)))
    assert prompt.index("**f2**") < prompt.index("**f1**") < prompt.index("**f0**")


def test_template_without_placeholder_rejected(make_fields):
    with pytest.raises(ValueError, match="placeholder"):
        render_prompt(make_fields(1), "no substitution point here")
