"""Extraction prompt: field listing substituted into the packaged template."""

from functools import lru_cache
from pathlib import Path

from pdfields.core.schema import SchemaField

PLACEHOLDER = "{{FIELDS_LIST}}"
TEMPLATE_PATH = Path(__file__).resolve().parent / "prompts" / "extraction.md"

_INFER_NOTE = "  (This field should be inferred if not explicitly found)\n"


@lru_cache(maxsize=1)
def load_prompt_template() -> str:
    """Read the packaged prompt template (cached after the first call)."""
    return TEMPLATE_PATH.read_text(encoding="utf-8")


def format_fields_list(fields: list[SchemaField]) -> str:
    """One Markdown bullet per field, in schema order."""
    lines: list[str] = []
    for f in fields:
        lines.append(f"- **{f.field_name}**: {f.description}\n")
        if f.infer:
            lines.append(_INFER_NOTE)
    return "".join(lines)


def render_prompt(fields: list[SchemaField], template: str) -> str:
    """Substitute the field listing into ``template``. No I/O."""
    if PLACEHOLDER not in template:
        raise ValueError(f"Prompt template has no {PLACEHOLDER} placeholder")
    return template.replace(PLACEHOLDER, format_fields_list(fields))


def build_prompt(fields: list[SchemaField]) -> str:
    """Build the extraction prompt for a batch of fields."""
    return render_prompt(fields, load_prompt_template())
