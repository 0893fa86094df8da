"""Field schema: CSV loader, row validation, and schema hashing."""

import csv
import hashlib
import io
import json
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict

from pdfields.core.errors import (
    DescriptionTooLong,
    DuplicateFieldName,
    EmptyFieldName,
    FieldNameTooLong,
    InvalidInfer,
    InvalidKind,
    MalformedSchema,
    NonAsciiDescription,
    NonAsciiFieldName,
    SchemaValidationError,
)

MAX_FIELD_NAME_LENGTH = 16
MAX_DESCRIPTION_LENGTH = 100

SCHEMA_COLUMNS = ("field_name", "description", "kind", "infer")

_TRUE_LITERALS = frozenset({"true", "yes", "1"})
_FALSE_LITERALS = frozenset({"false", "no", "0"})


# ── Field Model ──────────────────────────────────────────────────────


class FieldKind(str, Enum):
    """Value kind of a schema field; decides the JSON type of its value."""

    CATEGORICAL = "categorical"
    NUMBER = "number"
    TEXT = "text"

    @property
    def json_type(self) -> str:
        return "number" if self is FieldKind.NUMBER else "string"


ALLOWED_KINDS = ", ".join(k.value for k in FieldKind)


class SchemaField(BaseModel):
    """Single field to extract from the document."""

    model_config = ConfigDict(frozen=True)

    field_name: str
    description: str
    kind: FieldKind
    infer: bool


# ── Row Validation ───────────────────────────────────────────────────


def parse_schema_row(
    field_name: str, description: str, kind: str, infer: str
) -> SchemaField:
    """Validate one raw schema row and return the field.

    Checks run in a fixed order so the same bad row always produces the same
    error. Raises a ``SchemaValidationError`` subclass without a row number.
    """
    if not field_name:
        raise EmptyFieldName()
    if len(field_name) > MAX_FIELD_NAME_LENGTH:
        raise FieldNameTooLong(field_name, len(field_name), MAX_FIELD_NAME_LENGTH)
    if not field_name.isascii():
        raise NonAsciiFieldName(field_name)

    if len(description) > MAX_DESCRIPTION_LENGTH:
        raise DescriptionTooLong(field_name, len(description), MAX_DESCRIPTION_LENGTH)
    if not description.isascii():
        raise NonAsciiDescription(field_name)

    try:
        field_kind = FieldKind(kind.lower())
    except ValueError:
        raise InvalidKind(kind, field_name, ALLOWED_KINDS) from None

    flag = infer.lower()
    if flag in _TRUE_LITERALS:
        infer_value = True
    elif flag in _FALSE_LITERALS:
        infer_value = False
    else:
        raise InvalidInfer(infer, field_name)

    return SchemaField(
        field_name=field_name,
        description=description,
        kind=field_kind,
        infer=infer_value,
    )


# ── Schema Loading ───────────────────────────────────────────────────


def parse_schema_csv(csv_content: str) -> list[SchemaField]:
    """Parse schema CSV text into an ordered list of fields.

    Fails on the first invalid row; the raised error carries the 1-based row
    number, counting the header as row 1.
    """
    reader = csv.reader(io.StringIO(csv_content))
    header = next(reader, None)
    if header is None:
        raise MalformedSchema("Schema is empty", row=1)

    missing = [col for col in SCHEMA_COLUMNS if col not in header]
    if missing:
        raise MalformedSchema(
            f"Schema header is missing column(s): {', '.join(missing)}", row=1
        )
    positions = [header.index(col) for col in SCHEMA_COLUMNS]

    fields: list[SchemaField] = []
    seen_names: set[str] = set()

    for row_num, cells in enumerate(reader, start=2):
        if not cells:
            continue
        if len(cells) != len(header):
            raise MalformedSchema(
                f"Expected {len(header)} cells, found {len(cells)}", row=row_num
            )

        try:
            field = parse_schema_row(*(cells[i] for i in positions))
        except SchemaValidationError as exc:
            exc.row = row_num
            raise

        if field.field_name in seen_names:
            raise DuplicateFieldName(field.field_name, row_num)
        seen_names.add(field.field_name)
        fields.append(field)

    if not fields:
        raise MalformedSchema("Schema has no field rows", row=1)
    return fields


def read_schema(path: str | Path) -> list[SchemaField]:
    """Load a schema CSV from disk and return the validated fields."""
    path = Path(path)
    # utf-8-sig drops the BOM that spreadsheet exports prepend
    with open(path, newline="", encoding="utf-8-sig") as f:
        return parse_schema_csv(f.read())


# ── Helpers ──────────────────────────────────────────────────────────


def schema_hash(fields: list[SchemaField]) -> str:
    """SHA-256 of the ordered field list (canonical JSON)."""
    data = [f.model_dump(mode="json") for f in fields]
    blob = json.dumps(data, sort_keys=True).encode()
    return hashlib.sha256(blob).hexdigest()
