"""Extraction results table exports: CSV and Excel."""

import csv
import json
import logging
import math
from decimal import Decimal
from typing import Any

import openpyxl
from openpyxl.styles import Font

from pdfields.agents.models import ExtractionResult
from pdfields.core.errors import FieldMissingFromExtraction
from pdfields.core.schema import SchemaField

logger = logging.getLogger(__name__)

HEADERS = [
    "field_name",
    "value",
    "match_type",
    "comment",
    "page",
    "xmin",
    "ymin",
    "xmax",
    "ymax",
]


# ── Helpers ──────────────────────────────────────────────────────────


def format_number(number: float) -> str:
    """Plain decimal notation: integral floats drop the ".0", no exponents.

    ``0.0`` -> ``0``, ``1e16`` -> ``10000000000000000``, ``1e-05`` -> ``0.00001``.
    """
    if not math.isfinite(number):
        return str(number)
    if number.is_integer():
        return str(int(number))
    return format(Decimal(repr(number)), "f")


def format_value(value: Any) -> str:
    """Render an extracted JSON value as a single table cell."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        return format_number(value)
    if isinstance(value, int):
        return str(value)
    return json.dumps(value, separators=(",", ":"))


def build_result_rows(
    result: ExtractionResult, fields: list[SchemaField]
) -> list[list[Any]]:
    """One row per schema field, in schema order (not mapping order)."""
    rows = []
    for f in fields:
        record = result.get(f.field_name)
        if record is None:
            raise FieldMissingFromExtraction(f.field_name)
        rows.append([
            f.field_name,
            format_value(record.value),
            record.match_type,
            record.comment or "",
            record.page,
            record.xmin,
            record.ymin,
            record.xmax,
            record.ymax,
        ])
    return rows


# ── CSV Export ───────────────────────────────────────────────────────


def export_results_csv(
    result: ExtractionResult, fields: list[SchemaField], output_path: str
) -> None:
    """Export extraction results as CSV."""
    rows = build_result_rows(result, fields)

    with open(output_path, "w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(HEADERS)
        for row in rows:
            writer.writerow([format_number(c) if isinstance(c, float) else c for c in row])

    logger.info("Results CSV exported to %s (%d rows)", output_path, len(rows))


# ── Excel Export ─────────────────────────────────────────────────────


def export_results_excel(
    result: ExtractionResult, fields: list[SchemaField], output_path: str
) -> None:
    """Export extraction results as a single-sheet Excel workbook."""
    rows = build_result_rows(result, fields)

    wb = openpyxl.Workbook()
    ws = wb.active
    ws.title = "Extraction"
    ws.append(HEADERS)
    for row in rows:
        ws.append(row)
    _style_header(ws)

    wb.save(output_path)
    logger.info("Results Excel exported to %s (%d rows)", output_path, len(rows))


def _style_header(ws) -> None:
    """Bold the header row."""
    for cell in ws[1]:
        cell.font = Font(bold=True)
