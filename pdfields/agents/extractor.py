"""Batched field extraction: one concurrent backend call per batch, then merge."""

import asyncio
import json
import logging
from typing import Any

from pydantic import ValidationError

from pdfields.agents.batching import plan_batches
from pdfields.agents.models import ExtractionResult, extraction_result_adapter
from pdfields.agents.prompt import build_prompt
from pdfields.backends.base import ExtractionBackend
from pdfields.core.contract import build_output_contract
from pdfields.core.errors import (
    AnswerShapeMismatch,
    BatchExecutionError,
    DuplicateFieldAcrossBatches,
    FieldMissingFromExtraction,
    InvalidAnswerJSON,
    UnexpectedField,
)
from pdfields.core.schema import SchemaField

logger = logging.getLogger(__name__)


# ── Answer Decoding ──────────────────────────────────────────────────


def decode_answer(raw: str, fields: list[SchemaField]) -> ExtractionResult:
    """Parse a backend answer into records for this batch's fields.

    Keys outside the batch are rejected; batch fields missing from the answer
    are left for ``merge_results`` to report.
    """
    try:
        data: Any = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise InvalidAnswerJSON(f"Answer is not valid JSON: {exc}") from exc

    if not isinstance(data, dict):
        raise AnswerShapeMismatch(
            f"Answer must be a JSON object, got {type(data).__name__}"
        )

    expected = {f.field_name for f in fields}
    unexpected = [name for name in data if name not in expected]
    if unexpected:
        raise AnswerShapeMismatch(
            f"Answer contains field(s) outside the batch: {', '.join(unexpected)}"
        )

    try:
        return extraction_result_adapter.validate_python(data)
    except ValidationError as exc:
        raise AnswerShapeMismatch(f"Answer does not match the record shape: {exc}") from exc


# ── Batch Execution ──────────────────────────────────────────────────


async def execute_batch(
    batch_index: int,
    fields: list[SchemaField],
    document: str,
    backend: ExtractionBackend,
) -> ExtractionResult:
    """Compile contract and prompt for one batch, call the backend, decode."""
    contract = build_output_contract(fields)
    prompt = build_prompt(fields)
    logger.info("Batch %d: requesting %d field(s)", batch_index, len(fields))

    try:
        raw = await backend.extract(document, prompt, contract)
        result = decode_answer(raw, fields)
    except Exception as exc:
        raise BatchExecutionError(batch_index, exc) from exc

    logger.info("Batch %d: received %d field(s)", batch_index, len(result))
    return result


async def run_batches(
    batches: list[list[SchemaField]],
    document: str,
    backend: ExtractionBackend,
) -> list[ExtractionResult]:
    """Run every batch concurrently and return their results in batch order.

    All batches run to completion even when one fails; afterwards the failure
    with the lowest batch index is raised and the others are logged.
    """
    outcomes = await asyncio.gather(
        *(
            execute_batch(i, batch, document, backend)
            for i, batch in enumerate(batches)
        ),
        return_exceptions=True,
    )

    failures = [o for o in outcomes if isinstance(o, BaseException)]
    if failures:
        for other in failures[1:]:
            logger.error("%s", other)
        raise failures[0]

    return list(outcomes)


# ── Merge ────────────────────────────────────────────────────────────


def merge_results(
    batch_results: list[ExtractionResult],
    fields: list[SchemaField],
) -> ExtractionResult:
    """Union per-batch results and check them against the schema.

    Returns a mapping ordered like ``fields``. Raises on a field produced by
    two batches, a schema field with no result, or a result outside the schema.
    """
    merged: ExtractionResult = {}
    for batch_index, partial in enumerate(batch_results):
        for name, record in partial.items():
            if name in merged:
                raise DuplicateFieldAcrossBatches(name, batch_index)
            merged[name] = record

    for f in fields:
        if f.field_name not in merged:
            raise FieldMissingFromExtraction(f.field_name)

    if len(merged) != len(fields):
        known = {f.field_name for f in fields}
        extra = next(name for name in merged if name not in known)
        raise UnexpectedField(extra)

    return {f.field_name: merged[f.field_name] for f in fields}


# ── Document Extraction ──────────────────────────────────────────────


async def extract_document(
    fields: list[SchemaField],
    document: str,
    backend: ExtractionBackend,
    batch_size: int,
) -> ExtractionResult:
    """Plan batches, run them concurrently, and merge into one result."""
    batches = plan_batches(fields, batch_size)
    logger.info(
        "Extracting %d field(s) in %d batch(es) of up to %d",
        len(fields), len(batches), batch_size,
    )

    batch_results = await run_batches(batches, document, backend)
    result = merge_results(batch_results, fields)

    logger.info("Extraction complete: %d field(s) merged", len(result))
    return result
