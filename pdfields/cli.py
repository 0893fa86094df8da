"""Command-line entry point: schema CSV + PDF in, results table out."""

import argparse
import asyncio
import logging
import sys
import time
from pathlib import Path
from typing import Optional

from pdfields.agents.extractor import extract_document
from pdfields.agents.models import ExtractionResult
from pdfields.backends.base import ExtractionBackend, build_backend
from pdfields.core.config import ExtractionConfig, load_config
from pdfields.core.errors import (
    BatchExecutionError,
    ConfigError,
    InternalConsistencyError,
    SchemaValidationError,
)
from pdfields.core.schema import SchemaField, read_schema, schema_hash
from pdfields.exporters import export_results
from pdfields.parsers.pdf import compute_pdf_hash, pdf_to_data_url

logger = logging.getLogger("pdfields")


# ── Run ──────────────────────────────────────────────────────────────


async def _extract_with(
    backend: ExtractionBackend,
    fields: list[SchemaField],
    document: str,
    batch_size: int,
) -> ExtractionResult:
    try:
        return await extract_document(fields, document, backend, batch_size)
    finally:
        aclose = getattr(backend, "aclose", None)
        if aclose is not None:
            await aclose()


def run_extraction(
    schema_path: str | Path,
    pdf_path: str | Path,
    output_path: str | Path,
    config: ExtractionConfig,
    backend: Optional[ExtractionBackend] = None,
) -> str:
    """Load the schema, extract every field from the PDF, write the table.

    Nothing is written unless every schema field was extracted.
    """
    t_start = time.time()

    fields = read_schema(schema_path)
    logger.info(
        "Loaded %d field(s) from %s (schema hash: %s)",
        len(fields), schema_path, schema_hash(fields)[:12],
    )

    document = pdf_to_data_url(pdf_path)
    logger.info("Document: %s (sha256: %s)", pdf_path, compute_pdf_hash(pdf_path)[:12])

    if backend is None:
        backend = build_backend(config)

    result = asyncio.run(_extract_with(backend, fields, document, config.batch_size))
    out = export_results(result, fields, output_path)

    logger.info("Done in %.1fs: %d row(s) written to %s", time.time() - t_start, len(fields), out)
    return out


# ── CLI ──────────────────────────────────────────────────────────────


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pdfields",
        description="Extract schema-defined fields from a PDF with an LLM",
    )
    parser.add_argument("schema", help="Path to the schema CSV file")
    parser.add_argument("pdf", help="Path to the PDF file to extract data from")
    parser.add_argument("output", help="Path to the output file (.csv or .xlsx)")
    parser.add_argument(
        "--batch",
        type=int,
        default=None,
        help="Number of fields to process in each batch (default: 20)",
    )
    parser.add_argument("--config", default=None, help="Path to a YAML config file")
    parser.add_argument(
        "--backend",
        choices=("openrouter", "ollama"),
        default=None,
        help="Extraction backend (default: openrouter)",
    )
    parser.add_argument("--model", default=None, help="Model name for the selected backend")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    try:
        config = load_config(args.config).with_overrides(
            batch_size=args.batch, backend=args.backend, model=args.model
        )
        run_extraction(args.schema, args.pdf, args.output, config)
    except ConfigError as exc:
        logger.error("Configuration error: %s", exc)
        return 2
    except SchemaValidationError as exc:
        logger.error("Invalid schema: %s", exc)
        return 1
    except BatchExecutionError as exc:
        logger.error("Extraction failed: %s", exc)
        return 1
    except InternalConsistencyError as exc:
        logger.error("Internal consistency error (please report): %s", exc)
        return 1
    except OSError as exc:
        logger.error("I/O error: %s", exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
