"""Export convenience function."""

from pathlib import Path

from pdfields.agents.models import ExtractionResult
from pdfields.core.schema import SchemaField
from pdfields.exporters.results_table import export_results_csv, export_results_excel


def export_results(
    result: ExtractionResult,
    fields: list[SchemaField],
    output_path: str | Path,
) -> str:
    """Write results to ``output_path``; ``.xlsx`` gives Excel, anything else CSV."""
    out = Path(output_path)
    out.parent.mkdir(parents=True, exist_ok=True)

    if out.suffix.lower() == ".xlsx":
        export_results_excel(result, fields, str(out))
    else:
        export_results_csv(result, fields, str(out))
    return str(out)
