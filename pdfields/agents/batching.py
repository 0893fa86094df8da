"""Split the field list into fixed-size, order-preserving batches."""

from pdfields.core.schema import SchemaField


def plan_batches(fields: list[SchemaField], batch_size: int) -> list[list[SchemaField]]:
    """Chunk ``fields`` into batches of at most ``batch_size``; the last may be short."""
    if batch_size < 1:
        raise ValueError(f"batch_size must be >= 1, got {batch_size}")
    return [fields[i : i + batch_size] for i in range(0, len(fields), batch_size)]
