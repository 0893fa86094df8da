"""Data models for extraction answers."""

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, JsonValue, StrictFloat, StrictInt, TypeAdapter

MatchType = Literal["found", "not_found", "inferred"]


class ExtractedField(BaseModel):
    """A single extracted field with the location of its evidence.

    Location members are strict: ``"3"`` is not a page and ``true`` is not a
    coordinate.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    value: Optional[JsonValue] = None
    match_type: MatchType
    comment: Optional[str] = None
    page: StrictInt
    xmin: StrictFloat
    ymin: StrictFloat
    xmax: StrictFloat
    ymax: StrictFloat


ExtractionResult = dict[str, ExtractedField]

# Validates a decoded answer object into field name -> record.
extraction_result_adapter: TypeAdapter[ExtractionResult] = TypeAdapter(ExtractionResult)
