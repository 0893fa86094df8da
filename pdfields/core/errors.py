"""Error taxonomy: schema input errors, backend/batch errors, consistency errors."""

from typing import Optional


class PdfieldsError(Exception):
    """Base class for every error raised by pdfields."""


class ConfigError(PdfieldsError):
    """Invalid configuration file, option, or missing credential."""


# ── Schema Validation (user input) ───────────────────────────────────


class SchemaValidationError(PdfieldsError):
    """A schema row failed validation.

    ``row`` is the 1-based CSV row number (header is row 1); it is filled in
    by the loader, so it is ``None`` when a single row is validated directly.
    """

    def __init__(self, detail: str, row: Optional[int] = None):
        self.detail = detail
        self.row = row
        super().__init__(detail)

    def __str__(self) -> str:
        if self.row is None:
            return self.detail
        return f"Schema row {self.row}: {self.detail}"


class EmptyFieldName(SchemaValidationError):
    def __init__(self):
        super().__init__("Field name is empty")


class FieldNameTooLong(SchemaValidationError):
    def __init__(self, name: str, length: int, limit: int):
        self.name = name
        self.length = length
        super().__init__(
            f"Field name '{name}' exceeds {limit} characters (length: {length})"
        )


class NonAsciiFieldName(SchemaValidationError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Field name '{name}' contains non-ASCII characters")


class DescriptionTooLong(SchemaValidationError):
    def __init__(self, name: str, length: int, limit: int):
        self.name = name
        self.length = length
        super().__init__(
            f"Description for field '{name}' exceeds {limit} characters "
            f"(length: {length})"
        )


class NonAsciiDescription(SchemaValidationError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(
            f"Description for field '{name}' contains non-ASCII characters"
        )


class InvalidKind(SchemaValidationError):
    def __init__(self, raw: str, name: str, allowed: str):
        self.raw = raw
        self.name = name
        super().__init__(
            f"Invalid schema kind '{raw}' for field '{name}'. Must be one of: {allowed}"
        )


class InvalidInfer(SchemaValidationError):
    def __init__(self, raw: str, name: str):
        self.raw = raw
        self.name = name
        super().__init__(
            f"Invalid infer value '{raw}' for field '{name}'. "
            "Must be true/false, yes/no, or 1/0"
        )


class DuplicateFieldName(SchemaValidationError):
    def __init__(self, name: str, row: int):
        self.name = name
        super().__init__(f"Duplicate field name '{name}' found in schema", row=row)


class MalformedSchema(SchemaValidationError):
    """Structural CSV problem: missing header columns, ragged row, no rows."""


# ── Backend & Batch Execution ────────────────────────────────────────


class BackendError(PdfieldsError):
    """The extraction backend call failed (transport or protocol)."""


class BackendUnavailable(BackendError):
    """Transient backend failure (connection error, 429, 5xx); retryable."""


class AnswerError(PdfieldsError):
    """The backend answered, but the answer cannot be used."""


class InvalidAnswerJSON(AnswerError):
    """The answer text is not syntactically valid JSON."""


class AnswerShapeMismatch(AnswerError):
    """The answer is JSON but does not match the per-field record shape."""


class BatchExecutionError(PdfieldsError):
    """One batch failed; the original error is chained as ``__cause__``."""

    def __init__(self, batch_index: int, cause: Exception):
        self.batch_index = batch_index
        self.cause = cause
        super().__init__(f"Batch {batch_index} failed: {cause}")


# ── Internal Consistency ─────────────────────────────────────────────


class InternalConsistencyError(PdfieldsError):
    """Merged results disagree with the schema (planner/executor defect)."""


class DuplicateFieldAcrossBatches(InternalConsistencyError):
    def __init__(self, name: str, batch_index: int):
        self.name = name
        self.batch_index = batch_index
        super().__init__(
            f"Field '{name}' returned again by batch {batch_index}"
        )


class FieldMissingFromExtraction(InternalConsistencyError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Field {name} not found in extraction result")


class UnexpectedField(InternalConsistencyError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Field {name} is not part of the schema")
