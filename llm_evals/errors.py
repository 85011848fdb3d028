from __future__ import annotations


class EvalError(Exception):
    """Base error for the evaluation pipeline."""


class ConfigurationError(EvalError):
    """Credential is missing or a CLI value is invalid."""


class DatasetParseError(EvalError):
    """The CSV stream emitted a row the reader cannot recover from."""


class RecordValidationError(EvalError, ValueError):
    """A raw CSV row does not satisfy the record schema."""


class ModelRefusalError(EvalError):
    """The remote model explicitly refused to answer."""


class MalformedResponseError(EvalError):
    """The response carried no structured payload."""


class RetriesExhaustedError(EvalError):
    """Every attempt of a remote call failed."""


class NoDataError(EvalError):
    """There are no predictions to analyze."""
