"""Exceptions used within cubefilter"""

from __future__ import annotations

from typing import Any

__all__ = [
    "CubefilterError",
    "UserError",
    "InternalError",
    "ModelError",
    "MalformedMetadata",
    "ArgumentError",
    "UnknownDimension",
    "QueryEngineError",
]


class CubefilterError(Exception):
    """Generic error class with optional context."""

    def __init__(self, message: str, *, context: dict[str, Any] | None = None):
        super().__init__(message)
        self.context = context or {}

    def add_context(self, key: str, value: Any) -> CubefilterError:
        self.context[key] = value
        return self

    def __str__(self) -> str:
        base_msg = super().__str__()
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{base_msg} (context: {context_str})"
        return base_msg


class UserError(CubefilterError):
    """Superclass for all errors caused by callers of the adapter. Messages
    of this error might be passed to the front-end."""

    error_type = "unknown_user_error"


class InternalError(CubefilterError):
    """Superclass for all errors that happened internally: configuration
    issues, broken metadata or engine contract violations."""

    error_type = "internal_error"


class ModelError(InternalError):
    """Metadata related exception."""

    error_type = "model"


class MalformedMetadata(ModelError):
    """Raised when a metadata document does not have the required shape.

    `errors` is a list of ``(field, message)`` tuples, one per offending
    field."""

    error_type = "malformed_metadata"

    def __init__(self, message: str, errors: list[tuple[str, str]] | None = None):
        super().__init__(message)
        self.errors = list(errors or [])

    @property
    def fields(self) -> list[str]:
        return [field for field, _ in self.errors]


class ArgumentError(UserError):
    """Invalid argument."""

    error_type = "argument"


class UnknownDimension(ArgumentError):
    """Requested dimension is not declared in the metadata."""

    error_type = "unknown_dimension"

    def __init__(self, dimension: str | None, message: str | None = None):
        message = message or f"Unknown dimension '{dimension}'"
        super().__init__(message)
        self.dimension = dimension


class QueryEngineError(InternalError):
    """The query engine returned data that violates the wire contract."""

    error_type = "query_engine"
