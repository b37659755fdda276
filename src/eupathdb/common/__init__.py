"""Shared building blocks used across the package."""

from eupathdb.common.exceptions import (
    ApiClientError,
    ConfigLoadError,
    EuPathDBError,
    MalformedIdentifierError,
    SchemaMismatchError,
    TimeoutError,
    UnknownProviderError,
    UnsupportedFormatError,
    ValidationError,
)

__all__ = [
    "ApiClientError",
    "ConfigLoadError",
    "EuPathDBError",
    "MalformedIdentifierError",
    "SchemaMismatchError",
    "TimeoutError",
    "UnknownProviderError",
    "UnsupportedFormatError",
    "ValidationError",
]
