"""Retrieve and flatten gene annotation tables from EuPathDB-family web services."""

from __future__ import annotations

from eupathdb.clients import EuPathDBClient, QueryResult, empty_response, resolve_prefix
from eupathdb.common.exceptions import (
    ApiClientError,
    EuPathDBError,
    MalformedIdentifierError,
    SchemaMismatchError,
    UnknownProviderError,
    UnsupportedFormatError,
)
from eupathdb.config import PipelineConfig, load_config
from eupathdb.io import parse_text_table, write_flat_table
from eupathdb.normalize import flatten_attributes, flatten_table, parse_composite_id
from eupathdb.pipeline import AnnotationPipeline, TableResult, retrieve_attributes, retrieve_table

__version__ = "0.1.0"

__all__ = [
    "AnnotationPipeline",
    "ApiClientError",
    "EuPathDBClient",
    "EuPathDBError",
    "MalformedIdentifierError",
    "PipelineConfig",
    "QueryResult",
    "SchemaMismatchError",
    "TableResult",
    "UnknownProviderError",
    "UnsupportedFormatError",
    "__version__",
    "empty_response",
    "flatten_attributes",
    "flatten_table",
    "load_config",
    "parse_composite_id",
    "parse_text_table",
    "resolve_prefix",
    "retrieve_attributes",
    "retrieve_table",
    "write_flat_table",
]
