"""Normalization of EuPathDB responses into flat tables."""

from eupathdb.normalize.flatten import (
    GID_COLUMN,
    TableSchema,
    extract_records,
    flatten_attributes,
    flatten_table,
)
from eupathdb.normalize.identifiers import derive_gene_id, parse_composite_id

__all__ = [
    "GID_COLUMN",
    "TableSchema",
    "derive_gene_id",
    "extract_records",
    "flatten_attributes",
    "flatten_table",
    "parse_composite_id",
]
