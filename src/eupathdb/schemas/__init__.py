"""Validation schemas for output tables."""

from eupathdb.schemas.flat_table import FlatTableSchema, validate_flat_table

__all__ = ["FlatTableSchema", "validate_flat_table"]
