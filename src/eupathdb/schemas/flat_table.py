"""Pandera schema for flattened annotation tables."""

from __future__ import annotations

import pandas as pd
import pandera.pandas as pa
from pandera.errors import SchemaError, SchemaErrors
from pandera.typing import Series

from eupathdb.common.exceptions import ValidationError
from eupathdb.normalize.flatten import GID_COLUMN


class FlatTableSchema(pa.DataFrameModel):
    """Schema for a flattened sub-table.

    Only the key column is fixed; the remaining columns depend on the
    sub-table that was requested.
    """

    GID: Series[str] = pa.Field(
        description="Canonical gene identifier",
        nullable=False,
        str_length={"min_value": 1},
    )

    class Config:
        strict = False  # sub-table columns vary per query
        coerce = False


def validate_flat_table(frame: pd.DataFrame) -> pd.DataFrame:
    """Validate ``frame`` and return it unchanged.

    Empty tables (no columns) are valid.

    Raises:
        ValidationError: if ``GID`` is missing, not the first column, or holds
            null/empty values.
    """
    if frame.empty and len(frame.columns) == 0:
        return frame
    if frame.columns[0] != GID_COLUMN:
        raise ValidationError(
            f"First column must be {GID_COLUMN!r}, got {frame.columns[0]!r}",
            schema_name="FlatTableSchema",
        )
    try:
        FlatTableSchema.validate(frame, lazy=True)
    except (SchemaError, SchemaErrors) as exc:
        raise ValidationError(
            "Flat table failed schema validation",
            schema_name="FlatTableSchema",
            validation_errors=[str(exc)],
            cause=exc,
        ) from exc
    return frame


__all__ = ["FlatTableSchema", "validate_flat_table"]
