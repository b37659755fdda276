"""Persist flattened tables."""

from __future__ import annotations

import re
from pathlib import Path

import pandas as pd
import structlog

from eupathdb.config import CsvFormatSettings, OutputSettings

logger = structlog.get_logger(__name__)

_SLUG_PATTERN = re.compile(r"[^A-Za-z0-9._-]+")


def slugify(value: str) -> str:
    """Make ``value`` safe for use in a file name."""
    return _SLUG_PATTERN.sub("_", value.strip()).strip("_")


def output_path_for(settings: OutputSettings, provider: str, organism: str, table_name: str) -> Path:
    """Return ``<dir>/<provider>/<organism>_<table>.<ext>``."""
    extension = "parquet" if settings.format == "parquet" else "csv"
    file_name = f"{slugify(organism)}_{slugify(table_name)}.{extension}"
    return settings.dir / slugify(provider.lower()) / file_name


def _csv_options(settings: CsvFormatSettings) -> dict[str, object]:
    options: dict[str, object] = {
        "index": False,
        "encoding": settings.encoding,
        "sep": settings.sep,
    }
    if settings.na_rep is not None:
        options["na_rep"] = settings.na_rep
    if settings.line_terminator is not None:
        options["lineterminator"] = settings.line_terminator
    return options


def write_flat_table(frame: pd.DataFrame, path: Path, settings: OutputSettings | None = None) -> Path:
    """Write ``frame`` to ``path`` keeping its column order and without an index."""
    settings = settings or OutputSettings()
    path.parent.mkdir(parents=True, exist_ok=True)

    if settings.format == "parquet":
        # Parquet needs homogeneous column types
        frame.astype("string").to_parquet(path, index=False, compression=settings.parquet.compression)
    else:
        frame.to_csv(path, **_csv_options(settings.csv))

    logger.info("table_written", path=str(path), rows=len(frame), columns=len(frame.columns))
    return path


__all__ = ["output_path_for", "slugify", "write_flat_table"]
