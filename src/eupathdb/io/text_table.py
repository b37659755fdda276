"""Parser for EuPathDB organism text dumps.

The dumps list genes one after another. A ``Gene ID: <id>`` line opens a
gene; each ``TABLE: <name>`` line is followed by a tab-delimited table with a
header row, terminated by a blank line. Header names are quoted in square
brackets (``[GO ID]``), which are removed.
"""

from __future__ import annotations

import gzip
import io
from collections.abc import Iterator
from pathlib import Path
from typing import IO

import pandas as pd
import structlog

from eupathdb.normalize.flatten import GID_COLUMN

GENE_ID_MARKER = "Gene ID"
TABLE_MARKER = "TABLE: "

logger = structlog.get_logger(__name__)


def _open_text(path: Path) -> IO[str]:
    if path.suffix == ".gz":
        return gzip.open(path, "rt", encoding="utf-8")
    return path.open("r", encoding="utf-8")


def marker_value(line: str) -> str:
    """Return the value of a ``key: value`` line with spaces removed."""
    return line.split(": ")[-1].replace(" ", "").strip()


def clean_column_name(name: str) -> str:
    """Remove the bracket quoting around a header name: ``[GO ID]`` -> ``GO ID``."""
    name = name.strip()
    if name.startswith("[") and name.endswith("]"):
        name = name[1:-1]
    return name.strip()


def _read_block(lines: Iterator[str]) -> list[str]:
    block: list[str] = []
    for line in lines:
        line = line.rstrip("\r\n")
        if not line.strip():
            break
        block.append(line)
    return block


def _block_frame(block: list[str]) -> pd.DataFrame:
    frame = pd.read_csv(io.StringIO("\n".join(block)), sep="\t", dtype=str, keep_default_na=False)
    return frame.rename(columns=clean_column_name)


def parse_text_table(file_path: Path | str, table_name: str) -> pd.DataFrame:
    """Collect every ``TABLE: <table_name>`` block of a dump into one table.

    The file is read in a single pass. Rows are tagged with the most recent
    ``Gene ID`` seen before the block; blocks preceding any ``Gene ID`` line
    are skipped.
    """
    path = Path(file_path)
    marker = f"{TABLE_MARKER}{table_name}"
    frames: list[pd.DataFrame] = []
    gene_id: str | None = None

    with _open_text(path) as handle:
        lines = iter(handle)
        for line in lines:
            if line.startswith(GENE_ID_MARKER):
                gene_id = marker_value(line)
            elif line.strip() == marker:
                block = _read_block(lines)
                if len(block) < 2:
                    continue
                if gene_id is None:
                    logger.warning("table_without_gene_skipped", path=str(path), table=table_name)
                    continue
                frame = _block_frame(block)
                frame.insert(0, GID_COLUMN, gene_id)
                frames.append(frame)

    logger.info("parsed_text_table", path=str(path), table=table_name, blocks=len(frames))
    if not frames:
        return pd.DataFrame()
    return pd.concat(frames, ignore_index=True)


__all__ = ["clean_column_name", "marker_value", "parse_text_table"]
