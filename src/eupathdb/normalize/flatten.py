"""Flatten nested EuPathDB gene records into rectangular tables.

A response holds one record per gene; each record carries named sub-tables
(GO terms, pathways, ...) whose rows are lists of ``{name, value}`` pairs.
The flatteners select one sub-table and emit one output row per
(gene, table entry) pair, keyed by ``GID``.

The column schema is captured once from the first retained gene's first row.
Every later row is matched to it by position.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from typing import Any

import pandas as pd
import structlog

from eupathdb.common.exceptions import MalformedIdentifierError, SchemaMismatchError
from eupathdb.normalize.identifiers import derive_gene_id

GID_COLUMN = "GID"
PROGRESS_EVERY = 1000

logger = structlog.get_logger(__name__)


def extract_records(raw_response: Any) -> list[Mapping[str, Any]]:
    """Return ``response.recordset.records`` or an empty list when absent."""
    if not isinstance(raw_response, Mapping):
        return []
    response = raw_response.get("response") or {}
    recordset = (response.get("recordset") or {}) if isinstance(response, Mapping) else {}
    records = recordset.get("records") if isinstance(recordset, Mapping) else None
    if not isinstance(records, list):
        return []
    return [record for record in records if isinstance(record, Mapping)]


def table_rows(record: Mapping[str, Any], table_name: str) -> list[Any]:
    """Return the entries of ``table_name`` attached to ``record``.

    Both ``{"GoTerms": {"rows": [...]}}`` and the API's list form
    ``[{"name": "GoTerms", "rows": [...]}]`` are understood.
    """
    tables = record.get("tables")
    entry: Any = None
    if isinstance(tables, Mapping):
        entry = tables.get(table_name)
    elif isinstance(tables, list):
        entry = next(
            (t for t in tables if isinstance(t, Mapping) and t.get("name") == table_name),
            None,
        )

    if isinstance(entry, Mapping):
        entry = entry.get("rows")
    return list(entry) if isinstance(entry, list) else []


def row_fields(row: Any) -> list[tuple[str, Any]]:
    """Return a row's ``(name, value)`` pairs in API order."""
    if isinstance(row, Mapping) and "fields" in row:
        row = row["fields"]
    if isinstance(row, Mapping):
        return [(str(name), value) for name, value in row.items()]
    if isinstance(row, list):
        return [(str(field.get("name")), field.get("value")) for field in row if isinstance(field, Mapping)]
    return []


@dataclass(frozen=True)
class TableSchema:
    """Column names of one sub-table, fixed for the whole query."""

    table_name: str
    columns: tuple[str, ...]

    @classmethod
    def capture(cls, table_name: str, first_row: Any) -> TableSchema:
        return cls(table_name=table_name, columns=tuple(name for name, _ in row_fields(first_row)))

    @property
    def output_columns(self) -> list[str]:
        return [GID_COLUMN, *self.columns]

    def conform(self, row: Any, *, gene_id: str | None = None) -> tuple[Any, ...]:
        """Return the row's values in schema order."""
        values = tuple(value for _, value in row_fields(row))
        if len(values) != len(self.columns):
            raise SchemaMismatchError(
                f"Row of {self.table_name} table for gene {gene_id} has {len(values)} fields, "
                f"expected {len(self.columns)}",
                table_name=self.table_name,
                expected=len(self.columns),
                actual=len(values),
                record_id=gene_id,
            )
        return values


def empty_table() -> pd.DataFrame:
    return pd.DataFrame()


def _flatten(
    records: Iterable[Mapping[str, Any]],
    table_name: str,
    organism_label: str,
    gene_id_for: Callable[[Mapping[str, Any]], str],
    *,
    report_progress: bool,
) -> pd.DataFrame:
    genes = [(record, rows) for record in records if (rows := table_rows(record, table_name))]
    if not genes:
        return empty_table()

    total = len(genes)
    if report_progress:
        logger.info("parsing_rows", table=table_name, organism=organism_label, genes=total)

    schema = TableSchema.capture(table_name, genes[0][1][0])
    output: list[tuple[Any, ...]] = []
    for index, (record, rows) in enumerate(genes, start=1):
        gene_id = gene_id_for(record)
        output.extend((gene_id, *schema.conform(row, gene_id=gene_id)) for row in rows)
        if report_progress and index % PROGRESS_EVERY == 0:
            logger.info("parsing_progress", table=table_name, organism=organism_label, gene=index, genes=total)

    logger.info(
        "finished_parsing",
        table=table_name,
        organism=organism_label,
        genes=total,
        rows=len(output),
    )
    return pd.DataFrame(output, columns=schema.output_columns, dtype=object)


def flatten_attributes(raw_response: Any, table_name: str, organism_label: str) -> pd.DataFrame:
    """Flatten an attribute-query response; gene ids are recovered from ``fields``.

    Genes without entries in ``table_name`` are dropped. An empty response,
    or one where no gene has entries, gives an empty DataFrame.
    """
    records = extract_records(raw_response)
    if not records:
        return empty_table()

    logger.info("parsing_table", table=table_name, organism=organism_label)
    return _flatten(records, table_name, organism_label, derive_gene_id, report_progress=True)


def _record_id(record: Mapping[str, Any]) -> str:
    record_id = record.get("id")
    if not isinstance(record_id, str) or not record_id.strip():
        raise MalformedIdentifierError("Record has no usable id", value=record_id)
    return record_id


def flatten_table(raw_response: Any, table_name: str, organism_label: str) -> pd.DataFrame:
    """Flatten a table-query response; gene ids are the records' ``id`` as-is."""
    records = extract_records(raw_response)
    logger.info("parsing_table", table=table_name, organism=organism_label)
    if not records:
        return empty_table()
    return _flatten(records, table_name, organism_label, _record_id, report_progress=False)


__all__ = [
    "GID_COLUMN",
    "PROGRESS_EVERY",
    "TableSchema",
    "extract_records",
    "flatten_attributes",
    "flatten_table",
    "row_fields",
    "table_rows",
]
