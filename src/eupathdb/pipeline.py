"""Fetch-and-flatten pipeline for EuPathDB annotation tables."""

from __future__ import annotations

import contextvars
from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

import pandas as pd
import structlog

from eupathdb.clients.eupathdb import EuPathDBClient, QueryResult
from eupathdb.config import PipelineConfig
from eupathdb.io.writer import output_path_for, write_flat_table
from eupathdb.logging_setup import bind_stage
from eupathdb.normalize.flatten import flatten_attributes, flatten_table
from eupathdb.schemas.flat_table import validate_flat_table

Variant = Literal["attributes", "table"]

ATTRIBUTES_ENDPOINT = "GeneQuestions/GenesByTaxonGene"
TABLE_ENDPOINT = "GeneQuestions/GenesByTaxon"


def _organism_label(provider: str, organism: str) -> str:
    return f"{organism} ({provider})"


def fetch_attributes(
    client: EuPathDBClient,
    provider: str,
    organism: str,
    table_name: str,
    *,
    endpoint: str = ATTRIBUTES_ENDPOINT,
    response_format: str = "json",
    timeout_seconds: float | None = None,
) -> tuple[pd.DataFrame, QueryResult]:
    """Fetch ``table_name`` through an attribute query and flatten it."""
    result = client.fetch(
        provider,
        organism,
        {"o-tables": table_name, "o-fields": "primary_key"},
        endpoint,
        response_format,
        timeout_seconds=timeout_seconds,
    )
    return flatten_attributes(result.payload, table_name, _organism_label(provider, organism)), result


def fetch_table(
    client: EuPathDBClient,
    provider: str,
    organism: str,
    table_name: str,
    *,
    endpoint: str = TABLE_ENDPOINT,
    response_format: str = "json",
    timeout_seconds: float | None = None,
) -> tuple[pd.DataFrame, QueryResult]:
    """Fetch ``table_name`` through a table query and flatten it."""
    result = client.fetch(
        provider, organism, {"o-tables": table_name}, endpoint, response_format, timeout_seconds=timeout_seconds
    )
    return flatten_table(result.payload, table_name, _organism_label(provider, organism)), result


def retrieve_attributes(client: EuPathDBClient, provider: str, organism: str, table_name: str, **kwargs) -> pd.DataFrame:
    """Return the flattened ``table_name`` table for ``organism`` (attribute query)."""
    frame, _ = fetch_attributes(client, provider, organism, table_name, **kwargs)
    return frame


def retrieve_table(client: EuPathDBClient, provider: str, organism: str, table_name: str, **kwargs) -> pd.DataFrame:
    """Return the flattened ``table_name`` table for ``organism`` (table query)."""
    frame, _ = fetch_table(client, provider, organism, table_name, **kwargs)
    return frame


@dataclass
class TableResult:
    """One flattened (organism, table) pair."""

    provider: str
    organism: str
    table: str
    frame: pd.DataFrame
    error: str | None = None
    path: Path | None = None

    @property
    def degraded(self) -> bool:
        """True when the query failed and ``frame`` is the empty fallback."""
        return self.error is not None

    @property
    def rows(self) -> int:
        return len(self.frame)


class AnnotationPipeline:
    """Retrieve several tables for several organisms of one provider.

    Each (organism, table) pair is an independent query and flatten; with
    ``runtime.workers > 1`` pairs run on a thread pool. Results keep input
    order.
    """

    def __init__(self, config: PipelineConfig | None = None, client: EuPathDBClient | None = None) -> None:
        self.config = config or PipelineConfig()
        self.client = client or EuPathDBClient(self.config.http)
        self.logger = bind_stage(structlog.get_logger(self.__class__.__name__), "extract")

    def _run_one(self, provider: str, organism: str, table_name: str, variant: Variant) -> TableResult:
        query = self.config.query
        if variant == "attributes":
            frame, result = fetch_attributes(
                self.client, provider, organism, table_name,
                endpoint=query.attributes_endpoint, response_format=query.response_format,
            )
        else:
            frame, result = fetch_table(
                self.client, provider, organism, table_name,
                endpoint=query.table_endpoint, response_format=query.response_format,
            )

        if self.config.runtime.validate_output:
            validate_flat_table(frame)
        if result.degraded:
            self.logger.warning("table_degraded", provider=provider, organism=organism, table=table_name, error=result.error)
        return TableResult(provider=provider, organism=organism, table=table_name, frame=frame, error=result.error)

    def run(
        self,
        provider: str,
        organisms: Iterable[str],
        tables: Iterable[str],
        *,
        variant: Variant = "attributes",
    ) -> list[TableResult]:
        """Fetch and flatten every (organism, table) pair."""
        if variant not in ("attributes", "table"):
            raise ValueError(f"Unknown variant: {variant!r}")
        tables = list(tables)
        jobs = [(organism, table) for organism in organisms for table in tables]
        workers = min(self.config.runtime.workers, len(jobs)) if jobs else 1
        self.logger.info("pipeline_started", provider=provider, jobs=len(jobs), workers=workers, variant=variant)

        if workers <= 1:
            results = [self._run_one(provider, organism, table, variant) for organism, table in jobs]
        else:
            with ThreadPoolExecutor(max_workers=workers) as executor:
                # workers inherit the caller's run_id and stage
                futures = [
                    executor.submit(contextvars.copy_context().run, self._run_one, provider, organism, table, variant)
                    for organism, table in jobs
                ]
                results = [future.result() for future in futures]

        self.logger.info(
            "pipeline_finished",
            provider=provider,
            jobs=len(results),
            rows=sum(r.rows for r in results),
            degraded=sum(1 for r in results if r.degraded),
        )
        return results

    def write(self, results: Iterable[TableResult]) -> list[Path]:
        """Write non-empty results; nothing is written in dry-run mode."""
        output = self.config.io.output
        written: list[Path] = []
        for result in results:
            if result.frame.empty:
                continue
            path = output_path_for(output, result.provider, result.organism, result.table)
            if self.config.runtime.dry_run:
                self.logger.info("dry_run_skip_write", path=str(path), rows=result.rows)
                continue
            result.path = write_flat_table(result.frame, path, output)
            written.append(path)
        return written


__all__ = [
    "ATTRIBUTES_ENDPOINT",
    "AnnotationPipeline",
    "TABLE_ENDPOINT",
    "TableResult",
    "fetch_attributes",
    "fetch_table",
    "retrieve_attributes",
    "retrieve_table",
]
