"""Shared pytest fixtures for EuPathDB retrieval tests."""

from __future__ import annotations

from typing import Any

import pytest
import requests

from eupathdb.clients.base import BaseApiClient
from eupathdb.clients.eupathdb import EuPathDBClient

GO_COLUMNS = ["go_id", "ontology", "go_term_name", "source", "evidence_code", "is_not"]


def make_row(values: list[Any], columns: list[str] = GO_COLUMNS) -> dict[str, Any]:
    return {"fields": [{"name": name, "value": value} for name, value in zip(columns, values)]}


def make_record(
    gene_id: str,
    rows: list[dict[str, Any]],
    *,
    table_name: str = "GoTerms",
    provider: str = "TriTrypDB",
    fields: list[dict[str, Any]] | None = None,
) -> dict[str, Any]:
    """Build one gene record in the API's list form for ``tables``."""
    return {
        "id": f"{gene_id}/{provider}",
        "fields": fields if fields is not None else [{"name": "primary_key", "value": f"{gene_id},{gene_id}:mRNA"}],
        "tables": [{"name": table_name, "rows": rows}],
    }


def make_response(records: list[dict[str, Any]]) -> dict[str, Any]:
    return {"response": {"recordset": {"records": records}}}


def go_row(go_id: str, name: str = "microtubule-based movement") -> dict[str, Any]:
    return make_row([go_id, "Biological Process", name, "Interpro", "IEA", None])


@pytest.fixture(autouse=True)
def _fresh_shared_session():
    BaseApiClient.reset_shared_session()
    yield
    BaseApiClient.reset_shared_session()


@pytest.fixture()
def client() -> EuPathDBClient:
    return EuPathDBClient(session=requests.Session())


@pytest.fixture()
def go_response() -> dict[str, Any]:
    """Three genes: two entries, none, one entry."""
    return make_response(
        [
            make_record("LmjF.01.0010", [go_row("GO:0007018"), go_row("GO:0005515", "protein binding")]),
            make_record("LmjF.01.0020", []),
            make_record("LmjF.01.0030", [go_row("GO:0003777", "microtubule motor activity")]),
        ]
    )
