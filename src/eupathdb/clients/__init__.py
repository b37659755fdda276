"""HTTP clients for EuPathDB-family web services."""

from eupathdb.clients.base import BaseApiClient
from eupathdb.clients.eupathdb import (
    DEFAULT_ENDPOINT,
    EuPathDBClient,
    QueryResult,
    empty_response,
    truncate_url,
)
from eupathdb.clients.providers import PROVIDER_PREFIXES, known_providers, resolve_prefix

__all__ = [
    "BaseApiClient",
    "DEFAULT_ENDPOINT",
    "EuPathDBClient",
    "PROVIDER_PREFIXES",
    "QueryResult",
    "empty_response",
    "known_providers",
    "resolve_prefix",
    "truncate_url",
]
