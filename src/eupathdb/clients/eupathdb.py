"""HTTP client for the EuPathDB-family web services."""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any
from urllib.parse import quote

import requests

from eupathdb.clients.base import BaseApiClient
from eupathdb.clients.providers import normalize_provider, resolve_prefix
from eupathdb.common.exceptions import ApiClientError, TimeoutError, UnsupportedFormatError

DEFAULT_ENDPOINT = "GeneQuestions/GenesByTaxon"
SUPPORTED_FORMATS = frozenset({"json"})

LOG_URL_MAX_LENGTH = 200
LOG_URL_TRUNCATE_AT = 160


def empty_response() -> dict[str, Any]:
    """Return the response shape of a query that matched no records."""
    return {"response": {"recordset": {"records": []}}}


def truncate_url(url: str) -> str:
    """Shorten long URLs for log output."""
    if len(url) > LOG_URL_MAX_LENGTH:
        return url[:LOG_URL_TRUNCATE_AT] + "..."
    return url


@dataclass(frozen=True)
class QueryResult:
    """Outcome of a GET query.

    ``payload`` is always usable by the flatteners. ``error`` is set when the
    request could not be completed and ``payload`` is the empty fallback.
    """

    url: str
    payload: Any
    error: str | None = None

    @property
    def degraded(self) -> bool:
        return self.error is not None


class EuPathDBClient(BaseApiClient):
    """Client for the GET webservices and the POST answer service."""

    api_name = "eupathdb"

    def build_query_url(
        self,
        provider: str,
        organism: str,
        extra_params: Mapping[str, Any] | None = None,
        endpoint_path: str = DEFAULT_ENDPOINT,
        response_format: str = "json",
    ) -> str:
        """Build the GET URL; ``organism`` is percent-encoded including reserved characters."""
        if not isinstance(organism, str) or not organism:
            raise ValueError("organism must be a non-empty string")
        base = self._make_url(provider, f"webservices/{endpoint_path.strip('/')}.{response_format}")
        query = [f"organism={quote(organism, safe='')}"]
        for key, value in (extra_params or {}).items():
            if key == "organism":
                continue
            query.append(f"{quote(str(key), safe='')}={quote(str(value), safe=',')}")
        return f"{base}?{'&'.join(query)}"

    def fetch(
        self,
        provider: str,
        organism: str,
        extra_params: Mapping[str, Any] | None = None,
        endpoint_path: str = DEFAULT_ENDPOINT,
        response_format: str = "json",
        timeout_seconds: float | None = None,
    ) -> QueryResult:
        """Query a GET webservice and return a tagged result.

        Connection failures and timeouts do not raise; the result carries the
        empty response and an error message instead.

        Raises:
            UnsupportedFormatError: if ``response_format`` is not ``"json"``.
            ApiClientError: on an HTTP error status or a non-JSON body.
        """
        if response_format not in SUPPORTED_FORMATS:
            raise UnsupportedFormatError(response_format)

        timeout = self.settings.timeout_sec if timeout_seconds is None else timeout_seconds
        url = self.build_query_url(provider, organism, extra_params, endpoint_path, response_format)
        self.logger.info("querying", url=truncate_url(url))

        try:
            response = self._request("GET", url, timeout=timeout, headers={"Content-Type": "application/json"})
        except (requests.exceptions.ConnectionError, requests.exceptions.Timeout) as exc:
            self.logger.warning(
                "query_failed_returning_empty_result",
                url=truncate_url(url),
                timeout=timeout,
                error=str(exc),
            )
            return QueryResult(url=url, payload=empty_response(), error=f"{type(exc).__name__}: {exc}")

        return QueryResult(url=url, payload=self._decode(response, url))

    def query(
        self,
        provider: str,
        organism: str,
        extra_params: Mapping[str, Any] | None = None,
        endpoint_path: str = DEFAULT_ENDPOINT,
        response_format: str = "json",
        timeout_seconds: float | None = None,
    ) -> Any:
        """Query a GET webservice and return the parsed JSON body.

        A timed-out or unreachable request yields ``empty_response()``.
        """
        return self.fetch(provider, organism, extra_params, endpoint_path, response_format, timeout_seconds).payload

    def post(self, provider: str, query_body: Any) -> Any:
        """Submit ``query_body`` to the provider's answer service.

        Raises:
            UnknownProviderError: if the provider has no known prefix.
            TimeoutError: if the answer service does not respond in time.
            ApiClientError: on other transport errors, error statuses or non-JSON bodies.
        """
        prefix = resolve_prefix(provider)
        url = self._make_url(provider, f"{prefix}/service/answer")
        self.logger.info("querying", url=truncate_url(url), method="POST")

        try:
            response = self._request(
                "POST",
                url,
                json=query_body,
                timeout=self.settings.post_timeout_sec,
                headers={"Content-Type": "application/json"},
            )
        except requests.exceptions.Timeout as exc:
            timeout = self.settings.post_timeout_sec
            raise TimeoutError(f"POST timed out after {timeout}s for {url}", url=url, timeout=timeout, cause=exc) from exc
        except requests.exceptions.RequestException as exc:
            raise ApiClientError(f"POST failed for {url}: {exc}", url=url, api_name=self.api_name, cause=exc) from exc

        payload = self._decode(response, url)
        self.logger.info("post_finished", provider=normalize_provider(provider))
        return payload

    def _decode(self, response: requests.Response, url: str) -> Any:
        try:
            response.raise_for_status()
        except requests.exceptions.HTTPError as exc:
            self.logger.error("unexpected_status", url=truncate_url(url), status_code=response.status_code)
            raise ApiClientError(
                f"unexpected status code {response.status_code}",
                url=url,
                status_code=response.status_code,
                api_name=self.api_name,
                cause=exc,
            ) from exc
        try:
            return response.json()
        except (json.JSONDecodeError, ValueError) as exc:
            self.logger.error("invalid_json", url=truncate_url(url), content_type=response.headers.get("content-type"))
            raise ApiClientError("response was not valid JSON", url=url, status_code=response.status_code, api_name=self.api_name, cause=exc) from exc


__all__ = [
    "DEFAULT_ENDPOINT",
    "EuPathDBClient",
    "QueryResult",
    "empty_response",
    "truncate_url",
]
