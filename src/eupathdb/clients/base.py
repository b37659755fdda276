"""Base utilities for HTTP clients."""

from __future__ import annotations

import threading
from collections.abc import MutableMapping
from typing import Any, ClassVar

import requests
import structlog
from requests import Response
from requests.adapters import HTTPAdapter

from eupathdb.clients.providers import normalize_provider
from eupathdb.config import HTTPSettings


class BaseApiClient:
    """Shared functionality for EuPathDB-family HTTP clients.

    Requests are single attempts; deciding what a failure means is left to the
    subclass.
    """

    _session: ClassVar[requests.Session | None] = None
    _session_lock: ClassVar[threading.Lock] = threading.Lock()

    def __init__(
        self,
        settings: HTTPSettings | None = None,
        *,
        session: requests.Session | None = None,
        default_headers: MutableMapping[str, str] | None = None,
    ) -> None:
        self.settings = settings or HTTPSettings()
        self.session = session or self.shared_session()
        self._shared_session = session is None
        self.default_headers = dict(self.settings.headers)
        if default_headers:
            self.default_headers.update(default_headers)
        self.logger = structlog.get_logger(self.__class__.__name__)

    @classmethod
    def shared_session(cls) -> requests.Session:
        """Return the session shared by all clients that were not given one.

        The adapters never retry, so every query is exactly one request.
        """
        if BaseApiClient._session is None:
            with BaseApiClient._session_lock:
                if BaseApiClient._session is None:
                    session = requests.Session()
                    adapter = HTTPAdapter(max_retries=0)
                    session.mount("http://", adapter)
                    session.mount("https://", adapter)
                    BaseApiClient._session = session
        return BaseApiClient._session

    @classmethod
    def reset_shared_session(cls) -> None:
        """Close and forget the shared session."""
        with BaseApiClient._session_lock:
            if BaseApiClient._session is not None:
                BaseApiClient._session.close()
            BaseApiClient._session = None

    def base_url(self, provider: str) -> str:
        """Return the site root for ``provider``, e.g. ``http://tritrypdb.org``."""
        return self.settings.base_url_template.format(provider=normalize_provider(provider))

    def _make_url(self, provider: str, path: str) -> str:
        """Build full URL from a provider and a site-relative path."""
        if path.startswith(("http://", "https://")):
            return path
        return f"{self.base_url(provider)}/{path.lstrip('/')}"

    def _request(self, method: str, url: str, **kwargs: Any) -> Response:
        """Issue a single request with the client's default headers."""
        headers = dict(self.default_headers)
        headers.update(kwargs.pop("headers", None) or {})
        kwargs.setdefault("timeout", self.settings.timeout_sec)
        return self.session.request(method, url, headers=headers, **kwargs)

    def close(self) -> None:
        """Close the session unless it is the process-wide shared one."""
        if not self._shared_session and hasattr(self.session, "close"):
            self.session.close()

    def __enter__(self) -> BaseApiClient:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
