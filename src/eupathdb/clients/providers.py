"""Provider routing for the EuPathDB-family service API.

Each site mounts its REST service under a short path segment that does not
always match the lowercase site name (``microsporidiadb`` -> ``micro``).
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping

from eupathdb.common.exceptions import UnknownProviderError

PROVIDER_PREFIXES: Mapping[str, str] = MappingProxyType(
    {
        "amoebadb": "amoeba",
        "cryptodb": "cryptodb",
        "eupathdb": "eupathdb",
        "fungidb": "fungidb",
        "giardiadb": "giardiadb",
        "hostdb": "hostdb",
        "microbiomedb": "mbio",
        "microsporidiadb": "micro",
        "orthomcl": "orthomcl",
        "piroplasmadb": "piro",
        "plasmodb": "plasmo",
        "schistodb": "schisto",
        "toxodb": "toxo",
        "trichdb": "trichdb",
        "tritrypdb": "tritrypdb",
    }
)


def normalize_provider(provider: str) -> str:
    """Return the lowercase host name used for ``provider``."""

    if not isinstance(provider, str) or not provider.strip():
        raise ValueError("provider must be a non-empty string")
    return provider.strip().lower()


def resolve_prefix(provider: str) -> str:
    """Return the URL path prefix for ``provider`` (case-insensitive).

    Raises:
        UnknownProviderError: if the provider is not a known EuPathDB site.
    """

    key = provider.strip().lower() if isinstance(provider, str) else ""
    try:
        return PROVIDER_PREFIXES[key]
    except KeyError:
        raise UnknownProviderError(str(provider)) from None


def known_providers() -> list[str]:
    """Return the known provider keys in sorted order."""

    return sorted(PROVIDER_PREFIXES)


__all__ = ["PROVIDER_PREFIXES", "known_providers", "normalize_provider", "resolve_prefix"]
