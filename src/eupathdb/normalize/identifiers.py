"""Gene identifier recovery for EuPathDB records.

Record identifiers come back as composite strings such as
``"EDEG_00003/MicrosporidiaDB"`` or ``"LmjF.01.0030,LmjF.01.0030:mRNA"``.
The grammar accepted here is::

    composite := gene_id [ ("," | "/") rest ]

A bare ``gene_id`` is valid.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

from eupathdb.common.exceptions import MalformedIdentifierError

SEPARATORS = (",", "/")
_COMPOSITE_PATTERN = re.compile(r"^(?P<gene_id>[^,/]*)(?:[,/](?P<rest>.*))?$", re.DOTALL)


def has_separator(value: Any) -> bool:
    return isinstance(value, str) and any(sep in value for sep in SEPARATORS)


def parse_composite_id(value: Any) -> str:
    """Return the gene id component of a composite identifier.

    >>> parse_composite_id("LmjF.01.0030/TriTrypDB")
    'LmjF.01.0030'
    >>> parse_composite_id("PF3D7_0100100,PF3D7_0100100.1")
    'PF3D7_0100100'

    Raises:
        MalformedIdentifierError: for non-string or empty input, or when the
            value starts with a separator.
    """
    if not isinstance(value, str):
        raise MalformedIdentifierError(f"Gene identifier must be a string, got {type(value).__name__}", value=value)

    match = _COMPOSITE_PATTERN.match(value.strip())
    gene_id = match.group("gene_id").strip() if match else ""
    if not gene_id:
        raise MalformedIdentifierError(f"Malformed gene identifier: {value!r}", value=value)
    return gene_id


def derive_gene_id(record: Mapping[str, Any]) -> str:
    """Derive the canonical gene id of an attribute-query record.

    The first ``fields`` value carrying a separator wins, then the first
    non-empty field value, then the record's own ``id``.
    """
    values = [field.get("value") for field in record.get("fields") or [] if isinstance(field, Mapping)]

    composite = next((v for v in values if has_separator(v)), None)
    if composite is None:
        composite = next((v for v in values if isinstance(v, str) and v.strip()), None)
    if composite is None:
        composite = record.get("id")
    if composite is None:
        raise MalformedIdentifierError("Record has neither identifier fields nor an id", value=None)

    try:
        return parse_composite_id(composite)
    except MalformedIdentifierError as exc:
        raise MalformedIdentifierError(exc.message, value=composite, record_id=record.get("id")) from exc


__all__ = ["SEPARATORS", "derive_gene_id", "has_separator", "parse_composite_id"]
