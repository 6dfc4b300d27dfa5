"""Encode the query mapping sent to external programs on stdin."""
from __future__ import annotations

import json
from typing import Mapping

from .errors import ExchangeError


def drop_empty_values(query: Mapping[str, str] | None) -> dict[str, str]:
    """Return *query* without the entries whose value is an empty string."""

    return {key: value for key, value in (query or {}).items() if value != ""}


def encode_query(query: Mapping[str, str] | None) -> bytes | ExchangeError:
    """Serialize *query* to a deterministic UTF-8 JSON object."""

    try:
        encoded = json.dumps(
            drop_empty_values(query),
            ensure_ascii=False,
            sort_keys=True,
            separators=(",", ":"),
        ).encode("utf-8")
    except (TypeError, ValueError) as exc:
        return ExchangeError.query_unencodable(str(exc))
    return encoded


__all__ = ["drop_empty_values", "encode_query"]
