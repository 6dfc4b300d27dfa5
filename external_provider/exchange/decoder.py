"""Decode the JSON object written by external programs on stdout."""
from __future__ import annotations

import json
from types import MappingProxyType
from typing import Mapping

from .errors import ExchangeError


def decode_result(output: bytes, *, program: str) -> Mapping[str, str] | ExchangeError:
    """Parse *output* as a flat JSON object of string values.

    Anything else (arrays, scalars, nested objects, numbers or booleans as
    values) is rejected without coercion.
    """

    try:
        text = output.decode("utf-8")
    except UnicodeDecodeError as exc:
        return ExchangeError.result_malformed(program, f"output is not valid UTF-8: {exc}")

    try:
        document = json.loads(text)
    except json.JSONDecodeError as exc:
        return ExchangeError.result_malformed(program, str(exc))

    if not isinstance(document, dict):
        return ExchangeError.result_malformed(
            program,
            f"expected a JSON object, got {_json_type(document)}",
        )

    for key, value in document.items():
        if not isinstance(value, str):
            return ExchangeError.result_malformed(
                program,
                f"value of key {key!r} must be a string, got {_json_type(value)}",
            )

    return MappingProxyType(document)


def _json_type(value: object) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    return "object"


__all__ = ["decode_result"]
