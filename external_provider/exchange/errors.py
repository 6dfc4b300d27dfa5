"""Tagged error values produced by the exchange pipeline."""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping


class ExchangeErrorKind(str, Enum):
    """Stable categories surfaced to users when an exchange fails."""

    PROGRAM_MISSING = "program_missing"
    PROGRAM_LOOKUP_FAILED = "program_lookup_failed"
    EXECUTION_FAILED = "execution_failed"
    RESULT_MALFORMED = "result_malformed"


_LOOKUP_GUIDANCE = """\
The resource received an unexpected error while attempting to find the program.

The program must be accessible according to the platform where the provider is running.

If the expected program should be automatically found on the platform where the provider is running, ensure that the program is in an expected directory. On Unix-based platforms, these directories are typically searched based on the '$PATH' environment variable. On Windows-based platforms, these directories are typically searched based on the '%PATH%' environment variable.

If the expected program is relative to the configuration, it is recommended that the program name includes the module path before the program name to ensure that it is compatible with varying module usage. For example: "${path.module}/my-program"

The program must also be executable according to the platform where the provider is running. On Unix-based platforms, the file on the filesystem must have the executable bit set. On Windows-based platforms, no action is typically necessary.
"""

_RESULT_GUIDANCE = """\
The resource received unexpected results after executing the program.

Program output must be a JSON encoded map of string keys and string values.

If the error is unclear, the output can be viewed by enabling debug logging (LOG_LEVEL=DEBUG) and looking for the 'exchange.program.executed' event.
"""


@dataclass(frozen=True, slots=True)
class ExchangeError:
    """Failure of a single exchange, returned instead of raised.

    ``summary`` is the short title shown to users, ``detail`` the full
    diagnostic text and ``context`` the structured facts behind it (program
    path, platform, exit state, captured stderr, underlying error).
    """

    kind: ExchangeErrorKind
    summary: str
    detail: str
    context: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "context", MappingProxyType(dict(self.context)))

    def __str__(self) -> str:
        return f"{self.summary}: {self.detail}"

    @property
    def program(self) -> str | None:
        return self.context.get("program")

    def as_dict(self) -> dict[str, Any]:
        """Return a JSON-friendly representation of the error."""

        return {
            "category": self.kind.value,
            "summary": self.summary,
            "detail": self.detail,
            "context": dict(self.context),
        }

    @classmethod
    def program_missing(cls) -> "ExchangeError":
        return cls(
            kind=ExchangeErrorKind.PROGRAM_MISSING,
            summary="External Program Missing",
            detail=(
                "The resource was configured without a program to execute. "
                "Verify the configuration contains at least one non-empty value."
            ),
        )

    @classmethod
    def lookup_failed(cls, program: str, error: str) -> "ExchangeError":
        detail = (
            _LOOKUP_GUIDANCE
            + f"\nPlatform: {sys.platform}"
            + f"\nProgram: {program}"
            + f"\nError: {error}"
        )
        return cls(
            kind=ExchangeErrorKind.PROGRAM_LOOKUP_FAILED,
            summary="External Program Lookup Failed",
            detail=detail,
            context={"program": program, "platform": sys.platform, "error": error},
        )

    @classmethod
    def execution_failed(
        cls,
        program: str,
        *,
        state: str,
        stderr: str | None = None,
        error: str | None = None,
        timed_out: bool = False,
    ) -> "ExchangeError":
        header = "The resource received an unexpected error while attempting to execute the program."
        if stderr:
            detail = (
                header
                + f"\n\nProgram: {program}"
                + f"\nError Message: {stderr}"
                + f"\nState: {state}"
            )
        elif error is not None:
            detail = header + f"\n\nProgram: {program}" + f"\nError: {error}"
        else:
            detail = (
                header
                + "\n\nThe program was executed, however it returned no additional error messaging."
                + f"\n\nProgram: {program}"
                + f"\nState: {state}"
            )
        context: dict[str, Any] = {"program": program, "state": state, "timed_out": timed_out}
        if stderr:
            context["stderr"] = stderr
        if error is not None:
            context["error"] = error
        return cls(
            kind=ExchangeErrorKind.EXECUTION_FAILED,
            summary="External Program Execution Failed",
            detail=detail,
            context=context,
        )

    @classmethod
    def result_malformed(cls, program: str, error: str) -> "ExchangeError":
        detail = _RESULT_GUIDANCE + f"\nProgram: {program}" + f"\nResult Error: {error}"
        return cls(
            kind=ExchangeErrorKind.RESULT_MALFORMED,
            summary="Unexpected External Program Results",
            detail=detail,
            context={"program": program, "error": error},
        )

    @classmethod
    def query_unencodable(cls, error: str) -> "ExchangeError":
        return cls(
            kind=ExchangeErrorKind.RESULT_MALFORMED,
            summary="Query Handling Failed",
            detail=(
                "The resource received an unexpected error while attempting to parse the query. "
                "This is always a bug in the external provider code and should be reported to "
                "the provider developers."
                f"\n\nError: {error}"
            ),
            context={"error": error},
        )


__all__ = ["ExchangeError", "ExchangeErrorKind"]
