"""Run one request/response exchange with an external program."""
from __future__ import annotations

import shutil
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, Callable, Iterable, Mapping
from uuid import uuid4

from ..logging import exchange_context, get_logger
from .deadline import Deadline
from .decoder import decode_result
from .errors import ExchangeError
from .launcher import ProcessLauncher
from .program import ResolvedProgram, Which, resolve_program
from .query import drop_empty_values, encode_query


@dataclass(frozen=True, slots=True)
class ExchangeInput:
    """Program, working directory and query describing one exchange."""

    program: tuple[str, ...]
    working_dir: str | None = None
    query: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "program", tuple(self.program))
        object.__setattr__(self, "query", MappingProxyType(dict(self.query)))

    @classmethod
    def create(
        cls,
        program: Iterable[Any],
        working_dir: Any = None,
        query: Mapping[Any, Any] | None = None,
    ) -> "ExchangeInput":
        """Build an input after checking every element is a string."""

        program = tuple(program)
        for index, item in enumerate(program):
            if not isinstance(item, str):
                raise TypeError(f"program[{index}] must be a string, got {type(item).__name__}")
        if working_dir is not None and not isinstance(working_dir, str):
            raise TypeError(f"working_dir must be a string, got {type(working_dir).__name__}")
        for key, value in (query or {}).items():
            if not isinstance(key, str) or not isinstance(value, str):
                raise TypeError(f"query entry {key!r} must map a string to a string")
        return cls(program=program, working_dir=working_dir, query=dict(query or {}))

    def normalized(self) -> "ExchangeInput":
        """Drop empty query values and treat an empty working directory as unset."""

        return replace(
            self,
            working_dir=self.working_dir or None,
            query=drop_empty_values(self.query),
        )

    def as_dict(self) -> dict[str, Any]:
        return {
            "program": list(self.program),
            "working_dir": self.working_dir,
            "query": dict(self.query),
        }


@dataclass(frozen=True, slots=True)
class CompletedExchange:
    """Successful exchange: its input, the decoded result and its identity."""

    exchange_input: ExchangeInput
    result: Mapping[str, str]
    identity: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "result", MappingProxyType(dict(self.result)))


def new_identity() -> str:
    return uuid4().hex


class ExchangeOrchestrator:
    """Sequence resolve, encode, launch and decode for a single exchange.

    Every stage hands back either its value or an :class:`ExchangeError`; the
    first error ends the exchange and is returned as-is. Build one orchestrator
    per call, it keeps no state between exchanges.
    """

    def __init__(
        self,
        *,
        launcher: ProcessLauncher | None = None,
        which: Which = shutil.which,
        identity_factory: Callable[[], str] = new_identity,
    ) -> None:
        self._launcher = launcher or ProcessLauncher()
        self._which = which
        self._identity_factory = identity_factory
        self._logger = get_logger(__name__)

    def run(
        self, exchange_input: ExchangeInput, deadline: Deadline | None = None
    ) -> CompletedExchange | ExchangeError:
        """Execute *exchange_input* once and return its outcome."""

        deadline = deadline or Deadline()
        normalized = exchange_input.normalized()

        resolved = resolve_program(normalized.program, which=self._which)
        if isinstance(resolved, ExchangeError):
            return self._failed(resolved)

        with exchange_context(program=resolved.path):
            outcome = self._exchange(resolved, normalized, deadline)
            if isinstance(outcome, ExchangeError):
                return self._failed(outcome)

            completed = CompletedExchange(
                exchange_input=exchange_input,
                result=outcome,
                identity=self._identity_factory(),
            )
            self._logger.info(
                "exchange.completed",
                identity=completed.identity,
                result_keys=sorted(completed.result),
            )
            return completed

    def _exchange(
        self, program: ResolvedProgram, exchange_input: ExchangeInput, deadline: Deadline
    ) -> Mapping[str, str] | ExchangeError:
        payload = encode_query(exchange_input.query)
        if isinstance(payload, ExchangeError):
            return payload

        output = self._launcher.launch(
            program,
            payload,
            working_dir=exchange_input.working_dir,
            deadline=deadline,
        )
        if isinstance(output, ExchangeError):
            return output

        return decode_result(output, program=program.path)

    def _failed(self, error: ExchangeError) -> ExchangeError:
        self._logger.warning(
            "exchange.failed",
            category=error.kind.value,
            summary=error.summary,
            program=error.program,
        )
        return error


__all__ = ["CompletedExchange", "ExchangeInput", "ExchangeOrchestrator", "new_identity"]
