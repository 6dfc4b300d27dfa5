"""Lifecycle of an exchange: unstarted until it completes once.

A completed exchange is never re-run on read. Changing any attribute that
forces replacement plans a brand new exchange; otherwise the completed record
is carried forward untouched.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Union

from ..schema import PERSISTED_RESOURCE
from .errors import ExchangeError
from .orchestrator import CompletedExchange, ExchangeInput


class PlanAction(str, Enum):
    CREATE = "create"
    NOOP = "noop"
    REPLACE = "replace"


@dataclass(frozen=True, slots=True)
class Unstarted:
    """No exchange has completed yet."""


@dataclass(frozen=True, slots=True)
class Completed:
    """An exchange finished successfully; its record is authoritative."""

    exchange: CompletedExchange

    @property
    def identity(self) -> str:
        return self.exchange.identity


ExchangeState = Union[Unstarted, Completed]
Runner = Callable[[ExchangeInput], Union[CompletedExchange, ExchangeError]]

UNSTARTED = Unstarted()


def requires_replacement(prior: ExchangeInput, desired: ExchangeInput) -> bool:
    before = prior.as_dict()
    after = desired.as_dict()
    return any(
        before[name] != after[name] for name in PERSISTED_RESOURCE.replace_attributes
    )


def plan(state: ExchangeState, desired: ExchangeInput) -> PlanAction:
    """Decide what applying *desired* on top of *state* has to do."""

    if isinstance(state, Unstarted):
        return PlanAction.CREATE
    if requires_replacement(state.exchange.exchange_input, desired):
        return PlanAction.REPLACE
    return PlanAction.NOOP


def apply(
    state: ExchangeState, desired: ExchangeInput, run: Runner
) -> Completed | ExchangeError:
    """Move *state* towards *desired*, running the exchange only when planned.

    On failure the error is returned and *state* is left as it was.
    """

    if isinstance(state, Completed) and plan(state, desired) is PlanAction.NOOP:
        return state

    outcome = run(desired)
    if isinstance(outcome, ExchangeError):
        return outcome
    return Completed(exchange=outcome)


def read(state: ExchangeState) -> ExchangeState:
    """Observing state is a lookup; nothing is launched."""

    return state


__all__ = [
    "Completed",
    "ExchangeState",
    "PlanAction",
    "UNSTARTED",
    "Unstarted",
    "apply",
    "plan",
    "read",
    "requires_replacement",
]
