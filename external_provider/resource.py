"""Lifecycle of the ``external_persisted`` resource."""
from __future__ import annotations

from typing import Callable, Protocol

from .config import settings
from .exceptions import ExchangeNotFoundError
from .exchange import (
    CompletedExchange,
    Deadline,
    ExchangeError,
    ExchangeInput,
    ExchangeOrchestrator,
)
from .exchange.state import UNSTARTED, Completed, PlanAction, apply, plan
from .logging import exchange_context, get_logger
from .schema import PERSISTED_RESOURCE


class ExchangeRepository(Protocol):
    """Storage interface used by the resource to keep completed exchanges."""

    def get(self, identity: str) -> CompletedExchange | None:  # pragma: no cover - protocol
        """Return the exchange stored under *identity*."""

    def add(self, completed: CompletedExchange) -> None:  # pragma: no cover - protocol
        """Persist a newly completed exchange."""

    def replace(self, identity: str, completed: CompletedExchange) -> None:  # pragma: no cover - protocol
        """Swap the exchange stored under *identity* for *completed*."""

    def delete(self, identity: str) -> bool:  # pragma: no cover - protocol
        """Remove the exchange stored under *identity*."""


class PersistedExchangeResource:
    """Create, read, update and delete persisted exchanges.

    Only ``create`` and a replacing ``update`` launch the external program.
    Reads and no-op updates return the stored record as it is.
    """

    type_name = PERSISTED_RESOURCE.type_name

    def __init__(
        self,
        *,
        repository: ExchangeRepository,
        orchestrator_factory: Callable[[], ExchangeOrchestrator] = ExchangeOrchestrator,
        timeout: float | None = settings.exchange_timeout,
    ) -> None:
        self._repository = repository
        self._orchestrator_factory = orchestrator_factory
        self._timeout = timeout
        self._logger = get_logger(__name__)

    def create(
        self, exchange_input: ExchangeInput, *, deadline: Deadline | None = None
    ) -> CompletedExchange | ExchangeError:
        """Run the program once and store its result under a fresh identity."""

        outcome = apply(UNSTARTED, exchange_input, self._runner(deadline))
        if isinstance(outcome, ExchangeError):
            return outcome

        self._repository.add(outcome.exchange)
        self._logger.info("resource.persisted.created", identity=outcome.identity)
        return outcome.exchange

    def read(self, identity: str) -> CompletedExchange:
        """Return the stored exchange without launching anything."""

        completed = self._repository.get(identity)
        if completed is None:
            raise ExchangeNotFoundError(identity)
        return completed

    def plan(self, identity: str, exchange_input: ExchangeInput) -> PlanAction:
        return plan(Completed(self.read(identity)), exchange_input)

    def update(
        self,
        identity: str,
        exchange_input: ExchangeInput,
        *,
        deadline: Deadline | None = None,
    ) -> CompletedExchange | ExchangeError:
        """Carry the stored record forward, or replace it when inputs changed.

        A failed replacement leaves the stored record untouched.
        """

        prior = Completed(self.read(identity))
        with exchange_context(identity=identity):
            outcome = apply(prior, exchange_input, self._runner(deadline))
            if isinstance(outcome, ExchangeError):
                return outcome
            if outcome is prior:
                self._logger.info("resource.persisted.unchanged")
                return prior.exchange

            self._repository.replace(identity, outcome.exchange)
            self._logger.info("resource.persisted.replaced", replacement=outcome.identity)
            return outcome.exchange

    def delete(self, identity: str) -> None:
        """Forget the stored exchange; the program is not run."""

        if not self._repository.delete(identity):
            raise ExchangeNotFoundError(identity)
        self._logger.info("resource.persisted.deleted", identity=identity)

    def _runner(self, deadline: Deadline | None):
        def run(exchange_input: ExchangeInput) -> CompletedExchange | ExchangeError:
            bound = deadline or Deadline.after(self._timeout)
            return self._orchestrator_factory().run(exchange_input, bound)

        return run


__all__ = ["ExchangeRepository", "PersistedExchangeResource"]
