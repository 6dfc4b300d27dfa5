"""Endpoints exposing the ``external_persisted`` resource lifecycle."""
from __future__ import annotations

from typing import NoReturn

from fastapi import APIRouter, Depends, HTTPException, Response, status

from ..db import SessionLocal
from ..exceptions import ExchangeNotFoundError
from ..exchange import ExchangeError
from ..logging import get_logger
from ..models import ExchangeRequest, PersistedExchangeModel
from ..repository import SQLAExchangeRepository
from ..resource import PersistedExchangeResource

router = APIRouter(
    prefix=f"/resources/{PersistedExchangeResource.type_name}",
    tags=["resources"],
)

logger = get_logger(__name__)


def get_resource() -> PersistedExchangeResource:
    """Build a resource bound to the configured state database."""

    return PersistedExchangeResource(repository=SQLAExchangeRepository(SessionLocal))


def _raise_for(error: ExchangeError) -> NoReturn:
    logger.warning("api.persisted.exchange_failed", category=error.kind.value)
    raise HTTPException(
        status_code=422,
        detail=error.as_dict(),
    )


def _not_found(exc: ExchangeNotFoundError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    summary="Run the external program and persist its result",
)
def create_exchange(
    request: ExchangeRequest,
    resource: PersistedExchangeResource = Depends(get_resource),
) -> PersistedExchangeModel:
    """Create the resource by running the program once."""

    outcome = resource.create(request.to_input())
    if isinstance(outcome, ExchangeError):
        _raise_for(outcome)
    return PersistedExchangeModel.from_completed(outcome)


@router.get("/{identity}", summary="Read persisted state without running the program")
def read_exchange(
    identity: str,
    resource: PersistedExchangeResource = Depends(get_resource),
) -> PersistedExchangeModel:
    try:
        completed = resource.read(identity)
    except ExchangeNotFoundError as exc:
        raise _not_found(exc) from exc
    return PersistedExchangeModel.from_completed(completed)


@router.put("/{identity}", summary="Apply a new configuration, replacing when inputs changed")
def update_exchange(
    identity: str,
    request: ExchangeRequest,
    resource: PersistedExchangeResource = Depends(get_resource),
) -> PersistedExchangeModel:
    """Keep the stored result when nothing changed, otherwise run a new exchange."""

    try:
        outcome = resource.update(identity, request.to_input())
    except ExchangeNotFoundError as exc:
        raise _not_found(exc) from exc
    if isinstance(outcome, ExchangeError):
        _raise_for(outcome)
    return PersistedExchangeModel.from_completed(outcome)


@router.delete(
    "/{identity}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Forget the persisted state",
)
def delete_exchange(
    identity: str,
    resource: PersistedExchangeResource = Depends(get_resource),
) -> Response:
    try:
        resource.delete(identity)
    except ExchangeNotFoundError as exc:
        raise _not_found(exc) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)


__all__ = ["get_resource", "router"]
