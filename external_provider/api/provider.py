"""Provider metadata endpoint."""
from __future__ import annotations

from typing import Any

from fastapi import APIRouter

from ..schema import provider_metadata

router = APIRouter(prefix="/provider", tags=["provider"])


@router.get("", summary="Provider type name and resource schemas")
def describe_provider() -> dict[str, Any]:
    """Return the provider type name and the schema of each resource."""

    return provider_metadata()


__all__ = ["router"]
