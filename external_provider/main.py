"""Application entry point for the external-provider FastAPI service."""
from fastapi import APIRouter, FastAPI

from .api.persisted import router as persisted_router
from .api.provider import router as provider_router
from .config import settings
from .logging import configure_logging, get_logger

configure_logging()
logger = get_logger(__name__)
logger.info("app.startup", environment=settings.environment)

app = FastAPI(title="external-provider", version="0.1.0")

router = APIRouter(tags=["health"])


@router.get("/health", summary="Infra healthcheck")
def healthcheck() -> dict[str, str]:
    """Simple health endpoint for infrastructure smoke tests."""

    return {"status": "ok", "environment": settings.environment}


app.include_router(router)
app.include_router(provider_router)
app.include_router(persisted_router)
