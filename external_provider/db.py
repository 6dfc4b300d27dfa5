"""State database bootstrap utilities."""
from __future__ import annotations

from pathlib import Path
from typing import Any

from sqlalchemy import create_engine
from sqlalchemy.engine import URL, Engine, make_url
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from .config import settings
from .models import Base

PROJECT_ROOT = Path(__file__).resolve().parents[1]


def build_engine(database_url: str) -> Engine:
    """Create the state engine and its tables.

    Relative SQLite paths are anchored at the project root; in-memory SQLite
    shares one connection so every session sees the same state.
    """

    url: URL = make_url(database_url)
    engine_kwargs: dict[str, Any] = {"future": True, "echo": False}

    if url.drivername.startswith("sqlite"):
        engine_kwargs["connect_args"] = {"check_same_thread": False}
        database = url.database
        if not database or database == ":memory:":
            engine_kwargs["poolclass"] = StaticPool
        else:
            db_path = Path(database)
            if not db_path.is_absolute():
                db_path = (PROJECT_ROOT / db_path).resolve()
            db_path.parent.mkdir(parents=True, exist_ok=True)
            url = url.set(database=str(db_path))

    engine = create_engine(url, **engine_kwargs)
    Base.metadata.create_all(engine)
    return engine


def build_session_factory(database_url: str) -> sessionmaker[Session]:
    return sessionmaker(
        autocommit=False, autoflush=False, bind=build_engine(database_url)
    )


SessionLocal = build_session_factory(settings.database_url)
