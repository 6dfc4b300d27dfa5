"""Persistence helpers for completed exchanges."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from sqlalchemy.orm import Session

from .exchange import CompletedExchange
from .models import ExchangeRecord


@dataclass(slots=True)
class SQLAExchangeRepository:
    """Store completed exchanges using a SQLAlchemy session factory."""

    session_factory: Callable[[], Session]

    def get(self, identity: str) -> CompletedExchange | None:
        session = self.session_factory()
        try:
            record = session.get(ExchangeRecord, identity)
            return record.to_completed() if record is not None else None
        finally:
            session.close()

    def add(self, completed: CompletedExchange) -> None:
        session = self.session_factory()
        try:
            session.add(ExchangeRecord.from_completed(completed))
            session.commit()
        finally:
            session.close()

    def replace(self, identity: str, completed: CompletedExchange) -> None:
        """Swap the record stored under *identity* for *completed* atomically."""

        session = self.session_factory()
        try:
            previous = session.get(ExchangeRecord, identity)
            if previous is not None:
                session.delete(previous)
                session.flush()
            session.add(ExchangeRecord.from_completed(completed))
            session.commit()
        finally:
            session.close()

    def delete(self, identity: str) -> bool:
        session = self.session_factory()
        try:
            record = session.get(ExchangeRecord, identity)
            if record is None:
                return False
            session.delete(record)
            session.commit()
            return True
        finally:
            session.close()


__all__ = ["SQLAExchangeRepository"]
