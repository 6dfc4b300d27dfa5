"""ORM and Pydantic models for persisted exchanges."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field
from sqlalchemy import JSON, DateTime, String, Text, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from .exchange import CompletedExchange, ExchangeInput
from .schema import PERSISTED_RESOURCE


class Base(DeclarativeBase):
    """Declarative base for SQLAlchemy ORM models."""


class ExchangeRecord(Base):
    """Completed exchange kept as resource state."""

    __tablename__ = "exchanges"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    resource_type: Mapped[str] = mapped_column(
        String(100), nullable=False, default=PERSISTED_RESOURCE.type_name
    )
    program: Mapped[list] = mapped_column(JSON, nullable=False)
    working_dir: Mapped[str | None] = mapped_column(Text, nullable=True)
    query: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    result: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    @classmethod
    def from_completed(cls, completed: CompletedExchange) -> "ExchangeRecord":
        exchange_input = completed.exchange_input
        return cls(
            id=completed.identity,
            resource_type=PERSISTED_RESOURCE.type_name,
            program=list(exchange_input.program),
            working_dir=exchange_input.working_dir,
            query=dict(exchange_input.query),
            result=dict(completed.result),
        )

    def to_completed(self) -> CompletedExchange:
        return CompletedExchange(
            exchange_input=ExchangeInput.create(
                self.program, self.working_dir, self.query or {}
            ),
            result=self.result or {},
            identity=self.id,
        )


class ExchangeRequest(BaseModel):
    """Desired configuration of an ``external_persisted`` resource."""

    program: list[str] = Field(
        description=PERSISTED_RESOURCE.attribute("program").description
    )
    working_dir: str | None = Field(
        default=None, description=PERSISTED_RESOURCE.attribute("working_dir").description
    )
    query: dict[str, str] | None = Field(
        default=None, description=PERSISTED_RESOURCE.attribute("query").description
    )

    def to_input(self) -> ExchangeInput:
        return ExchangeInput.create(self.program, self.working_dir, self.query)


class PersistedExchangeModel(BaseModel):
    """State of an ``external_persisted`` resource as returned by the API."""

    id: str
    program: list[str]
    working_dir: str | None = None
    query: dict[str, str] = Field(default_factory=dict)
    result: dict[str, str] = Field(default_factory=dict)

    @classmethod
    def from_completed(cls, completed: CompletedExchange) -> "PersistedExchangeModel":
        exchange_input = completed.exchange_input
        return cls(
            id=completed.identity,
            program=list(exchange_input.program),
            working_dir=exchange_input.working_dir,
            query=dict(exchange_input.query),
            result=dict(completed.result),
        )


__all__ = [
    "Base",
    "ExchangeRecord",
    "ExchangeRequest",
    "PersistedExchangeModel",
]
