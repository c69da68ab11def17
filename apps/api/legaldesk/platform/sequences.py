"""Human-facing sequenced identifiers such as ``CASE-2026-0001``.

Numbers come from a per-prefix, per-year counter row that is incremented with
a single ``UPDATE ... RETURNING`` in the same transaction as the insert it
numbers. The row lock taken by the update serializes concurrent creates, and a
rolled-back insert rolls its increment back with it.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import Integer, String, event, insert, select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.engine import Connection
from sqlalchemy.orm import Mapped, Mapper, mapped_column

from legaldesk.core.database import Base
from legaldesk.metrics import observe_sequence_issued


SEQUENCE_PREFIXES = ("CASE", "INV", "CMP", "SRV", "CON")


class SequenceCounter(Base):
    __tablename__ = "sequence_counters"

    prefix: Mapped[str] = mapped_column(String(16), primary_key=True)
    year: Mapped[int] = mapped_column(Integer, primary_key=True)
    last_value: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


def current_year() -> int:
    return datetime.now(timezone.utc).year


def format_identifier(prefix: str, year: int, value: int) -> str:
    return f"{prefix}-{year}-{value:04d}"


def _ensure_counter(connection: Connection, prefix: str, year: int) -> None:
    table = SequenceCounter.__table__
    values = {"prefix": prefix, "year": year, "last_value": 0}
    dialect = connection.dialect.name
    if dialect == "postgresql":
        connection.execute(
            postgresql.insert(table).values(**values).on_conflict_do_nothing(index_elements=["prefix", "year"])
        )
        return
    if dialect == "sqlite":
        connection.execute(
            sqlite.insert(table).values(**values).on_conflict_do_nothing(index_elements=["prefix", "year"])
        )
        return

    existing = connection.execute(
        select(table.c.prefix).where(table.c.prefix == prefix, table.c.year == year)
    ).first()
    if existing is None:
        connection.execute(insert(table).values(**values))


def next_identifier(connection: Connection, prefix: str, *, year: int | None = None) -> str:
    if prefix not in SEQUENCE_PREFIXES:
        raise ValueError(f"unknown sequence prefix: {prefix}")

    table = SequenceCounter.__table__
    sequence_year = year if year is not None else current_year()
    _ensure_counter(connection, prefix, sequence_year)
    value = connection.execute(
        update(table)
        .where(table.c.prefix == prefix, table.c.year == sequence_year)
        .values(last_value=table.c.last_value + 1)
        .returning(table.c.last_value)
    ).scalar_one()
    observe_sequence_issued(prefix)
    return format_identifier(prefix, sequence_year, int(value))


def register_sequence(model: type[Any], attribute: str, prefix: str) -> None:
    """Fill ``model.<attribute>`` at insert time when the caller left it empty."""

    @event.listens_for(model, "before_insert")
    def _assign_identifier(mapper: Mapper[Any], connection: Connection, target: Any) -> None:
        if getattr(target, attribute) is None:
            setattr(target, attribute, next_identifier(connection, prefix))
