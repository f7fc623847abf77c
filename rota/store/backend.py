"""Persistence collaborator: async protocol plus the SQLAlchemy implementation."""

from __future__ import annotations

import asyncio
from typing import Any, Callable, Dict, Iterable, List, Protocol, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from rota.domain.db import create_db_engine, get_session_factory
from rota.domain.models import Base, entity_to_row, row_to_entity
from rota.domain.repositories import REPOSITORIES, AssignmentRepository
from rota.exceptions import PersistenceError

T = TypeVar("T")


class PersistenceBackend(Protocol):
    """Remote store mirrored by the in-memory collections.

    Collections are named "locations", "employees", "shifts" and
    "assignments". Every method may raise PersistenceError.
    """

    async def select_all(self, collection: str) -> List[Any]:
        ...

    async def insert(self, collection: str, entities: List[Any]) -> None:
        ...

    async def update(self, collection: str, entity_id: str, values: Dict[str, Any]) -> None:
        ...

    async def delete(self, collection: str, entity_id: str) -> None:
        ...

    async def delete_dates(self, dates: Iterable[str]) -> None:
        ...


class SqlAlchemyBackend:
    """PersistenceBackend over a SQLAlchemy database.

    Blocking session work runs in a worker thread so awaiting callers never
    block the event loop.
    """

    def __init__(self, db_url: str, create_tables: bool = True):
        self.db_url = db_url
        self.engine = create_db_engine(db_url)
        self.SessionLocal = get_session_factory(engine=self.engine)
        self._tables_pending = create_tables

    def _ensure_tables(self) -> None:
        # Created on first use, inside the PersistenceError boundary
        if self._tables_pending:
            Base.metadata.create_all(self.engine)
            self._tables_pending = False

    def _run(self, work: Callable[[Session], T]) -> T:
        try:
            self._ensure_tables()
        except SQLAlchemyError as e:
            raise PersistenceError(str(e)) from e

        session = self.SessionLocal()
        try:
            return work(session)
        except SQLAlchemyError as e:
            session.rollback()
            raise PersistenceError(str(e)) from e
        finally:
            session.close()

    async def _call(self, work: Callable[[Session], T]) -> T:
        return await asyncio.to_thread(self._run, work)

    @staticmethod
    def _repository(collection: str):
        try:
            return REPOSITORIES[collection]
        except KeyError:
            raise ValueError(f"Unknown collection: {collection}") from None

    async def select_all(self, collection: str) -> List[Any]:
        repo = self._repository(collection)
        return await self._call(lambda s: [row_to_entity(r) for r in repo.get_all(s)])

    async def insert(self, collection: str, entities: List[Any]) -> None:
        repo = self._repository(collection)
        rows = [entity_to_row(e) for e in entities]
        await self._call(lambda s: repo.insert(s, rows))

    async def update(self, collection: str, entity_id: str, values: Dict[str, Any]) -> None:
        repo = self._repository(collection)
        await self._call(lambda s: repo.update(s, entity_id, values))

    async def delete(self, collection: str, entity_id: str) -> None:
        repo = self._repository(collection)
        await self._call(lambda s: repo.delete(s, entity_id))

    async def delete_dates(self, dates: Iterable[str]) -> None:
        dates = list(dates)
        await self._call(lambda s: AssignmentRepository.delete_by_dates(s, dates))
