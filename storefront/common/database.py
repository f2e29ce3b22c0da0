from datetime import date, datetime
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

import sqlalchemy as sa
from sqlalchemy.exc import DBAPIError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import selectinload

from .config import settings
from .db import Base
from ..orders import model as _orders_model  # noqa: F401  (register tables)
from ..products import model as _products_model  # noqa: F401


# Async SQLAlchemy engine and session factory
engine = create_async_engine(settings.DB_URL, future=True, echo=settings.DB_ECHO)
AsyncSessionLocal = async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)

# relationship name -> related columns to embed, e.g. {"customer": ("name",)}
Embed = Mapping[str, Sequence[str]]
Row = Dict[str, Any]


class StoreError(Exception):
    """A store call failed. ``str(err)`` is the message reported to clients."""


async def init_db(bind: AsyncEngine = engine) -> None:
    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


def _jsonable(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value


def _serialize(obj: Any, embed: Optional[Embed] = None) -> Row:
    data = {col.key: _jsonable(getattr(obj, col.key)) for col in obj.__table__.columns}
    for rel, columns in (embed or {}).items():
        related = getattr(obj, rel)
        data[rel] = None if related is None else {c: _jsonable(getattr(related, c)) for c in columns}
    return data


def _error_message(exc: SQLAlchemyError) -> str:
    if isinstance(exc, DBAPIError) and exc.orig is not None:
        return str(exc.orig)
    return str(exc)


class SqlStore:
    """Table-level insert/select/delete over an async SQLAlchemy session factory.

    Every call runs in its own transaction, so a call is atomic for the rows
    it touches and nothing more. Filters are column equalities; a list or
    tuple value becomes an ``IN``. Any database failure is raised as
    :class:`StoreError`.
    """

    def __init__(self, session_factory: async_sessionmaker = AsyncSessionLocal):
        self._session_factory = session_factory

    @staticmethod
    def _where(model, filters: Mapping[str, Any]) -> List[Any]:
        clauses = []
        for name, value in filters.items():
            column = getattr(model, name)
            if isinstance(value, (list, tuple, set)):
                clauses.append(column.in_(list(value)))
            else:
                clauses.append(column == value)
        return clauses

    def _select_stmt(self, model, filters: Mapping[str, Any], embed: Optional[Embed]):
        stmt = sa.select(model).where(*self._where(model, filters))
        for rel in embed or {}:
            stmt = stmt.options(selectinload(getattr(model, rel)))
        return stmt

    async def insert(
        self,
        model,
        rows: Union[Mapping[str, Any], Sequence[Mapping[str, Any]]],
        embed: Optional[Embed] = None,
    ) -> List[Row]:
        """Insert one or many rows and return them as stored, in input order."""
        if isinstance(rows, Mapping):
            rows = [rows]
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    objs = [model(**dict(row)) for row in rows]
                    session.add_all(objs)
                    await session.flush()  # assign PKs
                    ids = [obj.id for obj in objs]
                    # reload server defaults (created_at) and embedded relations
                    stmt = self._select_stmt(model, {"id": ids}, embed).execution_options(populate_existing=True)
                    res = await session.execute(stmt)
                    by_id = {obj.id: obj for obj in res.scalars().all()}
                    return [_serialize(by_id[i], embed) for i in ids]
        except SQLAlchemyError as e:
            raise StoreError(_error_message(e)) from e

    async def select(self, model, filters: Mapping[str, Any], embed: Optional[Embed] = None) -> List[Row]:
        try:
            async with self._session_factory() as session:
                res = await session.execute(self._select_stmt(model, filters, embed))
                return [_serialize(obj, embed) for obj in res.scalars().all()]
        except SQLAlchemyError as e:
            raise StoreError(_error_message(e)) from e

    async def delete(self, model, filters: Mapping[str, Any]) -> int:
        if not filters:
            raise ValueError("delete requires at least one filter")
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    res = await session.execute(sa.delete(model).where(*self._where(model, filters)))
                    return int(res.rowcount or 0)
        except SQLAlchemyError as e:
            raise StoreError(_error_message(e)) from e
