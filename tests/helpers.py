"""Fakes and builders shared by the test modules."""

from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any, List, Tuple

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from storefront.common.database import SqlStore, StoreError, init_db
from storefront.orders.model import Customer, PaymentMethod
from storefront.products.model import Product

USER = "user-1"
OTHER_USER = "user-2"
TOKEN = "token-user-1"
OTHER_TOKEN = "token-user-2"

# ids assigned by seed_reference_rows
CUSTOMER_ID = 1
OTHER_CUSTOMER_ID = 2
PAYMENT_METHOD_ID = 1
PRODUCT_IDS = (1, 2)


class FakeRedis:
    """The handful of redis.asyncio calls the session code makes."""

    def __init__(self, data=None):
        self.data = dict(data or {})

    async def get(self, key):
        return self.data.get(key)

    async def set(self, key, value, ex=None):
        self.data[key] = value
        return True

    async def delete(self, key):
        return 1 if self.data.pop(key, None) is not None else 0


class RecordingStore:
    """Wraps a real store, records every call and fails on chosen tables."""

    def __init__(self, inner, fail_insert=(), fail_select=(), fail_delete=()):
        self.inner = inner
        self.fail_insert = set(fail_insert)
        self.fail_select = set(fail_select)
        self.fail_delete = set(fail_delete)
        self.calls: List[Tuple[str, str]] = []

    async def insert(self, model, rows, embed=None):
        table = model.__tablename__
        self.calls.append(("insert", table))
        if table in self.fail_insert:
            raise StoreError(f"insert into {table} rejected")
        return await self.inner.insert(model, rows, embed=embed)

    async def select(self, model, filters, embed=None):
        table = model.__tablename__
        self.calls.append(("select", table))
        if table in self.fail_select:
            raise StoreError(f"select from {table} rejected")
        return await self.inner.select(model, filters, embed=embed)

    async def delete(self, model, filters):
        table = model.__tablename__
        self.calls.append(("delete", table))
        if table in self.fail_delete:
            raise StoreError(f"delete from {table} rejected")
        return await self.inner.delete(model, filters)


@dataclass
class Api:
    client: Any
    store: SqlStore
    recorder: RecordingStore
    redis: FakeRedis


def auth(token: str = TOKEN) -> dict:
    return {"Authorization": f"Bearer {token}"}


@asynccontextmanager
async def sqlite_store():
    engine = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)
    await init_db(engine)
    try:
        yield SqlStore(async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession))
    finally:
        await engine.dispose()


async def seed_reference_rows(store: SqlStore) -> None:
    await store.insert(
        Customer,
        [{"user_uid": USER, "name": "Ada Lovelace"}, {"user_uid": OTHER_USER, "name": "Grace Hopper"}],
    )
    await store.insert(PaymentMethod, {"user_uid": USER, "name": "Card"})
    await store.insert(
        Product,
        [
            {"user_uid": USER, "name": "Espresso Beans", "price": 24.5, "in_stock": 10},
            {"user_uid": USER, "name": "Ceramic Mug", "price": 9.9, "in_stock": 4},
        ],
    )
