import asyncio

import sqlalchemy as sa

from .common.auth import create_session
from .common.config import settings
from .common.database import AsyncSessionLocal, init_db
from .common.redis_client import close_redis
from .orders.model import Customer, PaymentMethod
from .products.model import Product


SAMPLE_PRODUCTS = [
    {"name": "Espresso Beans 1kg", "in_stock": 40, "price": 24.50, "category": "coffee"},
    {"name": "Oat Milk 1L", "in_stock": 120, "price": 2.99, "category": "dairy-free"},
    {"name": "Ceramic Mug", "in_stock": 60, "price": 9.90, "category": "merch"},
    {"name": "Pour-over Kit", "in_stock": 15, "price": 34.00, "category": "equipment", "description": "Dripper, filters and carafe"},
]


async def _get_or_create(session, model, **values):
    res = await session.execute(sa.select(model).filter_by(**values))
    obj = res.scalars().first()
    if obj is None:
        obj = model(**values)
        session.add(obj)
        await session.flush()
    return obj


async def seed_demo_data(user_uid: str = settings.DEMO_USER_UID) -> None:
    await init_db()
    async with AsyncSessionLocal() as session:
        customer = await _get_or_create(session, Customer, user_uid=user_uid, name=settings.DEMO_CUSTOMER_NAME)
        method = await _get_or_create(session, PaymentMethod, user_uid=user_uid, name=settings.DEMO_PAYMENT_METHOD)
        added = 0
        for p in SAMPLE_PRODUCTS:
            # avoid duplicates by name
            res = await session.execute(
                sa.select(Product.id).where(Product.user_uid == user_uid, Product.name == p["name"])
            )
            if res.first():
                continue
            session.add(Product(user_uid=user_uid, **p))
            added += 1
        await session.commit()
        print(f"Seed complete. customer_id={customer.id} payment_method_id={method.id} products_added={added}")

    token = await create_session(user_uid)
    print(f"Demo session for {user_uid}: Authorization: Bearer {token}")


async def amain():
    try:
        await seed_demo_data()
    finally:
        await close_redis()


if __name__ == "__main__":
    asyncio.run(amain())
