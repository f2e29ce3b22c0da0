import asyncio
import logging
from typing import Any, Dict, List, Mapping

from prometheus_client import Counter

from .model import Order, OrderItem, Transaction
from .schema import OrderPayload
from ..common.config import settings
from ..common.database import StoreError

_logger = logging.getLogger(__name__)

ORDER_EMBED = {"customer": ("name",)}

COMPENSATIONS = Counter(
    "order_compensations_total",
    "Compensating deletes issued by the order workflow",
    ["table", "outcome"],
)


async def list_orders(store, user_uid: str) -> List[Dict[str, Any]]:
    return await store.select(Order, {"user_uid": user_uid}, embed=ORDER_EMBED)


async def create_order(store, user_uid: str, payload: OrderPayload) -> Dict[str, Any]:
    """
    Persist an order, its lines and (optionally) its payment transaction.

    The store only guarantees single-table atomicity, so each step commits on
    its own. When a later step fails the earlier rows are removed again and
    the triggering StoreError is re-raised.
    """
    values: Dict[str, Any] = {
        "customer_id": payload.customer_id,
        "total_amount": payload.total,
        "user_uid": user_uid,
        "status": payload.status or "completed",
    }
    if payload.created_at is not None:
        values["created_at"] = payload.created_at

    # nothing persisted yet, a failure here just propagates
    order = (await store.insert(Order, values, embed=ORDER_EMBED))[0]
    order_id = order["id"]
    _logger.info("Order inserted | order_id=%s user_uid=%s lines=%s", order_id, user_uid, len(payload.products))

    items = [
        {"order_id": order_id, "product_id": line.id, "quantity": line.quantity, "price": line.price}
        for line in payload.products
    ]
    if items:
        try:
            await store.insert(OrderItem, items)
        except StoreError as e:
            _logger.warning("Order items insert failed, rolling back | order_id=%s err=%s", order_id, e)
            await _compensate(store, order_id, items_inserted=False)
            raise

    if payload.payment_method_id:
        try:
            await store.insert(
                Transaction,
                {
                    "order_id": order_id,
                    "payment_method_id": payload.payment_method_id,
                    "amount": payload.total,
                    "user_uid": user_uid,
                    "status": "completed",
                    "category": "selling",
                    "type": "income",
                    "description": f"Payment for order #{order_id}",
                },
            )
        except StoreError as e:
            _logger.warning("Transaction insert failed, rolling back | order_id=%s err=%s", order_id, e)
            await _compensate(store, order_id, items_inserted=bool(items))
            raise
        _logger.info("Transaction recorded | order_id=%s payment_method_id=%s amount=%s", order_id, payload.payment_method_id, payload.total)

    return order


async def _compensate(store, order_id: int, items_inserted: bool) -> None:
    # children first so the order row is never left referenced
    if items_inserted:
        await _compensating_delete(store, OrderItem, {"order_id": order_id})
    await _compensating_delete(store, Order, {"id": order_id})


async def _compensating_delete(store, model, filters: Mapping[str, Any]) -> bool:
    """Delete-by-equality with bounded retries. Never raises StoreError."""
    table = model.__tablename__
    attempts = max(1, settings.COMPENSATION_ATTEMPTS)
    backoff = settings.COMPENSATION_BACKOFF
    for attempt in range(1, attempts + 1):
        try:
            deleted = await store.delete(model, filters)
        except StoreError as e:
            _logger.error(
                "Compensation attempt failed | table=%s filters=%s attempt=%s/%s err=%s",
                table, dict(filters), attempt, attempts, e,
            )
            if attempt < attempts:
                await asyncio.sleep(backoff)
                backoff = min(backoff * 2, 5.0)
            continue
        COMPENSATIONS.labels(table=table, outcome="deleted").inc()
        _logger.info("Compensated | table=%s filters=%s deleted=%s", table, dict(filters), deleted)
        return True

    COMPENSATIONS.labels(table=table, outcome="failed").inc()
    _logger.error("Compensation abandoned, rows may remain | table=%s filters=%s", table, dict(filters))
    return False
