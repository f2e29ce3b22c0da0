import logging
from typing import Any, Dict, List

from .model import Product
from .schema import ProductPayload

_logger = logging.getLogger(__name__)


async def list_products(store, user_uid: str) -> List[Dict[str, Any]]:
    return await store.select(Product, {"user_uid": user_uid})


async def create_product(store, user_uid: str, payload: ProductPayload) -> Dict[str, Any]:
    row = payload.model_dump(exclude_unset=True)
    row["user_uid"] = user_uid
    product = (await store.insert(Product, row))[0]
    _logger.info("Product inserted | product_id=%s user_uid=%s name=%s", product["id"], user_uid, product["name"])
    return product
