from quart import Blueprint, jsonify, request

from .schema import ProductPayload
from .service import create_product, list_products
from ..common.auth import current_user
from ..common.context import get_store
from ..common.database import StoreError
from ..common.errors import invalid_request, store_failure, unauthorized
from ..common.validation import safe_parse

bp = Blueprint("products", __name__)


@bp.get("/products")
async def products_list():
    user_uid = await current_user()
    if user_uid is None:
        return unauthorized()
    try:
        items = await list_products(get_store(), user_uid)
    except StoreError as e:
        return store_failure(e)
    return jsonify(items)


@bp.post("/products")
async def products_create():
    user_uid = await current_user()
    if user_uid is None:
        return unauthorized()
    data = await request.get_json(force=True, silent=True)
    parsed = safe_parse(ProductPayload, data)
    if not parsed.ok:
        return invalid_request(parsed.errors)
    try:
        product = await create_product(get_store(), user_uid, parsed.value)
    except StoreError as e:
        return store_failure(e)
    return jsonify(product)
