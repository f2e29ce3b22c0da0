from quart import Blueprint, jsonify, request

from .schema import OrderPayload
from .service import create_order, list_orders
from ..common.auth import current_user
from ..common.context import get_store
from ..common.database import StoreError
from ..common.errors import invalid_request, store_failure, unauthorized
from ..common.validation import safe_parse

bp = Blueprint("orders", __name__)


@bp.get("/orders")
async def orders_list():
    user_uid = await current_user()
    if user_uid is None:
        return unauthorized()
    try:
        rows = await list_orders(get_store(), user_uid)
    except StoreError as e:
        return store_failure(e)
    return jsonify(rows)


@bp.post("/orders")
async def orders_create():
    user_uid = await current_user()
    if user_uid is None:
        return unauthorized()
    data = await request.get_json(force=True, silent=True)
    parsed = safe_parse(OrderPayload, data)
    if not parsed.ok:
        return invalid_request(parsed.errors)
    try:
        order = await create_order(get_store(), user_uid, parsed.value)
    except StoreError as e:
        return store_failure(e)
    return jsonify(order)
