import logging
from typing import Dict, List

from quart import Quart, jsonify
from werkzeug.exceptions import HTTPException

_logger = logging.getLogger(__name__)


def error_response(message: str, status: int, **extra):
    body = {"error": message}
    body.update(extra)
    return jsonify(body), status


def unauthorized():
    return error_response("Unauthorized", 401)


def invalid_request(details: Dict[str, List[str]]):
    return error_response("Invalid request", 400, details=details)


def store_failure(exc: Exception):
    # store messages are passed through as-is
    return error_response(str(exc), 500)


def register_error_handlers(app: Quart) -> None:
    @app.errorhandler(HTTPException)
    async def http_error(e: HTTPException):
        return error_response(e.description or e.name, e.code or 500)

    @app.errorhandler(Exception)
    async def unhandled_error(e: Exception):
        _logger.exception("Unhandled error: %s", e)
        return error_response(str(e) or e.__class__.__name__, 500)
