import logging
import time

from quart import Quart, jsonify, request

# Prometheus metrics
from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST

from .common.auth import RedisSessionResolver
from .common.config import settings
from .common.context import install
from .common.database import SqlStore, init_db
from .common.errors import register_error_handlers
from .common.redis_client import close_redis
from .orders.controller import bp as orders_bp
from .products.controller import bp as products_bp


log = logging.getLogger(__name__)

KNOWN_ENDPOINTS = {"/orders", "/products", "/health", "/metrics"}

# Basic metrics with proper buckets for latency
REQUEST_COUNT = Counter("http_requests_total", "Total HTTP requests", ["method", "endpoint", "status"])
REQUEST_LATENCY = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["endpoint"],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.075, 0.1, 0.25, 0.5, 0.75, 1.0, 2.5, 5.0, 7.5, 10.0, float("inf"))
)


def _metrics_endpoint(path: str) -> str:
    # Normalize endpoint for metrics (to avoid too many unique labels)
    path = path.rstrip("/") or "/"
    return path if path in KNOWN_ENDPOINTS else "other"


def create_app(store=None, identity_resolver=None) -> Quart:
    """
    Build the API. ``store`` and ``identity_resolver`` default to the
    SQLAlchemy store and the Redis session resolver; when the default store
    is used its tables are created before serving.
    """
    app = Quart(__name__)
    manage_db = store is None

    install(
        app,
        store=store if store is not None else SqlStore(),
        identity_resolver=identity_resolver if identity_resolver is not None else RedisSessionResolver(),
    )

    # Blueprints
    app.register_blueprint(orders_bp)
    app.register_blueprint(products_bp)
    register_error_handlers(app)

    @app.before_request
    async def before_request():
        request._start_time = time.time()
        log.info("[Instance %s] %s %s", settings.INSTANCE_ID, request.method, request.path)

    @app.after_request
    async def after_request(response):
        if hasattr(request, "_start_time"):
            duration = time.time() - request._start_time
            endpoint = _metrics_endpoint(request.path)
            REQUEST_LATENCY.labels(endpoint=endpoint).observe(duration)
            REQUEST_COUNT.labels(
                method=request.method,
                endpoint=endpoint,
                status=str(response.status_code)
            ).inc()
        response.headers["X-Instance-ID"] = settings.INSTANCE_ID
        return response

    @app.get("/metrics")
    async def metrics():
        data = generate_latest()
        return app.response_class(data, mimetype=CONTENT_TYPE_LATEST)

    @app.get("/health")
    async def health():
        return jsonify({"status": "ok"})

    @app.before_serving
    async def startup():
        logging.basicConfig(level=settings.LOG_LEVEL.upper())
        if manage_db:
            log.info("Initializing database...")
            await init_db()
            log.info("Database ready.")

    @app.after_serving
    async def shutdown():
        await close_redis()
        log.info("Shutdown complete.")

    return app
