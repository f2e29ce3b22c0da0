import os
from dataclasses import dataclass


def _get_bool(env_name: str, default: bool = False) -> bool:
    val = os.getenv(env_name)
    if val is None:
        return default
    return str(val).strip().lower() in {"1", "true", "yes", "y", "on"}


@dataclass
class Settings:
    # App
    APP_HOST: str = os.getenv("APP_HOST", "0.0.0.0")
    APP_PORT: int = int(os.getenv("APP_PORT", "8000"))
    INSTANCE_ID: str = os.getenv("INSTANCE_ID", "unknown")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Database (SQLite by default in a Docker volume)
    DB_URL: str = os.getenv("DB_URL", "sqlite+aiosqlite:////data/data.db")
    DB_ECHO: bool = _get_bool("DB_ECHO", False)

    # Redis (session tokens -> user ids)
    REDIS_HOST: str = os.getenv("REDIS_HOST", "redis")
    REDIS_PORT: int = int(os.getenv("REDIS_PORT", "6379"))
    REDIS_DB: int = int(os.getenv("REDIS_DB", "0"))
    REDIS_USERNAME: str = os.getenv("REDIS_USERNAME", "")
    REDIS_PASSWORD: str = os.getenv("REDIS_PASSWORD", "")
    REDIS_SSL: bool = _get_bool("REDIS_SSL", False)
    SESSION_KEY_PREFIX: str = os.getenv("SESSION_KEY_PREFIX", "session:")
    SESSION_TTL_SECONDS: int = int(os.getenv("SESSION_TTL_SECONDS", "86400"))

    # Order workflow compensation
    COMPENSATION_ATTEMPTS: int = int(os.getenv("COMPENSATION_ATTEMPTS", "3"))
    COMPENSATION_BACKOFF: float = float(os.getenv("COMPENSATION_BACKOFF", "0.2"))

    # Defaults for seeding
    DEMO_USER_UID: str = os.getenv("DEMO_USER_UID", "demo-user")
    DEMO_CUSTOMER_NAME: str = os.getenv("DEMO_CUSTOMER_NAME", "Walk-in Customer")
    DEMO_PAYMENT_METHOD: str = os.getenv("DEMO_PAYMENT_METHOD", "Cash")


settings = Settings()
