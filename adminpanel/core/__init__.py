# Admin Panel Core Module
from .config import get_settings, settings
from .database import async_session_maker, check_db_connection, engine, get_db
from .logging import setup_logging
from .redis import check_redis_connection, get_redis, redis_client

__all__ = [
    "settings",
    "get_settings",
    "setup_logging",
    "engine",
    "async_session_maker",
    "get_db",
    "check_db_connection",
    "redis_client",
    "get_redis",
    "check_redis_connection",
]
