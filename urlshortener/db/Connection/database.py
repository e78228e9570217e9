import logging

import redis
from redis.connection import ConnectionPool
from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker

from urlshortener.core.config import settings

logger = logging.getLogger(__name__)

SQLALCHEMY_DATABASE_URL = settings.database_url

# SQLite is only used for local runs and tests; it needs cross-thread access
_connect_args = {"check_same_thread": False} if SQLALCHEMY_DATABASE_URL.startswith("sqlite") else {}
engine = create_engine(SQLALCHEMY_DATABASE_URL, pool_pre_ping=True, connect_args=_connect_args)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


# Lazy: no connection is opened until the redirect cache issues a command.
redis_client = redis.Redis(connection_pool=ConnectionPool(
    host=settings.REDIS_HOST,
    port=settings.REDIS_PORT,
    decode_responses=True,
    max_connections=settings.REDIS_MAX_CONNECTIONS,
    socket_connect_timeout=settings.REDIS_CONNECT_TIMEOUT,
    socket_keepalive=True,
    retry_on_timeout=True,
))


def verify_redis_connection() -> bool:
    try:
        redis_client.ping()
        return True
    except redis.exceptions.ConnectionError as e:
        logger.warning(f"Redis unreachable at {settings.REDIS_HOST}:{settings.REDIS_PORT}: {e}")
        return False
    except redis.exceptions.RedisError as e:
        logger.error(f"Unexpected Redis error: {e}")
        return False


def verify_database_connection() -> bool:
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except Exception as e:
        logger.error(f"Database connection failed: {e}")
        return False


def close_connections():
    """Release pooled DB and Redis connections. Failures are logged, not raised."""
    try:
        engine.dispose()
    except Exception:
        logger.warning("Error disposing DB engine", exc_info=True)
    try:
        redis_client.close()
    except redis.exceptions.RedisError:
        logger.warning("Error closing Redis client", exc_info=True)
