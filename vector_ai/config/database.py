"""
Database Connection Module

This module holds the single shared database handle for the application.
It creates up to two SQLAlchemy engines:
1. read engine - introspection and listing endpoints
2. update engine - embedding generation routes (falls back to the read engine)

Global Query Timeout: on MySQL every new connection gets MAX_EXECUTION_TIME set,
so long-running SELECTs are killed after QUERY_TIMEOUT_SECONDS.
"""

import urllib.parse
import logging
from typing import Optional
from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine, make_url
from vector_ai.config.settings import settings

logger = logging.getLogger("vector_ai")

# Suppress verbose SQLAlchemy SQL logging (only show errors, not full SQL)
logging.getLogger('sqlalchemy.engine').setLevel(logging.WARNING)
logging.getLogger('sqlalchemy.pool').setLevel(logging.WARNING)

_engine: Optional[Engine] = None
_update_engine: Optional[Engine] = None


def _set_execution_timeout(dbapi_conn, connection_record):
    """
    Event listener to set MAX_EXECUTION_TIME on each new MySQL connection.

    The 'connect' event receives a raw DBAPI connection (pymysql), so we use cursor.execute().
    """
    try:
        cursor = dbapi_conn.cursor()
        cursor.execute(f"SET SESSION MAX_EXECUTION_TIME = {settings.QUERY_TIMEOUT_SECONDS * 1000}")
        cursor.close()
        logger.debug(f"Set MAX_EXECUTION_TIME to {settings.QUERY_TIMEOUT_SECONDS} seconds on new connection")
    except Exception as e:
        logger.warning(f"Failed to set MAX_EXECUTION_TIME on connection: {e}")


def build_database_url(user: str, password: str) -> str:
    """Build a SQLAlchemy URL from the MYSQL_* settings."""
    encoded_password = urllib.parse.quote_plus(password or "")
    return (
        f"{settings.DB_DRIVER}://{user}:{encoded_password}"
        f"@{settings.MYSQL_HOST}:{settings.MYSQL_PORT}/{settings.MYSQL_DATABASE}"
    )


def _create_engine(database_url: str, connection_name: str) -> Engine:
    """Helper function to create a database engine."""
    url = make_url(database_url)
    backend = url.get_backend_name()

    engine_kwargs = {"pool_pre_ping": True, "echo": False}
    if backend == "sqlite":
        # TestClient and uvicorn run sync routes in a worker thread pool
        engine_kwargs["connect_args"] = {"check_same_thread": False}
    else:
        engine_kwargs["pool_recycle"] = 3600

    print(f"🔗 {connection_name} Connection URL: {url.render_as_string(hide_password=True)}")

    try:
        engine = create_engine(database_url, **engine_kwargs)

        if backend == "mysql":
            event.listen(engine, "connect", _set_execution_timeout)

        logger.info(f"{connection_name} SQLAlchemy engine created")
        return engine
    except Exception as e:
        logger.error(f"Error creating {connection_name} SQLAlchemy engine: {e}")
        raise


def connect_db(database_url: Optional[str] = None) -> Engine:
    """
    Create the shared engines and verify the connection with SELECT 1.

    Args:
        database_url: Explicit URL; defaults to DATABASE_URL or the MYSQL_* settings

    Returns:
        The read engine

    Raises:
        Exception: Whatever the driver raises when the database is unreachable
    """
    global _engine, _update_engine

    close_connection()

    read_url = database_url or settings.DATABASE_URL or build_database_url(
        settings.MYSQL_USER, settings.MYSQL_PASSWORD
    )
    engine = _create_engine(read_url, "Read Database")

    if settings.has_update_user and not (database_url or settings.DATABASE_URL):
        update_engine = _create_engine(
            build_database_url(settings.UPDATE_USER, settings.UPDATE_PASSWORD),
            "Update Database"
        )
        logger.info("Using separate UPDATE_USER connection for embedding routes")
    else:
        update_engine = engine

    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1")).fetchone()
    except Exception as e:
        logger.error(f"Database connection failed: {e}")
        engine.dispose()
        if update_engine is not engine:
            update_engine.dispose()
        raise

    _engine = engine
    _update_engine = update_engine
    logger.info(f"Connected to database: {engine.url.render_as_string(hide_password=True)}")
    return engine


def get_engine() -> Engine:
    """Return the read engine established by connect_db()."""
    if _engine is None:
        raise RuntimeError("Database connection not established. Call connect_db() first.")
    return _engine


def get_update_engine() -> Engine:
    """Return the engine used for writes (embedding column, vector_embeddings)."""
    if _update_engine is None:
        raise RuntimeError("Database connection not established. Call connect_db() first.")
    return _update_engine


def close_connection():
    """Dispose of the engines and reset the holder."""
    global _engine, _update_engine

    if _update_engine is not None and _update_engine is not _engine:
        _update_engine.dispose()
    if _engine is not None:
        _engine.dispose()
        logger.info("Database connection closed")

    _engine = None
    _update_engine = None
