# projectdesk/config.py
import logging
import time
from functools import lru_cache
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy import create_engine, event
from sqlalchemy.orm import declarative_base, sessionmaker

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "development"

    # --- Database ---
    database_url: str = "sqlite:///projectdesk_dev.db"
    db_pool_size: int = 20
    db_pool_timeout_seconds: int = 2
    slow_query_threshold_ms: int = 1000

    # --- Security / JWT ---
    jwt_secret: str = "dev-secret-please-change"
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24 * 7  # 7 days
    auth_rate_limit: int = 20
    auth_rate_window_seconds: int = 60

    # --- CORS ---
    cors_origins: List[str] = ["http://localhost:3000"]

    # --- Logging ---
    log_level: str = "INFO"
    log_format: str = "text"

    # --- Workflow / audit ---
    workflow_enforce_sequence: bool = True
    audit_log_default_limit: int = 100
    audit_log_max_limit: int = 500


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()


def build_engine(database_url: str):
    if database_url.startswith("sqlite"):
        engine = create_engine(database_url, connect_args={"check_same_thread": False})
    else:
        engine = create_engine(
            database_url,
            pool_size=settings.db_pool_size,
            pool_timeout=settings.db_pool_timeout_seconds,
            pool_pre_ping=True,
        )
    _attach_listeners(engine)
    return engine


def _attach_listeners(engine) -> None:
    @event.listens_for(engine, "connect")
    def _enable_sqlite_fk(dbapi_conn, connection_record):
        if "sqlite" in type(dbapi_conn).__module__:
            cursor = dbapi_conn.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    @event.listens_for(engine, "before_cursor_execute")
    def _start_timer(conn, cursor, statement, parameters, context, executemany):
        conn.info.setdefault("query_start_time", []).append(time.perf_counter())

    @event.listens_for(engine, "after_cursor_execute")
    def _log_slow_query(conn, cursor, statement, parameters, context, executemany):
        started = conn.info["query_start_time"].pop()
        duration_ms = (time.perf_counter() - started) * 1000
        if duration_ms > settings.slow_query_threshold_ms:
            logger.warning("Slow query detected (%.0f ms): %s", duration_ms, statement)


# --- SQLAlchemy setup ---
engine = build_engine(settings.database_url)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()
