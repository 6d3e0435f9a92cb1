"""
SQLAlchemy engine and session factory for catalog reads.
"""

from __future__ import annotations

import os

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from pricescan.db.config import resolve_database_url


def _get_bool_env(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def create_db_engine(database_url: str | None = None) -> Engine:
    url = database_url or resolve_database_url()
    options: dict[str, object] = {"echo": _get_bool_env("SQL_ECHO", default=False)}
    if not url.startswith("sqlite"):
        options["pool_pre_ping"] = True
    return create_engine(url, **options)


def create_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(
        bind=engine,
        class_=Session,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
    )


def SessionLocal(database_url: str | None = None) -> Session:
    """Open a session against the catalog database."""
    return create_session_factory(create_db_engine(database_url))()
