from __future__ import annotations

from collections.abc import Iterator

from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool


def _is_memory_sqlite(url: str) -> bool:
    parsed = make_url(url)
    return parsed.get_backend_name() == "sqlite" and parsed.database in (None, "", ":memory:")


def build_engine(url: str, *, pool_size: int = 4, pool_timeout: float = 30.0) -> Engine:
    connect_args: dict = {}
    if make_url(url).get_backend_name() == "sqlite":
        connect_args["check_same_thread"] = False
    if _is_memory_sqlite(url):
        return create_engine(url, connect_args=connect_args, poolclass=StaticPool)
    # No overflow: once pool_size connections are checked out, callers wait for one.
    return create_engine(
        url,
        connect_args=connect_args,
        pool_size=max(int(pool_size), 1),
        max_overflow=0,
        pool_timeout=pool_timeout,
        pool_pre_ping=True,
    )


def build_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


def get_db(request: Request) -> Iterator[Session]:
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()
