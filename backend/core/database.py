from __future__ import annotations

import logging
import time
from typing import Iterable, Iterator

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from core.config import settings


logger = logging.getLogger(__name__)


class DatabaseUnavailableError(RuntimeError):
    """Raised when the database is temporarily unreachable (transient connectivity failure)."""


_RETRY_DELAYS_SECONDS: list[float] = [0.2, 0.5, 1.0]

_TRANSIENT_MARKERS: tuple[str, ...] = (
    # DNS resolution
    "getaddrinfo failed",
    "could not translate host name",
    "name or service not known",
    # refused / reset / closed
    "connection refused",
    "actively refused",
    "connection reset",
    "server closed the connection unexpectedly",
    # timeouts
    "timeout",
    "timed out",
)


def _iter_exception_messages(exc: BaseException) -> Iterable[str]:
    seen: set[int] = set()
    cur: BaseException | None = exc
    while cur is not None and id(cur) not in seen:
        seen.add(id(cur))
        msg = str(cur)
        if msg:
            yield msg
        cur = getattr(cur, "__cause__", None) or getattr(cur, "__context__", None)


def is_transient_db_connectivity_error(exc: BaseException) -> bool:
    """Heuristically detect transient DB connectivity failures (DNS/timeouts/refused).

    Constraint/validation/SQL errors are NOT treated as transient.
    """

    joined = "\n".join(m.lower() for m in _iter_exception_messages(exc))
    return any(marker in joined for marker in _TRANSIENT_MARKERS)


def get_engine() -> Engine:
    url = settings.database_url.strip()

    if url.startswith("sqlite"):
        kwargs: dict[str, object] = {"connect_args": {"check_same_thread": False}}
        # In-memory databases live per connection; share a single one across the app.
        if ":memory:" in url or url.rstrip("/") in {"sqlite:", "sqlite+pysqlite:"}:
            kwargs["poolclass"] = StaticPool
        return create_engine(url, **kwargs)

    # Normalize common Postgres URLs to SQLAlchemy's psycopg2 dialect.
    if url.startswith("postgresql://"):
        url = "postgresql+psycopg2://" + url.removeprefix("postgresql://")
    elif url.startswith("postgres://"):
        url = "postgresql+psycopg2://" + url.removeprefix("postgres://")

    connect_args: dict[str, object] = {"connect_timeout": 3}

    try:
        parsed = make_url(url)
        host = (parsed.host or "").lower()
        if host.endswith("supabase.com") and "sslmode" not in (parsed.query or {}):
            connect_args["sslmode"] = "require"
    except Exception:
        logger.debug("Could not parse database URL; using it as-is")

    return create_engine(url, pool_pre_ping=True, connect_args=connect_args)


ENGINE = get_engine()
SessionLocal = sessionmaker(bind=ENGINE, autoflush=False, autocommit=False)


def get_db() -> Iterator[Session]:
    last_exc: BaseException | None = None

    # Retry session acquisition with an explicit lightweight ping (SELECT 1).
    for attempt in range(len(_RETRY_DELAYS_SECONDS) + 1):
        db = SessionLocal()
        try:
            db.execute(text("SELECT 1"))
        except OperationalError as exc:
            last_exc = exc
            db.close()
            if not is_transient_db_connectivity_error(exc) or attempt >= len(_RETRY_DELAYS_SECONDS):
                break
            time.sleep(_RETRY_DELAYS_SECONDS[attempt])
            continue

        # Do NOT wrap `yield db` in the ping's try/except: endpoint errors (404/409/422)
        # must propagate instead of turning into DatabaseUnavailableError (503).
        try:
            yield db
        finally:
            db.close()
        return

    raise DatabaseUnavailableError("Database temporarily unavailable") from last_exc


def validate_db_connection(db: Session) -> None:
    """Explicitly validate DB connectivity with a lightweight query."""

    try:
        db.execute(text("SELECT 1"))
    except Exception as exc:
        if is_transient_db_connectivity_error(exc):
            raise DatabaseUnavailableError("Database temporarily unavailable") from exc
        raise
