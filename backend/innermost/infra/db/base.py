"""Database base configuration."""
import os
import ssl
from typing import Optional

from sqlalchemy import JSON
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.types import TypeDecorator


def normalize_async_pg_url(url: str) -> str:
    """Ensure URL uses asyncpg driver; cloud often gives postgresql:// (sync)."""
    u = (url or "").strip()
    if u.startswith("postgresql://") and "postgresql+asyncpg" not in u[:22]:
        return url.replace("postgresql://", "postgresql+asyncpg://", 1)
    return url


def _ssl_context_no_verify() -> ssl.SSLContext:
    """SSL context that skips certificate verification (for local/one-off use only)."""
    ctx = ssl.create_default_context()
    ctx.check_hostname = False
    ctx.verify_mode = ssl.CERT_NONE
    return ctx


def async_pg_connect_args(url: str) -> dict:
    """Build connect_args for asyncpg: use ssl when URL has sslmode=require (asyncpg does not accept sslmode).
    Set DATABASE_SSL_VERIFY=true to enable strict certificate verification."""
    use_ssl = make_url(url).query.get("sslmode") == "require"
    if not use_ssl:
        return {}
    verify = os.environ.get("DATABASE_SSL_VERIFY", "false").strip().lower()
    if verify in ("true", "1"):
        return {"ssl": True}
    return {"ssl": _ssl_context_no_verify()}


def async_pg_url_without_sslmode(url: str) -> str:
    """Return URL with sslmode removed so asyncpg does not get unknown kwarg sslmode.

    Parsed with SQLAlchemy so host-less URLs such as ``sqlite+aiosqlite:///:memory:`` survive.
    """
    parsed = make_url(url)
    if "sslmode" not in parsed.query:
        return url
    return parsed.difference_update_query(["sslmode"]).render_as_string(hide_password=False)


def engine_url(database_url: str) -> str:
    """The URL handed to SQLAlchemy: asyncpg driver, no sslmode."""
    return async_pg_url_without_sslmode(normalize_async_pg_url(database_url))


def create_engine(database_url: str, echo: bool = False, **engine_kwargs) -> AsyncEngine:
    """Async engine for a Postgres (asyncpg) or SQLite (aiosqlite) URL."""
    return create_async_engine(
        engine_url(database_url),
        connect_args=async_pg_connect_args(database_url),
        echo=echo,
        future=True,
        **engine_kwargs,
    )


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )


def session_factory_from_settings(database_url: Optional[str] = None) -> async_sessionmaker:
    """Session factory for the configured database."""
    from innermost.settings import settings

    return create_session_factory(create_engine(database_url or settings.database_url, settings.database_echo))


class JSONBType(TypeDecorator):
    """JSONB on PostgreSQL, plain JSON elsewhere (SQLite in tests)."""
    impl = JSONB
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == 'sqlite':
            return dialect.type_descriptor(JSON())
        return dialect.type_descriptor(JSONB())


class Base(DeclarativeBase):
    """Base class for all models."""
    pass
