from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import StaticPool
from urllib.parse import urlparse, parse_qs, urlunparse
import os

from catalog.config import settings


def clean_asyncpg_url(url: str) -> tuple[str, dict]:
    """
    Clean database URL for asyncpg compatibility.
    Converts postgresql:// to postgresql+asyncpg://, removes ALL query params
    (asyncpg doesn't support psycopg2-style params), and converts sslmode
    to connect_args format.
    Returns (cleaned_url, connect_args_dict)
    """
    if url.startswith("postgresql://"):
        url = url.replace("postgresql://", "postgresql+asyncpg://", 1)

    if not url.startswith("postgresql+asyncpg://"):
        return url, {}

    parsed = urlparse(url)
    query_params = parse_qs(parsed.query)

    connect_args = {}
    if "sslmode" in query_params:
        sslmode = query_params.pop("sslmode")[0]
        # asyncpg uses ssl=True/False instead of libpq modes
        connect_args["ssl"] = sslmode != "disable"
    else:
        hostname = parsed.hostname or ""
        if (".amazonaws.com" in hostname or ".database.azure.com" in hostname
                or "sql.googleapis.com" in hostname or os.getenv("DYNO")):
            connect_args["ssl"] = True

    cleaned_url = urlunparse(parsed._replace(query=""))
    return cleaned_url, connect_args


def build_engine(url: str, echo: bool = False) -> AsyncEngine:
    """Create the async engine for `url`.

    SQLite shares one connection across the process so an in-memory
    database survives between sessions. Server databases get a pooled engine.
    """
    if url.startswith("sqlite"):
        return create_async_engine(
            url,
            echo=echo,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )

    cleaned_url, connect_args = clean_asyncpg_url(url)
    return create_async_engine(
        cleaned_url,
        echo=echo,
        pool_pre_ping=True,
        pool_size=10,
        max_overflow=20,
        connect_args=connect_args,
    )


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


async_engine = build_engine(settings.database_url, echo=settings.debug)
AsyncSessionLocal = build_session_factory(async_engine)

# Base class for models
Base = declarative_base()


async def init_models(engine: AsyncEngine = async_engine) -> None:
    """Create missing tables. Production deployments run the Alembic migration instead."""
    # Register the mapped classes on Base.metadata
    from catalog.models import product  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


# Dependency for FastAPI to get async database session
async def get_db():
    async with AsyncSessionLocal() as session:
        try:
            yield session
        finally:
            await session.close()
