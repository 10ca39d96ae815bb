from typing import AsyncGenerator
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from app.core.config import DATABASE_URL, DB_TYPE, STORE_TIMEOUT_SECONDS

Base = declarative_base()

# -----------------------
# Async engine
# -----------------------
if DB_TYPE == "postgres":
    engine = create_async_engine(
        DATABASE_URL,
        echo=False,
        future=True,
        pool_size=5,
        max_overflow=10,
        pool_timeout=STORE_TIMEOUT_SECONDS,
        connect_args={
            # Disable prepared statements (PgBouncer)
            "statement_cache_size": 0,
            "prepared_statement_cache_size": 0,
            "timeout": STORE_TIMEOUT_SECONDS,
            "command_timeout": STORE_TIMEOUT_SECONDS,
        },
    )
else:
    engine = create_async_engine(
        DATABASE_URL,
        echo=False,
        future=True,
        connect_args={"timeout": STORE_TIMEOUT_SECONDS},
    )

AsyncSessionLocal = sessionmaker(
    bind=engine,
    class_=AsyncSession,
    autoflush=False,
    autocommit=False,
    expire_on_commit=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Async generator to provide a DB session.
    Use with `Depends(get_db)` in FastAPI routes.
    """
    async with AsyncSessionLocal() as session:
        yield session


def enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


# SQLite foreign key enforcement
if DB_TYPE == "sqlite":
    event.listen(engine.sync_engine, "connect", enable_sqlite_foreign_keys)

import app.models  # noqa: E402,F401


async def init_models():
    """
    Call this on startup to create all tables defined in your models.
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
