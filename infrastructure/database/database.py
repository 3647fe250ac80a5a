from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession
from sqlalchemy import text
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool
from config.settings import DATABASE_URL, DATABASE_ECHO

if DATABASE_URL is None:
    raise ValueError("DATABASE_URL environment variable is not set. Please set it in your .env file.")


def _engine_options(url: str) -> dict:
    # An in-memory SQLite database only lives as long as its one connection.
    if url.startswith("sqlite") and ":memory:" in url:
        return {"poolclass": StaticPool, "connect_args": {"check_same_thread": False}}
    return {}


# Create engine
engine = create_async_engine(DATABASE_URL, echo=DATABASE_ECHO, **_engine_options(DATABASE_URL))

# Create session factory
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
)

# Base for models
Base = declarative_base()

# Ensure all model modules register with Base metadata
from infrastructure.database import models as _models  # noqa: E402,F401

async def get_db():
    db = SessionLocal()
    try:
        yield db
        await db.commit()
    except Exception:
        await db.rollback()
        raise
    finally:
        await db.close()

async def create_tables():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

async def drop_tables():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
