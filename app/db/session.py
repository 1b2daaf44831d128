# app/db/session.py
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import NullPool
from app.core.config import settings

db_url = settings.DATABASE_URL

engine_kwargs: dict = {}

# Timeouts cortos: si la DB no responde → falla rápido (5s)
if db_url.startswith("postgresql+psycopg"):
    engine_kwargs["connect_args"] = {"connect_timeout": 5}
elif db_url.startswith("postgresql+asyncpg"):
    engine_kwargs["connect_args"] = {
        "timeout": 5,
        "server_settings": {"client_encoding": "UTF8"},
    }

if db_url.startswith("sqlite"):
    # SQLite (tests / dev local): sin pool, cada sesión abre su conexión
    engine_kwargs["poolclass"] = NullPool
else:
    engine_kwargs.update(
        pool_pre_ping=True,
        pool_recycle=300,
        pool_size=5,
        max_overflow=10,
    )

engine = create_async_engine(db_url, **engine_kwargs)

AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_session() -> AsyncSession:
    async with AsyncSessionLocal() as session:
        try:
            yield session
        finally:
            await session.close()
