from typing import AsyncGenerator, Any, Dict
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker

from turismo.core import get_settings


settings = get_settings()


def _engine_kwargs(dsn: str) -> Dict[str, Any]:
    """Pool options; SQLite (tests, local runs) uses a single shared connection"""
    if dsn.startswith("sqlite"):
        from sqlalchemy.pool import StaticPool
        return {"poolclass": StaticPool, "connect_args": {"check_same_thread": False}}
    return {
        "pool_size": settings.DB_POOL_SIZE,
        "pool_pre_ping": True,  # Enable connection health checks
    }


# Create async engine
engine = create_async_engine(
    settings.DB_DSN,
    echo=settings.DB_ECHO,
    **_engine_kwargs(settings.DB_DSN),
)

# Create async session factory
AsyncSessionFactory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Dependency to get database session"""
    async with AsyncSessionFactory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
