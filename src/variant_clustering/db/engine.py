from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from variant_clustering.config.settings import get_settings

_engine: AsyncEngine | None = None


def get_engine(database_url: str | None = None, echo: bool = False) -> AsyncEngine:
    """Return the cached async engine, creating it on first use.

    ``database_url`` only matters on the first call; later calls get the
    engine that already exists.
    """
    global _engine
    if _engine is None:
        url = database_url or get_settings().database_url
        _engine = create_async_engine(url, echo=echo, pool_pre_ping=True)
    return _engine


async def dispose_engine() -> None:
    global _engine
    if _engine is not None:
        await _engine.dispose()
        _engine = None
