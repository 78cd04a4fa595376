from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from variant_clustering.db.engine import get_engine

_session_factory: async_sessionmaker[AsyncSession] | None = None


def get_session_factory(database_url: str | None = None) -> async_sessionmaker[AsyncSession]:
    """Return a cached session factory bound to the engine.

    Sessions never expire loaded rows on commit: the clustering steps keep
    reading records after their transaction has been committed.
    """
    global _session_factory
    if _session_factory is None:
        engine = get_engine(database_url)
        _session_factory = async_sessionmaker(engine, expire_on_commit=False)
    return _session_factory
