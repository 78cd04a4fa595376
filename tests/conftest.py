"""Shared test fixtures."""

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from variant_clustering.accession.generator import RS_CATEGORY, MonotonicAccessionGenerator
from variant_clustering.accession.service import ClusteredVariantAccessioningService
from variant_clustering.clustering.counts import ClusteringCounts
from variant_clustering.clustering.namespaces import NamespaceSelector
from variant_clustering.models.base import Base

# Small thresholds keep accessions readable: SS below 5000 and RS below
# 3000 are dbSNP, anything from there on is EVA.
SS_THRESHOLD = 5000
RS_THRESHOLD = 3000


@pytest.fixture
async def test_engine():
    """Create an async SQLite in-memory engine for tests."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine) -> async_sessionmaker[AsyncSession]:
    """Create an async session factory bound to the test engine."""
    return async_sessionmaker(test_engine, expire_on_commit=False)


@pytest.fixture
def namespaces() -> NamespaceSelector:
    return NamespaceSelector(submitted_threshold=SS_THRESHOLD, clustered_threshold=RS_THRESHOLD)


@pytest.fixture
def generator(test_session_factory) -> MonotonicAccessionGenerator:
    """RS generator issuing EVA accessions from 3000 upwards."""
    return MonotonicAccessionGenerator(test_session_factory, RS_CATEGORY, RS_THRESHOLD)


@pytest.fixture
def accessioning_service(test_session_factory, generator, namespaces) -> ClusteredVariantAccessioningService:
    return ClusteredVariantAccessioningService(test_session_factory, generator, namespaces)


@pytest.fixture
def counts() -> ClusteringCounts:
    return ClusteringCounts()
