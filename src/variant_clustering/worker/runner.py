"""Runs the clustering engine over every submitted variant of an assembly."""

from __future__ import annotations

import structlog
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from variant_clustering.accession.generator import RS_CATEGORY, MonotonicAccessionGenerator
from variant_clustering.accession.service import ClusteredVariantAccessioningService
from variant_clustering.clustering.counts import ClusteringCounts
from variant_clustering.clustering.namespaces import NamespaceSelector
from variant_clustering.clustering.writer import ClusteringWriter
from variant_clustering.config.settings import Settings
from variant_clustering.worker.reader import iter_submitted_batches

logger = structlog.get_logger()


def build_writer(
    session_factory: async_sessionmaker[AsyncSession],
    settings: Settings,
    detect_rs_splits: bool | None = None,
) -> ClusteringWriter:
    """Wire a writer and its collaborators from the settings."""
    namespaces = NamespaceSelector.from_settings(settings)
    generator = MonotonicAccessionGenerator(
        session_factory,
        category_id=RS_CATEGORY,
        initial_value=settings.accessioning_monotonic_init_rs,
    )
    service = ClusteredVariantAccessioningService(session_factory, generator, namespaces)
    if detect_rs_splits is None:
        detect_rs_splits = settings.detect_rs_splits
    return ClusteringWriter(
        session_factory,
        service,
        namespaces,
        counts=ClusteringCounts(),
        detect_rs_splits=detect_rs_splits,
    )


async def run_clustering(
    session_factory: async_sessionmaker[AsyncSession],
    settings: Settings,
    assembly_accession: str,
    detect_rs_splits: bool | None = None,
    only_unclustered: bool = False,
) -> ClusteringCounts:
    """Cluster an assembly batch by batch.

    A failing batch stops the run; batches written before it stay written.

    Returns:
        The counters accumulated over the whole run.
    """
    writer = build_writer(session_factory, settings, detect_rs_splits)
    log = logger.bind(assembly=assembly_accession)
    log.info(
        "clustering_started",
        chunk_size=settings.chunk_size,
        detect_rs_splits=detect_rs_splits if detect_rs_splits is not None else settings.detect_rs_splits,
        only_unclustered=only_unclustered,
    )

    batches = 0
    submitted = 0
    async for batch in iter_submitted_batches(
        session_factory,
        assembly_accession,
        settings.chunk_size,
        only_unclustered=only_unclustered,
    ):
        await writer.write(batch)
        batches += 1
        submitted += len(batch)
        log.info("batch_clustered", batch=batches, batch_size=len(batch), submitted_variants_read=submitted)

    log.info("clustering_complete", batches=batches, submitted_variants_read=submitted, **writer.counts.as_dict())
    return writer.counts
