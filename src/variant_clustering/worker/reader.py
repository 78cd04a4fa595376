"""Chunked reading of submitted variants for a clustering run."""

from __future__ import annotations

from collections.abc import AsyncIterator

import sqlalchemy as sa
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from variant_clustering.clustering.namespaces import SUBMITTED_MODELS, Namespace
from variant_clustering.clustering.variants import SubmittedVariantRecord


async def iter_submitted_batches(
    session_factory: async_sessionmaker[AsyncSession],
    assembly_accession: str,
    chunk_size: int,
    only_unclustered: bool = False,
    only_remapped: bool = False,
) -> AsyncIterator[list[SubmittedVariantRecord]]:
    """Yield the SS of an assembly in batches of at most ``chunk_size``.

    The dbSNP table is read first, then the EVA table.  Pages are keyed on
    the row id, so rows updated by the consumer between two pages are
    neither skipped nor read twice.
    """
    for namespace in (Namespace.LEGACY, Namespace.ACTIVE):
        model = SUBMITTED_MODELS[namespace]
        last_id: str | None = None
        while True:
            stmt = sa.select(model).where(model.assembly_accession == assembly_accession)
            if only_unclustered:
                stmt = stmt.where(model.clustered_variant_accession.is_(None))
            if only_remapped:
                stmt = stmt.where(model.remapped_from.is_not(None))
            if last_id is not None:
                stmt = stmt.where(model.id > last_id)
            stmt = stmt.order_by(model.id).limit(chunk_size)

            async with session_factory() as session:
                rows = (await session.execute(stmt)).scalars().all()
                batch = [SubmittedVariantRecord.from_row(row) for row in rows]

            if not batch:
                break
            yield batch
            if len(batch) < chunk_size:
                break
            last_id = batch[-1].id
