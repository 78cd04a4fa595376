"""Merging of two RS accessions found to denote the same identity.

A merge retires one accession in favour of the other (see
:mod:`variant_clustering.clustering.priority`).  Every RS row of the
retired accession gets a MERGED record and is rewritten; every SS that
pointed to it, in both namespaces, gets an UPDATED record and is moved to
the surviving accession.  All updates are scoped by the retired
accession, so replaying a merge finds nothing left to change.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from variant_clustering.clustering.counts import ClusteringCounts
from variant_clustering.clustering.multimap import is_multimap
from variant_clustering.clustering.namespaces import (
    SUBMITTED_MODELS,
    SUBMITTED_OPERATION_MODELS,
    NamespaceSelector,
)
from variant_clustering.clustering.operations import (
    clustered_merge_operation,
    merge_reason,
    snapshot_row,
    submitted_update_operation,
)
from variant_clustering.clustering.priority import Priority, prioritise
from variant_clustering.store import documents

if TYPE_CHECKING:
    from variant_clustering.clustering.writer import AssignedAccessions

logger = structlog.get_logger()


class MergeResolver:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        namespaces: NamespaceSelector,
        counts: ClusteringCounts,
    ) -> None:
        self._session_factory = session_factory
        self._namespaces = namespaces
        self._counts = counts

    async def merge(
        self,
        provided_accession: int,
        hash_: str,
        accession_in_database: int,
        assigned: AssignedAccessions,
    ) -> Priority | None:
        """Merge two accessions that share the identity ``hash_``.

        Args:
            provided_accession: RS currently carried by the submitted variant.
            hash_: Identity hash both accessions resolve to.
            accession_in_database: RS stored for ``hash_``.
            assigned: Batch mapping updated with ``hash_ -> kept accession``.

        Returns:
            The applied priority, or ``None`` if either side is multimap and
            nothing was written.
        """
        prioritised = prioritise(provided_accession, accession_in_database)
        log = logger.bind(
            accession_to_keep=prioritised.accession_to_keep,
            accession_to_be_merged=prioritised.accession_to_be_merged,
        )

        async with self._session_factory() as session, session.begin():
            to_merge = await documents.find_clustered_by_accession(session, prioritised.accession_to_be_merged)
            to_keep = await documents.find_clustered_by_accession(session, prioritised.accession_to_keep)

            if is_multimap(to_merge) or is_multimap(to_keep):
                log.info("merge_skipped_multimap")
                return None

            assigned.assign(hash_, prioritised.accession_to_keep)

            await self._merge_clustered_variants(session, to_merge, prioritised)

            # Both namespaces: earlier cross-namespace merges can leave SS of
            # either kind under any RS.
            submitted = await documents.find_submitted_by_clustered_accession(
                session, prioritised.accession_to_be_merged
            )
            for namespace, model in SUBMITTED_MODELS.items():
                await self._update_submitted_variants(
                    session,
                    [row for row in submitted if isinstance(row, model)],
                    model,
                    SUBMITTED_OPERATION_MODELS[namespace],
                    prioritised,
                )

        log.info("rs_merged", clustered_variants=len(to_merge))
        return prioritised

    async def _merge_clustered_variants(self, session: AsyncSession, rows: list, prioritised: Priority) -> None:
        if not rows:
            return
        operations = [clustered_merge_operation(row, prioritised.accession_to_keep) for row in rows]
        await documents.insert_operations(
            session,
            self._namespaces.clustered_operation_model(prioritised.accession_to_be_merged),
            operations,
        )
        self._counts.clustered_variants_merge_operations_written += len(operations)

        rewritten = await documents.reassign_clustered_variants(
            session,
            self._namespaces,
            rows,
            prioritised.accession_to_be_merged,
            prioritised.accession_to_keep,
        )
        self._counts.clustered_variants_updated += rewritten

    async def _update_submitted_variants(
        self, session: AsyncSession, rows: list, model, operation_model, prioritised: Priority
    ) -> None:
        if not rows:
            return

        reason = merge_reason(prioritised.accession_to_be_merged, prioritised.accession_to_keep)
        operations = [submitted_update_operation(snapshot_row(row), reason) for row in rows]
        await documents.insert_operations(session, operation_model, operations)
        self._counts.submitted_variants_update_operations_written += len(operations)

        updated = await documents.reassign_submitted_variants(
            session,
            model,
            [row.id for row in rows],
            prioritised.accession_to_be_merged,
            prioritised.accession_to_keep,
        )
        self._counts.submitted_variants_updated_rs += updated
