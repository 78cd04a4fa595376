"""Batch writer that clusters submitted variants into RS.

For each batch of SS:

1. Split detection on remapped SS that already have an RS (optional);
   those SS are not processed any further in this batch.
2. Get or create an RS accession for the identity of every remaining SS.
   Multimap RS are dropped from the candidates.
3. Merge detection: a remapped SS whose RS differs from the accession
   stored for its identity triggers a merge of the two accessions.
4. SS without RS receive the accession resolved for their identity, or
   stay unclustered when there is none.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import structlog
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from variant_clustering.clustering.counts import ClusteringCounts
from variant_clustering.clustering.merge_resolver import MergeResolver
from variant_clustering.clustering.multimap import is_multimap
from variant_clustering.clustering.namespaces import (
    SUBMITTED_OPERATION_MODELS,
    Namespace,
    NamespaceSelector,
)
from variant_clustering.clustering.operations import (
    clustering_reason,
    snapshot_record,
    submitted_update_operation,
)
from variant_clustering.clustering.split_detector import SplitDetector
from variant_clustering.clustering.variants import SubmittedVariantRecord
from variant_clustering.store import documents

if TYPE_CHECKING:
    from variant_clustering.accession.service import ClusteredVariantAccessioningService

logger = structlog.get_logger()


@dataclass
class AssignedAccessions:
    """Identity hash -> RS accession resolved for the current batch."""

    by_hash: dict[str, int] = field(default_factory=dict)

    def get(self, hash_: str) -> int | None:
        return self.by_hash.get(hash_)

    def assign(self, hash_: str, accession: int) -> None:
        self.by_hash[hash_] = accession

    def __len__(self) -> int:
        return len(self.by_hash)


class ClusteringWriter:
    """Clusters batches of submitted variants.

    Args:
        session_factory: Factory for the sessions used by every write step.
        accessioning_service: RS accession store client.
        namespaces: Accession thresholds selecting dbSNP vs EVA tables.
        counts: Counters updated alongside every state change.
        detect_rs_splits: Run split detection on remapped, already
            clustered SS.  When disabled those SS take part in merge
            detection instead.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        accessioning_service: ClusteredVariantAccessioningService,
        namespaces: NamespaceSelector,
        counts: ClusteringCounts | None = None,
        detect_rs_splits: bool = True,
    ) -> None:
        self._session_factory = session_factory
        self._service = accessioning_service
        self._namespaces = namespaces
        self.counts = counts if counts is not None else ClusteringCounts()
        self._detect_rs_splits = detect_rs_splits
        self._split_detector = SplitDetector(session_factory, accessioning_service, namespaces, self.counts)
        self._merge_resolver = MergeResolver(session_factory, namespaces, self.counts)

    async def write(self, submitted_variants: Sequence[SubmittedVariantRecord]) -> AssignedAccessions:
        """Cluster one batch.

        Returns:
            The accessions resolved for this batch, by identity hash.

        Raises:
            AccessionCouldNotBeGeneratedError: New RS could not be minted.
            UnsupportedVariantTypeError: An SS has unclassifiable alleles.
        """
        assigned = AssignedAccessions()
        log = logger.bind(batch_size=len(submitted_variants))

        remaining = list(submitted_variants)
        if self._detect_rs_splits:
            handled = await self._split_detector.detect(remaining)
            remaining = [sv for sv in remaining if sv.id not in handled]
            if handled:
                log.debug("split_detection_done", handled=len(handled))

        await self._get_or_create_clustered_accessions(remaining, assigned)
        await self._check_for_merges(remaining, assigned)
        await self._cluster_submitted_variants(remaining, assigned)

        log.debug("batch_written", assigned=len(assigned))
        return assigned

    async def _get_or_create_clustered_accessions(
        self, submitted_variants: list[SubmittedVariantRecord], assigned: AssignedAccessions
    ) -> None:
        if not submitted_variants:
            return
        results = await self._service.get_or_create([sv.clustered_identity() for sv in submitted_variants])

        for result in results:
            if not is_multimap(result.data):
                assigned.assign(result.hash, result.accession)

        # Repeated identities share one result object
        self.counts.clustered_variants_created += len({r.hash for r in results if r.is_new})

    async def _check_for_merges(
        self, submitted_variants: list[SubmittedVariantRecord], assigned: AssignedAccessions
    ) -> None:
        for sv in submitted_variants:
            if not (sv.is_clustered and sv.is_remapped):
                continue
            hash_ = sv.clustered_hash()
            accession_in_database = assigned.get(hash_)
            # None when the stored RS was excluded as multimap
            if accession_in_database is not None and accession_in_database != sv.clustered_variant_accession:
                await self._merge_resolver.merge(sv.clustered_variant_accession, hash_, accession_in_database, assigned)

    async def _cluster_submitted_variants(
        self, submitted_variants: list[SubmittedVariantRecord], assigned: AssignedAccessions
    ) -> None:
        """Assign an RS to the SS that have none.

        Updates and their UPDATED records are grouped per SS namespace and
        written as two independent bulk operations.  Only rows still without
        an RS in the store are updated and audited.
        """
        pending: dict[Namespace, list[tuple[SubmittedVariantRecord, int]]] = {ns: [] for ns in Namespace}

        for sv in submitted_variants:
            if sv.is_clustered:
                continue
            rs = assigned.get(sv.clustered_hash())
            if rs is None:
                # No eligible candidate, e.g. the RS is multimap
                self.counts.submitted_variants_kept_unclustered += 1
                continue
            pending[self._namespaces.of_submitted(sv.accession)].append((sv, rs))

        for namespace in Namespace:
            if not pending[namespace]:
                continue
            async with self._session_factory() as session, session.begin():
                updated = await documents.set_clustered_accessions(
                    session, namespace, [(sv.id, rs) for sv, rs in pending[namespace]]
                )
                operations = [
                    submitted_update_operation(snapshot_record(sv), clustering_reason(sv.accession, rs))
                    for sv, rs in pending[namespace]
                    if sv.id in updated
                ]
                await documents.insert_operations(session, SUBMITTED_OPERATION_MODELS[namespace], operations)
            self.counts.submitted_variants_clustered += len(updated)
            self.counts.submitted_variants_update_operations_written += len(operations)
            logger.debug(
                "submitted_variants_clustered",
                namespace=namespace.value,
                count=len(updated),
                already_clustered=len(pending[namespace]) - len(updated),
            )
