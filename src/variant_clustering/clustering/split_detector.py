"""Detection of RS split candidates among remapped submitted variants.

Remapping moves submitted variants to a new assembly but keeps their RS.
Two SS that shared an RS in the old assembly can end up at different loci
(or with a different variant type) in the new one, and then one RS
describes two identities.  Example, RS 306 before clustering::

    SS   RS   ASM   STUDY   CONTIG  POS   REF ALT
    500  306  ASM1  PRJEB1  Chr1    1000  A   T    (original)
    501  306  ASM1  PRJEB2  Chr1    1000  A   T    (original)
    500  306  ASM2  PRJEB1  Chr1    1000  A   T    (remapped)
    501  306  ASM2  PRJEB2  Chr1    1500  A   T    (remapped)

The first ASM2 locus seen for RS 306 becomes a new clustered row of RS
306.  The second one is a split: an RS_SPLIT_CANDIDATE record lists every
SS of RS 306 in ASM2, to be resolved later.  Accessions are never changed
here.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

import structlog
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from variant_clustering.clustering.counts import ClusteringCounts
from variant_clustering.clustering.namespaces import NamespaceSelector
from variant_clustering.clustering.operations import snapshot_row, split_candidate_reason
from variant_clustering.clustering.variants import ClusteredVariantRecord, SubmittedVariantRecord
from variant_clustering.errors import AccessionLookupError
from variant_clustering.store import documents

if TYPE_CHECKING:
    from variant_clustering.accession.service import ClusteredVariantAccessioningService

logger = structlog.get_logger()

# (assembly, RS accession)
GroupKey = tuple[str, int]


def group_by_accession_then_hash(
    submitted_variants: Sequence[SubmittedVariantRecord],
) -> dict[GroupKey, dict[str, list[SubmittedVariantRecord]]]:
    """Group SS by (assembly, RS) and then by clustered hash.

    Hash groups keep the order in which their first SS appears.
    """
    groups: dict[GroupKey, dict[str, list[SubmittedVariantRecord]]] = {}
    for sv in submitted_variants:
        key = (sv.assembly_accession, sv.clustered_variant_accession)
        groups.setdefault(key, {}).setdefault(sv.clustered_hash(), []).append(sv)
    return groups


class SplitDetector:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        accessioning_service: ClusteredVariantAccessioningService,
        namespaces: NamespaceSelector,
        counts: ClusteringCounts,
    ) -> None:
        self._session_factory = session_factory
        self._service = accessioning_service
        self._namespaces = namespaces
        self._counts = counts

    async def detect(self, submitted_variants: Sequence[SubmittedVariantRecord]) -> set[str]:
        """Process the clustered and remapped SS of a batch.

        Returns:
            Ids of the SS handled here; the caller drops them from the rest
            of the batch.
        """
        candidates = [sv for sv in submitted_variants if sv.is_clustered and sv.is_remapped]
        if not candidates:
            return set()

        existing_hashes = {
            record.hash for record in await self._service.get([sv.clustered_identity() for sv in candidates])
        }
        groups = group_by_accession_then_hash(candidates)

        new_loci: list[ClusteredVariantRecord] = []
        split_keys: list[GroupKey] = []

        for key in sorted(groups, key=lambda k: (k[1], k[0])):
            assembly, accession = key
            try:
                hashes_for_rs = await self._hashes_for_accession(assembly, accession)
            except AccessionLookupError as e:
                logger.error(
                    "split_detection_lookup_failed",
                    accession=accession,
                    assembly=assembly,
                    error=str(e),
                )
                continue

            for hash_, records in groups[key].items():
                if hash_ in existing_hashes and hash_ not in hashes_for_rs:
                    # The locus already belongs to another RS.  Moving these SS
                    # to it would also need the rest of this RS reconciled, so
                    # it is left for manual review.
                    self._counts.rs_merge_candidates_flagged += len(records)
                    logger.warning(
                        "rs_merge_candidate_needs_review",
                        accession=accession,
                        assembly=assembly,
                        hash=hash_,
                        submitted_accessions=[sv.accession for sv in records],
                    )
                elif not hashes_for_rs:
                    first = records[0]
                    new_loci.append(
                        ClusteredVariantRecord.from_identity(
                            first.clustered_identity(), accession, validated=first.validated
                        )
                    )
                    hashes_for_rs.add(hash_)
                    existing_hashes.add(hash_)
                elif hash_ in hashes_for_rs:
                    continue
                elif key not in split_keys:
                    split_keys.append(key)

        async with self._session_factory() as session, session.begin():
            if new_loci:
                inserted = await documents.insert_clustered_variants(session, self._namespaces, new_loci)
                self._counts.clustered_variants_loci_created += len(inserted)
                logger.info("split_detection_new_loci", requested=len(new_loci), inserted=len(inserted))
            for assembly, accession in split_keys:
                await self._write_split_candidate(session, assembly, accession)

        return {sv.id for sv in candidates}

    async def _hashes_for_accession(self, assembly: str, accession: int) -> set[str]:
        loci = await self._service.get_all_by_accession(accession)
        return {locus.hash for locus in loci if locus.assembly_accession == assembly}

    async def _write_split_candidate(self, session: AsyncSession, assembly: str, accession: int) -> None:
        rows = await documents.find_submitted_by_clustered_accession(session, accession, assembly)
        snapshots = [snapshot_row(row) for row in rows]
        created = await documents.upsert_split_candidate(
            session, accession, split_candidate_reason(accession), snapshots
        )
        if created:
            self._counts.clustered_variants_rs_split += len(snapshots)
        logger.info(
            "rs_split_candidate",
            accession=accession,
            assembly=assembly,
            submitted_variants=len(snapshots),
            created=created,
        )
