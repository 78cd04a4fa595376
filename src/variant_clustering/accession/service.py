"""RS accessioning service: resolve clustered identities to accessions.

``get_or_create`` is the only place new RS accessions are minted.  The
clustered tables are keyed by identity hash, so the database itself
guarantees at most one accession per hash: when two writers race on the
same unknown hash, one insert fails on the primary key and that writer
adopts the accession stored by the winner.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from variant_clustering.accession.generator import MonotonicAccessionGenerator
from variant_clustering.clustering.namespaces import NamespaceSelector
from variant_clustering.clustering.variants import ClusteredIdentity, ClusteredVariantRecord
from variant_clustering.errors import (
    AccessionDeprecatedError,
    AccessionDoesNotExistError,
    AccessionMergedError,
)
from variant_clustering.models import EventType
from variant_clustering.store import documents

logger = structlog.get_logger()


@dataclass
class GetOrCreateResult:
    """Outcome of resolving one identity.

    Attributes:
        hash: Identity hash.
        accession: Existing or newly minted RS accession.
        is_new: ``True`` if this call minted the accession.
        data: The stored RS row, including its map weight.
    """

    hash: str
    accession: int
    is_new: bool
    data: ClusteredVariantRecord


class ClusteredVariantAccessioningService:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        generator: MonotonicAccessionGenerator,
        namespaces: NamespaceSelector,
    ) -> None:
        self._session_factory = session_factory
        self._generator = generator
        self._namespaces = namespaces

    async def get_or_create(self, identities: Sequence[ClusteredIdentity]) -> list[GetOrCreateResult]:
        """Resolve every identity to exactly one accession.

        Results come back in input order; repeated identities share one
        result.

        Raises:
            AccessionCouldNotBeGeneratedError: If new accessions could not
                be reserved.
        """
        unique: dict[str, ClusteredIdentity] = {}
        for identity in identities:
            unique.setdefault(identity.hash, identity)

        stored = await self._find_by_hashes(unique.keys())
        missing = [identity for h, identity in unique.items() if h not in stored]

        created: set[str] = set()
        if missing:
            accessions = await self._generator.generate_accessions(len(missing))
            candidates = [
                ClusteredVariantRecord.from_identity(identity, accession)
                for identity, accession in zip(missing, accessions)
            ]
            created = await self._insert(candidates)
            stored.update(await self._find_by_hashes(identity.hash for identity in missing))
            if len(created) < len(missing):
                logger.info(
                    "accession_race_lost",
                    requested=len(missing),
                    created=len(created),
                )

        results_by_hash = {
            h: GetOrCreateResult(hash=h, accession=stored[h].accession, is_new=h in created, data=stored[h])
            for h in unique
        }
        return [results_by_hash[identity.hash] for identity in identities]

    async def get(self, identities: Sequence[ClusteredIdentity]) -> list[ClusteredVariantRecord]:
        """Stored RS rows for those identities that already have an accession."""
        stored = await self._find_by_hashes(identity.hash for identity in identities)
        return list(stored.values())

    async def get_by_accession(self, accession: int) -> ClusteredVariantRecord:
        """The first stored locus of an active RS.

        Raises:
            AccessionMergedError: The accession was merged into another one.
            AccessionDeprecatedError: The accession was deprecated.
            AccessionDoesNotExistError: The accession was never issued.
        """
        return (await self.get_all_by_accession(accession))[0]

    async def get_all_by_accession(self, accession: int) -> list[ClusteredVariantRecord]:
        """Every stored locus of an active RS, across assemblies.

        Raises the same errors as :meth:`get_by_accession`.
        """
        async with self._session_factory() as session:
            rows = await documents.find_clustered_by_accession(session, accession)
            if rows:
                return [ClusteredVariantRecord.from_row(row) for row in rows]
            inactivation = await documents.find_latest_inactivation(session, self._namespaces, accession)

        if inactivation is None:
            raise AccessionDoesNotExistError(accession)
        if inactivation.event_type == EventType.MERGED.value:
            raise AccessionMergedError(accession, inactivation.merge_into)
        raise AccessionDeprecatedError(accession)

    async def _find_by_hashes(self, hashes) -> dict[str, ClusteredVariantRecord]:
        async with self._session_factory() as session:
            rows = await documents.find_clustered_by_hashes(session, hashes)
        stored: dict[str, ClusteredVariantRecord] = {}
        # A hash present in both tables resolves to the dbSNP row
        for row in rows:
            stored.setdefault(row.id, ClusteredVariantRecord.from_row(row))
        return stored

    async def _insert(self, candidates: list[ClusteredVariantRecord]) -> set[str]:
        """Insert new RS rows, tolerating hashes inserted concurrently.

        Returns:
            Hashes whose row was written by this call.
        """
        try:
            async with self._session_factory() as session, session.begin():
                inserted = await documents.insert_clustered_variants(session, self._namespaces, candidates)
            return set(inserted)
        except IntegrityError:
            logger.info("accession_insert_conflict", candidates=len(candidates))

        # Someone else stored at least one of these hashes in the meantime:
        # retry row by row so the rows that are still free get written.
        inserted = set()
        for candidate in candidates:
            try:
                async with self._session_factory() as session, session.begin():
                    inserted.update(
                        await documents.insert_clustered_variants(session, self._namespaces, [candidate])
                    )
            except IntegrityError:
                logger.debug("accession_hash_taken", hash=candidate.hash)
        return inserted
