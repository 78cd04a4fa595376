"""Monotonic accession generator backed by a counter row.

Each call reserves a contiguous range by advancing the counter inside its
own transaction, so a reserved range is committed (and never handed out
again) before any row uses it.  Ranges left unused because another writer
won a hash race become gaps, which is harmless: accessions only need to be
unique and increasing.
"""

from __future__ import annotations

import structlog
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from variant_clustering.errors import AccessionCouldNotBeGeneratedError
from variant_clustering.models import AccessionCounter

logger = structlog.get_logger()

RS_CATEGORY = "rs"


class MonotonicAccessionGenerator:
    """Hands out increasing accessions for one category.

    Args:
        session_factory: Factory for the sessions used to advance the counter.
        category_id: Counter row key (one counter per accession kind).
        initial_value: First accession issued when the counter row does
            not exist yet.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        category_id: str,
        initial_value: int,
    ) -> None:
        self._session_factory = session_factory
        self._category_id = category_id
        self._initial_value = initial_value

    async def generate_accessions(self, count: int) -> list[int]:
        """Reserve ``count`` consecutive accessions.

        Raises:
            AccessionCouldNotBeGeneratedError: If the counter could not be
                read or advanced.
        """
        if count <= 0:
            return []
        try:
            try:
                first = await self._reserve(count)
            except IntegrityError:
                # Another writer created the counter row first; it exists now
                logger.info("accession_counter_created_concurrently", category=self._category_id)
                first = await self._reserve(count)
        except SQLAlchemyError as e:
            raise AccessionCouldNotBeGeneratedError(
                f"Could not reserve {count} accessions for category {self._category_id!r}"
            ) from e

        logger.debug("accessions_reserved", category=self._category_id, first=first, count=count)
        return list(range(first, first + count))

    async def _reserve(self, count: int) -> int:
        async with self._session_factory() as session, session.begin():
            counter = await session.get(AccessionCounter, self._category_id, with_for_update=True)
            if counter is None:
                counter = AccessionCounter(
                    category_id=self._category_id,
                    last_committed=self._initial_value - 1,
                )
                session.add(counter)
            first = counter.last_committed + 1
            counter.last_committed = first + count - 1
        return first
