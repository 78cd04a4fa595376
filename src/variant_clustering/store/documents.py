"""Queries and bulk writes against the variant tables.

Every function takes an open session and leaves transaction control to
the caller.  Lookups that are not scoped to a namespace read both the
dbSNP and the EVA table, because earlier cross-namespace merges may have
left related rows on either side.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

import sqlalchemy as sa
from sqlalchemy.ext.asyncio import AsyncSession

from variant_clustering.clustering.namespaces import (
    CLUSTERED_MODELS,
    SUBMITTED_MODELS,
    SUBMITTED_OPERATION_MODELS,
    Namespace,
    NamespaceSelector,
)
from variant_clustering.clustering.variants import ClusteredVariantRecord
from variant_clustering.models import EventType


def _column_values(row) -> dict:
    return {column.key: getattr(row, column.key) for column in row.__table__.columns}


# ---------------------------------------------------------------------------
# Clustered variants
# ---------------------------------------------------------------------------


async def find_clustered_by_hashes(session: AsyncSession, hashes: Iterable[str]) -> list:
    hashes = list(set(hashes))
    if not hashes:
        return []
    rows = []
    for model in CLUSTERED_MODELS.values():
        result = await session.execute(sa.select(model).where(model.id.in_(hashes)))
        rows.extend(result.scalars().all())
    return rows


async def find_clustered_by_accession(session: AsyncSession, accession: int) -> list:
    rows = []
    for model in CLUSTERED_MODELS.values():
        result = await session.execute(
            sa.select(model).where(model.accession == accession).order_by(model.created_date, model.id)
        )
        rows.extend(result.scalars().all())
    return rows


async def find_latest_inactivation(
    session: AsyncSession, namespaces: NamespaceSelector, accession: int
):
    """Most recent MERGED or DEPRECATED record for an RS accession, if any."""
    model = namespaces.clustered_operation_model(accession)
    result = await session.execute(
        sa.select(model)
        .where(
            model.accession == accession,
            model.event_type.in_([EventType.MERGED.value, EventType.DEPRECATED.value]),
        )
        .order_by(model.id.desc())
        .limit(1)
    )
    return result.scalar_one_or_none()


async def insert_clustered_variants(
    session: AsyncSession,
    namespaces: NamespaceSelector,
    records: Sequence[ClusteredVariantRecord],
) -> list[str]:
    """Insert RS rows into the table of their accession's namespace.

    Hashes already stored in either table are skipped.

    Returns:
        Hashes actually inserted.
    """
    existing = {row.id for row in await find_clustered_by_hashes(session, [r.hash for r in records])}
    by_model: dict = {}
    seen: set[str] = set()
    for record in records:
        if record.hash in existing or record.hash in seen:
            continue
        seen.add(record.hash)
        by_model.setdefault(namespaces.clustered_model(record.accession), []).append(record.to_row_values())

    for model, values in by_model.items():
        await session.execute(sa.insert(model), values)
    return [h for h in (r.hash for r in records) if h in seen]


async def reassign_clustered_variants(
    session: AsyncSession,
    namespaces: NamespaceSelector,
    rows: Sequence,
    accession_to_be_merged: int,
    accession_to_keep: int,
) -> int:
    """Point the given RS rows at the surviving accession.

    Rows stay in their table when both accessions share a namespace.
    Otherwise they are moved to the surviving accession's table, so a
    table never holds an accession from the other namespace.  Only rows
    still carrying the merged accession are touched, which makes a re-run
    a no-op.

    Returns:
        Number of rows rewritten.
    """
    target_model = namespaces.clustered_model(accession_to_keep)
    rows_by_model: dict = {}
    for row in rows:
        rows_by_model.setdefault(type(row), []).append(row)

    rewritten = 0
    for model, model_rows in rows_by_model.items():
        ids = [row.id for row in model_rows]
        if model is target_model:
            result = await session.execute(
                sa.update(model)
                .where(model.id.in_(ids), model.accession == accession_to_be_merged)
                .values(accession=accession_to_keep)
                .execution_options(synchronize_session=False)
            )
            rewritten += result.rowcount
            continue

        already_there = set(
            (await session.execute(sa.select(target_model.id).where(target_model.id.in_(ids)))).scalars()
        )
        moved = [
            {**_column_values(row), "accession": accession_to_keep}
            for row in model_rows
            if row.id not in already_there
        ]
        if moved:
            await session.execute(sa.insert(target_model), moved)
        result = await session.execute(
            sa.delete(model)
            .where(model.id.in_(ids), model.accession == accession_to_be_merged)
            .execution_options(synchronize_session=False)
        )
        rewritten += result.rowcount
    return rewritten


# ---------------------------------------------------------------------------
# Submitted variants
# ---------------------------------------------------------------------------


async def find_submitted_by_clustered_accession(
    session: AsyncSession, accession: int, assembly_accession: str | None = None
) -> list:
    """SS rows of both namespaces currently clustered under ``accession``."""
    rows = []
    for model in SUBMITTED_MODELS.values():
        stmt = sa.select(model).where(model.clustered_variant_accession == accession)
        if assembly_accession is not None:
            stmt = stmt.where(model.assembly_accession == assembly_accession)
        result = await session.execute(stmt.order_by(model.accession, model.id))
        rows.extend(result.scalars().all())
    return rows


async def set_clustered_accessions(
    session: AsyncSession, namespace: Namespace, assignments: Sequence[tuple[str, int]]
) -> set[str]:
    """Give SS rows without an RS their first one.

    Rows that already carry an RS are left alone, so replaying a batch or
    racing another writer never overwrites an assignment.

    Returns:
        Ids of the rows actually updated.
    """
    if not assignments:
        return set()
    table = SUBMITTED_MODELS[namespace].__table__
    pending = set(
        (
            await session.execute(
                sa.select(table.c.id)
                .where(
                    table.c.id.in_([ss_id for ss_id, _ in assignments]),
                    table.c.clustered_variant_accession.is_(None),
                )
                .with_for_update()
            )
        ).scalars()
    )
    if not pending:
        return set()
    await session.execute(
        sa.update(table)
        .where(table.c.id == sa.bindparam("ss_id"), table.c.clustered_variant_accession.is_(None))
        .values(clustered_variant_accession=sa.bindparam("rs")),
        [{"ss_id": ss_id, "rs": rs} for ss_id, rs in assignments if ss_id in pending],
    )
    return pending


async def reassign_submitted_variants(
    session: AsyncSession,
    model,
    ids: Sequence[str],
    accession_to_be_merged: int,
    accession_to_keep: int,
) -> int:
    if not ids:
        return 0
    result = await session.execute(
        sa.update(model)
        .where(model.id.in_(list(ids)), model.clustered_variant_accession == accession_to_be_merged)
        .values(clustered_variant_accession=accession_to_keep)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount


# ---------------------------------------------------------------------------
# Operations
# ---------------------------------------------------------------------------


async def insert_operations(session: AsyncSession, model, operations: Sequence[dict]) -> None:
    if operations:
        await session.execute(sa.insert(model), list(operations))


async def upsert_split_candidate(
    session: AsyncSession, accession: int, reason: str, inactive_objects: list[dict]
) -> bool:
    """Create or refresh the RS split candidate record of an accession.

    Split candidates are kept with the EVA submitted variant operations.

    Returns:
        ``True`` if a new record was created, ``False`` if one was updated.
    """
    model = SUBMITTED_OPERATION_MODELS[Namespace.ACTIVE]
    result = await session.execute(
        sa.select(model).where(
            model.event_type == EventType.RS_SPLIT_CANDIDATE.value,
            model.accession == accession,
            model.reason == reason,
        )
    )
    existing = result.scalars().first()
    if existing is not None:
        existing.inactive_objects = list(inactive_objects)
        return False

    session.add(
        model(
            event_type=EventType.RS_SPLIT_CANDIDATE.value,
            accession=accession,
            merge_into=None,
            reason=reason,
            inactive_objects=list(inactive_objects),
        )
    )
    return True
