"""Builders for audit records (operation rows) and their snapshots.

Snapshots are plain JSON-compatible dicts copied at capture time.  An
operation built from a row keeps describing the row as it was, even if
the ORM instance is modified later in the same session.
"""

from __future__ import annotations

import enum
from dataclasses import asdict
from datetime import datetime

from variant_clustering.models import EventType


def _json_value(value):
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, enum.Enum):
        return value.value
    return value


def snapshot_row(row) -> dict:
    """Copy every column of an ORM row into a JSON-compatible dict."""
    return {column.key: _json_value(getattr(row, column.key)) for column in row.__table__.columns}


def snapshot_record(record) -> dict:
    """Copy a dataclass value object into a JSON-compatible dict."""
    return {key: _json_value(value) for key, value in asdict(record).items()}


def merge_reason(accession_merged: int, accession_kept: int) -> str:
    return f"Original rs{accession_merged} was merged into rs{accession_kept}."


def clustering_reason(submitted_accession: int, clustered_accession: int) -> str:
    return f"Clustering submitted variant {submitted_accession} with rs{clustered_accession}"


def split_candidate_reason(clustered_accession: int) -> str:
    return f"Hash mismatch with {clustered_accession}"


def build_operation(
    event_type: EventType,
    accession: int,
    merge_into: int | None,
    reason: str,
    inactive_objects: list[dict],
) -> dict:
    return {
        "event_type": event_type.value,
        "accession": accession,
        "merge_into": merge_into,
        "reason": reason,
        "inactive_objects": list(inactive_objects),
    }


def clustered_merge_operation(row, accession_to_keep: int) -> dict:
    """MERGED record for one RS row about to be rewritten."""
    return build_operation(
        EventType.MERGED,
        accession=row.accession,
        merge_into=accession_to_keep,
        reason=merge_reason(row.accession, accession_to_keep),
        inactive_objects=[snapshot_row(row)],
    )


def submitted_update_operation(snapshot: dict, reason: str) -> dict:
    """UPDATED record for one SS whose RS changes.

    The destination is always empty: the SS is not merged into anything,
    only one of its fields changes.
    """
    return build_operation(
        EventType.UPDATED,
        accession=snapshot["accession"],
        merge_into=None,
        reason=reason,
        inactive_objects=[snapshot],
    )
