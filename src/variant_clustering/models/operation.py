"""Audit trail tables for submitted and clustered variants.

Rows are append-only.  The single exception is the RS split candidate
record, which is upserted per (event type, accession, reason) so later
batches refresh its snapshot list instead of piling up duplicates.
"""

from __future__ import annotations

import enum
from datetime import datetime

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column

from variant_clustering.models.base import Base


class EventType(str, enum.Enum):
    MERGED = "MERGED"
    UPDATED = "UPDATED"
    DEPRECATED = "DEPRECATED"
    RS_SPLIT_CANDIDATE = "RS_SPLIT_CANDIDATE"


_VALID_EVENT_TYPES = ", ".join(f"'{e.value}'" for e in EventType)


class OperationMixin:
    id: Mapped[int] = mapped_column(sa.Integer, primary_key=True, autoincrement=True)
    event_type: Mapped[str] = mapped_column(sa.String)
    accession: Mapped[int] = mapped_column(sa.BigInteger, index=True)
    merge_into: Mapped[int | None] = mapped_column(sa.BigInteger, nullable=True)
    reason: Mapped[str] = mapped_column(sa.Text)
    # Snapshots of the affected rows, taken before the change
    inactive_objects: Mapped[list] = mapped_column(sa.JSON, default=list)
    created_date: Mapped[datetime] = mapped_column(sa.DateTime, server_default=sa.text("CURRENT_TIMESTAMP"))


class SubmittedVariantOperation(OperationMixin, Base):
    __tablename__ = "submitted_variant_operations"
    __table_args__ = (
        sa.CheckConstraint(f"event_type IN ({_VALID_EVENT_TYPES})", name="valid_submitted_event_type"),
    )


class DbsnpSubmittedVariantOperation(OperationMixin, Base):
    __tablename__ = "dbsnp_submitted_variant_operations"
    __table_args__ = (
        sa.CheckConstraint(f"event_type IN ({_VALID_EVENT_TYPES})", name="valid_dbsnp_submitted_event_type"),
    )


class ClusteredVariantOperation(OperationMixin, Base):
    __tablename__ = "clustered_variant_operations"
    __table_args__ = (
        sa.CheckConstraint(f"event_type IN ({_VALID_EVENT_TYPES})", name="valid_clustered_event_type"),
    )


class DbsnpClusteredVariantOperation(OperationMixin, Base):
    __tablename__ = "dbsnp_clustered_variant_operations"
    __table_args__ = (
        sa.CheckConstraint(f"event_type IN ({_VALID_EVENT_TYPES})", name="valid_dbsnp_clustered_event_type"),
    )
