"""Submitted variant (SS) tables, one per accession namespace."""

from __future__ import annotations

from datetime import datetime

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column

from variant_clustering.models.base import Base


class SubmittedVariantMixin:
    """Columns shared by the EVA and dbSNP submitted variant tables.

    ``id`` is the SHA-1 of the submitted identity summary, so the same
    submission can never be stored twice in one table.
    """

    id: Mapped[str] = mapped_column(sa.String(40), primary_key=True)
    accession: Mapped[int] = mapped_column(sa.BigInteger, index=True)

    assembly_accession: Mapped[str] = mapped_column(sa.String, index=True)
    taxonomy_accession: Mapped[int] = mapped_column(sa.Integer)
    project_accession: Mapped[str] = mapped_column(sa.String)
    contig: Mapped[str] = mapped_column(sa.String)
    start: Mapped[int] = mapped_column(sa.BigInteger)
    reference_allele: Mapped[str] = mapped_column(sa.String)
    alternate_allele: Mapped[str] = mapped_column(sa.String)

    # The only column the clustering job ever rewrites
    clustered_variant_accession: Mapped[int | None] = mapped_column(sa.BigInteger, nullable=True, index=True)

    remapped_from: Mapped[str | None] = mapped_column(sa.String, nullable=True)
    validated: Mapped[bool] = mapped_column(sa.Boolean, default=False)
    created_date: Mapped[datetime] = mapped_column(sa.DateTime, server_default=sa.text("CURRENT_TIMESTAMP"))


class SubmittedVariant(SubmittedVariantMixin, Base):
    __tablename__ = "submitted_variants"


class DbsnpSubmittedVariant(SubmittedVariantMixin, Base):
    __tablename__ = "dbsnp_submitted_variants"
