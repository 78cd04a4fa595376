"""Clustered variant (RS) tables, one per accession namespace."""

from __future__ import annotations

from datetime import datetime

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column

from variant_clustering.models.base import Base


class ClusteredVariantMixin:
    """Columns shared by the EVA and dbSNP clustered variant tables.

    ``id`` is the clustered identity hash.  ``accession`` is deliberately
    not unique: an RS that maps to several loci has one row per locus.
    """

    id: Mapped[str] = mapped_column(sa.String(40), primary_key=True)
    accession: Mapped[int] = mapped_column(sa.BigInteger, index=True)

    assembly_accession: Mapped[str] = mapped_column(sa.String, index=True)
    taxonomy_accession: Mapped[int] = mapped_column(sa.Integer)
    contig: Mapped[str] = mapped_column(sa.String)
    start: Mapped[int] = mapped_column(sa.BigInteger)
    type: Mapped[str] = mapped_column(sa.String)

    validated: Mapped[bool] = mapped_column(sa.Boolean, default=False)
    # Set by the mapping pipeline; number of loci the accession maps to
    map_weight: Mapped[int | None] = mapped_column(sa.Integer, nullable=True)
    created_date: Mapped[datetime] = mapped_column(sa.DateTime, server_default=sa.text("CURRENT_TIMESTAMP"))


class ClusteredVariant(ClusteredVariantMixin, Base):
    __tablename__ = "clustered_variants"


class DbsnpClusteredVariant(ClusteredVariantMixin, Base):
    __tablename__ = "dbsnp_clustered_variants"
