"""Monotonic accession counter, one row per accession category."""

from __future__ import annotations

from datetime import datetime

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column

from variant_clustering.models.base import Base


class AccessionCounter(Base):
    __tablename__ = "accession_counters"

    category_id: Mapped[str] = mapped_column(sa.String, primary_key=True)
    last_committed: Mapped[int] = mapped_column(sa.BigInteger)
    updated_at: Mapped[datetime] = mapped_column(
        sa.DateTime, server_default=sa.text("CURRENT_TIMESTAMP"), onupdate=sa.func.current_timestamp()
    )
