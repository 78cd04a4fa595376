"""Value objects handed to and produced by the clustering engine.

The engine never works on ORM instances directly: rows are converted to
these records when read, so a record stays what it was when it was read
regardless of what later writes do to the database row.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from variant_clustering.clustering.hashing import (
    VariantType,
    classify_variant,
    clustered_variant_hash,
    submitted_variant_hash,
)


@dataclass(frozen=True)
class ClusteredIdentity:
    """The fields that define an RS.  Equal identities hash equally."""

    assembly_accession: str
    taxonomy_accession: int
    contig: str
    start: int
    type: VariantType

    @property
    def hash(self) -> str:
        return clustered_variant_hash(self)


@dataclass
class SubmittedVariantRecord:
    """A submitted variant (SS) as read from the store or a parser.

    ``id`` defaults to the hash of the submitted identity, which is how
    rows are keyed in the submitted variant tables.
    """

    accession: int
    assembly_accession: str
    taxonomy_accession: int
    project_accession: str
    contig: str
    start: int
    reference_allele: str
    alternate_allele: str
    clustered_variant_accession: int | None = None
    remapped_from: str | None = None
    validated: bool = False
    created_date: datetime | None = None
    id: str = ""

    def __post_init__(self) -> None:
        if not self.id:
            self.id = submitted_variant_hash(self)

    @property
    def is_clustered(self) -> bool:
        return self.clustered_variant_accession is not None

    @property
    def is_remapped(self) -> bool:
        return bool(self.remapped_from and self.remapped_from.strip())

    def clustered_identity(self) -> ClusteredIdentity:
        """Build the RS identity of this submission.

        Raises:
            UnsupportedVariantTypeError: If the alleles cannot be classified.
        """
        return ClusteredIdentity(
            assembly_accession=self.assembly_accession,
            taxonomy_accession=self.taxonomy_accession,
            contig=self.contig,
            start=self.start,
            type=classify_variant(self.reference_allele, self.alternate_allele),
        )

    def clustered_hash(self) -> str:
        return self.clustered_identity().hash

    @classmethod
    def from_row(cls, row) -> SubmittedVariantRecord:
        return cls(
            id=row.id,
            accession=row.accession,
            assembly_accession=row.assembly_accession,
            taxonomy_accession=row.taxonomy_accession,
            project_accession=row.project_accession,
            contig=row.contig,
            start=row.start,
            reference_allele=row.reference_allele,
            alternate_allele=row.alternate_allele,
            clustered_variant_accession=row.clustered_variant_accession,
            remapped_from=row.remapped_from,
            validated=bool(row.validated),
            created_date=row.created_date,
        )


@dataclass
class ClusteredVariantRecord:
    """A stored RS locus: one row of a clustered variant table."""

    hash: str
    accession: int
    assembly_accession: str
    taxonomy_accession: int
    contig: str
    start: int
    type: VariantType
    validated: bool = False
    map_weight: int | None = None
    created_date: datetime | None = field(default=None, compare=False)

    @property
    def identity(self) -> ClusteredIdentity:
        return ClusteredIdentity(
            assembly_accession=self.assembly_accession,
            taxonomy_accession=self.taxonomy_accession,
            contig=self.contig,
            start=self.start,
            type=self.type,
        )

    @classmethod
    def from_identity(
        cls, identity: ClusteredIdentity, accession: int, validated: bool = False
    ) -> ClusteredVariantRecord:
        return cls(
            hash=identity.hash,
            accession=accession,
            assembly_accession=identity.assembly_accession,
            taxonomy_accession=identity.taxonomy_accession,
            contig=identity.contig,
            start=identity.start,
            type=identity.type,
            validated=validated,
        )

    @classmethod
    def from_row(cls, row) -> ClusteredVariantRecord:
        return cls(
            hash=row.id,
            accession=row.accession,
            assembly_accession=row.assembly_accession,
            taxonomy_accession=row.taxonomy_accession,
            contig=row.contig,
            start=row.start,
            type=VariantType(row.type),
            validated=bool(row.validated),
            map_weight=row.map_weight,
            created_date=row.created_date,
        )

    def to_row_values(self) -> dict:
        """Column values for inserting this record into a clustered table."""
        values = {
            "id": self.hash,
            "accession": self.accession,
            "assembly_accession": self.assembly_accession,
            "taxonomy_accession": self.taxonomy_accession,
            "contig": self.contig,
            "start": self.start,
            "type": VariantType(self.type).value,
            "validated": self.validated,
            "map_weight": self.map_weight,
        }
        if self.created_date is not None:
            values["created_date"] = self.created_date
        return values
