"""Legacy (dbSNP) vs active (EVA) accession namespaces.

Both namespaces form one identity space but live in separate tables.
Which table an accession belongs to is a pure threshold comparison, and
the selector below is what every store call uses to pick its table.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass

from variant_clustering.models import (
    ClusteredVariant,
    ClusteredVariantOperation,
    DbsnpClusteredVariant,
    DbsnpClusteredVariantOperation,
    DbsnpSubmittedVariant,
    DbsnpSubmittedVariantOperation,
    SubmittedVariant,
    SubmittedVariantOperation,
)


class Namespace(str, enum.Enum):
    LEGACY = "dbsnp"
    ACTIVE = "eva"


SUBMITTED_MODELS = {
    Namespace.LEGACY: DbsnpSubmittedVariant,
    Namespace.ACTIVE: SubmittedVariant,
}
SUBMITTED_OPERATION_MODELS = {
    Namespace.LEGACY: DbsnpSubmittedVariantOperation,
    Namespace.ACTIVE: SubmittedVariantOperation,
}
CLUSTERED_MODELS = {
    Namespace.LEGACY: DbsnpClusteredVariant,
    Namespace.ACTIVE: ClusteredVariant,
}
CLUSTERED_OPERATION_MODELS = {
    Namespace.LEGACY: DbsnpClusteredVariantOperation,
    Namespace.ACTIVE: ClusteredVariantOperation,
}


def namespace_of(accession: int, threshold: int) -> Namespace:
    return Namespace.ACTIVE if accession >= threshold else Namespace.LEGACY


@dataclass(frozen=True)
class NamespaceSelector:
    """Thresholds separating imported accessions from locally issued ones.

    Attributes:
        submitted_threshold: First SS accession issued by this archive.
        clustered_threshold: First RS accession issued by this archive.
    """

    submitted_threshold: int
    clustered_threshold: int

    @classmethod
    def from_settings(cls, settings) -> NamespaceSelector:
        return cls(
            submitted_threshold=settings.accessioning_monotonic_init_ss,
            clustered_threshold=settings.accessioning_monotonic_init_rs,
        )

    def of_submitted(self, accession: int) -> Namespace:
        return namespace_of(accession, self.submitted_threshold)

    def of_clustered(self, accession: int) -> Namespace:
        return namespace_of(accession, self.clustered_threshold)

    def submitted_model(self, accession: int):
        return SUBMITTED_MODELS[self.of_submitted(accession)]

    def clustered_model(self, accession: int):
        return CLUSTERED_MODELS[self.of_clustered(accession)]

    def clustered_operation_model(self, accession: int):
        return CLUSTERED_OPERATION_MODELS[self.of_clustered(accession)]
