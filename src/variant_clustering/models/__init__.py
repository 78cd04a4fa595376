from variant_clustering.models.accession_counter import AccessionCounter
from variant_clustering.models.base import Base
from variant_clustering.models.clustered_variant import ClusteredVariant, DbsnpClusteredVariant
from variant_clustering.models.operation import (
    ClusteredVariantOperation,
    DbsnpClusteredVariantOperation,
    DbsnpSubmittedVariantOperation,
    EventType,
    SubmittedVariantOperation,
)
from variant_clustering.models.submitted_variant import DbsnpSubmittedVariant, SubmittedVariant

__all__ = [
    "AccessionCounter",
    "Base",
    "ClusteredVariant",
    "ClusteredVariantOperation",
    "DbsnpClusteredVariant",
    "DbsnpClusteredVariantOperation",
    "DbsnpSubmittedVariant",
    "DbsnpSubmittedVariantOperation",
    "EventType",
    "SubmittedVariant",
    "SubmittedVariantOperation",
]
