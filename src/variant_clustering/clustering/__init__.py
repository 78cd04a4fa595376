"""RS clustering: identity hashing, merge/split policies and the batch writer.

The writer itself lives in :mod:`variant_clustering.clustering.writer`.
"""

from .hashing import VariantType, classify_variant, clustered_variant_hash
from .multimap import is_multimap
from .priority import Priority, prioritise
from .variants import ClusteredIdentity, ClusteredVariantRecord, SubmittedVariantRecord

__all__ = [
    "classify_variant",
    "clustered_variant_hash",
    "ClusteredIdentity",
    "ClusteredVariantRecord",
    "is_multimap",
    "prioritise",
    "Priority",
    "SubmittedVariantRecord",
    "VariantType",
]
