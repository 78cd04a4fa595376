"""Client side of the RS accession store: hash -> accession resolution."""

from .generator import MonotonicAccessionGenerator
from .service import ClusteredVariantAccessioningService, GetOrCreateResult

__all__ = [
    "ClusteredVariantAccessioningService",
    "GetOrCreateResult",
    "MonotonicAccessionGenerator",
]
