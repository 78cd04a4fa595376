"""Exception hierarchy for accessioning and clustering.

Lookup errors carry the accession they were raised for, because callers
that tolerate them (split detection) log and skip that accession only.
"""

from __future__ import annotations


class ClusteringError(Exception):
    """Base class for every error raised by this package."""


class AccessionCouldNotBeGeneratedError(ClusteringError):
    """New accessions could not be reserved.  The whole batch must fail."""


class AccessionLookupError(ClusteringError):
    def __init__(self, accession: int, message: str | None = None) -> None:
        self.accession = accession
        super().__init__(message or f"rs{accession}")


class AccessionDoesNotExistError(AccessionLookupError):
    def __init__(self, accession: int) -> None:
        super().__init__(accession, f"Accession rs{accession} does not exist")


class AccessionMergedError(AccessionLookupError):
    def __init__(self, accession: int, destination: int | None) -> None:
        self.destination = destination
        super().__init__(accession, f"Accession rs{accession} was merged into rs{destination}")


class AccessionDeprecatedError(AccessionLookupError):
    def __init__(self, accession: int) -> None:
        super().__init__(accession, f"Accession rs{accession} is deprecated")


class UnsupportedVariantTypeError(ClusteringError, ValueError):
    """The alleles of a submitted variant cannot be classified."""

    def __init__(self, reference: str, alternate: str) -> None:
        self.reference = reference
        self.alternate = alternate
        super().__init__(f"Cannot classify variant with reference {reference!r} and alternate {alternate!r}")
