"""Content hashing of clustered and submitted variant identities.

A clustered identity is summarised as
``assembly_taxonomy_contig_start_TYPE`` and digested with SHA-1.  Two
identities denote the same RS exactly when their digests are equal, so
everything here must stay deterministic: no timestamps, no randomness,
no dependence on dict ordering.
"""

from __future__ import annotations

import enum
import hashlib
import re
from typing import TYPE_CHECKING

from variant_clustering.errors import UnsupportedVariantTypeError

if TYPE_CHECKING:
    from variant_clustering.clustering.variants import ClusteredIdentity, SubmittedVariantRecord

_BASES = re.compile(r"^[ACGTN]*$")
# dbSNP style named alleles, e.g. "(ALU)" or "(LARGEDELETION)", and VCF symbolic ones
_NAMED_ALLELE = re.compile(r"^(\(.+\)|<.+>)$")


class VariantType(str, enum.Enum):
    SNV = "SNV"
    MNV = "MNV"
    INS = "INS"
    DEL = "DEL"
    INDEL = "INDEL"
    SEQUENCE_ALTERATION = "SEQUENCE_ALTERATION"


def _normalise_allele(allele: str | None) -> str:
    allele = (allele or "").strip().upper()
    return "" if allele == "-" else allele


def classify_variant(reference: str | None, alternate: str | None) -> VariantType:
    """Classify a variant from its alleles.

    Raises:
        UnsupportedVariantTypeError: If both alleles are equal (no change)
            or either allele contains characters other than ``ACGTN``.
    """
    ref = _normalise_allele(reference)
    alt = _normalise_allele(alternate)

    if _NAMED_ALLELE.match(ref) or _NAMED_ALLELE.match(alt):
        return VariantType.SEQUENCE_ALTERATION
    if ref == alt or not _BASES.match(ref) or not _BASES.match(alt):
        raise UnsupportedVariantTypeError(reference or "", alternate or "")

    if len(ref) == 1 and len(alt) == 1:
        return VariantType.SNV
    if not ref:
        return VariantType.INS
    if not alt:
        return VariantType.DEL
    if len(ref) == len(alt):
        return VariantType.MNV
    return VariantType.INDEL


def sha1_digest(summary: str) -> str:
    """Upper-case hex SHA-1 of ``summary``."""
    return hashlib.sha1(summary.encode("utf-8")).hexdigest().upper()


def clustered_variant_summary(identity: ClusteredIdentity) -> str:
    return "_".join(
        [
            identity.assembly_accession,
            str(identity.taxonomy_accession),
            identity.contig,
            str(identity.start),
            VariantType(identity.type).value,
        ]
    )


def clustered_variant_hash(identity: ClusteredIdentity) -> str:
    return sha1_digest(clustered_variant_summary(identity))


def submitted_variant_hash(variant: SubmittedVariantRecord) -> str:
    """Hash of a submitted identity, used as the stored row id."""
    summary = "_".join(
        [
            variant.assembly_accession,
            str(variant.taxonomy_accession),
            variant.project_accession,
            variant.contig,
            str(variant.start),
            _normalise_allele(variant.reference_allele),
            _normalise_allele(variant.alternate_allele),
        ]
    )
    return sha1_digest(summary)
