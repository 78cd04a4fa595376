"""Counters reported at the end of a clustering run."""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields


@dataclass
class ClusteringCounts:
    """Running totals of every state transition made by the engine.

    Attributes:
        clustered_variants_created: New RS accessions minted.
        clustered_variants_loci_created: New loci of existing RS, added when
            remapped SS land somewhere their RS has no row yet.
        clustered_variants_updated: RS rows rewritten to a surviving accession.
        clustered_variants_merge_operations_written: MERGED audit records.
        clustered_variants_rs_split: SS snapshotted into newly created split
            candidates.
        submitted_variants_clustered: SS that received their first RS.
        submitted_variants_updated_rs: SS moved to a surviving RS by a merge.
        submitted_variants_update_operations_written: UPDATED audit records.
        submitted_variants_kept_unclustered: SS left without RS (no
            eligible candidate, e.g. a multimap RS).
        rs_merge_candidates_flagged: Remapped SS whose locus already
            belongs to a different RS; left for manual review.
    """

    clustered_variants_created: int = 0
    clustered_variants_loci_created: int = 0
    clustered_variants_updated: int = 0
    clustered_variants_merge_operations_written: int = 0
    clustered_variants_rs_split: int = 0
    submitted_variants_clustered: int = 0
    submitted_variants_updated_rs: int = 0
    submitted_variants_update_operations_written: int = 0
    submitted_variants_kept_unclustered: int = 0
    rs_merge_candidates_flagged: int = 0

    def clear(self) -> None:
        for f in fields(self):
            setattr(self, f.name, 0)

    def as_dict(self) -> dict[str, int]:
        return asdict(self)
