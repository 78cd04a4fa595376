"""Which of two colliding RS accessions survives a merge.

The numerically smaller accession is kept.  dbSNP accessions are all
below the first locally issued one, so an imported RS always wins over a
local one, and among accessions of the same namespace the older wins.
This order must not change: existing merges were settled with it.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Priority:
    accession_to_keep: int
    accession_to_be_merged: int


def prioritise(accession_a: int, accession_b: int) -> Priority:
    if accession_a == accession_b:
        raise ValueError(f"Cannot merge rs{accession_a} into itself")
    return Priority(
        accession_to_keep=min(accession_a, accession_b),
        accession_to_be_merged=max(accession_a, accession_b),
    )
