"""Multimap policy.

An RS whose accession maps to more than one place in the same assembly
(map weight of 2 or more) may be a low quality variant.  Such RS never
take part in merges and never receive new submitted variants; the
affected SS simply stay unclustered for now.

The weight is the only criterion used.  Counting loci per accession
would also work in principle but needs the merged and deprecated history
as well, which is both slower and less reliable.
"""

from __future__ import annotations

from collections.abc import Iterable


def _weight_is_multimap(map_weight: int | None) -> bool:
    return map_weight is not None and map_weight > 1


def is_multimap(variants) -> bool:
    """True if any of ``variants`` (or the single variant given) is multimap.

    Anything exposing a ``map_weight`` attribute is accepted: ORM rows,
    :class:`ClusteredVariantRecord`, or an iterable of either.
    """
    if isinstance(variants, Iterable):
        return any(_weight_is_multimap(v.map_weight) for v in variants)
    return _weight_is_multimap(variants.map_weight)
