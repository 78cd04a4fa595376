"""Tests for the multimap, merge priority and namespace policies."""

from __future__ import annotations

import pytest

from variant_clustering.clustering import (
    ClusteredVariantRecord,
    VariantType,
    is_multimap,
    prioritise,
)
from variant_clustering.clustering.counts import ClusteringCounts
from variant_clustering.clustering.namespaces import Namespace, NamespaceSelector, namespace_of
from variant_clustering.config.settings import Settings
from variant_clustering.models import ClusteredVariant, DbsnpClusteredVariant, DbsnpSubmittedVariant


def _make_clustered(accession: int = 306, map_weight: int | None = None) -> ClusteredVariantRecord:
    return ClusteredVariantRecord(
        hash=f"H{accession}",
        accession=accession,
        assembly_accession="GCA_1",
        taxonomy_accession=9606,
        contig="chr1",
        start=1000,
        type=VariantType.SNV,
        map_weight=map_weight,
    )


# ---------------------------------------------------------------------------
# Multimap
# ---------------------------------------------------------------------------


class TestMultimap:
    @pytest.mark.parametrize("weight,expected", [(None, False), (1, False), (2, True), (7, True)])
    def test_single_variant(self, weight, expected):
        assert is_multimap(_make_clustered(map_weight=weight)) is expected

    def test_any_multimap_in_collection(self):
        variants = [_make_clustered(1), _make_clustered(2, map_weight=3)]
        assert is_multimap(variants)

    def test_empty_collection_is_not_multimap(self):
        assert not is_multimap([])


# ---------------------------------------------------------------------------
# Merge priority
# ---------------------------------------------------------------------------


class TestPriority:
    def test_smaller_accession_is_kept(self):
        priority = prioritise(3001, 306)
        assert priority.accession_to_keep == 306
        assert priority.accession_to_be_merged == 3001

    @pytest.mark.parametrize("a,b", [(1, 2), (306, 3000), (3000, 3001), (5, 4_000_000_000)])
    def test_order_of_arguments_does_not_matter(self, a, b):
        assert prioritise(a, b) == prioritise(b, a)

    def test_same_accession_rejected(self):
        with pytest.raises(ValueError):
            prioritise(306, 306)


# ---------------------------------------------------------------------------
# Namespaces
# ---------------------------------------------------------------------------


class TestNamespaces:
    def test_threshold_is_active(self):
        assert namespace_of(2999, 3000) == Namespace.LEGACY
        assert namespace_of(3000, 3000) == Namespace.ACTIVE

    def test_selector_uses_separate_thresholds(self):
        selector = NamespaceSelector(submitted_threshold=5000, clustered_threshold=3000)
        assert selector.of_submitted(4000) == Namespace.LEGACY
        assert selector.of_clustered(4000) == Namespace.ACTIVE
        assert selector.submitted_model(4000) is DbsnpSubmittedVariant
        assert selector.clustered_model(306) is DbsnpClusteredVariant
        assert selector.clustered_model(3000) is ClusteredVariant

    def test_from_settings(self):
        settings = Settings(accessioning_monotonic_init_ss=10, accessioning_monotonic_init_rs=20)
        selector = NamespaceSelector.from_settings(settings)
        assert selector == NamespaceSelector(submitted_threshold=10, clustered_threshold=20)


# ---------------------------------------------------------------------------
# Settings and counters
# ---------------------------------------------------------------------------


class TestSettings:
    def test_env_prefix(self, monkeypatch):
        monkeypatch.setenv("VARIANT_CLUSTERING_CHUNK_SIZE", "250")
        monkeypatch.setenv("VARIANT_CLUSTERING_DETECT_RS_SPLITS", "false")
        settings = Settings()
        assert settings.chunk_size == 250
        assert settings.detect_rs_splits is False

    def test_non_positive_values_rejected(self):
        with pytest.raises(ValueError):
            Settings(chunk_size=0)


def test_counts_clear():
    counts = ClusteringCounts(clustered_variants_created=3, submitted_variants_clustered=2)
    assert counts.as_dict()["clustered_variants_created"] == 3
    counts.clear()
    assert set(counts.as_dict().values()) == {0}
