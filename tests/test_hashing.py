"""Tests for identity hashing and variant classification."""

from __future__ import annotations

import pytest

from variant_clustering.clustering import (
    ClusteredIdentity,
    SubmittedVariantRecord,
    VariantType,
    classify_variant,
    clustered_variant_hash,
)
from variant_clustering.clustering.hashing import clustered_variant_summary
from variant_clustering.errors import ClusteringError, UnsupportedVariantTypeError


def _make_identity(**overrides) -> ClusteredIdentity:
    fields = {
        "assembly_accession": "GCA_000001405.15",
        "taxonomy_accession": 9606,
        "contig": "chr1",
        "start": 1000,
        "type": VariantType.SNV,
    }
    fields.update(overrides)
    return ClusteredIdentity(**fields)


def _make_submitted(**overrides) -> SubmittedVariantRecord:
    fields = {
        "accession": 500,
        "assembly_accession": "GCA_000001405.15",
        "taxonomy_accession": 9606,
        "project_accession": "PRJEB1",
        "contig": "chr1",
        "start": 1000,
        "reference_allele": "A",
        "alternate_allele": "T",
    }
    fields.update(overrides)
    return SubmittedVariantRecord(**fields)


# ---------------------------------------------------------------------------
# Clustered identity hash
# ---------------------------------------------------------------------------


class TestClusteredVariantHash:
    def test_summary_format(self):
        assert clustered_variant_summary(_make_identity()) == "GCA_000001405.15_9606_chr1_1000_SNV"

    def test_known_digest(self):
        """Upper-case hex SHA-1 of the summary."""
        assert clustered_variant_hash(_make_identity()) == "5673F347EFABE05C7DEC5562CA4BA76EA290F8EA"

    def test_hash_is_stable_across_calls_and_instances(self):
        assert clustered_variant_hash(_make_identity()) == clustered_variant_hash(_make_identity())
        assert _make_identity().hash == _make_identity().hash

    @pytest.mark.parametrize(
        "field,value",
        [
            ("assembly_accession", "GCA_000001405.28"),
            ("taxonomy_accession", 10090),
            ("contig", "chr2"),
            ("start", 1001),
            ("type", VariantType.INS),
        ],
    )
    def test_every_identity_field_changes_the_hash(self, field, value):
        assert _make_identity(**{field: value}).hash != _make_identity().hash

    def test_alleles_do_not_matter_only_type(self):
        """A>T and A>G at the same position are the same RS."""
        first = _make_submitted(alternate_allele="T")
        second = _make_submitted(alternate_allele="G", project_accession="PRJEB2")
        assert first.clustered_hash() == second.clustered_hash()


# ---------------------------------------------------------------------------
# Variant classification
# ---------------------------------------------------------------------------


class TestClassifyVariant:
    @pytest.mark.parametrize(
        "reference,alternate,expected",
        [
            ("A", "T", VariantType.SNV),
            ("a", "g", VariantType.SNV),
            ("AC", "GT", VariantType.MNV),
            ("", "T", VariantType.INS),
            ("-", "TT", VariantType.INS),
            ("A", "", VariantType.DEL),
            ("AT", "-", VariantType.DEL),
            ("AT", "GCC", VariantType.INDEL),
            ("A", "(ALU)", VariantType.SEQUENCE_ALTERATION),
            ("N", "<DEL>", VariantType.SEQUENCE_ALTERATION),
        ],
    )
    def test_classification(self, reference, alternate, expected):
        assert classify_variant(reference, alternate) == expected

    def test_identical_alleles_rejected(self):
        with pytest.raises(UnsupportedVariantTypeError):
            classify_variant("A", "A")

    def test_unknown_characters_rejected(self):
        with pytest.raises(UnsupportedVariantTypeError) as exc_info:
            classify_variant("A", "X")
        assert exc_info.value.alternate == "X"

    def test_error_is_a_clustering_error_and_value_error(self):
        with pytest.raises(ClusteringError):
            classify_variant("", "")
        with pytest.raises(ValueError):
            classify_variant("", "")


# ---------------------------------------------------------------------------
# Submitted variant id
# ---------------------------------------------------------------------------


class TestSubmittedVariantId:
    def test_id_is_derived_from_identity(self):
        assert _make_submitted().id == _make_submitted(accession=501, clustered_variant_accession=306).id

    def test_project_distinguishes_submissions(self):
        assert _make_submitted().id != _make_submitted(project_accession="PRJEB2").id

    def test_explicit_id_is_kept(self):
        assert _make_submitted(id="custom").id == "custom"

    def test_flags(self):
        sv = _make_submitted(clustered_variant_accession=306, remapped_from="GCA_000001405.1")
        assert sv.is_clustered
        assert sv.is_remapped
        assert not _make_submitted(remapped_from="  ").is_remapped
        assert not _make_submitted().is_clustered
