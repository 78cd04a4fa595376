"""Tests for the chunked reader, the clustering run and the CLI."""

from __future__ import annotations

import json
import subprocess
import sys
from dataclasses import asdict
from pathlib import Path
from unittest.mock import patch

from sqlalchemy import select

from variant_clustering.cli.__main__ import run_lookup
from variant_clustering.clustering import SubmittedVariantRecord
from variant_clustering.config.settings import Settings
from variant_clustering.models import DbsnpClusteredVariant, DbsnpSubmittedVariant, SubmittedVariant
from variant_clustering.worker.reader import iter_submitted_batches
from variant_clustering.worker.runner import run_clustering

ASM = "GCA_000001405.2"


def _make_sv(accession: int, start: int, assembly: str = ASM, rs: int | None = None) -> SubmittedVariantRecord:
    return SubmittedVariantRecord(
        accession=accession,
        assembly_accession=assembly,
        taxonomy_accession=9606,
        project_accession="PRJEB1",
        contig="chr1",
        start=start,
        reference_allele="C",
        alternate_allele="G",
        clustered_variant_accession=rs,
    )


async def _store_submitted(session_factory, *records: SubmittedVariantRecord) -> None:
    async with session_factory() as session, session.begin():
        for record in records:
            values = asdict(record)
            values.pop("created_date")
            model = DbsnpSubmittedVariant if record.accession < 5000 else SubmittedVariant
            session.add(model(**values))


def _settings(**overrides) -> Settings:
    values = {
        "accessioning_monotonic_init_ss": 5000,
        "accessioning_monotonic_init_rs": 3000,
        "chunk_size": 2,
    }
    values.update(overrides)
    return Settings(**values)


# ---------------------------------------------------------------------------
# Reader
# ---------------------------------------------------------------------------


async def test_reader_pages_both_tables(test_session_factory):
    await _store_submitted(
        test_session_factory,
        _make_sv(1, 100),
        _make_sv(2, 200),
        _make_sv(3, 300),
        _make_sv(5001, 400),
        _make_sv(5002, 500),
        _make_sv(4, 600, assembly="GCA_000001405.1"),
    )

    batches = [batch async for batch in iter_submitted_batches(test_session_factory, ASM, chunk_size=2)]

    assert [len(batch) for batch in batches] == [2, 1, 2]
    accessions = sorted(sv.accession for batch in batches for sv in batch)
    assert accessions == [1, 2, 3, 5001, 5002]


async def test_reader_only_unclustered(test_session_factory):
    await _store_submitted(test_session_factory, _make_sv(1, 100), _make_sv(2, 200, rs=306))

    batches = [
        batch
        async for batch in iter_submitted_batches(test_session_factory, ASM, chunk_size=10, only_unclustered=True)
    ]

    assert [[sv.accession for sv in batch] for batch in batches] == [[1]]


async def test_reader_empty_assembly(test_session_factory):
    assert [batch async for batch in iter_submitted_batches(test_session_factory, ASM, chunk_size=10)] == []


# ---------------------------------------------------------------------------
# Runner
# ---------------------------------------------------------------------------


async def test_run_clustering_clusters_whole_assembly(test_session_factory):
    await _store_submitted(
        test_session_factory,
        _make_sv(1, 100),
        _make_sv(2, 200),
        _make_sv(3, 300),
        _make_sv(5001, 300),
    )

    counts = await run_clustering(test_session_factory, _settings(), ASM)

    assert counts.clustered_variants_created == 3
    assert counts.submitted_variants_clustered == 4
    assert counts.submitted_variants_update_operations_written == 4

    async with test_session_factory() as session:
        legacy = (await session.execute(select(DbsnpSubmittedVariant))).scalars().all()
        active = (await session.execute(select(SubmittedVariant))).scalars().all()
    by_accession = {row.accession: row.clustered_variant_accession for row in [*legacy, *active]}
    # Same locus, same RS, even across batches and namespaces
    assert by_accession[3] == by_accession[5001]
    assert all(rs is not None and rs >= 3000 for rs in by_accession.values())


async def test_run_clustering_twice_creates_nothing_new(test_session_factory):
    await _store_submitted(test_session_factory, _make_sv(1, 100), _make_sv(2, 200))

    await run_clustering(test_session_factory, _settings(), ASM)
    counts = await run_clustering(test_session_factory, _settings(), ASM, only_unclustered=True)

    assert set(counts.as_dict().values()) == {0}


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------


async def test_lookup_prints_loci(test_session_factory, capsys):
    async with test_session_factory() as session, session.begin():
        session.add(
            DbsnpClusteredVariant(
                id="A" * 40,
                accession=306,
                assembly_accession=ASM,
                taxonomy_accession=9606,
                contig="chr1",
                start=100,
                type="SNV",
                validated=True,
            )
        )

    with patch("variant_clustering.cli.__main__.get_session_factory", return_value=test_session_factory):
        exit_code = await run_lookup(306)

    assert exit_code == 0
    (locus,) = json.loads(capsys.readouterr().out)
    assert locus["accession"] == 306
    assert locus["hash"] == "A" * 40


async def test_lookup_unknown_accession(test_session_factory, capsys):
    with patch("variant_clustering.cli.__main__.get_session_factory", return_value=test_session_factory):
        exit_code = await run_lookup(99)

    assert exit_code == 1
    assert "does not exist" in capsys.readouterr().out


def test_cli_help_does_not_error():
    result = subprocess.run(
        [sys.executable, "-m", "variant_clustering.cli", "--help"],
        capture_output=True,
        text=True,
        cwd=str(Path(__file__).resolve().parents[1]),
    )
    assert result.returncode == 0
    assert "Variant clustering CLI" in result.stdout


def test_cli_cluster_help_shows_flags():
    result = subprocess.run(
        [sys.executable, "-m", "variant_clustering.cli", "cluster", "--help"],
        capture_output=True,
        text=True,
        cwd=str(Path(__file__).resolve().parents[1]),
    )
    assert result.returncode == 0
    assert "--assembly" in result.stdout
    assert "--no-split-detection" in result.stdout
