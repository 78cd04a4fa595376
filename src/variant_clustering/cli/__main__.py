"""CLI entry point: python -m variant_clustering.cli {cluster,lookup}"""

import argparse
import asyncio
import json
import sys

import structlog

from variant_clustering.accession.generator import RS_CATEGORY, MonotonicAccessionGenerator
from variant_clustering.accession.service import ClusteredVariantAccessioningService
from variant_clustering.clustering.namespaces import NamespaceSelector
from variant_clustering.clustering.operations import snapshot_record
from variant_clustering.config.settings import get_settings
from variant_clustering.db.engine import dispose_engine
from variant_clustering.db.session import get_session_factory
from variant_clustering.errors import AccessionLookupError, AccessionMergedError
from variant_clustering.logging_config import configure_logging
from variant_clustering.worker.runner import run_clustering


async def run_cluster(assembly: str, detect_rs_splits: bool | None, only_unclustered: bool) -> None:
    settings = get_settings()
    try:
        counts = await run_clustering(
            get_session_factory(),
            settings,
            assembly,
            detect_rs_splits=detect_rs_splits,
            only_unclustered=only_unclustered,
        )
    finally:
        await dispose_engine()
    print(json.dumps(counts.as_dict(), indent=2))


async def run_lookup(accession: int) -> int:
    """Print the loci of an RS, or why it is no longer active.

    Returns:
        Process exit code.
    """
    settings = get_settings()
    session_factory = get_session_factory()
    namespaces = NamespaceSelector.from_settings(settings)
    generator = MonotonicAccessionGenerator(session_factory, RS_CATEGORY, settings.accessioning_monotonic_init_rs)
    service = ClusteredVariantAccessioningService(session_factory, generator, namespaces)

    try:
        loci = await service.get_all_by_accession(accession)
    except AccessionMergedError as e:
        print(f"rs{accession} was merged into rs{e.destination}")
        return 2
    except AccessionLookupError as e:
        print(str(e))
        return 1
    finally:
        await dispose_engine()

    print(json.dumps([snapshot_record(locus) for locus in loci], indent=2))
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(
        prog="variant_clustering.cli",
        description="Variant clustering CLI",
    )
    subparsers = parser.add_subparsers(dest="command")

    cluster_parser = subparsers.add_parser("cluster", help="Cluster the submitted variants of an assembly")
    cluster_parser.add_argument("--assembly", required=True, help="Assembly accession, e.g. GCA_000001405.15")
    cluster_parser.add_argument(
        "--no-split-detection",
        action="store_true",
        help="Let remapped clustered variants drive merges instead of split detection",
    )
    cluster_parser.add_argument(
        "--only-unclustered",
        action="store_true",
        help="Only read submitted variants without an RS",
    )

    lookup_parser = subparsers.add_parser("lookup", help="Show an RS accession")
    lookup_parser.add_argument("--rs", type=int, required=True, help="RS accession (without the 'rs' prefix)")

    args = parser.parse_args()

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    settings = get_settings()
    configure_logging(json_output=settings.log_json, log_level=settings.log_level)
    log = structlog.get_logger()

    if args.command == "cluster":
        detect_rs_splits = False if args.no_split_detection else None
        log.info("cli_cluster", assembly=args.assembly, database=settings.database_url.split("@")[-1])
        asyncio.run(run_cluster(args.assembly, detect_rs_splits, args.only_unclustered))
    elif args.command == "lookup":
        sys.exit(asyncio.run(run_lookup(args.rs)))


if __name__ == "__main__":
    main()
