"""
PlainCompare command line.

Usage:
    plaincompare build
    plaincompare build --database-url sqlite:///data/plaincompare.db --top-counties 40
    plaincompare build --export-seed data/seed
    plaincompare export-seed --seed-dir data/seed

Source database paths come from the environment / .env
(DATABASE_COST_PATH, DATABASE_RENT_PATH, ...).
"""

import argparse
import logging
import sys
from typing import List, Optional

from plaincompare.core.config import TOP_COUNTY_MAX, TOP_COUNTY_MIN, Settings, get_settings
from plaincompare.core.data_sources import DataSources
from plaincompare.core.database import create_output_engine, create_tables, get_session_factory
from plaincompare.core.errors import PipelineError
from plaincompare.services.build_service import BuildService
from plaincompare.services.seed_export import SeedExportService

logger = logging.getLogger("plaincompare")

SEP = "=" * 72

def top_county_count(value: str) -> int:
    """argparse type for --top-counties; same bounds as TOP_COUNTY_COMPARISONS."""
    try:
        count = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid int value: {value!r}")
    if not TOP_COUNTY_MIN <= count <= TOP_COUNTY_MAX:
        raise argparse.ArgumentTypeError(
            f"must be between {TOP_COUNTY_MIN} and {TOP_COUNTY_MAX}, got {count}"
        )
    return count


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )


def _export_seed(database_url: str, seed_dir: str) -> None:
    engine = create_output_engine(database_url)
    try:
        create_tables(engine)
        SessionLocal = get_session_factory(engine)
        db = SessionLocal()
        try:
            written = SeedExportService(db, seed_dir).export_all()
        finally:
            db.close()
        logger.info(f"Seed export complete: {written}")
    finally:
        engine.dispose()


def cmd_build(args: argparse.Namespace, settings: Settings) -> int:
    database_url = args.database_url or settings.database_url
    top_counties = (
        args.top_counties if args.top_counties is not None else settings.top_county_comparisons
    )

    logger.info(SEP)
    logger.info("PlainCompare build")
    logger.info(f"Output database: {database_url}")
    logger.info(SEP)

    # Open and verify every source before the output DB is touched.
    with DataSources.open(settings.source_paths()) as sources:
        engine = create_output_engine(database_url)
        try:
            result = BuildService(engine, sources, top_county_limit=top_counties).run()
        finally:
            engine.dispose()

    logger.info(f"Build run {result.run_id} published: {result.row_counts}")
    for level, summary in result.summaries.items():
        for entry in summary["top_10"][:3]:
            logger.info(
                f"  top {level}: {entry['name']} {entry['composite_score']} ({entry['grade']})"
            )

    if args.export_seed:
        _export_seed(database_url, args.export_seed)
    return 0


def cmd_export_seed(args: argparse.Namespace, settings: Settings) -> int:
    _export_seed(args.database_url or settings.database_url, args.seed_dir or settings.seed_dir)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="plaincompare",
        description="Build the PlainCompare mapping database and life scores",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    build = sub.add_parser("build", help="Join sources, score, and publish all tables")
    build.add_argument("--database-url", help="Output database URL (default: DATABASE_URL)")
    build.add_argument(
        "--top-counties", type=top_county_count, default=None,
        help="Most populous counties to pair for popular comparisons",
    )
    build.add_argument(
        "--export-seed", metavar="DIR", default=None,
        help="Also export SQL seed files to DIR after publishing",
    )
    build.set_defaults(func=cmd_build)

    export = sub.add_parser("export-seed", help="Export published tables as SQL seed files")
    export.add_argument("--database-url", help="Output database URL (default: DATABASE_URL)")
    export.add_argument("--seed-dir", help="Seed directory (default: SEED_DIR)")
    export.set_defaults(func=cmd_export_seed)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = get_settings()
    configure_logging(settings.log_level)

    try:
        return args.func(args, settings)
    except PipelineError as e:
        logger.error(f"Build failed: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
