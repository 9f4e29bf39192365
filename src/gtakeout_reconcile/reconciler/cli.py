"""CLI command for reconciling a Google Takeout export."""

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from gtakeout_reconcile.common import ConfigLoader, ReconcileError, setup_logging

from .config import ReconcilerConfig, TakeoutReconcileConfig
from .pipeline import TakeoutReconciler
from .summary import format_summary_human_readable, generate_summary, log_unmatched, write_summary
from .tool_checker import check_required_tools

# Application name derived from the top-level package name
_package = (__package__ or "gtakeout_reconcile.reconciler").split('.')[0]
APP_NAME = _package.replace('_', '-')


def reconcile_command(
    config: TakeoutReconcileConfig,
    dry_run: bool = False,
    report_path: Optional[Path] = None,
) -> int:
    """Reconcile a Takeout directory into the output tree.

    Args:
        config: Configuration with all command-line overrides applied
        dry_run: Stop after deduplication without writing anything
        report_path: Optional JSON report destination

    Returns:
        Exit code (0 for success)
    """
    logger = logging.getLogger(__package__ or __name__)
    settings = config.reconciler

    input_dir = Path(settings.input_dir) if settings.input_dir else None
    output_dir = Path(settings.output_dir) if settings.output_dir else None

    if input_dir is None or not input_dir.is_dir():
        logger.error(f"Input directory does not exist: {{'path': {settings.input_dir!r}}}")
        return 1
    if output_dir is None:
        logger.error("Output directory not set: {'option': '--output-dir'}")
        return 1
    if output_dir.exists() and not output_dir.is_dir():
        logger.error(f"Output path is not a directory: {{'path': {str(output_dir)!r}}}")
        return 1

    try:
        check_required_tools(
            use_exiftool=settings.use_exiftool and not dry_run,
            file_command=settings.file_command,
            exiftool_command=settings.exiftool_command,
        )

        reconciler = TakeoutReconciler(settings, progress_interval=config.logging.progress_interval)
        report = reconciler.run(dry_run=dry_run)

        summary = generate_summary(report)
        log_unmatched(summary)
        print(format_summary_human_readable(summary))

        if report_path:
            write_summary(summary, report_path)

        return 0

    except ReconcileError as e:
        logger.error(f"Reconcile failed: {{'error': {e.message!r}, 'context': {e.context!r}}}")
        return 1
    except Exception as e:
        logger.exception(f"Reconcile failed: {e}")
        return 1


def main(argv: Optional[list] = None) -> int:
    """Main entry point for the reconcile command."""
    parser = argparse.ArgumentParser(
        prog=APP_NAME,
        description="Reconcile an extracted Google Photos Takeout export: pair media with their "
                    "JSON sidecars, fix extensions, remove duplicates and copy into a clean tree"
    )
    parser.add_argument(
        "--input-dir",
        type=Path,
        required=False,
        help="Extracted Takeout directory (overrides config)"
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        required=False,
        help="Directory receiving the general/, shared/ and albums/ trees (overrides config)"
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to config file (defaults.toml)"
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Match, classify and deduplicate, but copy nothing"
    )
    parser.add_argument(
        "--report",
        type=Path,
        required=False,
        help="Write the run summary as JSON to this file"
    )
    parser.add_argument(
        "--worker-threads",
        type=int,
        required=False,
        help="Number of worker threads for fuzzy matching, hashing and embedding (overrides config)"
    )
    parser.add_argument(
        "--no-fail-fast",
        action="store_true",
        help="Record unknown file types and unreadable files instead of aborting"
    )
    parser.add_argument(
        "--skip-exiftool",
        action="store_true",
        help="Only set file timestamps; do not write dates into the media with exiftool"
    )

    args = parser.parse_args(argv)

    loader = ConfigLoader(
        app_name=APP_NAME,
        config_class=TakeoutReconcileConfig
    )
    config = loader.load(defaults_path=args.config)

    setup_logging(
        level=config.logging.level,
        format=config.logging.format,
        log_file=Path(config.logging.file) if config.logging.file else None,
    )

    overrides = {}
    if args.input_dir:
        overrides['input_dir'] = str(args.input_dir)
    if args.output_dir:
        overrides['output_dir'] = str(args.output_dir)
    if args.worker_threads is not None:
        overrides['worker_threads'] = args.worker_threads
    if args.no_fail_fast:
        overrides['fail_fast'] = False
    if args.skip_exiftool:
        overrides['use_exiftool'] = False

    if overrides:
        try:
            settings = ReconcilerConfig.model_validate({**config.reconciler.model_dump(), **overrides})
        except ValidationError as e:
            parser.error(str(e))
        config = config.model_copy(update={'reconciler': settings})

    return reconcile_command(config, dry_run=args.dry_run, report_path=args.report)


if __name__ == "__main__":
    sys.exit(main())
