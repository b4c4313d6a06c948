"""Command line interface for the migration engine."""

import argparse
import json
import logging
import sys
from typing import Dict

from .exceptions import MigrationError
from .models.migration import MigrationConfig
from .models.schema import MapDirection
from .orchestrator import MigrationStepRunner
from .services.progress import JsonFileProgressStore
from .services.volume import VolumeChecker

logger = logging.getLogger(__name__)


def main(argv=None):
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(
        description="Document Migration Tool - Move documents between data stores"
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose output")

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Run the data step
    run_parser = subparsers.add_parser("run", help="Run the data migration step")
    run_parser.add_argument("--config", required=True, help="Path to migration config file")
    run_parser.add_argument("--reset", action="store_true", help="Forget progress before running")
    run_parser.add_argument(
        "--direct-copy",
        dest="direct_copy",
        action="store_true",
        default=None,
        help="Enable direct document copy",
    )

    # Compare record counts
    verify_parser = subparsers.add_parser("verify", help="Compare source and destination record counts")
    verify_parser.add_argument("--config", required=True, help="Path to migration config file")

    # Inspect or reset progress
    progress_parser = subparsers.add_parser("progress", help="Show step progress")
    progress_parser.add_argument("--config", required=True, help="Path to migration config file")
    progress_parser.add_argument("--reset", action="store_true", help="Forget progress of the step")

    args = parser.parse_args(argv)

    # Set up logging
    log_level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    try:
        if args.command == "run":
            return run_step(args)
        elif args.command == "verify":
            return run_verify(args)
        elif args.command == "progress":
            return run_progress(args)
        else:
            parser.print_help()
            return 2
    except MigrationError as e:
        logger.error(e.message)
        return 1


def run_step(args) -> int:
    """Run the data step from a config file."""
    config = MigrationConfig.from_json_file(args.config)
    if args.direct_copy is not None:
        config.direct_document_copy = args.direct_copy

    progress = JsonFileProgressStore(config.progress_file)
    if args.reset:
        progress.reset(config.step_id)

    runner = MigrationStepRunner.from_config(config, progress=progress)
    try:
        report = runner.run()
    except Exception as e:
        print(f"\nStep {config.step_id} FAILED: {e}")
        print("Rerun the step to resume after the last completed document.")
        return 1
    finally:
        runner.close()

    print("\n" + "=" * 60)
    print("STEP COMPLETE")
    print("=" * 60)
    print(f"Status: {report.status.value}")
    print(f"Already done: {len(report.previously_completed)}")
    for result in report.documents:
        line = f"  {result.source_document}: {result.status.value}"
        if result.strategy:
            line += f" ({result.strategy.value}, {result.records_written} records)"
        if result.skip_reason:
            line += f" - {result.skip_reason}"
        print(line)
    print(f"Records Written: {report.total_records_written}")
    if report.duration_seconds:
        print(f"Duration: {report.duration_seconds:.2f} seconds")
    return 0


def run_verify(args) -> int:
    """Compare record counts of every completed document."""
    config = MigrationConfig.from_json_file(args.config)
    runner = MigrationStepRunner.from_config(config)
    mapping = runner.mapping

    try:
        pairs: Dict[str, str] = {}
        for name in sorted(runner.progress.get_processed_entities(config.step_id)):
            target = mapping.document_target(name, MapDirection.SOURCE)
            if target:
                pairs[name] = target

        mismatches = VolumeChecker(runner.source, runner.destination).check(pairs)
    finally:
        runner.close()

    print(json.dumps([m.to_dict() for m in mismatches], indent=2))
    return 1 if mismatches else 0


def run_progress(args) -> int:
    """Show (or reset) the completed documents of the step."""
    config = MigrationConfig.from_json_file(args.config)
    progress = JsonFileProgressStore(config.progress_file)

    if args.reset:
        progress.reset(config.step_id)
        print(f"Progress of {config.step_id} reset")
        return 0

    processed = sorted(progress.get_processed_entities(config.step_id))
    print(json.dumps({"step_id": config.step_id, "processed": processed}, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
