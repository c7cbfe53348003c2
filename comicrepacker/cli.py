#!/usr/bin/env python3
"""
Command-line interface for comicrepacker.
Finds comic archives a reader cannot open (RAR5 or solid) and repacks them as plain CBZ.
"""
import argparse
import sys

from .core.errors import RepackerError
from .core.models import ScanStatus, SCAN_COMPLETE
from .core.seven_zip import SevenZipTool
from .report import ScanReporter, print_scan_summary, print_conversion_summary
from .service import RepackerService
from .settings import (
    SETTINGS_KEYS,
    apply_global_settings,
    load_global_settings,
    save_global_settings,
)
from .utils import setup_logging

EXIT_INTERRUPTED = 130

# Seconds between checks for Ctrl+C while waiting on a scan
WAIT_INTERVAL = 0.2


def _common_options():
    """Options shared by the scan and convert commands."""
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--verbose", "-v", action="store_true", help="Enable verbose output"
    )
    common.add_argument(
        "--silent", "-s", action="store_true", help="Suppress all output except errors"
    )
    common.add_argument(
        "--seven-zip",
        dest="seven_zip",
        metavar="PATH",
        help="7-Zip executable to use (default: 7zz, 7z or 7za from PATH)",
    )
    common.add_argument(
        "--workers",
        type=int,
        default=0,
        help="Number of parallel conversions (0 = auto-detect)",
    )
    common.add_argument(
        "--temp-dir",
        dest="temp_dir",
        metavar="DIR",
        help="Base directory for temporary extraction",
    )
    common.add_argument(
        "--tool-timeout",
        dest="tool_timeout",
        type=float,
        metavar="SECONDS",
        help="Abandon a 7-Zip invocation after this many seconds (default: no limit)",
    )
    return common


def parse_arguments(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="comicrepacker",
        description="Find CBR/CBZ archives that comic readers cannot open and repack them as CBZ.",
        epilog="""Examples:
  %(prog)s scan ~/Comics
  %(prog)s scan --only-unsupported --convert-unsupported ~/Comics
  %(prog)s convert book.cbr --output-dir converted/
  %(prog)s config --seven-zip /opt/7zip/7zz""",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    subparsers = parser.add_subparsers(
        dest="command", help="Available commands", metavar="COMMAND"
    )
    common = _common_options()

    # Scan command
    scan_parser = subparsers.add_parser(
        "scan",
        parents=[common],
        help="Scan a directory tree for unsupported archives",
        description="Scan a directory tree and report RAR5 or solid archives.",
    )
    scan_parser.set_defaults(func=handle_scan_command)
    scan_parser.add_argument(
        "--only-unsupported",
        action="store_true",
        help="Only show unsupported archives and errors",
    )
    scan_parser.add_argument(
        "--json", action="store_true", help="Print one JSON object per result"
    )
    scan_parser.add_argument(
        "--convert-unsupported",
        action="store_true",
        help="Convert every unsupported archive to CBZ once the scan completes",
    )
    scan_parser.add_argument(
        "--output-dir",
        dest="output_dir",
        help="Output directory for converted files (default: next to each source)",
    )
    scan_parser.add_argument("input_path", help="Directory to scan")

    # Convert command
    convert_parser = subparsers.add_parser(
        "convert",
        parents=[common],
        help="Repack archives as CBZ",
        description="Extract archives with 7-Zip and repack them as deflated CBZ files.",
    )
    convert_parser.set_defaults(func=handle_convert_command)
    convert_parser.add_argument(
        "--output-dir",
        dest="output_dir",
        help="Output directory (default: next to each source)",
    )
    convert_parser.add_argument(
        "--verify-pages",
        action="store_true",
        help="Check that extracted images decode before repacking",
    )
    convert_parser.add_argument("input_paths", nargs="+", help="Archives to convert")

    # Config command
    config_parser = subparsers.add_parser(
        "config",
        help="Save or show global settings",
        description="Save global settings used by every command.",
    )
    config_parser.set_defaults(func=handle_config_command)
    config_parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable verbose output globally"
    )
    config_parser.add_argument(
        "--silent", "-s", action="store_true", help="Suppress all output except errors globally"
    )
    config_parser.add_argument(
        "--seven-zip", dest="seven_zip", metavar="PATH", help="Default 7-Zip executable"
    )
    config_parser.add_argument(
        "--workers", type=int, help="Default number of parallel conversions (0 = auto-detect)"
    )
    config_parser.add_argument(
        "--temp-dir", dest="temp_dir", metavar="DIR", help="Default temporary extraction directory"
    )
    config_parser.add_argument(
        "--tool-timeout", dest="tool_timeout", type=float, metavar="SECONDS",
        help="Default 7-Zip timeout in seconds",
    )
    config_parser.add_argument(
        "--show", action="store_true", help="Show the saved settings"
    )

    args = parser.parse_args(argv)
    if args.command is None:
        parser.print_help()
        return None
    return args


def build_service(args, logger):
    """Create the service described by the parsed arguments."""
    tool = SevenZipTool(
        executable=getattr(args, "seven_zip", None),
        timeout=getattr(args, "tool_timeout", None),
        logger=logger,
    )
    return RepackerService(
        tool=tool,
        workers=getattr(args, "workers", 0),
        temp_root=getattr(args, "temp_dir", None),
        verify_pages=getattr(args, "verify_pages", False),
        logger=logger,
    )


def wait_for_scan(service, handle, logger):
    """Wait for a scan to finish; Ctrl+C cancels it. Returns True if interrupted."""
    try:
        while not handle.wait(WAIT_INTERVAL):
            pass
    except KeyboardInterrupt:
        logger.info("Interrupted, cancelling scan...")
        service.cancel_scan(handle)
        handle.wait()
        return True
    return False


def convert_results(service, results, output_dir, logger):
    """Convert scanned results one at a time, updating each result's status."""
    converted = []
    failed = []
    for result in results:
        result.status = ScanStatus.CONVERTING

    outcomes = service.convert_many([r.path for r in results], output_dir, sequential=True)
    for result, (path, output_path, error) in zip(results, outcomes):
        if error is None:
            result.status = ScanStatus.CONVERTED
            converted.append((path, output_path))
        else:
            result.status = ScanStatus.ERROR
            result.error = error
            failed.append((path, error))
    return converted, failed


def handle_scan_command(args, logger):
    """Handle the scan command."""
    reporter = ScanReporter(logger, only_unsupported=args.only_unsupported, as_json=args.json)

    with build_service(args, logger) as service:
        try:
            handle = service.scan_directory(args.input_path, reporter)
        except RepackerError as e:
            logger.error(str(e))
            return 1

        interrupted = wait_for_scan(service, handle, logger)
        if not args.json:
            print_scan_summary(reporter, logger)
        if interrupted:
            return EXIT_INTERRUPTED
        if handle.outcome != SCAN_COMPLETE:
            return 1

        if not args.convert_unsupported:
            return 0

        unsupported = reporter.unsupported()
        if not unsupported:
            logger.info("No unsupported archives to convert")
            return 0

        logger.info(f"Converting {len(unsupported)} unsupported archives...")
        try:
            converted, failed = convert_results(service, unsupported, args.output_dir, logger)
        except KeyboardInterrupt:
            logger.info("Interrupted, waiting for running conversions to finish...")
            return EXIT_INTERRUPTED
        print_conversion_summary(converted, failed, logger)
        return 1 if failed else 0


def handle_convert_command(args, logger):
    """Handle the convert command."""
    converted = []
    failed = []

    with build_service(args, logger) as service:
        try:
            for path, output_path, error in service.convert_many(args.input_paths, args.output_dir):
                if error is None:
                    converted.append((path, output_path))
                else:
                    failed.append((path, error))
        except KeyboardInterrupt:
            logger.info("Interrupted, waiting for running conversions to finish...")
            return EXIT_INTERRUPTED

    print_conversion_summary(converted, failed, logger)
    return 1 if failed else 0


def handle_config_command(args, logger):
    """Handle the config command."""
    settings, _ = load_global_settings()
    settings = settings.copy()

    if args.verbose:
        settings["verbose"] = True
    if args.silent:
        settings["silent"] = True
    changed = args.verbose or args.silent
    for key in ("seven_zip", "workers", "temp_dir", "tool_timeout"):
        value = getattr(args, key, None)
        if value is not None:
            settings[key] = value
            changed = True

    if changed:
        logger.info("Saving global settings...")
        success, error = save_global_settings(settings)
        if not success:
            logger.error(f"Failed to save global settings: {error}")
            return 1
        logger.info("✓ Global settings saved successfully")

    if args.show or not changed:
        if not settings:
            logger.info("No global settings saved")
        for key in SETTINGS_KEYS:
            if key in settings:
                logger.info(f"  {key} = {settings[key]}")
    return 0


def main(argv=None):
    """Main entry point."""
    args = parse_arguments(argv)
    if args is None:
        return 1

    # Apply global settings before configuring logging so verbosity is respected
    if args.command != "config":
        global_settings, _ = load_global_settings()
        args = apply_global_settings(args, global_settings)

    logger = setup_logging(getattr(args, "verbose", False), getattr(args, "silent", False))
    return args.func(args, logger)


if __name__ == "__main__":
    sys.exit(main())
