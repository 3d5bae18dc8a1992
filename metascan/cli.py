\
import argparse
import logging
import sys
from pathlib import Path
from typing import Dict, List, Optional

from .checks.base import ValidationContext
from .core.collector import ErrorCollector
from .core.config import ConfigurationError, Settings
from .core.exit_codes import EXIT_FAILURE, ExitCodeMode, ExitCodePolicy
from .core.formatter import ErrorFormatter
from .core.loader import discover_check_plugins, select_check_plugins
from .core.logs import DEFAULT_LOGGER_NAME, StructuredLogSink, configure_logging, utc_timestamp
from .core.reporting import Reporter
from .core.scanner import DirectoryScanner, FrontMatterValidator, SingleFileScanner, tenet_ids_under


def _add_common_options(p: argparse.ArgumentParser) -> None:
    p.add_argument("--checks", default="all", help="Comma-delimited checks to run (e.g., 'required,id,secrets') or 'all'.")
    p.add_argument("--out", type=Path, default=None, help="Also write findings.json and summary.md to this directory.")
    p.add_argument(
        "--exit-codes",
        choices=[m.value for m in ExitCodeMode],
        default=ExitCodeMode.SIMPLE.value,
        help="'simple': 0 ok / 1 errors. 'granular': 2 for syntax errors, 3 for field errors.",
    )
    p.add_argument("--verbose", action="store_true", help="Enable verbose logging output.")


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="metascan",
        description="Validate YAML front-matter in tenet and binding documents.",
        epilog="Environment: METASCAN_STRUCTURED_LOGGING=true emits JSON records on stderr; NO_COLOR=1 disables color.",
    )
    sub = p.add_subparsers(dest="mode", required=True)

    # dir mode
    d = sub.add_parser("dir", help="Validate every tenet and binding under ROOT/docs.")
    d.add_argument("path", type=Path, nargs="?", default=Path("."), help="Repository root containing docs/ and VERSION.")
    d.add_argument("--no-progress", action="store_true", help="Disable the progress bar.")
    _add_common_options(d)

    # file mode
    f = sub.add_parser("file", help="Validate a single file.")
    f.add_argument("path", type=Path, help="File to validate; its path must contain tenets/ or bindings/.")
    f.add_argument("--root", type=Path, default=Path("."), help="Repository root containing docs/ and VERSION.")
    f.add_argument("--fail-fast", action="store_true", help="Stop running checks after the first error.")
    _add_common_options(f)

    return p


def _prepare(args: argparse.Namespace, root: Path):
    logger = configure_logging(verbose=args.verbose)
    settings = Settings.from_env(root=root)
    expected_version = settings.expected_version()

    checks = select_check_plugins(discover_check_plugins(), args.checks)
    sink = StructuredLogSink(enabled=settings.structured_logging, logger=logger)
    collector = ErrorCollector(tool_name="metascan", sink=sink, logger=logger)
    context = ValidationContext(
        expected_version=expected_version,
        required_keys=settings.required_keys,
        tenet_ids=tenet_ids_under(root),
    )
    validator = FrontMatterValidator(checks, collector, context, logger=logger, verbose=args.verbose)
    sink.emit(
        {
            "event": "validation_start",
            "correlation_id": collector.correlation.correlation_id,
            "timestamp": utc_timestamp(),
            "tool": collector.tool_name,
            "mode": args.mode,
            "path": str(args.path),
        }
    )
    return logger, checks, collector, validator


def _finish(args: argparse.Namespace, collector: ErrorCollector, file_contents: Dict[str, str]) -> int:
    formatter = ErrorFormatter(stream=sys.stderr)
    findings = collector.findings
    report = formatter.render(findings, file_contents)
    if report:
        print(report, file=sys.stderr)

    code = ExitCodePolicy(ExitCodeMode(args.exit_codes)).exit_code(collector.errors)

    if args.out is not None:
        redactor = formatter.redactor_for(findings, file_contents)
        Reporter(args.out).write_all(findings, redactor, collector.summary(), code)

    collector.log_validation_summary()

    if collector.any():
        print("\nMetadata validation failed!", file=sys.stderr)
    else:
        print("All files validated successfully!")
    return code


def run_dir(args: argparse.Namespace) -> int:
    logger, checks, collector, validator = _prepare(args, args.path)
    if not checks:
        print("No checks selected. Exiting.", file=sys.stderr)
        return 2

    scanner = DirectoryScanner(
        root=args.path,
        validator=validator,
        logger=logger,
        verbose=args.verbose,
        show_progress=not args.no_progress,
    )
    scanner.scan()
    return _finish(args, collector, validator.file_contents)


def run_file(args: argparse.Namespace) -> int:
    if not args.path.is_file():
        print(f"ERROR: file not found: {args.path}", file=sys.stderr)
        return EXIT_FAILURE

    logger, checks, collector, validator = _prepare(args, args.root)
    if not checks:
        print("No checks selected. Exiting.", file=sys.stderr)
        return 2

    print(f"Validating single file: {args.path}")
    scanner = SingleFileScanner(
        file_path=args.path,
        validator=validator,
        fail_fast=args.fail_fast,
        logger=logger,
        verbose=args.verbose,
    )
    scanner.scan()
    return _finish(args, collector, validator.file_contents)


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    try:
        if args.mode == "dir":
            return run_dir(args)
        elif args.mode == "file":
            return run_file(args)
        else:
            parser.print_help()
            return 2
    except ConfigurationError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return EXIT_FAILURE
    except KeyboardInterrupt:
        return 130
    except Exception as exc:
        logging.getLogger(DEFAULT_LOGGER_NAME).debug("Validation aborted", exc_info=True)
        print(f"ERROR: validation aborted: {exc}", file=sys.stderr)
        return EXIT_FAILURE


if __name__ == "__main__":
    raise SystemExit(main())
