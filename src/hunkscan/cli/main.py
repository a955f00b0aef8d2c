"""Command-line entrypoint: ``hunkscan <file1> [file2...]``."""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Sequence

from ..services.fd_loader import SymbolTable, load_symbol_table
from ..services.hunk_reader import HunkTooLargeError, UnrecognizedFormatError
from ..services.program_scan import scan_program
from ..services.risk_report import (
    DiagnosticReport,
    render_report,
    render_summary_line,
)
from ..services.scan_config import ScanConfig
from ..services.scan_failure import ScanFailure
from . import report_contract
from .reason_codes import failure_line

_LOG = logging.getLogger(__name__)

USAGE = "Usage: hunkscan <file1> [file2...]\n"


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Every argument is a file path, including ones that start with ``-``."""

    parser = argparse.ArgumentParser(
        prog="hunkscan",
        description="Score HUNK executables for hardened OS mode compatibility.",
        add_help=False,
    )
    parser.add_argument(
        "files",
        nargs="*",
        help="HUNK executables to scan.",
    )
    if argv is None:
        argv = sys.argv[1:]
    return parser.parse_args(["--", *argv])


def scan_one(
    path: str, symbols: SymbolTable, config: ScanConfig
) -> DiagnosticReport | ScanFailure:
    """Scan a single file, converting per-file failures into a reason."""

    try:
        report = scan_program(path, symbols, config)
    except UnrecognizedFormatError:
        return ScanFailure.NOT_RECOGNIZED
    except HunkTooLargeError as exc:
        _LOG.info("%s: %s", path, exc)
        return ScanFailure.HUNK_TOO_LARGE
    except OSError as exc:
        _LOG.info("%s: %s", path, exc)
        return ScanFailure.CANNOT_OPEN

    try:
        report_contract.validate_report(report.to_mapping())
    except report_contract.ReportContractError as exc:
        _LOG.info("%s: %s", path, exc.message)
        return ScanFailure.REPORT_INVALID
    return report


def run(paths: Sequence[str], config: ScanConfig) -> int:
    """Load descriptors once, then scan each path in order."""

    symbols, found = load_symbol_table(config.fd_dir)
    if not found:
        sys.stdout.write(f"No descriptor directory found at {config.fd_dir}\n")

    for path in paths:
        outcome = scan_one(path, symbols, config)
        if isinstance(outcome, ScanFailure):
            sys.stdout.write(failure_line(path, outcome))
            continue
        sys.stdout.write(render_report(outcome))
        sys.stdout.write(render_summary_line(path, outcome.total_score))
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    if not args.files:
        sys.stdout.write(USAGE)
        return 0

    config = ScanConfig.from_env()
    logging.basicConfig(level=config.log_level)
    return run(args.files, config)


if __name__ == "__main__":
    sys.exit(main())
