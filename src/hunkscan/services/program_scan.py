"""Per-file pipeline: HUNK reader -> pattern scanner -> diagnostic report."""

from __future__ import annotations

import hashlib
import io
from pathlib import Path
from typing import BinaryIO

from .fd_loader import SymbolTable
from .hunk_reader import iter_code_hunks
from .pattern_scanner import scan_segment
from .risk_report import DiagnosticReport
from .scan_config import DEFAULT_SCAN_CONFIG, ScanConfig


def _scan_stream(
    report: DiagnosticReport,
    stream: BinaryIO,
    symbols: SymbolTable,
    config: ScanConfig,
) -> DiagnosticReport:
    for hunk in iter_code_hunks(stream, config):
        report.add_findings(scan_segment(hunk.payload, hunk.base_offset, symbols))
        report.record_hunk(hunk.size)
    return report


def scan_bytes(
    filename: str,
    data: bytes,
    symbols: SymbolTable,
    config: ScanConfig = DEFAULT_SCAN_CONFIG,
) -> DiagnosticReport:
    """
    Scan an in-memory HUNK executable.

    Raises :class:`~hunkscan.services.hunk_reader.UnrecognizedFormatError` or
    :class:`~hunkscan.services.hunk_reader.HunkTooLargeError`; no partial report
    is returned in either case.
    """

    report = DiagnosticReport(filename, sha256=hashlib.sha256(data).hexdigest())
    return _scan_stream(report, io.BytesIO(data), symbols, config)


def scan_program(
    path: str | Path,
    symbols: SymbolTable,
    config: ScanConfig = DEFAULT_SCAN_CONFIG,
) -> DiagnosticReport:
    """
    Scan the file at ``path``; ``OSError`` propagates when it cannot be read.

    The file is read once, so the digest always covers exactly the bytes that
    were scanned.
    """

    data = Path(path).read_bytes()
    return scan_bytes(str(path), data, symbols, config)
