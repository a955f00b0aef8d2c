"""Per-file messages printed when a file cannot be scanned."""

from __future__ import annotations

from ..services.scan_failure import ScanFailure

CANNOT_OPEN = "cannot open"
"""The input could not be opened or read."""

NOT_RECOGNIZED = "not recognized format"
"""The input does not start with the HUNK header magic."""

HUNK_TOO_LARGE = "code hunk too large to buffer"
"""A code hunk exceeded the configured buffer limit."""

REPORT_INVALID = "report failed validation"
"""The scanner produced a report that violated the report contract."""

MESSAGES = {
    ScanFailure.CANNOT_OPEN: CANNOT_OPEN,
    ScanFailure.NOT_RECOGNIZED: NOT_RECOGNIZED,
    ScanFailure.HUNK_TOO_LARGE: HUNK_TOO_LARGE,
    ScanFailure.REPORT_INVALID: REPORT_INVALID,
}


def failure_line(path: str, failure: ScanFailure) -> str:
    return f"{path}: {MESSAGES[failure]}\n"
