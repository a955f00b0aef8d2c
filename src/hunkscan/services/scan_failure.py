"""Per-file failure taxonomy for the scanning pipeline."""

from __future__ import annotations

from enum import Enum


class ScanFailure(Enum):
    """Enumerate the conditions that abort scanning of a single file."""

    CANNOT_OPEN = "CANNOT_OPEN"
    NOT_RECOGNIZED = "NOT_RECOGNIZED"
    HUNK_TOO_LARGE = "HUNK_TOO_LARGE"
    REPORT_INVALID = "REPORT_INVALID"
