"""Environment-driven configuration for HUNK scanning."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

DEFAULT_FD_DIR = "FD"
"""Descriptor directory used when ``HUNKSCAN_FD_DIR`` is not set."""

DEFAULT_MAX_CODE_HUNK_BYTES = 16 * 1024 * 1024
"""Largest code hunk the reader agrees to buffer in memory."""

MIN_CODE_HUNK_BYTES = 4
"""A limit below one longword would reject every code hunk."""

DEFAULT_LOG_LEVEL = "WARNING"

FD_DIR_ENV = "HUNKSCAN_FD_DIR"
MAX_CODE_HUNK_BYTES_ENV = "HUNKSCAN_MAX_CODE_HUNK_BYTES"
LOG_LEVEL_ENV = "HUNKSCAN_LOG_LEVEL"

_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})


def _hunk_limit_from_env() -> int:
    """Buffer limit in bytes; unparsable or too-small values keep the default."""

    raw = os.getenv(MAX_CODE_HUNK_BYTES_ENV, "").strip()
    if not (raw.isascii() and raw.isdigit()):
        return DEFAULT_MAX_CODE_HUNK_BYTES
    limit = int(raw)
    return limit if limit >= MIN_CODE_HUNK_BYTES else DEFAULT_MAX_CODE_HUNK_BYTES


def _env_log_level(name: str, default: str) -> str:
    raw = os.getenv(name, "").strip().upper()
    if raw in _LOG_LEVELS:
        return raw
    return default


@dataclass(frozen=True)
class ScanConfig:
    """Every setting the scanner reads from its environment."""

    fd_dir: Path
    max_code_hunk_bytes: int
    log_level: str = DEFAULT_LOG_LEVEL

    @classmethod
    def from_env(cls) -> "ScanConfig":
        """Return a configuration using the current environment variables."""

        raw_dir = os.getenv(FD_DIR_ENV)
        fd_dir = Path(raw_dir) if raw_dir and raw_dir.strip() else Path(DEFAULT_FD_DIR)
        return cls(
            fd_dir=fd_dir,
            max_code_hunk_bytes=_hunk_limit_from_env(),
            log_level=_env_log_level(LOG_LEVEL_ENV, DEFAULT_LOG_LEVEL),
        )


DEFAULT_SCAN_CONFIG = ScanConfig(
    Path(DEFAULT_FD_DIR),
    DEFAULT_MAX_CODE_HUNK_BYTES,
)
