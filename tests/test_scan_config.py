"""Environment-driven scan configuration."""

from __future__ import annotations

from pathlib import Path

import pytest

from hunkscan.services.scan_config import (
    DEFAULT_FD_DIR,
    DEFAULT_MAX_CODE_HUNK_BYTES,
    DEFAULT_SCAN_CONFIG,
    ScanConfig,
)

_ENV_VARS = ("HUNKSCAN_FD_DIR", "HUNKSCAN_MAX_CODE_HUNK_BYTES", "HUNKSCAN_LOG_LEVEL")


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults_without_environment() -> None:
    config = ScanConfig.from_env()

    assert config == DEFAULT_SCAN_CONFIG
    assert config.fd_dir == Path(DEFAULT_FD_DIR)
    assert config.max_code_hunk_bytes == DEFAULT_MAX_CODE_HUNK_BYTES
    assert config.log_level == "WARNING"


def test_environment_overrides(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("HUNKSCAN_FD_DIR", str(tmp_path))
    monkeypatch.setenv("HUNKSCAN_MAX_CODE_HUNK_BYTES", "4096")
    monkeypatch.setenv("HUNKSCAN_LOG_LEVEL", "debug")

    config = ScanConfig.from_env()

    assert config.fd_dir == tmp_path
    assert config.max_code_hunk_bytes == 4096
    assert config.log_level == "DEBUG"


@pytest.mark.parametrize("raw", ["", "   ", "lots", "3", "-8", "1.5", "\u00b2"])
def test_invalid_hunk_limit_falls_back(monkeypatch: pytest.MonkeyPatch, raw: str) -> None:
    monkeypatch.setenv("HUNKSCAN_MAX_CODE_HUNK_BYTES", raw)

    assert ScanConfig.from_env().max_code_hunk_bytes == DEFAULT_MAX_CODE_HUNK_BYTES


def test_unknown_log_level_falls_back(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("HUNKSCAN_LOG_LEVEL", "chatty")

    assert ScanConfig.from_env().log_level == "WARNING"


@pytest.mark.parametrize(("raw", "limit"), [("4", 4), (" 4096 ", 4096)])
def test_hunk_limit_accepts_minimum_and_padding(
    monkeypatch: pytest.MonkeyPatch, raw: str, limit: int
) -> None:
    monkeypatch.setenv("HUNKSCAN_MAX_CODE_HUNK_BYTES", raw)

    assert ScanConfig.from_env().max_code_hunk_bytes == limit
