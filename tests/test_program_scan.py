"""End-to-end scanning of HUNK files through the service layer."""

from __future__ import annotations

import hashlib
import struct
from pathlib import Path

import pytest

from hunkscan.domain.models import Verdict
from hunkscan.services.fd_loader import EMPTY_SYMBOL_TABLE, SymbolTable
from hunkscan.services.hunk_reader import HunkTooLargeError, UnrecognizedFormatError
from hunkscan.services import program_scan
from hunkscan.services.program_scan import scan_bytes, scan_program
from hunkscan.services.scan_config import ScanConfig

HUNK_HEADER = 0x3F3
HUNK_CODE = 0x3E9
HUNK_DATA = 0x3EA
HUNK_END = 0x3F2

SYMBOLS = SymbolTable([(-30, "SetFunction")])


def _long(value: int) -> bytes:
    return struct.pack(">L", value)


def _block(block_type: int, payload: bytes) -> bytes:
    return _long(block_type) + _long(len(payload) // 4) + payload


def _hunk_file(*blocks: bytes) -> bytes:
    return _long(HUNK_HEADER) + _long(0) + _long(0) + b"".join(blocks) + _long(HUNK_END)


def test_setfunction_call_needs_review() -> None:
    data = _hunk_file(_block(HUNK_CODE, bytes.fromhex("4E96FFE200000000")))

    report = scan_bytes("patcher", data, SYMBOLS)

    assert [(f.category, f.severity) for f in report.findings] == [("Library Call", 40)]
    assert report.total_score == 40
    assert report.verdict is Verdict.NEEDS_REVIEW


def test_clean_program_is_likely_safe() -> None:
    data = _hunk_file(
        _block(HUNK_CODE, bytes.fromhex("70004E7E12345678")),
        _block(HUNK_DATA, bytes.fromhex("4E404E41")),
    )

    report = scan_bytes("clean", data, SYMBOLS)

    assert report.findings == ()
    assert report.total_score == 0
    assert report.verdict is Verdict.LIKELY_SAFE
    assert report.code_hunks == 1
    assert report.bytes_scanned == 8


def test_offsets_accumulate_across_code_hunks() -> None:
    data = _hunk_file(
        _block(HUNK_CODE, bytes.fromhex("4E40000000000000")),
        _block(HUNK_DATA, b"\x00" * 8),
        _block(HUNK_CODE, bytes.fromhex("00004E4100000000")),
    )

    report = scan_bytes("two", data, SYMBOLS)

    assert [(f.category, f.byte_offset) for f in report.findings] == [
        ("Trap Call", 10),
        ("Trap Call", 0),
    ]
    assert report.bytes_scanned == 16


def test_digest_matches_file_contents(tmp_path: Path) -> None:
    data = _hunk_file(_block(HUNK_CODE, bytes.fromhex("203C000000040000")))
    target = tmp_path / "prog"
    target.write_bytes(data)

    report = scan_program(target, EMPTY_SYMBOL_TABLE)

    assert report.sha256 == hashlib.sha256(data).hexdigest()
    assert report.filename == str(target)
    assert [f.category for f in report.findings] == ["ExecBase Access"]


def test_digest_covers_the_scanned_bytes(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    data = _hunk_file(_block(HUNK_CODE, bytes.fromhex("4E96FFE200000000")))
    target = tmp_path / "prog"
    target.write_bytes(data)
    scanned: list[bytes] = []

    def recording_scan_bytes(filename, payload, symbols, config):
        scanned.append(payload)
        return scan_bytes(filename, payload, symbols, config)

    monkeypatch.setattr(program_scan, "scan_bytes", recording_scan_bytes)

    report = scan_program(target, SYMBOLS)

    assert scanned == [data]
    assert report.sha256 == hashlib.sha256(scanned[0]).hexdigest()
    assert report.total_score == 40


def test_bad_magic_produces_no_report(tmp_path: Path) -> None:
    target = tmp_path / "readme.txt"
    target.write_bytes(b"Hello, world\n")

    with pytest.raises(UnrecognizedFormatError):
        scan_program(target, SYMBOLS)


def test_missing_file_raises_oserror(tmp_path: Path) -> None:
    with pytest.raises(OSError):
        scan_program(tmp_path / "absent", SYMBOLS)


def test_oversized_hunk_aborts_file() -> None:
    data = _hunk_file(_block(HUNK_CODE, b"\x00" * 64))
    config = ScanConfig(fd_dir=Path("FD"), max_code_hunk_bytes=16)

    with pytest.raises(HunkTooLargeError):
        scan_bytes("big", data, SYMBOLS, config)


def test_scanning_twice_is_identical() -> None:
    payload = bytes.fromhex("4E96FFE2 4E73 4E75 2069FF00 00000000")
    data = _hunk_file(_block(HUNK_CODE, payload))

    first = scan_bytes("prog", data, SYMBOLS).to_mapping()
    second = scan_bytes("prog", data, SYMBOLS).to_mapping()

    assert first == second
