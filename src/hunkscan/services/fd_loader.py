"""Library descriptor (``.fd``) parsing and the LVO symbol table.

Each descriptor line declares one library routine and its vector offset:

1. Leading whitespace is skipped and ``;`` starts a comment line.
2. The function name is every non-whitespace character up to
   :data:`MAX_NAME_LENGTH` characters.
3. After optional whitespace and an optional ``-``, a decimal magnitude must
   follow. It is always stored negated, so ``Foo 30`` and ``Foo -30`` both map
   offset ``-30`` to ``Foo``. A zero magnitude is rejected.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from types import MappingProxyType
from typing import Iterable, Iterator, Mapping

_LOG = logging.getLogger(__name__)

MAX_NAME_LENGTH = 31
"""Names longer than this are truncated while parsing."""

FD_EXTENSION = ".fd"
"""Descriptor file extension, compared case-insensitively."""

_WHITESPACE = frozenset(" \t\n\r\v\f")
_DIGITS = frozenset("0123456789")


def parse_fd_line(line: str) -> tuple[str, int] | None:
    """Return ``(name, offset)`` for a descriptor line, or ``None`` if rejected."""

    pos = 0
    length = len(line)
    while pos < length and line[pos] in _WHITESPACE:
        pos += 1
    if pos < length and line[pos] == ";":
        return None

    start = pos
    while (
        pos < length
        and line[pos] not in _WHITESPACE
        and pos - start < MAX_NAME_LENGTH
    ):
        pos += 1
    name = line[start:pos]

    while pos < length and line[pos] in _WHITESPACE:
        pos += 1
    if pos < length and line[pos] == "-":
        pos += 1

    digits_start = pos
    while pos < length and line[pos] in _DIGITS:
        pos += 1
    if pos == digits_start:
        return None
    magnitude = int(line[digits_start:pos])
    if magnitude == 0:
        return None
    return name, -magnitude


class SymbolTable:
    """Read-only mapping from library vector offset to routine name."""

    __slots__ = ("_entries",)

    def __init__(self, entries: Iterable[tuple[int, str]] = ()) -> None:
        table: dict[int, str] = {}
        for offset, name in entries:
            # later descriptors override earlier ones
            table[offset] = name
        self._entries: Mapping[int, str] = MappingProxyType(table)

    def lookup(self, offset: int) -> str | None:
        return self._entries.get(offset)

    def __len__(self) -> int:
        return len(self._entries)


EMPTY_SYMBOL_TABLE = SymbolTable()


def iter_fd_entries(lines: Iterable[str]) -> Iterator[tuple[int, str]]:
    """Yield ``(offset, name)`` for every accepted descriptor line."""

    for line in lines:
        parsed = parse_fd_line(line)
        if parsed is None:
            continue
        name, offset = parsed
        yield offset, name


def is_descriptor_name(filename: str) -> bool:
    return filename.lower().endswith(FD_EXTENSION)


def list_descriptor_files(fd_dir: Path) -> list[Path] | None:
    """Return descriptor files under ``fd_dir`` or ``None`` if it is absent."""

    try:
        names = sorted(os.listdir(fd_dir))
    except OSError:
        return None
    files: list[Path] = []
    for name in names:
        path = fd_dir / name
        if path.is_dir():
            continue
        if not is_descriptor_name(name):
            continue
        files.append(path)
    return files


def _read_descriptor(path: Path) -> Iterator[tuple[int, str]]:
    try:
        with path.open("r", encoding="latin-1", newline="") as handle:
            lines = handle.readlines()
    except OSError as exc:
        _LOG.warning("Unable to read descriptor %s: %s", path, exc)
        return
    yield from iter_fd_entries(lines)


def load_symbol_table(fd_dir: Path) -> tuple[SymbolTable, bool]:
    """
    Build the symbol table from every descriptor file in ``fd_dir``.

    Returns the table and whether the directory could be enumerated. An absent
    directory is not an error: the table is simply empty.
    """

    files = list_descriptor_files(fd_dir)
    if files is None:
        _LOG.warning("Descriptor directory %s not found", fd_dir)
        return EMPTY_SYMBOL_TABLE, False

    if not files:
        _LOG.warning("No descriptor files in %s", fd_dir)

    entries: list[tuple[int, str]] = []
    for path in files:
        entries.extend(_read_descriptor(path))
    table = SymbolTable(entries)
    _LOG.debug("Loaded %d symbols from %d descriptor files", len(table), len(files))
    return table, True
