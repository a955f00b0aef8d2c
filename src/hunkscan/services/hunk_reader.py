"""Streaming reader for HUNK executables.

Only the structure needed to reach the code hunks is interpreted:

1. The stream must start with the ``HUNK_HEADER`` magic longword.
2. The next longword gives the length of the header table, which is skipped
   together with one extra longword.
3. Blocks follow as ``type, size`` pairs with ``size`` counted in longwords.
   ``HUNK_CODE`` payloads are yielded, ``HUNK_END`` stops the walk and every
   other block is skipped by its declared size.

All integers are big-endian 32-bit values.
"""

from __future__ import annotations

import logging
import struct
from dataclasses import dataclass
from typing import BinaryIO, Iterator

from .scan_config import DEFAULT_SCAN_CONFIG, ScanConfig

_LOG = logging.getLogger(__name__)

HUNK_HEADER = 0x3F3
HUNK_CODE = 0x3E9
HUNK_END = 0x3F2

HUNK_TYPE_MASK = 0x3FFFFFFF
"""Strips the memory-attribute flags HUNK allows in the top two bits."""

_LONG = struct.Struct(">L")


class UnrecognizedFormatError(ValueError):
    """Raised when a stream does not start with the HUNK header magic."""


class HunkTooLargeError(ValueError):
    """Raised when a code hunk cannot be buffered for scanning."""


@dataclass(frozen=True)
class CodeHunk:
    """Payload of one code hunk and its offset among all code hunks."""

    base_offset: int
    payload: bytes

    @property
    def size(self) -> int:
        return len(self.payload)


def read_be_long(stream: BinaryIO) -> int | None:
    """Read one big-endian longword, or ``None`` at end of stream."""

    raw = stream.read(_LONG.size)
    if len(raw) != _LONG.size:
        return None
    return _LONG.unpack(raw)[0]


def _skip(stream: BinaryIO, count: int) -> None:
    if count <= 0:
        return
    if stream.seekable():
        stream.seek(count, 1)
    else:
        stream.read(count)


def _read_code_payload(stream: BinaryIO, size: int, config: ScanConfig) -> bytes:
    if size > config.max_code_hunk_bytes:
        raise HunkTooLargeError(
            f"Code hunk of {size} bytes exceeds the {config.max_code_hunk_bytes} byte limit."
        )
    try:
        payload = stream.read(size)
    except MemoryError as exc:
        raise HunkTooLargeError(f"Unable to buffer code hunk of {size} bytes.") from exc
    if len(payload) < size:
        _LOG.warning(
            "Code hunk truncated: %d of %d bytes available", len(payload), size
        )
    return payload


def iter_code_hunks(
    stream: BinaryIO, config: ScanConfig = DEFAULT_SCAN_CONFIG
) -> Iterator[CodeHunk]:
    """
    Yield every code hunk of a HUNK executable in file order.

    Raises :class:`UnrecognizedFormatError` before yielding anything when the
    magic is wrong, and :class:`HunkTooLargeError` when a code hunk exceeds the
    configured buffer limit.
    """

    magic = read_be_long(stream)
    if magic != HUNK_HEADER:
        raise UnrecognizedFormatError("Stream is not a HUNK executable.")

    table_longs = read_be_long(stream)
    if table_longs is None:
        return
    _skip(stream, (table_longs + 1) * 4)

    base_offset = 0
    while True:
        block_type = read_be_long(stream)
        if block_type is None:
            break
        block_type &= HUNK_TYPE_MASK
        if block_type == HUNK_END:
            break
        size_longs = read_be_long(stream)
        if size_longs is None:
            break
        size = size_longs * 4
        if block_type == HUNK_CODE:
            payload = _read_code_payload(stream, size, config)
            yield CodeHunk(base_offset=base_offset, payload=payload)
            base_offset += len(payload)
        else:
            _LOG.debug("Skipping block type 0x%X (%d bytes)", block_type, size)
            _skip(stream, size)
