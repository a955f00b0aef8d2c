"""Fixed-stride byte pattern scanner for 68k code hunks.

The scanner does not decode instructions. It walks a code hunk one word at a
time and, at each cursor position, tries an ordered list of detectors. The
first detector that matches emits a :class:`~hunkscan.domain.models.Finding`
and moves the cursor by its own stride; when nothing matches the cursor moves
by one word. The walk continues while at least four bytes remain.

Because matches are not aligned to real instruction boundaries, a detector can
fire inside data or inside a longer instruction. Risk scores are calibrated
against this exact detector order and these strides, including the broad
self-modifying code detector.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Sequence

from ..domain.models import Finding
from .fd_loader import SymbolTable
from .weights import weight_for

WORD = 2
MIN_WINDOW = 4
IMMEDIATE_LOAD_LENGTH = 6

# (op & 0xFFF8) == base and register field == A6
JSR_BASE = 0x4E90
JMP_BASE = 0x4EB8
EA_MASK = 0xFFF8
REGISTER_MASK = 0x0007
LIBRARY_BASE_REGISTER = 6

MOVE_IMMEDIATE_LONG = 0x203C
"""``MOVE.L #imm,D0``: the six byte immediate-load shape."""

INDEXED_LOAD_A0 = 0x2068
INDEXED_LOADS = frozenset({0x2068, 0x2069, 0x206A})

TRAP_0 = 0x4E40
TRAP_1 = 0x4E41
STOP = 0x4E72
NOP = 0x4E71
RTE = 0x4E73
RTS = 0x4E75
RTR = 0x4E77

EXEC_BASE_ADDRESS = 0x00000004
CHIP_RAM_RANGE = (0x00C00000, 0x00DFFFFF)
ROM_START = 0x00F80000
SYSTEM_VECTORS = frozenset({0x68, 0x84, 0x4A})
TCB_OFFSETS = frozenset({0x0C, 0x10, 0x14, 0x18, 0x1C, 0x20})
LIST_OFFSETS = frozenset({0x00, 0x04, 0x08})
INTERRUPT_REGISTERS = frozenset({0x00DFF09A, 0x00DFF09C})  # INTENA, INTREQ
VECTOR_PAGE_END = 0x00000100
CODE_SEGMENT_END = 0x01FFFFFF
STACK_OPCODES = frozenset({RTS, RTR, NOP, STOP})


class ByteWindow:
    """Bounds-checked view of a code hunk at one cursor position."""

    __slots__ = ("_data", "pos")

    def __init__(self, data: bytes, pos: int) -> None:
        self._data = data
        self.pos = pos

    @property
    def remaining(self) -> int:
        return len(self._data) - self.pos

    def word(self, delta: int = 0) -> int | None:
        """Return the big-endian word at ``pos + delta`` or ``None`` if outside."""

        start = self.pos + delta
        if start < 0 or start + 2 > len(self._data):
            return None
        return (self._data[start] << 8) | self._data[start + 1]

    def byte(self, delta: int) -> int | None:
        index = self.pos + delta
        if index < 0 or index >= len(self._data):
            return None
        return self._data[index]

    def displacement(self) -> int:
        """Signed 16-bit displacement following the opcode word."""

        return int.from_bytes(
            self._data[self.pos + 2 : self.pos + 4], "big", signed=True
        )

    def immediate(self) -> int | None:
        """Return the longword of a ``MOVE.L #imm`` at the cursor, if present."""

        if self.remaining < IMMEDIATE_LOAD_LENGTH:
            return None
        if self.word() != MOVE_IMMEDIATE_LONG:
            return None
        return int.from_bytes(self._data[self.pos + 2 : self.pos + 6], "big")


def is_library_call(window: ByteWindow) -> bool:
    op = window.word()
    return (
        op is not None
        and (op & EA_MASK) == JSR_BASE
        and (op & REGISTER_MASK) == LIBRARY_BASE_REGISTER
    )


def is_library_jump(window: ByteWindow) -> bool:
    op = window.word()
    return (
        op is not None
        and (op & EA_MASK) == JMP_BASE
        and (op & REGISTER_MASK) == LIBRARY_BASE_REGISTER
    )


def is_execbase_ref(window: ByteWindow) -> bool:
    return window.immediate() == EXEC_BASE_ADDRESS


def is_chipmem_ref(window: ByteWindow) -> bool:
    addr = window.immediate()
    low, high = CHIP_RAM_RANGE
    return addr is not None and low <= addr <= high


def is_rom_ref(window: ByteWindow) -> bool:
    addr = window.immediate()
    return addr is not None and addr >= ROM_START


def is_vector_patch(window: ByteWindow) -> bool:
    return window.immediate() in SYSTEM_VECTORS


def is_trap_call(window: ByteWindow) -> bool:
    return window.word() in (TRAP_0, TRAP_1)


def is_tcb_access(window: ByteWindow) -> bool:
    if window.immediate() in TCB_OFFSETS:
        return True
    return window.word() == INDEXED_LOAD_A0 and window.byte(2) in TCB_OFFSETS


def is_list_manipulation(window: ByteWindow) -> bool:
    if window.immediate() in LIST_OFFSETS:
        return True
    return window.word() in INDEXED_LOADS and window.byte(2) in LIST_OFFSETS


def is_int_level_manip(window: ByteWindow) -> bool:
    if window.immediate() in INTERRUPT_REGISTERS:
        return True
    # RTS directly after RTE; no match when the RTE would precede the hunk
    return window.word() == RTS and window.word(-2) == RTE


def is_vbr_manipulation(window: ByteWindow) -> bool:
    if window.word() == RTE:
        return True
    addr = window.immediate()
    return addr is not None and addr <= VECTOR_PAGE_END


def is_self_modifying(window: ByteWindow) -> bool:
    addr = window.immediate()
    if addr is not None and addr <= CODE_SEGMENT_END:
        return True
    # any index byte counts
    return window.word() in INDEXED_LOADS


def is_stack_manipulation(window: ByteWindow) -> bool:
    return window.word() in STACK_OPCODES


@dataclass(frozen=True)
class PatternDetector:
    """A fixed-severity detector and the stride it consumes on a match."""

    category: str
    description: str
    severity: int
    stride: int
    matches: Callable[[ByteWindow], bool]


PATTERN_DETECTORS: Sequence[PatternDetector] = (
    PatternDetector(
        "ExecBase Access", "Direct access to ExecBase (4.W)", 25, 6, is_execbase_ref
    ),
    PatternDetector(
        "Chip RAM Access", "Direct access to Chip RAM region", 30, 6, is_chipmem_ref
    ),
    PatternDetector("ROM Access", "Direct access to ROM region", 25, 6, is_rom_ref),
    PatternDetector(
        "Vector Patching", "Attempt to patch system vector", 35, 6, is_vector_patch
    ),
    PatternDetector("Trap Call", "Use of TRAP instruction", 20, 2, is_trap_call),
    PatternDetector(
        "TCB Access", "Direct access to Task Control Block", 30, 6, is_tcb_access
    ),
    PatternDetector(
        "List Manipulation",
        "Direct manipulation of system lists",
        25,
        6,
        is_list_manipulation,
    ),
    PatternDetector(
        "Interrupt Manipulation",
        "Direct manipulation of interrupt levels",
        35,
        6,
        is_int_level_manip,
    ),
    PatternDetector(
        "VBR Manipulation",
        "Attempt to modify Vector Base Register",
        40,
        2,
        is_vbr_manipulation,
    ),
    PatternDetector(
        "Self-Modifying Code",
        "Code attempts to modify itself",
        45,
        6,
        is_self_modifying,
    ),
    PatternDetector(
        "Stack Manipulation",
        "Unusual stack manipulation detected",
        20,
        2,
        is_stack_manipulation,
    ),
)
"""Fixed-severity detectors in priority order, tried after the library checks."""

LIBRARY_STRIDE = 4
LIBRARY_CATEGORIES: Sequence[tuple[str, Callable[[ByteWindow], bool]]] = (
    ("Library Call", is_library_call),
    ("Library Jump", is_library_jump),
)


def _library_category(window: ByteWindow) -> str | None:
    for category, matches in LIBRARY_CATEGORIES:
        if matches(window):
            return category
    return None


def _library_finding(
    category: str, window: ByteWindow, symbols: SymbolTable, offset: int
) -> Finding | None:
    name = symbols.lookup(window.displacement())
    if name is None:
        return None
    weight = weight_for(name)
    if weight is None:
        return None
    return Finding(
        category=category, description=name, byte_offset=offset, severity=weight
    )


def scan_segment(
    payload: bytes, base_offset: int, symbols: SymbolTable
) -> list[Finding]:
    """
    Scan one code hunk and return its findings in scan order.

    ``base_offset`` is the cumulative size of the code hunks scanned before this
    one, so every ``byte_offset`` is relative to the start of the first hunk.
    """

    findings: list[Finding] = []
    window = ByteWindow(payload, 0)
    while window.remaining >= MIN_WINDOW:
        offset = base_offset + window.pos

        category = _library_category(window)
        if category is not None:
            finding = _library_finding(category, window, symbols, offset)
            if finding is not None:
                findings.append(finding)
            window.pos += LIBRARY_STRIDE
            continue

        for detector in PATTERN_DETECTORS:
            if detector.matches(window):
                findings.append(
                    Finding(
                        category=detector.category,
                        description=detector.description,
                        byte_offset=offset,
                        severity=detector.severity,
                    )
                )
                window.pos += detector.stride
                break
        else:
            window.pos += WORD
    return findings
