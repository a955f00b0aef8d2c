"""Core entities without I/O for the HUNK compatibility scanner."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True)
class Finding:
    """One risky byte pattern located inside a code hunk."""

    category: str
    description: str
    byte_offset: int
    severity: int

    def to_mapping(self) -> dict[str, object]:
        return {
            "category": self.category,
            "description": self.description,
            "byte_offset": self.byte_offset,
            "severity": self.severity,
        }


class Verdict(Enum):
    """Verdict buckets derived from the total risk score."""

    LIKELY_SAFE = "Likely Safe"
    NEEDS_REVIEW = "Needs Review"
    PROBABLY_BREAKS = "Probably Breaks"

    @property
    def label(self) -> str:
        return self.value

    @property
    def status(self) -> str:
        """Upper-case status line used in the detailed report."""

        return self.value.upper()

    @property
    def explanation(self) -> str:
        return _EXPLANATIONS[self]


_EXPLANATIONS = {
    Verdict.LIKELY_SAFE: (
        "This binary appears to be compatible with hardened OS mode."
    ),
    Verdict.NEEDS_REVIEW: (
        "This binary may have compatibility issues that require manual review."
    ),
    Verdict.PROBABLY_BREAKS: (
        "This binary is likely incompatible with hardened OS mode."
    ),
}
