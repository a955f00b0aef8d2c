"""Risk accumulation, verdict classification and text rendering."""

from __future__ import annotations

from collections import deque
from typing import Iterable

from ..domain.models import Finding, Verdict

SAFE_THRESHOLD = 20
REVIEW_THRESHOLD = 50


def classify_score(score: int) -> Verdict:
    """Map a total risk score onto its verdict bucket."""

    if score <= SAFE_THRESHOLD:
        return Verdict.LIKELY_SAFE
    if score <= REVIEW_THRESHOLD:
        return Verdict.NEEDS_REVIEW
    return Verdict.PROBABLY_BREAKS


class DiagnosticReport:
    """
    Findings and total score for one scanned file.

    Findings are prepended as they arrive, so iteration yields the most recent
    finding first. ``total_score`` always equals the sum of their severities.
    """

    def __init__(self, filename: str, sha256: str = "") -> None:
        self.filename = filename
        self.sha256 = sha256
        self.code_hunks = 0
        self.bytes_scanned = 0
        self.total_score = 0
        self._findings: deque[Finding] = deque()

    def add_finding(self, finding: Finding) -> None:
        self._findings.appendleft(finding)
        self.total_score += finding.severity

    def add_findings(self, findings: Iterable[Finding]) -> None:
        for finding in findings:
            self.add_finding(finding)

    def record_hunk(self, size: int) -> None:
        self.code_hunks += 1
        self.bytes_scanned += size

    @property
    def findings(self) -> tuple[Finding, ...]:
        return tuple(self._findings)

    @property
    def finding_count(self) -> int:
        return len(self._findings)

    @property
    def verdict(self) -> Verdict:
        return classify_score(self.total_score)

    def to_mapping(self) -> dict[str, object]:
        return {
            "filename": self.filename,
            "sha256": self.sha256,
            "code_hunks": self.code_hunks,
            "bytes_scanned": self.bytes_scanned,
            "total_score": self.total_score,
            "finding_count": self.finding_count,
            "verdict": self.verdict.label,
            "findings": [finding.to_mapping() for finding in self._findings],
        }


def render_report(report: DiagnosticReport) -> str:
    """Render the detailed human-readable report for one file."""

    lines = [
        "",
        "=== Compatibility Analysis Report ===",
        f"File: {report.filename}",
        f"SHA-256: {report.sha256}",
        f"Code Hunks: {report.code_hunks} ({report.bytes_scanned} bytes)",
        f"Total Risk Score: {report.total_score}",
        f"Findings: {report.finding_count}",
        "",
    ]
    if not report.finding_count:
        lines.append("No compatibility issues found.")
        lines.append("")
    else:
        lines.append("Detailed Findings:")
        lines.append("-----------------")
        for finding in report.findings:
            lines.append(f"[{finding.category}] at offset 0x{finding.byte_offset:08x}")
            lines.append(f"  Severity: {finding.severity}")
            lines.append(f"  Issue: {finding.description}")
            lines.append("")

    verdict = report.verdict
    lines.extend(
        [
            "Compatibility Assessment:",
            "------------------------",
            f"Status: {verdict.status}",
            verdict.explanation,
            "",
        ]
    )
    return "\n".join(lines) + "\n"


def render_summary_line(filename: str, score: int) -> str:
    """One-line verdict summary printed after each detailed report."""

    return f"{filename:<28}  Score:{score:3d}  -> {classify_score(score).label}\n"
