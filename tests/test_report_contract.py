"""Ensure the report schema accepts its examples and real scanner output."""

from __future__ import annotations

import pytest

from hunkscan.cli import report_contract
from hunkscan.cli.report_contract import ReportContractError
from hunkscan.domain.models import Finding
from hunkscan.services.risk_report import DiagnosticReport


@pytest.mark.parametrize("kind", report_contract.EXAMPLE_KINDS)
def test_examples_satisfy_report_contract(kind: str) -> None:
    report_contract.validate_report(report_contract.load_example(kind))


def test_validator_is_built_once() -> None:
    assert report_contract.report_validator() is report_contract.report_validator()


def test_report_mapping_validates() -> None:
    report = DiagnosticReport("prog", sha256="f" * 64)
    report.record_hunk(12)
    report.add_finding(Finding("Library Call", "SetFunction", 0, 40))

    report_contract.validate_report(report.to_mapping())


def test_unknown_category_is_rejected() -> None:
    report = DiagnosticReport("prog", sha256="f" * 64)
    report.add_finding(Finding("Made Up", "nothing", 0, 5))

    with pytest.raises(ReportContractError):
        report_contract.validate_report(report.to_mapping())


def test_missing_digest_is_rejected() -> None:
    with pytest.raises(ReportContractError):
        report_contract.validate_report(DiagnosticReport("prog").to_mapping())
