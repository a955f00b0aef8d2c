"""JSON contract every diagnostic report must satisfy before it is printed."""

from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from typing import Any, Mapping

from jsonschema import Draft7Validator, ValidationError

SCHEMAS = Path(__file__).resolve().parents[1] / "schemas"
REPORT_SCHEMA_PATH = SCHEMAS / "diagnostic_report_schema_v0.1.json"
EXAMPLE_KINDS = ("min", "findings")

ReportContractError = ValidationError


@lru_cache(maxsize=None)
def report_validator() -> Draft7Validator:
    schema = json.loads(REPORT_SCHEMA_PATH.read_text(encoding="utf-8"))
    Draft7Validator.check_schema(schema)
    return Draft7Validator(schema)


def validate_report(mapping: Mapping[str, Any]) -> None:
    """Raise :data:`ReportContractError` for the first violation found."""

    report_validator().validate(mapping)


def load_example(kind: str) -> Mapping[str, Any]:
    """Bundled sample report; ``kind`` is one of :data:`EXAMPLE_KINDS`."""

    path = SCHEMAS / "examples" / f"diagnostic_report_example_{kind}.json"
    return json.loads(path.read_text(encoding="utf-8"))
