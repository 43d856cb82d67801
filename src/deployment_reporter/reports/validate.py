from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from typing import Any, Mapping

import jsonschema
from jsonschema import Draft202012Validator
from jsonschema.exceptions import ValidationError


SCHEMA_DIR = Path(__file__).resolve().parent / "schemas"
DEFAULT_SCHEMA_NAME = "deployment_report_v1.schema.json"


def load_schema(schema_path: str | Path | None = None) -> dict[str, Any]:
    path = Path(schema_path) if schema_path is not None else SCHEMA_DIR / DEFAULT_SCHEMA_NAME
    return json.loads(path.read_text(encoding="utf-8"))


@lru_cache(maxsize=None)
def _default_validator() -> Draft202012Validator:
    return Draft202012Validator(load_schema(), format_checker=jsonschema.FormatChecker())


def validate_deployment_report(
    report: Mapping[str, Any],
    *,
    schema_path: str | Path | None = None,
) -> None:
    """Validate a deployment report JSON object against the v1 schema.

    Raises:
      jsonschema.exceptions.ValidationError if invalid.
    """

    if schema_path is None:
        validator = _default_validator()
    else:
        validator = Draft202012Validator(
            load_schema(schema_path), format_checker=jsonschema.FormatChecker()
        )
    validator.validate(dict(report))

    _validate_content_order(dict(report))


def _validate_content_order(report: Mapping[str, Any]) -> None:
    for entry in report.get("deployments", []):
        if not isinstance(entry, Mapping):
            continue
        content = entry.get("content")
        if not isinstance(content, Mapping):
            continue
        keys = list(content)
        if keys != sorted(keys):
            raise ValidationError(
                f"Content keys of {entry.get('artifact')!r} are not in ascending order"
            )


def validate_deployment_report_file(
    json_path: str | Path,
    *,
    schema_path: str | Path | None = None,
) -> dict[str, Any]:
    """Load and validate a report JSON file; returns the parsed JSON."""

    obj = json.loads(Path(json_path).read_text(encoding="utf-8"))
    validate_deployment_report(obj, schema_path=schema_path)
    return obj
