from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import best_match

from ..errors import ConfigMissingError, ParseError, WorkbookIOError
from ..models.config_models import FieldMapping, MappingConfig, SheetSpec

"""Mapping configuration loader.

Responsibilities:
- Load the YAML mapping description (file or text)
- Validate structure against mapping_schema.json
- Build the immutable MappingConfig; the only default applied is stopRow
  (left as None, resolved per source sheet by the mapper)
"""

__all__ = [
    "SCHEMA_PATH",
    "load_config",
    "parse_config",
]

SCHEMA_PATH = Path(__file__).parent / "mapping_schema.json"

_schema_cache: dict[str, Any] | None = None


def _load_schema() -> dict[str, Any]:
    global _schema_cache
    if _schema_cache is None:
        try:
            _schema_cache = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:  # pragma: no cover (packaging error)
            raise WorkbookIOError(f"invalid schema file {SCHEMA_PATH}: {e}") from e
    return _schema_cache


def _validate_config_schema(data: Any) -> None:
    """Validate raw YAML data against the mapping schema.

    Raises:
        ParseError: with the most relevant validation message and the path
            of the offending key (e.g. ``sheets/people/sheet``)
    """
    schema = _load_schema()
    validator = jsonschema.Draft202012Validator(schema)
    error = best_match(validator.iter_errors(data))
    if error is None:
        return
    location = "/".join(str(p) for p in error.absolute_path)
    if location:
        raise ParseError(f"config validation failed at '{location}': {error.message}")
    raise ParseError(f"config validation failed: {error.message}")


def _entries(value: Any) -> Iterable[tuple[str, Any]]:
    # sheets / mapping may be written either as a YAML mapping or a list
    if isinstance(value, Mapping):
        return ((str(k), v) for k, v in value.items())
    if isinstance(value, list):
        return ((str(i), v) for i, v in enumerate(value))
    return ()


def _build_sheet_spec(key: str, raw: Mapping[str, Any]) -> SheetSpec:
    sheet = raw["sheet"]
    mapping = tuple(
        FieldMapping(source=e["source"], target=str(e["target"]).replace("$", "").upper())
        for _, e in _entries(sheet.get("mapping"))
    )
    ref = sheet["referenceColumn"]
    return SheetSpec(
        key=key,
        source_sheet_name=sheet["name"],
        start_row=sheet["startRow"],
        stop_row=sheet.get("stopRow"),
        reference_column=ref.upper() if isinstance(ref, str) else ref,
        record_state=sheet.get("recordState"),
        target_domain=sheet.get("domain"),
        field_mapping=mapping,
    )


def parse_config(text: str) -> MappingConfig:
    """Parse mapping YAML text into a MappingConfig.

    Raises:
        ParseError: malformed YAML, non-mapping document, or schema violation
            (missing modelSheetName / name / startRow / referenceColumn, ...)
    """
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ParseError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ParseError("mapping configuration must be a YAML mapping")

    _validate_config_schema(data)

    sheets = tuple(_build_sheet_spec(key, raw) for key, raw in _entries(data["sheets"]))
    return MappingConfig(
        model_sheet_name=data["modelSheetName"],
        sheets=sheets,
        generated_file_name=data.get("generatedFileName"),
    )


def load_config(path: Path) -> MappingConfig:
    if not path.exists():
        raise ConfigMissingError(f"Mapping file not found: {path}")
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise WorkbookIOError(f"cannot read mapping file {path}: {e}") from e
    return parse_config(text)
