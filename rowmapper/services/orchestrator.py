from __future__ import annotations

import logging
import time
from dataclasses import replace
from pathlib import Path

from ..errors import MappingError
from ..excel.workbook import open_workbook
from ..models.processing_result import MappingResult
from ..models.run_inputs import RunInputs
from .emitter import emit_bytes, emit_file
from .mapper import map_rows

logger = logging.getLogger(__name__)

"""Run orchestration shared by the batch CLI and the interactive page.

open template + source -> map_rows -> emit (file or bytes). Every step's
failure ends up as MappingResult.error; callers never need to catch
MappingError themselves.
"""

__all__ = [
    "run_mapping",
    "process_files",
    "generate_bytes",
]


def _failed(error: MappingError, started: float) -> MappingResult:
    return MappingResult(
        workbook=None,
        error=error.to_record(),
        elapsed_seconds=time.perf_counter() - started,
    )


def run_mapping(inputs: RunInputs, *, verbose: bool = False) -> MappingResult:
    """Open both workbooks and map every SheetSpec; nothing is written."""
    started = time.perf_counter()
    try:
        template = open_workbook(inputs.template, label="template")
        source = open_workbook(inputs.source, label="source", data_only=True)
    except MappingError as e:
        return _failed(e, started)
    logger.debug(f"template sheets={template.sheetnames} source sheets={source.sheetnames}")

    result = map_rows(inputs.config, template, source, verbose=verbose)
    return replace(result, elapsed_seconds=time.perf_counter() - started)


def process_files(inputs: RunInputs, *, verbose: bool = False) -> MappingResult:
    """Batch pipeline: map, then write ``inputs.output_name`` atomically."""
    started = time.perf_counter()
    result = run_mapping(inputs, verbose=verbose)
    if not result.ok or result.workbook is None:
        return result
    output = Path(inputs.output_name)
    try:
        emit_file(result.workbook, output)
    except MappingError as e:
        return _failed(e, started)
    logger.info(f"File successfully generated: {output}")
    return replace(result, output=str(output), elapsed_seconds=time.perf_counter() - started)


def generate_bytes(inputs: RunInputs) -> tuple[MappingResult, bytes | None]:
    """Interactive pipeline: map, then serialize in memory for download."""
    started = time.perf_counter()
    result = run_mapping(inputs)
    if not result.ok or result.workbook is None:
        return result, None
    try:
        payload = emit_bytes(result.workbook)
    except MappingError as e:
        return _failed(e, started), None
    return replace(result, output=inputs.output_name), payload
