from __future__ import annotations

import logging
import time
from typing import Any

from openpyxl import Workbook
from openpyxl.cell.cell import Cell, MergedCell
from openpyxl.utils import column_index_from_string
from openpyxl.worksheet.worksheet import Worksheet

from ..errors import MappingError, ParseError
from ..excel.workbook import clone_sheet, get_sheet, set_active_cell
from ..models.config_models import FieldMapping, MappingConfig, SheetSpec
from ..models.processing_result import MappingResult, SheetResult
from .progress import RowProgress

logger = logging.getLogger(__name__)

"""Row mapper: one cloned template sheet per source row.

map_sheet() runs the algorithm for a single SheetSpec and raises on failure.
map_rows() runs every SheetSpec of a MappingConfig in order and never raises
a MappingError; the first failure ends the run and is returned on the
MappingResult. Both the CLI and the interactive page go through map_rows().
"""

__all__ = [
    "RECORD_STATE_CELL",
    "DOMAIN_CELL",
    "MAX_SHEET_TITLE",
    "effective_stop_row",
    "map_sheet",
    "map_rows",
]

# Fixed annotation cells on every generated clone
RECORD_STATE_CELL = "E6"
DOMAIN_CELL = "C9"

# Excel rejects longer sheet titles when opening the file
MAX_SHEET_TITLE = 31


def _column_index(ref: str | int) -> int:
    if isinstance(ref, int):
        return ref
    return column_index_from_string(ref.upper())


def _is_empty(value: Any) -> bool:
    """End-of-data test for the reference column.

    None, "", False and numeric zero end the rows; the string "0" does not.
    """
    if value is None or value is False or value == "":
        return True
    return isinstance(value, (int, float)) and value == 0


def _read_source(ws: Worksheet, row: int, field: FieldMapping) -> Cell:
    fixed = field.fixed_source
    if fixed is not None:
        col, fixed_row = fixed
        return ws.cell(row=fixed_row, column=column_index_from_string(col))
    return ws.cell(row=row, column=_column_index(field.source))


def _write_target(ws: Worksheet, address: str, value: Any, *, as_text: bool = False) -> None:
    """Write value; a merged target is written into its range's top-left cell.

    ``as_text`` keeps a string starting with "=" a string instead of a formula.
    """
    cell = ws[address]
    if isinstance(cell, MergedCell):
        for rng in ws.merged_cells.ranges:
            if cell.coordinate in rng:
                cell = ws.cell(row=rng.min_row, column=rng.min_col)
                break
    cell.value = value
    if as_text and isinstance(value, str):
        cell.data_type = "s"


def effective_stop_row(spec: SheetSpec, source: Worksheet) -> int:
    """Exclusive upper bound of the row range for ``spec``.

    stopRow when configured, otherwise one past the last populated row of
    the source sheet.
    """
    if spec.stop_row is not None:
        return spec.stop_row
    return source.max_row + 1


def _clone_title(value: Any, row: int) -> str:
    title = str(value)
    if len(title) > MAX_SHEET_TITLE:
        raise ParseError(
            f"reference value '{title}' at row {row} is longer than {MAX_SHEET_TITLE} characters"
        )
    return title


def map_sheet(
    spec: SheetSpec,
    model_sheet_name: str,
    template: Workbook,
    source: Workbook,
    *,
    progress_enabled: bool = False,
) -> SheetResult:
    """Clone the model sheet once per qualifying source row of ``spec``.

    Iteration starts at ``spec.start_row`` and stops before the effective
    stop row, or at the first row whose reference cell is empty.

    Raises:
        SheetNotFoundError: model sheet or source sheet missing
        DuplicateSheetError: a clone name already exists in ``template``
        ParseError: reference value unusable as a sheet title
    """
    model_ws = get_sheet(template, model_sheet_name, label="template")
    source_ws = get_sheet(source, spec.source_sheet_name, label="source")

    stop = effective_stop_row(spec, source_ws)
    ref_col = _column_index(spec.reference_column)
    logger.debug(
        f"sheet '{spec.source_sheet_name}': rows {spec.start_row}..{stop - 1} ref_col={spec.reference_column}"
    )

    clones: list[str] = []
    rows_read = 0
    with RowProgress(stop - spec.start_row, description=spec.source_sheet_name, enabled=progress_enabled) as progress:
        for i in range(spec.start_row, stop):
            progress.advance(i)
            rows_read += 1
            reference = source_ws.cell(row=i, column=ref_col).value
            if _is_empty(reference):
                logger.debug(f"sheet '{spec.source_sheet_name}': empty reference at row {i}, stopping")
                break

            try:
                title = _clone_title(reference, i)
                try:
                    clone = clone_sheet(template, model_ws, title)
                except ValueError as e:
                    raise ParseError(f"reference value '{title}' at row {i} is not a valid sheet name: {e}") from e

                if spec.record_state:
                    _write_target(clone, RECORD_STATE_CELL, spec.record_state, as_text=True)
                if spec.target_domain:
                    _write_target(clone, DOMAIN_CELL, spec.target_domain, as_text=True)

                for field in spec.field_mapping:
                    try:
                        src = _read_source(source_ws, i, field)
                        _write_target(clone, field.target, src.value, as_text=src.data_type == "s")
                    except ValueError as e:  # IllegalCharacterError, out-of-grid address
                        raise ParseError(f"cannot copy {field.source} -> {field.target}: {e}") from e

                set_active_cell(clone)
            except MappingError as e:
                e.row = i
                raise
            clones.append(title)

    return SheetResult(
        source_sheet_name=spec.source_sheet_name,
        clones=tuple(clones),
        rows_read=rows_read,
    )


def map_rows(
    config: MappingConfig,
    template: Workbook,
    source: Workbook,
    *,
    verbose: bool = False,
) -> MappingResult:
    """Apply every SheetSpec of ``config`` to ``template`` in configuration order.

    ``template`` is mutated in place. On the first failure the run stops and
    the returned result carries the ErrorRecord (``workbook`` is None so a
    half-populated workbook is never emitted).
    """
    started = time.perf_counter()
    done: list[SheetResult] = []
    for spec in config.sheets:
        try:
            result = map_sheet(
                spec,
                config.model_sheet_name,
                template,
                source,
                progress_enabled=verbose,
            )
        except MappingError as e:
            if not e.sheet:
                e.sheet = spec.source_sheet_name
            record = e.to_record()
            logger.debug(f"sheet spec '{spec.key}' failed: {record.describe()}")
            return MappingResult(
                workbook=None,
                sheets=tuple(done),
                error=record,
                elapsed_seconds=time.perf_counter() - started,
            )
        logger.info(f"sheet '{spec.source_sheet_name}': {result.clone_count} sheet(s) generated")
        done.append(result)

    return MappingResult(
        workbook=template,
        sheets=tuple(done),
        elapsed_seconds=time.perf_counter() - started,
    )
