from __future__ import annotations

from pathlib import Path

from openpyxl import Workbook

from ..excel.workbook import DEFAULT_ACTIVE_CELL, save_workbook, set_active_cell, workbook_to_bytes

"""Output emitter: final view cleanup + serialization of the mutated template."""

__all__ = [
    "MIME_TYPES",
    "finalize_workbook",
    "emit_bytes",
    "emit_file",
]

MIME_TYPES = {
    "xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "xlsm": "application/vnd.ms-excel.sheet.macroEnabled.12",
}


def finalize_workbook(wb: Workbook) -> None:
    """Make the first sheet the active one and reset the first two sheets' cursor.

    Clones inherit the template's tab selection, so every other sheet is
    deselected to keep Excel from opening with grouped sheets.
    """
    sheets = wb.worksheets
    if not sheets:
        return
    for ws in sheets:
        ws.sheet_view.tabSelected = False
    wb.active = 0
    sheets[0].sheet_view.tabSelected = True
    for ws in sheets[:2]:
        set_active_cell(ws, DEFAULT_ACTIVE_CELL)


def emit_bytes(wb: Workbook) -> bytes:
    finalize_workbook(wb)
    return workbook_to_bytes(wb)


def emit_file(wb: Workbook, path: Path) -> Path:
    finalize_workbook(wb)
    return save_workbook(wb, path)
