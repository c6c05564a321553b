from __future__ import annotations

import io
from pathlib import Path

from openpyxl import load_workbook

from rowmapper.excel.workbook import set_active_cell
from rowmapper.services.emitter import MIME_TYPES, emit_bytes, emit_file, finalize_workbook


def _selected(ws) -> bool:
    return bool(ws.sheet_view.tabSelected)


def test_finalize_workbook_activates_first_sheet(workbook_factory):
    wb = workbook_factory({"Cover": [[1]], "Template": [[2]], "Rec1": [[3]]})
    for ws in wb.worksheets:
        ws.sheet_view.tabSelected = True
        set_active_cell(ws, "B2")
    wb.active = 2

    finalize_workbook(wb)

    assert wb.active.title == "Cover"
    assert [_selected(ws) for ws in wb.worksheets] == [True, False, False]
    assert wb["Cover"].sheet_view.selection[0].activeCell == "A1"
    assert wb["Template"].sheet_view.selection[0].activeCell == "A1"
    # only the first two sheets are reset
    assert wb["Rec1"].sheet_view.selection[0].activeCell == "B2"


def test_finalize_single_sheet_workbook(workbook_factory):
    wb = workbook_factory({"Only": [[1]]})
    finalize_workbook(wb)
    assert wb.active.title == "Only"


def test_emit_bytes_is_loadable(workbook_factory):
    payload = emit_bytes(workbook_factory({"Cover": [["c"]], "Rec1": [["r"]]}))
    wb = load_workbook(io.BytesIO(payload))
    assert wb.sheetnames == ["Cover", "Rec1"]
    assert wb.active.title == "Cover"


def test_emit_file(temp_workdir: Path, workbook_factory):
    target = temp_workdir / "out" / "generated.xlsx"
    assert emit_file(workbook_factory({"Cover": [["c"]]}), target) == target
    assert load_workbook(target)["Cover"]["A1"].value == "c"


def test_mime_types():
    assert MIME_TYPES["xlsx"].endswith("spreadsheetml.sheet")
