from __future__ import annotations

from datetime import datetime
from pathlib import Path

import pytest
from openpyxl import load_workbook

from rowmapper.cli import main as cli_main
from rowmapper.logging.init import reset_logging

"""End-to-end batch runs against real .xlsx files."""

MAPPING = """modelSheetName: Template
sheets:
  people:
    sheet:
      name: People
      domain: HR
      startRow: 2
      referenceColumn: A
      recordState: DRAFT
      mapping:
        - {source: B, target: C10}
        - {source: C, target: C11}
        - {source: D, target: C12}
  projects:
    sheet:
      name: Projects
      startRow: 3
      stopRow: 5
      referenceColumn: B
      mapping:
        - {source: A, target: C10}
        - {source: A1, target: B2}
"""


@pytest.fixture()
def run_files(temp_workdir: Path, workbook_factory) -> dict[str, Path]:
    template = workbook_factory({
        "Cover": [["Index"]],
        "Template": [["Record sheet"], [None, "label"]],
    })
    template["Template"]["E6"] = "TEMPLATE-STATE"
    template["Template"].sheet_view.tabSelected = True
    template.active = 1
    template.save(temp_workdir / "data" / "template.xlsx")

    source = workbook_factory({
        "People": [
            ["id", "name", "age", "joined"],
            ["P-001", "Alice", 31, datetime(2020, 1, 15)],
            ["P-002", "Bob", 42.5, datetime(2021, 6, 1)],
            [None, "Ghost", 0, None],
            ["P-004", "Never", 1, None],
        ],
        "Projects": [
            ["Project list"],
            ["budget", "code"],
            [1000, "PRJ-A"],
            [2500, "PRJ-B"],
            [9999, "PRJ-C"],
        ],
    })
    source.save(temp_workdir / "data" / "source.xlsx")

    mapping = temp_workdir / "config" / "mapping.yml"
    mapping.write_text(MAPPING, encoding="utf-8")
    return {
        "template": temp_workdir / "data" / "template.xlsx",
        "source": temp_workdir / "data" / "source.xlsx",
        "mapping": mapping,
        "output": temp_workdir / "out" / "generated.xlsx",
    }


def _run(files: dict[str, Path], *extra: str) -> int:
    reset_logging()
    return cli_main([
        "--templateFile", str(files["template"]),
        "--sourceFile", str(files["source"]),
        "--mappingFile", str(files["mapping"]),
        "--outputFile", str(files["output"]),
        *extra,
    ])


def test_full_run_generates_one_sheet_per_row(run_files, capsys):
    assert _run(run_files, "--verbose") == 0
    out = capsys.readouterr().out
    assert "SUMMARY sheets=2 clones=4" in out

    wb = load_workbook(run_files["output"])
    assert wb.sheetnames == ["Cover", "Template", "P-001", "P-002", "PRJ-A", "PRJ-B"]

    alice = wb["P-001"]
    assert alice["C10"].value == "Alice"
    assert alice["C11"].value == 31
    assert alice["C12"].value == datetime(2020, 1, 15)
    assert alice["E6"].value == "DRAFT"
    assert alice["C9"].value == "HR"
    assert alice["A1"].value == "Record sheet"
    assert wb["P-002"]["C11"].value == 42.5

    prj = wb["PRJ-A"]
    assert prj["C10"].value == 1000
    assert prj["B2"].value == "Project list"
    # no recordState on this spec: template value kept
    assert prj["E6"].value == "TEMPLATE-STATE"
    assert prj["C9"].value is None
    assert wb["PRJ-B"]["C10"].value == 2500

    # template sheet itself is left as is
    assert wb["Template"]["E6"].value == "TEMPLATE-STATE"


def test_output_opens_on_first_sheet(run_files):
    assert _run(run_files) == 0
    wb = load_workbook(run_files["output"])
    assert wb.active.title == "Cover"
    selected = [ws.title for ws in wb.worksheets if ws.sheet_view.tabSelected]
    assert selected == ["Cover"]
    for ws in wb.worksheets[:2]:
        assert ws.sheet_view.selection[0].activeCell == "A1"


def test_formula_results_are_copied_from_source(run_files, temp_workdir, workbook_factory):
    # openpyxl never computes formulas: a freshly written source has no cached value
    source = workbook_factory({"People": [["id", "name"], ["P-9", "=UPPER(\"x\")"]], "Projects": [[None]]})
    source.save(run_files["source"])
    assert _run(run_files) == 0
    wb = load_workbook(run_files["output"])
    assert wb["P-9"]["C10"].value is None
