# Shared pytest fixtures
from __future__ import annotations
import tempfile
from pathlib import Path
from typing import Any

import pytest
from openpyxl import Workbook


def make_workbook(sheets: dict[str, list[list[Any]]]) -> Workbook:
    """Build an in-memory workbook; rows are written from A1 downwards."""
    wb = Workbook()
    wb.remove(wb.active)
    for name, rows in sheets.items():
        ws = wb.create_sheet(name)
        for r, row in enumerate(rows, start=1):
            for c, value in enumerate(row, start=1):
                if value is not None:
                    ws.cell(row=r, column=c, value=value)
    return wb


def save_workbook_file(path: Path, sheets: dict[str, list[list[Any]]]) -> Path:
    make_workbook(sheets).save(path)
    return path


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "out").mkdir()
        monkeypatch.chdir(p)
        yield p


@pytest.fixture()
def sample_config_yaml() -> str:
    return """modelSheetName: Template
sheets:
  people:
    sheet:
      name: Data
      startRow: 2
      referenceColumn: A
      mapping:
        - source: B
          target: C10
        - source: C
          target: D12
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "mapping.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def template_rows() -> dict[str, list[list[Any]]]:
    return {
        "Cover": [["Generated records"]],
        "Template": [["Record"], [None, "Name:"]],
    }


@pytest.fixture()
def source_rows() -> dict[str, list[list[Any]]]:
    return {
        "Data": [
            ["ref", "name", "amount"],
            ["Rec1", "x", 10],
            ["Rec2", "y", 20.5],
            [None, "z", 30],
            ["Rec4", "w", 40],
        ]
    }


@pytest.fixture()
def workbook_files(temp_workdir: Path, template_rows, source_rows) -> dict[str, Path]:
    template = save_workbook_file(temp_workdir / "data" / "template.xlsx", template_rows)
    source = save_workbook_file(temp_workdir / "data" / "source.xlsx", source_rows)
    return {"template": template, "source": source}


@pytest.fixture()
def workbook_factory():
    return make_workbook


@pytest.fixture()
def isolated_env(monkeypatch):
    """Private copy of os.environ without ROWMAPPER_* variables.

    python-dotenv writes into os.environ; the copy keeps those writes from
    leaking into other tests.
    """
    import os

    env = {k: v for k, v in os.environ.items() if not k.startswith("ROWMAPPER_")}
    monkeypatch.setattr(os, "environ", env)
    return env
