from __future__ import annotations

from pathlib import Path

import pytest

from rowmapper.cli import main as cli_main
from rowmapper.logging.init import reset_logging

"""Failing batch runs: every error aborts and no output is written."""


@pytest.fixture(autouse=True)
def _clean_logging():
    reset_logging()
    yield
    reset_logging()


def _argv(workbook_files: dict[str, Path], mapping: Path, output: Path) -> list[str]:
    return ["-t", str(workbook_files["template"]), "-s", str(workbook_files["source"]),
            "-m", str(mapping), "-o", str(output)]


def test_duplicate_clone_name_aborts(temp_workdir, workbook_files, write_config, workbook_factory, capsys):
    workbook_factory({"Cover": [[1]], "Template": [[2]], "Rec2": [[3]]}).save(workbook_files["template"])
    output = temp_workdir / "out" / "result.xlsx"

    code = cli_main(_argv(workbook_files, write_config, output))

    err = capsys.readouterr().err
    assert code == 1
    assert "ERROR DUPLICATE_NAME: sheet 'Rec2' already exists" in err
    assert "[sheet 'Data' row 3]" in err
    assert not output.exists()


def test_rerun_on_generated_output_fails(temp_workdir, workbook_files, write_config, capsys):
    first = temp_workdir / "out" / "first.xlsx"
    assert cli_main(_argv(workbook_files, write_config, first)) == 0

    # feed the generated workbook back in as template
    files = dict(workbook_files, template=first)
    second = temp_workdir / "out" / "second.xlsx"
    assert cli_main(_argv(files, write_config, second)) == 1
    assert "DUPLICATE_NAME" in capsys.readouterr().err
    assert not second.exists()


def test_missing_source_sheet(temp_workdir, workbook_files, write_config, capsys):
    write_config.write_text(
        write_config.read_text(encoding="utf-8").replace("name: Data", "name: Absent"), encoding="utf-8"
    )
    output = temp_workdir / "out" / "result.xlsx"
    assert cli_main(_argv(workbook_files, write_config, output)) == 1
    assert "ERROR LOOKUP_ERROR: source sheet 'Absent' not found" in capsys.readouterr().err
    assert not output.exists()


def test_missing_model_sheet(temp_workdir, workbook_files, write_config, capsys):
    write_config.write_text(
        write_config.read_text(encoding="utf-8").replace("modelSheetName: Template", "modelSheetName: Model"),
        encoding="utf-8",
    )
    assert cli_main(_argv(workbook_files, write_config, temp_workdir / "out" / "r.xlsx")) == 1
    assert "ERROR LOOKUP_ERROR: template sheet 'Model' not found" in capsys.readouterr().err


def test_existing_output_untouched_on_failure(temp_workdir, workbook_files, write_config):
    output = temp_workdir / "out" / "result.xlsx"
    output.write_bytes(b"previous content")
    write_config.write_text(
        write_config.read_text(encoding="utf-8").replace("name: Data", "name: Absent"), encoding="utf-8"
    )
    assert cli_main(_argv(workbook_files, write_config, output)) == 1
    assert output.read_bytes() == b"previous content"


def test_unreadable_template(temp_workdir, workbook_files, write_config, capsys):
    workbook_files["template"].write_bytes(b"garbage")
    assert cli_main(_argv(workbook_files, write_config, temp_workdir / "out" / "r.xlsx")) == 1
    assert "ERROR IO_ERROR: cannot open template workbook" in capsys.readouterr().err


def test_missing_output_directory(temp_workdir, workbook_files, write_config, capsys):
    output = temp_workdir / "nowhere" / "r.xlsx"
    assert cli_main(_argv(workbook_files, write_config, output)) == 1
    assert "ERROR IO_ERROR: output directory not found" in capsys.readouterr().err
