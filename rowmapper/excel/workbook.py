from __future__ import annotations

import io
import os
import tempfile
import zipfile
from pathlib import Path

from openpyxl import Workbook, load_workbook
from openpyxl.utils.exceptions import InvalidFileException
from openpyxl.worksheet.views import Selection
from openpyxl.worksheet.worksheet import Worksheet

from ..errors import DuplicateSheetError, SheetNotFoundError, WorkbookIOError
from ..models.run_inputs import WorkbookInput

"""Workbook adapter over openpyxl.

The rest of the package only needs: open a workbook from a path or bytes,
look a sheet up by name, clone a sheet under a new name, move the active
cell, and serialize. Library exceptions are translated to the package's
error kinds here.
"""

__all__ = [
    "DEFAULT_ACTIVE_CELL",
    "open_workbook",
    "get_sheet",
    "clone_sheet",
    "set_active_cell",
    "workbook_to_bytes",
    "save_workbook",
]

DEFAULT_ACTIVE_CELL = "A1"


def open_workbook(data: WorkbookInput, *, label: str, data_only: bool = False) -> Workbook:
    """Open a workbook from a filesystem path or raw bytes.

    Parameters
    ----------
    data: Path on disk or file content (uploaded file)
    label: "template" / "source", used in error messages
    data_only: read cached formula results instead of formulas (source side)

    Raises:
        WorkbookIOError: file missing, unreadable, or not a valid workbook
    """
    keep_vba = isinstance(data, Path) and data.suffix.lower() == ".xlsm"
    try:
        if isinstance(data, (bytes, bytearray)):
            return load_workbook(io.BytesIO(data), data_only=data_only)
        return load_workbook(data, data_only=data_only, keep_vba=keep_vba)
    except FileNotFoundError as e:
        raise WorkbookIOError(f"{label} file not found: {data}") from e
    except (OSError, zipfile.BadZipFile, InvalidFileException, KeyError) as e:
        raise WorkbookIOError(f"cannot open {label} workbook: {e}") from e


def get_sheet(wb: Workbook, name: str, *, label: str) -> Worksheet:
    if name not in wb.sheetnames:
        raise SheetNotFoundError(name, label)
    return wb[name]


def clone_sheet(wb: Workbook, template: Worksheet, name: str) -> Worksheet:
    """Copy ``template`` into a new sheet titled ``name`` (appended last).

    openpyxl silently renames colliding titles ("Rec1" -> "Rec11"); sheet
    names are case-insensitive in Excel, so collisions are checked the same
    way and rejected.

    Raises:
        DuplicateSheetError: a sheet called ``name`` already exists
        ValueError: ``name`` is not a legal sheet title
    """
    lowered = name.lower()
    if any(existing.lower() == lowered for existing in wb.sheetnames):
        raise DuplicateSheetError(name)
    clone = wb.copy_worksheet(template)
    try:
        clone.title = name
    except ValueError:
        wb.remove(clone)
        raise
    return clone


def set_active_cell(ws: Worksheet, address: str = DEFAULT_ACTIVE_CELL) -> None:
    view = ws.sheet_view
    if not view.selection:
        view.selection = [Selection(activeCell=address, sqref=address)]
        return
    for selection in view.selection:
        selection.activeCell = address
        selection.sqref = address


def workbook_to_bytes(wb: Workbook) -> bytes:
    buf = io.BytesIO()
    try:
        wb.save(buf)
    except OSError as e:
        raise WorkbookIOError(f"cannot serialize workbook: {e}") from e
    return buf.getvalue()


def save_workbook(wb: Workbook, path: Path) -> Path:
    """Write ``wb`` to ``path`` atomically.

    The workbook is saved to a temporary file next to ``path`` and moved over
    the destination only after a complete save, so a failed run never leaves
    a truncated output file behind.

    Raises:
        WorkbookIOError: destination directory missing or not writable
    """
    directory = path.parent
    if not directory.is_dir():
        raise WorkbookIOError(f"output directory not found: {directory}")
    try:
        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=directory)
    except OSError as e:
        raise WorkbookIOError(f"cannot write output file {path}: {e}") from e
    os.close(fd)
    tmp_path = Path(tmp_name)
    try:
        wb.save(tmp_path)
        os.replace(tmp_path, path)
    except OSError as e:
        raise WorkbookIOError(f"cannot write output file {path}: {e}") from e
    finally:
        if tmp_path.exists():
            tmp_path.unlink()
    return path
