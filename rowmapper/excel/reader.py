from __future__ import annotations

import io
import zipfile
from pathlib import Path

import pandas as pd
from openpyxl.utils import get_column_letter
from openpyxl.utils.exceptions import InvalidFileException

from ..errors import SheetNotFoundError, WorkbookIOError
from ..models.run_inputs import WorkbookInput

"""Source sheet previews (pandas).

Used by ``--inspect-data`` and by the interactive page to show what the
mapper is about to read. Rows are kept positional (no header row) and the
index is shifted to Excel row numbers so startRow / stopRow can be checked
against the preview directly.
"""

__all__ = [
    "list_sheet_names",
    "read_sheet_preview",
]


def _buffer(data: WorkbookInput) -> Path | io.BytesIO:
    if isinstance(data, (bytes, bytearray)):
        return io.BytesIO(data)
    return data


def list_sheet_names(data: WorkbookInput) -> list[str]:
    try:
        with pd.ExcelFile(_buffer(data), engine="openpyxl") as xls:
            return [str(name) for name in xls.sheet_names]
    except FileNotFoundError as e:
        raise WorkbookIOError(f"file not found: {data}") from e
    except (OSError, ValueError, zipfile.BadZipFile, InvalidFileException) as e:
        raise WorkbookIOError(f"cannot read workbook: {e}") from e


def read_sheet_preview(
    data: WorkbookInput,
    sheet_name: str,
    *,
    start_row: int = 1,
    rows: int = 5,
) -> pd.DataFrame:
    """Read ``rows`` rows of ``sheet_name`` starting at Excel row ``start_row``.

    Columns are labelled with Excel column letters (A, B, ...) and the index
    holds Excel row numbers.

    Raises:
        SheetNotFoundError: sheet absent from the workbook
        WorkbookIOError: workbook unreadable
    """
    if sheet_name not in list_sheet_names(data):
        raise SheetNotFoundError(sheet_name, "source")
    try:
        df = pd.read_excel(
            _buffer(data),
            sheet_name=sheet_name,
            header=None,
            skiprows=start_row - 1,
            nrows=rows,
            engine="openpyxl",
        )
    except (OSError, ValueError, zipfile.BadZipFile, InvalidFileException) as e:
        raise WorkbookIOError(f"cannot read sheet '{sheet_name}': {e}") from e
    df.columns = [get_column_letter(i + 1) for i in range(df.shape[1])]
    df.index = range(start_row, start_row + len(df))
    return df
