from __future__ import annotations

from .models.error_record import ErrorKind, ErrorRecord

"""Exception hierarchy for mapping runs.

One exception class per ErrorKind. Code that talks to PyYAML, jsonschema or
openpyxl wraps their exceptions into one of these (chained with ``from``);
the orchestration layer converts them into an ErrorRecord on the result.
"""

__all__ = [
    "MappingError",
    "ConfigMissingError",
    "ParseError",
    "SheetNotFoundError",
    "DuplicateSheetError",
    "WorkbookIOError",
]


class MappingError(Exception):
    """Base exception for every failure of a mapping run."""

    kind: ErrorKind = ErrorKind.PARSE_ERROR
    # filled in by the mapper when the failure happens inside a SheetSpec
    sheet: str = ""
    row: int = -1

    def to_record(self) -> ErrorRecord:
        return ErrorRecord.create(self.kind, str(self), sheet=self.sheet, row=self.row)


class ConfigMissingError(MappingError):
    """A required CLI option or UI input was not supplied."""

    kind = ErrorKind.CONFIG_MISSING


class ParseError(MappingError):
    """Mapping configuration (or a value used as a sheet title) is malformed."""

    kind = ErrorKind.PARSE_ERROR


class SheetNotFoundError(MappingError):
    """A named sheet is absent from the workbook it was looked up in."""

    kind = ErrorKind.LOOKUP_ERROR

    def __init__(self, sheet_name: str, workbook_label: str) -> None:
        super().__init__(f"{workbook_label} sheet '{sheet_name}' not found")
        self.sheet_name = sheet_name
        self.workbook_label = workbook_label


class DuplicateSheetError(MappingError):
    """A clone would reuse the name of a sheet that already exists."""

    kind = ErrorKind.DUPLICATE_NAME

    def __init__(self, sheet_name: str) -> None:
        super().__init__(f"sheet '{sheet_name}' already exists in the template workbook")
        self.sheet_name = sheet_name


class WorkbookIOError(MappingError):
    """Reading or writing a workbook or configuration file failed."""

    kind = ErrorKind.IO_ERROR
