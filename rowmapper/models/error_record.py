from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime
from enum import Enum

"""ErrorKind enumeration and ErrorRecord value.

Every failure of a run is classified into exactly one ErrorKind. The
ErrorRecord is the uniform value both entry points receive (CLI prints it,
the interactive page renders it). row=-1 marks errors that are not tied to
a specific source row.
"""

__all__ = [
    "ErrorKind",
    "ErrorRecord",
]


class ErrorKind(Enum):
    """Closed set of failure kinds for a mapping run.

    - CONFIG_MISSING: a required input (file, output name) was not supplied
    - PARSE_ERROR: the mapping configuration is malformed
    - LOOKUP_ERROR: a named sheet does not exist in its workbook
    - DUPLICATE_NAME: a clone would collide with an existing sheet
    - IO_ERROR: a workbook or config file could not be read or written
    """
    CONFIG_MISSING = "CONFIG_MISSING"
    PARSE_ERROR = "PARSE_ERROR"
    LOOKUP_ERROR = "LOOKUP_ERROR"
    DUPLICATE_NAME = "DUPLICATE_NAME"
    IO_ERROR = "IO_ERROR"


@dataclass(frozen=True)
class ErrorRecord:
    """Structured description of the failure that aborted a run.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        kind: ErrorKind value (UPPER_SNAKE)
        message: Human readable description
        sheet: Source sheet name of the SheetSpec being processed, or "" when
            the failure happened outside of a SheetSpec
        row: Source row number (1-based). -1 when not row-specific
    """
    timestamp: str
    kind: ErrorKind
    message: str
    sheet: str = ""
    row: int = -1

    @staticmethod
    def create(kind: ErrorKind, message: str, sheet: str = "", row: int = -1) -> ErrorRecord:
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return ErrorRecord(timestamp=ts, kind=kind, message=message, sheet=sheet, row=row)

    def describe(self) -> str:
        """One-line text used by the CLI and the interactive error region."""
        where = ""
        if self.sheet:
            where = f" [sheet '{self.sheet}'"
            where += f" row {self.row}]" if self.row > 0 else "]"
        return f"{self.kind.value}: {self.message}{where}"

    def to_json_line(self) -> str:
        data = asdict(self)
        data["kind"] = self.kind.value
        return json.dumps(data, ensure_ascii=False)
