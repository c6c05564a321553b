from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from .error_record import ErrorRecord

if TYPE_CHECKING:
    from openpyxl import Workbook

"""Result models for mapping runs.

MappingResult is what the Row Mapper and the orchestrator hand back to the
entry points: either a populated workbook or the ErrorRecord that aborted
the run, never an exception.
"""


@dataclass(frozen=True)
class SheetResult:
    """Outcome of one SheetSpec."""
    source_sheet_name: str
    clones: tuple[str, ...]  # clone names in creation order
    rows_read: int  # reference cells read, including the terminating empty one

    @property
    def clone_count(self) -> int:
        return len(self.clones)


@dataclass(frozen=True)
class MappingResult:
    """Aggregated outcome of a whole run."""
    workbook: Workbook | None
    sheets: tuple[SheetResult, ...] = ()
    error: ErrorRecord | None = None
    elapsed_seconds: float = 0.0
    output: str | None = None  # destination path/name once emitted

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def total_clones(self) -> int:
        return sum(s.clone_count for s in self.sheets)

    @property
    def total_rows_read(self) -> int:
        return sum(s.rows_read for s in self.sheets)
