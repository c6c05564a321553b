from __future__ import annotations

import sys
from typing import Any

from tqdm import tqdm
from tqdm.std import tqdm as TqdmType

"""Row progress display with tqdm (verbose + TTY only).

One bar per SheetSpec, advanced once per source row read. In non-TTY
environments (CI, redirected output) no bar is created so logs stay free of
control sequences.
"""

__all__ = [
    "RowProgress",
    "is_tty_enabled",
]


def is_tty_enabled() -> bool:
    return sys.stdout.isatty()


class RowProgress:
    """Progress bar over the row range of a single SheetSpec."""

    def __init__(self, total_rows: int, *, description: str = "Mapping rows", enabled: bool = True) -> None:
        """
        Args:
            total_rows: Size of the [startRow, stopRow) range
            description: Bar label (typically the source sheet name)
            enabled: False disables the bar regardless of TTY (non-verbose runs)
        """
        self.total_rows = max(total_rows, 0)
        self.description = description
        self.current_row = 0

        self.enabled = enabled and is_tty_enabled()
        self.pbar: TqdmType[Any] | None
        if self.enabled:
            self.pbar = tqdm(
                total=self.total_rows,
                desc=description,
                unit="row",
                leave=True,
                ncols=80,
                ascii=True,
            )
        else:
            self.pbar = None

    def advance(self, row: int) -> None:
        self.current_row = row
        if self.pbar is not None:
            self.pbar.update(1)

    def set_postfix(self, **kwargs: Any) -> None:
        if self.pbar is not None:
            self.pbar.set_postfix(**kwargs)

    def close(self) -> None:
        if self.pbar is not None:
            self.pbar.close()
            self.pbar = None

    def __enter__(self) -> RowProgress:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
