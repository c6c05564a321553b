from __future__ import annotations

import re
from dataclasses import dataclass

"""Config dataclasses for the row -> sheet mapper.

MappingConfig is parsed once per run (rowmapper.config.loader) and never
mutated afterwards. Cell references stay strings/ints (the loader only
upper-cases letters and drops '$'); resolution against a worksheet happens
in rowmapper.services.mapper.
"""

_ADDRESS_RE = re.compile(r"^\$?([A-Za-z]{1,3})\$?([1-9][0-9]*)$")


def split_address(ref: str) -> tuple[str, int] | None:
    """Split an A1-style address into (column letters, row).

    Returns None when ``ref`` is not a single-cell address.
    """
    m = _ADDRESS_RE.match(ref.strip())
    if m is None:
        return None
    return m.group(1).upper(), int(m.group(2))


@dataclass(frozen=True)
class FieldMapping:
    """One (source, target) pair copied verbatim per row.

    ``source`` is either a column ("B" or 2), read on the current source row,
    or a full address ("B3"), read from that fixed cell for every row.
    ``target`` is always an address on the clone.
    """
    source: str | int
    target: str

    @property
    def fixed_source(self) -> tuple[str, int] | None:
        if isinstance(self.source, int):
            return None
        return split_address(self.source)


@dataclass(frozen=True)
class SheetSpec:
    """Mapping of one source sheet onto clones of the model sheet."""
    key: str  # key (or list index) under ``sheets`` in the YAML
    source_sheet_name: str
    start_row: int
    reference_column: str | int
    field_mapping: tuple[FieldMapping, ...] = ()
    stop_row: int | None = None  # exclusive; None -> last populated row + 1
    target_domain: str | None = None
    record_state: str | None = None


@dataclass(frozen=True)
class MappingConfig:
    """Root configuration of a mapping run."""
    model_sheet_name: str
    sheets: tuple[SheetSpec, ...]
    generated_file_name: str | None = None
