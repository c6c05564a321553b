from __future__ import annotations

from ..models.processing_result import MappingResult

"""SUMMARY line rendering for batch runs."""


def _format_seconds(value: float) -> str:
    if value == 0:
        return "0"
    if value == int(value):
        return str(int(value))
    # avoid scientific notation for very fast runs
    return f"{value:.6f}".rstrip("0").rstrip(".")


def render_summary_line(result: MappingResult) -> str:
    """Render the SUMMARY line of a run.

    Format:
    SUMMARY sheets={specs} clones={clones} rows={rows} elapsed_sec={elapsed} output={output}

    Examples:
        >>> from rowmapper.models.processing_result import SheetResult
        >>> result = MappingResult(
        ...     workbook=None,
        ...     sheets=(SheetResult("Data", ("Rec1", "Rec2"), 3),),
        ...     elapsed_seconds=2.0,
        ...     output="out.xlsx",
        ... )
        >>> render_summary_line(result)
        'SUMMARY sheets=1 clones=2 rows=3 elapsed_sec=2 output=out.xlsx'
    """
    return (
        f"SUMMARY sheets={len(result.sheets)} "
        f"clones={result.total_clones} "
        f"rows={result.total_rows_read} "
        f"elapsed_sec={_format_seconds(result.elapsed_seconds)} "
        f"output={result.output or '-'}"
    )
