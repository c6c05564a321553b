from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

from rowmapper.config.loader import load_config
from rowmapper.errors import ConfigMissingError, MappingError
from rowmapper.excel.reader import read_sheet_preview
from rowmapper.logging.init import get_logger, log_summary, setup_logging
from rowmapper.models.run_inputs import RunInputs, build_run_inputs
from rowmapper.services.orchestrator import process_files
from rowmapper.services.summary import render_summary_line

"""Batch entrypoint.

rowmapper -t template.xlsx -s source.xlsx -m mapping.yml -o out.xlsx [-v]

Each file option falls back to an environment variable (a ``.env`` file in
the working directory is loaded first, without overriding variables that
are already set). The output file is written only when every SheetSpec
succeeded.
"""

EXIT_SUCCESS = 0
EXIT_FATAL = 1

ENV_TEMPLATE_FILE = "ROWMAPPER_TEMPLATE_FILE"
ENV_SOURCE_FILE = "ROWMAPPER_SOURCE_FILE"
ENV_OUTPUT_FILE = "ROWMAPPER_OUTPUT_FILE"
ENV_MAPPING_FILE = "ROWMAPPER_MAPPING_FILE"

PREVIEW_ROWS = 5


def _load_env_file(path: Path) -> None:
    """Load ``path`` with python-dotenv; existing variables win."""
    if path.exists():
        load_dotenv(dotenv_path=path, override=False)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="rowmapper",
        description="Copy source rows into cloned sheets of a template workbook",
    )
    p.add_argument("-t", "--templateFile", dest="template_file", help="Template workbook (.xlsx)")
    p.add_argument("-s", "--sourceFile", dest="source_file", help="Source workbook holding the rows")
    p.add_argument("-o", "--outputFile", dest="output_file", help="Generated workbook path")
    p.add_argument("-m", "--mappingFile", dest="mapping_file", help="YAML mapping configuration")
    p.add_argument("-v", "--verbose", action="store_true", help="Show progress and a final status line")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    p.add_argument(
        "--inspect-data",
        action="store_true",
        help="Print the first rows of each configured source sheet then exit",
    )
    return p.parse_args(argv)


def _option(value: str | None, env_name: str) -> Path | None:
    value = value or os.getenv(env_name)
    return Path(value) if value else None


def _collect_inputs(args: argparse.Namespace) -> RunInputs:
    template = _option(args.template_file, ENV_TEMPLATE_FILE)
    if template is None:
        raise ConfigMissingError("Template file not found (use --templateFile/-t)")
    source = _option(args.source_file, ENV_SOURCE_FILE)
    if source is None:
        raise ConfigMissingError("Source file not found (use --sourceFile/-s)")
    mapping = _option(args.mapping_file, ENV_MAPPING_FILE)
    if mapping is None:
        raise ConfigMissingError("Mapping file not found (use --mappingFile/-m)")

    config = load_config(mapping)
    output = args.output_file or os.getenv(ENV_OUTPUT_FILE)
    try:
        return build_run_inputs(template=template, source=source, config=config, output_name=output)
    except ConfigMissingError as e:
        raise ConfigMissingError(f"{e} (use --outputFile/-o or generatedFileName)") from e


def _inspect_data(inputs: RunInputs) -> int:
    for spec in inputs.config.sheets:
        print(f"SHEET: {spec.source_sheet_name} (startRow={spec.start_row} referenceColumn={spec.reference_column})")
        try:
            df = read_sheet_preview(inputs.source, spec.source_sheet_name, start_row=spec.start_row, rows=PREVIEW_ROWS)
        except MappingError as e:
            print(f"  error={e}")
            continue
        print(df.to_string() if not df.empty else "  (no rows)")
    return EXIT_SUCCESS


def main(argv: list[str] | None = None) -> int:
    # None のときのみ sys.argv を読む (テストから main([]) を呼ぶため)
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    setup_logging(verbose=args.verbose, debug=args.debug)
    logger = get_logger()
    logger.debug("debug mode enabled")

    _load_env_file(Path(".env"))

    try:
        inputs = _collect_inputs(args)
    except MappingError as e:
        logger.error(e.to_record().describe())
        return EXIT_FATAL

    if args.inspect_data:
        return _inspect_data(inputs)

    logger.info(f"Mapping '{inputs.source}' onto '{inputs.template}'")
    result = process_files(inputs, verbose=args.verbose or args.debug)
    if result.error is not None:
        logger.error(result.error.describe())
        return EXIT_FATAL

    # log_summary adds the "SUMMARY " label itself
    log_summary(render_summary_line(result)[len("SUMMARY "):])
    return EXIT_SUCCESS


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
