from __future__ import annotations

from dataclasses import dataclass

from ..errors import ParseError
from ..models.config_models import MappingConfig
from ..models.run_inputs import RunInputs, build_run_inputs

"""Form helpers for the interactive page.

Kept free of Streamlit imports so the rules (extension inference, output
name, input assembly) are testable without a running app.
"""

__all__ = [
    "DEFAULT_EXTENSION",
    "FileName",
    "split_file_name",
    "output_file_name",
    "OutputNameField",
    "output_name_field",
    "collect_inputs",
]

DEFAULT_EXTENSION = "xlsx"


@dataclass(frozen=True)
class FileName:
    filename: str
    name: str
    extension: str


def split_file_name(filename: str) -> FileName:
    """Split ``filename`` at its last dot.

    Raises:
        ParseError: ``filename`` has no extension
    """
    dot = filename.rfind(".")
    if dot == -1:
        raise ParseError(f"Missing extension in file name '{filename}'")
    return FileName(filename=filename, name=filename[:dot], extension=filename[dot + 1:])


def output_file_name(stem: str, extension: str | None) -> str:
    stem = stem.strip()
    if not extension:
        return stem
    if stem.lower().endswith(f".{extension.lower()}"):
        return stem
    return f"{stem}.{extension}"


@dataclass(frozen=True)
class OutputNameField:
    """How the output-name text field is rendered."""
    value: str
    extension: str
    disabled: bool


def output_name_field(config: MappingConfig | None, template_filename: str | None) -> OutputNameField:
    """Derive the output-name field from the uploaded config and template.

    generatedFileName in the configuration pre-fills and locks the field;
    otherwise the extension follows the template file (default .xlsx).
    """
    extension = DEFAULT_EXTENSION
    if template_filename:
        extension = split_file_name(template_filename).extension or DEFAULT_EXTENSION
    if config is not None and config.generated_file_name:
        try:
            generated = split_file_name(config.generated_file_name)
        except ParseError:
            return OutputNameField(value=config.generated_file_name, extension=extension, disabled=True)
        if generated.name and generated.extension:
            return OutputNameField(value=generated.name, extension=generated.extension, disabled=True)
    return OutputNameField(value="", extension=extension, disabled=False)


def collect_inputs(
    *,
    template: bytes | None,
    source: bytes | None,
    config: MappingConfig | None,
    output_stem: str | None,
    extension: str | None,
) -> RunInputs:
    """Build RunInputs from the page's current widget values.

    Raises:
        ConfigMissingError: first missing input (template, source, mapping,
            output name)
    """
    name = output_file_name(output_stem, extension) if output_stem and output_stem.strip() else None
    return build_run_inputs(template=template, source=source, config=config, output_name=name)
