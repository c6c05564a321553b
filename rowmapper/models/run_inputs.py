from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from ..errors import ConfigMissingError
from .config_models import MappingConfig

"""RunInputs: everything a mapping run needs, assembled in one step.

Both entry points collect their inputs independently (CLI flags / env,
Streamlit widgets) and call build_run_inputs() once all of them are known.
Nothing downstream ever sees a partially populated input set.
"""

__all__ = [
    "WorkbookInput",
    "RunInputs",
    "build_run_inputs",
]

# Path on disk (batch) or raw bytes of an uploaded file (interactive)
WorkbookInput = Path | bytes


@dataclass(frozen=True)
class RunInputs:
    config: MappingConfig
    template: WorkbookInput
    source: WorkbookInput
    output_name: str


def build_run_inputs(
    *,
    template: WorkbookInput | None,
    source: WorkbookInput | None,
    config: MappingConfig | None,
    output_name: str | None,
) -> RunInputs:
    """Validate presence of every input and freeze them into RunInputs.

    Inputs are checked in the order template, source, mapping, output; the
    first one missing raises ConfigMissingError.

    Raises:
        ConfigMissingError: naming the first missing input
    """
    if template is None or (isinstance(template, bytes) and not template):
        raise ConfigMissingError("Template file not found")
    if source is None or (isinstance(source, bytes) and not source):
        raise ConfigMissingError("Source file not found")
    if config is None:
        raise ConfigMissingError("Mapping file not found")
    name = output_name or config.generated_file_name
    if not name:
        raise ConfigMissingError("Generated file name not found")
    return RunInputs(config=config, template=template, source=source, output_name=name)
