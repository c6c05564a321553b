"""Domain models for the row -> sheet mapper."""

from .config_models import FieldMapping, MappingConfig, SheetSpec
from .error_record import ErrorKind, ErrorRecord
from .processing_result import MappingResult, SheetResult

__all__ = [
    # Configuration models
    "FieldMapping",
    "MappingConfig",
    "SheetSpec",
    # Errors
    "ErrorKind",
    "ErrorRecord",
    # Results
    "MappingResult",
    "SheetResult",
]
