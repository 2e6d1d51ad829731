"""
Movie Charts - Utility Modules
==============================
"""

from .exceptions import (
    MovieVizError,
    DataFetchError,
    DataValidationError,
    ConfigurationError,
    ChartRenderError,
    ReportGenerationError,
)
from .validation import (
    DataValidator,
    ValidationResult,
    validate_dataframe,
    validate_vega_spec,
)

__all__ = [
    # Exceptions
    "MovieVizError",
    "DataFetchError",
    "DataValidationError",
    "ConfigurationError",
    "ChartRenderError",
    "ReportGenerationError",
    # Validation
    "DataValidator",
    "ValidationResult",
    "validate_dataframe",
    "validate_vega_spec",
]
