"""
Movie Charts - Exception Classes
================================

Custom exceptions for the chart pipeline.
"""
from enum import Enum
from typing import Optional, Dict, Any
from datetime import datetime


class ErrorSeverity(Enum):
    """Error severity levels."""
    MEDIUM = "medium"
    HIGH = "high"


class ErrorCategory(Enum):
    """Error categories for classification."""
    NETWORK = "network"
    DATA = "data"
    CONFIG = "config"
    RENDER = "render"
    SYSTEM = "system"


class MovieVizError(Exception):
    """Base exception for all chart pipeline errors."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        category: ErrorCategory = ErrorCategory.SYSTEM,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        context: Optional[Dict[str, Any]] = None,
        recoverable: bool = True,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or "UNKNOWN_ERROR"
        self.category = category
        self.severity = severity
        self.context = context or {}
        self.recoverable = recoverable
        self.timestamp = datetime.now()

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/serialization."""
        return {
            "error_code": self.error_code,
            "message": self.message,
            "category": self.category.value,
            "severity": self.severity.value,
            "context": self.context,
            "recoverable": self.recoverable,
            "timestamp": self.timestamp.isoformat(),
        }

    def __str__(self) -> str:
        return f"[{self.error_code}] {self.message}"


class DataFetchError(MovieVizError):
    """Error while fetching or parsing a dataset."""

    def __init__(
        self,
        message: str,
        dataset: Optional[str] = None,
        source: Optional[str] = None,
        **kwargs,
    ):
        context = kwargs.pop("context", {})
        if dataset:
            context["dataset"] = dataset
        if source:
            context["source"] = source

        super().__init__(
            message,
            error_code=kwargs.pop("error_code", "FETCH_ERROR"),
            category=ErrorCategory.NETWORK,
            severity=kwargs.pop("severity", ErrorSeverity.MEDIUM),
            context=context,
            recoverable=True,
            **kwargs,
        )
        self.dataset = dataset
        self.source = source


class DataValidationError(MovieVizError):
    """Dataset does not have the shape a chart needs."""

    def __init__(
        self,
        message: str,
        dataset: Optional[str] = None,
        validation_errors: Optional[list] = None,
        **kwargs,
    ):
        context = kwargs.pop("context", {})
        if dataset:
            context["dataset"] = dataset
        if validation_errors:
            context["validation_errors"] = validation_errors

        super().__init__(
            message,
            error_code=kwargs.pop("error_code", "DATA_VALIDATION_ERROR"),
            category=ErrorCategory.DATA,
            severity=ErrorSeverity.HIGH,
            context=context,
            recoverable=False,
            **kwargs,
        )
        self.dataset = dataset
        self.validation_errors = validation_errors or []


class ConfigurationError(MovieVizError):
    """Error in configuration."""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        config_value: Optional[Any] = None,
        **kwargs,
    ):
        context = kwargs.pop("context", {})
        if config_key:
            context["config_key"] = config_key
        if config_value is not None:
            context["config_value"] = str(config_value)

        super().__init__(
            message,
            error_code=kwargs.pop("error_code", "CONFIG_ERROR"),
            category=ErrorCategory.CONFIG,
            severity=ErrorSeverity.HIGH,
            context=context,
            recoverable=False,
            **kwargs,
        )


class ChartRenderError(MovieVizError):
    """Error while building a chart."""

    def __init__(
        self,
        message: str,
        chart: Optional[str] = None,
        **kwargs,
    ):
        context = kwargs.pop("context", {})
        if chart:
            context["chart"] = chart

        super().__init__(
            message,
            error_code=kwargs.pop("error_code", f"RENDER_{(chart or 'unknown').upper()}"),
            category=ErrorCategory.RENDER,
            severity=ErrorSeverity.MEDIUM,
            context=context,
            recoverable=True,
            **kwargs,
        )
        self.chart = chart


class ReportGenerationError(MovieVizError):
    """Error while writing the host page."""

    def __init__(
        self,
        message: str,
        output_path: Optional[str] = None,
        **kwargs,
    ):
        context = kwargs.pop("context", {})
        if output_path:
            context["output_path"] = output_path

        super().__init__(
            message,
            error_code=kwargs.pop("error_code", "REPORT_ERROR"),
            category=ErrorCategory.SYSTEM,
            severity=ErrorSeverity.MEDIUM,
            context=context,
            recoverable=True,
            **kwargs,
        )


def create_missing_columns_error(dataset: str, missing: list) -> DataValidationError:
    """Create the error raised when a dataset lacks columns a chart needs."""
    return DataValidationError(
        f"Dataset {dataset} does not have required columns: {', '.join(repr(c) for c in missing)}",
        dataset=dataset,
        validation_errors=[f"missing column '{c}'" for c in missing],
        error_code="MISSING_COLUMNS",
    )
