"""
Movie Charts - Data Validation
==============================

Column contracts for the chart datasets and the Vega-Lite spec.
"""
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Any

import numpy as np
import pandas as pd

from .exceptions import DataValidationError, create_missing_columns_error

logger = logging.getLogger(__name__)


# Grouping columns each chart's dataset cannot do without
REQUIRED_COLUMNS = {
    "age_ratings": ["rating"],
    "runtime_scores": ["runtime", "imdb_score"],
    "releases": ["release_year", "type"],
}

# Columns coerced to numbers before aggregation; absent or unparseable cells become NaN
NUMERIC_COLUMNS = {
    "age_ratings": ["imdb_score", "imdb_votes"],
    "runtime_scores": ["runtime", "imdb_score"],
    "releases": ["imdb_score"],
}

# Keys that make a dict a renderable Vega-Lite view
VEGA_VIEW_KEYS = ("mark", "layer", "concat", "hconcat", "vconcat", "facet", "repeat")


def is_blank(value: Any) -> bool:
    """Null, NaN, empty string or zero."""
    if isinstance(value, (str, int, float, np.integer, np.floating)):
        return bool(pd.isna(value)) or not value
    return value is None


@dataclass
class ValidationResult:
    """Result of data validation."""
    is_valid: bool
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)

    def add_error(self, error: str) -> None:
        """Add an error message."""
        self.errors.append(error)
        self.is_valid = False

    def add_warning(self, warning: str) -> None:
        """Add a warning message."""
        self.warnings.append(warning)

    def raise_if_invalid(self, dataset: str) -> None:
        """Raise DataValidationError carrying every collected error."""
        if self.is_valid:
            return
        missing = self.metadata.get("missing_columns")
        if missing:
            raise create_missing_columns_error(dataset, missing)
        raise DataValidationError(
            f"Invalid dataset {dataset}: {'; '.join(self.errors)}",
            dataset=dataset,
            validation_errors=list(self.errors),
        )

    def __str__(self) -> str:
        status = "✓ VALID" if self.is_valid else "✗ INVALID"
        parts = [status]
        if self.errors:
            parts.append(f"Errors: {len(self.errors)}")
        if self.warnings:
            parts.append(f"Warnings: {len(self.warnings)}")
        return " | ".join(parts)


class DataValidator:
    """Validator for the chart datasets."""

    def validate_dataframe(
        self,
        df: Optional[pd.DataFrame],
        data_type: str,
        name: str = "UNKNOWN",
    ) -> ValidationResult:
        """
        Validate a dataset against the column contract of a chart.

        Only an empty dataset or a missing grouping column is an error.
        Absent or unparseable numeric cells are reported as warnings; the
        aggregations ignore them.

        Args:
            df: Dataset to validate
            data_type: Key of REQUIRED_COLUMNS (age_ratings, runtime_scores, releases)
            name: Dataset name for messages

        Returns:
            ValidationResult with validation status and details
        """
        if data_type not in REQUIRED_COLUMNS:
            raise ValueError(f"Unknown data type: {data_type}. Available: {list(REQUIRED_COLUMNS)}")

        result = ValidationResult(is_valid=True)
        result.metadata["rows"] = 0 if df is None else len(df)

        if df is None or df.empty:
            result.add_error(f"Dataset {name} is empty")
            return result

        missing = [col for col in REQUIRED_COLUMNS[data_type] if col not in df.columns]
        if missing:
            result.metadata["missing_columns"] = missing
            for col in missing:
                result.add_error(f"Missing required column '{col}' in {name}")
            return result

        for col in NUMERIC_COLUMNS[data_type]:
            self._check_numeric(df, col, name, result)

        return result

    def _check_numeric(
        self,
        df: pd.DataFrame,
        col: str,
        name: str,
        result: ValidationResult,
    ) -> None:
        """Warn about absent columns and cells that do not parse as numbers."""
        if col not in df.columns:
            result.metadata[f"{col}_nan"] = len(df)
            result.add_warning(f"Column '{col}' missing in {name}; treated as empty")
            return

        series = pd.to_numeric(df[col], errors="coerce")
        nan_count = int(series.isna().sum())
        if nan_count == 0:
            return

        result.metadata[f"{col}_nan"] = nan_count
        result.add_warning(
            f"Non-numeric values in {col} for {name}: {nan_count} of {len(series)} ignored"
        )

    def validate_first_record(
        self,
        df: pd.DataFrame,
        columns: List[str],
        name: str = "UNKNOWN",
    ) -> ValidationResult:
        """
        Check that the first record carries every column (early-abort contract).

        A value counts as missing when it is blank: null, NaN, an empty
        string or zero.
        """
        result = ValidationResult(is_valid=True)
        if df.empty:
            result.add_error(f"Dataset {name} is empty")
            return result

        first = df.iloc[0]
        missing = [col for col in columns if col not in df.columns or is_blank(first[col])]
        if missing:
            result.metadata["missing_columns"] = missing
            result.add_error(
                f"Dataset does not have required columns: {', '.join(repr(c) for c in missing)}"
            )
        return result

    def validate_vega_spec(self, spec: Any, name: str = "UNKNOWN") -> ValidationResult:
        """Check that a parsed JSON document is a renderable Vega-Lite spec."""
        result = ValidationResult(is_valid=True)

        if not isinstance(spec, dict):
            result.add_error(f"Spec {name} must be a JSON object, got {type(spec).__name__}")
            return result

        if not any(key in spec for key in VEGA_VIEW_KEYS):
            result.add_error(
                f"Spec {name} has no view definition (expected one of: {', '.join(VEGA_VIEW_KEYS)})"
            )

        schema = spec.get("$schema")
        if schema is None:
            result.add_warning(f"Spec {name} has no $schema; assuming Vega-Lite")
        elif "vega-lite" not in str(schema):
            result.add_warning(f"Spec {name} declares a non Vega-Lite schema: {schema}")
        result.metadata["schema"] = schema

        return result


def validate_dataframe(
    df: Optional[pd.DataFrame],
    data_type: str,
    name: str = "UNKNOWN",
) -> ValidationResult:
    """Convenience wrapper around DataValidator.validate_dataframe."""
    result = DataValidator().validate_dataframe(df, data_type, name)
    for warning in result.warnings:
        logger.warning(warning)
    return result


def validate_vega_spec(spec: Any, name: str = "UNKNOWN") -> ValidationResult:
    """Convenience wrapper around DataValidator.validate_vega_spec."""
    result = DataValidator().validate_vega_spec(spec, name)
    for warning in result.warnings:
        logger.warning(warning)
    return result
