"""Post-build validation of height fields."""

import numpy as np
import structlog

from .heightfield import HeightField

logger = structlog.get_logger()


class ValidationResult:
    """Result of height-field validation."""

    def __init__(self) -> None:
        self.errors: list[str] = []
        self.warnings: list[str] = []
        self.passed = True

    def add_error(self, message: str) -> None:
        """Add validation error."""
        self.errors.append(message)
        self.passed = False

    def add_warning(self, message: str) -> None:
        """Add validation warning."""
        self.warnings.append(message)


def validate_height_field(field: HeightField) -> ValidationResult:
    """Validate a height field against its invariants.

    Args:
        field: Height field to check.

    Returns:
        ValidationResult with any errors/warnings.
    """
    result = ValidationResult()

    # Check 1: At least two samples per axis
    _check_size(field, result)

    # Check 2: All samples are real numbers
    finite = _check_finite(field, result)

    # Check 3: Recorded bounds are the true extrema
    if finite:
        _check_bounds(field, result)

    # Check 4: Non-degenerate range
    if field.is_flat:
        result.add_warning("Field is flat; every sample classifies as the first band")

    if result.passed:
        logger.info("height_field_validation_passed", warnings=len(result.warnings))
    else:
        logger.warning("height_field_validation_failed", errors=result.errors)

    for warning in result.warnings:
        logger.warning("height_field_validation_warning", message=warning)

    return result


def _check_size(field: HeightField, result: ValidationResult) -> None:
    if field.width < 2 or field.depth < 2:
        result.add_error(f"Grid {field.width}x{field.depth} is smaller than 2x2")


def _check_finite(field: HeightField, result: ValidationResult) -> bool:
    bad = int(np.count_nonzero(~np.isfinite(field.heights)))
    if bad > 0:
        result.add_error(f"{bad} samples are not finite")
    return bad == 0


def _check_bounds(field: HeightField, result: ValidationResult) -> None:
    actual_min = float(field.heights.min())
    actual_max = float(field.heights.max())
    if field.observed_min != actual_min:
        result.add_error(
            f"observed_min {field.observed_min} differs from true minimum {actual_min}"
        )
    if field.observed_max != actual_max:
        result.add_error(
            f"observed_max {field.observed_max} differs from true maximum {actual_max}"
        )
