"""
Validation utilities for the fairness audit.
Input validation, numeric coercion, and safe arithmetic.
"""

import math
import numbers
from typing import Any, List, Optional

import numpy as np
import pandas as pd


class ValidationError(Exception):
    """Raised when input data is malformed."""
    pass


def coerce_number(value: Any) -> Optional[float]:
    """
    Interpret a raw cell value as a finite number.

    Booleans map to 1.0/0.0, numeric strings are parsed after trimming.

    Args:
        value: Raw cell value

    Returns:
        Float value, or None when the value is not a finite number
    """
    if value is None:
        return None

    if isinstance(value, (bool, np.bool_)):
        return 1.0 if value else 0.0

    if isinstance(value, numbers.Number):
        try:
            number = float(value)
        except (TypeError, ValueError):
            return None
        return number if math.isfinite(number) else None

    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
        return number if math.isfinite(number) else None

    return None


def is_empty(value: Any) -> bool:
    """Check whether a raw cell value counts as missing."""
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()

    # Covers numpy.nan, pandas.NaT and pandas.NA
    missing = pd.isna(value)
    if isinstance(missing, (bool, np.bool_)):
        return bool(missing)
    return False


def validate_threshold(name: str, value: Any, allow_zero: bool = False) -> List[str]:
    """
    Validate a fraction-valued threshold.

    Args:
        name: Parameter name (for error messages)
        value: Threshold value
        allow_zero: Whether 0 is an accepted value

    Returns:
        List of validation errors (empty if valid)
    """
    if isinstance(value, bool) or not isinstance(value, numbers.Number):
        return [f"{name} must be a number, got {type(value).__name__}"]

    lower_ok = value >= 0 if allow_zero else value > 0
    if not lower_ok or value > 1:
        return [f"{name} must be between 0 and 1, got {value}"]

    return []


def validate_positive_int(name: str, value: Any) -> List[str]:
    """Validate a positive integer bound."""
    if isinstance(value, bool) or not isinstance(value, numbers.Integral) or value < 1:
        return [f"{name} must be a positive integer, got {value!r}"]
    return []


def validate_keywords(name: str, keywords: Any) -> List[str]:
    """Validate a keyword collection."""
    if isinstance(keywords, str):
        return [f"{name} must be a collection of strings, not a single string"]
    try:
        items = list(keywords)
    except TypeError:
        return [f"{name} must be a collection of strings"]

    bad = [k for k in items if not isinstance(k, str) or not k.strip()]
    if bad:
        return [f"{name} contains invalid keywords: {bad}"]
    return []


def safe_divide(
    numerator: float,
    denominator: float,
    default: float = 0.0,
) -> float:
    """
    Safely divide two numbers, returning default if denominator is zero.

    Args:
        numerator: Numerator
        denominator: Denominator
        default: Value to return if denominator is zero

    Returns:
        Division result or default
    """
    if denominator == 0:
        return default
    return numerator / denominator
