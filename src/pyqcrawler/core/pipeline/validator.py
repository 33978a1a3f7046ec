from __future__ import annotations

"""
Configuration Validator.

Acts as a gatekeeper to ensure that the configuration dictionary passed
to the crawl engine contains valid types and normalized values.
Uses a schema-driven approach to minimize boilerplate.
"""

import logging
from typing import Any, Dict, List, Tuple

from pyqcrawler.domain.config import get_default_config

logger = logging.getLogger(__name__)

STRING_FIELDS = [
    "base_url", "base_path", "test_dir",
    "data_dir", "output_dir", "log_dir",
]

# Empty is a valid value for these
OPTIONAL_STRING_FIELDS = ["legacy_base_url", "public_base_url"]

BOOL_FIELDS = ["test_mode", "debug", "verbose", "interactive", "list_only"]

INT_FIELDS = ["min_year", "max_year", "max_retries", "workers"]

FLOAT_FIELDS = ["request_timeout", "backoff_factor"]


def validate_config(
        config: Any,
        *,
        strict: bool = False,
) -> Tuple[Dict[str, Any], List[str]]:
    """
    Validate and normalize the configuration dictionary.

    Ensures types are correct (converting strings to bools/numbers if needed),
    fills in missing values with defaults and enforces value ranges.

    Args:
        config: The raw configuration dictionary (or untrusted input).
        strict: If True, raises TypeError/ValueError on invalid data.

    Returns:
        Tuple[Dict, List[str]]: (Normalized Config, List of Warnings).
    """
    warnings: List[str] = []
    defaults = get_default_config()

    # Base Validation: Type Check
    if not isinstance(config, dict):
        msg = f"Invalid config type: expected dict, received {type(config).__name__}."
        if strict:
            raise TypeError(msg)
        warnings.append(f"{msg} Using defaults.")
        logger.warning(msg)
        return defaults, warnings

    merged: Dict[str, Any] = dict(defaults)
    merged.update(config)

    for field in STRING_FIELDS:
        merged[field] = _as_str(merged.get(field), defaults[field], field, warnings, strict)

    for field in OPTIONAL_STRING_FIELDS:
        merged[field] = _as_str(merged.get(field), "", field, warnings, strict)

    for field in BOOL_FIELDS:
        merged[field] = _as_bool(merged.get(field), defaults[field], field, warnings, strict)

    for field in INT_FIELDS:
        merged[field] = _as_int(merged.get(field), defaults[field], field, warnings, strict)

    for field in FLOAT_FIELDS:
        merged[field] = _as_float(merged.get(field), defaults[field], field, warnings, strict)

    _check_ranges(merged, defaults, warnings, strict)

    if not merged["base_url"].endswith("/"):
        merged["base_url"] += "/"

    return merged, warnings


def _as_str(value: Any, fallback: str, field: str, warnings: List[str], strict: bool) -> str:
    """Ensure value is a string."""
    if value is None:
        return fallback
    if isinstance(value, str):
        v = value.strip()
        return v if v else fallback
    msg = f"Invalid field '{field}': expected str, received {type(value).__name__}."
    if strict:
        raise TypeError(msg)
    warnings.append(f"{msg} Using fallback.")
    return fallback


def _as_bool(value: Any, fallback: bool, field: str, warnings: List[str], strict: bool) -> bool:
    """Coerce value to boolean."""
    if isinstance(value, bool):
        return value
    if value is None:
        return fallback

    if not strict:
        if isinstance(value, (int, float)) and value in (0, 1):
            warnings.append(f"Field '{field}' converted from number {value} to bool.")
            return bool(value)
        if isinstance(value, str):
            s = value.strip().lower()
            if s in ("true", "1", "yes", "y", "on"):
                warnings.append(f"Field '{field}' converted from '{value}' to True.")
                return True
            if s in ("false", "0", "no", "n", "off"):
                warnings.append(f"Field '{field}' converted from '{value}' to False.")
                return False

    msg = f"Invalid field '{field}': expected bool, received {type(value).__name__}."
    if strict:
        raise TypeError(msg)
    warnings.append(f"{msg} Using fallback.")
    return fallback


def _as_int(value: Any, fallback: int, field: str, warnings: List[str], strict: bool) -> int:
    """Coerce value to int."""
    if isinstance(value, bool):
        pass
    elif isinstance(value, int):
        return value
    elif value is None:
        return fallback
    elif not strict and isinstance(value, str):
        try:
            converted = int(value.strip())
            warnings.append(f"Field '{field}' converted from '{value}' to {converted}.")
            return converted
        except ValueError:
            pass

    msg = f"Invalid field '{field}': expected int, received {type(value).__name__}."
    if strict:
        raise TypeError(msg)
    warnings.append(f"{msg} Using fallback.")
    return fallback


def _as_float(value: Any, fallback: float, field: str, warnings: List[str], strict: bool) -> float:
    """Coerce value to float."""
    if isinstance(value, bool):
        pass
    elif isinstance(value, (int, float)):
        return float(value)
    elif value is None:
        return fallback
    elif not strict and isinstance(value, str):
        try:
            converted = float(value.strip())
            warnings.append(f"Field '{field}' converted from '{value}' to {converted}.")
            return converted
        except ValueError:
            pass

    msg = f"Invalid field '{field}': expected float, received {type(value).__name__}."
    if strict:
        raise TypeError(msg)
    warnings.append(f"{msg} Using fallback.")
    return fallback


def _check_ranges(cfg: Dict[str, Any], defaults: Dict[str, Any], warnings: List[str], strict: bool) -> None:
    """Reset out-of-range numeric fields to their defaults."""
    def _reject(msg: str, *fields: str) -> None:
        if strict:
            raise ValueError(msg)
        warnings.append(f"{msg} Using defaults.")
        for f in fields:
            cfg[f] = defaults[f]

    if cfg["min_year"] > cfg["max_year"]:
        _reject(f"Invalid year range: {cfg['min_year']} > {cfg['max_year']}.", "min_year", "max_year")
    if cfg["workers"] < 1:
        _reject(f"Invalid field 'workers': {cfg['workers']} must be >= 1.", "workers")
    if cfg["request_timeout"] <= 0:
        _reject(f"Invalid field 'request_timeout': {cfg['request_timeout']} must be > 0.", "request_timeout")
    if cfg["max_retries"] < 0:
        _reject(f"Invalid field 'max_retries': {cfg['max_retries']} must be >= 0.", "max_retries")
    if cfg["backoff_factor"] < 0:
        _reject(f"Invalid field 'backoff_factor': {cfg['backoff_factor']} must be >= 0.", "backoff_factor")
