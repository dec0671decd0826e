"""Input validation utilities for lrsim."""

import logging
from pathlib import Path
from typing import List, Optional, Union

logger = logging.getLogger(__name__)


def validate_file_exists(filepath: Union[str, Path], description: str = "File") -> None:
    """
    Validate that a file exists.

    Args:
        filepath: Path to check
        description: Description for error message

    Raises:
        FileNotFoundError: If file doesn't exist
    """
    if not Path(filepath).exists():
        raise FileNotFoundError(f"{description} not found: {filepath}")


def parse_number_list(
    value: str,
    expected: int,
    name: str = "value",
    minimum: Optional[float] = None,
) -> List[float]:
    """
    Parse a comma separated list of numbers such as ``"15000,13000"``.

    Args:
        value: Raw string from the command line or a config file
        expected: Number of values required
        name: Option name used in error messages
        minimum: Optional lower bound applied to every value

    Returns:
        List of floats

    Raises:
        ValueError: On a wrong item count, a non-numeric item or a value
            below ``minimum``
    """
    parts = [p.strip() for p in str(value).split(",") if p.strip()]
    if len(parts) != expected:
        raise ValueError(
            f"{name} expects {expected} comma separated values, got '{value}'"
        )

    try:
        numbers = [float(p) for p in parts]
    except ValueError:
        raise ValueError(f"{name} contains a non-numeric value: '{value}'") from None

    if minimum is not None:
        below = [n for n in numbers if n < minimum]
        if below:
            raise ValueError(f"{name} values must be >= {minimum}, got {below}")

    logger.debug(f"Parsed {name}: {numbers}")
    return numbers
