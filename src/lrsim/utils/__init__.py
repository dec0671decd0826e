"""Shared utilities for lrsim."""

from lrsim.utils.logging_utils import setup_logger, get_logger, log_parameters
from lrsim.utils.validation import validate_file_exists, parse_number_list

__all__ = [
    "setup_logger",
    "get_logger",
    "log_parameters",
    "validate_file_exists",
    "parse_number_list",
]
