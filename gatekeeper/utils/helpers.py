"""
Helper functions
"""

import re

from gatekeeper.errors import ValidationError

# Characters a custom-extension input may carry at the HTTP boundary
EXTENSION_INPUT_PATTERN = re.compile(r'[a-z0-9, ]+')

COUNT_PATTERN = re.compile(r'-?[0-9]+')

TIMESTAMP_FORMAT = '%Y-%m-%d %H:%M:%S'


def check_extension_input(raw_input, max_length):
    """
    Validate a comma-delimited extension input before it reaches the store

    Args:
        raw_input: Value submitted by the client
        max_length: Maximum accepted input length

    Returns:
        str: The input, unchanged

    Raises:
        ValidationError: If the input is missing, too long or carries
            characters outside [a-z0-9, ]
    """
    if not isinstance(raw_input, str) or not raw_input.strip():
        raise ValidationError("Enter at least one extension")

    if len(raw_input) > max_length:
        raise ValidationError(f"Input is too long (maximum {max_length} characters)")

    if not EXTENSION_INPUT_PATTERN.fullmatch(raw_input):
        raise ValidationError("Only lowercase letters, digits, commas and spaces are allowed")

    return raw_input


def parse_flag(value):
    """
    Parse a boolean flag from a query string or JSON value

    Raises:
        ValidationError: If the value is not recognisably true or false
    """
    if isinstance(value, bool):
        return value

    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ('true', '1', 'yes', 'on'):
            return True
        if lowered in ('false', '0', 'no', 'off'):
            return False

    raise ValidationError(f"Invalid boolean flag: {value!r}")


def format_timestamp(value):
    """Format a datetime for display, empty string for None"""
    return value.strftime(TIMESTAMP_FORMAT) if value is not None else ''


def parse_count(value):
    """
    Parse an integer count from a JSON value

    Booleans, fractional numbers and non-numeric strings are rejected.

    Raises:
        ValidationError: If the value is not an integer
    """
    if isinstance(value, int) and not isinstance(value, bool):
        return value

    if isinstance(value, str) and COUNT_PATTERN.fullmatch(value.strip()):
        return int(value.strip())

    raise ValidationError(f"Invalid count: {value!r}")
