"""
Utility functions for Construction Docs QA.
"""

import os
import sys

from .exceptions import InvalidArgumentError


DEFAULT_SNIPPET_LENGTH = 200


def print_safe(message: str) -> None:
    """
    Print with Unicode support on Windows.

    Args:
        message: Message to print
    """
    try:
        print(message)
    except UnicodeEncodeError:
        sys.stdout.buffer.write((message + "\n").encode('utf-8'))
        sys.stdout.flush()


def require_positive_int(value, name: str) -> int:
    """
    Validate a strictly positive integer argument.

    Args:
        value: Value to check
        name: Argument name used in the error message

    Returns:
        The value, unchanged

    Raises:
        InvalidArgumentError: If value is not an int or is <= 0
    """
    # bool is an int subclass; True is not a valid size
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise InvalidArgumentError(f"{name} must be a positive integer, got {value!r}")
    return value


def truncate_snippet(text: str, length: int = DEFAULT_SNIPPET_LENGTH) -> str:
    """Truncate chunk text for citation display."""
    return text[:length]


def file_extension(filename: str) -> str:
    """
    Get the lowercase extension of a filename, without the dot.

    Example:
        >>> file_extension("Specs.PDF")
        'pdf'
    """
    return os.path.splitext(filename or "")[1].lower().lstrip(".")
