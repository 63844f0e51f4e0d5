"""Identifier Format Matching.

Checks identifier values against the optional regular-expression format of
their identifier type. A type without a format accepts any value.

Security Impact:
    - Formats are matched with ``re.fullmatch`` so partial matches never pass
    - Compiled patterns are cached; configuration is read-only during a run
"""

import re
from functools import lru_cache
from typing import Optional

from pid_validation.domain.ports import (
    IdentifierTypeConfigurationError,
    InvalidIdentifierFormatError,
)

INVALID_FORMAT_KEY = "PatientIdentifier.error.invalidFormat"


@lru_cache(maxsize=256)
def _compile(format: str) -> re.Pattern:
    try:
        return re.compile(format)
    except re.error as e:
        raise IdentifierTypeConfigurationError(
            f"Identifier type format is not a valid regular expression: {e}"
        ) from e


def matches(identifier: str, format: Optional[str]) -> bool:
    """Check whether ``identifier`` fully matches ``format``.

    Parameters:
        identifier: Identifier value
        format: Regular expression, or None/blank for no constraint

    Returns:
        bool: True when no format is configured or the whole value matches

    Raises:
        IdentifierTypeConfigurationError: If ``format`` is not a valid regular expression
    """
    if format is None or not format.strip():
        return True
    return _compile(format).fullmatch(identifier) is not None


def check_format(identifier: str, format: Optional[str], format_description: Optional[str] = None) -> None:
    """Raise when ``identifier`` does not match ``format``.

    The failure carries the format description for user messaging, falling
    back to the raw format when no description is configured.

    Parameters:
        identifier: Identifier value
        format: Regular expression, or None/blank for no constraint
        format_description: Human-readable description of the format

    Raises:
        InvalidIdentifierFormatError: If the identifier does not match
    """
    if matches(identifier, format):
        return

    shown = format_description if format_description and format_description.strip() else format
    raise InvalidIdentifierFormatError(
        INVALID_FORMAT_KEY,
        (identifier, shown),
        identifier=identifier
    )
