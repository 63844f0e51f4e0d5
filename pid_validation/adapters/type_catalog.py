"""Identifier Type Catalog Loader.

Loads identifier type configuration records from a JSON file, either a list
of type objects or an object with a ``"identifier_types"`` list:

    [
        {"name": "CPF", "location_behavior": "NOT_USED"},
        {"name": "Old ID", "format": "^[0-9]{4}$", "format_description": "4 digits"}
    ]

Security Impact:
    - JSON parsing is safe (no code execution)
    - Records are validated with Pydantic before use
"""

import json
import logging
from pathlib import Path
from typing import Mapping, Optional, Union

from pydantic import TypeAdapter, ValidationError as PydanticValidationError

from pid_validation.domain.models import IdentifierType

logger = logging.getLogger(__name__)

_TYPE_LIST = TypeAdapter(list[IdentifierType])


def load_identifier_types(path: Union[str, Path]) -> dict[str, IdentifierType]:
    """Load identifier types keyed by name.

    Parameters:
        path: Path to the JSON catalog

    Returns:
        dict: Type name -> IdentifierType (unnamed types are skipped)

    Raises:
        FileNotFoundError: If the catalog file doesn't exist
        ValueError: If the file is not valid JSON or a record is invalid
    """
    catalog_file = Path(path)
    if not catalog_file.exists():
        raise FileNotFoundError(f"Identifier type catalog not found: {path}")

    try:
        with open(catalog_file, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in identifier type catalog: {str(e)}")

    if isinstance(data, dict):
        data = data.get("identifier_types", [])

    try:
        identifier_types = _TYPE_LIST.validate_python(data)
    except PydanticValidationError as e:
        raise ValueError(f"Invalid identifier type record: {e}") from e

    catalog = {}
    for identifier_type in identifier_types:
        if identifier_type.name is None or not identifier_type.name.strip():
            logger.warning("Skipping identifier type without a name")
            continue
        catalog[identifier_type.name.strip()] = identifier_type

    logger.debug(f"Loaded {len(catalog)} identifier types from {catalog_file}")
    return catalog


def find_identifier_type(
    identifier_types: Mapping[str, IdentifierType],
    name: Optional[str]
) -> Optional[IdentifierType]:
    """Look up a type by name, trimmed and case-insensitive (None when absent)."""
    if name is None:
        return None
    wanted = name.strip().casefold()
    for type_name, identifier_type in identifier_types.items():
        if type_name.strip().casefold() == wanted:
            return identifier_type
    return None
