"""Domain Enumerations for Identifier Type Policies.

This module defines the enumerated policies that an identifier type carries
and the taxonomy of validation failures reported by the pipeline.

Architecture:
    - String-valued enums so configuration files can use plain names
    - Pure domain values with no infrastructure dependencies
"""

from enum import Enum


class LocationBehavior(str, Enum):
    """Whether a location must accompany identifiers of a type.

    An identifier type without a configured behavior is treated as REQUIRED.
    """
    REQUIRED = "REQUIRED"
    NOT_USED = "NOT_USED"


class UniquenessBehavior(str, Enum):
    """Whether identifiers of a type must be unique among active patients.

    An identifier type without a configured behavior is treated as UNIQUE.
    """
    UNIQUE = "UNIQUE"
    NON_UNIQUE = "NON_UNIQUE"


class FailureKind(str, Enum):
    """Kinds of validation failure, one per failing pipeline gate."""
    BLANK_OR_NULL_IDENTIFIER = "BlankOrNullIdentifier"
    BLANK_OR_NULL_TYPE = "BlankOrNullType"
    INVALID_FORMAT = "InvalidFormat"
    INVALID_CHECK_DIGIT = "InvalidCheckDigit"
    UNALLOWED_CHARACTERS = "UnallowedCharacters"
    INVALID_NATIONAL_ID = "InvalidNationalId"
    LOCATION_REQUIRED = "LocationRequired"
    IDENTIFIER_NOT_UNIQUE = "IdentifierNotUnique"
