"""Domain layer for patient identifier validation.

This module contains the identifier models, the policy enums, the ports the
pipeline depends on, and the failure hierarchy. All domain models are pure
Python with no external dependencies beyond Pydantic.
"""

from .enums import FailureKind, LocationBehavior, UniquenessBehavior
from .models import (
    IdentifierType,
    Location,
    PatientIdentifier,
    PatientReference,
)

__all__ = [
    "FailureKind",
    "IdentifierType",
    "Location",
    "LocationBehavior",
    "PatientIdentifier",
    "PatientReference",
    "UniquenessBehavior",
]
