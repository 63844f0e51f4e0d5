"""Adapters for patient identifier validation.

Implementations of the domain ports (repository, validator registry,
message rendering) and the object-level and batch front ends of the
validation pipeline.
"""

from .batch_validator import BatchIdentifierValidator
from .in_memory_repository import InMemoryPatientRepository
from .message_catalog import CatalogMessageRenderer
from .object_validator import PatientIdentifierValidator, ValidationErrors
from .type_catalog import find_identifier_type, load_identifier_types
from .validator_registry import ValidatorRegistry

__all__ = [
    'BatchIdentifierValidator',
    'CatalogMessageRenderer',
    'InMemoryPatientRepository',
    'PatientIdentifierValidator',
    'ValidationErrors',
    'ValidatorRegistry',
    'find_identifier_type',
    'load_identifier_types',
]
