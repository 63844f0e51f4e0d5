"""Shared fixtures for identifier validation tests."""

import pytest

from pid_validation.adapters.in_memory_repository import InMemoryPatientRepository
from pid_validation.adapters.validator_registry import ValidatorRegistry
from pid_validation.domain.enums import LocationBehavior, UniquenessBehavior
from pid_validation.domain.models import (
    IdentifierType,
    Location,
    PatientIdentifier,
    PatientReference,
)
from pid_validation.domain.ports import (
    ChecksumValidator,
    PatientRepositoryPort,
    UnallowedIdentifierError,
)
from pid_validation.domain.services.pipeline import IdentifierValidationPipeline


class SpyRepository(PatientRepositoryPort):
    """Repository stub that records every uniqueness query."""

    def __init__(self, in_use: bool = False):
        self.in_use = in_use
        self.calls = []

    def is_identifier_in_use_by_another_patient(self, patient_identifier):
        self.calls.append(patient_identifier.identifier)
        return self.in_use


class EvenDigitSumValidator(ChecksumValidator):
    """Accepts digit strings whose digit sum is even; refuses anything else."""

    name = "Even Digit Sum Validator"

    def is_valid(self, identifier):
        if not identifier.isdigit():
            raise UnallowedIdentifierError("Only digits are allowed")
        return sum(int(c) for c in identifier) % 2 == 0


@pytest.fixture
def clinic():
    return Location(location_id=1, name="Unknown Location")


@pytest.fixture
def cpf_type():
    return IdentifierType(name="CPF", location_behavior=LocationBehavior.NOT_USED)


@pytest.fixture
def old_id_type():
    return IdentifierType(
        name="Old Identification Number",
        format="^[0-9]{4}$",
        format_description="four digits",
        location_behavior=LocationBehavior.REQUIRED,
    )


@pytest.fixture
def even_type():
    return IdentifierType(
        name="Even ID",
        validator="even",
        location_behavior=LocationBehavior.NOT_USED,
    )


@pytest.fixture
def non_unique_type():
    return IdentifierType(
        name="Family Card",
        location_behavior=LocationBehavior.NOT_USED,
        uniqueness_behavior=UniquenessBehavior.NON_UNIQUE,
    )


@pytest.fixture
def registry():
    registry = ValidatorRegistry()
    registry.register(EvenDigitSumValidator(), name="even")
    return registry


@pytest.fixture
def spy_repository():
    return SpyRepository()


@pytest.fixture
def pipeline(spy_repository, registry):
    return IdentifierValidationPipeline(repository=spy_repository, validator_registry=registry)


@pytest.fixture
def memory_repository():
    return InMemoryPatientRepository()


@pytest.fixture
def make_identifier():
    def factory(value, identifier_type, location=None, patient_id=7, voided=False):
        return PatientIdentifier(
            identifier=value,
            identifier_type=identifier_type,
            location=location,
            patient=PatientReference(patient_id=patient_id),
            voided=voided,
        )
    return factory
