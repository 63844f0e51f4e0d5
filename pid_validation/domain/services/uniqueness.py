"""Identifier Uniqueness Enforcement.

Security Impact:
    - The repository is queried live on every call; results are never cached,
      so a stale answer cannot let a duplicate identifier through

Architecture:
    - Depends only on PatientRepositoryPort (dependency injection)
    - At most one repository call per check; NON_UNIQUE types make none
"""

import logging

from pid_validation.domain.enums import UniquenessBehavior
from pid_validation.domain.models import PatientIdentifier
from pid_validation.domain.ports import IdentifierNotUniqueError, PatientRepositoryPort

logger = logging.getLogger(__name__)

NOT_UNIQUE_KEY = "PatientIdentifier.error.notUniqueWithParameter"


class UniquenessEnforcer:
    """Rejects identifiers already held by a different patient."""

    def __init__(self, repository: PatientRepositoryPort):
        """Initialize the enforcer.

        Parameters:
            repository: Live view of assigned patient identifiers
        """
        self.repository = repository

    def check(self, patient_identifier: PatientIdentifier) -> None:
        """Raise IdentifierNotUniqueError when another patient holds the identifier.

        Parameters:
            patient_identifier: Identifier under validation (type must be set)

        Raises:
            IdentifierNotUniqueError: If the repository reports the identifier in use
        """
        identifier_type = patient_identifier.identifier_type
        if identifier_type is not None and identifier_type.uniqueness_behavior == UniquenessBehavior.NON_UNIQUE:
            logger.debug(f"Skipping uniqueness check for non-unique type: {identifier_type.name}")
            return

        if self.repository.is_identifier_in_use_by_another_patient(patient_identifier):
            raise IdentifierNotUniqueError(
                NOT_UNIQUE_KEY,
                (patient_identifier.identifier,),
                identifier=patient_identifier.identifier,
                patient_identifier=patient_identifier
            )
