"""In-Memory Patient Identifier Repository.

A PatientRepositoryPort implementation that keeps assigned identifiers in
process memory. Used by the CLI for file-level duplicate detection and by
tests; production hosts plug in a repository backed by their patient store.

Architecture:
    - Implements PatientRepositoryPort (Hexagonal Architecture adapter)
    - Thread-safe: a lock guards the stored identifiers
"""

import logging
from threading import Lock
from typing import Iterable, Optional

from pid_validation.domain.models import PatientIdentifier
from pid_validation.domain.ports import PatientRepositoryPort

logger = logging.getLogger(__name__)


def _type_key(patient_identifier: PatientIdentifier) -> Optional[str]:
    identifier_type = patient_identifier.identifier_type
    if identifier_type is None or identifier_type.name is None:
        return None
    return identifier_type.name.strip().casefold()


class InMemoryPatientRepository(PatientRepositoryPort):
    """Stores patient identifiers and answers uniqueness queries.

    An identifier is in use by another patient when a stored, non-voided
    identifier has the same value and type and belongs to a different
    patient. Identifiers of new (unsaved) patients always belong to a
    different patient than any stored one.
    """

    def __init__(self, identifiers: Optional[Iterable[PatientIdentifier]] = None):
        """Initialize the repository.

        Parameters:
            identifiers: Identifiers to seed the repository with
        """
        self._identifiers: list[PatientIdentifier] = []
        self._lock = Lock()
        for patient_identifier in identifiers or []:
            self.add(patient_identifier)

    def add(self, patient_identifier: PatientIdentifier) -> None:
        """Store an identifier (a copy, so later caller mutations are not seen)."""
        with self._lock:
            self._identifiers.append(patient_identifier.model_copy())

    def remove(self, patient_identifier: PatientIdentifier) -> bool:
        """Remove stored identifiers equal in value, type and patient.

        Returns:
            bool: True if anything was removed
        """
        with self._lock:
            before = len(self._identifiers)
            self._identifiers = [
                stored for stored in self._identifiers
                if not (
                    stored.identifier == patient_identifier.identifier
                    and _type_key(stored) == _type_key(patient_identifier)
                    and stored.patient == patient_identifier.patient
                )
            ]
            return len(self._identifiers) != before

    def __len__(self) -> int:
        with self._lock:
            return len(self._identifiers)

    def is_identifier_in_use_by_another_patient(self, patient_identifier: PatientIdentifier) -> bool:
        candidate_patient = patient_identifier.patient
        candidate_type = _type_key(patient_identifier)

        with self._lock:
            for stored in self._identifiers:
                if stored.voided:
                    continue
                if stored.identifier != patient_identifier.identifier or _type_key(stored) != candidate_type:
                    continue
                if candidate_patient is None or candidate_patient.is_new:
                    return True
                if stored.patient is None or stored.patient.patient_id != candidate_patient.patient_id:
                    return True
        return False
