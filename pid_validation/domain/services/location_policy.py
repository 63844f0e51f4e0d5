"""Location Policy Enforcement."""

from typing import Optional

from pid_validation.domain.enums import LocationBehavior
from pid_validation.domain.models import IdentifierType, PatientIdentifier
from pid_validation.domain.ports import LocationRequiredError

LOCATION_REQUIRED_KEY = "PatientIdentifier.location.null"


def location_required(identifier_type: Optional[IdentifierType]) -> bool:
    """Whether identifiers of this type must carry a location.

    An unset behavior counts as REQUIRED.
    """
    if identifier_type is None:
        return True
    behavior = identifier_type.location_behavior
    return behavior is None or behavior == LocationBehavior.REQUIRED


def check_location(patient_identifier: PatientIdentifier) -> None:
    """Raise LocationRequiredError when a required location is missing."""
    if patient_identifier.location is None and location_required(patient_identifier.identifier_type):
        raise LocationRequiredError(
            LOCATION_REQUIRED_KEY,
            (patient_identifier.identifier,),
            identifier=patient_identifier.identifier,
            patient_identifier=patient_identifier
        )
