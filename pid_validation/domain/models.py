"""Patient Identifier Domain Models.

This module defines the canonical data models handled by the identifier
validation pipeline: the identifier itself, its type configuration, and the
location and patient it is attached to.

Security Impact:
    - Identifier values (e.g. national taxpayer IDs) are PII and are never
      included in model reprs used for logging
    - Type safety enforced at runtime via Pydantic V2

Architecture:
    - Pure domain models with zero infrastructure dependencies
    - IdentifierType and Location are immutable for the duration of a run
    - PatientIdentifier is mutable: the pipeline may rewrite its value in place
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from pid_validation.domain.enums import LocationBehavior, UniquenessBehavior


class Location(BaseModel):
    """Location (facility) an identifier was assigned at."""

    model_config = ConfigDict(frozen=True)

    location_id: Optional[int] = Field(None, description="Location primary key")
    name: str = Field(..., description="Location display name")


class PatientReference(BaseModel):
    """Reference to the patient owning an identifier.

    A reference without ``patient_id`` stands for a new, not yet saved patient.
    """

    model_config = ConfigDict(frozen=True)

    patient_id: Optional[int] = Field(None, description="Patient primary key (None when unsaved)")

    @property
    def is_new(self) -> bool:
        return self.patient_id is None


class IdentifierType(BaseModel):
    """Identifier type configuration record.

    Security Impact: Formats are regular expressions supplied by administrators;
    they are compiled on demand and never evaluated as code.

    Parameters:
        name: Type name (e.g. "CPF", "Old Identification Number")
        format: Optional regular expression every identifier must fully match
        format_description: Human-readable description of the format
        validator: Optional name of the checksum validator to apply
        location_behavior: Location policy (unset means REQUIRED)
        uniqueness_behavior: Uniqueness policy (unset means UNIQUE)
    """

    model_config = ConfigDict(frozen=True)

    name: Optional[str] = Field(None, description="Identifier type name")
    format: Optional[str] = Field(None, description="Regular expression for identifier values")
    format_description: Optional[str] = Field(None, description="Human-readable format description")
    validator: Optional[str] = Field(None, description="Checksum validator name")
    location_behavior: Optional[LocationBehavior] = Field(
        None, description="Location policy (unset defaults to REQUIRED)"
    )
    uniqueness_behavior: Optional[UniquenessBehavior] = Field(
        None, description="Uniqueness policy (unset defaults to UNIQUE)"
    )

    @field_validator("location_behavior", "uniqueness_behavior", mode="before")
    @classmethod
    def normalize_behavior(cls, v):
        """Accept behavior names regardless of case and surrounding whitespace."""
        if isinstance(v, str):
            v = v.strip().upper()
            return v or None
        return v

    def has_validator(self) -> bool:
        """Check whether a checksum validator is configured for this type."""
        return bool(self.validator and self.validator.strip())

    def name_matches(self, other: Optional[str]) -> bool:
        """Compare the type name with ``other``, trimmed and case-insensitive.

        Both sides may be None; a missing name never matches.
        """
        if self.name is None or other is None:
            return False
        mine = self.name.strip()
        theirs = other.strip()
        return bool(mine) and mine.casefold() == theirs.casefold()


class PatientIdentifier(BaseModel):
    """An identifier assigned (or about to be assigned) to a patient.

    Parameters:
        identifier: Raw identifier value as entered (PII)
        identifier_type: Type configuration the value belongs to
        location: Location the identifier was assigned at
        voided: Whether the identifier has been voided
        void_reason: Reason given when voiding
        patient: Owning patient (None or unsaved for new patients)
    """

    model_config = ConfigDict(validate_assignment=True)

    identifier: Optional[str] = Field(None, description="Identifier value (PII)", repr=False)
    identifier_type: Optional[IdentifierType] = Field(None, description="Identifier type")
    location: Optional[Location] = Field(None, description="Assigned location")
    voided: bool = Field(default=False, description="Whether the identifier is voided")
    void_reason: Optional[str] = Field(None, description="Reason for voiding")
    patient: Optional[PatientReference] = Field(None, description="Owning patient")
