"""Identifier Validation Pipeline.

This module provides the IdentifierValidationPipeline, the single entry point
that decides whether a patient identifier may be saved. It composes the
normalizer, format matcher, checksum validators, location policy and
uniqueness enforcer into one ordered evaluation.

Evaluation order (first failure wins, nothing is aggregated):
    1. null identifier
    2. voided identifiers succeed immediately
    3. national-ID pre-pass (normalize + CPF check digits, rewrite value)
    4. null type, blank value
    5. format
    6. checksum validator (when the type names one)
    7. location policy
    8. uniqueness among active patients

Security Impact:
    - Identifier values are PII and are never written to logs
    - Failures are raised, never logged or swallowed; callers decide what
      to show the user

Architecture:
    - Collaborators (repository, validator registry) are injected at construction
    - No state is kept between calls; concurrent calls are safe as long as
      each call gets its own PatientIdentifier instance
"""

import logging
from typing import Optional

from pid_validation.domain.models import IdentifierType, PatientIdentifier
from pid_validation.domain.ports import (
    BlankIdentifierError,
    BlankIdentifierTypeError,
    ChecksumValidator,
    InvalidCheckDigitError,
    InvalidNationalIdError,
    PatientIdentifierError,
    PatientRepositoryPort,
    Result,
    UnallowedCharactersError,
    UnallowedIdentifierError,
    ValidatorRegistryPort,
)
from pid_validation.domain.services import format_matcher
from pid_validation.domain.services.location_policy import check_location
from pid_validation.domain.services.national_id import NationalIdChecksum
from pid_validation.domain.services.normalizer import normalize
from pid_validation.domain.services.uniqueness import UniquenessEnforcer

logger = logging.getLogger(__name__)

DEFAULT_NATIONAL_ID_TYPE_NAME = "CPF"

NULL_IDENTIFIER_KEY = "PatientIdentifier.error.null"
BLANK_IDENTIFIER_KEY = "PatientIdentifier.error.nullOrBlank"
NULL_TYPE_KEY = "PatientIdentifierType.null"
INVALID_NATIONAL_ID_KEY = "PatientIdentifier.error.invalidNationalId"
CHECK_DIGIT_KEY = "PatientIdentifier.error.checkDigitWithParameter"
UNALLOWED_IDENTIFIER_KEY = "PatientIdentifier.error.unallowedIdentifier"


def check_checksum(identifier: str, validator: Optional[ChecksumValidator]) -> None:
    """Raise when ``validator`` rejects ``identifier``.

    Parameters:
        identifier: Identifier value
        validator: Checksum validator, or None to skip the check

    Raises:
        InvalidCheckDigitError: If the check digits are wrong
        UnallowedCharactersError: If the validator cannot interpret the value
    """
    if validator is None:
        return

    try:
        valid = validator.is_valid(identifier)
    except UnallowedIdentifierError as e:
        raise UnallowedCharactersError(
            UNALLOWED_IDENTIFIER_KEY,
            (identifier, validator.name),
            identifier=identifier,
            validator_name=validator.name
        ) from e

    if not valid:
        raise InvalidCheckDigitError(
            CHECK_DIGIT_KEY,
            (identifier,),
            identifier=identifier
        )


class IdentifierValidationPipeline:
    """Ordered, short-circuiting validation of patient identifiers.

    Example Usage:
        ```python
        pipeline = IdentifierValidationPipeline(
            repository=InMemoryPatientRepository(),
            validator_registry=ValidatorRegistry(),
        )
        try:
            pipeline.validate_identifier(patient_identifier)
        except PatientIdentifierError as e:
            message = renderer.render(e.message_key, e.message_args, "pt_BR")
        ```
    """

    def __init__(
        self,
        repository: PatientRepositoryPort,
        validator_registry: ValidatorRegistryPort,
        national_id_type_name: Optional[str] = DEFAULT_NATIONAL_ID_TYPE_NAME,
        national_id_checksum: Optional[ChecksumValidator] = None
    ):
        """Initialize the pipeline.

        Parameters:
            repository: Live view of assigned identifiers (uniqueness check)
            validator_registry: Resolves checksum validators by name
            national_id_type_name: Identifier type name that triggers the
                national-ID pre-pass (None disables it)
            national_id_checksum: Checksum used by the pre-pass (CPF by default)
        """
        self.validator_registry = validator_registry
        self.national_id_type_name = national_id_type_name
        self.national_id_checksum = national_id_checksum or NationalIdChecksum()
        self.uniqueness = UniquenessEnforcer(repository)

    def validate_identifier(self, patient_identifier: Optional[PatientIdentifier]) -> None:
        """Run the full pipeline on a patient identifier.

        On a successful national-ID pre-pass, ``patient_identifier.identifier``
        is rewritten to its digits-only form before the remaining checks.

        Parameters:
            patient_identifier: Identifier to validate

        Raises:
            PatientIdentifierError: The first failing check (see module docstring)
        """
        if patient_identifier is None:
            raise BlankIdentifierError(NULL_IDENTIFIER_KEY)

        if patient_identifier.voided:
            return

        if self.is_national_id(patient_identifier):
            self._apply_national_id_pre_pass(patient_identifier)

        try:
            self.validate_identifier_string(patient_identifier.identifier, patient_identifier.identifier_type)
        except PatientIdentifierError as e:
            e.patient_identifier = patient_identifier
            raise

        check_location(patient_identifier)
        self.uniqueness.check(patient_identifier)

    def validate_identifier_string(self, identifier: Optional[str], identifier_type: Optional[IdentifierType]) -> None:
        """Check type presence, blankness, format and checksum of a bare value.

        For callers without a full PatientIdentifier (e.g. format checks before
        saving). Location, uniqueness and the national-ID pre-pass are not run.

        Parameters:
            identifier: Identifier value
            identifier_type: Type configuration to check against

        Raises:
            BlankIdentifierTypeError: If ``identifier_type`` is None
            BlankIdentifierError: If ``identifier`` is None or blank
            InvalidIdentifierFormatError: If the format does not match
            InvalidCheckDigitError: If the type's checksum validator rejects the value
        """
        logger.debug(f"Checking identifier for type: {identifier_type.name if identifier_type else None}")

        if identifier_type is None:
            raise BlankIdentifierTypeError(NULL_TYPE_KEY, identifier=identifier)
        if identifier is None or not identifier.strip():
            raise BlankIdentifierError(BLANK_IDENTIFIER_KEY, identifier=identifier)

        self.check_format(identifier, identifier_type.format, identifier_type.format_description)

        if identifier_type.has_validator():
            validator = self.validator_registry.resolve(identifier_type.validator.strip())
            self.check_checksum(identifier, validator)

    @staticmethod
    def check_format(identifier: str, format: Optional[str], format_description: Optional[str] = None) -> None:
        """See :func:`pid_validation.domain.services.format_matcher.check_format`."""
        format_matcher.check_format(identifier, format, format_description)

    @staticmethod
    def check_checksum(identifier: str, validator: Optional[ChecksumValidator]) -> None:
        """See :func:`check_checksum`."""
        check_checksum(identifier, validator)

    def evaluate(self, patient_identifier: Optional[PatientIdentifier]) -> Result[PatientIdentifier]:
        """Run the full pipeline and report the outcome as a Result.

        Parameters:
            patient_identifier: Identifier to validate

        Returns:
            Result: success carrying the (possibly normalized) identifier, or a
                failure whose ``error_type`` is the FailureKind value and whose
                ``error_details`` hold message_key, message_args and identifier
        """
        try:
            self.validate_identifier(patient_identifier)
        except PatientIdentifierError as e:
            return Result.failure_result(e)
        return Result.success_result(patient_identifier)

    def is_national_id(self, patient_identifier: PatientIdentifier) -> bool:
        """Whether the identifier's type is the configured national-ID type."""
        identifier_type = patient_identifier.identifier_type
        if identifier_type is None or self.national_id_type_name is None:
            return False
        return identifier_type.name_matches(self.national_id_type_name)

    def _apply_national_id_pre_pass(self, patient_identifier: PatientIdentifier) -> None:
        original = patient_identifier.identifier
        normalized = normalize(original) if original is not None else ''

        if not self.national_id_checksum.is_valid(normalized):
            raise InvalidNationalIdError(
                INVALID_NATIONAL_ID_KEY,
                (original,),
                identifier=original,
                patient_identifier=patient_identifier
            )

        # masked and unmasked forms must be stored identically for uniqueness
        patient_identifier.identifier = normalized
